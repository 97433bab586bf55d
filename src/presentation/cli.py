"""CLI interface for the streaming backup pipeline."""
import os
import logging
import sys
import argparse
from pathlib import Path
from typing import Optional, List, Dict

from domain.models import BackupRequest
from domain.exceptions import BackupError, ConfigurationError
from infrastructure.config import ConfigLoader, BackupConfig, parse_vcap_services, find_binding, engine_for
from infrastructure.storage import S3StreamUploader
from application.factories import BackupCoordinatorFactory
from shared.context import Context
from shared.logging import setup_logger, get_logger
from shared.metrics import MetricsCollector


def create_factory_from_config(config: BackupConfig, metrics: Optional[MetricsCollector] = None) -> BackupCoordinatorFactory:
    """Create a coordinator factory with an S3 uploader built from config."""
    uploader = S3StreamUploader(
        bucket=config.s3_bucket,
        endpoint=config.s3_endpoint,
        access_key=config.s3_access_key,
        secret_key=config.s3_secret_key,
        region=config.s3_region,
        part_size=config.part_size_bytes,
        metrics=metrics
    )
    return BackupCoordinatorFactory(uploader)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stream a database dump to object storage")
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--service', '-s', help='Name of the bound service instance to back up')
    parser.add_argument('--timeout', type=float, help='Backup deadline in seconds')
    parser.add_argument('--filename', help='Logical backup filename (default: <service>_<timestamp>.gz)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose')
    return parser


def main(argv: Optional[List[str]] = None, environ: Optional[Dict[str, str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    logger = get_logger(__name__)
    try:
        overrides = {
            'service': args.service,
            'timeout_seconds': args.timeout,
            'filename': args.filename,
        }
        if args.verbose:
            overrides['log_level'] = 'debug'
        config = ConfigLoader(config_path=args.config, environ=environ).load(overrides=overrides)
        setup_logger('', level=config.log_level)

        if not config.service:
            raise ConfigurationError("No service given (use --service or BACKUP_SERVICE)")

        bindings = parse_vcap_services(environ.get('VCAP_SERVICES', ''))
        binding = find_binding(bindings, config.service)
        engine = engine_for(binding)
        request = BackupRequest.from_binding(binding, filename=config.filename)
    except (ConfigurationError, ValueError) as e:
        if not logging.getLogger().handlers:
            setup_logger('')
        logger.error(f"Configuration error: {e}")
        return 2

    metrics = MetricsCollector()
    logger.info("=" * 60)
    logger.info(f"Service: {binding.name} ({binding.label}, engine={engine})")
    logger.info(f"Target: s3://{config.s3_bucket}/{request.object_path}")
    logger.info(f"Timeout: {config.timeout_seconds:.0f}s")
    logger.info("=" * 60)

    try:
        coordinator = create_factory_from_config(config, metrics=metrics).create(engine, metrics=metrics)
        context = Context.background().with_timeout(config.timeout_seconds)
        try:
            coordinator.backup(context, request)
        finally:
            context.cancel()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except BackupError as e:
        logger.error(f"Backup failed: {e}")
        metrics.log_summary(logger)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    metrics.log_summary(logger)
    logger.info(f"Backup completed: {request.object_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
