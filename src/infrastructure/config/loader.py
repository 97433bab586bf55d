"""Configuration loading and validation."""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, fields

from domain.exceptions import ConfigurationError
from shared.logging import get_logger, parse_level

logger = get_logger(__name__)


@dataclass
class BackupConfig:
    """Configuration for a backup run."""

    # Object storage
    s3_bucket: str
    s3_endpoint: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None
    s3_region: Optional[str] = None
    s3_part_size_mb: int = 16

    # Backup
    service: Optional[str] = None
    filename: Optional[str] = None
    timeout_seconds: float = 3600.0

    # Misc
    log_level: str = "info"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not self.s3_bucket:
            raise ConfigurationError("s3_bucket is required (set S3_BUCKET)")

        try:
            self.timeout_seconds = float(self.timeout_seconds)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid timeout: {self.timeout_seconds}")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"Timeout must be positive, got: {self.timeout_seconds}")

        try:
            self.s3_part_size_mb = int(self.s3_part_size_mb)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid S3 part size: {self.s3_part_size_mb}")
        if self.s3_part_size_mb < 5:
            raise ConfigurationError(f"S3 part size must be at least 5 MB, got: {self.s3_part_size_mb}")

        if bool(self.s3_access_key) != bool(self.s3_secret_key):
            raise ConfigurationError("s3_access_key and s3_secret_key must be set together")

        try:
            parse_level(self.log_level)
        except ValueError as e:
            raise ConfigurationError(str(e))

    @property
    def part_size_bytes(self) -> int:
        return self.s3_part_size_mb * 1024 * 1024


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    ENV_KEYS = {
        "S3_BUCKET": "s3_bucket",
        "S3_ENDPOINT": "s3_endpoint",
        "S3_ACCESS_KEY": "s3_access_key",
        "S3_SECRET_KEY": "s3_secret_key",
        "S3_REGION": "s3_region",
        "BACKUP_SERVICE": "service",
        "BACKUP_FILENAME": "filename",
        "LOG_LEVEL": "log_level",
    }

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
            environ: Environment mapping (os.environ if None)
        """
        self.config_path = config_path or Path("config.yaml")
        self._environ = os.environ if environ is None else environ
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> BackupConfig:
        """
        Load configuration from file and environment.

        Precedence: overrides > environment > config file.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            self._logger.info(f"Loading config from {self.config_path}")
            try:
                with open(self.config_path, 'r') as f:
                    yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}")
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            config_dict.update(yaml_config)
        else:
            self._logger.debug(f"Config file not found: {self.config_path}")

        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        valid_fields = {f.name for f in fields(BackupConfig)}
        unknown = sorted(set(config_dict) - valid_fields)
        if unknown:
            self._logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return BackupConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        for env_key, field_name in self.ENV_KEYS.items():
            if value := self._environ.get(env_key):
                env_config[field_name] = value

        if timeout := self._environ.get("BACKUP_TIMEOUT"):
            try:
                env_config["timeout_seconds"] = float(timeout)
            except ValueError:
                self._logger.warning(f"Invalid BACKUP_TIMEOUT value: {timeout}")

        if part_size := self._environ.get("S3_PART_SIZE_MB"):
            try:
                env_config["s3_part_size_mb"] = int(part_size)
            except ValueError:
                self._logger.warning(f"Invalid S3_PART_SIZE_MB value: {part_size}")

        return env_config
