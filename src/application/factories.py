"""Factory for creating backup coordinators."""

from typing import Dict, Optional, Type

from domain.exceptions import ConfigurationError
from domain.protocols import IStreamUploader
from infrastructure.dump import DumpInvoker, PostgresDumpInvoker, MySQLDumpInvoker
from application.coordinator import BackupCoordinator
from shared.locks import EngineLocks
from shared.logging import get_logger, LoggerAdapter
from shared.metrics import MetricsCollector

logger = get_logger(__name__)

INVOKERS: Dict[str, Type[DumpInvoker]] = {
    PostgresDumpInvoker.engine: PostgresDumpInvoker,
    MySQLDumpInvoker.engine: MySQLDumpInvoker,
}


class BackupCoordinatorFactory:
    """
    Creates coordinators that share one lock per engine type.

    Every coordinator built by the same factory for the same engine gets the
    same lock, so dumps of one engine are serialized across all of them.
    """

    def __init__(
        self,
        uploader: IStreamUploader,
        locks: Optional[EngineLocks] = None,
        invokers: Optional[Dict[str, Type[DumpInvoker]]] = None
    ):
        """
        Args:
            uploader: Streaming uploader shared by all coordinators
            locks: Lock registry (a private one if None)
            invokers: Engine name to invoker class mapping
        """
        self._uploader = uploader
        self._locks = locks or EngineLocks()
        self._invokers = dict(invokers or INVOKERS)
        self._logger = get_logger(__name__)

    @property
    def engines(self):
        return sorted(self._invokers)

    def create(self, engine: str, metrics: Optional[MetricsCollector] = None) -> BackupCoordinator:
        """
        Create a coordinator for an engine type.

        Raises:
            ConfigurationError: If the engine is not supported
        """
        key = engine.lower()
        invoker_cls = self._invokers.get(key)
        if invoker_cls is None:
            raise ConfigurationError(
                f"Unsupported engine: {engine} (supported: {', '.join(self.engines)})"
            )

        self._logger.debug(f"Creating {key} backup coordinator")
        return BackupCoordinator(
            invoker=invoker_cls(),
            uploader=self._uploader,
            lock=self._locks.lock_for(key),
            logger=LoggerAdapter(get_logger(f"backup.{key}")),
            metrics=metrics or MetricsCollector()
        )
