"""Application layer package."""

from application.coordinator import BackupCoordinator
from application.chain import BackupChain
from application.factories import BackupCoordinatorFactory

__all__ = ["BackupCoordinator", "BackupChain", "BackupCoordinatorFactory"]
