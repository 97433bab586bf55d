"""Domain layer package."""

from .models import ServiceBinding, BackupRequest, default_filename
from .exceptions import (
    DomainException,
    ConfigurationError,
    BackupError,
    InvocationError,
    DumpFailed,
    DeadlineExceeded,
    UploadFailed,
)
from .protocols import (
    IDumpProcess,
    IDumpInvoker,
    IStreamUploader,
    ILogger,
    IMetricsCollector,
)

__all__ = [
    # Models
    "ServiceBinding",
    "BackupRequest",
    "default_filename",
    # Exceptions
    "DomainException",
    "ConfigurationError",
    "BackupError",
    "InvocationError",
    "DumpFailed",
    "DeadlineExceeded",
    "UploadFailed",
    # Protocols
    "IDumpProcess",
    "IDumpInvoker",
    "IStreamUploader",
    "ILogger",
    "IMetricsCollector",
]
