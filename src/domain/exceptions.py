"""Domain exceptions for the streaming backup pipeline."""

from typing import Optional


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration or a service binding is invalid."""
    pass


class BackupError(DomainException):
    """Base exception for a failed backup run."""
    pass


class InvocationError(BackupError):
    """Raised when the dump process cannot be started."""
    pass


class DumpFailed(BackupError):
    """Raised when the dump process exits with a non-zero status."""

    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class DeadlineExceeded(BackupError):
    """Raised when the caller's deadline expired before the dump finished."""
    pass


class UploadFailed(BackupError):
    """Raised when streaming the compressed dump to object storage fails."""
    pass
