"""Protocol definitions for dependency inversion."""

from typing import Protocol, BinaryIO

from shared.context import Context
from .models import BackupRequest


class IDumpProcess(Protocol):
    """A running dump program."""

    stdout: BinaryIO

    def wait(self) -> int:
        """Block until the process exits and return its exit code."""
        ...

    def stderr_text(self) -> str:
        """Captured standard error. Complete only after wait() returned."""
        ...

    def close(self) -> None:
        """Reap the process and close its output pipe."""
        ...


class IDumpInvoker(Protocol):
    """Interface for starting database dump processes."""

    engine: str

    def start(self, context: Context, request: BackupRequest) -> IDumpProcess:
        """Start a dump bound to the given context."""
        ...


class IStreamUploader(Protocol):
    """Interface for streaming uploads to object storage."""

    def upload(
        self,
        context: Context,
        object_path: str,
        stream: BinaryIO,
        size_hint: int = -1
    ) -> None:
        """Upload a stream of unknown length until end-of-stream."""
        ...


class ILogger(Protocol):
    """Interface for logging."""

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        ...

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        ...

    def stop_timer(self, name: str) -> float:
        """Stop a named timer and return elapsed time."""
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        ...

    def get_summary(self) -> dict:
        """Get summary of all metrics."""
        ...
