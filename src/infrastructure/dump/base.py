"""Base dump invoker implementation using Template Method pattern."""

import os
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, BinaryIO

from domain.models import BackupRequest
from domain.exceptions import InvocationError
from shared.context import Context
from shared.logging import get_logger

logger = get_logger(__name__)

STDERR_CHUNK_SIZE = 4096


class DumpProcess:
    """
    A running dump program bound to a context.

    The process is killed as soon as the context is done. Standard error is
    drained into memory by a helper thread so the child can never block on a
    full stderr pipe; stdout is left for exactly one consumer.
    """

    def __init__(self, popen: subprocess.Popen, context: Context, name: str = "dump"):
        self._popen = popen
        self._context = context
        self._name = name
        self._stderr = bytearray()
        self._stderr_thread = threading.Thread(
            target=self._drain_stderr,
            name=f"{name}-stderr",
            daemon=True
        )
        self._stderr_thread.start()
        context.on_done(self._kill)

    @property
    def stdout(self) -> BinaryIO:
        return self._popen.stdout

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._popen.returncode

    def wait(self) -> int:
        """Block until the process exits; stderr is complete afterwards."""
        returncode = self._popen.wait()
        self._stderr_thread.join()
        self._context.remove_callback(self._kill)
        return returncode

    def stderr_text(self) -> str:
        return self._stderr.decode('utf-8', errors='replace')

    def close(self) -> None:
        """Kill the process if still running, reap it and close its pipes."""
        self._context.remove_callback(self._kill)
        if self._popen.poll() is None:
            self._popen.kill()
        self._popen.wait()
        self._stderr_thread.join()
        if self._popen.stdout is not None:
            self._popen.stdout.close()

    def _kill(self, context: Context) -> None:
        if self._popen.poll() is not None:
            return
        logger.debug(f"Killing {self._name} (pid {self._popen.pid}): {context.err()}")
        try:
            self._popen.kill()
        except ProcessLookupError:
            pass

    def _drain_stderr(self) -> None:
        stream = self._popen.stderr
        try:
            while True:
                chunk = stream.read(STDERR_CHUNK_SIZE)
                if not chunk:
                    break
                self._stderr.extend(chunk)
        finally:
            stream.close()


class DumpInvoker(ABC):
    """
    Abstract base class for database dump invokers.

    Subclasses choose the command line and the connection environment; the
    base class starts the process with that environment passed to the child
    only, so concurrent runs never see each other's credentials.
    """

    engine: str = ""

    def __init__(self):
        self._logger = get_logger(self.__class__.__name__)

    def start(self, context: Context, request: BackupRequest) -> DumpProcess:
        """
        Start the dump process.

        Args:
            context: Context bounding the process lifetime
            request: Backup request with connection parameters

        Returns:
            DumpProcess exposing stdout and captured stderr

        Raises:
            InvocationError: If the process cannot be started
        """
        command = self.build_command(request)
        env = os.environ.copy()
        env.update(self.build_env(request))

        self._logger.debug(f"executing {self.engine} backup command: {' '.join(command)}")

        try:
            popen = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env
            )
        except OSError as e:
            self._logger.error(f"could not run {self.engine} dump: {e}")
            raise InvocationError(f"{self.engine} dump: could not start {command[0]}: {e}") from e

        return DumpProcess(popen, context, name=command[0])

    @abstractmethod
    def build_command(self, request: BackupRequest) -> List[str]:
        """Command line for the dump."""
        pass

    @abstractmethod
    def build_env(self, request: BackupRequest) -> Dict[str, str]:
        """Environment variables set for the child process only."""
        pass
