"""Backup pipeline coordinator."""

import threading
import time
from typing import Callable, Optional

from domain.exceptions import DeadlineExceeded, DumpFailed
from domain.models import BackupRequest
from domain.protocols import IDumpInvoker, IStreamUploader, IMetricsCollector, ILogger
from application.chain import BackupChain
from shared.context import Context
from shared.logging import get_logger, LoggerAdapter
from shared.metrics import MetricsCollector


class BackupCoordinator:
    """
    Runs one dump at a time for an engine and streams it to object storage.

    Flow: take the engine lock, start the dump, start the compression and
    upload chain on a context of its own, wait for the dump to exit, wait for
    the chain, release the lock. A dump failure always takes precedence over
    a chain failure.
    """

    def __init__(
        self,
        invoker: IDumpInvoker,
        uploader: IStreamUploader,
        lock: threading.Lock,
        logger: Optional[ILogger] = None,
        metrics: Optional[IMetricsCollector] = None,
        clock: Callable[[], float] = time.time
    ):
        self._invoker = invoker
        self._uploader = uploader
        self._lock = lock
        self._logger = logger or LoggerAdapter(get_logger(__name__))
        self._metrics = metrics or MetricsCollector()
        self._clock = clock

    @property
    def engine(self) -> str:
        return self._invoker.engine

    def backup(self, context: Context, request: BackupRequest) -> None:
        """
        Dump, compress and upload one database.

        Args:
            context: Caller context; its deadline bounds the dump
            request: Connection parameters and destination

        Raises:
            InvocationError: Dump process could not be started
            DeadlineExceeded: Dump was cut short by the caller's deadline
            DumpFailed: Dump exited non-zero for another reason
            UploadFailed: Dump succeeded but the upload did not
        """
        with self._lock:
            self._logger.info(
                f"Starting {self.engine} backup of [{request.instance_name}] "
                f"to {request.object_path}"
            )
            # independent of the caller's context so the upload can be aborted
            # as soon as the dump outcome is known
            chain_context = Context.background().with_cancel()

            # registered before the dump starts so it runs ahead of the kill:
            # a dump cut short by the deadline never completes an upload
            def abort_chain(_context):
                chain_context.cancel()

            context.on_done(abort_chain)
            try:
                process = self._invoker.start(context, request)
            except BaseException:
                context.remove_callback(abort_chain)
                chain_context.cancel()
                raise

            chain = BackupChain(
                chain_context,
                self._uploader,
                request,
                process.stdout,
                metrics=self._metrics,
                clock=self._clock
            )

            try:
                chain.start()
                dump_error = self._wait_for_dump(context, process)
                if dump_error is not None:
                    chain_context.cancel()
                chain_error = chain.join()
            finally:
                context.remove_callback(abort_chain)
                chain_context.cancel()
                process.close()

            if dump_error is not None:
                raise dump_error
            if chain_error is not None:
                raise chain_error

            self._logger.info(f"Backup of [{request.instance_name}] uploaded to {request.object_path}")

    def _wait_for_dump(self, context: Context, process):
        self._metrics.start_timer('dump')
        try:
            returncode = process.wait()
        finally:
            self._metrics.stop_timer('dump')

        if returncode == 0:
            return None

        if context.deadline_exceeded():
            error = DeadlineExceeded(f"{self.engine} dump: timeout: {context.err()}")
            error.__cause__ = context.err()
            return error

        stderr = process.stderr_text().rstrip("\r\n")
        self._logger.error(stderr)
        return DumpFailed(
            f"{self.engine} dump: exit status {returncode}: {stderr}",
            stderr=stderr,
            returncode=returncode
        )
