"""Compression and upload chain for one backup run."""

import threading
import time
from typing import BinaryIO, Callable, Optional

from domain.exceptions import BackupError, UploadFailed
from domain.models import BackupRequest
from domain.protocols import IStreamUploader
from infrastructure.compression import GzipStage
from shared.context import Context
from shared.logging import get_logger
from shared.metrics import MetricsCollector

logger = get_logger(__name__)


class BackupChain:
    """
    Runs gzip compression and the streaming upload on their own threads.

    The chain owns the dump's stdout (single reader) and the compressed pipe
    (single reader: the uploader). join() is the only way to collect its
    result.
    """

    def __init__(
        self,
        context: Context,
        uploader: IStreamUploader,
        request: BackupRequest,
        source: BinaryIO,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time
    ):
        self._context = context
        self._uploader = uploader
        self._request = request
        self._source = source
        self._metrics = metrics
        self._clock = clock
        self._thread = threading.Thread(
            target=self._run,
            name=f"backup-chain-{request.instance_name}",
            daemon=True
        )
        self.error: Optional[BackupError] = None

    def start(self) -> None:
        self._thread.start()

    def join(self) -> Optional[BackupError]:
        """Wait for the chain to settle and return its error, if any."""
        self._thread.join()
        return self.error

    def _run(self) -> None:
        if self._metrics is not None:
            self._metrics.start_timer('chain')

        stage = GzipStage(
            self._source,
            self._request.filename,
            clock=self._clock,
            metrics=self._metrics
        )
        compressed = stage.start()
        try:
            self._uploader.upload(self._context, self._request.object_path, compressed, -1)
        except BackupError as e:
            self.error = e
        except Exception as e:
            self.error = UploadFailed(f"Upload failed: {e}")
            self.error.__cause__ = e
        finally:
            # unblocks the compression thread if the upload stopped reading early
            compressed.close()
            compression_error = stage.join()
            # a dump still writing now gets a broken pipe instead of blocking forever
            self._source.close()
            if self._metrics is not None:
                self._metrics.stop_timer('chain')

        if self.error is None and compression_error is not None:
            self.error = UploadFailed(f"Compression failed, upload incomplete: {compression_error}")

        if self.error is not None:
            logger.error(
                f"could not upload service backup [{self._request.instance_name}] "
                f"to object storage: {self.error}"
            )
