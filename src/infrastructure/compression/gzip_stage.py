"""In-flight gzip compression of a dump stream."""

import gzip
import io
import os
import threading
import time
from typing import BinaryIO, Callable, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


def header_name(filename: str) -> str:
    """
    Name to hand to GzipFile so the header carries filename unchanged.

    GzipFile drops one trailing ".gz" from the name it embeds.
    """
    if filename.endswith('.gz'):
        return filename + '.gz'
    return filename


class GzipStage:
    """
    Compresses a byte stream on its own thread into an OS pipe.

    The read end of the pipe is handed to exactly one consumer. The kernel
    pipe buffer bounds memory use: the copy blocks while the consumer is not
    reading. When the source is exhausted (or fails) the encoder is closed
    first, then the write end, so the consumer sees a complete gzip member
    followed by end-of-stream.
    """

    def __init__(
        self,
        source: BinaryIO,
        filename: str,
        clock: Callable[[], float] = time.time,
        chunk_size: int = CHUNK_SIZE,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Args:
            source: Raw dump stream (read until EOF)
            filename: Name embedded in the gzip header
            clock: Returns the timestamp embedded in the gzip header
            chunk_size: Bytes copied per read
            metrics: Optional collector for the bytes_dumped counter
        """
        self._source = source
        self._filename = filename
        self._clock = clock
        self._chunk_size = chunk_size
        self._metrics = metrics
        self._writer: Optional[BinaryIO] = None
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[Exception] = None

    def start(self) -> BinaryIO:
        """Start compressing and return the readable compressed stream."""
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, 'rb')
        self._writer = os.fdopen(write_fd, 'wb')
        self._thread = threading.Thread(
            target=self._run,
            name=f"gzip-{self._filename}",
            daemon=True
        )
        self._thread.start()
        return reader

    def join(self, timeout: Optional[float] = None) -> Optional[Exception]:
        """Wait for the copy to finish and return its error, if any."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.error

    def _run(self) -> None:
        try:
            encoder = gzip.GzipFile(
                filename=header_name(self._filename),
                mode='wb',
                fileobj=self._writer,
                mtime=self._clock()
            )
            try:
                self._copy(encoder)
            finally:
                encoder.close()
            self._writer.close()
        except BrokenPipeError:
            # consumer went away, nothing left to deliver
            logger.debug(f"Compressed stream for {self._filename} closed by reader")
        except (OSError, ValueError) as e:
            self.error = e
            logger.error(f"Compression of {self._filename} failed: {e}")
        finally:
            self._close_writer()

    def _copy(self, encoder: gzip.GzipFile) -> None:
        while True:
            chunk = self._source.read(self._chunk_size)
            if not chunk:
                return
            encoder.write(chunk)
            if self._metrics is not None:
                self._metrics.increment_counter('bytes_dumped', len(chunk))

    def _close_writer(self) -> None:
        if self._writer.closed:
            return
        try:
            self._writer.close()
        except BrokenPipeError:
            pass


def compress_bytes(data: bytes, filename: str, mtime: float) -> bytes:
    """Compress a buffer with the same header settings as GzipStage."""
    buffer = io.BytesIO()
    with gzip.GzipFile(filename=header_name(filename), mode='wb', fileobj=buffer, mtime=mtime) as encoder:
        encoder.write(data)
    return buffer.getvalue()
