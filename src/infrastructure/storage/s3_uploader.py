"""
Streaming uploader for S3-compatible object storage.

Infrastructure layer using boto3. The compressed dump has no known length, so
it is sent with upload_fileobj, which switches to a multipart upload and reads
the stream chunk by chunk.
"""

from typing import BinaryIO, Callable, Optional

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.client import Config

from domain.exceptions import UploadFailed
from shared.context import Context
from shared.logging import get_logger
from shared.metrics import MetricsCollector

logger = get_logger(__name__)


class ContextReader:
    """
    Non-seekable file wrapper that aborts reads once a context is done.

    boto3 pulls parts through read(); raising from it aborts the transfer,
    which is how cancellation reaches an in-progress upload.
    """

    def __init__(
        self,
        context: Context,
        stream: BinaryIO,
        on_read: Optional[Callable[[int], None]] = None
    ):
        self._context = context
        self._stream = stream
        self._on_read = on_read

    def read(self, size: int = -1) -> bytes:
        err = self._context.err()
        if err is not None:
            raise err
        data = self._stream.read(size)
        # a read blocked while the context finished may return a cut-short tail
        err = self._context.err()
        if err is not None:
            raise err
        if data and self._on_read is not None:
            self._on_read(len(data))
        return data

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def close(self) -> None:
        self._stream.close()


class S3StreamUploader:
    """
    Uploader for S3-compatible storage.
    Implements IStreamUploader protocol.
    """

    def __init__(
        self,
        bucket: str,
        endpoint: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: Optional[str] = None,
        part_size: int = 16 * 1024 * 1024,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize S3 uploader.

        Args:
            bucket: S3 bucket name
            endpoint: S3 endpoint URL (None for AWS)
            access_key: S3 access key
            secret_key: S3 secret key
            region: Optional region name
            part_size: Multipart chunk size; bounds memory per part
            metrics: Optional collector for the bytes_compressed counter
        """
        self.bucket = bucket
        self.endpoint = endpoint
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region

        self._metrics = metrics
        self._client = self._create_client()
        self._logger = get_logger(__name__)

        self._transfer_config = TransferConfig(
            multipart_threshold=part_size,
            multipart_chunksize=part_size,
            max_concurrency=4,
            use_threads=True
        )

    def _create_client(self):
        """Create S3 client with path-style addressing for S3-compatible stores."""
        config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'}
        )

        kwargs = {'config': config}
        if self.endpoint:
            kwargs['endpoint_url'] = self.endpoint
        if self.access_key and self.secret_key:
            kwargs['aws_access_key_id'] = self.access_key
            kwargs['aws_secret_access_key'] = self.secret_key
        if self.region:
            kwargs['region_name'] = self.region

        return boto3.client('s3', **kwargs)

    def upload(
        self,
        context: Context,
        object_path: str,
        stream: BinaryIO,
        size_hint: int = -1
    ) -> None:
        """
        Stream to s3://bucket/object_path until end-of-stream.

        Args:
            context: Upload is aborted as soon as this context is done
            object_path: Object key
            stream: Readable stream, read exactly once
            size_hint: Total length, or -1 when unknown

        Raises:
            UploadFailed: If the upload fails or is cancelled
        """
        if context.done():
            raise UploadFailed(f"Upload of {object_path} cancelled before start: {context.err()}")

        size = "unknown size" if size_hint < 0 else f"{size_hint} bytes"
        self._logger.info(f"Uploading stream ({size}) to s3://{self.bucket}/{object_path}")

        reader = ContextReader(context, stream, on_read=self._count)
        try:
            self._client.upload_fileobj(
                reader,
                self.bucket,
                object_path,
                Config=self._transfer_config
            )
        except Exception as e:
            if context.done():
                error_msg = f"Upload of {object_path} cancelled: {context.err()}"
            else:
                error_msg = f"Upload failed: {e}"
            self._logger.error(error_msg)
            raise UploadFailed(error_msg) from e

        self._logger.info(f"Upload successful: {object_path}")

    def _count(self, size: int) -> None:
        if self._metrics is not None:
            self._metrics.increment_counter('bytes_compressed', size)
