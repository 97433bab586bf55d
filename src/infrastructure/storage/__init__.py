"""Storage infrastructure."""

from infrastructure.storage.s3_uploader import S3StreamUploader, ContextReader

__all__ = ['S3StreamUploader', 'ContextReader']
