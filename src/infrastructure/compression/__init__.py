"""Stream compression."""

from infrastructure.compression.gzip_stage import GzipStage, compress_bytes

__all__ = ['GzipStage', 'compress_bytes']
