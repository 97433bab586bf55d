"""Infrastructure layer package."""

from infrastructure.dump import DumpInvoker, DumpProcess, PostgresDumpInvoker, MySQLDumpInvoker
from infrastructure.compression import GzipStage
from infrastructure.storage import S3StreamUploader

__all__ = [
    "DumpInvoker",
    "DumpProcess",
    "PostgresDumpInvoker",
    "MySQLDumpInvoker",
    "GzipStage",
    "S3StreamUploader",
]
