"""Database dump invokers."""

from infrastructure.dump.base import DumpInvoker, DumpProcess
from infrastructure.dump.postgres import PostgresDumpInvoker
from infrastructure.dump.mysql import MySQLDumpInvoker

__all__ = ['DumpInvoker', 'DumpProcess', 'PostgresDumpInvoker', 'MySQLDumpInvoker']
