"""Shared utilities package."""

from shared.logging import setup_logger, get_logger, parse_level, LoggerAdapter
from shared.metrics import MetricsCollector
from shared.context import Context, ContextError, Canceled, DeadlineReached
from shared.locks import EngineLocks

__all__ = [
    "setup_logger",
    "get_logger",
    "parse_level",
    "LoggerAdapter",
    "MetricsCollector",
    "Context",
    "ContextError",
    "Canceled",
    "DeadlineReached",
    "EngineLocks",
]
