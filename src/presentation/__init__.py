"""Presentation layer package."""

from presentation.cli import main, create_factory_from_config

__all__ = ["main", "create_factory_from_config"]
