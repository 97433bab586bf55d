"""Configuration package."""

from infrastructure.config.loader import ConfigLoader, BackupConfig
from infrastructure.config.bindings import parse_vcap_services, find_binding, engine_for

__all__ = ["ConfigLoader", "BackupConfig", "parse_vcap_services", "find_binding", "engine_for"]
