"""Domain models for database backups."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ServiceBinding:
    """A bound service instance as described by the platform."""

    label: str
    name: str
    plan: str = ""
    tags: List[str] = field(default_factory=list)
    credentials: Dict[str, Any] = field(default_factory=dict)

    def credential_string(self, key: str) -> str:
        """Return a credential as a string, or an empty string if missing."""
        value = self.credentials.get(key)
        if value is None:
            return ""
        return str(value)


@dataclass(frozen=True)
class BackupRequest:
    """Everything one pipeline run needs. Immutable for the run."""

    host: str
    port: str
    username: str
    password: str
    namespace: str
    instance_name: str
    filename: str
    database: Optional[str] = None

    def __post_init__(self):
        if not self.host:
            raise ValueError("host is required")
        if not self.namespace or not self.instance_name:
            raise ValueError("namespace and instance_name are required")
        if not self.filename:
            raise ValueError("filename is required")

    @property
    def object_path(self) -> str:
        """Object key the compressed dump is uploaded to."""
        return f"{self.namespace}/{self.instance_name}/{self.filename}"

    @classmethod
    def from_binding(
        cls,
        binding: ServiceBinding,
        filename: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "BackupRequest":
        """
        Build a request from a service binding.

        Args:
            binding: Bound service instance
            filename: Logical backup filename (generated if None)
            now: Timestamp used for generated filenames

        Returns:
            BackupRequest for the binding

        Raises:
            ConfigurationError: If required credentials are missing
        """
        host = binding.credential_string("host") or binding.credential_string("hostname")
        if not host:
            raise ConfigurationError(f"Binding [{binding.name}] has no host credential")

        database = (
            binding.credential_string("database")
            or binding.credential_string("database_name")
            or binding.credential_string("name")
        )

        return cls(
            host=host,
            port=binding.credential_string("port"),
            username=binding.credential_string("username") or binding.credential_string("user"),
            password=binding.credential_string("password"),
            namespace=binding.label,
            instance_name=binding.name,
            filename=filename or default_filename(binding.name, now),
            database=database or None,
        )


def default_filename(instance_name: str, now: Optional[datetime] = None) -> str:
    """Generate a timestamped backup filename for an instance."""
    now = now or datetime.now()
    return f"{instance_name}_{now.strftime('%Y%m%d%H%M%S')}.gz"
