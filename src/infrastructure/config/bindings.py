"""Service binding parsing (Cloud Foundry VCAP_SERVICES format)."""

import json
from typing import Any, Dict, List, Union

from domain.exceptions import ConfigurationError
from domain.models import ServiceBinding

ENGINE_ALIASES = {
    "postgres": ("postgres", "elephantsql"),
    "mysql": ("mysql", "mariadb", "cleardb"),
}


def parse_vcap_services(raw: Union[str, Dict[str, Any]]) -> List[ServiceBinding]:
    """
    Parse a VCAP_SERVICES document into bindings.

    Args:
        raw: JSON text or already decoded mapping of label -> instances

    Raises:
        ConfigurationError: If the document is malformed
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"VCAP_SERVICES is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise ConfigurationError("VCAP_SERVICES must be a JSON object")

    bindings = []
    for label, instances in raw.items():
        if not isinstance(instances, list):
            raise ConfigurationError(f"VCAP_SERVICES[{label}] must be a list")
        for instance in instances:
            if not isinstance(instance, dict) or not instance.get("name"):
                raise ConfigurationError(f"VCAP_SERVICES[{label}] contains an entry without a name")
            bindings.append(ServiceBinding(
                label=instance.get("label") or label,
                name=instance["name"],
                plan=instance.get("plan") or "",
                tags=list(instance.get("tags") or []),
                credentials=dict(instance.get("credentials") or {}),
            ))
    return bindings


def find_binding(bindings: List[ServiceBinding], name: str) -> ServiceBinding:
    """Return the binding with the given instance name."""
    for binding in bindings:
        if binding.name == name:
            return binding
    available = ', '.join(b.name for b in bindings) or 'none'
    raise ConfigurationError(f"Service binding not found: {name} (available: {available})")


def engine_for(binding: ServiceBinding) -> str:
    """
    Determine the engine type of a binding from its label and tags.

    Raises:
        ConfigurationError: If no supported engine matches
    """
    candidates = [binding.label.lower()] + [tag.lower() for tag in binding.tags]
    for engine, aliases in ENGINE_ALIASES.items():
        for candidate in candidates:
            if any(alias in candidate for alias in aliases):
                return engine
    raise ConfigurationError(f"Cannot determine database engine of binding [{binding.name}] ({binding.label})")
