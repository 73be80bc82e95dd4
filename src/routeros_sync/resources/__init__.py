"""Field descriptor sets for concrete RouterOS object types."""
from ..schema import ResourceSchema
from .ip_address import IP_ADDRESS
from .ip_service import IP_SERVICE
from .system_identity import SYSTEM_IDENTITY

__all__ = [
    "IP_ADDRESS",
    "IP_SERVICE",
    "SYSTEM_IDENTITY",
    "REGISTRY",
    "get_schema",
]

# Object type registry
REGISTRY: dict[str, ResourceSchema] = {
    schema.name: schema
    for schema in (IP_ADDRESS, IP_SERVICE, SYSTEM_IDENTITY)
}


def get_schema(name: str) -> ResourceSchema:
    """Look up an object type by name."""
    if name not in REGISTRY:
        raise KeyError(f"Unknown resource type: {name}")
    return REGISTRY[name]
