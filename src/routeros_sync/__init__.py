"""routeros-sync: reconcile declared RouterOS configuration with live devices.

Usage:
    from routeros_sync import DeviceInventory, ResourceSynchronizer, DeclaredRecord
    from routeros_sync.resources import IP_SERVICE

    inventory = DeviceInventory("configs/routers.yaml")
    context = await inventory.connect("core-router")
    services = ResourceSynchronizer(IP_SERVICE, context)

    record = await services.create(DeclaredRecord({"numbers": "ssh", "port": 2222}))
"""
from .channel import CommandChannel, HostKeyPolicy
from .config import DeviceInventory
from .diff import FieldChange, diff_record, summarize_changes
from .errors import (
    AuthError,
    ConnectError,
    DataConsistencyError,
    ExecError,
    IdentifierUnresolved,
    NotFoundError,
    ParseError,
    RouterOSSyncError,
    TransportError,
    ValidationError,
)
from .resolver import UNKNOWN_ID, resolve
from .schema import (
    DeclaredRecord,
    FieldDescriptor,
    FieldKind,
    FieldMode,
    InstanceState,
    ResourceSchema,
)
from .synchronizer import ResourceSynchronizer, SyncContext
from .version import DeviceVersion, parse_version

__version__ = "0.1.0"

__all__ = [
    # Engine
    "ResourceSynchronizer",
    "SyncContext",
    "DeviceInventory",
    # Schema
    "ResourceSchema",
    "FieldDescriptor",
    "FieldKind",
    "FieldMode",
    "DeclaredRecord",
    "InstanceState",
    "FieldChange",
    "diff_record",
    "summarize_changes",
    # Command channel
    "CommandChannel",
    "HostKeyPolicy",
    "resolve",
    "UNKNOWN_ID",
    # Versions
    "DeviceVersion",
    "parse_version",
    # Errors
    "RouterOSSyncError",
    "ConnectError",
    "AuthError",
    "ExecError",
    "ParseError",
    "TransportError",
    "NotFoundError",
    "ValidationError",
    "DataConsistencyError",
    "IdentifierUnresolved",
]
