"""Field descriptor sets: the declarative schema of one RouterOS object type.

A ``ResourceSchema`` names where the object lives on the device, how an
instance is identified, and how each declared field maps to a device
attribute. The synchronizer is driven entirely by this data.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from .errors import ValidationError
from .version import DeviceVersion

# Device-native representation: attribute name -> string value
DeviceItem = dict[str, str]

# Returns an error message, or None when the value is acceptable
Validator = Callable[[Any], Optional[str]]

# (live, declared) -> True when the difference should be ignored
DiffSuppressFunc = Callable[[Any, Any], bool]

TRUE_VALUES = ("true", "yes")


class FieldKind(str, Enum):
    """Value type of a declared field."""
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    LIST = "list"


class FieldMode(str, Enum):
    """Who may write a field and whether the device reports it."""
    READ_WRITE = "read-write"
    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"   # Sent to the device, never read back
    COMPUTED = "computed"       # Always taken from the device


class Presence(str, Enum):
    """Whether the user must, may, or must not supply a field."""
    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"


class InstanceState(str, Enum):
    """Synchronization state of one declared instance."""
    ABSENT = "absent"
    PRESENT_UNSYNCED = "present-unsynced"
    PRESENT_SYNCED = "present-synced"
    DELETED = "deleted"


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared field of a configuration object."""
    name: str
    kind: FieldKind = FieldKind.STRING
    mode: FieldMode = FieldMode.READ_WRITE
    required: bool = False
    default: Any = None
    validator: Optional[Validator] = None
    diff_suppress: Optional[DiffSuppressFunc] = None
    description: str = ""
    # Device attribute name; defaults to the field name in kebab-case
    device_name: str = ""

    def __post_init__(self):
        if self.required and self.mode in (FieldMode.READ_ONLY, FieldMode.COMPUTED):
            raise ValueError(f"Field {self.name} cannot be both required and {self.mode.value}")
        if not self.device_name:
            object.__setattr__(self, "device_name", self.name.replace("_", "-"))

    @property
    def presence(self) -> Presence:
        if self.mode in (FieldMode.READ_ONLY, FieldMode.COMPUTED):
            return Presence.COMPUTED
        return Presence.REQUIRED if self.required else Presence.OPTIONAL

    @property
    def writable(self) -> bool:
        return self.mode in (FieldMode.READ_WRITE, FieldMode.WRITE_ONLY)

    def check_kind(self, value: Any) -> bool:
        """Check that a user-supplied value has this field's type."""
        if self.kind is FieldKind.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self.kind is FieldKind.BOOLEAN:
            return isinstance(value, bool)
        if self.kind is FieldKind.LIST:
            return isinstance(value, (list, tuple))
        return isinstance(value, str)

    def encode(self, value: Any) -> str:
        """Declared value -> device string."""
        if self.kind is FieldKind.BOOLEAN:
            return "true" if value else "false"
        if self.kind is FieldKind.LIST:
            return ",".join(str(v) for v in value)
        return str(value)

    def decode(self, raw: str) -> Any:
        """Device string -> declared value."""
        if self.kind is FieldKind.BOOLEAN:
            return raw.lower() in TRUE_VALUES
        if self.kind is FieldKind.INTEGER:
            return int(raw) if raw != "" else None
        if self.kind is FieldKind.LIST:
            return [v for v in raw.split(",") if v]
        return raw


@dataclass(frozen=True)
class FilterGate:
    """A filter clause only sent to devices at or above ``min_version``."""
    attribute: str
    value: str
    min_version: str

    def applies(self, version: DeviceVersion) -> bool:
        return version.at_least(self.min_version)


@dataclass(frozen=True, eq=False)
class ResourceSchema:
    """The field descriptor set for one object type. Read-only once built."""
    name: str
    path: str
    fields: Mapping[str, FieldDescriptor]
    # Device attribute naming an instance
    id_key: str = ".id"
    # Device attribute -> declared field used to find the instance
    natural_key: Mapping[str, str] = field(default_factory=dict)
    filter_gates: tuple[FilterGate, ...] = ()
    # Device attributes tried, in order, by the console fallback on import
    lookup_fields: tuple[str, ...] = ()
    # REST action suffix for named singletons updated in place, e.g. "/set"
    update_suffix: str = ""
    singleton: bool = False
    # Built-in object that cannot be removed from the device
    system: bool = False

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        object.__setattr__(self, "natural_key", MappingProxyType(dict(self.natural_key)))
        object.__setattr__(self, "filter_gates", tuple(self.filter_gates))
        object.__setattr__(self, "lookup_fields", tuple(self.lookup_fields))

        for attribute, field_name in self.natural_key.items():
            if field_name not in self.fields:
                raise ValueError(
                    f"{self.name}: natural key {attribute} refers to unknown field {field_name}"
                )

    @classmethod
    def build(
        cls,
        name: str,
        path: str,
        fields: Iterable[FieldDescriptor],
        **kwargs: Any,
    ) -> "ResourceSchema":
        """Build a schema from descriptors, keeping their order."""
        return cls(name=name, path=path, fields={f.name: f for f in fields}, **kwargs)

    def by_device_name(self, device_name: str) -> Optional[FieldDescriptor]:
        for descriptor in self.fields.values():
            if descriptor.device_name == device_name:
                return descriptor
        return None

    def key_field(self) -> str:
        """Declared field holding the primary natural-key value."""
        if not self.natural_key:
            raise ValueError(f"{self.name} has no natural key")
        return next(iter(self.natural_key.values()))

    def writable_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Drop device-maintained fields from a record read back from the device."""
        return {
            key: value for key, value in values.items()
            if key in self.fields and self.fields[key].writable
        }

    def validate(self, values: Mapping[str, Any]) -> None:
        """Check declared values against the descriptors.

        Raises:
            ValidationError: With one message per offending field
        """
        errors: list[str] = []

        for key, value in values.items():
            descriptor = self.fields.get(key)
            if descriptor is None:
                errors.append(f"Unknown field: {key}")
                continue
            if value is None:
                continue
            if not descriptor.writable:
                errors.append(f"Field {key} is {descriptor.mode.value} and cannot be set")
                continue
            if not descriptor.check_kind(value):
                errors.append(
                    f"Field {key} expects {descriptor.kind.value}, got {type(value).__name__}"
                )
                continue
            if descriptor.validator:
                message = descriptor.validator(value)
                if message:
                    errors.append(f"Field {key}: {message}")

        for descriptor in self.fields.values():
            if descriptor.presence is Presence.REQUIRED and values.get(descriptor.name) is None:
                errors.append(f"Missing required field: {descriptor.name}")

        if errors:
            raise ValidationError(errors)


@dataclass
class DeclaredRecord:
    """User-declared state of one instance plus its synchronization id."""
    values: dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    state: InstanceState = InstanceState.ABSENT

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)


def to_device(schema: ResourceSchema, values: Mapping[str, Any]) -> DeviceItem:
    """Translate declared values into a device item.

    Computed and read-only fields are never sent; unset optional fields are
    sent with their default, or omitted when there is none.
    """
    item: DeviceItem = {}
    for descriptor in schema.fields.values():
        if not descriptor.writable:
            continue
        value = values.get(descriptor.name)
        if value is None:
            value = descriptor.default
        if value is None:
            continue
        item[descriptor.device_name] = descriptor.encode(value)
    return item


def from_device(
    schema: ResourceSchema,
    item: Mapping[str, str],
    previous: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Translate a device item into declared values.

    Computed fields always take the device value. Write-only fields, and
    fields the device did not report, keep the previous declared value.
    """
    values = dict(previous or {})
    for descriptor in schema.fields.values():
        if descriptor.mode is FieldMode.WRITE_ONLY:
            continue
        raw = item.get(descriptor.device_name)
        if raw is None:
            if descriptor.presence is Presence.COMPUTED:
                values[descriptor.name] = None
            continue
        values[descriptor.name] = descriptor.decode(raw)
    return values


# --- Validators ---

def int_between(low: int, high: int) -> Validator:
    def check(value: int) -> Optional[str]:
        if not low <= value <= high:
            return f"expected value between {low} and {high}, got {value}"
        return None
    return check


def int_at_least(low: int) -> Validator:
    def check(value: int) -> Optional[str]:
        if value < low:
            return f"expected value of at least {low}, got {value}"
        return None
    return check


def string_in(allowed: Iterable[str]) -> Validator:
    allowed = tuple(allowed)

    def check(value: str) -> Optional[str]:
        if value not in allowed:
            return f"expected one of {', '.join(allowed)}, got {value!r}"
        return None
    return check


# --- Diff suppression ---

def empty_equals(device_default: str) -> DiffSuppressFunc:
    """An empty declared value matches the device's default value."""
    def suppress(live: Any, declared: Any) -> bool:
        if declared == "" and live == device_default:
            return True
        return live == declared
    return suppress


def always_present_not_user_provided(live: Any, declared: Any) -> bool:
    """The device always reports the field; accept it when the user left it unset."""
    if declared is None:
        return True
    return live == declared
