"""Descriptors shared by most RouterOS object types."""
from ..schema import (
    FieldDescriptor,
    FieldKind,
    FieldMode,
    always_present_not_user_provided,
)

PROP_COMMENT = FieldDescriptor(
    name="comment",
    description="Short description of the item.",
)

PROP_DISABLED_RW = FieldDescriptor(
    name="disabled",
    kind=FieldKind.BOOLEAN,
    description="Whether the item is disabled.",
)

PROP_DYNAMIC_RO = FieldDescriptor(
    name="dynamic",
    kind=FieldKind.BOOLEAN,
    mode=FieldMode.READ_ONLY,
    description="Configuration item created by software, not by management interface.",
)

PROP_INVALID_RO = FieldDescriptor(
    name="invalid",
    kind=FieldKind.BOOLEAN,
    mode=FieldMode.READ_ONLY,
)

PROP_VRF_RW = FieldDescriptor(
    name="vrf",
    description="The VRF table this resource operates on.",
    diff_suppress=always_present_not_user_provided,
)
