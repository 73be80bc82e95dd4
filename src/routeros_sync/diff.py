"""Field-level drift between declared and live state.

Each field's diff-suppression predicate decides whether a discrepancy is
significant before it is reported.
"""
from dataclasses import dataclass
from typing import Any, Mapping

from .schema import FieldMode, ResourceSchema


@dataclass
class FieldChange:
    """A declared field whose live value differs."""
    field: str
    declared: Any
    live: Any


def diff_record(
    schema: ResourceSchema,
    declared: Mapping[str, Any],
    live: Mapping[str, Any],
) -> list[FieldChange]:
    """
    Compare declared values against live values.

    Only writable fields are compared; write-only fields are skipped since
    the device never reports them. Unset fields fall back to their default;
    without one they are ignored unless a suppression policy says otherwise.
    """
    changes = []

    for descriptor in schema.fields.values():
        if descriptor.mode is not FieldMode.READ_WRITE:
            continue

        declared_value = declared.get(descriptor.name)
        if declared_value is None:
            declared_value = descriptor.default
        live_value = live.get(descriptor.name)

        if descriptor.diff_suppress is not None:
            if descriptor.diff_suppress(live_value, declared_value):
                continue
        elif declared_value is None or declared_value == live_value:
            continue

        changes.append(FieldChange(descriptor.name, declared_value, live_value))

    return changes


def summarize_changes(schema: ResourceSchema, changes: list[FieldChange]) -> str:
    """
    Create a human-readable summary of field changes.

    Useful for plan output and logging.
    """
    if not changes:
        return f"{schema.path}: no changes needed - live state matches declared state"

    lines = [f"{schema.path}: {len(changes)} field(s) differ"]
    for change in changes:
        lines.append(f"  [~] {change.field}: {change.live!r} -> {change.declared!r}")
    return "\n".join(lines)
