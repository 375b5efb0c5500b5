# app/formatters.py
"""Human-readable text for activity log entries. Pure functions, no I/O."""
from typing import Any, Optional

from .schemas.activity import (
    AuditAction,
    CreatedDetails,
    UpdatedDetails,
    DeletedDetails,
    parse_details,
)

ACTION_LABELS = {
    AuditAction.INSERT: "Created",
    AuditAction.UPDATE: "Updated",
    AuditAction.DELETE: "Deleted",
}


def entity_label(entity_type: str) -> str:
    """
    "products" -> "Product", "transactions" -> "Transaction"
    """
    if not entity_type:
        return ""
    singular = entity_type[:-1] if entity_type.endswith("s") else entity_type
    return singular[:1].upper() + singular[1:]


def action_label(action: str) -> str:
    """Badge text for an action; unknown actions are shown as-is."""
    try:
        return ACTION_LABELS[AuditAction(action)]
    except ValueError:
        return str(action)


def _field(entry: Any, name: str, default: Optional[Any] = None) -> Any:
    # ORM rows and API payloads (dicts) are both accepted
    if isinstance(entry, dict):
        return entry.get(name, default)
    return getattr(entry, name, default)


def describe(entry: Any) -> str:
    """
    Sentence for the activity feed.

    Dispatches on (entity_type, action):
        INSERT products     -> "Created product: {name} ({sku})"
        INSERT transactions -> "Recorded {type} transaction"
        UPDATE              -> "Updated product: {new name}" or "Updated {entity}"
        DELETE              -> "Deleted product: {name}" or "Deleted {entity}"
    """
    entity_type = _field(entry, "entity_type") or ""
    action = _field(entry, "action") or ""
    entity = entity_label(entity_type).lower()

    try:
        details = parse_details(action, _field(entry, "details"))
    except ValueError:
        return f"{action} on {entity}"

    if isinstance(details, CreatedDetails):
        snapshot = details.snapshot
        if entity_type == "products":
            return f"Created product: {snapshot.get('name')} ({snapshot.get('sku')})"
        if entity_type == "transactions":
            return f"Recorded {snapshot.get('type')} transaction"
        return f"{action} on {entity}"

    if isinstance(details, UpdatedDetails):
        new_name = details.new.get("name")
        if new_name:
            return f"Updated product: {new_name}"
        return f"Updated {entity}"

    if isinstance(details, DeletedDetails):
        name = details.snapshot.get("name")
        if name:
            return f"Deleted product: {name}"
        return f"Deleted {entity}"

    return f"{action} on {entity}"
