"""
Pydantic schemas for the activity log (audit trail).

``details`` is stored as plain JSON in the shape the activity feed has always
read: the created fields for INSERT, ``{"old": ..., "new": ...}`` for UPDATE
and the removed entity's snapshot for DELETE. In code it is handled as a
closed union discriminated by the action, so an entry's action always
matches its payload.
"""
from typing import Annotated, Any, Literal, Optional, Union
from datetime import datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict, TypeAdapter
from enum import Enum


class EntityType(str, Enum):
    """Tracked entities, named after their tables."""
    PRODUCTS = "products"
    TRANSACTIONS = "transactions"


class AuditAction(str, Enum):
    """Mutation kinds recorded in the activity log."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class CreatedDetails(BaseModel):
    """Fields of a newly created entity."""
    action: Literal[AuditAction.INSERT] = AuditAction.INSERT
    snapshot: dict[str, Any]

    def to_json(self) -> dict[str, Any]:
        return dict(self.snapshot)


class UpdatedDetails(BaseModel):
    """Changed fields before and after an update."""
    action: Literal[AuditAction.UPDATE] = AuditAction.UPDATE
    old: dict[str, Any]
    new: dict[str, Any]

    def to_json(self) -> dict[str, Any]:
        return {"old": dict(self.old), "new": dict(self.new)}


class DeletedDetails(BaseModel):
    """Last known fields of a removed entity."""
    action: Literal[AuditAction.DELETE] = AuditAction.DELETE
    snapshot: dict[str, Any]

    def to_json(self) -> dict[str, Any]:
        return dict(self.snapshot)


AuditDetails = Annotated[
    Union[CreatedDetails, UpdatedDetails, DeletedDetails],
    Field(discriminator="action")
]

_details_adapter = TypeAdapter(AuditDetails)


def parse_details(action: str, raw: Optional[dict]) -> Union[CreatedDetails, UpdatedDetails, DeletedDetails]:
    """Rebuild the typed details of a stored entry.

    Raises:
        ValueError: If ``action`` is not a known audit action
    """
    action = AuditAction(action)
    raw = raw or {}

    if action is AuditAction.UPDATE:
        payload = {"action": action, "old": raw.get("old") or {}, "new": raw.get("new") or {}}
    else:
        payload = {"action": action, "snapshot": raw}

    return _details_adapter.validate_python(payload)


class ActivityResponse(BaseModel):
    """Schema for an activity feed entry."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    action: str
    details: dict[str, Any]
    user_id: Optional[str] = None
    created_at: datetime

    # Rendered by app.formatters
    label: str
    description: str
