"""
Audit trail: append-only log of product and transaction mutations.

Entries are added to the caller's session and committed together with the
mutation they describe; this module never commits on its own.
"""
import uuid
from typing import Optional, Union

from sqlalchemy.orm import Query, Session

from app.logging_config import get_logger
from app.models.activity_log import ActivityLogEntry
from app.schemas.activity import (
    EntityType,
    CreatedDetails,
    UpdatedDetails,
    DeletedDetails,
)
from app.schemas.transaction import SortOrder

logger = get_logger("audit")

Details = Union[CreatedDetails, UpdatedDetails, DeletedDetails]


class AuditTrail:
    """Write and read access to the activity log within one session."""

    def __init__(self, session: Session):
        self.session = session

    def append(
        self,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        details: Details,
        user_id: Optional[str] = None,
    ) -> ActivityLogEntry:
        """Stage one entry in the current unit of work; the action follows from ``details``."""
        entry = ActivityLogEntry(
            entity_type=EntityType(entity_type).value,
            entity_id=entity_id,
            action=details.action.value,
            details=details.to_json(),
            user_id=user_id,
        )
        self.session.add(entry)
        logger.debug(f"[AUDIT] Staged {entry.action} on {entry.entity_type}/{entity_id}")
        return entry

    def list(self, limit: Optional[int] = None, ordering: SortOrder = SortOrder.DESC) -> Query:
        """
        Entries ordered by creation time.

        The returned query is lazy and can be iterated any number of times;
        each iteration re-reads the table. Ties on ``created_at`` are broken
        by id so repeated reads return the same order.
        """
        query = self.session.query(ActivityLogEntry)
        if SortOrder(ordering) is SortOrder.ASC:
            query = query.order_by(ActivityLogEntry.created_at.asc(), ActivityLogEntry.id.asc())
        else:
            query = query.order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query

    def for_entity(self, entity_type: EntityType, entity_id: uuid.UUID) -> Query:
        """History of a single entity, oldest first."""
        return (
            self.session.query(ActivityLogEntry)
            .filter(
                ActivityLogEntry.entity_type == EntityType(entity_type).value,
                ActivityLogEntry.entity_id == entity_id,
            )
            .order_by(ActivityLogEntry.created_at.asc(), ActivityLogEntry.id.asc())
        )
