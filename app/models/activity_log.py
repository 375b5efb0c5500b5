"""
Activity log model: append-only audit trail of entity mutations.
"""
from typing import Optional
import uuid
from sqlalchemy import String, Uuid, Index, JSON, event
from sqlalchemy.orm import Mapped, mapped_column, object_session
from sqlalchemy.dialects.postgresql import JSONB

from app.core.database import Base
from app.errors import ImmutableRecordError


class ActivityLogEntry(Base):
    """One mutation of a tracked entity (products, transactions)."""

    __tablename__ = "activity_log"

    # Action details
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # 'products', 'transactions'
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)  # 'INSERT', 'UPDATE', 'DELETE'

    # Snapshot or {old, new} diff, depending on action
    details: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False
    )

    # No FK: entries outlive users and the rows they describe
    user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Indexes
    __table_args__ = (
        Index("idx_activity_log_entity", "entity_type", "entity_id"),
        Index("idx_activity_log_action", "action"),
        Index("idx_activity_log_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLogEntry(id={self.id}, action={self.action}, entity={self.entity_type})>"


@event.listens_for(ActivityLogEntry, "before_update")
def _refuse_update(mapper, connection, target):
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise ImmutableRecordError("Activity log entry", target.id, "updated")


@event.listens_for(ActivityLogEntry, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ImmutableRecordError("Activity log entry", target.id, "deleted")
