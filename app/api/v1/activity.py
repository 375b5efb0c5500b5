"""
Activity feed endpoint: the audit trail, newest first.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import get_current_user_id
from app.formatters import action_label, describe
from app.schemas.activity import ActivityResponse
from app.schemas.transaction import SortOrder
from app.services.audit import AuditTrail

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get("", response_model=list[ActivityResponse])
def list_activity(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    order: SortOrder = SortOrder.DESC,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Audit trail entries with a readable description.

    - **limit**: Number of entries (default 100)
    - **order**: 'desc' (default) or 'asc' by creation time
    """
    entries = AuditTrail(db).list(limit=limit or settings.activity_feed_limit, ordering=order)
    return [
        ActivityResponse(
            id=entry.id,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            action=entry.action,
            details=entry.details,
            user_id=entry.user_id,
            created_at=entry.created_at,
            label=action_label(entry.action),
            description=describe(entry),
        )
        for entry in entries
    ]
