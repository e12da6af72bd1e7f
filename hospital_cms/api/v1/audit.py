"""Audit log listing (SUPER_ADMIN only). Entries are never edited or deleted through the API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hospital_cms.api.v1.auth import require_super_admin
from hospital_cms.core.database import get_db
from hospital_cms.schemas.audit import AuditAction, AuditLogEntry
from hospital_cms.schemas.auth import CurrentUser
from hospital_cms.services.audit import list_entries

router = APIRouter()


@router.get("", response_model=list[AuditLogEntry])
def list_audit_logs(
    _admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    action: AuditAction | None = None,
) -> list[AuditLogEntry]:
    """Newest entries first; optionally filter by action kind."""
    return [
        AuditLogEntry(
            id=entry.id,
            action=entry.action,
            entity=entry.entity,
            details=entry.details,
            performed_by=entry.performed_by,
            timestamp=entry.created_at,
        )
        for entry in list_entries(db, limit=limit, action=action)
    ]
