"""Audit trail writer: append-only, and never allowed to fail the action it records."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from hospital_cms.models import AuditLog

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, session: Session, audit_logger: logging.Logger | None = None) -> None:
        self.session = session
        self.logger = audit_logger or logging.getLogger("hospital_cms.audit")

    def record(
        self,
        action: str,
        entity: str,
        details: str,
        performed_by: str,
    ) -> bool:
        """
        Persist one entry after the primary action has committed.

        Returns False (and logs) when the write fails; callers must not treat
        that as a failure of their own operation.
        """
        try:
            self.session.add(
                AuditLog(
                    action=action,
                    entity=entity,
                    details=details,
                    performed_by=performed_by,
                )
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(
                "Failed to write audit log entry: action=%s entity=%s performed_by=%s",
                action,
                entity,
                performed_by,
            )
            return False
        self.logger.info(
            json.dumps(
                {
                    "timestamp": datetime.now(UTC).isoformat(),
                    "action": action,
                    "entity": entity,
                    "details": details,
                    "performed_by": performed_by,
                }
            )
        )
        return True


def list_entries(session: Session, limit: int = 100, action: str | None = None) -> list[AuditLog]:
    """Newest entries first, optionally filtered by action kind."""
    query = session.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    return query.order_by(AuditLog.id.desc()).limit(limit).all()
