"""ORM model for the append-only audit trail."""

from sqlalchemy import Column, DateTime, Integer, String, Text, event, func

from hospital_cms.models.base import Base


class ImmutableLogMixin:
    @classmethod
    def __declare_last__(cls) -> None:
        event.listen(cls, "before_update", cls._deny_mutation)
        event.listen(cls, "before_delete", cls._deny_mutation)

    @staticmethod
    def _deny_mutation(mapper, connection, target) -> None:
        raise ValueError("Audit log entries are immutable")


class AuditLog(ImmutableLogMixin, Base):
    """One security- or content-relevant action (LOGIN, CREATE, RESET, ...)."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(16), nullable=False, index=True)
    entity = Column(String(32), nullable=False)
    details = Column(Text, nullable=False, default="")
    performed_by = Column(String(64), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
