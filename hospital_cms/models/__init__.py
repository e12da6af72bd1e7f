"""SQLAlchemy ORM models."""

from hospital_cms.models.audit_log import AuditLog
from hospital_cms.models.base import Base
from hospital_cms.models.news import NewsArticle
from hospital_cms.models.user import User

__all__ = ["AuditLog", "Base", "NewsArticle", "User"]
