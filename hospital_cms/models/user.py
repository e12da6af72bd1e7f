"""ORM model for CMS operators (auth and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from hospital_cms.models.base import Base, TimestampMixin, new_id


class User(TimestampMixin, Base):
    """
    Operator account for cookie JWT authentication and role-based access control.

    role: 'ADMIN' (content) or 'SUPER_ADMIN' (content, users, audit log).
    password_scheme tags how password_hash was produced (HASH_V1 or HASH_LEGACY).
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(64), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    password_scheme = Column(String(16), nullable=False, default="HASH_V1")
    name = Column(String(255), nullable=False, default="")
    role = Column(String(32), nullable=False, default="ADMIN")
    must_change_password = Column(Boolean, nullable=False, default=True)
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime(timezone=True), nullable=True)
