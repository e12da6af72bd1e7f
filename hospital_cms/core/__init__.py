"""Core app configuration, database and security primitives."""

from hospital_cms.core.config import Settings, get_settings
from hospital_cms.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
