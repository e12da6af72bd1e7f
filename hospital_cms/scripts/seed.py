"""
Seed the default operator accounts. Run from project root after migrations:
  python -m hospital_cms.scripts.seed

Both accounts get the default password and are flagged must_change_password,
including when they already exist (re-running the seed resets them).
"""

import logging
import sys

from sqlalchemy.orm import Session

from hospital_cms.core.config import get_settings
from hospital_cms.core.database import build_engine, build_session_factory
from hospital_cms.main import configure_logging
from hospital_cms.models import User
from hospital_cms.services.auth import set_password

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "password"

DEFAULT_ACCOUNTS = (
    ("admin", "Super Administrator", "SUPER_ADMIN"),
    ("staff", "Content Staff", "ADMIN"),
)


def seed_default_users(db: Session, password: str = DEFAULT_PASSWORD) -> list[User]:
    """Create or reset the default accounts; returns them after commit."""
    seeded: list[User] = []
    for username, name, role in DEFAULT_ACCOUNTS:
        user = db.query(User).filter(User.username == username).first()
        if user is None:
            user = User(username=username, name=name, role=role)
            db.add(user)
        set_password(user, password)
        user.must_change_password = True
        user.failed_login_attempts = 0
        user.locked_until = None
        seeded.append(user)
    db.commit()
    for user in seeded:
        db.refresh(user)
        logger.info("Seeded user: username=%s role=%s", user.username, user.role)
    return seeded


def main() -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    engine = build_engine(settings.DATABASE_URL)
    db = build_session_factory(engine)()
    try:
        seed_default_users(db)
        logger.warning("Default accounts reset to the seed password; change it after first login.")
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
