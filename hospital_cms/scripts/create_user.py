"""
Create an operator account (e.g. the first SUPER_ADMIN). Run from project root:
  python -m hospital_cms.scripts.create_user USERNAME PASSWORD [role] [--name NAME]
Example:
  python -m hospital_cms.scripts.create_user admin 'temporary-pass' SUPER_ADMIN --name "Super Administrator"
The account must change its password at first login.
"""
import argparse
import re
import sys

from hospital_cms.core.config import get_settings
from hospital_cms.core.database import build_engine, build_session_factory
from hospital_cms.main import configure_logging
from hospital_cms.schemas.auth import ROLE_VALUES
from hospital_cms.schemas.users import USERNAME_PATTERN
from hospital_cms.services.users import UserManagementError, create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a CMS operator account (no registration UI).")
    parser.add_argument("username", help="Alphanumeric username (1-64 chars)")
    parser.add_argument("password", help="Temporary password; must be changed at first login")
    parser.add_argument("role", nargs="?", default="ADMIN", choices=sorted(ROLE_VALUES))
    parser.add_argument("--name", default="", help="Display name")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    username = args.username.strip()
    if not re.fullmatch(USERNAME_PATTERN, username) or len(username) > 64:
        print("Username must be 1-64 alphanumeric characters.", file=sys.stderr)
        return 1

    engine = build_engine(settings.DATABASE_URL)
    db = build_session_factory(engine)()
    try:
        create_user(
            db,
            username,
            args.password,
            args.name or username,
            args.role,
            min_password_length=settings.PASSWORD_MIN_LENGTH,
        )
    except UserManagementError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
