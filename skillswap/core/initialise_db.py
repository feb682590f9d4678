"""
Database bootstrap

Creates the database if it does not exist, creates every table, and can
create or promote an admin account.

Usage:
    python -m skillswap.core.initialise_db
    python -m skillswap.core.initialise_db --admin-email admin@skillswap.com --admin-password s3cret!
"""

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy_utils import database_exists, create_database

from .auth import get_password_hash
from .database_client import engine, SessionLocal, SQLALCHEMY_DATABASE_URL, commit_or_rollback
from ..models.base import Base
from ..models import user, sql_exchange, sql_conversation  # noqa: F401  register tables
from ..repositories.users import UserDao

logger = logging.getLogger(__name__)


# on changing an enum, drop the old enum type by hand (e.g. DROP TYPE request_statuses;)
# until schema migrations are managed with alembic
def initialize_db(bind: Engine = engine, url: str = SQLALCHEMY_DATABASE_URL):
    """Checks if the DB exists, creates it if necessary, and ensures all tables are created."""
    if not database_exists(url):
        print("Database not found. Creating database...")
        create_database(url)

    print("Creating/Ensuring all tables exist...")
    Base.metadata.create_all(bind=bind)
    print("✓ Tables created (" + ", ".join(sorted(Base.metadata.tables)) + ")")
    print("Database initialization complete.")


def ensure_admin(db, email: str, password: Optional[str], name: str = "Administrator"):
    """Create an admin account, or promote an existing account to admin."""
    users = UserDao(db)
    account = users.get_by_email(email)
    if account is None:
        if not password:
            raise ValueError(f"No account for {email}; a password is required to create one")
        account = users.create(name=name, email=email, hashed_password=get_password_hash(password), role="admin")
        action = "created"
    else:
        account.role = "admin"
        account.is_active = True
        action = "promoted"
    commit_or_rollback(db, "provisioning admin account")
    print(f"✓ Admin account {email} {action}")
    return account


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the SkillSwap database and tables")
    parser.add_argument("--admin-email", help="create or promote this account to admin")
    parser.add_argument("--admin-password", help="password when the admin account is created")
    parser.add_argument("--admin-name", default="Administrator")
    args = parser.parse_args(argv)

    try:
        initialize_db()
        if args.admin_email:
            db = SessionLocal()
            try:
                ensure_admin(db, args.admin_email, args.admin_password, args.admin_name)
            finally:
                db.close()
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        print(f"Error during database initialization: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
