# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Startup bootstrap: create the tables and make sure a default admin exists.

Both steps are idempotent and run on every application start; the admin
step is also exposed through ``bin/seed_admin.py``.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import settings
from core.logger import logger
from core.query_builder import execute, insert_statement
from core.security import hash_password
from core.validation import generate_password
from database import SessionLocal, create_tables
from models.user import USER, User


def ensure_default_admin(db: Session) -> bool:
    """
    Insert the configured admin unless a user with that login (or email)
    already exists.  Returns True when a row was created.

    With no FIRST_ADMIN_PASSWORD configured a random password is generated
    and logged once, so the operator can sign in and change it.
    """
    login = settings.first_admin_login.lower()
    email = settings.first_admin_email.lower()

    existing = (
        db.query(User)
        .filter((func.lower(User.login) == login) | (func.lower(User.email) == email))
        .first()
    )
    if existing:
        logger.info("Default admin '%s' already exists – skipping", login)
        return False

    password = settings.first_admin_password
    if not password:
        password = generate_password()
        logger.warning("No FIRST_ADMIN_PASSWORD configured; generated password for '%s': %s", login, password)

    stmt = insert_statement(
        USER,
        {
            "type": "admin",
            "login": login,
            "email": email,
            "password": hash_password(password),
            "user_name": settings.first_admin_user_name,
            "active": True,
        },
    )
    execute(db, stmt, conflict_message="Default admin already exists")
    logger.info("Default admin '%s' created", login)
    return True


def init_db() -> None:
    create_tables()
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
