# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the tables and the default admin user.

The application does the same on every startup; run this when you want the
admin in place before the first start (e.g. right after the migration):
    python bin/seed_admin.py

The script reads FIRST_ADMIN_LOGIN, FIRST_ADMIN_EMAIL and
FIRST_ADMIN_PASSWORD from etc/app.conf.  With no password configured a
random one is generated and written to the log.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.bootstrap import ensure_default_admin   # noqa: E402
from core.config import settings                  # noqa: E402
from database import SessionLocal, create_tables  # noqa: E402


def seed() -> int:
    create_tables()
    db = SessionLocal()
    try:
        if ensure_default_admin(db):
            print(f"[seed_admin] Admin '{settings.first_admin_login}' created successfully.")
        else:
            print(f"[seed_admin] Admin '{settings.first_admin_login}' already exists – skipping.")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(seed())
