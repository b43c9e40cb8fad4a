"""
Pytest configuration.

Environment variables are set before any application module is imported:
``core.config.settings`` is built once at import time and is frozen.
Each test gets a fresh in-memory SQLite database shared by the test session
and the app (StaticPool keeps a single connection alive).
"""

import base64
import io
import os
import struct
import zlib

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["FIRST_ADMIN_LOGIN"] = "admin"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "Admin123A"
os.environ["FIRST_ADMIN_USER_NAME"] = "Admin"

from typing import Generator, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.bootstrap import ensure_default_admin  # noqa: E402
from database import create_tables, get_db  # noqa: E402
from main import app  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin123A"


# ==================== Database fixtures ====================


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory) -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


# ==================== App fixtures ====================


@pytest.fixture()
def client(session_factory) -> Generator[TestClient, None, None]:
    """In-process TestClient with ``get_db`` bound to the test database."""

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, password: str, email: Optional[str] = None, login_name: Optional[str] = None) -> str:
    body = {"password": password}
    if email:
        body["email"] = email
    if login_name:
        body["login"] = login_name
    resp = client.post("/v1/auth/login", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()["payload"]["token"]


def register(client: TestClient, login_name: str, password: str, token: Optional[str] = None, **extra):
    body = {
        "login": login_name,
        "email": f"{login_name}@example.com",
        "password": password,
        "userName": login_name.title(),
    }
    body.update(extra)
    return client.post("/v1/auth/register", json=body, headers=auth(token) if token else {})


@pytest.fixture()
def admin_token(client, db_session) -> str:
    ensure_default_admin(db_session)
    return login(client, ADMIN_PASSWORD, email=ADMIN_EMAIL)


@pytest.fixture()
def user_token(client) -> str:
    resp = register(client, "alice", "Alice123")
    assert resp.status_code == 201, resp.text
    return login(client, "Alice123", email="alice@example.com")


@pytest.fixture()
def other_token(client) -> str:
    resp = register(client, "bob", "Bob12345")
    assert resp.status_code == 201, resp.text
    return login(client, "Bob12345", email="bob@example.com")


# ==================== Image fixtures ====================


def make_image(size=(10, 10), fmt="PNG", color="red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def b64_image(size=(10, 10), fmt="PNG") -> str:
    return base64.b64encode(make_image(size, fmt)).decode("ascii")


@pytest.fixture()
def png_b64() -> str:
    return b64_image()


def png_header_only(width: int, height: int) -> bytes:
    """A PNG that declares *width* x *height* but carries no pixel data."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")
