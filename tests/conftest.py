import os
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.engine import make_url

DEFAULT_TEST_DB_URL = f"sqlite:///{Path(tempfile.gettempdir()) / 'session_auth_test.db'}"
TEST_DB_URL = os.getenv("TEST_DB_URL", DEFAULT_TEST_DB_URL)
TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PASSWORD = "Secret123!"

os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["ENV"] = "test"
for _key in ("ADMIN_USERNAME", "ADMIN_PASSWORD", "ADMIN_EMAIL"):
    os.environ.pop(_key, None)

from sqlmodel import Session  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.security import get_token_config, reset_security_config  # noqa: E402
from app.db.init_db import init_db  # noqa: E402
from app.db.session import engine  # noqa: E402
from app.models.enums import UserRole  # noqa: E402
from app.services.user_directory import UserDirectory  # noqa: E402

settings.DATABASE_URL = TEST_DB_URL
settings.JWT_SECRET = TEST_JWT_SECRET


def _ensure_mysql_database(url: str) -> None:
    parsed_url = make_url(url)
    if not parsed_url.drivername.startswith("mysql"):
        return
    database = parsed_url.database
    if not database:
        raise RuntimeError("TEST_DB_URL must include a database name.")
    test_engine = create_engine(parsed_url, pool_pre_ping=True)
    try:
        with test_engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            return
    except OperationalError as exc:
        if "Unknown database" not in str(exc):
            raise
    finally:
        test_engine.dispose()

    admin_url = os.getenv("TEST_DB_ADMIN_URL")
    if not admin_url:
        raise RuntimeError(f"database {database!r} does not exist and TEST_DB_ADMIN_URL is not set")
    admin_engine = create_engine(admin_url, pool_pre_ping=True)
    with admin_engine.connect() as connection:
        connection.execute(
            text(
                f"CREATE DATABASE IF NOT EXISTS `{database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
        )
    admin_engine.dispose()


@pytest.fixture(autouse=True, scope="session")
def _configure_test_database():
    _ensure_mysql_database(TEST_DB_URL)
    yield


@pytest.fixture(autouse=True)
def _reset_state():
    reset_security_config()
    init_db(drop_all=True)
    yield
    reset_security_config()


@pytest.fixture
def session():
    with Session(engine) as db:
        yield db


@pytest.fixture
def token_config():
    return get_token_config()


@pytest.fixture
def make_user(session):
    def _make(
        username: str = "alice",
        password: str = TEST_PASSWORD,
        *,
        email: str = None,
        full_name: str = "Alice Doe",
        roles=(UserRole.USER,),
        email_confirmed: bool = True,
    ):
        return UserDirectory(session).create_user(
            username=username,
            email=email or f"{username}@example.com",
            password=password,
            full_name=full_name,
            roles=roles,
            email_confirmed=email_confirmed,
        )

    return _make
