"""
pytest fixtures for integration tests.

Integration tests use:
- FastAPI's TestClient (in-process, no Docker needed)
- Dependency overrides to inject RecordingEventPublisher instead of Celery
- Real database connection
- Automatic cleanup between tests

Decision: Tests are skipped, not failed, when Postgres is unreachable, so
the unit suite can run on a laptop with nothing else started.
"""

import os

import asyncpg
import pytest
from fastapi.testclient import TestClient

from src.infrastructure.database.connection import DatabaseConnection
from src.main import app
from src.presentation.dependencies import get_event_publisher
from tests.mocks.in_memory import RecordingEventPublisher

# Database configuration for test cleanup
DB_CONFIG = {
    "host": os.getenv("DATABASE_HOST", "localhost"),
    "port": int(os.getenv("DATABASE_PORT", "5432")),
    "database": os.getenv("DATABASE_NAME", "account_notifications"),
    "user": os.getenv("DATABASE_USER", "postgres"),
    "password": os.getenv("DATABASE_PASSWORD", "postgres"),
}


async def _connect() -> asyncpg.Connection:
    return await asyncpg.connect(**DB_CONFIG, timeout=2)


@pytest.fixture(autouse=True)
async def clean_database_before_test():
    """
    Clean database before each test.

    Decision: autouse=True means this runs automatically for every test.
    """
    try:
        conn = await _connect()
    except (OSError, TimeoutError, asyncpg.PostgresError) as e:
        pytest.skip(f"Postgres not available: {e}")

    try:
        await conn.execute("TRUNCATE TABLE accounts, notification")
    except asyncpg.UndefinedTableError:
        # First run: the API lifespan creates the schema
        pass
    finally:
        await conn.close()

    yield


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def api_client(event_publisher: RecordingEventPublisher):
    """
    Create FastAPI TestClient with the broker publisher overridden.

    Decision: Using TestClient as a context manager ensures the app's
    lifespan events (startup/shutdown) are triggered, which initializes
    the database connection pool and schema.
    """
    app.dependency_overrides[get_event_publisher] = lambda: event_publisher

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def db_connection():
    """Provide direct database connection for assertions."""
    conn = await _connect()
    yield conn
    await conn.close()


@pytest.fixture
def register_account(api_client):
    """Returns a function that registers an account and returns the response."""

    def _register(email: str, password: str):
        return api_client.post(
            "/api/v1/accounts/register", json={"email": email, "password": password}
        )

    return _register


@pytest.fixture
def get_code_from_publisher(event_publisher: RecordingEventPublisher):
    """Returns a function giving the latest verification code published for an email."""

    def _get_code(email: str) -> str:
        codes = [m.event.code for m in event_publisher.messages if m.event.email == email]
        assert codes, f"No registration event for {email}: {event_publisher.messages}"
        return codes[-1]

    return _get_code


@pytest.fixture
async def database():
    """A DatabaseConnection pool with the schema in place and no notification rows."""
    db = DatabaseConnection(
        host=DB_CONFIG["host"],
        port=DB_CONFIG["port"],
        database=DB_CONFIG["database"],
        user=DB_CONFIG["user"],
        password=DB_CONFIG["password"],
        max_connections=2,
    )
    await db.connect()
    await db.init_schema()
    await db.execute("TRUNCATE TABLE notification")
    yield db
    await db.disconnect()
