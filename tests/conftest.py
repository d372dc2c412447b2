"""
Pytest configuration and shared fixtures.

pytest-asyncio runs in asyncio_mode = "auto" (configured in pyproject.toml).
"""

import os

# Set test environment variables before config.settings is imported anywhere
# Use .setdefault() to respect values already set by docker-compose or other sources
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_NAME", "test_account_notifications")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("LOG_LEVEL", "ERROR")
os.environ.setdefault("TOPIC_PARTITIONS", "3")
# Cheap hashes keep the suite fast
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402

from src.application.dispatch_notification import NotificationDispatcher  # noqa: E402
from src.application.notification_consumer import NotificationConsumer  # noqa: E402
from src.domain.events import EventKind  # noqa: E402
from src.infrastructure.messaging.wire import decode_login, decode_registration  # noqa: E402
from src.infrastructure.security.bcrypt_password_hasher import BcryptPasswordHasher  # noqa: E402
from tests.mocks.in_memory import (  # noqa: E402
    InMemoryAccountRepository,
    InMemoryNotificationStore,
    RecordingErrorReporter,
    RecordingEventPublisher,
    ScriptedEmailClient,
)

REGISTRATION_TOPIC = "user-confirmation-topic"
LOGIN_TOPIC = "user-login-topic"


@pytest.fixture
def account_repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def event_publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def record_store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture
def email_client() -> ScriptedEmailClient:
    return ScriptedEmailClient()


@pytest.fixture
def error_reporter() -> RecordingErrorReporter:
    return RecordingErrorReporter()


@pytest.fixture
def dispatcher(record_store, email_client, error_reporter) -> NotificationDispatcher:
    return NotificationDispatcher(
        record_store=record_store,
        email_client=email_client,
        error_reporter=error_reporter,
        store_timeout=1.0,
        email_timeout=1.0,
    )


@pytest.fixture
def consumer(dispatcher, error_reporter) -> NotificationConsumer:
    return NotificationConsumer(
        dispatcher=dispatcher,
        decoders={
            REGISTRATION_TOPIC: (EventKind.REGISTRATION, decode_registration),
            LOGIN_TOPIC: (EventKind.LOGIN, decode_login),
        },
        error_reporter=error_reporter,
    )
