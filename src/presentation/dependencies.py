"""
FastAPI dependency injection.

The glue that wires together our layers (domain, application, infrastructure).
Tests replace any of these with app.dependency_overrides.
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from config.settings import settings
from fastapi import Depends

from src.application.login_account import LoginAccountUseCase
from src.application.ports import EventPublisher, PasswordHasher
from src.application.register_account import RegisterAccountUseCase
from src.application.resend_verification_code import ResendVerificationCodeUseCase
from src.application.verify_account import VerifyAccountUseCase
from src.domain.events import EventKind
from src.infrastructure.database.connection import DatabaseConnection
from src.infrastructure.database.postgres_account_repository import PostgresAccountRepository
from src.infrastructure.security.bcrypt_password_hasher import BcryptPasswordHasher

logger = logging.getLogger(__name__)

CODE_TTL = timedelta(minutes=settings.verification_code_ttl_minutes)


@lru_cache
def get_database_connection() -> DatabaseConnection:
    """
    Get database connection instance (singleton).

    Decision: lru_cache keeps a single pool shared across the application.
    """
    logger.info(f"Creating database connection to host: {settings.database_host}")
    return DatabaseConnection.from_settings(settings)


def get_account_repository(
    db: Annotated[DatabaseConnection, Depends(get_database_connection)],
) -> PostgresAccountRepository:
    return PostgresAccountRepository(db)


@lru_cache
def get_event_publisher() -> EventPublisher:
    """
    Get the broker publisher (singleton).

    Imported lazily so the API process only touches Celery when it publishes.
    """
    from src.infrastructure.messaging.celery_publisher import CeleryEventPublisher
    from src.infrastructure.messaging.wire import resolve_zone
    from src.infrastructure.tasks.celery_config import TOPIC_TASKS, celery_app

    return CeleryEventPublisher(
        app=celery_app,
        topics={
            EventKind.REGISTRATION: settings.registration_topic,
            EventKind.LOGIN: settings.login_topic,
        },
        topic_tasks=TOPIC_TASKS,
        partitions=settings.topic_partitions,
        zone=resolve_zone(settings.event_timezone),
        publish_timeout=settings.publish_timeout_seconds,
    )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


def get_register_account_use_case(
    repository: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> RegisterAccountUseCase:
    return RegisterAccountUseCase(
        repository,
        publisher,
        hasher,
        min_password_length=settings.min_password_length,
        code_ttl=CODE_TTL,
    )


def get_login_account_use_case(
    repository: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> LoginAccountUseCase:
    return LoginAccountUseCase(repository, publisher, hasher)


def get_verify_account_use_case(
    repository: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
) -> VerifyAccountUseCase:
    return VerifyAccountUseCase(repository)


def get_resend_verification_code_use_case(
    repository: Annotated[PostgresAccountRepository, Depends(get_account_repository)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> ResendVerificationCodeUseCase:
    return ResendVerificationCodeUseCase(repository, publisher, code_ttl=CODE_TTL)
