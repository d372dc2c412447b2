"""
Application configuration settings.

Centralized configuration using Pydantic Settings for type safety and validation.

Decision: Both services (the account API and the notification consumer) read
the same Settings class. Producer and consumer must agree on topics, partition
count and the timestamp offset convention, so those live in one place.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "account-notifications"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "account_notifications"
    database_user: str = "postgres"
    database_password: str = "postgres"

    # Celery (message broker transport)
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"
    celery_task_serializer: str = "json"
    celery_accept_content: list[str] = ["json"]
    celery_timezone: str = "UTC"
    celery_enable_utc: bool = True
    celery_task_acks_late: bool = True
    celery_task_reject_on_worker_lost: bool = True
    # One message in flight per worker keeps partition order strict
    celery_worker_prefetch_multiplier: int = 1
    celery_worker_max_tasks_per_child: int = 1000

    # Topics
    registration_topic: str = "user-confirmation-topic"
    login_topic: str = "user-login-topic"
    consumer_group: str = "user-group"
    topic_partitions: int = 3

    # Redelivery policy (owned by the broker integration, not the dispatcher)
    redelivery_max_retries: int = 5
    redelivery_backoff_max_seconds: int = 600
    redelivery_jitter: bool = True

    # Timeouts
    publish_timeout_seconds: float = 5.0
    store_timeout_seconds: float = 5.0
    email_timeout_seconds: float = 10.0

    # Wire format: timestamps carry no offset, both sides render them in this zone
    event_timezone: str = "UTC"

    # Security
    verification_code_ttl_minutes: int = 5
    bcrypt_rounds: int = 12
    min_password_length: int = 8

    # Email Service (SMTP)
    smtp_host: str = "mailhog"
    smtp_port: int = 1025
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from_email: str = "noreply@example.com"
    smtp_use_tls: bool = False


# Global settings instance
settings = Settings()
