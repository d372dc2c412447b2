"""
Integration tests for the account registration endpoint.

Tests /api/v1/accounts/register with:
- Real FastAPI application (TestClient)
- Real database connection
- RecordingEventPublisher (no broker needed)
"""

import json
import re

from src.application.exceptions import PublishError, PublishErrorKind


def test_successful_account_registration(api_client, event_publisher):
    response = api_client.post(
        "/api/v1/accounts/register",
        json={"email": "test@example.com", "password": "SecurePass123"},
    )

    assert response.status_code == 201, f"Expected 201, got {response.status_code}: {response.text}"

    data = response.json()
    assert re.match(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", data["id"]
    ), f"Invalid UUID format: {data['id']}"
    assert data["email"] == "test@example.com"
    assert data["is_verified"] is False

    (message,) = event_publisher.messages
    body = json.loads(message.payload)
    assert message.topic == "user-confirmation-topic"
    assert body["userId"] == data["id"]
    assert body["email"] == "test@example.com"
    assert len(body["verificationCode"]) >= 10


async def test_registration_persists_the_code_on_file(
    api_client, event_publisher, db_connection
):
    api_client.post(
        "/api/v1/accounts/register",
        json={"email": "test@example.com", "password": "SecurePass123"},
    )

    row = await db_connection.fetchrow(
        "SELECT verification_code, is_verified FROM accounts WHERE email = $1",
        "test@example.com",
    )

    assert row is not None
    assert row["is_verified"] is False
    assert row["verification_code"] == event_publisher.messages[0].event.code


def test_registration_with_duplicate_email(register_account, event_publisher):
    assert register_account("existing@example.com", "Pass123First").status_code == 201

    response = register_account("existing@example.com", "Pass123Second")

    assert response.status_code == 409, f"Expected 409, got {response.status_code}: {response.text}"
    assert response.json()["detail"]["error"] == "AccountAlreadyExists"
    assert len(event_publisher.messages) == 1


def test_registration_with_invalid_email(api_client):
    response = api_client.post(
        "/api/v1/accounts/register",
        json={"email": "invalid-email", "password": "SecurePass123"},
    )

    assert response.status_code == 400, f"Expected 400, got {response.status_code}: {response.text}"


def test_email_normalization_to_lowercase(api_client, event_publisher):
    response = api_client.post(
        "/api/v1/accounts/register",
        json={"email": "Test@Example.COM", "password": "SecurePass123"},
    )

    assert response.status_code == 201
    assert response.json()["email"] == "test@example.com"
    assert event_publisher.messages[0].event.email == "test@example.com"


async def test_unpublished_registration_is_rolled_back(
    api_client, event_publisher, db_connection
):
    event_publisher.fail_with = PublishError(PublishErrorKind.UNAVAILABLE, "broker down")

    response = api_client.post(
        "/api/v1/accounts/register",
        json={"email": "test@example.com", "password": "SecurePass123"},
    )

    assert response.status_code == 503
    count = await db_connection.fetchval("SELECT COUNT(*) FROM accounts")
    assert count == 0
