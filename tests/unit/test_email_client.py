"""Unit tests for the mail relay client"""

import json
import uuid
import httpx
import pytest
from datetime import datetime
from decimal import Decimal
from fleet_deductions.domain.exceptions import EmailDeliveryError
from fleet_deductions.domain.models import NotificationDriver, PenaltyNotification, PenaltySummary
from fleet_deductions.infrastructure.clients.email import EmailClient

RELAY_URL = "https://mail.fleet.test/v1/messages"


@pytest.fixture
def notification() -> PenaltyNotification:
    return PenaltyNotification(
        penalty=PenaltySummary(
            id=uuid.uuid4(),
            name="Late Pickup",
            description=None,
            amount=Decimal("100"),
            category="OPERATIONAL",
            severity="MEDIUM",
        ),
        driver=NotificationDriver(
            id=uuid.uuid4(),
            first_name="Ravi",
            last_name="Kumar",
            driver_code="DRV-001",
            phone=None,
            email="ravi@fleet.test",
            franchise_id=None,
        ),
        amount=Decimal("100"),
        timestamp=datetime(2026, 3, 1, 9, 30),
    )


async def test_send_penalty_notification_posts_to_relay(notification):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202, json={"id": "msg_1"})

    client = EmailClient(
        api_url=RELAY_URL, api_key="secret", sender="alerts@fleet.test", transport=httpx.MockTransport(handler)
    )

    assert await client.send_penalty_notification("admin@fleet.test", notification) is True

    assert len(requests) == 1
    assert requests[0].headers["Authorization"] == "Bearer secret"
    body = json.loads(requests[0].content)
    assert body["from"] == "alerts@fleet.test"
    assert body["to"] == "admin@fleet.test"
    assert body["subject"] == "Penalty Applied: Late Pickup - DRV-001"
    assert body["context"]["driver"]["driver_code"] == "DRV-001"


async def test_send_penalty_notification_unconfigured_skips(notification):
    client = EmailClient(api_url="")

    assert client.is_configured is False
    assert await client.send_penalty_notification("admin@fleet.test", notification) is False


async def test_send_retries_then_succeeds(notification):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 2:
            return httpx.Response(503)
        return httpx.Response(202)

    client = EmailClient(api_url=RELAY_URL, transport=httpx.MockTransport(handler))
    client.backoff_base = 0

    assert await client.send_penalty_notification("admin@fleet.test", notification) is True
    assert len(attempts) == 2
    assert "Authorization" not in attempts[0].headers


async def test_send_raises_after_max_retries(notification):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500)

    client = EmailClient(api_url=RELAY_URL, transport=httpx.MockTransport(handler))
    client.backoff_base = 0
    client.max_retries = 3

    with pytest.raises(EmailDeliveryError, match="failed after 3 attempts"):
        await client.send_penalty_notification("admin@fleet.test", notification)

    assert len(attempts) == 3
