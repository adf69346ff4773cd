"""Unit tests for trigger configs, money helpers and notification rendering"""

import uuid
import pytest
from datetime import datetime
from decimal import Decimal
from fleet_deductions.domain.exceptions import InvalidTriggerConfigError
from fleet_deductions.domain.models import (
    ComplaintsTriggerConfig,
    LateReportTriggerConfig,
    NotificationActor,
    NotificationDriver,
    PenaltyNotification,
    PenaltySummary,
    parse_trigger_config,
    trigger_config_to_dict,
)
from fleet_deductions.domain.notifications import render_penalty_email
from fleet_deductions.utils.money import format_amount, quantize, to_decimal


def test_parse_trigger_config_late_report():
    config = parse_trigger_config("LATE_REPORT", {"delay_minutes": 5})

    assert config == LateReportTriggerConfig(delay_minutes=5)
    assert trigger_config_to_dict(config) == {"delay_minutes": 5}


def test_parse_trigger_config_complaints():
    assert parse_trigger_config("COMPLAINTS", {"complaint_count": 3}) == ComplaintsTriggerConfig(complaint_count=3)


def test_parse_trigger_config_manual_has_no_config():
    assert parse_trigger_config("MANUAL", None) is None
    assert trigger_config_to_dict(None) is None


@pytest.mark.parametrize(
    "trigger_type,raw",
    [
        ("MANUAL", {"delay_minutes": 5}),
        ("LATE_REPORT", None),
        ("LATE_REPORT", {}),
        ("LATE_REPORT", {"complaint_count": 3}),
        ("LATE_REPORT", {"delay_minutes": 0}),
        ("LATE_REPORT", {"delay_minutes": "5"}),
        ("COMPLAINTS", {"complaint_count": True}),
        ("COMPLAINTS", {"complaint_count": 3, "window_days": 7}),
    ],
)
def test_parse_trigger_config_rejects_mismatched_config(trigger_type, raw):
    with pytest.raises(InvalidTriggerConfigError):
        parse_trigger_config(trigger_type, raw)


def test_to_decimal():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(7) == Decimal("7")


def test_quantize_rounds_half_up():
    assert quantize(Decimal("1.005")) == Decimal("1.01")
    assert quantize(Decimal("2")) == Decimal("2.00")


def test_format_amount():
    assert format_amount(Decimal("1250"), "₹") == "₹1,250.00"
    assert format_amount(Decimal("-50.5"), "₹") == "-₹50.50"
    assert format_amount(Decimal("100")) == "100.00"


def _notification(**overrides) -> PenaltyNotification:
    fields = dict(
        penalty=PenaltySummary(
            id=uuid.uuid4(),
            name="Late Pickup",
            description="Late to pickup",
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
    fields.update(overrides)
    return PenaltyNotification(**fields)


def test_render_penalty_email_contents():
    actor = NotificationActor(id=uuid.uuid4(), full_name="Asha Admin", email="admin@fleet.test")
    trip_id = uuid.uuid4()

    subject, text, html = render_penalty_email(
        _notification(reason="Arrived 20 minutes late", applied_by=actor, trip_id=trip_id), "₹"
    )

    assert subject == "Penalty Applied: Late Pickup - DRV-001"
    assert text.startswith("A penalty has been applied.")
    assert "Driver: Ravi Kumar (DRV-001)" in text
    assert "Amount deducted: ₹100.00" in text
    assert "Reason: Arrived 20 minutes late" in text
    assert "Applied by: Asha Admin" in text
    assert "Applied at: 2026-03-01 09:30" in text
    assert f"Trip: {trip_id}" in text
    assert "<table>" in html


def test_render_penalty_email_defaults():
    _, text, _ = render_penalty_email(_notification())

    assert "Reason: Late to pickup" in text
    assert "Applied by: System" in text
    assert "Trip:" not in text


def test_render_penalty_email_escapes_html():
    _, _, html = render_penalty_email(_notification(reason="<script>alert(1)</script>"))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_notification_to_dict_is_json_ready():
    payload = _notification().to_dict()

    assert payload["amount"] == "100"
    assert payload["driver"]["name"] == "Ravi Kumar"
    assert payload["applied_by"] is None
    assert payload["timestamp"] == "2026-03-01T09:30:00"
