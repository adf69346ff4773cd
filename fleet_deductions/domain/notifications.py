"""Rendering of penalty notification emails"""

from html import escape
from typing import Tuple

from fleet_deductions.domain.models import PenaltyNotification
from fleet_deductions.utils.money import format_amount


def render_subject(notification: PenaltyNotification) -> str:
    return f"Penalty Applied: {notification.penalty.name} - {notification.driver.driver_code}"


def render_penalty_email(notification: PenaltyNotification, currency_symbol: str = "") -> Tuple[str, str, str]:
    """
    Build the subject, plain-text and HTML bodies for a penalty notification.

    The same content goes to admins, managers and the driver; recipients are
    not addressed by name.

    Returns:
        (subject, text, html)
    """
    driver = notification.driver
    penalty = notification.penalty
    amount = format_amount(notification.amount, currency_symbol)
    reason = notification.reason or penalty.description or f"Penalty: {penalty.name}"
    applied_by = notification.applied_by.full_name if notification.applied_by else "System"
    when = notification.timestamp.strftime("%Y-%m-%d %H:%M")

    rows = [
        ("Driver", f"{driver.full_name} ({driver.driver_code})"),
        ("Penalty", penalty.name),
        ("Category", penalty.category),
        ("Severity", penalty.severity),
        ("Amount deducted", amount),
        ("Reason", reason),
        ("Applied by", applied_by),
        ("Applied at", when),
    ]
    if notification.trip_id:
        rows.append(("Trip", str(notification.trip_id)))

    text_lines = ["A penalty has been applied.", ""]
    text_lines += [f"{label}: {value}" for label, value in rows]
    text_lines += ["", "This is an automated message. Please do not reply to this email."]
    text = "\n".join(text_lines)

    html_rows = "".join(
        f"<tr><th align=\"left\">{escape(label)}</th><td>{escape(value)}</td></tr>" for label, value in rows
    )
    html = (
        "<html><body>"
        "<h2>A penalty has been applied</h2>"
        f"<table>{html_rows}</table>"
        "<p><small>This is an automated message. Please do not reply to this email.</small></p>"
        "</body></html>"
    )

    return render_subject(notification), text, html
