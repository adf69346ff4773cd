"""Prometheus metrics for monitoring deductions, driver blocks and notification delivery"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Deduction metrics
deduction_counter = Counter(
    "fleet_deductions_applied_total",
    "Total deductions applied to driver ledgers",
    ["category", "severity"],
)

deduction_amount_histogram = Histogram(
    "fleet_deduction_amount",
    "Deducted amount per ledger entry",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000],
)

driver_status_change_counter = Counter(
    "fleet_driver_status_changes_total",
    "Driver status transitions",
    ["new_status"],  # BLOCKED | ACTIVE
)

# Notification metrics
notification_counter = Counter(
    "fleet_penalty_notifications_total",
    "Penalty notification emails by outcome",
    ["outcome"],  # sent | failed
)

email_latency_histogram = Histogram(
    "email_relay_latency_seconds",
    "Mail relay response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_deduction(category: str, severity: str, amount: Decimal) -> None:
    """Record a deduction for volume and amount distribution"""
    deduction_counter.labels(category=category, severity=severity).inc()
    deduction_amount_histogram.observe(float(amount))


def record_status_change(new_status: str) -> None:
    driver_status_change_counter.labels(new_status=new_status).inc()


def record_notification(sent: bool) -> None:
    notification_counter.labels(outcome="sent" if sent else "failed").inc()
