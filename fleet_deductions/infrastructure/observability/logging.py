"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from fleet_deductions.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_deduction(
    driver_code: str,
    penalty_name: str,
    amount: Decimal,
    previous_incentive: Decimal,
    new_incentive: Decimal,
    applied_by: Optional[str],
) -> None:
    """Log structured deduction outcome for auditing"""
    logging.info(
        "Deduction applied",
        extra={
            "step": "deduction_applied",
            "driver_code": driver_code,
            "penalty_name": penalty_name,
            "amount": str(amount),
            "previous_incentive": str(previous_incentive),
            "new_incentive": str(new_incentive),
            "applied_by": applied_by,
        },
    )


def log_status_change(driver_code: str, previous_status: str, new_status: str, reason: str) -> None:
    """Blocks are logged at WARNING, every other transition at INFO"""
    level = logging.WARNING if new_status == "BLOCKED" else logging.INFO
    logging.log(
        level,
        f"Driver status changed: {driver_code} {previous_status} -> {new_status}",
        extra={
            "step": "driver_status_changed",
            "driver_code": driver_code,
            "previous_status": previous_status,
            "new_status": new_status,
            "reason": reason,
        },
    )
