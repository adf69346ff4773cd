"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from fleet_deductions.domain.enums import PenaltyCategory, PenaltySeverity, PenaltyTriggerType, PenaltyType
from fleet_deductions.domain.exceptions import InvalidTriggerConfigError


def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidTriggerConfigError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class LateReportTriggerConfig:
    """Fires when a driver reports this many minutes late"""

    delay_minutes: int

    def __post_init__(self) -> None:
        _require_positive_int("delay_minutes", self.delay_minutes)


@dataclass(frozen=True)
class ComplaintsTriggerConfig:
    """Fires once a driver accumulates this many complaints"""

    complaint_count: int

    def __post_init__(self) -> None:
        _require_positive_int("complaint_count", self.complaint_count)


TriggerConfig = Union[LateReportTriggerConfig, ComplaintsTriggerConfig]

TRIGGER_CONFIG_TYPES = {
    PenaltyTriggerType.LATE_REPORT: LateReportTriggerConfig,
    PenaltyTriggerType.COMPLAINTS: ComplaintsTriggerConfig,
}


def parse_trigger_config(
    trigger_type: PenaltyTriggerType | str,
    raw: Optional[Dict[str, Any]],
) -> Optional[TriggerConfig]:
    """
    Validate a raw trigger config against its trigger type.

    MANUAL penalties carry no config; every other trigger type requires the
    matching config shape.

    Raises:
        InvalidTriggerConfigError: On a missing, unexpected or malformed config
    """
    trigger_type = PenaltyTriggerType(trigger_type)

    if trigger_type == PenaltyTriggerType.MANUAL:
        if raw:
            raise InvalidTriggerConfigError("MANUAL penalties do not accept a trigger config")
        return None

    if not raw:
        raise InvalidTriggerConfigError(f"{trigger_type.value} penalties require a trigger config")

    config_cls = TRIGGER_CONFIG_TYPES[trigger_type]
    try:
        return config_cls(**raw)
    except TypeError as e:
        raise InvalidTriggerConfigError(f"Invalid trigger config for {trigger_type.value}: {e}") from e


def trigger_config_to_dict(config: Optional[TriggerConfig]) -> Optional[Dict[str, Any]]:
    return asdict(config) if config is not None else None


@dataclass
class PenaltyFilters:
    """Equality filters plus free-text search for catalog listing"""

    category: Optional[PenaltyCategory] = None
    severity: Optional[PenaltySeverity] = None
    type: Optional[PenaltyType] = None
    is_active: Optional[bool] = None
    is_automatic: Optional[bool] = None
    trigger_type: Optional[PenaltyTriggerType] = None
    search: Optional[str] = None


@dataclass
class DeductionSnapshot:
    """State captured on the ledger row at the moment a deduction is applied"""

    penalty_name: str
    penalty_category: str
    penalty_severity: str
    previous_incentive: Decimal
    new_incentive: Decimal
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        # JSON columns cannot hold Decimal; keep exact values as strings
        return {
            "penalty_name": self.penalty_name,
            "penalty_category": self.penalty_category,
            "penalty_severity": self.penalty_severity,
            "previous_incentive": str(self.previous_incentive),
            "new_incentive": str(self.new_incentive),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class DeductionResult:
    """Output of applying a deduction"""

    transaction: Any  # DriverTransaction row
    previous_incentive: Decimal
    new_incentive: Decimal


@dataclass
class PenaltySummary:
    id: uuid.UUID
    name: str
    description: Optional[str]
    amount: Decimal
    category: str
    severity: str


@dataclass
class NotificationDriver:
    id: uuid.UUID
    first_name: str
    last_name: str
    driver_code: str
    phone: Optional[str]
    email: Optional[str]
    franchise_id: Optional[uuid.UUID]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class NotificationActor:
    id: uuid.UUID
    full_name: str
    email: str


@dataclass
class PenaltyNotification:
    """Payload handed to the email collaborator for every recipient"""

    penalty: PenaltySummary
    driver: NotificationDriver
    amount: Decimal
    reason: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    applied_by: Optional[NotificationActor] = None
    trip_id: Optional[uuid.UUID] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "penalty": {
                "id": str(self.penalty.id),
                "name": self.penalty.name,
                "description": self.penalty.description,
                "amount": str(self.penalty.amount),
                "category": self.penalty.category,
                "severity": self.penalty.severity,
            },
            "driver": {
                "id": str(self.driver.id),
                "name": self.driver.full_name,
                "driver_code": self.driver.driver_code,
                "phone": self.driver.phone,
                "email": self.driver.email,
                "franchise_id": str(self.driver.franchise_id) if self.driver.franchise_id else None,
            },
            "amount": str(self.amount),
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
            "applied_by": (
                {
                    "id": str(self.applied_by.id),
                    "full_name": self.applied_by.full_name,
                    "email": self.applied_by.email,
                }
                if self.applied_by
                else None
            ),
            "trip_id": str(self.trip_id) if self.trip_id else None,
        }
