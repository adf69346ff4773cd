"""Enumerations shared by the ORM, the services and the API schemas"""

from enum import Enum


class PenaltyType(str, Enum):
    PENALTY = "PENALTY"
    DEDUCTION = "DEDUCTION"


class PenaltyTriggerType(str, Enum):
    MANUAL = "MANUAL"
    LATE_REPORT = "LATE_REPORT"
    COMPLAINTS = "COMPLAINTS"


class PenaltyCategory(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    BEHAVIORAL = "BEHAVIORAL"
    SAFETY = "SAFETY"
    FINANCIAL = "FINANCIAL"


class PenaltySeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DriverStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"
    TERMINATED = "TERMINATED"


class TransactionType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class LedgerEntryType(str, Enum):
    PENALTY = "PENALTY"
    INCENTIVE = "INCENTIVE"
    ADJUSTMENT = "ADJUSTMENT"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"
    DRIVER = "DRIVER"


class ActivityAction(str, Enum):
    DRIVER_STATUS_CHANGED = "DRIVER_STATUS_CHANGED"


class ActivityEntityType(str, Enum):
    DRIVER = "DRIVER"
