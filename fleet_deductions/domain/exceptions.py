"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PenaltyNotFoundError(DomainException):
    """No penalty rule exists with the requested id"""

    pass


class DriverNotFoundError(DomainException):
    """No driver exists with the requested id"""

    pass


class PenaltyInactiveError(DomainException):
    """Penalty exists but has been deactivated"""

    pass


class PenaltyAlreadyExistsError(DomainException):
    """Another penalty already uses this name (case-insensitive)"""

    pass


class InvalidTriggerConfigError(DomainException):
    """Trigger configuration does not match the penalty's trigger type"""

    pass


class EmailDeliveryError(DomainException):
    """Mail relay rejected the message or is unreachable"""

    pass


class TripNotFoundError(DomainException):
    """No trip exists with the referenced id"""

    pass


class InvalidPenaltyError(DomainException):
    """Penalty fields fail validation (e.g. a blank name)"""

    pass
