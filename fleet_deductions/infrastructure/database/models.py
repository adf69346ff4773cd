"""SQLAlchemy ORM models for the penalty catalog, driver ledger and audit trail"""

import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from fleet_deductions.domain.enums import (
    DriverStatus,
    PenaltyCategory,
    PenaltySeverity,
    PenaltyTriggerType,
    PenaltyType,
)

Base = declarative_base()

Money = Numeric(12, 2)


class Franchise(Base):
    """Franchise owning drivers and managers"""

    __tablename__ = "franchises"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    drivers = relationship("Driver", back_populates="franchise")
    users = relationship("User", back_populates="franchise")


class User(Base):
    """Staff account (admin, manager, ...) acting on drivers"""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(Text, nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(32), nullable=False, index=True)
    franchise_id = Column(UUID(as_uuid=True), ForeignKey("franchises.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    franchise = relationship("Franchise", back_populates="users")


class Driver(Base):
    """Driver with a running incentive balance"""

    __tablename__ = "drivers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    driver_code = Column(String(32), nullable=False, unique=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False, default="")
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    franchise_id = Column(UUID(as_uuid=True), ForeignKey("franchises.id"), nullable=True, index=True)
    status = Column(String(32), nullable=False, default=DriverStatus.ACTIVE.value)
    incentive = Column(Money, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    franchise = relationship("Franchise", back_populates="drivers")
    transactions = relationship("DriverTransaction", back_populates="driver")
    activity_logs = relationship("ActivityLog", back_populates="driver")


class Trip(Base):
    """Trip a deduction may reference"""

    __tablename__ = "trips"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=True, index=True)
    customer_name = Column(Text, nullable=False)
    pickup_location = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Penalty(Base):
    """Penalty rule definition. Never deleted; deactivated via is_active"""

    __tablename__ = "penalties"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    amount = Column(Money, nullable=False)
    type = Column(String(32), nullable=False, default=PenaltyType.PENALTY.value)
    is_active = Column(Boolean, nullable=False, default=True)
    is_automatic = Column(Boolean, nullable=False, default=False)
    trigger_type = Column(String(32), nullable=False, default=PenaltyTriggerType.MANUAL.value)
    trigger_config = Column(JSON, nullable=True)
    category = Column(String(32), nullable=False, default=PenaltyCategory.OPERATIONAL.value)
    severity = Column(String(32), nullable=False, default=PenaltySeverity.MEDIUM.value)
    notify_admin = Column(Boolean, nullable=False, default=True)
    notify_manager = Column(Boolean, nullable=False, default=True)
    notify_driver = Column(Boolean, nullable=False, default=False)
    block_driver = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    transactions = relationship("DriverTransaction", back_populates="penalty")


class DriverTransaction(Base):
    """Append-only driver ledger entry. Deductions carry a negative amount"""

    __tablename__ = "driver_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    transaction_type = Column(String(16), nullable=False)
    type = Column(String(32), nullable=False, index=True)
    description = Column(Text, nullable=True)
    trip_id = Column(UUID(as_uuid=True), ForeignKey("trips.id"), nullable=True)
    penalty_id = Column(UUID(as_uuid=True), ForeignKey("penalties.id"), nullable=True)
    applied_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    driver = relationship("Driver", back_populates="transactions")
    penalty = relationship("Penalty", back_populates="transactions")
    applied_by_user = relationship("User")
    trip = relationship("Trip")

    @property
    def is_trip_linked(self) -> bool:
        return self.trip_id is not None

    @property
    def is_rule_based(self) -> bool:
        return self.penalty_id is not None

    @property
    def is_system_applied(self) -> bool:
        return self.applied_by is None


class ActivityLog(Base):
    """Append-only audit record of driver status changes"""

    __tablename__ = "activity_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(String(64), nullable=False)
    entity_type = Column(String(32), nullable=False)
    entity_id = Column(UUID(as_uuid=True), nullable=False)
    driver_id = Column(UUID(as_uuid=True), ForeignKey("drivers.id"), nullable=True, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    description = Column(Text, nullable=True)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    driver = relationship("Driver", back_populates="activity_logs")
