"""Data access layer for penalties, drivers, ledger entries and audit logs"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload
from fleet_deductions.infrastructure.database.models import (
    ActivityLog,
    Driver,
    DriverTransaction,
    Penalty,
    Trip,
    User,
)
from fleet_deductions.domain.enums import LedgerEntryType, UserRole
from fleet_deductions.domain.models import PenaltyFilters


class PenaltyRepository:
    """Repository for penalty rule definitions"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> Penalty:
        db_penalty = Penalty(**fields)
        self.db.add(db_penalty)
        self.db.flush()
        return db_penalty

    def get_by_id(self, penalty_id: uuid.UUID) -> Optional[Penalty]:
        return self.db.query(Penalty).filter(Penalty.id == penalty_id).first()

    def exists_by_name(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        """Case-insensitive name lookup, optionally ignoring one penalty"""
        query = self.db.query(Penalty.id).filter(func.lower(Penalty.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.filter(Penalty.id != exclude_id)
        return query.first() is not None

    def update(self, penalty: Penalty, changes: Dict[str, Any]) -> Penalty:
        for key, value in changes.items():
            setattr(penalty, key, value)
        self.db.flush()
        return penalty

    def list(self, filters: PenaltyFilters) -> List[Penalty]:
        """Filter by exact-match fields and free-text search, newest first"""
        query = self.db.query(Penalty)

        equality = [
            (Penalty.category, filters.category),
            (Penalty.severity, filters.severity),
            (Penalty.type, filters.type),
            (Penalty.is_active, filters.is_active),
            (Penalty.is_automatic, filters.is_automatic),
            (Penalty.trigger_type, filters.trigger_type),
        ]
        for column, value in equality:
            if value is not None:
                query = query.filter(column == getattr(value, "value", value))

        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(Penalty.name).like(pattern),
                    func.lower(func.coalesce(Penalty.description, "")).like(pattern),
                )
            )

        return query.order_by(Penalty.created_at.desc()).all()

    def get_active(self) -> List[Penalty]:
        return self.db.query(Penalty).filter(Penalty.is_active.is_(True)).order_by(Penalty.name.asc()).all()

    def find_automatic_by_trigger_type(self, trigger_type: str) -> Optional[Penalty]:
        return (
            self.db.query(Penalty)
            .filter(
                Penalty.trigger_type == trigger_type,
                Penalty.is_active.is_(True),
                Penalty.is_automatic.is_(True),
            )
            .order_by(Penalty.created_at.asc())
            .first()
        )


class DriverRepository:
    """Repository for drivers"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, driver_id: uuid.UUID) -> Optional[Driver]:
        return (
            self.db.query(Driver)
            .options(joinedload(Driver.franchise))
            .filter(Driver.id == driver_id)
            .first()
        )

    def get_for_update(self, driver_id: uuid.UUID) -> Optional[Driver]:
        """Fetch driver with a row lock held until commit/rollback"""
        return self.db.query(Driver).filter(Driver.id == driver_id).with_for_update().first()


class TripRepository:
    """Repository for trips referenced by ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, trip_id: uuid.UUID) -> Optional[Trip]:
        return self.db.query(Trip).filter(Trip.id == trip_id).first()


class TransactionRepository:
    """Repository for the append-only driver ledger"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        driver_id: uuid.UUID,
        amount,
        transaction_type: str,
        type: str,
        description: Optional[str],
        trip_id: Optional[uuid.UUID],
        penalty_id: Optional[uuid.UUID],
        applied_by: Optional[uuid.UUID],
        details: Optional[Dict[str, Any]],
    ) -> DriverTransaction:
        db_transaction = DriverTransaction(
            driver_id=driver_id,
            amount=amount,
            transaction_type=transaction_type,
            type=type,
            description=description,
            trip_id=trip_id,
            penalty_id=penalty_id,
            applied_by=applied_by,
            details=details,
        )
        self.db.add(db_transaction)
        self.db.flush()  # Get ID without committing
        return db_transaction

    def get_penalty_history(
        self,
        driver_id: uuid.UUID,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[DriverTransaction]:
        """Penalty ledger rows for a driver within optional bounds, newest first"""
        query = (
            self.db.query(DriverTransaction)
            .options(
                joinedload(DriverTransaction.penalty),
                joinedload(DriverTransaction.applied_by_user),
                joinedload(DriverTransaction.trip),
            )
            .filter(
                DriverTransaction.driver_id == driver_id,
                DriverTransaction.type == LedgerEntryType.PENALTY.value,
            )
        )
        if start_date is not None:
            query = query.filter(DriverTransaction.created_at >= start_date)
        if end_date is not None:
            query = query.filter(DriverTransaction.created_at <= end_date)

        return query.order_by(DriverTransaction.created_at.desc(), DriverTransaction.id.desc()).all()


class ActivityLogRepository:
    """Repository for audit records"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> ActivityLog:
        db_log = ActivityLog(**fields)
        self.db.add(db_log)
        self.db.flush()
        return db_log

    def get_by_driver(self, driver_id: uuid.UUID) -> List[ActivityLog]:
        return (
            self.db.query(ActivityLog)
            .filter(ActivityLog.driver_id == driver_id)
            .order_by(ActivityLog.created_at.desc())
            .all()
        )


class UserRepository:
    """Repository for staff users"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_active_admins(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == UserRole.ADMIN.value, User.is_active.is_(True))
            .all()
        )

    def get_active_managers(self, franchise_id: Optional[uuid.UUID]) -> List[User]:
        if franchise_id is None:
            return []
        return (
            self.db.query(User)
            .filter(
                User.role == UserRole.MANAGER.value,
                User.franchise_id == franchise_id,
                User.is_active.is_(True),
            )
            .all()
        )
