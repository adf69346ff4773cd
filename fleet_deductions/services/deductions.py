"""Deduction engine - applies penalties to driver ledgers, blocks drivers and notifies stakeholders"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fleet_deductions.domain.enums import (
    ActivityAction,
    ActivityEntityType,
    DriverStatus,
    LedgerEntryType,
    TransactionType,
)
from fleet_deductions.domain.exceptions import (
    DriverNotFoundError,
    PenaltyInactiveError,
    PenaltyNotFoundError,
    TripNotFoundError,
)
from fleet_deductions.domain.models import (
    DeductionResult,
    DeductionSnapshot,
    NotificationActor,
    NotificationDriver,
    PenaltyNotification,
    PenaltySummary,
)
from fleet_deductions.infrastructure.clients.email import EmailClient
from fleet_deductions.infrastructure.database.models import Driver, DriverTransaction, Penalty
from fleet_deductions.infrastructure.database.repositories import (
    ActivityLogRepository,
    DriverRepository,
    PenaltyRepository,
    TransactionRepository,
    TripRepository,
    UserRepository,
)
from fleet_deductions.infrastructure.observability.logging import log_deduction, log_status_change
from fleet_deductions.infrastructure.observability.metrics import (
    record_deduction,
    record_notification,
    record_status_change,
)
from fleet_deductions.utils.money import to_decimal

STATUS_VERBS = {
    DriverStatus.BLOCKED: "blocked",
    DriverStatus.ACTIVE: "unblocked",
}


def _block_reason(penalty: Penalty) -> str:
    return f"Automatic block due to: {penalty.name}"


class DeductionService:
    """Penalty deductions, driver status changes and penalty history for one session"""

    def __init__(self, db: Session, email_client: EmailClient):
        self.db = db
        self.email_client = email_client
        self.penalties = PenaltyRepository(db)
        self.drivers = DriverRepository(db)
        self.transactions = TransactionRepository(db)
        self.activity = ActivityLogRepository(db)
        self.users = UserRepository(db)
        self.trips = TripRepository(db)

    async def apply_deduction(
        self,
        penalty_id: uuid.UUID,
        driver_id: uuid.UUID,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
        trip_id: Optional[uuid.UUID] = None,
        applied_by: Optional[uuid.UUID] = None,
    ) -> DeductionResult:
        """
        Debit a driver's incentive balance for a penalty.

        Flow:
        1. Load the penalty; it must exist and be active
        2. Check the referenced trip, if any
        3. Lock and load the driver
        4. Deduct `amount` if given, otherwise the penalty's default amount
        5. Append a DEBIT ledger row and store the new balance
        6. Block the driver if the penalty says so and they are not blocked yet
        7. Commit steps 5-6 together
        8. Notify stakeholders (never fails the deduction)

        The balance has no floor; it may go negative. Repeated calls deduct
        repeatedly.

        Raises:
            PenaltyNotFoundError, PenaltyInactiveError, TripNotFoundError, DriverNotFoundError
        """
        penalty = self._get_applicable_penalty(penalty_id)

        if trip_id is not None and self.trips.get_by_id(trip_id) is None:
            raise TripNotFoundError(f"Trip not found with ID: {trip_id}")

        driver = self.drivers.get_for_update(driver_id)
        if driver is None:
            self.db.rollback()  # release the lock-taking transaction
            raise DriverNotFoundError(f"Driver not found with ID: {driver_id}")

        try:
            result, blocked_from = self._stage_deduction(penalty, driver, amount, reason, trip_id, applied_by)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        await self._finish_deduction(penalty, driver, result, blocked_from, reason, applied_by, trip_id)
        return result

    async def apply_deduction_to_drivers(
        self,
        penalty_id: uuid.UUID,
        driver_ids: List[uuid.UUID],
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
        applied_by: Optional[uuid.UUID] = None,
    ) -> List[DeductionResult]:
        """
        Apply one penalty to several drivers at once.

        Every driver is locked and checked before anything is written; one
        unknown id fails the whole call. All ledger rows, balances and
        automatic blocks commit together, then each driver's stakeholders
        are notified. Repeated ids are applied once.

        Raises:
            PenaltyNotFoundError, PenaltyInactiveError, DriverNotFoundError
        """
        penalty = self._get_applicable_penalty(penalty_id)

        drivers = []
        for driver_id in dict.fromkeys(driver_ids):
            driver = self.drivers.get_for_update(driver_id)
            if driver is None:
                self.db.rollback()
                raise DriverNotFoundError(f"Driver not found: {driver_id}")
            drivers.append(driver)

        staged = []
        try:
            for driver in drivers:
                result, blocked_from = self._stage_deduction(penalty, driver, amount, reason, None, applied_by)
                staged.append((driver, result, blocked_from))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info(
            "Penalty applied to multiple drivers",
            extra={"penalty_name": penalty.name, "count": len(staged)},
        )
        for driver, result, blocked_from in staged:
            await self._finish_deduction(penalty, driver, result, blocked_from, reason, applied_by, None)

        return [result for _, result, _ in staged]

    def _get_applicable_penalty(self, penalty_id: uuid.UUID) -> Penalty:
        penalty = self.penalties.get_by_id(penalty_id)
        if penalty is None:
            raise PenaltyNotFoundError(f"Penalty not found with ID: {penalty_id}")
        if not penalty.is_active:
            raise PenaltyInactiveError(f'Penalty "{penalty.name}" is not active')
        return penalty

    def _stage_deduction(
        self,
        penalty: Penalty,
        driver: Driver,
        amount: Optional[Decimal],
        reason: Optional[str],
        trip_id: Optional[uuid.UUID],
        applied_by: Optional[uuid.UUID],
    ) -> Tuple[DeductionResult, Optional[str]]:
        """
        Write the ledger row, new balance and any automatic block; the caller commits.

        Returns:
            (result, status the driver was blocked from, or None if no block happened)
        """
        deduction_amount = to_decimal(amount if amount is not None else penalty.amount)
        previous_incentive = to_decimal(driver.incentive)
        new_incentive = previous_incentive - deduction_amount

        snapshot = DeductionSnapshot(
            penalty_name=penalty.name,
            penalty_category=penalty.category,
            penalty_severity=penalty.severity,
            previous_incentive=previous_incentive,
            new_incentive=new_incentive,
            timestamp=datetime.now(timezone.utc),
        )

        transaction = self.transactions.create(
            driver_id=driver.id,
            amount=-deduction_amount,
            transaction_type=TransactionType.DEBIT.value,
            type=LedgerEntryType.PENALTY.value,
            description=reason or penalty.description or f"Penalty: {penalty.name}",
            trip_id=trip_id,
            penalty_id=penalty.id,
            applied_by=applied_by,
            details=snapshot.to_dict(),
        )
        driver.incentive = new_incentive

        blocked_from = None
        if penalty.block_driver and driver.status != DriverStatus.BLOCKED:
            blocked_from = driver.status
            self._change_status(driver, DriverStatus.BLOCKED, _block_reason(penalty), applied_by)

        result = DeductionResult(
            transaction=transaction,
            previous_incentive=previous_incentive,
            new_incentive=new_incentive,
        )
        return result, blocked_from

    async def _finish_deduction(
        self,
        penalty: Penalty,
        driver: Driver,
        result: DeductionResult,
        blocked_from: Optional[str],
        reason: Optional[str],
        applied_by: Optional[uuid.UUID],
        trip_id: Optional[uuid.UUID],
    ) -> None:
        """Post-commit logging, metrics and notifications for one driver"""
        deduction_amount = -result.transaction.amount
        log_deduction(
            driver.driver_code,
            penalty.name,
            deduction_amount,
            result.previous_incentive,
            result.new_incentive,
            str(applied_by) if applied_by else None,
        )
        record_deduction(penalty.category, penalty.severity, deduction_amount)
        if blocked_from is not None:
            log_status_change(driver.driver_code, blocked_from, DriverStatus.BLOCKED.value, _block_reason(penalty))
            record_status_change(DriverStatus.BLOCKED.value)

        if penalty.notify_admin or penalty.notify_manager or penalty.notify_driver:
            await self.send_notifications(penalty, driver, deduction_amount, reason, applied_by, trip_id)

    def block_driver(self, driver_id: uuid.UUID, reason: str, actor_id: Optional[uuid.UUID] = None) -> Driver:
        """Set status to BLOCKED regardless of the current status and audit it"""
        return self._set_status(driver_id, DriverStatus.BLOCKED, reason, actor_id)

    def unblock_driver(self, driver_id: uuid.UUID, reason: str, actor_id: Optional[uuid.UUID] = None) -> Driver:
        """Set status to ACTIVE regardless of the current status and audit it"""
        return self._set_status(driver_id, DriverStatus.ACTIVE, reason, actor_id)

    def _set_status(
        self,
        driver_id: uuid.UUID,
        new_status: DriverStatus,
        reason: str,
        actor_id: Optional[uuid.UUID],
    ) -> Driver:
        driver = self.drivers.get_by_id(driver_id)
        if driver is None:
            raise DriverNotFoundError(f"Driver not found with ID: {driver_id}")

        previous_status = driver.status
        try:
            self._change_status(driver, new_status, reason, actor_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        log_status_change(driver.driver_code, previous_status, new_status.value, reason)
        record_status_change(new_status.value)
        return driver

    def _change_status(
        self,
        driver: Driver,
        new_status: DriverStatus,
        reason: str,
        actor_id: Optional[uuid.UUID],
    ) -> None:
        """Mutate status and stage the audit row; the caller commits"""
        previous_status = driver.status
        driver.status = new_status.value
        self.activity.create(
            action=ActivityAction.DRIVER_STATUS_CHANGED.value,
            entity_type=ActivityEntityType.DRIVER.value,
            entity_id=driver.id,
            driver_id=driver.id,
            user_id=actor_id,
            description=f"Driver {STATUS_VERBS[new_status]}: {reason}",
            details={
                "previous_status": previous_status,
                "new_status": new_status.value,
                "reason": reason,
            },
        )

    async def send_notifications(
        self,
        penalty: Penalty,
        driver: Driver,
        amount: Decimal,
        reason: Optional[str] = None,
        applied_by: Optional[uuid.UUID] = None,
        trip_id: Optional[uuid.UUID] = None,
    ) -> int:
        """
        Email admins, franchise managers and the driver about a penalty.

        Best effort: each recipient is sent to independently, failures are
        logged and counted, and nothing propagates to the caller.

        Returns:
            Number of emails the relay accepted
        """
        try:
            admins = self.users.get_active_admins() if penalty.notify_admin else []
            managers = self.users.get_active_managers(driver.franchise_id) if penalty.notify_manager else []
            actor = self.users.get_by_id(applied_by) if applied_by else None
        except SQLAlchemyError as e:
            logging.error(f"Error resolving penalty notification recipients: {e}", exc_info=True)
            return 0

        notification = PenaltyNotification(
            penalty=PenaltySummary(
                id=penalty.id,
                name=penalty.name,
                description=penalty.description,
                amount=to_decimal(penalty.amount),
                category=penalty.category,
                severity=penalty.severity,
            ),
            driver=NotificationDriver(
                id=driver.id,
                first_name=driver.first_name,
                last_name=driver.last_name,
                driver_code=driver.driver_code,
                phone=driver.phone,
                email=driver.email,
                franchise_id=driver.franchise_id,
            ),
            amount=amount,
            reason=reason,
            timestamp=datetime.now(timezone.utc),
            applied_by=NotificationActor(id=actor.id, full_name=actor.full_name, email=actor.email) if actor else None,
            trip_id=trip_id,
        )

        recipients: List[str] = [admin.email for admin in admins]
        recipients += [manager.email for manager in managers]
        if penalty.notify_driver and driver.email:
            recipients.append(driver.email)

        sent = 0
        for recipient in recipients:
            try:
                delivered = await self.email_client.send_penalty_notification(recipient, notification)
            except Exception as e:
                record_notification(False)
                logging.error(
                    f"Error sending penalty notification: {e}",
                    extra={"recipient": recipient, "driver_code": driver.driver_code},
                )
                continue
            if delivered:
                sent += 1
                record_notification(True)

        return sent

    def get_driver_penalty_history(
        self,
        driver_id: uuid.UUID,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[DriverTransaction]:
        """Penalty ledger rows with penalty, applying user and trip loaded, newest first"""
        return self.transactions.get_penalty_history(driver_id, start_date, end_date)
