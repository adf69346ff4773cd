"""Driver deduction, penalty history and block/unblock endpoints"""

import time
import uuid
import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from fleet_deductions.api.v1.schemas import (
    DeductionRequest,
    DeductionResponse,
    DriverSchema,
    Envelope,
    HistoryItem,
    StatusChangeRequest,
    TransactionSchema,
)
from fleet_deductions.api.dependencies import get_email_client, get_request_id, require_roles
from fleet_deductions.domain.enums import UserRole
from fleet_deductions.domain.exceptions import DomainException
from fleet_deductions.infrastructure.clients.email import EmailClient
from fleet_deductions.infrastructure.database.models import User
from fleet_deductions.infrastructure.database.session import get_db
from fleet_deductions.services.deductions import DeductionService

router = APIRouter()

staff_only = require_roles(UserRole.ADMIN, UserRole.MANAGER)


@router.post("/drivers/{driver_id}/deductions", response_model=Envelope[DeductionResponse])
async def apply_deduction(
    driver_id: uuid.UUID,
    request_body: DeductionRequest,
    request: Request,
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: User = Depends(staff_only),
):
    """
    Apply a penalty deduction to a driver's incentive balance.

    Flow:
    1. Validate penalty (exists, active) and driver
    2. Write DEBIT ledger row and new balance in one transaction
    3. Auto-block the driver if the penalty requires it
    4. Email admins/managers/driver per the penalty's flags
    """
    start_time = time.time()
    request_id = get_request_id(request)
    service = DeductionService(db, email_client)

    try:
        result = await service.apply_deduction(
            penalty_id=request_body.penalty_id,
            driver_id=driver_id,
            amount=request_body.amount,
            reason=request_body.reason,
            trip_id=request_body.trip_id,
            applied_by=user.id,
        )
    except DomainException:
        raise
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    logging.info(
        "Deduction request completed",
        extra={"request_id": request_id, "driver_id": str(driver_id), "duration_ms": duration_ms},
    )

    return Envelope(
        message="Deduction applied successfully",
        data=DeductionResponse(
            transaction=TransactionSchema.model_validate(result.transaction),
            previous_incentive=result.previous_incentive,
            new_incentive=result.new_incentive,
        ),
    )


@router.get("/drivers/{driver_id}/penalty-history", response_model=Envelope[List[HistoryItem]])
def get_driver_penalty_history(
    driver_id: uuid.UUID,
    start_date: Optional[datetime] = Query(None, description="Inclusive lower bound on created_at"),
    end_date: Optional[datetime] = Query(None, description="Inclusive upper bound on created_at"),
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: User = Depends(staff_only),
):
    """Penalty ledger rows for a driver, newest first"""
    service = DeductionService(db, email_client)
    history = service.get_driver_penalty_history(driver_id, start_date, end_date)

    items = [HistoryItem.model_validate(row) for row in history]
    return Envelope(data=items, count=len(items))


@router.post("/drivers/{driver_id}/block", response_model=Envelope[DriverSchema])
def block_driver(
    driver_id: uuid.UUID,
    request_body: StatusChangeRequest,
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: User = Depends(staff_only),
):
    service = DeductionService(db, email_client)
    driver = service.block_driver(driver_id, request_body.reason, user.id)
    return Envelope(message="Driver blocked successfully", data=DriverSchema.model_validate(driver))


@router.post("/drivers/{driver_id}/unblock", response_model=Envelope[DriverSchema])
def unblock_driver(
    driver_id: uuid.UUID,
    request_body: StatusChangeRequest,
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: User = Depends(staff_only),
):
    service = DeductionService(db, email_client)
    driver = service.unblock_driver(driver_id, request_body.reason, user.id)
    return Envelope(message="Driver unblocked successfully", data=DriverSchema.model_validate(driver))
