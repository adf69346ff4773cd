"""Penalty catalog and bulk penalty application endpoints"""

import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fleet_deductions.api.v1.schemas import (
    BulkDeductionRequest,
    DeductionResponse,
    Envelope,
    PenaltyCreateRequest,
    PenaltySchema,
    PenaltyUpdateRequest,
    TransactionSchema,
)
from fleet_deductions.api.dependencies import get_email_client, require_roles
from fleet_deductions.domain.enums import (
    PenaltyCategory,
    PenaltySeverity,
    PenaltyTriggerType,
    PenaltyType,
    UserRole,
)
from fleet_deductions.domain.models import PenaltyFilters
from fleet_deductions.infrastructure.clients.email import EmailClient
from fleet_deductions.infrastructure.database.models import User
from fleet_deductions.infrastructure.database.session import get_db
from fleet_deductions.services.catalog import PenaltyCatalog
from fleet_deductions.services.deductions import DeductionService

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)
staff_only = require_roles(UserRole.ADMIN, UserRole.MANAGER)


@router.post("/penalties", response_model=Envelope[PenaltySchema], status_code=201)
def create_penalty(
    request_body: PenaltyCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(admin_only),
):
    penalty = PenaltyCatalog(db).create_penalty(request_body.model_dump(exclude_none=True))
    return Envelope(message="Penalty created successfully", data=PenaltySchema.model_validate(penalty))


@router.get("/penalties", response_model=Envelope[List[PenaltySchema]])
def list_penalties(
    category: Optional[PenaltyCategory] = Query(None),
    severity: Optional[PenaltySeverity] = Query(None),
    type: Optional[PenaltyType] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_automatic: Optional[bool] = Query(None),
    trigger_type: Optional[PenaltyTriggerType] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or description"),
    db: Session = Depends(get_db),
    user: User = Depends(staff_only),
):
    filters = PenaltyFilters(
        category=category,
        severity=severity,
        type=type,
        is_active=is_active,
        is_automatic=is_automatic,
        trigger_type=trigger_type,
        search=search,
    )
    penalties = PenaltyCatalog(db).list_penalties(filters)
    return Envelope(data=[PenaltySchema.model_validate(p) for p in penalties], count=len(penalties))


@router.get("/penalties/{penalty_id}", response_model=Envelope[PenaltySchema])
def get_penalty(
    penalty_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(staff_only),
):
    penalty = PenaltyCatalog(db).get_penalty_by_id(penalty_id)
    return Envelope(data=PenaltySchema.model_validate(penalty))


@router.put("/penalties/{penalty_id}", response_model=Envelope[PenaltySchema])
def update_penalty(
    penalty_id: uuid.UUID,
    request_body: PenaltyUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(admin_only),
):
    penalty = PenaltyCatalog(db).update_penalty(penalty_id, request_body.model_dump(exclude_unset=True))
    return Envelope(message="Penalty updated successfully", data=PenaltySchema.model_validate(penalty))


@router.delete("/penalties/{penalty_id}", response_model=Envelope[PenaltySchema])
def delete_penalty(
    penalty_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(admin_only),
):
    """Soft delete: the penalty is deactivated, never removed"""
    penalty = PenaltyCatalog(db).delete_penalty(penalty_id)
    return Envelope(message="Penalty deactivated successfully", data=PenaltySchema.model_validate(penalty))


@router.post("/penalties/apply/drivers", response_model=Envelope[List[DeductionResponse]], status_code=201)
async def apply_penalty_to_drivers(
    request_body: BulkDeductionRequest,
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: User = Depends(staff_only),
):
    """Apply one penalty to several drivers; an unknown driver id fails the whole batch"""
    results = await DeductionService(db, email_client).apply_deduction_to_drivers(
        penalty_id=request_body.penalty_id,
        driver_ids=request_body.driver_ids,
        amount=request_body.amount,
        reason=request_body.reason,
        applied_by=user.id,
    )
    data = [
        DeductionResponse(
            transaction=TransactionSchema.model_validate(result.transaction),
            previous_incentive=result.previous_incentive,
            new_incentive=result.new_incentive,
        )
        for result in results
    ]
    return Envelope(message=f"Penalty applied to {len(data)} driver(s)", data=data, count=len(data))
