"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from fleet_deductions.domain.enums import PenaltyCategory, PenaltySeverity, PenaltyTriggerType, PenaltyType

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Common response wrapper"""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    count: Optional[int] = None


class PenaltyCreateRequest(BaseModel):
    """Request body for POST /v1/penalties"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    type: Optional[PenaltyType] = None
    is_active: Optional[bool] = None
    is_automatic: Optional[bool] = None
    trigger_type: Optional[PenaltyTriggerType] = None
    trigger_config: Optional[Dict[str, Any]] = None
    category: Optional[PenaltyCategory] = None
    severity: Optional[PenaltySeverity] = None
    notify_admin: Optional[bool] = None
    notify_manager: Optional[bool] = None
    notify_driver: Optional[bool] = None
    block_driver: Optional[bool] = None


class PenaltyUpdateRequest(BaseModel):
    """Request body for PUT /v1/penalties/{penalty_id}; only sent fields change"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    type: Optional[PenaltyType] = None
    is_active: Optional[bool] = None
    is_automatic: Optional[bool] = None
    trigger_type: Optional[PenaltyTriggerType] = None
    trigger_config: Optional[Dict[str, Any]] = None
    category: Optional[PenaltyCategory] = None
    severity: Optional[PenaltySeverity] = None
    notify_admin: Optional[bool] = None
    notify_manager: Optional[bool] = None
    notify_driver: Optional[bool] = None
    block_driver: Optional[bool] = None


class PenaltySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    amount: Decimal
    type: str
    is_active: bool
    is_automatic: bool
    trigger_type: str
    trigger_config: Optional[Dict[str, Any]] = None
    category: str
    severity: str
    notify_admin: bool
    notify_manager: bool
    notify_driver: bool
    block_driver: bool
    created_at: datetime
    updated_at: datetime


class DeductionRequest(BaseModel):
    """Request body for POST /v1/drivers/{driver_id}/deductions"""

    penalty_id: uuid.UUID
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2, description="Override of the penalty's default amount")
    reason: Optional[str] = Field(None, max_length=500)
    trip_id: Optional[uuid.UUID] = None


class BulkDeductionRequest(BaseModel):
    """Request body for POST /v1/penalties/apply/drivers"""

    penalty_id: uuid.UUID
    driver_ids: List[uuid.UUID] = Field(..., min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    reason: Optional[str] = Field(None, max_length=500)


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    driver_id: uuid.UUID
    amount: Decimal
    transaction_type: str
    type: str
    description: Optional[str] = None
    trip_id: Optional[uuid.UUID] = None
    penalty_id: Optional[uuid.UUID] = None
    applied_by: Optional[uuid.UUID] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias=AliasChoices("details", "metadata"))
    created_at: datetime


class DeductionResponse(BaseModel):
    transaction: TransactionSchema
    previous_incentive: Decimal
    new_incentive: Decimal


class StatusChangeRequest(BaseModel):
    """Request body for POST /v1/drivers/{driver_id}/block and /unblock"""

    reason: str = Field(..., min_length=1, max_length=500)


class DriverSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    driver_code: str
    first_name: str
    last_name: str
    status: str
    incentive: Optional[Decimal] = None
    franchise_id: Optional[uuid.UUID] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    email: str


class TripSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_name: str
    pickup_location: Optional[str] = None


class HistoryItem(TransactionSchema):
    """Penalty ledger row with its rule, applying user and trip"""

    penalty: Optional[PenaltySchema] = None
    applied_by_user: Optional[UserSummary] = None
    trip: Optional[TripSummary] = None
