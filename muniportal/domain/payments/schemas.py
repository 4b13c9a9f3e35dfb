"""Payments domain schemas"""

from typing import Optional

from pydantic import BaseModel, Field

from .amounts import MAX_AMOUNT_CENTS
from .fees import BASIS_POINTS_PER_UNIT


class ServiceFeeRequest(BaseModel):
    base_amount_cents: int = Field(..., ge=0, le=MAX_AMOUNT_CENTS)
    is_card: bool = True
    card_basis_points: int = Field(300, ge=0, le=BASIS_POINTS_PER_UNIT)
    card_fixed_fee_cents: int = Field(50, ge=0, le=MAX_AMOUNT_CENTS)
    ach_basis_points: int = Field(150, ge=0, le=BASIS_POINTS_PER_UNIT)
    ach_fixed_fee_cents: int = Field(50, ge=0, le=MAX_AMOUNT_CENTS)
    # When present, checked against the calculated total. A total is at most the base,
    # a 100% fee and the fixed fee
    provided_total_cents: Optional[int] = Field(None, ge=0, le=3 * MAX_AMOUNT_CENTS)


class ServiceFeeResponse(BaseModel):
    base_amount_cents: int
    service_fee_percentage_cents: int
    service_fee_fixed_cents: int
    total_service_fee_cents: int
    total_charge_cents: int
    basis_points: int
    is_card: bool
    total_is_valid: Optional[bool] = None
    difference_cents: Optional[int] = None
