"""Payments router - Service fee quotes (payment processing happens elsewhere)"""

import logging
from dataclasses import asdict

from fastapi import APIRouter

from .fees import calculate_service_fee, validate_total_amount
from .schemas import ServiceFeeRequest, ServiceFeeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/service-fee", response_model=ServiceFeeResponse)
async def quote_service_fee(data: ServiceFeeRequest):
    """Service fee and total charge for a base amount, optionally validating a client total"""
    fee_settings = {
        "card_basis_points": data.card_basis_points,
        "card_fixed_fee_cents": data.card_fixed_fee_cents,
        "ach_basis_points": data.ach_basis_points,
        "ach_fixed_fee_cents": data.ach_fixed_fee_cents,
    }
    fee = calculate_service_fee(data.base_amount_cents, data.is_card, **fee_settings)
    response = ServiceFeeResponse(**asdict(fee))

    if data.provided_total_cents is not None:
        validation = validate_total_amount(
            data.base_amount_cents, data.provided_total_cents, data.is_card, **fee_settings
        )
        response.total_is_valid = validation.is_valid
        response.difference_cents = validation.difference_cents
        if not validation.is_valid:
            logger.warning(
                f"⚠️ Client total {data.provided_total_cents} differs from expected "
                f"{validation.expected_total_cents} by {validation.difference_cents} cents"
            )

    return response
