"""Taxes router - Return calculations for the municipal tax forms"""

import logging

from fastapi import APIRouter, HTTPException

from ..payments.amounts import AmountOutOfRangeError
from .calculators import TAX_TYPE_LABELS, calculate_tax
from .schemas import TaxCalculationRequest, TaxCalculationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/taxes", tags=["Taxes"])


@router.post("/calculate/{tax_type}", response_model=TaxCalculationResponse)
async def calculate(tax_type: str, data: TaxCalculationRequest):
    """Compute every line of a return; blank or invalid inputs count as zero"""
    if tax_type not in TAX_TYPE_LABELS:
        raise HTTPException(status_code=404, detail=f"Unknown tax type: {tax_type}")

    try:
        result = calculate_tax(tax_type, data.model_dump())
    except AmountOutOfRangeError as e:
        logger.warning(f"⚠️ Rejected {tax_type} calculation: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e
    lines = result.to_dict()
    total_due = lines.pop("total_due")
    total_due_cents = lines.pop("total_due_cents")

    logger.debug(f"🧮 {tax_type} return calculated: total due {total_due}")
    return TaxCalculationResponse(
        tax_type=tax_type,
        tax_type_label=TAX_TYPE_LABELS[tax_type],
        lines=lines,
        total_due=total_due,
        total_due_cents=total_due_cents,
    )
