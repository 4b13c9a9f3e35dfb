"""Tax domain schemas"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel

# Form fields arrive either as typed numbers or as the raw text the user entered
AmountInput = Optional[Union[int, float, str]]


class TaxCalculationRequest(BaseModel):
    # Amusement
    net_receipts: AmountInput = None
    # Food & beverage
    gross_sales: AmountInput = None
    # Amusement, food & beverage
    deductions: AmountInput = None
    # Hotel/motel
    total_receipts: AmountInput = None
    state_tax: AmountInput = None
    misc_receipts: AmountInput = None
    months_late: AmountInput = None
    credits_attached: AmountInput = None


class TaxCalculationResponse(BaseModel):
    tax_type: str
    tax_type_label: str
    lines: dict[str, Union[int, Decimal]]
    total_due: Decimal
    total_due_cents: int
