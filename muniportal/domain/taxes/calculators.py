"""
Municipal tax return calculators

Each line of a return is rounded to cents (ROUND_HALF_UP) as soon as it is
computed, and later lines are computed from the rounded values shown on the form.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal

from ..payments.amounts import ZERO, Number, parse_amount, round_money

AMUSEMENT = "amusement"
FOOD_BEVERAGE = "food_beverage"
HOTEL_MOTEL = "hotel_motel"

TAX_TYPE_LABELS = {
    FOOD_BEVERAGE: "Food & Beverage",
    HOTEL_MOTEL: "Hotel & Motel",
    AMUSEMENT: "Amusement",
}

AMUSEMENT_TAX_RATE = Decimal("0.05")
FOOD_BEVERAGE_TAX_RATE = Decimal("0.02")
# Vendor's commission for paying on time, as a share of the tax
COLLECTION_COMMISSION_RATE = Decimal("0.01")

HOTEL_MOTEL_TAX_RATE = Decimal("0.05")
HOTEL_MOTEL_TAXABLE_SHARE = Decimal("0.95")
HOTEL_MOTEL_PENALTY_RATE = Decimal("0.015")
MAX_MONTHS_LATE = 12


def to_cents(amount: Decimal) -> int:
    return int(round_money(amount) * 100)


@dataclass(frozen=True)
class ReceiptsTaxResult:
    """Amusement and food & beverage returns share the same four lines"""

    taxable_receipts: Decimal
    tax: Decimal
    commission: Decimal
    total_due: Decimal

    @property
    def total_due_cents(self) -> int:
        return to_cents(self.total_due)

    def to_dict(self) -> dict:
        return {**asdict(self), "total_due_cents": self.total_due_cents}


@dataclass(frozen=True)
class HotelMotelTaxResult:
    line1_total_receipts: Decimal
    line2_total_deductions: Decimal
    line3_taxable_receipts: Decimal
    line4_municipal_tax: Decimal
    line5_penalty: Decimal
    line6_total_tax_due: Decimal
    line7_credits_attached: Decimal
    line8_total_payment_due: Decimal
    months_late: int

    @property
    def total_due(self) -> Decimal:
        return self.line8_total_payment_due

    @property
    def total_due_cents(self) -> int:
        return to_cents(self.line8_total_payment_due)

    def to_dict(self) -> dict:
        return {**asdict(self), "total_due": self.total_due, "total_due_cents": self.total_due_cents}


def _receipts_tax(gross: Number, deductions: Number, rate: Decimal) -> ReceiptsTaxResult:
    taxable = round_money(max(ZERO, parse_amount(gross) - parse_amount(deductions)))
    tax = round_money(taxable * rate)
    commission = round_money(tax * COLLECTION_COMMISSION_RATE)
    return ReceiptsTaxResult(
        taxable_receipts=taxable,
        tax=tax,
        commission=commission,
        total_due=round_money(tax - commission),
    )


def calculate_amusement_tax(net_receipts: Number, deductions: Number = None) -> ReceiptsTaxResult:
    """5% of net receipts after deductions, less a 1% collection commission"""
    return _receipts_tax(net_receipts, deductions, AMUSEMENT_TAX_RATE)


def calculate_food_beverage_tax(gross_sales: Number, deductions: Number = None) -> ReceiptsTaxResult:
    """2% of gross sales after deductions, less a 1% collection commission"""
    return _receipts_tax(gross_sales, deductions, FOOD_BEVERAGE_TAX_RATE)


def parse_months_late(value: Number) -> int:
    """Whole months, clamped to 0..12"""
    months = int(parse_amount(value))
    return min(MAX_MONTHS_LATE, max(0, months))


def calculate_hotel_motel_tax(
    total_receipts: Number,
    state_tax: Number = None,
    misc_receipts: Number = None,
    months_late: Number = None,
    credits_attached: Number = None,
) -> HotelMotelTaxResult:
    line1 = round_money(parse_amount(total_receipts))
    line2 = round_money(parse_amount(state_tax) + parse_amount(misc_receipts))
    line3 = round_money(max(ZERO, line1 - line2))
    line4 = round_money(HOTEL_MOTEL_TAX_RATE * (HOTEL_MOTEL_TAXABLE_SHARE * line3))

    months = parse_months_late(months_late)
    line5 = round_money(months * HOTEL_MOTEL_PENALTY_RATE * line4)
    line6 = round_money(line4 + line5)

    credits = round_money(parse_amount(credits_attached))
    line8 = round_money(max(ZERO, line6 - credits))

    return HotelMotelTaxResult(
        line1_total_receipts=line1,
        line2_total_deductions=line2,
        line3_taxable_receipts=line3,
        line4_municipal_tax=line4,
        line5_penalty=line5,
        line6_total_tax_due=line6,
        line7_credits_attached=credits,
        line8_total_payment_due=line8,
        months_late=months,
    )


def calculate_tax(tax_type: str, inputs: dict):
    """Dispatch a return by tax type; raises ValueError for an unknown type"""
    if tax_type == AMUSEMENT:
        return calculate_amusement_tax(inputs.get("net_receipts"), inputs.get("deductions"))
    if tax_type == FOOD_BEVERAGE:
        return calculate_food_beverage_tax(inputs.get("gross_sales"), inputs.get("deductions"))
    if tax_type == HOTEL_MOTEL:
        return calculate_hotel_motel_tax(
            inputs.get("total_receipts"),
            state_tax=inputs.get("state_tax"),
            misc_receipts=inputs.get("misc_receipts"),
            months_late=inputs.get("months_late"),
            credits_attached=inputs.get("credits_attached"),
        )
    raise ValueError(f"Unknown tax type: {tax_type}")
