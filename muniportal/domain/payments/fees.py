"""
Service fee calculation

Service Fee = (Base Amount x Fee Percentage) + Fixed Fee
Total Charge = Base Amount + Service Fee
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .amounts import MAX_AMOUNT_CENTS, AmountOutOfRangeError

DEFAULT_CARD_BASIS_POINTS = 300
DEFAULT_CARD_FIXED_FEE_CENTS = 50
DEFAULT_ACH_BASIS_POINTS = 150
DEFAULT_ACH_FIXED_FEE_CENTS = 50

BASIS_POINTS_PER_UNIT = 10000

# Provided totals may be off by one cent from rounding on the client
TOTAL_TOLERANCE_CENTS = 1


@dataclass(frozen=True)
class ServiceFee:
    base_amount_cents: int
    service_fee_percentage_cents: int
    service_fee_fixed_cents: int
    total_service_fee_cents: int
    total_charge_cents: int
    basis_points: int
    is_card: bool


@dataclass(frozen=True)
class TotalValidation:
    is_valid: bool
    expected_total_cents: int
    difference_cents: int


def percentage_of_cents(amount_cents: int, basis_points: int) -> int:
    """``amount_cents`` x ``basis_points`` / 10000, rounded half up to a whole cent"""
    fee = Decimal(amount_cents) * Decimal(basis_points) / BASIS_POINTS_PER_UNIT
    return int(fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_service_fee(
    base_amount_cents: int,
    is_card: bool,
    card_basis_points: int = DEFAULT_CARD_BASIS_POINTS,
    card_fixed_fee_cents: int = DEFAULT_CARD_FIXED_FEE_CENTS,
    ach_basis_points: int = DEFAULT_ACH_BASIS_POINTS,
    ach_fixed_fee_cents: int = DEFAULT_ACH_FIXED_FEE_CENTS,
) -> ServiceFee:
    if base_amount_cents < 0:
        raise ValueError("Base amount cannot be negative")
    if base_amount_cents > MAX_AMOUNT_CENTS:
        raise AmountOutOfRangeError(
            f"Base amount exceeds the maximum of {MAX_AMOUNT_CENTS:,} cents"
        )

    basis_points = card_basis_points if is_card else ach_basis_points
    fixed_fee_cents = card_fixed_fee_cents if is_card else ach_fixed_fee_cents
    if not 0 <= basis_points <= BASIS_POINTS_PER_UNIT:
        raise ValueError(
            f"Fee percentage must be between 0 and {BASIS_POINTS_PER_UNIT} basis points"
        )

    percentage_cents = percentage_of_cents(base_amount_cents, basis_points)
    total_fee_cents = percentage_cents + fixed_fee_cents

    return ServiceFee(
        base_amount_cents=base_amount_cents,
        service_fee_percentage_cents=percentage_cents,
        service_fee_fixed_cents=fixed_fee_cents,
        total_service_fee_cents=total_fee_cents,
        total_charge_cents=base_amount_cents + total_fee_cents,
        basis_points=basis_points,
        is_card=is_card,
    )


def validate_total_amount(
    base_amount_cents: int,
    provided_total_cents: int,
    is_card: bool,
    **fee_overrides,
) -> TotalValidation:
    """Check a client-computed total against the server's calculation"""
    expected = calculate_service_fee(base_amount_cents, is_card, **fee_overrides).total_charge_cents
    difference = abs(provided_total_cents - expected)
    return TotalValidation(
        is_valid=difference <= TOTAL_TOLERANCE_CENTS,
        expected_total_cents=expected,
        difference_cents=difference,
    )
