"""
Money helpers

Amounts are stored as integer cents. Conversions to and from dollars go through
Decimal with ROUND_HALF_UP so a value like $12.345 always lands on 1235 cents.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Largest amount accepted anywhere, in dollars and in cents
MAX_AMOUNT = Decimal("1000000000000")
MAX_AMOUNT_CENTS = 100_000_000_000_000

Number = Union[int, float, str, Decimal, None]

# Currency symbols, thousands separators and whitespace typed into form fields
_STRIP_CHARS = re.compile(r"[$,\s]")


class AmountOutOfRangeError(ValueError):
    """A well-formed amount larger than MAX_AMOUNT"""


def parse_amount(value: Number) -> Decimal:
    """
    Lenient parse of a user-entered amount; blank or invalid input is 0.
    Raises AmountOutOfRangeError for amounts beyond MAX_AMOUNT.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return _check_range(value) if value.is_finite() else ZERO
    if isinstance(value, float):
        # repr keeps the shortest form, so 0.1 stays 0.1 instead of 0.1000000000000000055...
        value = repr(value)

    text = _STRIP_CHARS.sub("", str(value))
    if not text:
        return ZERO
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return ZERO
    return _check_range(amount) if amount.is_finite() else ZERO


def _check_range(amount: Decimal) -> Decimal:
    if abs(amount) > MAX_AMOUNT:
        raise AmountOutOfRangeError(f"Amount exceeds the maximum of {MAX_AMOUNT:,}")
    return amount


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def dollars_to_cents(value: Number) -> int:
    return int((parse_amount(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_dollars(cents: int) -> Decimal:
    if abs(int(cents)) > MAX_AMOUNT_CENTS:
        raise AmountOutOfRangeError(f"Amount exceeds the maximum of {MAX_AMOUNT_CENTS:,} cents")
    return round_money(Decimal(int(cents)) / 100)
