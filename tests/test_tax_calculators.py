"""Tests for the municipal tax return calculators."""

from decimal import Decimal

import pytest

from muniportal.domain.payments.amounts import AmountOutOfRangeError
from muniportal.domain.taxes.calculators import (
    calculate_amusement_tax,
    calculate_food_beverage_tax,
    calculate_hotel_motel_tax,
    parse_months_late,
)


def test_amusement_tax_on_one_thousand():
    result = calculate_amusement_tax("1000.00", "0.00")

    assert result.tax == Decimal("50.00")
    assert result.commission == Decimal("0.50")
    assert result.total_due == Decimal("49.50")
    assert result.total_due_cents == 4950


def test_food_beverage_tax_on_one_thousand():
    result = calculate_food_beverage_tax("1000.00", "0.00")

    assert result.tax == Decimal("20.00")
    assert result.commission == Decimal("0.20")
    assert result.total_due == Decimal("19.80")
    assert result.total_due_cents == 1980


def test_half_cent_inputs_round_half_up_in_both_forms():
    amusement = calculate_amusement_tax("12.345", None)
    food = calculate_food_beverage_tax("12.345", None)

    assert amusement.taxable_receipts == food.taxable_receipts == Decimal("12.35")
    assert amusement.tax == Decimal("0.62")
    assert food.tax == Decimal("0.25")


def test_deductions_never_make_receipts_negative():
    result = calculate_amusement_tax("100", "250")

    assert result.taxable_receipts == Decimal("0.00")
    assert result.total_due_cents == 0


def test_inputs_are_parsed_leniently():
    assert calculate_food_beverage_tax("$1,000.00", "").tax == Decimal("20.00")
    assert calculate_food_beverage_tax("not a number", None).tax == Decimal("0.00")
    assert calculate_food_beverage_tax(1000, 0).tax == Decimal("20.00")


def test_hotel_motel_lines():
    result = calculate_hotel_motel_tax(
        "10000",
        state_tax="500",
        misc_receipts="500",
        months_late="2",
        credits_attached="40.33",
    )

    assert result.line2_total_deductions == Decimal("1000.00")
    assert result.line3_taxable_receipts == Decimal("9000.00")
    assert result.line4_municipal_tax == Decimal("427.50")
    assert result.line5_penalty == Decimal("12.83")
    assert result.line6_total_tax_due == Decimal("440.33")
    assert result.line8_total_payment_due == Decimal("400.00")
    assert result.total_due_cents == 40000


def test_hotel_motel_credits_cannot_go_below_zero():
    result = calculate_hotel_motel_tax("1000", credits_attached="5000")

    assert result.line8_total_payment_due == Decimal("0.00")


def test_months_late_clamped():
    assert parse_months_late("15") == 12
    assert parse_months_late("-3") == 0
    assert parse_months_late("") == 0
    assert parse_months_late("2.7") == 2


def test_receipts_beyond_maximum_are_rejected():
    with pytest.raises(AmountOutOfRangeError):
        calculate_amusement_tax("10000000000000000000000000000")

    with pytest.raises(AmountOutOfRangeError):
        calculate_hotel_motel_tax("1000", credits_attached="1e30")


def test_largest_receipts_are_calculated():
    result = calculate_food_beverage_tax("1000000000000")

    assert result.tax == Decimal("20000000000.00")
    assert result.total_due == Decimal("19800000000.00")
