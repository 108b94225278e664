"""Tests for booking value tier detection."""

from decimal import Decimal

import pytest

from dss_auditor.services.engine.value_tier import ValueTier, classify, extract_amount


@pytest.mark.parametrize("amount", ["0", "50", "124.99", "125", "125.00"])
def test_dollar_amount_at_or_below_threshold_is_low(amount):
    assert classify(f"We refunded ${amount} yesterday") == ValueTier.LOW


@pytest.mark.parametrize("amount", ["125.01", "126", "1,250", "10,000.50"])
def test_dollar_amount_above_threshold_is_high(amount):
    assert classify(f"Booking total was ${amount}.") == ValueTier.HIGH


def test_no_currency_is_unknown():
    assert classify("Customer wants their money back") == ValueTier.UNKNOWN
    assert classify("") == ValueTier.UNKNOWN
    assert classify(None) == ValueTier.UNKNOWN


def test_usd_suffix_form():
    assert classify("Paid 300 USD for the tour") == ValueTier.HIGH
    assert classify("paid 80usd") == ValueTier.LOW


def test_thousands_separators_are_ignored():
    assert extract_amount("$1,250.50") == Decimal("1250.50")


def test_leftmost_amount_wins_across_forms():
    assert classify("Quoted 500 USD, refunded $40") == ValueTier.HIGH
    assert classify("Refunded $40 of the 500 USD booking") == ValueTier.LOW


def test_symbol_form_wins_on_the_same_amount():
    assert extract_amount("$300 USD") == Decimal("300")


def test_separator_only_text_is_not_an_amount():
    assert classify("We accept EUR, USD. Booking total 300 USD") == ValueTier.HIGH
    assert classify("Prices in $, see invoice: $200") == ValueTier.HIGH
    assert extract_amount("EUR, USD") is None


def test_first_symbol_amount_is_used():
    assert classify("Refund $40 of the $400 booking") == ValueTier.LOW


def test_space_after_symbol():
    assert extract_amount("total $ 99") == Decimal("99")
