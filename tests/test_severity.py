"""Tests for refund severity ranking and comparison."""

import pytest

from dss_auditor.services.engine.severity import (
    NEUTRAL_SEVERITY,
    SeverityLevel,
    SeverityOutcome,
    compare,
    rank,
    refund_type_label,
)


@pytest.mark.parametrize("text, level", [
    ("Full refund to original payment method", 1),
    ("Refund to original card", 1),
    ("Refund (original method)", 1),
    ("Partial refund - 50%", 2),
    ("30% refund", 2),
    ("Full wallet credit", 3),
    ("Wallet credit full amount", 3),
    ("Partial wallet credit (goodwill)", 4),
    ("Credit to wallet partial", 4),
    ("No refund - policy", 5),
    ("Deny refund", 5),
    ("No action - escalate", 5),
])
def test_rank(text, level):
    assert rank(text) == level


def test_unclassifiable_text_is_neutral():
    assert rank("Sent an apology email") == NEUTRAL_SEVERITY == SeverityLevel.FULL_WALLET_CREDIT
    assert rank("") == 3
    assert rank(None) == 3


def test_first_pattern_wins():
    # mentions both; full refund is checked first
    assert rank("Partial refund offered, then full refund issued") == 1


def test_compare_match():
    assert compare("Partial refund - 50%", "partial refund of $50") == SeverityOutcome.MATCH


def test_compare_over_refunded():
    assert compare("No refund - policy", "Full refund issued") == SeverityOutcome.MORE_SEVERE


def test_compare_under_refunded():
    assert compare("Full refund to original payment method", "No refund - policy") == SeverityOutcome.LESS_SEVERE


def test_two_unclassifiable_texts_report_match():
    assert compare("see notes", "customer was happy") == SeverityOutcome.MATCH


@pytest.mark.parametrize("text, label", [
    ("refund to original card", "Full refund (original method)"),
    ("partial refund of $50", "Partial refund"),
    ("issued full wallet credit", "Full wallet credit"),
    ("wallet credit of 20", "Partial wallet credit"),
    ("no refund possible", "No refund"),
    ("", "Unknown"),
])
def test_refund_type_label(text, label):
    assert refund_type_label(text) == label
