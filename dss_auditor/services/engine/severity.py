# dss_auditor/services/engine/severity.py
from __future__ import annotations

import re
from enum import Enum, IntEnum
from typing import Optional, Tuple


class SeverityLevel(IntEnum):
    FULL_REFUND = 1
    PARTIAL_REFUND = 2
    FULL_WALLET_CREDIT = 3
    PARTIAL_WALLET_CREDIT = 4
    NO_REFUND = 5


# Unclassifiable text sits mid-scale; shares its value with FULL_WALLET_CREDIT.
NEUTRAL_SEVERITY = SeverityLevel.FULL_WALLET_CREDIT


class SeverityOutcome(str, Enum):
    MATCH = "Match"
    LESS_SEVERE = "Less severe (under-refunded)"
    MORE_SEVERE = "More severe (over-refunded)"


# order matters: first hit wins
_RANK_PATTERNS: Tuple[Tuple[re.Pattern, SeverityLevel], ...] = (
    (re.compile(r"full refund|refund to original|refund \(original method\)"), SeverityLevel.FULL_REFUND),
    (re.compile(r"partial refund|% refund"), SeverityLevel.PARTIAL_REFUND),
    (re.compile(r"full wallet credit|wallet credit full"), SeverityLevel.FULL_WALLET_CREDIT),
    (re.compile(r"partial wallet credit|credit to wallet partial"), SeverityLevel.PARTIAL_WALLET_CREDIT),
    (re.compile(r"no refund|deny refund|no action"), SeverityLevel.NO_REFUND),
)


def rank(action_text: Optional[str]) -> SeverityLevel:
    t = (action_text or "").lower()
    for pattern, level in _RANK_PATTERNS:
        if pattern.search(t):
            return level
    return NEUTRAL_SEVERITY


def compare(expected_text: Optional[str], actual_text: Optional[str]) -> SeverityOutcome:
    """
    Higher rank = less generous.
    actual > expected: agent gave less than prescribed (under-refunded)
    actual < expected: agent gave more than prescribed (over-refunded)
    """
    exp = rank(expected_text)
    act = rank(actual_text)

    if act == exp:
        return SeverityOutcome.MATCH
    if act > exp:
        return SeverityOutcome.LESS_SEVERE
    return SeverityOutcome.MORE_SEVERE


# =========================================================
# Refund type label (observed action)
# =========================================================

_REFUND_TYPE_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"refund to original|full refund", re.IGNORECASE), "Full refund (original method)"),
    (re.compile(r"partial refund|% refund", re.IGNORECASE), "Partial refund"),
    (re.compile(r"wallet credit.*full|full.*wallet credit", re.IGNORECASE), "Full wallet credit"),
    (re.compile(r"wallet credit|credit to wallet", re.IGNORECASE), "Partial wallet credit"),
    (re.compile(r"no refund|deny refund", re.IGNORECASE), "No refund"),
)


def refund_type_label(action_text: Optional[str]) -> str:
    t = action_text or ""
    for pattern, label in _REFUND_TYPE_PATTERNS:
        if pattern.search(t):
            return label
    return "Unknown"
