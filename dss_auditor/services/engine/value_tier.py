# dss_auditor/services/engine/value_tier.py
from __future__ import annotations

import re
from decimal import Decimal
from enum import Enum
from typing import Optional


VALUE_TIER_THRESHOLD = Decimal("125")
VALUE_TIER_CURRENCY = "USD"

# "$1,250.50" / "$ 80"  |  "1,250.50 USD" / "80usd"
# one pattern so the leftmost amount wins; at the same position "$" is tried first
_AMOUNT = re.compile(
    r"\$\s*(\d[\d,]*(?:\.\d{1,2})?)"
    r"|(\d[\d,]*(?:\.\d{1,2})?)\s*USD",
    re.IGNORECASE,
)


class ValueTier(str, Enum):
    LOW = "≤ USD 125"
    HIGH = "> USD 125"
    UNKNOWN = "Unknown"


def extract_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    First currency amount in text, scanning left to right.
    """
    if not text:
        return None

    m = _AMOUNT.search(text)
    if not m:
        return None
    return Decimal((m.group(1) or m.group(2)).replace(",", ""))


def classify(text: Optional[str]) -> ValueTier:
    amount = extract_amount(text)
    if amount is None:
        return ValueTier.UNKNOWN
    return ValueTier.LOW if amount <= VALUE_TIER_THRESHOLD else ValueTier.HIGH
