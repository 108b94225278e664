# dss_auditor/services/engine/columns.py
"""
DSS grid columns
----------------
Eight prescribed-action columns: experience type x booking value tier.
Values are the grid's legacy column letters so raw grid rows keyed by
"C".."J" map straight onto the enum.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from dss_auditor.services.engine.value_tier import ValueTier


class ColumnKey(str, Enum):
    PARTNERED_LOW = "C"
    PARTNERED_HIGH = "D"
    NON_PARTNERED_LOW = "E"
    NON_PARTNERED_HIGH = "F"
    SOCIAL_PARTNERED_LOW = "G"
    SOCIAL_PARTNERED_HIGH = "H"
    SOCIAL_NON_PARTNERED_LOW = "I"
    SOCIAL_NON_PARTNERED_HIGH = "J"

    @property
    def header(self) -> str:
        return COLUMN_HEADERS[self]

    @classmethod
    def parse(cls, value: object) -> Optional["ColumnKey"]:
        """
        Accepts the column letter, the enum name or the human header.
        Returns None for anything else.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        v = value.strip()
        if not v:
            return None
        return _ALIASES.get(v.upper()) or _ALIASES.get(_norm_header(v))


COLUMN_HEADERS: Dict[ColumnKey, str] = {
    ColumnKey.PARTNERED_LOW: "Partnered ≤ USD 125",
    ColumnKey.PARTNERED_HIGH: "Partnered > USD 125",
    ColumnKey.NON_PARTNERED_LOW: "Non-Partnered ≤ USD 125",
    ColumnKey.NON_PARTNERED_HIGH: "Non-Partnered > USD 125",
    ColumnKey.SOCIAL_PARTNERED_LOW: "Social Media Partnered ≤ USD 125",
    ColumnKey.SOCIAL_PARTNERED_HIGH: "Social Media Partnered > USD 125",
    ColumnKey.SOCIAL_NON_PARTNERED_LOW: "Social Media Non-Partnered ≤ USD 125",
    ColumnKey.SOCIAL_NON_PARTNERED_HIGH: "Social Media Non-Partnered > USD 125",
}


def _norm_header(v: str) -> str:
    return " ".join(v.lower().split())


_ALIASES: Dict[str, ColumnKey] = {}
for _key in ColumnKey:
    _ALIASES[_key.value] = _key
    _ALIASES[_key.name] = _key
    _ALIASES[_norm_header(COLUMN_HEADERS[_key])] = _key


_NON_PARTNERED = ("non-partnered", "nonpartnered")


def _pick(tier: ValueTier, low: ColumnKey, high: ColumnKey) -> ColumnKey:
    return low if tier == ValueTier.LOW else high


def select_column(experience_type: Optional[str], tier: ValueTier) -> ColumnKey:
    """
    Precedence is significant: the plain rules exclude "social" so that
    "Social Media Partnered" is never read as plain partnered.
    """
    t = (experience_type or "").strip().lower()

    is_social = "social" in t
    is_non_partnered = any(n in t for n in _NON_PARTNERED)

    # 1) Partnered
    if t == "partnered" or ("partnered" in t and not is_social and not is_non_partnered):
        return _pick(tier, ColumnKey.PARTNERED_LOW, ColumnKey.PARTNERED_HIGH)

    # 2) Non-Partnered
    if t in _NON_PARTNERED or (is_non_partnered and not is_social):
        return _pick(tier, ColumnKey.NON_PARTNERED_LOW, ColumnKey.NON_PARTNERED_HIGH)

    # 3) Social Media Partnered
    if is_social and "partnered" in t and "non" not in t:
        return _pick(tier, ColumnKey.SOCIAL_PARTNERED_LOW, ColumnKey.SOCIAL_PARTNERED_HIGH)

    # 4) Social Media Non-Partnered
    if is_social and is_non_partnered:
        return _pick(tier, ColumnKey.SOCIAL_NON_PARTNERED_LOW, ColumnKey.SOCIAL_NON_PARTNERED_HIGH)

    # 5) Default
    return ColumnKey.PARTNERED_HIGH if tier == ValueTier.HIGH else ColumnKey.PARTNERED_LOW
