# dss_auditor/services/engine/matcher.py
"""
Scenario matching
-----------------
Scores every DSS row against conversation text + subject:
- +10 per keyword found (substring, case-insensitive)
- +5 if L1 text found
- +5 if L2 text found

Ties keep the earliest row. A zero best score yields no match, except for
an empty conversation, which may fall back to an explicit unknown/default/other row.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.policy.schema import PolicyRow


KEYWORD_POINTS = 10
L1_POINTS = 5
L2_POINTS = 5

_FALLBACK_TOKENS = re.compile(r"unknown|default|other", re.IGNORECASE)


def build_haystack(audit_input: AuditInput) -> str:
    return f"{audit_input.conversation_text or ''} {audit_input.subject or ''}".lower()


def score_row(row: PolicyRow, haystack: str) -> int:
    score = 0

    for k in row.keywords:
        k = (k or "").strip().lower()
        if k and k in haystack:
            score += KEYWORD_POINTS

    if row.l1 and row.l1.lower() in haystack:
        score += L1_POINTS
    if row.l2 and row.l2.lower() in haystack:
        score += L2_POINTS

    return score


def score_rows(rows: Sequence[PolicyRow], audit_input: AuditInput) -> List[Tuple[PolicyRow, int]]:
    haystack = build_haystack(audit_input)
    return [(row, score_row(row, haystack)) for row in rows]


def is_fallback_row(row: PolicyRow) -> bool:
    return bool(_FALLBACK_TOKENS.search(row.l1 or "") or _FALLBACK_TOKENS.search(row.l2 or ""))


def find_fallback_row(rows: Sequence[PolicyRow]) -> Optional[PolicyRow]:
    for row in rows:
        if is_fallback_row(row):
            return row
    return None


def find_best_match(rows: Sequence[PolicyRow], audit_input: AuditInput) -> Optional[PolicyRow]:
    best: Optional[PolicyRow] = None
    best_score = 0

    for row, score in score_rows(rows, audit_input):
        if score > best_score:
            best_score = score
            best = row

    if best is not None:
        return best

    if audit_input.conversation_count == 0:
        return find_fallback_row(rows)

    # non-empty conversation with nothing scored: keep "Unknown" visible downstream
    return None
