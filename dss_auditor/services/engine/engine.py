# dss_auditor/services/engine/engine.py
"""
DSS compliance engine
---------------------
Pure pipeline over (PolicyTable, AuditInput):
  tier -> matched row -> column -> severity comparison -> verdict

- No I/O, no globals, no mutation
- Same inputs -> identical verdict
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from dss_auditor.services.engine.columns import select_column
from dss_auditor.services.engine.matcher import find_best_match
from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.engine.value_tier import classify
from dss_auditor.services.engine.verdict import AuditVerdict, build_verdict
from dss_auditor.services.policy.schema import PolicyTable


def evaluate(
    table: PolicyTable,
    audit_input: AuditInput,
    *,
    reference_id: str = "",
    audit_date: Optional[date] = None,
    confidence: str = "",
) -> AuditVerdict:
    tier = classify(f"{audit_input.conversation_text} {audit_input.subject}")
    row = find_best_match(table.rows, audit_input)
    column = select_column(audit_input.experience_type, tier)

    return build_verdict(
        audit_input,
        row,
        column,
        audit_input.observed_action_text,
        value_tier=tier,
        reference_id=reference_id,
        audit_date=audit_date,
        confidence=confidence,
    )
