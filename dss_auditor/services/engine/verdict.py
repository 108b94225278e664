# dss_auditor/services/engine/verdict.py
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from dss_auditor.services.engine.columns import ColumnKey
from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.engine.severity import (
    SeverityLevel,
    SeverityOutcome,
    compare,
    rank,
    refund_type_label,
)
from dss_auditor.services.engine.value_tier import ValueTier
from dss_auditor.services.policy.schema import PolicyRow


EXPLANATION_SNIPPET_CHARS = 150
UNKNOWN_REASON = "Unknown"


class ComplianceCategory(str, Enum):
    COMPLIANT = "Compliant"
    NON_COMPLIANT = "Non-Compliant"
    RULE_MISSING = "Non-Compliant (Rule Missing)"


class AuditVerdict(BaseModel):
    """
    Final compliance record for one audit. Immutable once built.
    """
    model_config = ConfigDict(frozen=True)

    reference_id: str = ""
    audit_date: Optional[date] = None

    compliance: ComplianceCategory
    value_tier: ValueTier
    rule_matched: bool
    l1_reason: str
    l2_reason: str
    column: ColumnKey
    column_header: str
    experience_type: str

    severity_outcome: SeverityOutcome
    expected_severity: SeverityLevel
    observed_severity: SeverityLevel
    expected_action: str
    observed_action: str
    refund_type_verdict: str

    explanation: str
    confidence: str = ""

    @property
    def rule_misapplied(self) -> bool:
        return self.compliance != ComplianceCategory.COMPLIANT

    @property
    def summary(self) -> str:
        return f"L1: {self.l1_reason}; L2: {self.l2_reason}; Col: {self.column_header or 'N/A'}"

    def as_record(self) -> Dict[str, Any]:
        """
        Legacy widget / sheet field names.
        """
        return {
            "Booking ID": self.reference_id,
            "Week": self.audit_date.isoformat() if self.audit_date else "",
            "DSS Compliance?": self.compliance.value,
            "Booking Value Tier": self.value_tier.value,
            "L1 Reason": self.l1_reason,
            "L2 Reason": self.l2_reason,
            "DSS Grid Column Letter": self.column.value,
            "DSS Grid Column Header": self.column_header,
            "Experience Type": self.experience_type,
            "Refund Type Verdict": self.refund_type_verdict,
            "Refund Verdict Detail": self.observed_action,
            "Compliance Reason": self.severity_outcome.value,
            "Compliance Explanation": self.explanation,
            "Refund Amount & Method": self.observed_action,
            "DSS Rule Misapplied": "Yes" if self.rule_misapplied else "No",
            "DSS Severity Match": self.severity_outcome.value,
            "Ideal Refund Action": self.expected_action,
            "Confidence": self.confidence,
            "Summary": self.summary,
        }


def categorize(expected_action: str, outcome: SeverityOutcome) -> ComplianceCategory:
    # nothing prescribed -> never plain Compliant
    if not expected_action:
        return ComplianceCategory.RULE_MISSING
    if outcome == SeverityOutcome.MORE_SEVERE:
        return ComplianceCategory.NON_COMPLIANT
    return ComplianceCategory.COMPLIANT


def explain(expected_action: str, observed_action: str) -> str:
    n = EXPLANATION_SNIPPET_CHARS
    return f'DSS expects: "{(expected_action or "")[:n]}". Actual: "{(observed_action or "")[:n]}".'


def build_verdict(
    audit_input: AuditInput,
    matched_row: Optional[PolicyRow],
    column: ColumnKey,
    observed_action_text: str,
    *,
    value_tier: ValueTier,
    reference_id: str = "",
    audit_date: Optional[date] = None,
    confidence: str = "",
) -> AuditVerdict:
    expected = matched_row.action_for(column) if matched_row is not None else ""
    observed = observed_action_text or ""

    outcome = compare(expected, observed)

    return AuditVerdict(
        reference_id=reference_id,
        audit_date=audit_date,
        compliance=categorize(expected, outcome),
        value_tier=value_tier,
        rule_matched=matched_row is not None,
        l1_reason=(matched_row.l1 if matched_row is not None and matched_row.l1 else UNKNOWN_REASON),
        l2_reason=(matched_row.l2 if matched_row is not None and matched_row.l2 else UNKNOWN_REASON),
        column=column,
        column_header=column.header,
        experience_type=audit_input.experience_type or "",
        severity_outcome=outcome,
        expected_severity=rank(expected),
        observed_severity=rank(observed),
        expected_action=expected,
        observed_action=observed,
        refund_type_verdict=refund_type_label(observed),
        explanation=explain(expected, observed),
        confidence=confidence,
    )
