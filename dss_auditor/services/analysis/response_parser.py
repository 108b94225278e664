# dss_auditor/services/analysis/response_parser.py
from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from dss_auditor.services.analysis.analysis_models import AnalysisResult


_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

_NEGATIVE = ("VIOLATION", "INCORRECT", "DOES NOT MATCH", "FAILED")
_POSITIVE = ("CORRECT", "MATCHES", "APPROPRIATE", "PASSED")


def extract_compliance_status(text: Optional[str]) -> str:
    """
    Keyword status detection for free-text model replies.
    Negative wording is checked before positive ("INCORRECT" contains "CORRECT").
    """
    upper = (text or "").upper()

    if "NON-COMPLIANT" in upper or "NOT COMPLIANT" in upper:
        return "NON-COMPLIANT"
    if "COMPLIANT" in upper:
        return "COMPLIANT"

    if any(w in upper for w in _NEGATIVE):
        return "NON-COMPLIANT"
    if any(w in upper for w in _POSITIVE):
        return "COMPLIANT"

    return "UNKNOWN"


def normalize_status(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return "UNKNOWN"
    return extract_compliance_status(value)


def _first_json_object(text: str) -> Optional[Dict[str, Any]]:
    m = _JSON_BLOCK.search(text)
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_model_text(text: str) -> AnalysisResult:
    """
    JSON block if the model sent one, keyword scan otherwise.
    """
    text = text or ""
    parsed = _first_json_object(text)

    if parsed is not None:
        return AnalysisResult(
            status=normalize_status(parsed.get("status")),
            explanation=str(parsed.get("explanation") or text),
            evidence=str(parsed.get("evidence") or ""),
            raw_response=text,
        )

    return AnalysisResult(
        status=extract_compliance_status(text),
        explanation=text,
        evidence="",
        raw_response=text,
    )
