# dss_auditor/services/audit/audit_service.py
"""
Audit orchestration
-------------------
ticket context -> DSS engine -> (optional) sheet row -> (optional) LLM second opinion

- the engine runs exactly once per audit and never sees a collaborator
- sink failures are logged + reported as warnings, never change the verdict
"""

from __future__ import annotations

import logging
import re
import time
from datetime import date
from typing import Callable, Iterable, List, Optional

from dss_auditor.services.audit.audit_models import AuditReport
from dss_auditor.services.engine.engine import evaluate
from dss_auditor.services.engine.value_tier import extract_amount
from dss_auditor.services.policy.schema import PolicyTable

logger = logging.getLogger("dss.audit")


class AuditService:
    def __init__(
        self,
        *,
        table: PolicyTable,
        context_builder,
        sheets_writer=None,
        analyzer=None,
        today: Callable[[], date] = date.today,
    ):
        self.table = table
        self.context_builder = context_builder
        self.sheets_writer = sheets_writer
        self.analyzer = analyzer
        self._today = today

    # =====================================================
    # Public API
    # =====================================================
    def audit_ticket(
        self,
        ticket_id: int,
        *,
        send_to_sheet: bool = False,
        analyze: bool = False,
    ) -> AuditReport:
        start = time.perf_counter()

        ctx = self.context_builder.build(ticket_id)
        verdict = evaluate(
            self.table,
            ctx.to_audit_input(),
            reference_id=ctx.reference_id,
            audit_date=self._today(),
            confidence=ctx.confidence,
        )
        logger.info(
            "audit ticket_id=%s reference=%s compliance=%s column=%s outcome=%s",
            ticket_id, ctx.reference_id, verdict.compliance.value,
            verdict.column.value, verdict.severity_outcome.value,
        )

        warnings: List[str] = []
        sheet_written = False

        if send_to_sheet:
            if self.sheets_writer is None:
                warnings.append("SHEETS_NOT_CONFIGURED")
            else:
                try:
                    self.sheets_writer.write(verdict)
                    sheet_written = True
                except Exception as e:
                    logger.error("sheet write failed ticket_id=%s: %s", ticket_id, e)
                    warnings.append(f"SHEET_WRITE_FAILED:{e}")

        analysis = None
        summary = None
        if analyze:
            if self.analyzer is None:
                warnings.append("ANALYZER_NOT_CONFIGURED")
            else:
                summary = self.analyzer.summarize(ctx.conversation_text)
                try:
                    amount = extract_amount(ctx.conversation_text)
                    analysis = self.analyzer.analyze_compliance(
                        ctx.conversation_text,
                        verdict.expected_action or "No matching scenario found",
                        refund_amount=f"USD {amount}" if amount is not None else "",
                        reason=verdict.summary,
                    )
                except Exception as e:
                    logger.error("compliance analysis failed ticket_id=%s: %s", ticket_id, e)
                    warnings.append(f"ANALYSIS_FAILED:{e}")

        return AuditReport(
            ticket_id=ticket_id,
            verdict=verdict,
            analysis=analysis,
            summary=summary,
            sheet_written=sheet_written,
            warnings=warnings,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

    def close(self) -> None:
        """Release HTTP clients held by the collaborators."""
        repo = getattr(self.context_builder, "zendesk_repo", None)
        for resource in (repo, self.sheets_writer, self.analyzer):
            close = getattr(resource, "close", None)
            if close is not None:
                close()


# =========================================================
# Tag trigger
# =========================================================

def matching_tags(tags: Iterable[str], pattern: str) -> List[str]:
    rx = re.compile(pattern, re.IGNORECASE)
    return [t for t in tags or [] if isinstance(t, str) and rx.search(t)]


def should_trigger(tags: Iterable[str], *, pattern: str, auto_run: bool) -> Optional[str]:
    """
    First tag that triggers an automatic audit, or None.
    """
    if not auto_run:
        return None
    hits = matching_tags(tags, pattern)
    return hits[0] if hits else None
