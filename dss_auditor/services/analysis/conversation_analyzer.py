# dss_auditor/services/analysis/conversation_analyzer.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from dss_auditor.core.errors import AnalyzerError
from dss_auditor.services.analysis.analysis_models import AnalysisResult
from dss_auditor.services.analysis.prompts import build_compliance_prompt, build_summary_prompt

logger = logging.getLogger("dss.analysis")

SUMMARY_UNAVAILABLE = "Summary unavailable"
SUMMARY_MAX_TOKENS = 256


class ConversationAnalyzer:
    """
    LLM second opinion on a finished audit.
    - primary provider first, `max_retries` attempts, linear backoff
    - fallback provider only if enabled and primary exhausted
    - never consulted by the DSS engine itself
    """

    def __init__(
        self,
        *,
        primary,
        fallback=None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        fallback_on_primary_failure: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.primary = primary
        self.fallback = fallback
        self.max_retries = max(1, int(max_retries))
        self.retry_delay = retry_delay
        self.fallback_on_primary_failure = fallback_on_primary_failure
        self._sleep = sleep

    # =====================================================
    # Public API
    # =====================================================
    def analyze_compliance(
        self,
        conversation: str,
        dss_decision: str,
        *,
        refund_amount: str = "",
        reason: str = "",
    ) -> AnalysisResult:
        prompt = build_compliance_prompt(
            conversation,
            dss_decision,
            refund_amount=refund_amount,
            reason=reason,
        )
        start = time.perf_counter()

        try:
            result = self._with_retries(self.primary, lambda p: p.analyze(prompt))
            provider = self.primary
        except Exception as primary_error:
            logger.error("primary analyzer failed: %s", primary_error)
            if not (self.fallback_on_primary_failure and self.fallback is not None):
                raise AnalyzerError(f"Compliance analysis failed: {primary_error}") from primary_error
            try:
                result = self._with_retries(self.fallback, lambda p: p.analyze(prompt))
                provider = self.fallback
            except Exception as fallback_error:
                logger.error("fallback analyzer failed: %s", fallback_error)
                raise AnalyzerError("Both primary and fallback analyzers failed") from fallback_error

        return result.model_copy(update={
            "provider": getattr(provider, "name", None),
            "duration_ms": int((time.perf_counter() - start) * 1000),
        })

    def close(self) -> None:
        for provider in (self.primary, self.fallback):
            close = getattr(provider, "close", None)
            if close is not None:
                close()

    def summarize(self, conversation: str) -> str:
        try:
            text = self.primary.complete(build_summary_prompt(conversation), SUMMARY_MAX_TOKENS)
        except Exception as e:
            logger.warning("summary generation failed: %s", e)
            return SUMMARY_UNAVAILABLE
        return text or SUMMARY_UNAVAILABLE

    # =====================================================
    # Helpers
    # =====================================================
    def _with_retries(self, provider, call):
        last: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return call(provider)
            except Exception as e:
                last = e
                logger.warning(
                    "analyzer attempt failed provider=%s attempt=%d/%d: %s",
                    getattr(provider, "name", "?"), attempt, self.max_retries, e,
                )
                if attempt < self.max_retries:
                    self._sleep(self.retry_delay * attempt)
        assert last is not None
        raise last
