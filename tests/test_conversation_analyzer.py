"""Tests for the LLM second-opinion analyzer (providers faked, no network)."""

import json

import httpx
import pytest

from dss_auditor.core.errors import AnalyzerError
from dss_auditor.services.analysis.analysis_models import AnalysisResult
from dss_auditor.services.analysis.conversation_analyzer import SUMMARY_UNAVAILABLE, ConversationAnalyzer
from dss_auditor.services.analysis.prompts import build_compliance_prompt
from dss_auditor.services.analysis.providers import HuggingFaceProvider
from dss_auditor.services.analysis.response_parser import extract_compliance_status, parse_model_text


class FakeProvider:

    def __init__(self, name, results=(), summary="Customer asked for a refund."):
        self.name = name
        self.results = list(results)
        self.summary = summary
        self.prompts = []

    def analyze(self, prompt):
        self.prompts.append(prompt)
        item = self.results.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def complete(self, prompt, max_tokens=None):
        if isinstance(self.summary, Exception):
            raise self.summary
        return self.summary


OK = AnalysisResult(status="COMPLIANT", explanation="fine")


class TestResponseParser:

    @pytest.mark.parametrize("text, status", [
        ("Status: NON-COMPLIANT", "NON-COMPLIANT"),
        ("This is not compliant with the grid", "NON-COMPLIANT"),
        ("Status: COMPLIANT", "COMPLIANT"),
        ("The action was incorrect", "NON-COMPLIANT"),
        ("The refund matches the policy", "COMPLIANT"),
        ("I cannot tell", "UNKNOWN"),
        ("", "UNKNOWN"),
    ])
    def test_keyword_status(self, text, status):
        assert extract_compliance_status(text) == status

    def test_json_block_with_noise(self):
        text = 'Sure!\n```json\n{"status": "NON-COMPLIANT", "explanation": "over-refunded", "evidence": "full refund"}\n```'
        r = parse_model_text(text)
        assert r.status == "NON-COMPLIANT"
        assert r.explanation == "over-refunded"
        assert r.evidence == "full refund"
        assert r.raw_response == text

    def test_broken_json_falls_back_to_keywords(self):
        r = parse_model_text('{"status": "COMPLIANT", oops} compliant')
        assert r.status == "COMPLIANT"
        assert r.evidence == ""


def test_compliance_prompt_defaults():
    prompt = build_compliance_prompt("conv", "")
    assert "DSS Decision: Not specified" in prompt
    assert "Refund Amount: Unknown" in prompt
    assert '"status": "COMPLIANT" or "NON-COMPLIANT"' in prompt


class TestConversationAnalyzer:

    def test_primary_success(self):
        primary = FakeProvider("openai", [OK])
        r = ConversationAnalyzer(primary=primary, sleep=lambda s: None).analyze_compliance("c", "Full refund")
        assert r.status == "COMPLIANT"
        assert r.provider == "openai"
        assert r.duration_ms is not None
        assert "DSS Decision: Full refund" in primary.prompts[0]

    def test_retries_with_linear_backoff(self):
        sleeps = []
        primary = FakeProvider("openai", [RuntimeError("a"), RuntimeError("b"), OK])
        analyzer = ConversationAnalyzer(primary=primary, max_retries=3, retry_delay=2.0, sleep=sleeps.append)
        assert analyzer.analyze_compliance("c", "d").provider == "openai"
        assert sleeps == [2.0, 4.0]

    def test_fallback_after_primary_exhausted(self):
        primary = FakeProvider("openai", [RuntimeError("x")] * 2)
        fallback = FakeProvider("huggingface", [OK])
        analyzer = ConversationAnalyzer(primary=primary, fallback=fallback, max_retries=2, sleep=lambda s: None)
        assert analyzer.analyze_compliance("c", "d").provider == "huggingface"

    def test_fallback_disabled(self):
        primary = FakeProvider("openai", [RuntimeError("x")])
        fallback = FakeProvider("huggingface", [OK])
        analyzer = ConversationAnalyzer(
            primary=primary, fallback=fallback, max_retries=1,
            fallback_on_primary_failure=False, sleep=lambda s: None,
        )
        with pytest.raises(AnalyzerError):
            analyzer.analyze_compliance("c", "d")
        assert fallback.prompts == []

    def test_both_fail(self):
        primary = FakeProvider("openai", [RuntimeError("x")])
        fallback = FakeProvider("huggingface", [RuntimeError("y")])
        analyzer = ConversationAnalyzer(primary=primary, fallback=fallback, max_retries=1, sleep=lambda s: None)
        with pytest.raises(AnalyzerError, match="Both primary and fallback"):
            analyzer.analyze_compliance("c", "d")

    def test_summary(self):
        analyzer = ConversationAnalyzer(primary=FakeProvider("openai"))
        assert analyzer.summarize("c") == "Customer asked for a refund."

    def test_summary_failure(self):
        analyzer = ConversationAnalyzer(primary=FakeProvider("openai", summary=RuntimeError("down")))
        assert analyzer.summarize("c") == SUMMARY_UNAVAILABLE


class TestHuggingFaceProvider:

    def _provider(self, handler):
        return HuggingFaceProvider(
            api_key="hf",
            endpoint="https://hf.example/models/m",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )

    def test_analyze_parses_generated_text(self):
        def handler(request):
            body = json.loads(request.content)
            assert request.headers["authorization"] == "Bearer hf"
            assert body["parameters"]["return_full_text"] is False
            return httpx.Response(200, json=[{"generated_text": '{"status": "COMPLIANT", "explanation": "ok"}'}])

        r = self._provider(handler).analyze("prompt")
        assert r.status == "COMPLIANT"
        assert r.explanation == "ok"

    def test_error_status(self):
        with pytest.raises(AnalyzerError):
            self._provider(lambda r: httpx.Response(503, text="loading")).analyze("p")

    def test_unexpected_payload(self):
        with pytest.raises(AnalyzerError):
            self._provider(lambda r: httpx.Response(200, json={"error": "x"})).analyze("p")


def test_close_reaches_providers_that_hold_clients():
    fallback = HuggingFaceProvider(api_key="hf", endpoint="https://hf.example/models/m")
    analyzer = ConversationAnalyzer(primary=FakeProvider("openai"), fallback=fallback)
    analyzer.close()
    assert fallback.client.is_closed
