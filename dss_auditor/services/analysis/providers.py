# dss_auditor/services/analysis/providers.py
"""
LLM providers for the second-opinion compliance check.

- OpenAIProvider: ChatOpenAI with structured output (primary)
- HuggingFaceProvider: text-generation inference endpoint over httpx (fallback)

Both expose:
    analyze(prompt) -> AnalysisResult
    complete(prompt, max_tokens=None) -> str
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from langchain_openai import ChatOpenAI

from dss_auditor.core.errors import AnalyzerError, ConfigError
from dss_auditor.services.analysis.analysis_models import AnalysisResult, ComplianceAnalysis
from dss_auditor.services.analysis.response_parser import normalize_status, parse_model_text


class OpenAIProvider:
    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 2048,
        timeout: float = 30.0,
    ):
        if not api_key:
            raise ConfigError("Missing OPENAI_API_KEY")

        self.llm = ChatOpenAI(
            model=model,
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            max_retries=0,  # retries are owned by ConversationAnalyzer
        )
        self.structured_llm = self.llm.with_structured_output(
            ComplianceAnalysis,
            method="function_calling",
        )

    def analyze(self, prompt: str) -> AnalysisResult:
        raw: ComplianceAnalysis = self.structured_llm.invoke(prompt)
        if raw is None:
            raise AnalyzerError("OpenAI returned no structured output")

        return AnalysisResult(
            status=normalize_status(raw.status),
            explanation=raw.explanation,
            evidence=raw.evidence,
            raw_response=raw.model_dump_json(),
        )

    def complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        llm = self.llm.bind(max_tokens=max_tokens) if max_tokens else self.llm
        msg = llm.invoke(prompt)
        return str(getattr(msg, "content", "") or "").strip()


class HuggingFaceProvider:
    name = "huggingface"

    def __init__(
        self,
        *,
        api_key: str,
        endpoint: str,
        temperature: float = 0.1,
        max_tokens: int = 2048,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ConfigError("Missing HUGGINGFACE_API_KEY")
        self.api_key = api_key
        self.endpoint = endpoint
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _generate(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        body = {
            "inputs": prompt,
            "parameters": {
                "temperature": self.temperature,
                "max_new_tokens": max_tokens or self.max_tokens,
                "return_full_text": False,
            },
        }
        r = self.client.post(
            self.endpoint,
            json=body,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        if r.status_code >= 400:
            raise AnalyzerError(f"Hugging Face API error ({r.status_code}): {r.text[:200]}")

        return _generated_text(r.json())

    def analyze(self, prompt: str) -> AnalysisResult:
        return parse_model_text(self._generate(prompt))

    def complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        return self._generate(prompt, max_tokens).strip()


def _generated_text(data: Any) -> str:
    # [{"generated_text": "..."}]
    try:
        return str(data[0]["generated_text"])
    except (KeyError, IndexError, TypeError) as e:
        raise AnalyzerError("Failed to parse Hugging Face response") from e
