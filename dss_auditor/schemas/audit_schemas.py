from __future__ import annotations

from typing import Any, Dict, List, Optional
from datetime import date
from pydantic import BaseModel, Field

from dss_auditor.services.engine.models import AuditInput


class EvaluateRequest(BaseModel):
    conversation_text: str = Field("", examples=["We issued a partial refund of $50 to the customer."])
    subject: str = Field("", examples=["Booking 4821 refund request"])
    experience_type: str = Field("", examples=["Non-Partnered"])
    observed_action_text: Optional[str] = Field(
        None,
        description="Defaults to the first refund sentence of the conversation",
    )
    conversation_count: Optional[int] = Field(
        None,
        ge=0,
        description="Defaults to 1 when conversation_text is non-blank, else 0",
    )

    reference_id: Optional[str] = None
    audit_date: Optional[date] = None
    confidence: Optional[str] = None


class VerdictResponse(BaseModel):
    record: Dict[str, Any]
    verdict: Dict[str, Any]


class TagTriggerRequest(BaseModel):
    ticket_id: int
    tags: List[str] = Field(default_factory=list)


class TagTriggerResponse(BaseModel):
    triggered: bool
    tag: Optional[str] = None
    report: Optional[Dict[str, Any]] = None


def conversation_count(payload: EvaluateRequest) -> int:
    if payload.conversation_count is not None:
        return payload.conversation_count
    return 1 if payload.conversation_text.strip() else 0


def to_audit_input(payload: EvaluateRequest, observed_action_text: str) -> AuditInput:
    return AuditInput(
        conversation_text=payload.conversation_text,
        subject=payload.subject,
        experience_type=payload.experience_type,
        observed_action_text=observed_action_text,
        conversation_count=conversation_count(payload),
    )
