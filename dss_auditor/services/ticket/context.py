# dss_auditor/services/ticket/context.py
"""
Ticket context
--------------
Turns a Zendesk ticket + comment thread into the engine's AuditInput,
plus the identifiers the verdict sinks need.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.ticket.extraction import (
    build_conversation_text,
    confidence_label,
    extract_booking_reference,
    extract_observed_action,
    find_experience_type,
)

logger = logging.getLogger("dss.ticket")


class TicketContext(BaseModel):
    ticket_id: int
    reference_id: str
    subject: str = ""
    status: str = "unknown"
    tags: List[str] = Field(default_factory=list)
    requester_name: Optional[str] = None
    assignee_name: Optional[str] = None

    experience_type: str = "Unknown"
    conversation_text: str = ""
    conversation_count: int = 0
    observed_action_text: str = ""
    confidence: str = "Low"

    def to_audit_input(self) -> AuditInput:
        return AuditInput(
            conversation_text=self.conversation_text,
            subject=self.subject,
            experience_type=self.experience_type,
            observed_action_text=self.observed_action_text,
            conversation_count=self.conversation_count,
        )


class TicketContextBuilder:
    """
    Zendesk -> TicketContext.
    Repository is injected; nothing here holds a global client.
    """

    def __init__(
        self,
        *,
        zendesk_repo,
        experience_field_id: Optional[str] = None,
        max_conversation_chars: Optional[int] = None,
    ):
        self.zendesk_repo = zendesk_repo
        self.experience_field_id = experience_field_id
        self.max_conversation_chars = max_conversation_chars

    def build(self, ticket_id: int) -> TicketContext:
        ticket = self.zendesk_repo.get_ticket(ticket_id)
        comments = self.zendesk_repo.list_comments(ticket_id)

        field_titles: Dict[str, str] = {}
        if not self.experience_field_id:
            field_titles = self.zendesk_repo.ticket_field_titles()

        ctx = self.from_payload(ticket, comments, field_titles=field_titles)
        logger.info(
            "ticket context built ticket_id=%s comments=%d experience_type=%s",
            ticket_id, ctx.conversation_count, ctx.experience_type,
        )
        return ctx

    def from_payload(
        self,
        ticket: Dict[str, Any],
        comments: List[Dict[str, Any]],
        *,
        field_titles: Optional[Dict[str, str]] = None,
    ) -> TicketContext:
        subject = ticket.get("subject") or ""
        conversation = build_conversation_text(comments, self.max_conversation_chars)
        count = len([c for c in comments or [] if isinstance(c, dict)])

        return TicketContext(
            ticket_id=int(ticket["id"]),
            reference_id=extract_booking_reference(subject, ticket.get("id")),
            subject=subject,
            status=ticket.get("status") or "unknown",
            tags=list(ticket.get("tags") or []),
            requester_name=_name(ticket.get("requester")),
            assignee_name=_name(ticket.get("assignee")),
            experience_type=find_experience_type(
                ticket,
                field_id=self.experience_field_id,
                field_titles=field_titles,
            ),
            conversation_text=conversation,
            conversation_count=count,
            observed_action_text=extract_observed_action(conversation),
            confidence=confidence_label(count),
        )


def _name(person: Any) -> Optional[str]:
    if isinstance(person, dict):
        return person.get("name")
    return None
