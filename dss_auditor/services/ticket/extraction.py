# dss_auditor/services/ticket/extraction.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional


_REFUND_SENTENCE = re.compile(r"refund.*?(?:\.|$)", re.IGNORECASE | re.DOTALL)
_BOOKING_REF = re.compile(r"\d{4,}")


def extract_observed_action(conversation_text: Optional[str]) -> str:
    """
    First "refund" (any case) through the next full stop, or end of text.
    """
    if not conversation_text:
        return ""
    m = _REFUND_SENTENCE.search(conversation_text)
    return m.group(0) if m else ""


def extract_booking_reference(subject: Optional[str], ticket_id: Any) -> str:
    m = _BOOKING_REF.search(subject or "")
    if m:
        return m.group(0)
    return "" if ticket_id is None else str(ticket_id)


def confidence_label(conversation_count: int) -> str:
    if conversation_count <= 0:
        return "Low"
    if conversation_count < 3:
        return "Medium"
    return "High"


def comment_body(comment: Dict[str, Any]) -> str:
    return (comment.get("plain_body") or comment.get("body") or "").strip()


def build_conversation_text(comments: List[Dict[str, Any]], max_chars: Optional[int] = None) -> str:
    """
    Message bodies oldest first, newline separated.
    """
    ordered = sorted(
        (c for c in comments or [] if isinstance(c, dict)),
        key=lambda c: c.get("created_at") or "",
    )
    text = "\n".join(b for b in (comment_body(c) for c in ordered) if b)
    if max_chars is not None and max_chars > 0:
        text = text[:max_chars]
    return text


def find_experience_type(
    ticket: Dict[str, Any],
    *,
    field_id: Optional[str] = None,
    field_titles: Optional[Dict[str, str]] = None,
) -> str:
    """
    Experience type from ticket custom fields.
    - configured field id wins
    - else the first field whose title mentions "experience"
    - "Unknown" when nothing is set
    """
    fields = ticket.get("custom_fields") or ticket.get("fields") or []
    by_id: Dict[str, Any] = {}
    for f in fields:
        if isinstance(f, dict) and f.get("id") is not None:
            by_id[str(f["id"])] = f.get("value")

    if field_id and by_id.get(str(field_id)):
        return _as_label(by_id[str(field_id)])

    for fid, title in (field_titles or {}).items():
        if "experience" in (title or "").lower() and by_id.get(str(fid)):
            return _as_label(by_id[str(fid)])

    return "Unknown"


def _as_label(value: Any) -> str:
    # dropdown tags come through as "social_media_partnered"
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    return str(value).replace("_", " ").strip() or "Unknown"
