from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from dss_auditor.core.errors import ConfigError, TicketNotFoundError, ZendeskError
from dss_auditor.routers.deps import get_audit_service, get_policy_table
from dss_auditor.schemas.audit_schemas import (
    EvaluateRequest,
    VerdictResponse,
    conversation_count,
    to_audit_input,
)
from dss_auditor.services.engine.engine import evaluate
from dss_auditor.services.policy.schema import PolicyTable
from dss_auditor.services.ticket.extraction import (
    confidence_label,
    extract_booking_reference,
    extract_observed_action,
)

router = APIRouter()


# =========================================================
# POST /audit/evaluate
# =========================================================
@router.post("/evaluate", response_model=VerdictResponse)
def evaluate_input(
    payload: EvaluateRequest,
    table: PolicyTable = Depends(get_policy_table),
) -> Dict[str, Any]:
    """
    Pure engine call: no ticket fetch, no sheet write, no LLM.
    """
    observed = payload.observed_action_text
    if observed is None:
        observed = extract_observed_action(payload.conversation_text)

    verdict = evaluate(
        table,
        to_audit_input(payload, observed),
        reference_id=payload.reference_id or extract_booking_reference(payload.subject, None),
        audit_date=payload.audit_date or date.today(),
        confidence=payload.confidence or confidence_label(conversation_count(payload)),
    )
    return {"record": verdict.as_record(), "verdict": verdict.model_dump(mode="json")}


# =========================================================
# POST /audit/tickets/{ticket_id}
# =========================================================
@router.post("/tickets/{ticket_id}")
def audit_ticket(
    ticket_id: int = Path(..., description="Zendesk ticket id"),
    send: bool = Query(False, description="Append the verdict to the audit sheet"),
    analyze: bool = Query(False, description="Ask the LLM for a second opinion"),
    service=Depends(get_audit_service),
) -> Dict[str, Any]:
    try:
        report = service.audit_ticket(ticket_id, send_to_sheet=send, analyze=analyze)
    except TicketNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ZendeskError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except ConfigError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return {
        "status": "OK",
        "record": report.verdict.as_record(),
        "report": report.model_dump(mode="json"),
    }
