import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from dss_auditor.core.errors import TicketNotFoundError, ZendeskError
from dss_auditor.routers.deps import get_audit_service
from dss_auditor.schemas.audit_schemas import TagTriggerRequest, TagTriggerResponse
from dss_auditor.services.audit.audit_service import should_trigger

logger = logging.getLogger("dss.trigger")

router = APIRouter()


@router.post("/tags", response_model=TagTriggerResponse)
def on_tags_changed(
    request: Request,
    payload: TagTriggerRequest,
) -> Dict[str, Any]:
    """
    Zendesk trigger/webhook target: audit once a refund-like tag shows up.
    """
    settings = request.app.state.settings
    tag = should_trigger(
        payload.tags,
        pattern=settings.TRIGGER_TAG_PATTERN,
        auto_run=settings.TRIGGER_AUTO_RUN,
    )
    if tag is None:
        return {"triggered": False}

    service = get_audit_service(request)
    logger.info("auto audit ticket_id=%s tag=%s", payload.ticket_id, tag)
    try:
        report = service.audit_ticket(payload.ticket_id, send_to_sheet=True, analyze=True)
    except TicketNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ZendeskError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return {"triggered": True, "tag": tag, "report": report.model_dump(mode="json")}
