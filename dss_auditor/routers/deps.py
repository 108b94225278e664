from fastapi import HTTPException, Request, status

from dss_auditor.services.policy.schema import PolicyTable


def get_policy_table(request: Request) -> PolicyTable:
    table = getattr(request.state, "policy_table", None)
    if table is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="DSS grid not loaded",
        )
    return table


def get_audit_service(request: Request):
    svc = getattr(request.state, "audit_service", None)
    if svc is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ticket auditing is not configured (missing Zendesk credentials)",
        )
    return svc
