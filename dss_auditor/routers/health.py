from fastapi import APIRouter, Request

router = APIRouter()


@router.get("")
def health(request: Request):
    table = getattr(request.state, "policy_table", None)
    return {
        "status": "OK" if table is not None else "DEGRADED",
        "policy": table.summary() if table is not None else None,
    }
