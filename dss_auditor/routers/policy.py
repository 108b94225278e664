from fastapi import APIRouter, Depends

from dss_auditor.routers.deps import get_policy_table
from dss_auditor.services.engine.columns import ColumnKey
from dss_auditor.services.policy.schema import PolicyTable

router = APIRouter()


@router.get("/meta")
def get_policy_meta(table: PolicyTable = Depends(get_policy_table)):
    return {**table.meta.model_dump(), **table.summary()}


@router.get("/rows")
def list_rows(table: PolicyTable = Depends(get_policy_table)):
    return table.to_list()


@router.get("/columns")
def list_columns():
    return [
        {"key": c.name, "letter": c.value, "header": c.header}
        for c in ColumnKey
    ]


@router.get("/quarantine")
def list_quarantined(table: PolicyTable = Depends(get_policy_table)):
    return [q.model_dump() for q in table.quarantined]
