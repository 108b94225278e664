from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from dss_auditor.services.engine.columns import ColumnKey


# =========================================================
# ROW
# =========================================================

class PolicyRow(BaseModel):
    """
    One DSS scenario: L1 family, L2 sub-scenario, prescribed action per column.
    Frozen once loaded; table order is significant for matching.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    l1: str = Field(default="", alias="L1")
    l2: str = Field(default="", alias="L2")
    keywords: Tuple[str, ...] = Field(default_factory=tuple)
    actions: Dict[ColumnKey, str] = Field(default_factory=dict)

    @field_validator("l1", "l2", mode="before")
    @classmethod
    def _none_as_blank(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords_list(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            # grids exported from sheets carry "a|b|c"
            return tuple(k.strip() for k in v.split("|") if k.strip())
        if not isinstance(v, (list, tuple)):
            raise ValueError("keywords must be a list of strings")
        # whitespace-only keywords would match any multi-word text
        items = [k.strip() if isinstance(k, str) else k for k in v]
        return tuple(k for k in items if k != "")

    def action_for(self, column: ColumnKey) -> str:
        return self.actions.get(column) or ""

    @property
    def label(self) -> str:
        return f"{self.l1 or 'Unknown'} / {self.l2 or 'Unknown'}"


# =========================================================
# TABLE
# =========================================================

class QuarantinedRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    reason: str
    raw: Any = None


class PolicyMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    grid_id: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None


class PolicyTable(BaseModel):
    """
    Immutable, order-preserving DSS grid for one audit run.
    """
    model_config = ConfigDict(frozen=True)

    rows: Tuple[PolicyRow, ...] = Field(default_factory=tuple)
    quarantined: Tuple[QuarantinedRow, ...] = Field(default_factory=tuple)
    meta: PolicyMeta = Field(default_factory=PolicyMeta)

    def summary(self) -> Dict[str, Any]:
        return {
            "grid_id": self.meta.grid_id,
            "version": self.meta.version,
            "rows": len(self.rows),
            "quarantined": len(self.quarantined),
        }

    def to_list(self) -> List[Dict[str, Any]]:
        return [
            {
                "L1": r.l1,
                "L2": r.l2,
                "keywords": list(r.keywords),
                "actions": {k.value: v for k, v in r.actions.items()},
            }
            for r in self.rows
        ]
