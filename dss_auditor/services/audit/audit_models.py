from pydantic import BaseModel, Field
from typing import List, Optional

from dss_auditor.services.analysis.analysis_models import AnalysisResult
from dss_auditor.services.engine.verdict import AuditVerdict


class AuditReport(BaseModel):
    ticket_id: int
    verdict: AuditVerdict
    analysis: Optional[AnalysisResult] = None
    summary: Optional[str] = None
    sheet_written: bool = False
    warnings: List[str] = Field(default_factory=list)
    duration_ms: Optional[int] = None
