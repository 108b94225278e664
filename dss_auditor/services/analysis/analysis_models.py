from typing import List, Literal, Optional
from pydantic import BaseModel, Field


ComplianceStatus = Literal["COMPLIANT", "NON-COMPLIANT", "UNKNOWN"]


class ComplianceAnalysis(BaseModel):
    """Structured reply requested from the model."""
    status: str = Field(..., description='"COMPLIANT" or "NON-COMPLIANT"')
    explanation: str = ""
    evidence: str = ""


class AnalysisResult(BaseModel):
    status: ComplianceStatus = "UNKNOWN"
    explanation: str = ""
    evidence: str = ""
    raw_response: str = ""
    provider: Optional[str] = None
    duration_ms: Optional[int] = None
    warnings: List[str] = Field(default_factory=list)
