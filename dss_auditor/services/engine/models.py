# dss_auditor/services/engine/models.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuditInput(BaseModel):
    """
    Engine input. Passed by value, never mutated.
    """
    model_config = ConfigDict(frozen=True)

    conversation_text: str = ""
    subject: str = ""
    experience_type: str = ""
    observed_action_text: str = ""
    conversation_count: int = Field(default=0, ge=0)
