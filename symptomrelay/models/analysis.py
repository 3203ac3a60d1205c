"""Symptom analysis data models."""

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

RiskLevel = Literal["low", "medium", "high"]
Severity = Literal["mild", "medium", "severe"]

RISK_LEVELS: tuple[str, ...] = ("low", "medium", "high")
SEVERITIES: tuple[str, ...] = ("mild", "medium", "severe")
DEFAULT_SEVERITY = "medium"


class AnalysisRequest(BaseModel):
    """A caller's request for a symptom analysis, before validation."""

    symptoms: Optional[str] = Field(default=None, description="Free-text symptom description")
    severity: Optional[str] = Field(default=None, description="mild, medium or severe")
    caller_id: Optional[str] = Field(default=None, description="Opaque identity of the caller")


class StructuredResult(BaseModel):
    """The normalized body of an analysis."""

    summary: str = Field(description="Short plain-language summary")
    conditions: list[str] = Field(description="Possible conditions, most likely first")
    actions: list[str] = Field(description="Recommended next actions")
    precautions: list[str] = Field(description="Condition-specific precautions")
    prevention: list[str] = Field(description="Prevention advice")
    when_to_visit: str = Field(description="When to see a doctor")
    medicines: Optional[list[str]] = Field(
        default=None, description="Over-the-counter suggestions, if any"
    )


class AnalysisResult(BaseModel):
    """A persisted symptom analysis. Never updated after insert."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    caller_id: str
    symptoms: str = Field(description="Verbatim input text, used as the reuse key")
    severity: Severity = DEFAULT_SEVERITY
    risk_level: RiskLevel
    structured_result: StructuredResult
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    def to_payload(self) -> dict:
        """Flatten into the response body the app consumes."""
        payload = self.structured_result.model_dump()
        payload["risk_level"] = self.risk_level
        return payload
