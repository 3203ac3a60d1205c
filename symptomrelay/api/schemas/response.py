"""API response models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from symptomrelay.models.analysis import AnalysisResult, RiskLevel


class AnalyzeSymptomsResponse(BaseModel):
    """Response model for a symptom analysis."""

    summary: str = Field(..., description="Short plain-language summary")
    conditions: List[str] = Field(..., description="Possible conditions")
    actions: List[str] = Field(..., description="Recommended next actions")
    precautions: List[str] = Field(..., description="Condition-specific precautions")
    prevention: List[str] = Field(..., description="Prevention advice")
    when_to_visit: str = Field(..., description="When to see a doctor")
    risk_level: RiskLevel = Field(..., description="low, medium or high")
    medicines: Optional[List[str]] = Field(default=None, description="Over-the-counter options")

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalyzeSymptomsResponse":
        return cls(**result.to_payload())


class AnalysisHistoryItem(BaseModel):
    """One stored analysis as shown in the user's history."""

    id: str
    symptoms: str
    severity: str
    risk_level: RiskLevel
    created_at: datetime
    analysis_result: AnalyzeSymptomsResponse

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisHistoryItem":
        return cls(
            id=result.id,
            symptoms=result.symptoms,
            severity=result.severity,
            risk_level=result.risk_level,
            created_at=result.created_at,
            analysis_result=AnalyzeSymptomsResponse.from_result(result),
        )


class AnalysisHistoryResponse(BaseModel):
    """Response model for a user's analysis history."""

    analyses: List[AnalysisHistoryItem] = Field(..., description="Analyses, newest first")
    total_count: int = Field(..., description="Number of analyses returned")


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    error: str


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(default="1.0.0", description="API version")
