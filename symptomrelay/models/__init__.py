"""Data models for the symptom relay."""

from symptomrelay.models.analysis import (
    AnalysisRequest,
    AnalysisResult,
    StructuredResult,
    RISK_LEVELS,
    SEVERITIES,
)
from symptomrelay.models.upstream import UpstreamAnalysis

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "StructuredResult",
    "UpstreamAnalysis",
    "RISK_LEVELS",
    "SEVERITIES",
]
