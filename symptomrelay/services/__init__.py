"""Services for the symptom relay."""

from symptomrelay.services.completion import (
    AnthropicCompletionClient,
    LazyCompletionClient,
    OpenAICompletionClient,
    build_completion_client,
)
from symptomrelay.services.relay import SymptomAnalysisRelay
from symptomrelay.services.store import AnalysisStore

__all__ = [
    "AnalysisStore",
    "AnthropicCompletionClient",
    "LazyCompletionClient",
    "OpenAICompletionClient",
    "SymptomAnalysisRelay",
    "build_completion_client",
]
