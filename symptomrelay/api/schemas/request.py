"""API request models."""

from typing import Optional

from pydantic import BaseModel, Field


class AnalyzeSymptomsRequest(BaseModel):
    """Request model for symptom analysis.

    Fields are optional here so that missing values reach the relay and are
    answered with its own error body instead of a schema error.
    """

    symptoms: Optional[str] = Field(default=None, description="Free-text symptom description")
    severity: Optional[str] = Field(
        default=None, description="mild, medium or severe (default: medium)"
    )
    user_id: Optional[str] = Field(default=None, description="Identity of the requesting user")
