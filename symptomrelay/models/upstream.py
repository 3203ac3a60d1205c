"""Schema for the JSON object the completion API is asked to produce."""

from typing import Any, Optional

from pydantic import BaseModel, field_validator


class UpstreamAnalysis(BaseModel):
    """Model output as parsed, before normalization.

    A field left as ``None`` was absent from the model's JSON; an empty
    list or string means the model sent the field with no content.
    """

    summary: Optional[str] = None
    conditions: Optional[list[str]] = None
    actions: Optional[list[str]] = None
    precautions: Optional[list[str]] = None
    prevention: Optional[list[str]] = None
    when_to_visit: Optional[str] = None
    risk_level: Optional[str] = None
    medicines: Optional[list[str]] = None

    model_config = {"extra": "ignore"}

    @field_validator(
        "conditions", "actions", "precautions", "prevention", "medicines", mode="before"
    )
    @classmethod
    def _wrap_single_item(cls, value: Any) -> Any:
        # Models sometimes answer a one-item list with a bare string
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("risk_level", mode="before")
    @classmethod
    def _stringify_risk_level(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)
