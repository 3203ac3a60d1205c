"""Turn parsed model output into a safe, fully populated result."""

from typing import Optional

from symptomrelay.logger import get_logger
from symptomrelay.models.analysis import RISK_LEVELS, StructuredResult
from symptomrelay.models.upstream import UpstreamAnalysis

logger = get_logger(__name__)

# Substring match on purpose: "Covidien" is dropped as well.
BLOCKED_TERMS = ("covid", "vaccine")

DEFAULT_SUMMARY = (
    "We could not produce a detailed summary. Please consult a healthcare professional."
)
DEFAULT_CONDITIONS = ["Consult a healthcare professional for an accurate assessment"]
DEFAULT_ACTIONS = ["Consult a healthcare professional"]
DEFAULT_PRECAUTIONS = ["Monitor your symptoms and note any changes"]
DEFAULT_PREVENTION = ["Maintain a healthy routine with rest, hydration and a balanced diet"]
DEFAULT_WHEN_TO_VISIT = "See a doctor if symptoms persist, worsen, or you feel unsure."


def normalize_risk_level(value: Optional[str], default: str) -> str:
    """Lower-case the model's risk level, falling back to ``default``."""
    if value is not None:
        level = value.strip().lower()
        if level in RISK_LEVELS:
            return level
    logger.warning(f"Unrecognized risk level {value!r}, using '{default}'")
    return default


def filter_blocked(entries: list[str]) -> list[str]:
    """Drop entries that mention pandemic or vaccine topics."""
    kept = []
    for entry in entries:
        text = entry.strip().lower()
        if any(term in text for term in BLOCKED_TERMS):
            logger.debug(f"Dropped blocked entry: {entry[:80]}")
            continue
        kept.append(entry)
    return kept


def _or_default(value, default):
    # None means the field was absent; empty values are kept as sent
    if value is None:
        return list(default) if isinstance(default, list) else default
    return value


def normalize(upstream: UpstreamAnalysis, default_risk_level: str) -> tuple[str, StructuredResult]:
    """Apply defaults, risk-level policy and content filtering.

    Returns:
        Tuple of (risk_level, structured_result)
    """
    risk_level = normalize_risk_level(upstream.risk_level, default_risk_level)

    precautions = filter_blocked(_or_default(upstream.precautions, DEFAULT_PRECAUTIONS))
    prevention = filter_blocked(_or_default(upstream.prevention, DEFAULT_PREVENTION))

    result = StructuredResult(
        summary=_or_default(upstream.summary, DEFAULT_SUMMARY),
        conditions=_or_default(upstream.conditions, DEFAULT_CONDITIONS),
        actions=_or_default(upstream.actions, DEFAULT_ACTIONS),
        precautions=precautions,
        prevention=prevention,
        when_to_visit=_or_default(upstream.when_to_visit, DEFAULT_WHEN_TO_VISIT),
        medicines=upstream.medicines,
    )
    return risk_level, result
