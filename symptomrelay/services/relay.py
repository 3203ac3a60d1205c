"""Symptom analysis relay: validate, reuse, ask the model, normalize, persist."""

from pydantic import ValidationError

from symptomrelay.config import Settings
from symptomrelay.errors import InvalidRequest, MalformedUpstreamOutput, PersistenceFailure
from symptomrelay.logger import get_logger, preview
from symptomrelay.models.analysis import (
    DEFAULT_SEVERITY,
    SEVERITIES,
    AnalysisRequest,
    AnalysisResult,
)
from symptomrelay.models.upstream import UpstreamAnalysis
from symptomrelay.services.completion import CompletionClient
from symptomrelay.services.json_extract import parse_json_object
from symptomrelay.services.normalizer import normalize
from symptomrelay.services.prompts import build_messages
from symptomrelay.services.store import AnalysisStore

logger = get_logger(__name__)


class SymptomAnalysisRelay:
    """Relay a symptom description to the completion API and keep the result."""

    def __init__(self, store: AnalysisStore, completion: CompletionClient, settings: Settings):
        self.store = store
        self.completion = completion
        self.reuse_previous = settings.reuse_previous_analysis
        self.default_risk_level = settings.default_risk_level
        logger.info(
            f"SymptomAnalysisRelay initialized (reuse={self.reuse_previous}, "
            f"default_risk_level={self.default_risk_level})"
        )

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze a caller's symptoms.

        Args:
            request: Symptoms, optional severity and the caller's identity

        Returns:
            The stored analysis for identical earlier text, or a fresh one

        Raises:
            InvalidRequest: symptoms blank, caller missing or unknown severity
            UpstreamFailure: the completion API failed
            MalformedUpstreamOutput: the completion held no usable JSON object
            PersistenceFailure: the reuse lookup could not read the store
        """
        symptoms, severity, caller_id = self._validate(request)
        logger.info(f"Analyzing symptoms for user {caller_id}: '{preview(symptoms)}' ({severity})")

        if self.reuse_previous:
            previous = self.store.find_by_symptoms(caller_id, symptoms)
            if previous is not None:
                logger.info(f"Reusing stored analysis {previous.id} for user {caller_id}")
                return previous

        text = self.completion.complete(build_messages(symptoms, severity))
        logger.debug(f"Raw completion: {preview(text, 500)}")

        parsed = parse_json_object(text)
        try:
            upstream = UpstreamAnalysis.model_validate(parsed)
        except ValidationError as e:
            logger.error(f"Completion JSON did not match the analysis schema: {e}")
            raise MalformedUpstreamOutput() from e

        risk_level, structured = normalize(upstream, self.default_risk_level)
        result = AnalysisResult(
            caller_id=caller_id,
            symptoms=symptoms,
            severity=severity,
            risk_level=risk_level,
            structured_result=structured,
        )

        try:
            self.store.insert(result)
        except PersistenceFailure:
            # Write failures are not fatal: the computed result is still returned
            logger.error(f"Returning unsaved analysis {result.id} for user {caller_id}")

        logger.info(f"Analysis {result.id} complete: risk_level={risk_level}")
        return result

    def _validate(self, request: AnalysisRequest) -> tuple[str, str, str]:
        symptoms = request.symptoms
        caller_id = request.caller_id
        if not symptoms or not symptoms.strip() or not caller_id:
            logger.warning("Rejected request without symptoms or user_id")
            raise InvalidRequest()

        if request.severity is None:
            severity = DEFAULT_SEVERITY
        else:
            severity = request.severity.strip().lower()
            if severity not in SEVERITIES:
                logger.warning(f"Rejected request with severity {request.severity!r}")
                raise InvalidRequest("Severity must be one of: mild, medium, severe")

        # symptoms stay verbatim: they are the reuse key
        return symptoms, severity, caller_id
