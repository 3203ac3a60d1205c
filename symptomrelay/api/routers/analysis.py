"""Symptom analysis endpoints."""

import secrets
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Header, Query

from symptomrelay.api.schemas.request import AnalyzeSymptomsRequest
from symptomrelay.api.schemas.response import (
    AnalysisHistoryItem,
    AnalysisHistoryResponse,
    AnalyzeSymptomsResponse,
    ErrorResponse,
)
from symptomrelay.api.services.analysis_service import AnalysisService
from symptomrelay.config import Settings, get_settings
from symptomrelay.errors import Unauthenticated
from symptomrelay.logger import get_logger, preview

logger = get_logger(__name__)


def verify_caller(
    authorization: Optional[str] = Header(default=None),
    apikey: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    """Require the shared relay token when one is configured."""
    expected = settings.relay_auth_token
    if not expected:
        return

    token = apikey
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()

    if not secrets.compare_digest((token or "").encode(), expected.encode()):
        logger.warning("Rejected request with missing or invalid token")
        raise Unauthenticated()


router = APIRouter(
    dependencies=[Depends(verify_caller)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def get_analysis_service(settings: Settings = Depends(get_settings)) -> Iterator[AnalysisService]:
    """Dependency to get an AnalysisService instance."""
    service = AnalysisService(settings)
    try:
        yield service
    finally:
        service.close()


@router.post("/analyze-symptoms", response_model=AnalyzeSymptomsResponse)
def analyze_symptoms(
    request: AnalyzeSymptomsRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze a symptom description.

    - **symptoms**: Free-text description of the symptoms
    - **severity**: mild, medium or severe (default: medium)
    - **user_id**: Identity of the requesting user

    Identical symptom text from the same user returns the stored analysis.
    """
    logger.info(f"Received analysis request: symptoms='{preview(request.symptoms or '')}'")
    return service.analyze(request)


@router.get("/analyses", response_model=AnalysisHistoryResponse)
def list_analyses(
    user_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=200),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    List a user's stored analyses, newest first.

    - **user_id**: Identity of the user
    - **limit**: Maximum number of analyses (default: 50)
    """
    return service.history(user_id, limit)


@router.get("/analyses/{analysis_id}", response_model=AnalysisHistoryItem)
def get_analysis(
    analysis_id: str,
    user_id: Optional[str] = None,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Fetch one stored analysis owned by the user."""
    return service.get(user_id, analysis_id)
