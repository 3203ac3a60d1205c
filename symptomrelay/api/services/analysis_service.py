"""Wire the relay to its collaborators for one API request."""

import time
from typing import Optional

from symptomrelay.api.schemas.request import AnalyzeSymptomsRequest
from symptomrelay.api.schemas.response import (
    AnalysisHistoryItem,
    AnalysisHistoryResponse,
    AnalyzeSymptomsResponse,
)
from symptomrelay.config import Settings
from symptomrelay.errors import AnalysisNotFound, InvalidRequest
from symptomrelay.logger import get_logger
from symptomrelay.models.analysis import AnalysisRequest
from symptomrelay.services.completion import (
    CompletionClient,
    LazyCompletionClient,
    build_completion_client,
)
from symptomrelay.services.relay import SymptomAnalysisRelay
from symptomrelay.services.store import AnalysisStore

logger = get_logger(__name__)


class AnalysisService:
    """Request-scoped facade over the relay and the analysis store."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[AnalysisStore] = None,
        completion: Optional[CompletionClient] = None,
    ):
        self.settings = settings
        self.store = store or AnalysisStore(settings.database_path)
        self.completion = completion

    def analyze(self, request: AnalyzeSymptomsRequest) -> AnalyzeSymptomsResponse:
        """Run one analysis and shape it for the response body."""
        start_time = time.time()
        analysis_request = AnalysisRequest(
            symptoms=request.symptoms,
            severity=request.severity,
            caller_id=request.user_id,
        )

        if self.completion is None:
            self.completion = LazyCompletionClient(lambda: build_completion_client(self.settings))
        relay = SymptomAnalysisRelay(self.store, self.completion, self.settings)

        result = relay.analyze(analysis_request)
        logger.info(f"Analysis {result.id} served in {time.time() - start_time:.2f}s")
        return AnalyzeSymptomsResponse.from_result(result)

    def history(self, user_id: Optional[str], limit: int) -> AnalysisHistoryResponse:
        """List a user's stored analyses, newest first."""
        if not user_id:
            raise InvalidRequest("user_id is required")
        results = self.store.list_for_user(user_id, limit=limit)
        items = [AnalysisHistoryItem.from_result(r) for r in results]
        logger.info(f"Returning {len(items)} analyses for user {user_id}")
        return AnalysisHistoryResponse(analyses=items, total_count=len(items))

    def get(self, user_id: Optional[str], analysis_id: str) -> AnalysisHistoryItem:
        """Fetch one stored analysis owned by the user."""
        if not user_id:
            raise InvalidRequest("user_id is required")
        result = self.store.get(analysis_id)
        if result is None or result.caller_id != user_id:
            raise AnalysisNotFound()
        return AnalysisHistoryItem.from_result(result)

    def close(self):
        """Clean up resources."""
        if self.completion is None:
            return
        try:
            self.completion.close()
            logger.debug("AnalysisService resources closed")
        except Exception as e:
            logger.warning(f"Error closing AnalysisService resources: {e}")
