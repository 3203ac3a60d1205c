"""Error types surfaced by the relay.

Each error carries the HTTP status the API layer answers with and a
caller-safe message. Upstream-fault errors never carry raw model output or
provider response bodies in their message.
"""


class RelayError(Exception):
    """Base class for every error the relay reports to a caller."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(RelayError):
    """The caller sent a request the relay cannot act on."""

    status_code = 400
    default_message = "Symptoms and user_id are required"


class Unauthenticated(RelayError):
    """The caller identity is missing or invalid."""

    status_code = 401
    default_message = "Authentication required"


class AnalysisNotFound(RelayError):
    """No stored analysis with that id belongs to the caller."""

    status_code = 404
    default_message = "Analysis not found"


class ConfigurationError(RelayError):
    """The server is missing configuration it needs to reach the model."""

    default_message = "Server missing API key"


class UpstreamFailure(RelayError):
    """The completion API could not be reached or answered with an error."""

    default_message = "Symptom analysis service is unavailable"


class MalformedUpstreamOutput(RelayError):
    """The completion API answered, but not with a usable analysis."""

    default_message = "Symptom analysis returned an unreadable result"


class PersistenceFailure(RelayError):
    """The analysis store could not be read or written."""

    default_message = "Failed to access stored analyses"
