"""
Application errors for clean API error handling.

Every error the ask pipeline can surface derives from AppError, which carries
the HTTP status the API boundary should answer with. Only ExtractionError is
ever recovered from (per file, inside aggregation); the rest fail the request.
"""


class AppError(Exception):
    """Base class for errors rendered as {"error": ...} by the API."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(AppError):
    """Raised when the request body has the wrong shape (missing question, bad turns)."""

    status_code = 400


class ConfigurationError(AppError):
    """Raised when credentials or identifiers are missing or malformed."""


class UpstreamFetchError(AppError):
    """Raised when the Drive folder cannot be listed or a file cannot be fetched."""


class ExtractionError(AppError):
    """Raised when a single file's text cannot be extracted."""

    def __init__(self, file_name: str, reason: str = "") -> None:
        self.file_name = file_name
        detail = f"Failed to extract text from {file_name}"
        super().__init__(f"{detail}: {reason}" if reason else detail)


class EmptyKnowledgeBaseError(AppError):
    """Raised when the folder holds no files or no file produced usable text."""


class ModelCallError(AppError):
    """Raised when the language model call fails or returns an unusable reply."""


SAFETY_BLOCKED_MESSAGE = (
    "The response was blocked due to safety settings. Try rephrasing your question."
)
EMPTY_RESPONSE_MESSAGE = "Received an empty or invalid response from the language model."


class EmptyModelResponseError(ModelCallError):
    """The model answered successfully but without text. safety_blocked tells the two cases apart."""

    def __init__(self, safety_blocked: bool = False, reason: str | None = None) -> None:
        self.safety_blocked = safety_blocked
        self.reason = reason
        super().__init__(SAFETY_BLOCKED_MESSAGE if safety_blocked else EMPTY_RESPONSE_MESSAGE)
