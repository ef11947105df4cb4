"""
Error taxonomy for the website builder
"""

from typing import Optional


class WebcraftError(Exception):
    """Base class for every error raised by the builder"""


class ConfigurationError(WebcraftError):
    """Completion service credential is missing or invalid"""


class ValidationError(WebcraftError):
    """User input was rejected; no state was changed"""


class NotFoundError(WebcraftError):
    """A conversation id does not name an existing conversation"""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class RemoteCallFailure(WebcraftError):
    """
    The completion call failed (network, non-2xx status or malformed body)

    Args:
        message: Human-readable message, the provider's when available
        code: Provider-supplied error code, if any
        status_code: HTTP status of the failed response, if any
    """

    default_code: Optional[str] = None

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code


class EmptyResultError(RemoteCallFailure):
    """The call succeeded but returned less content than a usable page"""

    default_code = "empty_result"


class SessionBusyError(WebcraftError):
    """A generation is already in flight for this conversation"""


class RetryLimitReached(WebcraftError):
    """No manual retries are left for the current prompt"""
