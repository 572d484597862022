"""
Custom Exceptions for VidSearch
"""


class VidSearchException(Exception):
    """Base exception for all VidSearch errors"""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# Validation Exceptions
class ValidationError(VidSearchException):
    """Input validation failed (no upstream call is made)"""

    pass


# Critical-path upstream failures: abort the search with no partial results
class UpstreamCriticalError(VidSearchException):
    """A provider on the search critical path failed"""

    pass


class EmbeddingFailedError(UpstreamCriticalError):
    """Query text could not be turned into a vector"""

    pass


class StoreUnavailableError(UpstreamCriticalError):
    """Candidate store unreachable or erroring"""

    pass


class RecordNotFoundError(VidSearchException):
    """Requested record not found in database"""

    pass


# LLM Exceptions (explanation provider; degraded, never surfaced to search callers)
class LLMError(VidSearchException):
    """LLM operation failed"""

    pass


# Identity
class AuthenticationError(VidSearchException):
    """Authentication failed"""

    pass


class JWTDecodeError(AuthenticationError):
    """JWT decoding failed"""

    pass
