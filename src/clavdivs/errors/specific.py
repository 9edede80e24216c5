"""Specific error types for common agent failure modes."""

from __future__ import annotations

from clavdivs.errors.base import AgentError, ErrorCode


class AuthenticationError(AgentError):
    """No usable credential, or the provider rejected it."""

    code = ErrorCode.AUTH_FAILED
    retryable = True
    http_status = 401
    _fields = (("provider", "provider"), ("profile_id", "profileId"))

    def __init__(
        self,
        message: str,
        provider: str,
        profile_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.provider = provider
        self.profile_id = profile_id
        super().__init__(message, cause)


class BillingError(AgentError):
    """Billing or quota problem on the provider account."""

    code = ErrorCode.BILLING_ERROR
    retryable = True
    http_status = 402
    _fields = (("provider", "provider"), ("profile_id", "profileId"))

    def __init__(
        self,
        message: str,
        provider: str,
        profile_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.provider = provider
        self.profile_id = profile_id
        super().__init__(message, cause)


class RateLimitError(AgentError):
    """Provider rate limit exceeded."""

    code = ErrorCode.RATE_LIMIT
    retryable = True
    http_status = 429
    _fields = (("provider", "provider"), ("retry_after_seconds", "retryAfterSeconds"))

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after_seconds: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.provider = provider
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, cause)


class ContextOverflowError(AgentError):
    """Conversation exceeds the model's context window."""

    code = ErrorCode.CONTEXT_OVERFLOW
    retryable = True
    http_status = 413
    _fields = (("current_tokens", "currentTokens"), ("max_tokens", "maxTokens"))

    def __init__(
        self,
        message: str,
        current_tokens: int,
        max_tokens: int,
        cause: BaseException | None = None,
    ) -> None:
        self.current_tokens = current_tokens
        self.max_tokens = max_tokens
        super().__init__(message, cause)


class CompactionFailureError(AgentError):
    """Session history could not be compacted."""

    code = ErrorCode.COMPACTION_FAILED
    retryable = False
    http_status = 500
    _fields = (("session_id", "sessionId"),)

    def __init__(
        self, message: str, session_id: str, cause: BaseException | None = None
    ) -> None:
        self.session_id = session_id
        super().__init__(message, cause)


class RequestTimeoutError(AgentError):
    """Provider request timed out."""

    code = ErrorCode.TIMEOUT
    retryable = True
    http_status = 408
    _fields = (("timeout_ms", "timeoutMs"),)

    def __init__(
        self, message: str, timeout_ms: int, cause: BaseException | None = None
    ) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(message, cause)


class FormatError(AgentError):
    """Request payload was rejected as malformed."""

    code = ErrorCode.INVALID_FORMAT
    retryable = False
    http_status = 400
    _fields = (("details", "details"),)

    def __init__(
        self,
        message: str,
        details: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.details = details
        super().__init__(message, cause)


class ModelNotSupportedError(AgentError):
    """Provider does not serve the requested model."""

    code = ErrorCode.MODEL_NOT_SUPPORTED
    retryable = False
    http_status = 400
    _fields = (("model", "model"), ("provider", "provider"))

    def __init__(
        self,
        message: str,
        model: str,
        provider: str,
        cause: BaseException | None = None,
    ) -> None:
        self.model = model
        self.provider = provider
        super().__init__(message, cause)


class SessionNotFoundError(AgentError):
    """No session exists under the given id."""

    code = ErrorCode.SESSION_NOT_FOUND
    retryable = False
    http_status = 404
    _fields = (("session_id", "sessionId"),)

    def __init__(
        self, message: str, session_id: str, cause: BaseException | None = None
    ) -> None:
        self.session_id = session_id
        super().__init__(message, cause)


__all__ = [
    "AuthenticationError",
    "BillingError",
    "CompactionFailureError",
    "ContextOverflowError",
    "FormatError",
    "ModelNotSupportedError",
    "RateLimitError",
    "RequestTimeoutError",
    "SessionNotFoundError",
]
