"""Failover reasons, error classification and the failover error.

classify_failover_reason maps an arbitrary error onto a FailoverReason with
case-insensitive substring matching. Reasons are checked in a fixed order and
the first match wins: provider messages often carry several cues at once, and
quota exhaustion must be reported as billing rather than a transient rate
limit.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx

from clavdivs.errors.base import AgentError, ErrorCode


class FailoverReason(str, Enum):
    """Classified cause of an upstream failure."""

    AUTH = "auth"
    BILLING = "billing"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CONTEXT_OVERFLOW = "context_overflow"
    FORMAT = "format"
    UNKNOWN = "unknown"


_FAILOVER_STATUS: dict[FailoverReason, int] = {
    FailoverReason.AUTH: 401,
    FailoverReason.BILLING: 402,
    FailoverReason.RATE_LIMIT: 429,
    FailoverReason.TIMEOUT: 408,
    FailoverReason.CONTEXT_OVERFLOW: 413,
    FailoverReason.FORMAT: 400,
    FailoverReason.UNKNOWN: 500,
}

_ROTATE_PROFILE_REASONS = frozenset(
    {FailoverReason.AUTH, FailoverReason.BILLING, FailoverReason.RATE_LIMIT}
)
_FALLBACK_MODEL_REASONS = frozenset(
    {FailoverReason.CONTEXT_OVERFLOW, FailoverReason.FORMAT}
)

_AUTH_PATTERNS: tuple[str, ...] = (
    "unauthorized",
    "invalid api key",
    "invalid_api_key",
    "authentication failed",
    "auth",
    "401",
    "403",
    "forbidden",
    "invalid_authentication",
)
_BILLING_PATTERNS: tuple[str, ...] = (
    "insufficient",
    "quota",
    "credits",
    "billing",
    "payment",
    "402",
    "no_credits",
    "insufficient_quota",
    "account suspended",
)
_RATE_LIMIT_PATTERNS: tuple[str, ...] = (
    "rate limit",
    "rate_limit",
    "too many requests",
    "429",
    "overloaded",
    "quota_exceeded",
    "throttle",
)
_TIMEOUT_PATTERNS: tuple[str, ...] = (
    "timeout",
    "timed out",
    "deadline",
    "408",
    "aborterror",
    "connection timeout",
)
_CONTEXT_OVERFLOW_PATTERNS: tuple[str, ...] = (
    "context",
    "too long",
    "maximum context",
    "max_tokens",
    "token limit",
    "input too large",
    "413",
)
_FORMAT_PATTERNS: tuple[str, ...] = (
    "invalid format",
    "malformed",
    "parse error",
    "invalid_request",
    "bad request",
    "400",
)

# Checked in order, first match wins.
_CLASSIFICATION_RULES: tuple[tuple[FailoverReason, tuple[str, ...]], ...] = (
    (FailoverReason.AUTH, _AUTH_PATTERNS),
    (FailoverReason.BILLING, _BILLING_PATTERNS),
    (FailoverReason.RATE_LIMIT, _RATE_LIMIT_PATTERNS),
    (FailoverReason.TIMEOUT, _TIMEOUT_PATTERNS),
    (FailoverReason.CONTEXT_OVERFLOW, _CONTEXT_OVERFLOW_PATTERNS),
    (FailoverReason.FORMAT, _FORMAT_PATTERNS),
)


def resolve_failover_status(reason: FailoverReason | str) -> int:
    """Return the HTTP status reported for a failover reason."""
    try:
        return _FAILOVER_STATUS[FailoverReason(reason)]
    except ValueError:
        return 500


def _response_text(error: httpx.HTTPStatusError) -> str:
    try:
        return error.response.text
    except httpx.ResponseNotRead:
        return ""


def _error_texts(error: Any) -> tuple[str, str]:
    """Return (message, string form) for an error-like value, lowercased."""
    if isinstance(error, BaseException):
        message = str(error)
        if isinstance(error, httpx.HTTPStatusError):
            message = f"{message} {_response_text(error)}"
        return message.lower(), repr(error).lower()

    error_str = str(error)
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = error_str
    return message.lower(), error_str.lower()


def classify_failover_reason(error: Any) -> FailoverReason:
    """Classify an error into a failover reason.

    Exceptions contribute their message and their repr, which names the
    exception class (``ReadTimeout(...)``). Other objects contribute their
    ``message`` attribute when present and their string form. ``None`` and
    values with no recognizable text classify as ``unknown``. Never raises.
    """
    if isinstance(error, FailoverError):
        return error.reason
    if error is None:
        return FailoverReason.UNKNOWN

    try:
        message, error_str = _error_texts(error)
    except Exception:
        return FailoverReason.UNKNOWN

    for reason, patterns in _CLASSIFICATION_RULES:
        if any(p in message or p in error_str for p in patterns):
            return reason
    return FailoverReason.UNKNOWN


class FailoverError(AgentError):
    """Error that triggers profile rotation or model fallback."""

    code = ErrorCode.FAILOVER
    retryable = True
    _fields = (
        ("reason", "reason"),
        ("provider", "provider"),
        ("model", "model"),
        ("profile_id", "profileId"),
        ("should_rotate_profile", "shouldRotateProfile"),
        ("should_fallback_model", "shouldFallbackModel"),
    )

    def __init__(
        self,
        message: str,
        reason: FailoverReason | str,
        provider: str,
        model: str,
        profile_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.reason = FailoverReason(reason)
        self.provider = provider
        self.model = model
        self.profile_id = profile_id
        super().__init__(message, cause)

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        *,
        provider: str,
        model: str,
        profile_id: str | None = None,
    ) -> FailoverError:
        """Classify ``error`` and wrap it as a FailoverError.

        An existing FailoverError keeps its reason and message; the given
        provider, model and profile id replace its own where supplied.
        """
        if isinstance(error, FailoverError):
            return cls(
                error.message,
                error.reason,
                provider or error.provider,
                model or error.model,
                profile_id if profile_id is not None else error.profile_id,
                cause=error,
            )
        reason = classify_failover_reason(error)
        message = str(error) or type(error).__name__
        return cls(message, reason, provider, model, profile_id, cause=error)

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return resolve_failover_status(self.reason)

    @property
    def should_rotate_profile(self) -> bool:
        """Credential-specific failure: another profile may succeed."""
        return self.reason in _ROTATE_PROFILE_REASONS

    @property
    def should_fallback_model(self) -> bool:
        """Payload-specific failure: another model or request shape may succeed."""
        return self.reason in _FALLBACK_MODEL_REASONS


__all__ = [
    "FailoverError",
    "FailoverReason",
    "classify_failover_reason",
    "resolve_failover_status",
]
