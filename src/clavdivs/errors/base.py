"""Base error type for clavdivs."""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Stable error codes for programmatic identification."""

    AUTH_FAILED = "AUTH_FAILED"
    BILLING_ERROR = "BILLING_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    CONTEXT_OVERFLOW = "CONTEXT_OVERFLOW"
    COMPACTION_FAILED = "COMPACTION_FAILED"
    TIMEOUT = "TIMEOUT"
    INVALID_FORMAT = "INVALID_FORMAT"
    MODEL_NOT_SUPPORTED = "MODEL_NOT_SUPPORTED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    FAILOVER = "FAILOVER"


class AgentError(Exception):
    """Base class for all agent system errors.

    Subclasses declare ``code``, ``retryable`` and ``http_status`` and list
    their extra attributes in ``_fields`` as (attribute, serialized key) pairs.
    The wrapped ``cause`` is also set as ``__cause__`` so it shows up in
    tracebacks.
    """

    code: ClassVar[ErrorCode]
    retryable: ClassVar[bool]
    http_status: int
    _fields: ClassVar[tuple[tuple[str, str], ...]] = ()

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: dict[str, Any] = {
            "name": self.name,
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
            "httpStatus": self.http_status,
        }
        if self.cause is not None:
            data["cause"] = str(self.cause)
        for attr, key in self._fields:
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            data[key] = value
        return data


__all__ = ["AgentError", "ErrorCode"]
