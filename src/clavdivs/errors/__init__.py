"""Error types and failure classification.

This subpackage provides:
- AgentError: base error with code, retryability and HTTP status
- Specific errors for authentication, billing, rate limits, timeouts, etc.
- FailoverError and classify_failover_reason for profile/model failover
"""

from clavdivs.errors.base import AgentError, ErrorCode
from clavdivs.errors.failover import (
    FailoverError,
    FailoverReason,
    classify_failover_reason,
    resolve_failover_status,
)
from clavdivs.errors.specific import (
    AuthenticationError,
    BillingError,
    CompactionFailureError,
    ContextOverflowError,
    FormatError,
    ModelNotSupportedError,
    RateLimitError,
    RequestTimeoutError,
    SessionNotFoundError,
)

__all__ = [
    "AgentError",
    "AuthenticationError",
    "BillingError",
    "CompactionFailureError",
    "ContextOverflowError",
    "ErrorCode",
    "FailoverError",
    "FailoverReason",
    "FormatError",
    "ModelNotSupportedError",
    "RateLimitError",
    "RequestTimeoutError",
    "SessionNotFoundError",
    "classify_failover_reason",
    "resolve_failover_status",
]
