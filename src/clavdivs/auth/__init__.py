"""Authentication profiles, selection and failover.

This subpackage provides:
- Credential and usage-stat models
- AuthProfileStore with a lossless serialized form
- AuthenticationManager for profile selection and cooldowns
- FileProfileStorage for JSON persistence
- run_with_failover to rotate profiles on credential failures
"""

from clavdivs.auth.failover import FailoverExhaustedError, run_with_failover
from clavdivs.auth.manager import (
    DEFAULT_COOLDOWNS,
    AuthenticationManager,
    credential_to_credentials,
    map_failover_reason,
)
from clavdivs.auth.profile_store import AuthProfileStore
from clavdivs.auth.storage import FileProfileStorage
from clavdivs.auth.types import (
    ApiKeyCredential,
    AuthProfileConfig,
    AuthProfileCredential,
    AuthProfileStoreData,
    Credentials,
    FailureReason,
    OAuthCredential,
    ProfileUsageStats,
    ResolvedAuthProfile,
    TokenCredential,
)

__all__ = [
    "DEFAULT_COOLDOWNS",
    "ApiKeyCredential",
    "AuthProfileConfig",
    "AuthProfileCredential",
    "AuthProfileStore",
    "AuthProfileStoreData",
    "AuthenticationManager",
    "Credentials",
    "FailoverExhaustedError",
    "FailureReason",
    "FileProfileStorage",
    "OAuthCredential",
    "ProfileUsageStats",
    "ResolvedAuthProfile",
    "TokenCredential",
    "credential_to_credentials",
    "map_failover_reason",
    "run_with_failover",
]
