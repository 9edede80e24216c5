"""Authentication profile types.

This module defines the records the profile store persists:
- Credential variants (ApiKeyCredential, TokenCredential, OAuthCredential)
- ProfileUsageStats for recency and cooldown bookkeeping
- AuthProfileStoreData, the serialized store document
- AuthProfileConfig, Credentials and ResolvedAuthProfile for selection

Serialized keys are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FailureReason(str, Enum):
    """Failure reasons tracked per profile for cooldown accounting."""

    AUTH = "auth"
    BILLING = "billing"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    FORMAT = "format"
    UNKNOWN = "unknown"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiKeyCredential(_CamelModel):
    """API key credential.

    Attributes:
        type: Discriminator field, always "api_key".
        provider: Provider this key belongs to.
        key: The API key. May be absent for keyless providers.
        email: Account email, informational only.
        metadata: Provider-specific metadata (account ids, regions).
    """

    type: Literal["api_key"] = "api_key"
    provider: str
    key: str | None = None
    email: str | None = None
    metadata: dict[str, str] | None = None


class TokenCredential(_CamelModel):
    """Bearer token credential.

    Attributes:
        type: Discriminator field, always "token".
        provider: Provider this token belongs to.
        token: The bearer token.
        expires: Expiry timestamp in epoch milliseconds.
        email: Account email, informational only.
    """

    type: Literal["token"] = "token"
    provider: str
    token: str
    expires: int | None = None
    email: str | None = None


class OAuthCredential(_CamelModel):
    """OAuth credential with optional refresh token.

    Attributes:
        type: Discriminator field, always "oauth".
        provider: Provider this credential belongs to.
        access_token: Current access token.
        refresh_token: Refresh token, if issued.
        expires_at: Access token expiry in epoch milliseconds.
        client_id: OAuth client the tokens were issued to.
        email: Account email, informational only.
    """

    type: Literal["oauth"] = "oauth"
    provider: str
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    client_id: str | None = None
    email: str | None = None


AuthProfileCredential = Annotated[
    Union[ApiKeyCredential, TokenCredential, OAuthCredential],
    Field(discriminator="type"),
]


class ProfileUsageStats(_CamelModel):
    """Usage and failure bookkeeping for one profile.

    Timestamps are epoch milliseconds.
    """

    last_used: int | None = None
    cooldown_until: int | None = None
    error_count: int = 0
    failure_counts: dict[FailureReason, int] = Field(default_factory=dict)
    last_failure_at: int | None = None
    disabled_until: int | None = None
    disabled_reason: FailureReason | None = None


class AuthProfileStoreData(_CamelModel):
    """Serialized form of the profile store."""

    version: int = 1
    profiles: dict[str, AuthProfileCredential] = Field(default_factory=dict)
    order: dict[str, list[str]] = Field(default_factory=dict)
    last_good: dict[str, str] = Field(default_factory=dict)
    usage_stats: dict[str, ProfileUsageStats] = Field(default_factory=dict)


class AuthProfileConfig(BaseModel):
    """Profile selection request.

    Attributes:
        provider: Provider to authenticate with.
        profile_id: Specific profile to use. Selection never falls back
            to another profile when this is set.
        agent_id: Agent whose profile order preference applies.
    """

    provider: str
    profile_id: str | None = None
    agent_id: str | None = None


class Credentials(BaseModel):
    """Normalized credentials handed to provider clients."""

    api_key: str | None = None
    metadata: dict[str, Any] | None = None
    refresh_token: str | None = None
    expires_at: int | None = None


class ResolvedAuthProfile(BaseModel):
    """A selected profile together with its credential and stats."""

    profile_id: str
    provider: str
    credential: AuthProfileCredential
    stats: ProfileUsageStats | None = None


__all__ = [
    "ApiKeyCredential",
    "AuthProfileConfig",
    "AuthProfileCredential",
    "AuthProfileStoreData",
    "Credentials",
    "FailureReason",
    "OAuthCredential",
    "ProfileUsageStats",
    "ResolvedAuthProfile",
    "TokenCredential",
]
