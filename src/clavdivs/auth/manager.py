"""Authentication manager: profile selection, rotation and cooldowns.

Selection for a provider request, first match wins:
1. An explicit profile_id is used as-is, or the request fails.
2. The agent's configured profile order.
3. The provider's last-good profile.
4. The least recently used eligible profile.

Profiles in cooldown are never eligible. The chosen profile is marked used at
selection time, before the caller has tried it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from clavdivs.auth.profile_store import AuthProfileStore
from clavdivs.auth.types import (
    ApiKeyCredential,
    AuthProfileConfig,
    AuthProfileCredential,
    Credentials,
    FailureReason,
    OAuthCredential,
    ResolvedAuthProfile,
    TokenCredential,
)
from clavdivs.errors import AuthenticationError, FailoverReason

if TYPE_CHECKING:
    from clavdivs.config import ClavdivsConfig

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWNS: dict[FailureReason, int] = {
    FailureReason.AUTH: 5 * 60 * 1000,
    FailureReason.BILLING: 60 * 60 * 1000,
    FailureReason.RATE_LIMIT: 15 * 60 * 1000,
    FailureReason.TIMEOUT: 2 * 60 * 1000,
    FailureReason.FORMAT: 30 * 1000,
    FailureReason.UNKNOWN: 60 * 1000,
}

_Candidate = tuple[str, AuthProfileCredential]


class AuthenticationManager:
    """Selects credentials for provider calls and tracks profile health."""

    def __init__(
        self,
        store: AuthProfileStore,
        cooldowns: Mapping[FailureReason | str, int] | None = None,
    ) -> None:
        self._store = store
        self._cooldowns = dict(DEFAULT_COOLDOWNS)
        for reason, cooldown_ms in (cooldowns or {}).items():
            self._cooldowns[FailureReason(reason)] = cooldown_ms

    @classmethod
    def from_config(
        cls, config: ClavdivsConfig, store: AuthProfileStore
    ) -> AuthenticationManager:
        return cls(store, cooldowns=config.cooldowns)

    @property
    def store(self) -> AuthProfileStore:
        return self._store

    @property
    def cooldowns(self) -> dict[FailureReason, int]:
        return dict(self._cooldowns)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def authenticate(self, config: AuthProfileConfig) -> Credentials:
        """Select a profile for ``config`` and return its normalized credentials.

        Raises:
            AuthenticationError: If no eligible profile exists.
        """
        return credential_to_credentials(self.resolve(config).credential)

    def resolve(self, config: AuthProfileConfig) -> ResolvedAuthProfile:
        """Select a profile for ``config`` and mark it used.

        Raises:
            AuthenticationError: If no eligible profile exists.
        """
        selected = self._resolve_profile(config)
        if selected is None:
            logger.warning(
                "No available authentication profile for provider %s (profile_id=%s)",
                config.provider,
                config.profile_id,
            )
            raise AuthenticationError(
                f"No available authentication profile for provider '{config.provider}'",
                config.provider,
                config.profile_id,
            )

        profile_id, credential = selected
        self._store.mark_profile_used(profile_id)
        return ResolvedAuthProfile(
            profile_id=profile_id,
            provider=credential.provider,
            credential=credential,
            stats=self._store.get_usage_stats(profile_id),
        )

    def is_valid(self, credentials: Credentials) -> bool:
        """Check that credentials carry a key and have not expired."""
        if not credentials.api_key:
            return False
        if credentials.expires_at:
            return self._store.now() < credentials.expires_at
        return True

    def _resolve_profile(self, config: AuthProfileConfig) -> _Candidate | None:
        if config.profile_id:
            credential = self._store.get_profile(config.profile_id)
            if credential is None or self._store.is_profile_in_cooldown(config.profile_id):
                return None
            logger.debug(
                "Selected profile %s for %s (explicit)", config.profile_id, config.provider
            )
            return config.profile_id, credential

        profiles = self._store.get_profiles_for_provider(config.provider)
        available = [
            (profile_id, credential)
            for profile_id, credential in profiles
            if not self._store.is_profile_in_cooldown(profile_id)
        ]
        if not available:
            return None

        return self._select_best_profile(available, config)

    def _select_best_profile(
        self, available: list[_Candidate], config: AuthProfileConfig
    ) -> _Candidate:
        by_id = dict(available)

        if config.agent_id:
            for profile_id in self._store.get_profile_order(config.agent_id) or []:
                if profile_id in by_id:
                    logger.debug(
                        "Selected profile %s for %s (agent_order)", profile_id, config.provider
                    )
                    return profile_id, by_id[profile_id]

        last_good = self._store.get_last_good_profile(config.provider)
        if last_good is not None and last_good in by_id:
            logger.debug("Selected profile %s for %s (last_good)", last_good, config.provider)
            return last_good, by_id[last_good]

        selected = self._select_least_recently_used(available)
        logger.debug("Selected profile %s for %s (lru)", selected[0], config.provider)
        return selected

    def _select_least_recently_used(self, available: list[_Candidate]) -> _Candidate:
        # min() keeps the first of equal keys, so ties go to insertion order.
        return min(available, key=lambda candidate: self._last_used(candidate[0]))

    def _last_used(self, profile_id: str) -> int:
        stats = self._store.get_usage_stats(profile_id)
        if stats is None or stats.last_used is None:
            return 0
        return stats.last_used

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def record_success(self, profile_id: str) -> None:
        """Mark the profile last-good for its provider and clear its cooldown."""
        self._store.mark_last_good_profile(profile_id)
        self._store.clear_profile_cooldown(profile_id)

    def record_failure(self, profile_id: str, reason: FailoverReason | str) -> None:
        """Apply the cooldown configured for ``reason`` to the profile."""
        failure_reason = map_failover_reason(reason)
        cooldown_ms = self._cooldowns[failure_reason]
        logger.warning(
            "Profile %s failed (%s), cooling down for %dms",
            profile_id,
            failure_reason.value,
            cooldown_ms,
        )
        self._store.mark_profile_failure(profile_id, failure_reason, cooldown_ms)


def map_failover_reason(reason: FailoverReason | str) -> FailureReason:
    """Narrow a failover reason to the reasons tracked per profile.

    ``context_overflow`` and unrecognized values become ``unknown``.
    """
    value = reason.value if isinstance(reason, FailoverReason) else reason
    try:
        return FailureReason(value)
    except ValueError:
        return FailureReason.UNKNOWN


def credential_to_credentials(credential: AuthProfileCredential) -> Credentials:
    """Normalize a stored credential into provider-facing credentials."""
    if isinstance(credential, ApiKeyCredential):
        return Credentials(api_key=credential.key, metadata=credential.metadata)
    if isinstance(credential, TokenCredential):
        return Credentials(api_key=credential.token, expires_at=credential.expires)
    if isinstance(credential, OAuthCredential):
        return Credentials(
            api_key=credential.access_token,
            refresh_token=credential.refresh_token,
            expires_at=credential.expires_at,
        )
    raise TypeError(f"Unsupported credential type: {type(credential).__name__}")


__all__ = [
    "DEFAULT_COOLDOWNS",
    "AuthenticationManager",
    "credential_to_credentials",
    "map_failover_reason",
]
