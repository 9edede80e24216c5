"""Authentication profile store.

Holds profiles, per-agent order preferences, per-provider last-good pointers
and per-profile usage statistics. The store records state only; selection
policy lives in AuthenticationManager.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from clavdivs.auth.types import (
    AuthProfileCredential,
    AuthProfileStoreData,
    FailureReason,
    ProfileUsageStats,
)

DEFAULT_STORE_VERSION = 1


def _now_ms() -> int:
    """Return wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class AuthProfileStore:
    """In-memory profile store with a lossless serialized form."""

    def __init__(
        self,
        data: AuthProfileStoreData | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if data is None:
            data = AuthProfileStoreData(version=DEFAULT_STORE_VERSION)
        self._clock = clock
        self._version = data.version
        self._profiles: dict[str, AuthProfileCredential] = {
            k: v.model_copy(deep=True) for k, v in data.profiles.items()
        }
        self._order: dict[str, list[str]] = {k: list(v) for k, v in data.order.items()}
        self._last_good: dict[str, str] = dict(data.last_good)
        self._usage_stats: dict[str, ProfileUsageStats] = {
            k: v.model_copy(deep=True) for k, v in data.usage_stats.items()
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], clock: Callable[[], int] = _now_ms
    ) -> AuthProfileStore:
        """Build a store from its serialized form."""
        return cls(AuthProfileStoreData.model_validate(data), clock=clock)

    @property
    def version(self) -> int:
        return self._version

    def now(self) -> int:
        """Current time in epoch milliseconds, as seen by this store."""
        return self._clock()

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_all_profile_ids(self) -> list[str]:
        return list(self._profiles)

    def get_profiles_for_provider(
        self, provider: str
    ) -> list[tuple[str, AuthProfileCredential]]:
        """Return (profile_id, credential) pairs for a provider in insertion order."""
        return [
            (profile_id, credential)
            for profile_id, credential in self._profiles.items()
            if credential.provider == provider
        ]

    def get_profile(self, profile_id: str) -> AuthProfileCredential | None:
        return self._profiles.get(profile_id)

    def upsert_profile(self, profile_id: str, credential: AuthProfileCredential) -> None:
        self._profiles[profile_id] = credential

    def delete_profile(self, profile_id: str) -> bool:
        """Delete a profile and its usage stats. Returns True if it existed."""
        if profile_id not in self._profiles:
            return False
        del self._profiles[profile_id]
        self._usage_stats.pop(profile_id, None)
        return True

    # ------------------------------------------------------------------
    # Order and last-good
    # ------------------------------------------------------------------

    def get_profile_order(self, agent_id: str) -> list[str] | None:
        order = self._order.get(agent_id)
        return list(order) if order is not None else None

    def set_profile_order(self, agent_id: str, order: list[str]) -> None:
        self._order[agent_id] = list(order)

    def get_last_good_profile(self, provider: str) -> str | None:
        return self._last_good.get(provider)

    def mark_last_good_profile(self, profile_id: str) -> None:
        """Point the profile's provider at this profile. Unknown ids are ignored."""
        credential = self._profiles.get(profile_id)
        if credential is not None:
            self._last_good[credential.provider] = profile_id

    # ------------------------------------------------------------------
    # Usage stats
    # ------------------------------------------------------------------

    def get_usage_stats(self, profile_id: str) -> ProfileUsageStats | None:
        return self._usage_stats.get(profile_id)

    def mark_profile_used(self, profile_id: str) -> None:
        self._ensure_usage_stats(profile_id).last_used = self._clock()

    def mark_profile_failure(
        self, profile_id: str, reason: FailureReason, cooldown_ms: int
    ) -> None:
        """Record a failure and start a cooldown of ``cooldown_ms``.

        A negative ``cooldown_ms`` yields a cooldown that has already expired.
        """
        reason = FailureReason(reason)
        stats = self._ensure_usage_stats(profile_id)
        now = self._clock()

        stats.last_failure_at = now
        stats.cooldown_until = now + cooldown_ms
        stats.error_count += 1
        stats.failure_counts[reason] = stats.failure_counts.get(reason, 0) + 1

    def clear_profile_cooldown(self, profile_id: str) -> None:
        stats = self._usage_stats.get(profile_id)
        if stats is not None:
            stats.cooldown_until = None

    def is_profile_in_cooldown(self, profile_id: str) -> bool:
        stats = self._usage_stats.get(profile_id)
        if stats is None or stats.cooldown_until is None:
            return False
        return self._clock() < stats.cooldown_until

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_data(self) -> AuthProfileStoreData:
        return AuthProfileStoreData(
            version=self._version,
            profiles={k: v.model_copy(deep=True) for k, v in self._profiles.items()},
            order={k: list(v) for k, v in self._order.items()},
            last_good=dict(self._last_good),
            usage_stats={k: v.model_copy(deep=True) for k, v in self._usage_stats.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible store document."""
        return self.to_data().model_dump(mode="json", by_alias=True, exclude_none=True)

    def _ensure_usage_stats(self, profile_id: str) -> ProfileUsageStats:
        stats = self._usage_stats.get(profile_id)
        if stats is None:
            stats = ProfileUsageStats()
            self._usage_stats[profile_id] = stats
        return stats


__all__ = [
    "DEFAULT_STORE_VERSION",
    "AuthProfileStore",
]
