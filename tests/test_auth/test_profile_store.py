"""Tests for AuthProfileStore."""

import pytest

from clavdivs.auth.profile_store import AuthProfileStore
from clavdivs.auth.types import (
    ApiKeyCredential,
    FailureReason,
    OAuthCredential,
    TokenCredential,
)


@pytest.fixture
def store(clock):
    return AuthProfileStore(clock=clock)


class TestProfiles:
    """Tests for profile CRUD."""

    def test_upsert_and_get(self, store):
        """upsert_profile stores the credential under its id."""
        credential = ApiKeyCredential(provider="anthropic", key="sk-1")
        store.upsert_profile("p1", credential)
        assert store.get_profile("p1") == credential
        assert store.get_all_profile_ids() == ["p1"]

    def test_upsert_replaces(self, store):
        """upsert_profile replaces an existing profile."""
        store.upsert_profile("p1", ApiKeyCredential(provider="anthropic", key="old"))
        store.upsert_profile("p1", ApiKeyCredential(provider="anthropic", key="new"))
        assert store.get_profile("p1").key == "new"
        assert store.get_all_profile_ids() == ["p1"]

    def test_get_missing_profile(self, store):
        """get_profile returns None for unknown ids."""
        assert store.get_profile("missing") is None

    def test_profiles_for_provider(self, store):
        """get_profiles_for_provider filters by provider in insertion order."""
        store.upsert_profile("a", ApiKeyCredential(provider="anthropic", key="ka"))
        store.upsert_profile("o", ApiKeyCredential(provider="openai", key="ko"))
        store.upsert_profile("b", TokenCredential(provider="anthropic", token="tb"))

        result = store.get_profiles_for_provider("anthropic")

        assert [profile_id for profile_id, _ in result] == ["a", "b"]
        assert store.get_profiles_for_provider("google") == []

    def test_delete_profile_purges_stats(self, store):
        """delete_profile removes the profile and its usage stats."""
        store.upsert_profile("p1", ApiKeyCredential(provider="anthropic", key="k"))
        store.mark_profile_used("p1")

        assert store.delete_profile("p1") is True
        assert store.get_profile("p1") is None
        assert store.get_usage_stats("p1") is None

    def test_delete_missing_profile(self, store):
        """delete_profile returns False when nothing was deleted."""
        assert store.delete_profile("missing") is False


class TestOrderAndLastGood:
    """Tests for order preferences and last-good pointers."""

    def test_profile_order(self, store):
        """set_profile_order stores a copy of the list."""
        order = ["b", "a"]
        store.set_profile_order("agent-1", order)
        order.append("c")

        assert store.get_profile_order("agent-1") == ["b", "a"]
        assert store.get_profile_order("agent-2") is None

    def test_mark_last_good(self, store):
        """mark_last_good_profile points the provider at the profile."""
        store.upsert_profile("p1", ApiKeyCredential(provider="anthropic", key="k"))
        store.mark_last_good_profile("p1")
        assert store.get_last_good_profile("anthropic") == "p1"

    def test_mark_last_good_unknown_profile(self, store):
        """mark_last_good_profile ignores unknown ids."""
        store.mark_last_good_profile("ghost")
        assert store.to_dict()["lastGood"] == {}

    def test_last_good_overwritten(self, store):
        """A newer last-good profile replaces the old pointer."""
        store.upsert_profile("p1", ApiKeyCredential(provider="anthropic", key="k1"))
        store.upsert_profile("p2", ApiKeyCredential(provider="anthropic", key="k2"))
        store.mark_last_good_profile("p1")
        store.mark_last_good_profile("p2")
        assert store.get_last_good_profile("anthropic") == "p2"


class TestUsageStats:
    """Tests for usage and cooldown bookkeeping."""

    def test_mark_used_creates_stats(self, store, clock):
        """mark_profile_used lazily creates stats with last_used = now."""
        assert store.get_usage_stats("p1") is None
        store.mark_profile_used("p1")

        stats = store.get_usage_stats("p1")
        assert stats.last_used == clock.now
        assert stats.error_count == 0

    def test_mark_failure(self, store, clock):
        """mark_profile_failure sets cooldown and increments counters."""
        store.mark_profile_failure("p1", FailureReason.AUTH, 60_000)
        store.mark_profile_failure("p1", FailureReason.AUTH, 60_000)
        store.mark_profile_failure("p1", FailureReason.RATE_LIMIT, 60_000)

        stats = store.get_usage_stats("p1")
        assert stats.last_failure_at == clock.now
        assert stats.cooldown_until == clock.now + 60_000
        assert stats.error_count == 3
        assert stats.failure_counts == {
            FailureReason.AUTH: 2,
            FailureReason.RATE_LIMIT: 1,
        }

    def test_mark_failure_invalid_reason_leaves_no_stats(self, store):
        """An unknown reason is rejected before any stats are created."""
        with pytest.raises(ValueError):
            store.mark_profile_failure("p1", "exploded", 60_000)

        assert store.get_usage_stats("p1") is None

    def test_cooldown_expires_with_time(self, store, clock):
        """A profile leaves cooldown once the clock passes cooldown_until."""
        store.mark_profile_failure("p1", FailureReason.TIMEOUT, 1_000)
        assert store.is_profile_in_cooldown("p1") is True

        clock.advance(999)
        assert store.is_profile_in_cooldown("p1") is True

        clock.advance(1)
        assert store.is_profile_in_cooldown("p1") is False
        # Expired cooldowns are not cleared, only ignored.
        assert store.get_usage_stats("p1").cooldown_until is not None

    def test_negative_cooldown_already_expired(self, store):
        """A negative cooldown is already over."""
        store.mark_profile_failure("p1", FailureReason.AUTH, -1_000)
        assert store.is_profile_in_cooldown("p1") is False

    def test_clear_cooldown(self, store):
        """clear_profile_cooldown unsets cooldown_until."""
        store.mark_profile_failure("p1", FailureReason.BILLING, 60_000)
        store.clear_profile_cooldown("p1")

        assert store.is_profile_in_cooldown("p1") is False
        assert store.get_usage_stats("p1").cooldown_until is None
        assert store.get_usage_stats("p1").error_count == 1

    def test_clear_cooldown_without_stats(self, store):
        """clear_profile_cooldown is a no-op when no stats exist."""
        store.clear_profile_cooldown("p1")
        assert store.get_usage_stats("p1") is None

    def test_not_in_cooldown_without_stats(self, store):
        """Profiles without stats are never in cooldown."""
        assert store.is_profile_in_cooldown("p1") is False


class TestSerialization:
    """Tests for to_dict / from_dict."""

    def test_empty_store(self):
        """An empty store serializes with every map present."""
        assert AuthProfileStore().to_dict() == {
            "version": 1,
            "profiles": {},
            "order": {},
            "lastGood": {},
            "usageStats": {},
        }

    def test_empty_round_trip(self):
        """An empty document round-trips unchanged."""
        doc = AuthProfileStore().to_dict()
        assert AuthProfileStore.from_dict(doc).to_dict() == doc

    def test_full_round_trip(self, store):
        """A populated store round-trips losslessly."""
        store.upsert_profile(
            "key",
            ApiKeyCredential(provider="anthropic", key="sk", metadata={"region": "eu"}),
        )
        store.upsert_profile(
            "tok", TokenCredential(provider="openai", token="t", expires=123)
        )
        store.upsert_profile(
            "oa",
            OAuthCredential(
                provider="google",
                access_token="at",
                refresh_token="rt",
                expires_at=456,
                client_id="cid",
                email="me@example.com",
            ),
        )
        store.set_profile_order("agent-1", ["tok", "key"])
        store.mark_last_good_profile("key")
        store.mark_profile_used("key")
        store.mark_profile_failure("tok", FailureReason.RATE_LIMIT, 5_000)

        doc = store.to_dict()
        assert AuthProfileStore.from_dict(doc).to_dict() == doc

    def test_serialized_keys_are_camel_case(self, store, clock):
        """The document uses camelCase keys and omits unset fields."""
        store.upsert_profile(
            "oa", OAuthCredential(provider="google", access_token="at", refresh_token="rt")
        )
        store.mark_profile_failure("oa", FailureReason.AUTH, 100)

        doc = store.to_dict()

        assert doc["profiles"]["oa"] == {
            "type": "oauth",
            "provider": "google",
            "accessToken": "at",
            "refreshToken": "rt",
        }
        assert doc["usageStats"]["oa"] == {
            "cooldownUntil": clock.now + 100,
            "errorCount": 1,
            "failureCounts": {"auth": 1},
            "lastFailureAt": clock.now,
        }

    def test_from_dict_parses_credential_variants(self):
        """Credentials are parsed by their type discriminator."""
        store = AuthProfileStore.from_dict(
            {
                "version": 1,
                "profiles": {
                    "a": {"type": "api_key", "provider": "anthropic", "key": "k"},
                    "t": {"type": "token", "provider": "openai", "token": "t"},
                    "o": {"type": "oauth", "provider": "google", "accessToken": "at"},
                },
            }
        )
        assert isinstance(store.get_profile("a"), ApiKeyCredential)
        assert isinstance(store.get_profile("t"), TokenCredential)
        assert isinstance(store.get_profile("o"), OAuthCredential)
        assert store.to_dict()["order"] == {}

    def test_store_does_not_share_stats_with_source(self, store):
        """Mutating a store does not alter the document it was built from."""
        store.mark_profile_used("p1")
        data = store.to_data()

        copy = AuthProfileStore(data)
        copy.mark_profile_failure("p1", FailureReason.AUTH, 1_000)

        assert data.usage_stats["p1"].error_count == 0

    def test_snapshot_does_not_share_profiles(self, store):
        """Mutating a to_data() snapshot leaves the store's credentials alone."""
        store.upsert_profile("a", ApiKeyCredential(provider="anthropic", key="original"))

        data = store.to_data()
        data.profiles["a"].key = "changed"

        assert store.get_profile("a").key == "original"

    def test_store_does_not_share_profiles_with_source(self):
        """Mutating the source document does not reach a store built from it."""
        source = AuthProfileStore()
        source.upsert_profile("a", ApiKeyCredential(provider="anthropic", key="original"))
        data = source.to_data()

        store = AuthProfileStore(data)
        data.profiles["a"].key = "changed"

        assert store.get_profile("a").key == "original"

    def test_disabled_fields_round_trip(self):
        """disabledUntil and disabledReason survive a load and save."""
        doc = {
            "version": 1,
            "profiles": {"a": {"type": "api_key", "provider": "anthropic", "key": "k"}},
            "order": {},
            "lastGood": {},
            "usageStats": {
                "a": {
                    "errorCount": 3,
                    "failureCounts": {"billing": 3},
                    "disabledUntil": 1_700_000_000_000,
                    "disabledReason": "billing",
                }
            },
        }

        store = AuthProfileStore.from_dict(doc)

        stats = store.get_usage_stats("a")
        assert stats.disabled_until == 1_700_000_000_000
        assert stats.disabled_reason == FailureReason.BILLING
        assert store.to_dict() == doc
