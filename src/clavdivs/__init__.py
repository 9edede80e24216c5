"""clavdivs - credential profiles and failover for LLM provider calls.

clavdivs provides:
- Auth Profiles: API key, bearer token and OAuth credentials per provider
- Selection: agent order, last-good and least-recently-used profile choice
- Cooldowns: per-reason cooldowns after failures, cleared on success
- Classification: map provider errors onto failover reasons
- Errors: structured, serializable error types

Quick Start:
    >>> from clavdivs import AuthenticationManager, AuthProfileStore
    >>> from clavdivs.auth import ApiKeyCredential, AuthProfileConfig
    >>>
    >>> store = AuthProfileStore()
    >>> store.upsert_profile("main", ApiKeyCredential(provider="anthropic", key="sk-..."))
    >>> manager = AuthenticationManager(store)
    >>> credentials = manager.authenticate(AuthProfileConfig(provider="anthropic"))

Failover:
    >>> from clavdivs import classify_failover_reason
    >>>
    >>> try:
    ...     await call_provider(credentials)
    ... except Exception as e:
    ...     manager.record_failure("main", classify_failover_reason(e))
"""

from ._version import __version__, __version_info__

# =============================================================================
# Lazy imports for top-level convenience
# =============================================================================
# __getattr__ keeps `import clavdivs` from importing pydantic and httpx.


def __getattr__(name: str) -> object:
    """Lazy import for top-level classes."""
    if name in (
        "AuthProfileStore",
        "AuthenticationManager",
        "FileProfileStorage",
        "run_with_failover",
    ):
        from . import auth

        return getattr(auth, name)

    if name in (
        "AgentError",
        "AuthenticationError",
        "FailoverError",
        "FailoverReason",
        "classify_failover_reason",
    ):
        from . import errors

        return getattr(errors, name)

    if name in ("ClavdivsConfig", "load_config"):
        from . import config

        return getattr(config, name)

    if name == "configure_logging":
        from .log import configure_logging

        return configure_logging

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Auth
    "AuthProfileStore",
    "AuthenticationManager",
    "FileProfileStorage",
    "run_with_failover",
    # Errors
    "AgentError",
    "AuthenticationError",
    "FailoverError",
    "FailoverReason",
    "classify_failover_reason",
    # Config
    "ClavdivsConfig",
    "load_config",
    "configure_logging",
]
