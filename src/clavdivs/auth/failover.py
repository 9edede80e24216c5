"""Failover loop over authentication profiles."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from clavdivs.auth.manager import AuthenticationManager, credential_to_credentials
from clavdivs.auth.types import AuthProfileConfig, Credentials
from clavdivs.errors import AuthenticationError, FailoverError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailoverExhaustedError(Exception):
    """Every attempted profile failed with a rotatable error."""

    def __init__(self, last_error: FailoverError, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"All profiles failed after {attempts} attempt(s). Last error: {last_error}"
        )


async def run_with_failover(
    manager: AuthenticationManager,
    config: AuthProfileConfig,
    operation: Callable[[Credentials], Awaitable[T]],
    *,
    model: str = "",
    max_attempts: int | None = None,
) -> T:
    """
    Run an operation, rotating to another profile on credential failures.

    Each failure is classified and fed to ``manager.record_failure``, which
    puts the profile in cooldown so the next selection skips it. Only
    rotatable failures (auth, billing, rate limit) move on to another
    profile, and never when ``config.profile_id`` pins one.

    Args:
        manager: AuthenticationManager that selects profiles
        config: Selection request (provider, optional profile/agent)
        operation: Async callable that takes Credentials and returns a result
        model: Model name recorded on raised FailoverErrors
        max_attempts: Maximum number of profiles to try
            (default: number of profiles for the provider)

    Returns:
        Result from the first successful operation

    Raises:
        ValueError: If max_attempts is less than 1
        AuthenticationError: If no profile is available on the first attempt
        FailoverError: If the operation fails with a non-rotatable error
        FailoverExhaustedError: If rotatable failures used up every attempt
            or every available profile
    """
    if max_attempts is None:
        max_attempts = max(1, len(manager.store.get_profiles_for_provider(config.provider)))
    elif max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: FailoverError | None = None
    attempts = 0

    while attempts < max_attempts:
        try:
            resolved = manager.resolve(config)
        except AuthenticationError:
            if last_error is not None:
                raise FailoverExhaustedError(last_error, attempts) from last_error
            raise

        attempts += 1
        credentials = credential_to_credentials(resolved.credential)

        try:
            result = await operation(credentials)
        except Exception as e:
            error = FailoverError.from_exception(
                e,
                provider=config.provider,
                model=model,
                profile_id=resolved.profile_id,
            )
            manager.record_failure(resolved.profile_id, error.reason)
            last_error = error

            if error.should_rotate_profile and not config.profile_id:
                logger.info(
                    "Rotating away from profile %s after %s failure",
                    resolved.profile_id,
                    error.reason.value,
                )
                continue
            raise error

        manager.record_success(resolved.profile_id)
        return result

    # max_attempts >= 1, so at least one attempt failed
    assert last_error is not None
    raise FailoverExhaustedError(last_error, attempts) from last_error


__all__ = [
    "FailoverExhaustedError",
    "run_with_failover",
]
