"""Configuration loader for clavdivs.

Provides the Pydantic model for the config schema and a function to load it
from a JSON file.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field

from clavdivs.auth.types import FailureReason


class ClavdivsConfig(BaseModel):
    """Configuration schema for the authentication subsystem.

    Attributes:
        version: Config schema version.
        auth_store_path: Location of the persisted profile store.
        cooldowns: Cooldown overrides in milliseconds, keyed by failure reason.
            Reasons not listed keep their defaults.
        log_level: Log level name. Falls back to LOG_LEVEL, then "info".
    """

    version: str = "1.0"
    auth_store_path: str = Field(
        "~/.clavdivs/auth-profiles.json", description="Profile store JSON file"
    )
    cooldowns: dict[FailureReason, int] = Field(default_factory=dict)
    log_level: str | None = None

    def resolved_store_path(self) -> Path:
        return Path(self.auth_store_path).expanduser()


def get_default_config_path() -> Path:
    """Returns the default configuration path ~/.clavdivs/config.json."""
    return Path.home() / ".clavdivs" / "config.json"


def load_config(config_path: Path | str | None = None) -> ClavdivsConfig:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to config file. If None, uses default path.

    Returns:
        ClavdivsConfig instance with loaded values.

    Raises:
        FileNotFoundError: If config file does not exist.
        json.JSONDecodeError: If config file contains invalid JSON.
        pydantic.ValidationError: If config values don't match schema.
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = Path(config_path).expanduser().resolve()

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return ClavdivsConfig(**data)


__all__ = [
    "ClavdivsConfig",
    "get_default_config_path",
    "load_config",
]
