"""Configuration loading for clavdivs.

This subpackage provides:
- ClavdivsConfig: Pydantic model for configuration schema
- Config loading from JSON files
"""

from clavdivs.config.loader import (
    ClavdivsConfig,
    get_default_config_path,
    load_config,
)

__all__ = [
    "ClavdivsConfig",
    "get_default_config_path",
    "load_config",
]
