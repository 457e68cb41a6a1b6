"""Configuration module for the update service.

Available Configurations:
- UpdateServiceConfig: Duplicate status, patch policy, notification and auth settings
"""

from src.config.update_config import (
    DEFAULT_UPDATE_SERVICE_CONFIG,
    PatchFieldPolicy,
    UpdateServiceConfig,
)

__all__ = [
    "DEFAULT_UPDATE_SERVICE_CONFIG",
    "PatchFieldPolicy",
    "UpdateServiceConfig",
]
