"""Configuration management: account profiles, TOML loading, environment.

Usage:
    >>> from hubdb_sync.config import load_hubdb_config, AccountProfile, HubDbConfig
"""

from hubdb_sync.config.loader import get_environment_variable_config, load_hubdb_config
from hubdb_sync.config.models import AccountProfile, HubDbConfig

__all__ = [
    "load_hubdb_config",
    "get_environment_variable_config",
    "AccountProfile",
    "HubDbConfig",
]
