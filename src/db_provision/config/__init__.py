"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from db_provision.config import load_db_config, load_desired_state
    >>> from db_provision.config import DatabaseProfile, DatabaseConfig
"""

from db_provision.config.loader import load_db_config, load_desired_state
from db_provision.config.models import DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "load_desired_state", "DatabaseConfig", "DatabaseProfile"]
