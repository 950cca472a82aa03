"""Schema backend factory and profile resolution.

Supports two configuration modes:
1. Profile mode (db.toml + DB_PROFILE env var or .db-profile lock file)
2. Direct URL mode (``database_url`` argument / ``--url`` flag)

The provider of a profile (``rethinkdb`` or ``postgres``) decides which
adapter is built.  URLs without a profile are classified by scheme.
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from db_provision.adapters.base import SchemaBackend
from db_provision.adapters.postgres import AsyncPostgresAdapter
from db_provision.adapters.rethink import AsyncRethinkDBAdapter
from db_provision.config.loader import load_db_config
from db_provision.config.models import DatabaseProfile
from db_provision.errors import ConnectivityError

logger = logging.getLogger(__name__)

# Profile lock file path
_PROFILE_LOCK_FILE = Path.cwd() / ".db-profile"

_POSTGRES_SCHEMES = ("postgres://", "postgresql://", "postgresql+asyncpg://")


# ============================================================================
# Profile Lock File Operations
# ============================================================================


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    if _PROFILE_LOCK_FILE.exists():
        return _PROFILE_LOCK_FILE.read_text().strip()
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after the profile's backend answered a listing call.

    Args:
        profile_name: Name of reachable profile
    """
    _PROFILE_LOCK_FILE.write_text(profile_name)


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Priority:
    1. ``{env_prefix}DB_PROFILE`` env var
    2. .db-profile file (profile from a previous connect)
    3. Raise ProfileNotFoundError

    Args:
        env_prefix: Prefix for the environment variable name.

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_var = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(env_var)
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_var}=<name> db-provision connect\n"
        "Or pass --profile <name> or --url <url>."
    )


def get_active_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
) -> tuple[str, DatabaseProfile]:
    """Get profile name and configuration.

    Args:
        profile_name: Explicit profile; when None the active profile is used.
        env_prefix: Prefix for the environment variable name.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile configured
        KeyError: If profile not found in db.toml
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix)
    config = load_db_config()

    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


# ============================================================================
# Backend Construction
# ============================================================================


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def create_backend(url: str, provider: str | None = None) -> SchemaBackend:
    """Build a backend for ``url``.

    Args:
        url: Connection URL.
        provider: ``rethinkdb`` or ``postgres``.  When None the URL scheme
            decides.

    Returns:
        An unconnected adapter; the connection opens on first use.
    """
    if provider is None:
        provider = "postgres" if url.startswith(_POSTGRES_SCHEMES) else "rethinkdb"

    if provider == "postgres":
        return AsyncPostgresAdapter(database_url=url)
    if provider == "rethinkdb":
        return AsyncRethinkDBAdapter.from_url(url)
    raise ValueError(f"Unknown provider '{provider}'. Expected rethinkdb or postgres.")


async def get_backend(
    profile_name: str | None = None,
    env_prefix: str = "",
    database_url: str | None = None,
) -> SchemaBackend:
    """Create a schema backend.

    Each call creates a new adapter -- no caching.  Callers own the
    returned backend and must ``close()`` it.

    Args:
        profile_name: Profile from db.toml; falls back to the active profile.
        env_prefix: Prefix for the ``DB_PROFILE`` environment variable.
        database_url: Direct URL; when given, profiles are ignored.

    Raises:
        ProfileNotFoundError: If no URL and no profile is configured
        KeyError: If the profile is not found in db.toml
    """
    if database_url:
        return create_backend(database_url)

    name, profile = get_active_profile(profile_name, env_prefix=env_prefix)
    logger.debug("Using profile %s (%s)", name, profile.provider)
    return create_backend(resolve_url(profile), provider=profile.provider)


async def check_connection(backend: SchemaBackend) -> list[str]:
    """Verify the backend answers by listing its databases.

    Returns:
        Database names visible to the connection.

    Raises:
        ConnectivityError: If the listing fails.
    """
    try:
        return await backend.list_databases()
    except Exception as e:
        raise ConnectivityError(f"error connecting to database: {e}") from e
