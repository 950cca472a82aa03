"""TOML loading for connection profiles and desired-state files."""

import tomllib
from pathlib import Path

from db_provision.config.models import DatabaseConfig, DatabaseProfile
from db_provision.schema.models import DesiredState


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load connection configuration from a TOML file.

    Args:
        config_path: Path to db.toml (default: ``db.toml`` in the current
            working directory)

    Returns:
        DatabaseConfig with all profiles

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If a profile is malformed
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with a [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    # Parse schema settings
    schema_settings = data.get("schema", {})

    return DatabaseConfig(
        profiles=profiles,
        schema_file=schema_settings.get("file", "schema.toml"),
    )


def load_desired_state(schema_path: str | Path) -> DesiredState:
    """Load the desired database, tables, and indexes from a TOML file.

    Expected layout::

        database_name = "machines"

        [[tables]]
        name = "robots"
        primary_key = "serial_num"
        secondary_indexes = ["version", "model"]

        [[tables]]
        name = "parts"

    Args:
        schema_path: Path to the desired-state file.

    Returns:
        Validated, frozen ``DesiredState``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
        pydantic.ValidationError: If names are missing or blank
    """
    path = Path(schema_path)
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return DesiredState.model_validate(data)
