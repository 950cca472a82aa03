"""Pydantic models for connection configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: Literal["rethinkdb", "postgres"] = "rethinkdb"


class DatabaseConfig(BaseModel):
    """Complete connection configuration from db.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    schema_file: str = "schema.toml"
