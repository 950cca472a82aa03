"""Pydantic models for desired state, status lines, and run reports.

This module contains the reconciliation-domain models:
- Desired state: TableSpec, DesiredState
- Output: ObjectKind, Action, StatusLine
- Results: ReconcileReport, DropResult, DropReport

Configuration models (DatabaseProfile, DatabaseConfig) live in
db_provision.config.models.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Desired State Models
# ============================================================================


class TableSpec(BaseModel):
    """A table that should exist, with its primary key and secondary indexes.

    A missing or blank ``primary_key`` leaves the choice to the backend,
    whose default primary key is ``id``.

    Example:
        >>> spec = TableSpec(name="robots", primary_key="serial_num",
        ...                  secondary_indexes=["version", "model"])
        >>> spec.secondary_indexes
        ['version', 'model']
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    primary_key: str | None = None
    secondary_indexes: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("secondary_indexes", "simple_index"),
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("table name must not be blank")
        return value

    @field_validator("primary_key")
    @classmethod
    def _blank_primary_key_is_default(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class DesiredState(BaseModel):
    """The declared target schema: one database and its ordered tables."""

    model_config = ConfigDict(frozen=True)

    database_name: str = Field(min_length=1)
    tables: list[TableSpec] = Field(default_factory=list)

    @field_validator("database_name")
    @classmethod
    def _database_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("database_name must not be blank")
        return value


# ============================================================================
# Status Lines
# ============================================================================


class ObjectKind(str, Enum):
    """Kind of schema object a status line refers to."""

    DATABASE = "database"
    TABLE = "table"
    INDEX = "secondary index"


class Action(str, Enum):
    """What the engine did with an object."""

    CREATE = "create"
    IGNORE = "ignore"


class StatusLine(BaseModel):
    """One reconciled object: its name, the action taken, and its kind.

    Example:
        >>> StatusLine(name="version", action=Action.CREATE,
        ...            kind=ObjectKind.INDEX, parent="robots").format()
        '[version                       ] create     secondary index on robots'
    """

    model_config = ConfigDict(frozen=True)

    name: str
    action: Action
    kind: ObjectKind
    parent: str | None = None  # table name, indexes only

    def describe(self) -> str:
        """Kind text, e.g. ``table exists`` or ``secondary index on robots``."""
        text = self.kind.value
        if self.action is Action.IGNORE:
            text += " exists"
        if self.parent:
            text += f" on {self.parent}"
        return text

    def format(self) -> str:
        """Format as a fixed-width output line."""
        return f"[{self.name:<30}] {self.action.value:<10} {self.describe()}"


# ============================================================================
# Results
# ============================================================================


class ReconcileReport(BaseModel):
    """Result of one reconciliation run.

    Counters only grow through successful creations, by the amount the
    backend reported.

    Example:
        >>> report = ReconcileReport()
        >>> report.created_count
        0
    """

    databases_created: int = 0
    tables_created: int = 0
    indexes_created: int = 0
    lines: list[StatusLine] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        """Total objects created across all kinds."""
        return self.databases_created + self.tables_created + self.indexes_created

    def add_created(self, kind: ObjectKind, count: int) -> None:
        """Add a backend-reported creation count to the matching counter."""
        if kind is ObjectKind.DATABASE:
            self.databases_created += count
        elif kind is ObjectKind.TABLE:
            self.tables_created += count
        else:
            self.indexes_created += count

    def format_summary(self) -> str:
        """Format the end-of-run summary block."""
        return "\n".join(
            [
                "---",
                f"{self.databases_created:<3d} database created",
                f"{self.tables_created:<3d} table(s) created",
                f"{self.indexes_created:<3d} secondary index(es) created",
            ]
        )


class DropResult(BaseModel):
    """Counts a backend reports for a database drop."""

    databases_dropped: int = 0
    tables_dropped: int = 0


class DropReport(BaseModel):
    """Outcome of the drop path.

    ``dropped`` is False when the user declined at the prompt; nothing was
    mutated in that case.
    """

    database_name: str
    dropped: bool = False
    databases_dropped: int = 0
    tables_dropped: int = 0

    def format_summary(self) -> str:
        """Format the drop summary block."""
        if not self.dropped:
            return f"exiting without dropping database [{self.database_name}]"
        return "\n".join(
            [
                f"{self.databases_dropped:<3d} database dropped",
                f"{self.tables_dropped:<3d} table(s) dropped",
            ]
        )
