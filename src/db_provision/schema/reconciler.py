"""Reconciliation engine -- create missing schema objects, never mutate.

Walks a ``DesiredState`` top-down (database, then each table in declared
order, then each table's secondary indexes), creating every object that
is missing exactly once and reporting the rest as ignored.

All three levels go through one operation, ``ensure_exists()``, driven by
an ``EnsureLevel`` that supplies the level's ``exists`` and ``create``
capabilities.  The first failure aborts the run: nothing after the failing
object is queried or created.  Re-running is the recovery path, since
every check is re-derived from live state.

Usage:
    from db_provision.schema.reconciler import ReconciliationEngine

    engine = ReconciliationEngine(backend, on_status=print_line)
    report = await engine.reconcile(desired)
    print(report.format_summary())
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from db_provision.errors import CreationError
from db_provision.schema.inspector import LiveStateInspector
from db_provision.schema.models import (
    Action,
    DesiredState,
    ObjectKind,
    ReconcileReport,
    StatusLine,
    TableSpec,
)

if TYPE_CHECKING:
    from db_provision.adapters.base import SchemaBackend

logger = logging.getLogger(__name__)

StatusCallback = Callable[[StatusLine], None]


@dataclass(frozen=True)
class EnsureLevel:
    """Capabilities of one level of the schema hierarchy.

    Attributes:
        kind: Kind of object at this level.
        exists: Async check for an object by name.
        create: Async create for an object by name; returns the number of
            objects the backend reports as created.
        parent: Owning table name (index level only).
    """

    kind: ObjectKind
    exists: Callable[[str], Awaitable[bool]]
    create: Callable[[str], Awaitable[int]]
    parent: str | None = None


class ReconciliationEngine:
    """Brings live state toward a ``DesiredState`` by creation only.

    Args:
        backend: Connected schema backend.
        inspector: Existence checker; defaults to a ``LiveStateInspector``
            over ``backend``.
        on_status: Optional callback invoked with each ``StatusLine`` as
            soon as it is produced.

    Example:
        engine = ReconciliationEngine(backend)
        report = await engine.reconcile(desired)
        report.tables_created
    """

    def __init__(
        self,
        backend: SchemaBackend,
        inspector: LiveStateInspector | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._backend = backend
        self._inspector = inspector or LiveStateInspector(backend)
        self._on_status = on_status
        self.report = ReconcileReport()

    async def reconcile(self, desired: DesiredState) -> ReconcileReport:
        """Reconcile the database, its tables, and their indexes.

        Returns:
            ``ReconcileReport`` with creation counts and one status line
            per reconciled object.

        Raises:
            ConnectivityError: If a listing call fails.
            CreationError: If any create call fails.
        """
        self.report = ReconcileReport()
        await self.ensure_database(desired)
        for table in desired.tables:
            await self.ensure_table(table)
        logger.info(
            "Reconciled %s: %d created",
            desired.database_name,
            self.report.created_count,
        )
        return self.report

    async def ensure_exists(self, level: EnsureLevel, name: str) -> bool:
        """Create ``name`` at ``level`` unless it already exists.

        Returns:
            True if a create call was issued, False if the object existed.

        Raises:
            CreationError: If the create call fails, naming the object and
                its parent table.
        """
        if await level.exists(name):
            self._emit(
                StatusLine(name=name, action=Action.IGNORE, kind=level.kind, parent=level.parent)
            )
            return False

        logger.debug("Creating %s %s", level.kind.value, name)
        try:
            created = await level.create(name)
        except Exception as e:
            raise CreationError(level.kind, name, level.parent, cause=e) from e

        self.report.add_created(level.kind, created)
        self._emit(
            StatusLine(name=name, action=Action.CREATE, kind=level.kind, parent=level.parent)
        )
        return True

    async def ensure_database(self, desired: DesiredState) -> None:
        """Ensure the database exists, then select it for table work.

        Existence is checked once; the database is not re-listed after
        creation.
        """
        level = EnsureLevel(
            kind=ObjectKind.DATABASE,
            exists=self._inspector.database_exists,
            create=self._backend.create_database,
        )
        await self.ensure_exists(level, desired.database_name)
        await self._backend.use(desired.database_name)

    async def ensure_table(self, table: TableSpec) -> None:
        """Ensure a table exists, then reconcile its indexes.

        Existing tables still get their indexes checked, so a partial
        earlier run can be completed.
        """

        async def create(name: str) -> int:
            # No primary key option when undeclared: the backend default applies.
            return await self._backend.create_table(name, primary_key=table.primary_key)

        level = EnsureLevel(
            kind=ObjectKind.TABLE,
            exists=self._inspector.table_exists,
            create=create,
        )
        await self.ensure_exists(level, table.name)
        await self.ensure_indexes(table)

    async def ensure_indexes(self, table: TableSpec) -> None:
        """Ensure each declared secondary index exists on ``table``.

        The live index set is fetched once per table.  Names created during
        this call are added to it, so a duplicate declaration re-checks as
        existing.
        """
        if not table.secondary_indexes:
            return

        live = await self._inspector.index_set(table.name)

        async def exists(name: str) -> bool:
            return name in live

        async def create(name: str) -> int:
            await self._backend.create_index(table.name, name)
            live.add(name)
            return 1

        level = EnsureLevel(
            kind=ObjectKind.INDEX,
            exists=exists,
            create=create,
            parent=table.name,
        )
        for index in table.secondary_indexes:
            await self.ensure_exists(level, index)

    def _emit(self, line: StatusLine) -> None:
        self.report.lines.append(line)
        if self._on_status is not None:
            self._on_status(line)
