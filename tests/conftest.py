"""Shared fixtures: an in-memory ``SchemaBackend`` for engine and drop tests."""

from dataclasses import dataclass, field

import pytest

from db_provision.adapters.base import DEFAULT_PRIMARY_KEY
from db_provision.schema.models import DesiredState, DropResult, TableSpec


@dataclass
class FakeTable:
    primary_key: str
    indexes: list[str] = field(default_factory=list)


class FakeBackend:
    """Dict-backed backend that records every call.

    ``fail_on`` maps a method name to an exception (raised on every call)
    or to ``(argument, exception)`` (raised only when the first argument
    matches).  ``create_counts`` overrides the count a create call
    reports, keyed by method name.
    """

    def __init__(self, databases: dict[str, dict[str, FakeTable]] | None = None) -> None:
        self.databases: dict[str, dict[str, FakeTable]] = databases or {}
        self.selected: str | None = None
        self.calls: list[tuple] = []
        self.fail_on: dict[str, object] = {}
        self.create_counts: dict[str, int] = {}
        self.closed = False

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        failure = self.fail_on.get(method)
        if failure is None:
            return
        if isinstance(failure, tuple):
            target, exc = failure
            if args and args[0] == target:
                raise exc
            return
        raise failure

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    @property
    def tables(self) -> dict[str, FakeTable]:
        assert self.selected is not None, "use() not called"
        return self.databases[self.selected]

    async def list_databases(self) -> list[str]:
        self._record("list_databases")
        return list(self.databases)

    async def create_database(self, name: str) -> int:
        self._record("create_database", name)
        self.databases[name] = {}
        return self.create_counts.get("create_database", 1)

    async def drop_database(self, name: str) -> DropResult:
        self._record("drop_database", name)
        tables = self.databases.pop(name)
        return DropResult(databases_dropped=1, tables_dropped=len(tables))

    async def use(self, name: str) -> None:
        self._record("use", name)
        self.selected = name

    async def list_tables(self) -> list[str]:
        self._record("list_tables")
        return list(self.tables)

    async def create_table(self, name: str, primary_key: str | None = None) -> int:
        self._record("create_table", name, primary_key)
        self.tables[name] = FakeTable(primary_key=primary_key or DEFAULT_PRIMARY_KEY)
        return self.create_counts.get("create_table", 1)

    async def list_indexes(self, table: str) -> list[str]:
        self._record("list_indexes", table)
        return list(self.tables[table].indexes)

    async def create_index(self, table: str, index: str) -> int:
        self._record("create_index", table, index)
        self.tables[table].indexes.append(index)
        return 1

    async def close(self) -> None:
        self._record("close")
        self.closed = True


@pytest.fixture
def backend() -> FakeBackend:
    """Empty cluster."""
    return FakeBackend()


@pytest.fixture
def machines() -> DesiredState:
    """Two tables, two indexes on the first."""
    return DesiredState(
        database_name="machines",
        tables=[
            TableSpec(
                name="robots",
                primary_key="serial_num",
                secondary_indexes=["version", "model"],
            ),
            TableSpec(name="parts"),
        ],
    )
