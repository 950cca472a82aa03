"""Schema backend protocol definition.

Defines the ``SchemaBackend`` Protocol that all adapters must implement.
All methods are ``async def`` -- the library is async-first.

Usage:
    from db_provision.adapters.base import SchemaBackend

    async def do_work(backend: SchemaBackend) -> None:
        if "machines" not in await backend.list_databases():
            await backend.create_database("machines")
        await backend.use("machines")
        await backend.create_table("robots", primary_key="serial_num")
        await backend.create_index("robots", "version")
        await backend.close()
"""

from typing import Protocol

from db_provision.schema.models import DropResult

DEFAULT_PRIMARY_KEY = "id"


class SchemaBackend(Protocol):
    """Schema operations every backend must provide.

    Create calls return the number of objects the backend reports as
    created.  Table and index operations apply to the database selected
    with ``use()``.
    """

    async def list_databases(self) -> list[str]:
        """List all database names visible to the connection."""
        ...

    async def create_database(self, name: str) -> int:
        """Create a database.

        Returns:
            Number of databases created, as reported by the backend.
        """
        ...

    async def drop_database(self, name: str) -> DropResult:
        """Drop a database and every table in it.  Irreversible."""
        ...

    async def use(self, name: str) -> None:
        """Select the database that table and index operations apply to."""
        ...

    async def list_tables(self) -> list[str]:
        """List table names in the selected database."""
        ...

    async def create_table(self, name: str, primary_key: str | None = None) -> int:
        """Create a table in the selected database.

        Args:
            name: Table name.
            primary_key: Primary key field.  When None the backend applies
                its own default (``id``).

        Returns:
            Number of tables created, as reported by the backend.
        """
        ...

    async def list_indexes(self, table: str) -> list[str]:
        """List secondary index names defined on a table."""
        ...

    async def create_index(self, table: str, index: str) -> int:
        """Create a simple secondary index on a table.

        Returns:
            Number of indexes created, as reported by the backend.
        """
        ...

    async def close(self) -> None:
        """Close the connection and release resources."""
        ...
