"""Live state inspection through a schema backend.

Answers the existence questions the reconciliation engine asks:
- does the named database exist
- does the named table exist in the selected database
- which secondary indexes exist on a table

Every call performs a fresh listing query -- nothing is cached and no
ordering of the backend's results is assumed.  A failing listing call is
fatal: it is raised as ``ConnectivityError`` and never retried.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from db_provision.errors import ConnectivityError

if TYPE_CHECKING:
    from db_provision.adapters.base import SchemaBackend

logger = logging.getLogger(__name__)


class LiveStateInspector:
    """Existence checks against a connected backend.

    Usage:
        inspector = LiveStateInspector(backend)
        if not await inspector.database_exists("machines"):
            ...
        indexes = await inspector.index_set("robots")
    """

    def __init__(self, backend: SchemaBackend) -> None:
        self._backend = backend

    async def database_exists(self, name: str) -> bool:
        """Return True if ``name`` is among the databases on the cluster."""
        try:
            databases = await self._backend.list_databases()
        except Exception as e:
            raise ConnectivityError(
                f"could not list all database names in the system: {e}"
            ) from e
        logger.debug("Databases on cluster: %s", databases)
        return name in databases

    async def table_exists(self, name: str) -> bool:
        """Return True if ``name`` is a table in the selected database."""
        try:
            tables = await self._backend.list_tables()
        except Exception as e:
            raise ConnectivityError(
                f"could not list all table names in database: {e}"
            ) from e
        logger.debug("Tables in database: %s", tables)
        return name in tables

    async def index_set(self, table: str) -> set[str]:
        """Return the names of secondary indexes defined on ``table``."""
        try:
            indexes = await self._backend.list_indexes(table)
        except Exception as e:
            raise ConnectivityError(
                f"could not list secondary indexes on table [{table}]: {e}"
            ) from e
        logger.debug("Indexes on %s: %s", table, indexes)
        return set(indexes)
