"""Schema backends package.

Provides the ``SchemaBackend`` Protocol and concrete async adapter
implementations for RethinkDB and PostgreSQL.

Usage:
    from db_provision.adapters import SchemaBackend, AsyncRethinkDBAdapter
    from db_provision.adapters import AsyncPostgresAdapter
"""

from db_provision.adapters.base import DEFAULT_PRIMARY_KEY, SchemaBackend
from db_provision.adapters.postgres import AsyncPostgresAdapter
from db_provision.adapters.rethink import AsyncRethinkDBAdapter

__all__ = [
    "DEFAULT_PRIMARY_KEY",
    "SchemaBackend",
    "AsyncRethinkDBAdapter",
    "AsyncPostgresAdapter",
]
