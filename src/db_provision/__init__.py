"""db-provision: Create-if-missing schema reconciliation for document databases.

Declares a database, its tables (with primary keys), and their secondary
indexes in TOML, then creates whatever the live cluster is missing.
Existing objects are never altered; the only destructive path is a
confirmed whole-database drop.

Usage:
    from db_provision import DesiredState, ReconciliationEngine, get_backend
    from db_provision import AsyncRethinkDBAdapter, AsyncPostgresAdapter
    from db_provision import load_db_config, load_desired_state
"""

__version__ = "0.1.0"

# Adapters
from db_provision.adapters.base import SchemaBackend
from db_provision.adapters.postgres import AsyncPostgresAdapter
from db_provision.adapters.rethink import AsyncRethinkDBAdapter

# Config
from db_provision.config.loader import load_db_config, load_desired_state
from db_provision.config.models import DatabaseConfig, DatabaseProfile

# Errors
from db_provision.errors import (
    ConfirmationExhausted,
    ConnectivityError,
    CreationError,
    PreconditionError,
    ProvisionError,
)

# Factory
from db_provision.factory import (
    ProfileNotFoundError,
    check_connection,
    get_backend,
    resolve_url,
)

# Schema
from db_provision.schema.drop import DropGate
from db_provision.schema.models import DesiredState, ReconcileReport, TableSpec
from db_provision.schema.reconciler import ReconciliationEngine

__all__ = [
    # Adapters
    "SchemaBackend",
    "AsyncRethinkDBAdapter",
    "AsyncPostgresAdapter",
    # Config
    "load_db_config",
    "load_desired_state",
    "DatabaseProfile",
    "DatabaseConfig",
    # Errors
    "ProvisionError",
    "ConnectivityError",
    "CreationError",
    "PreconditionError",
    "ConfirmationExhausted",
    # Factory
    "get_backend",
    "check_connection",
    "ProfileNotFoundError",
    "resolve_url",
    # Schema
    "DesiredState",
    "TableSpec",
    "ReconcileReport",
    "ReconciliationEngine",
    "DropGate",
]
