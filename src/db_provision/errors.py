"""Error taxonomy for reconciliation and drop runs.

Every error carries the process exit code the CLI should use.  All of
them are fatal to the run except ``ConfirmationExhausted``, which is a
clean decline.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from db_provision.schema.models import ObjectKind


class ProvisionError(Exception):
    """Base class for errors that end a run."""

    exit_code: int = 1


class ConnectivityError(ProvisionError):
    """Raised when the backend cannot be reached or a listing call fails."""


class CreationError(ProvisionError):
    """Raised when a create call for a database, table, or index fails.

    Attributes:
        kind: Kind of object that failed.
        name: Name of the object.
        parent: Owning table for indexes, otherwise None.
    """

    def __init__(
        self,
        kind: "ObjectKind",
        name: str,
        parent: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.name = name
        self.parent = parent
        if parent is not None:
            message = f"failed to create [{name}] secondary index on table [{parent}]"
        else:
            message = f"failed to create [{name}] {kind.value}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PreconditionError(ProvisionError):
    """Raised when a drop is requested for a database that does not exist."""


class ConfirmationExhausted(ProvisionError):
    """Raised when no recognizable yes/no answer was given.

    Treated as a decline: the run ends without mutation and exits 0.
    """

    exit_code = 0
