"""Whole-database drop behind an interactive confirmation.

The drop path is the only destructive operation and is all-or-nothing:
one ``drop_database`` call for the named database, no table or index
granularity.

``DropConfirmation`` is the confirmation state machine.  It knows nothing
about terminals: callers feed it answers from any source (a TTY prompt,
a test, a ``--yes`` flag) and read back the state.

States::

    IDLE --(database absent)--> PreconditionError
    IDLE --(database present)--> AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION --(y/yes)--> CONFIRMED --(drop)--> DROPPED
    AWAITING_CONFIRMATION --(n/no)--> ABORTED
    AWAITING_CONFIRMATION --(3 unrecognized answers)--> ABORTED (exhausted)

Usage:
    from db_provision.schema.drop import DropGate

    gate = DropGate(backend)
    report = await gate.run("machines", ask=input)
    print(report.format_summary())
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from db_provision.errors import ConfirmationExhausted, PreconditionError, ProvisionError
from db_provision.schema.inspector import LiveStateInspector
from db_provision.schema.models import DropReport

if TYPE_CHECKING:
    from db_provision.adapters.base import SchemaBackend

logger = logging.getLogger(__name__)

AFFIRMATIVE = frozenset({"y", "yes"})
NEGATIVE = frozenset({"n", "no"})
MAX_ATTEMPTS = 3


class DropState(str, Enum):
    """States of the drop confirmation machine."""

    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"
    DROPPED = "dropped"


class DropConfirmation:
    """Yes/no confirmation with a bounded number of attempts.

    Example:
        >>> fsm = DropConfirmation("machines")
        >>> fsm.begin()
        <DropState.AWAITING_CONFIRMATION: 'awaiting_confirmation'>
        >>> fsm.answer("  Yes ")
        <DropState.CONFIRMED: 'confirmed'>
    """

    def __init__(self, database_name: str, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.database_name = database_name
        self.max_attempts = max_attempts
        self.attempts = 0
        self.state = DropState.IDLE
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        """True if aborted because no answer was recognized."""
        return self._exhausted

    def prompt(self) -> str:
        """Question to show for the next answer."""
        return f"are you sure you want to drop the [{self.database_name}] database [y/n]: "

    def begin(self) -> DropState:
        """Start awaiting answers (the database is known to exist)."""
        if self.state is not DropState.IDLE:
            raise RuntimeError(f"Cannot begin confirmation from state {self.state.value}")
        self.state = DropState.AWAITING_CONFIRMATION
        return self.state

    def answer(self, response: str) -> DropState:
        """Feed one answer; returns the resulting state.

        Answers are normalized by stripping whitespace and lowercasing.
        Unrecognized answers consume an attempt and keep the machine
        waiting until the attempts run out.
        """
        if self.state is not DropState.AWAITING_CONFIRMATION:
            raise RuntimeError(f"Not awaiting confirmation (state {self.state.value})")

        self.attempts += 1
        normalized = response.strip().lower()
        if normalized in AFFIRMATIVE:
            self.state = DropState.CONFIRMED
        elif normalized in NEGATIVE:
            self.state = DropState.ABORTED
        elif self.attempts >= self.max_attempts:
            self.state = DropState.ABORTED
            self._exhausted = True
        return self.state

    def mark_dropped(self) -> DropState:
        if self.state is not DropState.CONFIRMED:
            raise RuntimeError(f"Cannot drop from state {self.state.value}")
        self.state = DropState.DROPPED
        return self.state


class DropGate:
    """Runs the confirmed drop path against a backend.

    Args:
        backend: Connected schema backend.
        inspector: Existence checker; defaults to a ``LiveStateInspector``
            over ``backend``.
    """

    def __init__(
        self,
        backend: SchemaBackend,
        inspector: LiveStateInspector | None = None,
    ) -> None:
        self._backend = backend
        self._inspector = inspector or LiveStateInspector(backend)

    async def run(self, database_name: str, ask: Callable[[str], str]) -> DropReport:
        """Confirm and drop ``database_name``.

        Args:
            database_name: Database to drop.
            ask: Called with the prompt text, returns the user's answer.

        Returns:
            ``DropReport`` -- ``dropped`` is False if the user declined.

        Raises:
            PreconditionError: If the database does not exist.  Raised
                before any prompt or mutation.
            ConfirmationExhausted: If no answer was recognized.
            ConnectivityError: If the database listing fails.
        """
        if not await self._inspector.database_exists(database_name):
            raise PreconditionError(
                f"database [{database_name}] does not exist, "
                "cannot drop non-existent database"
            )

        fsm = DropConfirmation(database_name)
        fsm.begin()
        while fsm.state is DropState.AWAITING_CONFIRMATION:
            fsm.answer(ask(fsm.prompt()))

        if fsm.exhausted:
            raise ConfirmationExhausted(
                f"no yes/no answer after {fsm.max_attempts} attempts, "
                f"exiting without dropping database [{database_name}]"
            )
        if fsm.state is DropState.ABORTED:
            logger.info("Drop of %s declined", database_name)
            return DropReport(database_name=database_name, dropped=False)

        try:
            result = await self._backend.drop_database(database_name)
        except Exception as e:
            raise ProvisionError(f"failed to drop [{database_name}] database: {e}") from e
        fsm.mark_dropped()
        logger.info("Dropped %s", database_name)
        return DropReport(
            database_name=database_name,
            dropped=True,
            databases_dropped=result.databases_dropped,
            tables_dropped=result.tables_dropped,
        )
