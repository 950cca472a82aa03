"""Desired-state models, live-state inspection, reconciliation, and drop.

Provides the desired-state models (``DesiredState``, ``TableSpec``), the
existence checker (``LiveStateInspector``), the create-if-missing engine
(``ReconciliationEngine``), and the confirmed whole-database drop
(``DropGate``).

Usage:
    from db_provision.schema import DesiredState, TableSpec
    from db_provision.schema import ReconciliationEngine, DropGate
"""

from db_provision.schema.drop import DropConfirmation, DropGate, DropState
from db_provision.schema.inspector import LiveStateInspector
from db_provision.schema.models import (
    Action,
    DesiredState,
    DropReport,
    DropResult,
    ObjectKind,
    ReconcileReport,
    StatusLine,
    TableSpec,
)
from db_provision.schema.reconciler import EnsureLevel, ReconciliationEngine

__all__ = [
    "DesiredState",
    "TableSpec",
    "ObjectKind",
    "Action",
    "StatusLine",
    "ReconcileReport",
    "DropResult",
    "DropReport",
    "LiveStateInspector",
    "ReconciliationEngine",
    "EnsureLevel",
    "DropGate",
    "DropConfirmation",
    "DropState",
]
