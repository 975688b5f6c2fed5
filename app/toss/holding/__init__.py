"""Holding-area engine.

This module provides the object mover and the toss/restore/empty
operations built on top of it and the metadata ledger.
"""

from toss.holding.mover import ObjectMover, directory_size, remove_path
from toss.holding.operations import BinPaths, HoldingArea, ReconcileReport, TossResult

__all__ = [
    "BinPaths",
    "HoldingArea",
    "ObjectMover",
    "ReconcileReport",
    "TossResult",
    "directory_size",
    "remove_path",
]
