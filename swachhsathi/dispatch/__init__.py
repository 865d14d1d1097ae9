"""
SwachhSathi - Dispatch Module
Assigns new reports to the nearest qualified worker.
"""

from swachhsathi.dispatch.assignment import (
    AssignmentEngine,
    AssignmentOutcome,
    SkipReason,
    WorkerCandidate,
    select_nearest,
)

__all__ = [
    "AssignmentEngine",
    "AssignmentOutcome",
    "SkipReason",
    "WorkerCandidate",
    "select_nearest",
]
