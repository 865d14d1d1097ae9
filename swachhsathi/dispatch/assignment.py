"""
Nearest-worker assignment for newly created reports.

Finds the NGOs that handle the report's category, then the closest active
worker of those NGOs, and records the assignment on the report.

The read-then-write sequence is not transactional: two reports created at
the same moment can both pick the same idle worker, and re-running after a
crash between the two writes searches again.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from swachhsathi.core.constants import (
    NGOS_COLLECTION,
    REPORT_STATUS_SUBCOLLECTION,
    REPORTS_COLLECTION,
    USERS_COLLECTION,
    WORKER_ROLE,
    ReportStatus,
)
from swachhsathi.core.geo_utils import distance_between
from swachhsathi.database.models import Ngo, Report, StatusHistoryEntry, Worker
from swachhsathi.database.store import ARRAY_CONTAINS, EQUALS, IN, SERVER_TIMESTAMP, Filter

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    """Why a report was left unassigned."""
    MISSING_LOCATION = "missing_location"
    MISSING_CATEGORY = "missing_category"
    NO_MATCHING_NGO = "no_matching_ngo"
    NO_ACTIVE_WORKER = "no_active_worker"
    NO_LOCATED_WORKER = "no_located_worker"


@dataclass
class WorkerCandidate:
    """Located worker with its distance to the report."""
    worker: Worker
    distance_km: float


@dataclass
class AssignmentOutcome:
    """Result of one assignment run."""
    report_id: str
    assigned: bool
    worker_id: Optional[str] = None
    ngo_id: Optional[str] = None
    distance_km: Optional[float] = None
    skip_reason: Optional[SkipReason] = None


def select_nearest(candidates: List[WorkerCandidate]) -> Optional[WorkerCandidate]:
    """
    Closest candidate; equal distances are broken by worker uid so the choice
    does not depend on query order.
    """
    if not candidates:
        return None
    return min(candidates, key=lambda c: (c.distance_km, c.worker.uid))


class AssignmentEngine:
    """Assigns reports to the nearest eligible worker."""

    def __init__(self, store):
        """
        Args:
            store: Document store (Firestore or in-memory)
        """
        self.store = store

    def assign(self, report: Report) -> AssignmentOutcome:
        """
        Assign a report to the nearest active worker of a matching NGO.

        Missing preconditions and empty searches are logged and return an
        unassigned outcome. Store errors propagate to the caller.
        """
        report_point = report.location.point
        if report_point is None:
            logger.info(f"Report {report.id} location missing, skipping assignment.")
            return self._skipped(report, SkipReason.MISSING_LOCATION)

        if report.category is None:
            logger.info(f"Report {report.id} category missing, skipping assignment.")
            return self._skipped(report, SkipReason.MISSING_CATEGORY)

        ngo_docs = self.store.query(
            NGOS_COLLECTION,
            [Filter("categories", ARRAY_CONTAINS, report.category.value)],
        )
        if not ngo_docs:
            logger.info(f"No NGOs found that handle category: {report.category.value}")
            return self._skipped(report, SkipReason.NO_MATCHING_NGO)

        ngos = [Ngo.from_dict(doc.id, doc.data) for doc in ngo_docs]
        ngo_ids = [ngo.id for ngo in ngos]
        logger.info(
            f"Found {len(ngos)} NGOs for category {report.category.value}: "
            f"{', '.join(ngo.name or ngo.id for ngo in ngos)}"
        )

        worker_docs = self.store.query(
            USERS_COLLECTION,
            [
                Filter("role", EQUALS, WORKER_ROLE),
                Filter("isActive", EQUALS, True),
                Filter("ngoId", IN, ngo_ids),
            ],
        )
        if not worker_docs:
            logger.info("No active workers found for matching NGOs.")
            return self._skipped(report, SkipReason.NO_ACTIVE_WORKER)

        candidates = []
        for doc in worker_docs:
            worker = Worker.from_dict(doc.id, doc.data)
            if worker.current_location is None:
                if doc.data.get("currentLocation"):
                    logger.warning(f"Worker {worker.uid} has an unreadable location, skipping")
                continue
            candidates.append(WorkerCandidate(
                worker=worker,
                distance_km=distance_between(report_point, worker.current_location),
            ))

        nearest = select_nearest(candidates)
        if nearest is None:
            logger.info("No workers with valid location found.")
            return self._skipped(report, SkipReason.NO_LOCATED_WORKER)

        self._record_assignment(report, nearest.worker)

        logger.info(
            f"Report {report.id} assigned to worker {nearest.worker.uid} "
            f"({nearest.worker.name}) from NGO {nearest.worker.ngo_id}, "
            f"distance: {nearest.distance_km:.2f} km"
        )

        return AssignmentOutcome(
            report_id=report.id,
            assigned=True,
            worker_id=nearest.worker.uid,
            ngo_id=nearest.worker.ngo_id,
            distance_km=nearest.distance_km,
        )

    def _record_assignment(self, report: Report, worker: Worker) -> None:
        self.store.update(REPORTS_COLLECTION, report.id, {
            "assignedTo": worker.uid,
            "ngoId": worker.ngo_id,
            "status": ReportStatus.ASSIGNED.value,
            "updatedAt": SERVER_TIMESTAMP,
        })

        entry = StatusHistoryEntry(
            status=ReportStatus.ASSIGNED.value,
            worker_id=worker.uid,
            worker_name=worker.name,
            message=f"Status changed to {ReportStatus.ASSIGNED.value}",
        )
        self.store.add_to_subcollection(
            REPORTS_COLLECTION,
            report.id,
            REPORT_STATUS_SUBCOLLECTION,
            {**entry.to_dict(), "timestamp": SERVER_TIMESTAMP},
        )

    @staticmethod
    def _skipped(report: Report, reason: SkipReason) -> AssignmentOutcome:
        return AssignmentOutcome(report_id=report.id, assigned=False, skip_reason=reason)
