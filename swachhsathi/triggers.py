"""
SwachhSathi - Event Triggers
Entry points invoked once per document event (report created, report
updated, user created). Handlers never raise: failures are logged with the
document id and the event source is free to redeliver.
"""

import logging
from typing import Any, Dict, Optional

from swachhsathi.alerts.dispatcher import NotificationDispatcher
from swachhsathi.database.models import Report
from swachhsathi.dispatch.assignment import AssignmentEngine, AssignmentOutcome

logger = logging.getLogger(__name__)


class TriggerHandlers:
    """Binds document events to assignment and notification reactions."""

    def __init__(self, assignment: AssignmentEngine, dispatcher: NotificationDispatcher):
        self.assignment = assignment
        self.dispatcher = dispatcher

    def on_report_created(
        self,
        report_id: str,
        data: Optional[Dict[str, Any]]
    ) -> Optional[AssignmentOutcome]:
        if not data:
            logger.info(f"Report {report_id} created without data, skipping assignment.")
            return None

        try:
            return self.assignment.assign(Report.from_dict(report_id, data))
        except Exception as e:
            logger.error(f"Auto-assignment failed for report {report_id}: {e}", exc_info=True)
            return None

    def on_report_updated(
        self,
        report_id: str,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]]
    ) -> None:
        try:
            self.dispatcher.on_report_updated(report_id, before or {}, after or {})
        except Exception as e:
            logger.error(f"Report update handling failed for report {report_id}: {e}", exc_info=True)

    def on_worker_created(self, user_id: str, data: Optional[Dict[str, Any]]) -> None:
        try:
            self.dispatcher.on_worker_created(user_id, data or {})
        except Exception as e:
            logger.error(f"User creation handling failed for user {user_id}: {e}", exc_info=True)
