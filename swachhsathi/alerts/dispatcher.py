"""
SwachhSathi - Notification Dispatcher
Reacts to report and worker lifecycle transitions with push notifications.

Every reaction is best-effort: a failure is logged and dropped without
retrying and without affecting the other reactions to the same event.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from swachhsathi.core.constants import USERS_COLLECTION, WORKER_ROLE, ReportStatus
from swachhsathi.alerts.push_notification import PushNotification

logger = logging.getLogger(__name__)

APP_NAME = "SwachhSathi"


def assignment_started(before: Dict[str, Any], after: Dict[str, Any]) -> bool:
    """True when `assignedTo` goes from absent to present."""
    return not before.get("assignedTo") and bool(after.get("assignedTo"))


def became_resolved(before: Dict[str, Any], after: Dict[str, Any]) -> bool:
    """True when `status` changes to resolved."""
    resolved = ReportStatus.RESOLVED.value
    return before.get("status") != resolved and after.get("status") == resolved


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class NotificationDispatcher:
    """Sends welcome, task-assigned and report-resolved notifications."""

    def __init__(self, store, push_service):
        """
        Args:
            store: Document store used to look up notification targets
            push_service: Object with ``send(PushNotification)``
        """
        self.store = store
        self.push_service = push_service

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_worker_created(self, user_id: str, user: Dict[str, Any]) -> Optional[PushNotification]:
        """Welcome a newly created worker that already has a device token."""
        return self._run(
            "worker_welcome", f"user {user_id}",
            lambda: self.notify_worker_welcome(user_id, user),
        )

    def on_report_updated(
        self,
        report_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any]
    ) -> List[PushNotification]:
        """Run every report-update reaction independently."""
        before = before or {}
        after = after or {}
        reactions = [
            ("task_assigned", lambda: self.notify_task_assigned(report_id, before, after)),
            ("report_resolved", lambda: self.notify_report_resolved(report_id, before, after)),
        ]

        sent = []
        for name, reaction in reactions:
            notification = self._run(name, f"report {report_id}", reaction)
            if notification is not None:
                sent.append(notification)
        return sent

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    def notify_worker_welcome(self, user_id: str, user: Dict[str, Any]) -> Optional[PushNotification]:
        if user.get("role") != WORKER_ROLE or not user.get("fcmToken"):
            return None

        return self._deliver(PushNotification(
            title=f"Welcome to {APP_NAME}",
            body=(
                "Your worker account has been created. "
                "Start making a difference in your community!"
            ),
            token=user["fcmToken"],
            data={"type": "worker_welcome"},
        ), f"new worker {user_id}")

    def notify_task_assigned(
        self,
        report_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any]
    ) -> Optional[PushNotification]:
        if not assignment_started(before, after):
            return None

        worker_id = after["assignedTo"]
        token = self._lookup_token(worker_id)
        if not token:
            logger.info(f"Worker {worker_id} not found or has no FCM token")
            return None

        location = after.get("location") or {}
        return self._deliver(PushNotification(
            title="New Task Assigned",
            body=(
                f"You have been assigned a new {after.get('category')} task. "
                f"Severity: {after.get('severity')}"
            ),
            token=token,
            data={
                "reportId": report_id,
                "type": "task_assigned",
                "category": _text(after.get("category")),
                "severity": _text(after.get("severity")),
                "address": _text(location.get("address")),
                "latitude": _text(location.get("latitude")),
                "longitude": _text(location.get("longitude")),
            },
        ), f"worker {worker_id}")

    def notify_report_resolved(
        self,
        report_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any]
    ) -> Optional[PushNotification]:
        user_id = after.get("userId")
        if not became_resolved(before, after) or not user_id:
            return None

        token = self._lookup_token(user_id)
        if not token:
            logger.info(f"User {user_id} has no FCM token")
            return None

        return self._deliver(PushNotification(
            title="Report Resolved",
            body=(
                "Your garbage collection report has been successfully resolved. "
                "Thank you for keeping our community clean!"
            ),
            token=token,
            data={"reportId": report_id, "type": "report_resolved"},
        ), f"user {user_id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deliver(self, notification: PushNotification, recipient: str) -> Optional[PushNotification]:
        """Send a notification; only delivered notifications are returned."""
        notification = self.push_service.send(notification)
        if not notification.delivered:
            logger.warning(
                f"{notification.title} notification to {recipient} not delivered: {notification.status}"
            )
            return None
        logger.info(f"{notification.title} notification sent to {recipient}")
        return notification

    def _lookup_token(self, user_id: str) -> Optional[str]:
        document = self.store.get(USERS_COLLECTION, user_id)
        if document is None:
            return None
        return document.data.get("fcmToken")

    @staticmethod
    def _run(name: str, context: str, reaction: Callable[[], Optional[PushNotification]]):
        try:
            return reaction()
        except Exception as e:
            logger.error(f"Error sending {name} notification for {context}: {e}")
            return None
