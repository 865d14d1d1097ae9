"""
Push notification service for SwachhSathi
Delivers report and worker notifications through Firebase Cloud Messaging (FCM)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from firebase_admin import messaging

from swachhsathi.core.config import settings
from swachhsathi.core.firebase import get_firebase_app

logger = logging.getLogger(__name__)


@dataclass
class PushNotification:
    """Push notification data structure."""
    title: str
    body: str
    token: str
    data: Dict[str, str] = field(default_factory=dict)
    sent_at: Optional[datetime] = None
    message_id: Optional[str] = None
    status: str = "pending"

    @property
    def delivered(self) -> bool:
        return self.status in ("sent", "mock_sent")


class FirebasePushService:
    """
    Push notification service using Firebase Cloud Messaging.

    Failed sends are logged and reported through the returned
    notification's status; they are never raised.
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None
    ):
        """
        Initialize Firebase push service.

        Args:
            credentials_path: Path to Firebase service account JSON
            project_id: Firebase project ID
        """
        self.credentials_path = credentials_path or settings.firebase_credentials_path
        self.project_id = project_id or settings.firebase_project_id

        self._app = None
        self._initialized = False

        if self.credentials_path or self.project_id:
            self._initialize_firebase()

    def _initialize_firebase(self) -> None:
        """Initialize Firebase Admin SDK."""
        try:
            self._app = get_firebase_app(self.credentials_path, self.project_id)
            self._initialized = True
            logger.info("Firebase push service initialized")
        except FileNotFoundError:
            logger.warning(f"Firebase credentials not found: {self.credentials_path}")
        except Exception as e:
            logger.error(f"Failed to initialize Firebase: {e}")

    @property
    def is_configured(self) -> bool:
        """Check if push service is configured."""
        return self._initialized

    def send(self, notification: PushNotification) -> PushNotification:
        """
        Send a prepared notification to its device token.

        Args:
            notification: Notification to deliver

        Returns:
            The same notification with send status filled in
        """
        if not self.is_configured:
            logger.warning(f"Push not configured. Would send: {notification.title}")
            notification.status = "not_configured"
            return notification

        try:
            message = messaging.Message(
                notification=messaging.Notification(
                    title=notification.title,
                    body=notification.body,
                ),
                data={k: str(v) for k, v in notification.data.items()},
                token=notification.token,
            )

            response = messaging.send(message, app=self._app)

            notification.message_id = response
            notification.status = "sent"
            notification.sent_at = datetime.utcnow()

            logger.info(f"Push sent to device: {response}")

        except Exception as e:
            logger.error(f"Push send failed: {e}")
            notification.status = "failed"

        return notification


class MockPushService:
    """Mock push service for testing."""

    def __init__(self):
        self.sent_notifications: List[PushNotification] = []

    @property
    def is_configured(self) -> bool:
        return True

    def send(self, notification: PushNotification) -> PushNotification:
        """Record the notification instead of sending it."""
        notification.status = "mock_sent"
        notification.message_id = f"MOCK_{len(self.sent_notifications)}"
        notification.sent_at = datetime.utcnow()
        self.sent_notifications.append(notification)
        logger.info(f"[MOCK PUSH] {notification.title}: {notification.body}")
        return notification


def get_push_service():
    """Get push notification service instance."""
    service = FirebasePushService()

    if not service.is_configured:
        logger.warning("Firebase not configured, using mock push service")
        return MockPushService()

    return service
