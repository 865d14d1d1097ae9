"""
SwachhSathi - Alert System
Push notifications for workers and reporters.
"""

from swachhsathi.alerts.push_notification import (
    FirebasePushService,
    PushNotification,
    MockPushService,
    get_push_service,
)
from swachhsathi.alerts.dispatcher import (
    NotificationDispatcher,
    assignment_started,
    became_resolved,
)

__all__ = [
    # Push Notifications
    "FirebasePushService",
    "PushNotification",
    "MockPushService",
    "get_push_service",
    # Dispatcher
    "NotificationDispatcher",
    "assignment_started",
    "became_resolved",
]
