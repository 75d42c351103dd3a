"""In-session notification center. The store emits, views read."""

import logging
import uuid

from models import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationCenter:
    def __init__(self):
        self._notifications: list[Notification] = []

    def add_notification(self, type: NotificationType | str, message: str) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex[:8],
            type=NotificationType(type),
            message=message,
        )
        # Newest first
        self._notifications.insert(0, notification)
        logger.info("Notification (%s): %s", notification.type.value, message)
        return notification

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)

    def mark_as_read(self, notification_id: str) -> bool:
        for i, n in enumerate(self._notifications):
            if n.id == notification_id:
                self._notifications[i] = n.model_copy(update={"read": True})
                return True
        return False

    def mark_all_as_read(self) -> None:
        self._notifications = [n.model_copy(update={"read": True}) for n in self._notifications]
