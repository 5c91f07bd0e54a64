"""In-process notification centre."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from foodshare.domain.notifications import (
    Notification,
    NotificationPostRef,
    NotificationType,
    NotificationUserRef,
)

WELCOME_MESSAGE = (
    "Welcome to FoodShare, {name}! We're thrilled to have you in our community. "
    "Start by sharing your first delicious meal, exploring different communities, "
    "and connecting with fellow food enthusiasts. Happy cooking!"
)
MVP_BADGE_MESSAGE = (
    "You've earned the MVP Early Adopter badge! Thank you for being one of the "
    "first members of our community. Your support means the world to us!"
)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class NotificationService:
    """Keeps each viewer's notifications, newest first, for the process lifetime."""

    clock: Callable[[], int] = _now_ms
    inboxes: dict[str, list[Notification]] = field(default_factory=dict)
    _last_id: int = field(default=0, init=False, repr=False)

    def _next_id(self) -> int:
        candidate = self.clock()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def add_notification(  # noqa: PLR0913
        self,
        recipient_id: str,
        type: NotificationType,  # noqa: A002
        message: str,
        post: NotificationPostRef | None = None,
        user: NotificationUserRef | None = None,
    ) -> Notification:
        """Prepend an unread notification to the recipient's inbox."""
        notification = Notification(
            id=self._next_id(),
            type=NotificationType(type),
            message=message,
            read=False,
            created_at=datetime.now(tz=UTC),
            post=post,
            user=user,
        )
        inbox = self.inboxes.setdefault(recipient_id, [])
        inbox.insert(0, notification)
        return notification

    def add_welcome_notification(
        self, recipient_id: str, user_name: str
    ) -> Notification:
        """Greet a newly registered user."""
        return self.add_notification(
            recipient_id,
            NotificationType.SYSTEM,
            WELCOME_MESSAGE.format(name=user_name),
        )

    def add_mvp_badge_notification(self, recipient_id: str) -> Notification:
        """Award the early adopter badge."""
        return self.add_notification(
            recipient_id, NotificationType.SYSTEM, MVP_BADGE_MESSAGE
        )

    def list_notifications(
        self, recipient_id: str, unread_only: bool = False
    ) -> list[Notification]:
        """Return the inbox, optionally only unread entries."""
        inbox = self.inboxes.get(recipient_id, [])
        if unread_only:
            return [notification for notification in inbox if not notification.read]
        return list(inbox)

    def unread_count(self, recipient_id: str) -> int:
        """Return the number of unread notifications."""
        return len(self.list_notifications(recipient_id, unread_only=True))

    def mark_as_read(self, recipient_id: str, notification_id: int) -> bool:
        """Mark one notification read; return False if it does not exist."""
        inbox = self.inboxes.get(recipient_id, [])
        for index, notification in enumerate(inbox):
            if notification.id == notification_id:
                if not notification.read:
                    inbox[index] = replace(notification, read=True)
                return True
        return False

    def mark_all_as_read(self, recipient_id: str) -> None:
        """Mark every notification in the inbox read."""
        inbox = self.inboxes.get(recipient_id, [])
        self.inboxes[recipient_id] = [
            replace(notification, read=True) for notification in inbox
        ]
