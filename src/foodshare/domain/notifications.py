"""Domain models for in-app notifications."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NotificationType(StrEnum):
    """Kinds of notification shown to a viewer."""

    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MENTION = "mention"
    SYSTEM = "system"


@dataclass(frozen=True)
class NotificationPostRef:
    """Post that triggered a notification."""

    id: str
    title: str
    image: str | None = None


@dataclass(frozen=True)
class NotificationUserRef:
    """User that triggered a notification."""

    name: str
    username: str
    avatar: str | None = None


@dataclass(frozen=True)
class Notification:
    """A notification delivered to one viewer."""

    id: int
    type: NotificationType
    message: str
    read: bool
    created_at: datetime
    post: NotificationPostRef | None = None
    user: NotificationUserRef | None = None
