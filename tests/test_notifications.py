"""Tests for the notification centre."""

from foodshare.domain.notifications import NotificationPostRef, NotificationType
from foodshare.services.notifications import NotificationService


def _fixed_clock() -> int:
    return 1_700_000_000_000


def test_notifications_are_prepended_with_unique_ids() -> None:
    service = NotificationService(clock=_fixed_clock)

    first = service.add_notification("viewer-1", NotificationType.LIKE, "liked")
    second = service.add_notification(
        "viewer-1",
        NotificationType.COMMENT,
        "commented",
        post=NotificationPostRef(id="post-1", title="Cabbage Salad"),
    )

    assert first.id != second.id
    assert second.id == first.id + 1
    inbox = service.list_notifications("viewer-1")
    assert [n.message for n in inbox] == ["commented", "liked"]
    assert inbox[0].post is not None
    assert service.unread_count("viewer-1") == 2


def test_inboxes_are_kept_per_recipient() -> None:
    service = NotificationService()
    service.add_welcome_notification("viewer-1", "Joy")

    assert service.unread_count("viewer-1") == 1
    assert service.unread_count("viewer-2") == 0
    welcome = service.list_notifications("viewer-1")[0]
    assert welcome.message.startswith("Welcome to FoodShare, Joy!")


def test_mark_as_read_is_one_directional() -> None:
    service = NotificationService()
    notification = service.add_mvp_badge_notification("viewer-1")

    assert service.mark_as_read("viewer-1", notification.id) is True
    assert service.mark_as_read("viewer-1", notification.id) is True
    assert service.unread_count("viewer-1") == 0
    assert service.list_notifications("viewer-1", unread_only=True) == []
    assert service.mark_as_read("viewer-1", 42) is False


def test_mark_all_as_read() -> None:
    service = NotificationService()
    service.add_notification("viewer-1", NotificationType.FOLLOW, "followed you")
    service.add_notification("viewer-1", NotificationType.MENTION, "mentioned you")

    service.mark_all_as_read("viewer-1")

    assert service.unread_count("viewer-1") == 0
    assert len(service.list_notifications("viewer-1")) == 2
