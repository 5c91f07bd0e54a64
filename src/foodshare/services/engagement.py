"""Optimistic like and comment synchronization.

Every (post, viewer) pair owns a `PostEngagement` view. Likes follow a four
state machine (unliked, liking, liked, unliking): the displayed state changes
before the gateway confirms, toggles issued while a write is in flight are
ignored, failed writes roll back, and successful writes are reconciled with an
authoritative re-read. Comments clear the input while the insert is pending and
restore it on failure; on success the whole comment list is re-fetched.
At most `max_views` pairs are cached; idle ones are dropped least recently used
first and reloaded on next access.
"""

import logging
from dataclasses import dataclass, field

from foodshare.domain.engagement import (
    AUTH_REQUIRED,
    ERROR,
    EngagementNotice,
    LikeState,
    PostAggregate,
    PostEngagement,
)
from foodshare.domain.errors import GatewayError
from foodshare.domain.profiles import Viewer
from foodshare.services.posts import PostLoader, PostRepository, newest_first

logger = logging.getLogger(__name__)

LIKE_LOGIN_PROMPT = "Please log in to like posts"
COMMENT_LOGIN_PROMPT = "Please log in to comment"
LIKE_FAILED = "Failed to update like"
COMMENT_FAILED = "Failed to add comment"

_ANONYMOUS = ""
DEFAULT_MAX_VIEWS = 1024


def _key(post_id: str, viewer: Viewer | None) -> tuple[str, str]:
    return post_id, viewer.id if viewer is not None else _ANONYMOUS


@dataclass
class EngagementService:
    """Per-viewer engagement state with optimistic updates."""

    repository: PostRepository
    loader: PostLoader
    views: dict[tuple[str, str], PostEngagement] = field(default_factory=dict)
    max_views: int = DEFAULT_MAX_VIEWS

    async def load(self, post_id: str, viewer: Viewer | None) -> PostEngagement:
        """(Re)load engagement for a post."""
        aggregate = await self.loader.load(post_id, viewer)
        return self.apply_aggregate(post_id, viewer, aggregate)

    def apply_aggregate(
        self, post_id: str, viewer: Viewer | None, aggregate: PostAggregate
    ) -> PostEngagement:
        """Seed the view from a loaded aggregate, keeping in-flight like state."""
        key = _key(post_id, viewer)
        view = self.views.get(key)
        if view is None:
            view = PostEngagement(post_id=post_id)
            self.views[key] = view
            self._evict_idle(keep=key)
        if not view.in_flight:
            view.like_state = (
                LikeState.LIKED if aggregate.viewer_has_liked else LikeState.UNLIKED
            )
            view.like_count = aggregate.like_count
        view.comments = aggregate.comments
        view.comment_count = len(aggregate.comments)
        return view

    def get_view(self, post_id: str, viewer: Viewer | None) -> PostEngagement | None:
        """Return the cached view for a pair, if loaded."""
        key = _key(post_id, viewer)
        view = self.views.pop(key, None)
        if view is not None:
            self.views[key] = view
        return view

    def _evict_idle(self, keep: tuple[str, str]) -> None:
        # least recently used first; views with a like in flight are kept
        for key in list(self.views):
            if len(self.views) <= self.max_views:
                return
            if key != keep and not self.views[key].in_flight:
                del self.views[key]

    async def ensure_view(
        self, post_id: str, viewer: Viewer | None
    ) -> PostEngagement:
        """Return the cached view, loading it on first access."""
        view = self.get_view(post_id, viewer)
        if view is None:
            view = await self.load(post_id, viewer)
        return view

    def snapshot(self, post_id: str, viewer: Viewer | None) -> dict[str, object]:
        """Return the engagement fields exposed to views."""
        view = self.get_view(post_id, viewer) or PostEngagement(post_id=post_id)
        return {
            "post_id": view.post_id,
            "like_count": view.like_count,
            "viewer_has_liked": view.viewer_has_liked,
            "like_state": str(view.like_state),
            "comment_count": view.comment_count,
            "comments": view.comments,
            "comment_input": view.comment_input,
        }

    async def toggle_like(
        self, post_id: str, viewer: Viewer | None
    ) -> EngagementNotice | None:
        """Toggle the viewer's like on a post."""
        if viewer is None:
            return EngagementNotice(kind=AUTH_REQUIRED, text=LIKE_LOGIN_PROMPT)

        view = await self.ensure_view(post_id, viewer)
        if view.in_flight:
            logger.debug("Ignoring like toggle on %s while in flight", post_id)
            return None

        previous_state = view.like_state
        previous_count = view.like_count
        liking = previous_state is LikeState.UNLIKED
        if liking:
            view.like_state = LikeState.LIKING
            view.like_count = previous_count + 1
        else:
            view.like_state = LikeState.UNLIKING
            view.like_count = max(0, previous_count - 1)

        try:
            if liking:
                await self.repository.add_like(post_id, viewer.id)
            else:
                await self.repository.remove_like(post_id, viewer.id)
        except GatewayError:
            logger.exception("Failed to toggle like on post %s", post_id)
            view.like_state = previous_state
            view.like_count = previous_count
            return EngagementNotice(kind=ERROR, text=LIKE_FAILED)

        view.like_state = LikeState.LIKED if liking else LikeState.UNLIKED
        try:
            view.like_count = await self.repository.count_likes(post_id)
        except GatewayError:
            logger.warning("Could not reconcile like count for post %s", post_id)
        return None

    async def set_comment_input(
        self, post_id: str, viewer: Viewer | None, text: str
    ) -> None:
        """Update the comment input field of a view."""
        view = await self.ensure_view(post_id, viewer)
        view.comment_input = text

    async def submit_comment(
        self, post_id: str, viewer: Viewer | None, text: str | None = None
    ) -> EngagementNotice | None:
        """Append a comment; `text=None` submits the current input field."""
        existing = self.get_view(post_id, viewer)
        if text is None:
            text = existing.comment_input if existing is not None else ""
        body = text.strip()
        if not body:
            return None
        if viewer is None or viewer.profile is None:
            return EngagementNotice(kind=AUTH_REQUIRED, text=COMMENT_LOGIN_PROMPT)

        view = await self.ensure_view(post_id, viewer)
        view.comment_input = ""
        try:
            await self.repository.add_comment(post_id, viewer.id, body)
        except GatewayError:
            logger.exception("Failed to add comment on post %s", post_id)
            view.comment_input = text
            return EngagementNotice(kind=ERROR, text=COMMENT_FAILED)

        try:
            comments = await self.repository.list_comments(post_id)
        except GatewayError:
            logger.warning("Could not re-fetch comments for post %s", post_id)
            return None
        view.comments = newest_first(comments)
        view.comment_count = len(view.comments)
        return None
