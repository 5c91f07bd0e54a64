"""Post aggregate loading."""

import logging
from dataclasses import dataclass
from typing import Protocol

from foodshare.domain.engagement import PostAggregate
from foodshare.domain.errors import GatewayError
from foodshare.domain.posts import Comment, Post
from foodshare.domain.profiles import Profile, Viewer

logger = logging.getLogger(__name__)


class PostRepository(Protocol):
    """Gateway interface for posts and their engagement rows."""

    async def get_post(self, post_id: str) -> Post | None:
        """Return a post joined with its author profile, if present."""

    async def list_posts(self) -> list[Post]:
        """Return all posts newest-first."""

    async def list_user_posts(self, user_id: str) -> list[Post]:
        """Return one author's posts newest-first."""

    async def create_post(self, user_id: str, payload: dict[str, object]) -> Post:
        """Insert a post row and return it."""

    async def get_profile(self, user_id: str) -> Profile | None:
        """Return the display profile for a user, if present."""

    async def count_likes(self, post_id: str) -> int:
        """Return the number of likes on a post."""

    async def has_liked(self, post_id: str, user_id: str) -> bool:
        """Return whether the user has liked the post."""

    async def add_like(self, post_id: str, user_id: str) -> None:
        """Upsert the (post, user) like relation."""

    async def remove_like(self, post_id: str, user_id: str) -> None:
        """Delete the (post, user) like relation."""

    async def list_comments(self, post_id: str) -> list[Comment]:
        """Return comments for a post joined with author profiles."""

    async def add_comment(self, post_id: str, user_id: str, content: str) -> None:
        """Insert a comment row."""


def newest_first(comments: list[Comment]) -> list[Comment]:
    """Order comments by creation time, newest first."""
    return sorted(comments, key=lambda comment: comment.created_at, reverse=True)


@dataclass
class PostLoader:
    """Loads a post with like count, viewer like state and comments."""

    repository: PostRepository

    async def load(self, post_id: str, viewer: Viewer | None) -> PostAggregate:
        """Return the post aggregate; read errors degrade to empty engagement."""
        try:
            post = await self.repository.get_post(post_id)
        except GatewayError:
            logger.exception("Failed to load post %s", post_id)
            post = None
        try:
            like_count = await self.repository.count_likes(post_id)
            viewer_has_liked = (
                await self.repository.has_liked(post_id, viewer.id)
                if viewer is not None
                else False
            )
            comments = await self.repository.list_comments(post_id)
        except GatewayError:
            logger.exception("Failed to load engagement for post %s", post_id)
            return PostAggregate(post=post)
        return PostAggregate(
            post=post,
            like_count=like_count,
            viewer_has_liked=viewer_has_liked,
            comments=newest_first(comments),
        )
