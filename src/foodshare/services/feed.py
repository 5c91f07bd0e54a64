"""Home feed state kept current by the posts push channel."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from foodshare.domain.errors import GatewayError
from foodshare.domain.posts import Post, post_from_row
from foodshare.services.posts import PostRepository

logger = logging.getLogger(__name__)


class PostInsertChannel(Protocol):
    """Push channel emitting newly inserted `posts` rows."""

    async def subscribe(self, on_insert: Callable[[dict[str, object]], None]) -> None:
        """Start delivering inserted rows to the callback."""

    async def unsubscribe(self) -> None:
        """Release the channel."""


def merge_new_post(posts: list[Post], post: Post) -> list[Post]:
    """Return the feed with the post prepended unless its id is present."""
    if any(existing.id == post.id for existing in posts):
        return posts
    return [post, *posts]


@dataclass
class FeedService:
    """Newest-first feed with deduplicated realtime inserts."""

    repository: PostRepository
    channel: PostInsertChannel
    posts: list[Post] = field(default_factory=list)
    is_loading: bool = False
    _queue: asyncio.Queue | None = field(default=None, init=False, repr=False)
    _consumer: asyncio.Task | None = field(default=None, init=False, repr=False)

    async def refresh(self) -> list[Post]:
        """Replace the feed with a full fetch."""
        self.is_loading = True
        try:
            self.posts = await self.repository.list_posts()
        except GatewayError:
            logger.exception("Failed to fetch posts")
        finally:
            self.is_loading = False
        return self.posts

    def append_if_new(self, post: Post) -> bool:
        """Prepend a post unless already present; return True if added."""
        merged = merge_new_post(self.posts, post)
        if merged is self.posts:
            return False
        self.posts = merged
        return True

    async def handle_insert(self, row: dict[str, object]) -> Post | None:
        """Resolve the author of an inserted row and merge it into the feed."""
        if not row.get("id"):
            logger.warning("Ignoring post insert event without id")
            return None
        user_id = str(row.get("user_id") or "")
        try:
            author = await self.repository.get_profile(user_id) if user_id else None
        except GatewayError:
            logger.exception("Error fetching profile for new post %s", row["id"])
            return None
        post = post_from_row(row, author=author)
        self.append_if_new(post)
        return post

    @property
    def is_subscribed(self) -> bool:
        return self._consumer is not None

    async def start(self) -> None:
        """Load the feed and subscribe to post inserts."""
        if self._consumer is not None:
            return
        await self.refresh()
        queue: asyncio.Queue[dict[str, object]] = asyncio.Queue()
        await self.channel.subscribe(queue.put_nowait)
        self._queue = queue
        self._consumer = asyncio.create_task(self._consume(queue))

    async def stop(self) -> None:
        """Release the subscription so no further events mutate the feed."""
        if self._consumer is None:
            return
        consumer, self._consumer = self._consumer, None
        self._queue = None
        try:
            await self.channel.unsubscribe()
        except GatewayError:
            logger.exception("Failed to release the posts channel")
        finally:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer

    async def drain(self) -> None:
        """Wait until every queued insert event has been applied."""
        if self._queue is not None:
            await self._queue.join()

    async def _consume(self, queue: asyncio.Queue) -> None:
        while True:
            row = await queue.get()
            try:
                await self.handle_insert(row)
            except Exception:
                logger.exception("Failed to apply post insert event")
            finally:
                queue.task_done()

    async def __aenter__(self) -> "FeedService":
        await self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.stop()
