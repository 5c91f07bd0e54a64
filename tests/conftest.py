"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest

from foodshare.config import Settings
from foodshare.containers import AppContainer
from foodshare.domain.communities import Community
from foodshare.domain.errors import GatewayError
from foodshare.domain.posts import Comment, Post, post_from_row
from foodshare.domain.profiles import IdentityUser, Profile, Viewer
from foodshare.services.communities import CommunityRepository, CommunityService
from foodshare.services.composer import ComposerService
from foodshare.services.drafts import DraftService, KeyValueStore
from foodshare.services.engagement import EngagementService
from foodshare.services.feed import FeedService, PostInsertChannel
from foodshare.services.notifications import NotificationService
from foodshare.services.posts import PostLoader, PostRepository
from foodshare.services.profiles import ProfileService
from foodshare.services.viewers import IdentityProvider, ViewerService

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_profile(user_id: str, name: str = "Joy Joseph") -> Profile:
    return Profile(id=user_id, name=name, username="@joyjoseph", avatar="/cht.png")


def make_viewer(user_id: str = "viewer-1", with_profile: bool = True) -> Viewer:
    return Viewer(
        id=user_id,
        email=f"{user_id}@example.com",
        profile=make_profile(user_id) if with_profile else None,
    )


def make_post(  # type: ignore[no-untyped-def]
    post_id: str = "post-1", user_id: str = "author-1", **overrides
) -> Post:
    row: dict[str, object] = {
        "id": post_id,
        "user_id": user_id,
        "title": "Cabbage Salad",
        "caption": "Cabbage Salad is a delicious and healthy salad recipe.",
        "image_url": "/food1.jpg",
        "calories": 300,
        "tags": "vegetable,salad",
        "mealtype": "lunch",
        "created_at": BASE_TIME.isoformat(),
    }
    row.update(overrides)
    return post_from_row(row)


@dataclass
class InMemoryPostRepository(PostRepository):
    """In-memory posts, likes and comments with failure injection."""

    posts: dict[str, Post] = field(default_factory=dict)
    profiles: dict[str, Profile] = field(default_factory=dict)
    likes: set[tuple[str, str]] = field(default_factory=set)
    comments: list[Comment] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    gate: asyncio.Event | None = None
    calls: list[str] = field(default_factory=list)
    on_write: Callable[[], None] | None = None
    _ids: count = field(default_factory=lambda: count(1))

    async def _enter(self, name: str, write: bool = False) -> None:
        self.calls.append(name)
        if write and self.gate is not None:
            await self.gate.wait()
        if name in self.failing:
            raise GatewayError(f"{name} rejected")
        if write and self.on_write is not None:
            self.on_write()

    def write_calls(self) -> list[str]:
        writes = {
            "add_like",
            "remove_like",
            "add_comment",
            "create_post",
            "create_profile",
            "update_profile_name",
        }
        return [name for name in self.calls if name in writes]

    async def get_post(self, post_id: str) -> Post | None:
        await self._enter("get_post")
        return self.posts.get(post_id)

    async def list_posts(self) -> list[Post]:
        await self._enter("list_posts")
        return sorted(self.posts.values(), key=lambda p: p.created_at, reverse=True)

    async def list_user_posts(self, user_id: str) -> list[Post]:
        await self._enter("list_user_posts")
        posts = [post for post in self.posts.values() if post.user_id == user_id]
        return sorted(posts, key=lambda p: p.created_at, reverse=True)

    async def create_post(self, user_id: str, payload: dict[str, object]) -> Post:
        await self._enter("create_post", write=True)
        post = post_from_row(
            {
                **payload,
                "id": f"post-new-{next(self._ids)}",
                "user_id": user_id,
                "created_at": datetime.now(tz=UTC).isoformat(),
            }
        )
        self.posts[post.id] = post
        return post

    async def get_profile(self, user_id: str) -> Profile | None:
        await self._enter("get_profile")
        return self.profiles.get(user_id)

    async def create_profile(self, profile: Profile) -> Profile:
        await self._enter("create_profile", write=True)
        self.profiles[profile.id] = profile
        return profile

    async def update_profile_name(self, user_id: str, name: str) -> Profile:
        await self._enter("update_profile_name", write=True)
        profile = replace(self.profiles[user_id], name=name)
        self.profiles[user_id] = profile
        return profile

    async def count_likes(self, post_id: str) -> int:
        await self._enter("count_likes")
        return sum(1 for liked_post, _ in self.likes if liked_post == post_id)

    async def has_liked(self, post_id: str, user_id: str) -> bool:
        await self._enter("has_liked")
        return (post_id, user_id) in self.likes

    async def add_like(self, post_id: str, user_id: str) -> None:
        await self._enter("add_like", write=True)
        self.likes.add((post_id, user_id))

    async def remove_like(self, post_id: str, user_id: str) -> None:
        await self._enter("remove_like", write=True)
        self.likes.discard((post_id, user_id))

    async def list_comments(self, post_id: str) -> list[Comment]:
        await self._enter("list_comments")
        return [comment for comment in self.comments if comment.post_id == post_id]

    async def add_comment(self, post_id: str, user_id: str, content: str) -> None:
        await self._enter("add_comment", write=True)
        self.add_existing_comment(post_id, user_id, content)

    def add_existing_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        index = next(self._ids)
        comment = Comment(
            id=f"comment-{index}",
            post_id=post_id,
            user_id=user_id,
            content=content,
            created_at=BASE_TIME + timedelta(minutes=index),
            author=self.profiles.get(user_id),
        )
        self.comments.append(comment)
        return comment


@dataclass
class FakePostInsertChannel(PostInsertChannel):
    """Push channel driven by the test."""

    callback: Callable[[dict[str, object]], None] | None = None
    subscribe_count: int = 0
    unsubscribe_count: int = 0

    async def subscribe(self, on_insert: Callable[[dict[str, object]], None]) -> None:
        self.subscribe_count += 1
        self.callback = on_insert

    async def unsubscribe(self) -> None:
        self.unsubscribe_count += 1
        self.callback = None

    def emit(self, row: dict[str, object]) -> None:
        assert self.callback is not None, "channel is not subscribed"
        self.callback(row)


@dataclass
class InMemoryStore(KeyValueStore):
    """Dictionary-backed local storage."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class InMemoryCommunityRepository(CommunityRepository):
    """In-memory communities and memberships."""

    communities: dict[int, Community] = field(default_factory=dict)
    posts: list[Post] = field(default_factory=list)
    members: set[tuple[int, str]] = field(default_factory=set)
    failing: set[str] = field(default_factory=set)

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise GatewayError(f"{name} rejected")

    async def get_community(self, community_id: int) -> Community | None:
        self._check("get_community")
        return self.communities.get(community_id)

    async def list_communities(self) -> list[Community]:
        self._check("list_communities")
        return [self.communities[key] for key in sorted(self.communities)]

    async def list_joined_community_ids(self, user_id: str) -> set[int]:
        self._check("list_joined_community_ids")
        return {cid for cid, member in self.members if member == user_id}

    async def list_community_posts(self, community_id: int) -> list[Post]:
        self._check("list_community_posts")
        return [post for post in self.posts if post.community_id == community_id]

    async def is_member(self, community_id: int, user_id: str) -> bool:
        self._check("is_member")
        return (community_id, user_id) in self.members

    async def count_members(self, community_id: int) -> int:
        self._check("count_members")
        return sum(1 for cid, _ in self.members if cid == community_id)

    async def add_member(self, community_id: int, user_id: str) -> None:
        self._check("add_member")
        self.members.add((community_id, user_id))

    async def remove_member(self, community_id: int, user_id: str) -> None:
        self._check("remove_member")
        self.members.discard((community_id, user_id))


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Maps known tokens to identity users."""

    users: dict[str, IdentityUser] = field(default_factory=dict)

    async def get_user(self, access_token: str) -> IdentityUser | None:
        return self.users.get(access_token)


@pytest.fixture
def settings(tmp_path) -> Settings:  # type: ignore[no-untyped-def]
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoiYW5vbiJ9."
            "c2lnbmF0dXJlLXNpZ25hdHVyZQ"
        ),
        draft_store_path=tmp_path / "local_storage.json",
    )


@pytest.fixture
def post_repository() -> InMemoryPostRepository:
    repository = InMemoryPostRepository()
    repository.posts["post-1"] = make_post("post-1")
    repository.profiles["author-1"] = make_profile("author-1", "Mike Rodriguez")
    repository.profiles["viewer-1"] = make_profile("viewer-1")
    return repository


@pytest.fixture
def channel() -> FakePostInsertChannel:
    return FakePostInsertChannel()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider(
        users={
            "token-1": IdentityUser(
                id="viewer-1", email="viewer-1@example.com", display_name="Joy"
            )
        }
    )


@pytest.fixture
def community_repository() -> InMemoryCommunityRepository:
    return InMemoryCommunityRepository(
        communities={
            1: Community(
                id=1,
                title="Everyday Eats",
                description="For casual meals, what people are really eating daily.",
            )
        }
    )


@pytest.fixture
def container(
    settings: Settings,
    post_repository: InMemoryPostRepository,
    channel: FakePostInsertChannel,
    identity: FakeIdentityProvider,
    community_repository: InMemoryCommunityRepository,
) -> AppContainer:
    post_loader = PostLoader(post_repository)
    feed_service = FeedService(repository=post_repository, channel=channel)
    draft_service = DraftService(store=InMemoryStore())
    notification_service = NotificationService()

    async def close_resources() -> None:
        await feed_service.stop()

    return AppContainer(
        settings=settings,
        viewer_service=ViewerService(identity=identity, profiles=post_repository),
        post_loader=post_loader,
        engagement_service=EngagementService(
            repository=post_repository, loader=post_loader
        ),
        feed_service=feed_service,
        draft_service=draft_service,
        composer_service=ComposerService(
            repository=post_repository, feed=feed_service, drafts=draft_service
        ),
        notification_service=notification_service,
        community_service=CommunityService(
            repository=community_repository, notifications=notification_service
        ),
        profile_service=ProfileService(
            profiles=post_repository,
            posts=post_repository,
            notifications=notification_service,
        ),
        close_resources=close_resources,
    )
