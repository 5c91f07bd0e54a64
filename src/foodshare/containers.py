"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import AsyncClient

from foodshare.adapters.json_file_store import JsonFileStore
from foodshare.adapters.supabase_community_repository import (
    SupabaseCommunityRepository,
)
from foodshare.adapters.supabase_identity_provider import SupabaseIdentityProvider
from foodshare.adapters.supabase_post_repository import SupabasePostRepository
from foodshare.adapters.supabase_realtime_channel import SupabasePostInsertChannel
from foodshare.config import Settings
from foodshare.services.communities import CommunityService
from foodshare.services.composer import ComposerService
from foodshare.services.drafts import DraftService
from foodshare.services.engagement import EngagementService
from foodshare.services.feed import FeedService
from foodshare.services.notifications import NotificationService
from foodshare.services.posts import PostLoader
from foodshare.services.profiles import ProfileService
from foodshare.services.viewers import ViewerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    viewer_service: ViewerService
    post_loader: PostLoader
    engagement_service: EngagementService
    feed_service: FeedService
    draft_service: DraftService
    composer_service: ComposerService
    notification_service: NotificationService
    community_service: CommunityService
    profile_service: ProfileService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = AsyncClient(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    post_repository = SupabasePostRepository(supabase_client)
    community_repository = SupabaseCommunityRepository(supabase_client)
    channel = SupabasePostInsertChannel(
        supabase_client, name=resolved_settings.posts_channel
    )
    viewer_service = ViewerService(
        identity=SupabaseIdentityProvider(supabase_client),
        profiles=post_repository,
    )
    post_loader = PostLoader(post_repository)
    engagement_service = EngagementService(
        repository=post_repository, loader=post_loader
    )
    feed_service = FeedService(repository=post_repository, channel=channel)
    draft_service = DraftService(
        store=JsonFileStore(resolved_settings.draft_store_path),
        key=resolved_settings.draft_storage_key,
    )
    composer_service = ComposerService(
        repository=post_repository, feed=feed_service, drafts=draft_service
    )
    notification_service = NotificationService()
    community_service = CommunityService(
        repository=community_repository, notifications=notification_service
    )
    profile_service = ProfileService(
        profiles=post_repository,
        posts=post_repository,
        notifications=notification_service,
    )

    async def close_resources() -> None:
        await feed_service.stop()

    return AppContainer(
        settings=resolved_settings,
        viewer_service=viewer_service,
        post_loader=post_loader,
        engagement_service=engagement_service,
        feed_service=feed_service,
        draft_service=draft_service,
        composer_service=composer_service,
        notification_service=notification_service,
        community_service=community_service,
        profile_service=profile_service,
        close_resources=close_resources,
    )
