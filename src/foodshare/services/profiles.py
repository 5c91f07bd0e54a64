"""Viewer profile page and display name updates."""

import logging
from dataclasses import dataclass
from typing import Protocol

from foodshare.domain.errors import GatewayError, ProfileError
from foodshare.domain.posts import Post
from foodshare.domain.profiles import Profile, Viewer, initial_avatar
from foodshare.services.notifications import NotificationService
from foodshare.services.posts import PostRepository

logger = logging.getLogger(__name__)

DEFAULT_NAME = "User"


class ProfileRepository(Protocol):
    """Persistence interface for display profiles."""

    async def get_profile(self, user_id: str) -> Profile | None:
        """Return the display profile for a user, if present."""

    async def create_profile(self, profile: Profile) -> Profile:
        """Insert a profile row and return it."""

    async def update_profile_name(self, user_id: str, name: str) -> Profile:
        """Change the display name and return the updated profile."""


@dataclass(frozen=True)
class ProfilePage:
    """A viewer's profile with their own posts, newest first."""

    profile: Profile
    posts: list[Post]


@dataclass
class ProfileService:
    """Loads, creates and renames viewer profiles."""

    profiles: ProfileRepository
    posts: PostRepository
    notifications: NotificationService

    async def ensure_profile(self, viewer: Viewer) -> Profile:
        """Return the stored profile, creating it for a first-time viewer."""
        profile = await self.profiles.get_profile(viewer.id)
        if profile is not None:
            return profile
        name = viewer.profile.name if viewer.profile is not None else DEFAULT_NAME
        profile = await self.profiles.create_profile(
            Profile(
                id=viewer.id,
                name=name,
                username=f"user_{viewer.id[:8]}",
                avatar=initial_avatar(name),
            )
        )
        logger.info("Created profile for %s", viewer.id)
        self.notifications.add_welcome_notification(viewer.id, profile.name)
        self.notifications.add_mvp_badge_notification(viewer.id)
        return profile

    async def load(self, viewer: Viewer) -> ProfilePage:
        """Return the profile page; a failed post listing leaves it empty."""
        profile = await self.ensure_profile(viewer)
        try:
            posts = await self.posts.list_user_posts(viewer.id)
        except GatewayError:
            logger.exception("Error fetching posts of %s", viewer.id)
            posts = []
        return ProfilePage(profile=profile, posts=posts)

    async def update_name(self, viewer: Viewer, name: str) -> Profile:
        """Rename the viewer's profile."""
        cleaned = name.strip()
        if not cleaned:
            raise ProfileError("Name cannot be empty")
        await self.ensure_profile(viewer)
        return await self.profiles.update_profile_name(viewer.id, cleaned)
