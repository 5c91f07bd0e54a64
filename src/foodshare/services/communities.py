"""Community pages and membership toggling."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from foodshare.domain.communities import Community, CommunityListing, CommunityView
from foodshare.domain.engagement import AUTH_REQUIRED, ERROR, EngagementNotice
from foodshare.domain.errors import GatewayError
from foodshare.domain.notifications import NotificationType
from foodshare.domain.posts import Post
from foodshare.domain.profiles import Viewer
from foodshare.services.notifications import NotificationService

logger = logging.getLogger(__name__)

JOIN_LOGIN_PROMPT = "Please log in to join communities"
MEMBERSHIP_FAILED = "Failed to update membership"


class CommunityRepository(Protocol):
    """Gateway interface for communities and their members."""

    async def get_community(self, community_id: int) -> Community | None:
        """Return a community by id, if present."""

    async def list_communities(self) -> list[Community]:
        """Return every community ordered by id."""

    async def list_joined_community_ids(self, user_id: str) -> set[int]:
        """Return ids of the communities the user belongs to."""

    async def list_community_posts(self, community_id: int) -> list[Post]:
        """Return the community's posts newest-first."""

    async def is_member(self, community_id: int, user_id: str) -> bool:
        """Return whether the user belongs to the community."""

    async def count_members(self, community_id: int) -> int:
        """Return the exact member count."""

    async def add_member(self, community_id: int, user_id: str) -> None:
        """Insert a membership row."""

    async def remove_member(self, community_id: int, user_id: str) -> None:
        """Delete a membership row."""


@dataclass
class CommunityService:
    """Loads community pages and joins or leaves them."""

    repository: CommunityRepository
    notifications: NotificationService
    views: dict[tuple[int, str], CommunityView] = field(default_factory=dict)

    async def load(
        self, community_id: int, viewer: Viewer | None
    ) -> CommunityView | None:
        """Load a community with posts and the viewer's membership."""
        try:
            community = await self.repository.get_community(community_id)
        except GatewayError:
            logger.exception("Error loading community %s", community_id)
            return None
        if community is None:
            return None
        view = CommunityView(community=community)
        try:
            view.posts = await self.repository.list_community_posts(community_id)
        except GatewayError:
            logger.exception("Error loading posts for community %s", community_id)
        if viewer is not None:
            try:
                view.is_member = await self.repository.is_member(
                    community_id, viewer.id
                )
                view.member_count = await self.repository.count_members(community_id)
            except GatewayError:
                logger.exception("Error loading membership for %s", community_id)
            self.views[(community_id, viewer.id)] = view
        return view

    async def list_communities(self, viewer: Viewer | None) -> list[CommunityListing]:
        """Return the community directory with the viewer's joined flags."""
        try:
            communities = await self.repository.list_communities()
        except GatewayError:
            logger.exception("Error loading communities")
            return []
        joined: set[int] = set()
        if viewer is not None:
            try:
                joined = await self.repository.list_joined_community_ids(viewer.id)
            except GatewayError:
                logger.exception("Error loading communities of %s", viewer.id)
        listings: list[CommunityListing] = []
        for community in communities:
            try:
                member_count = await self.repository.count_members(community.id)
            except GatewayError:
                logger.warning("Could not count members of %s", community.id)
                member_count = 0
            listings.append(
                CommunityListing(
                    community=community,
                    member_count=member_count,
                    is_member=community.id in joined,
                )
            )
        return listings

    async def toggle_membership(
        self, community_id: int, viewer: Viewer | None
    ) -> EngagementNotice | None:
        """Join or leave a community once the gateway confirms the write."""
        if viewer is None:
            return EngagementNotice(kind=AUTH_REQUIRED, text=JOIN_LOGIN_PROMPT)
        view = self.views.get((community_id, viewer.id))
        if view is None:
            view = await self.load(community_id, viewer)
            if view is None:
                return EngagementNotice(kind=ERROR, text=MEMBERSHIP_FAILED)
        if view.joining:
            return None

        view.joining = True
        try:
            if view.is_member:
                await self.repository.remove_member(community_id, viewer.id)
                view.is_member = False
                view.member_count = max(0, view.member_count - 1)
            else:
                await self.repository.add_member(community_id, viewer.id)
                view.is_member = True
                view.member_count += 1
                self.notifications.add_notification(
                    viewer.id,
                    NotificationType.SYSTEM,
                    f"You have joined the {view.community.title} community. "
                    "Start connecting with other members!",
                )
        except GatewayError:
            logger.exception("Error toggling membership of %s", community_id)
            return EngagementNotice(kind=ERROR, text=MEMBERSHIP_FAILED)
        finally:
            view.joining = False
        return None
