"""Supabase repository for communities and memberships."""

from dataclasses import dataclass

from supabase import AsyncClient

from foodshare.adapters.supabase_gateway import execute
from foodshare.adapters.supabase_post_repository import POST_COLUMNS, parse_post
from foodshare.domain.communities import Community
from foodshare.domain.posts import Post
from foodshare.services.communities import CommunityRepository

COMMUNITY_COLUMNS = "id, title, description, emoji"


@dataclass
class SupabaseCommunityRepository(CommunityRepository):
    """Supabase implementation for communities."""

    client: AsyncClient

    async def get_community(self, community_id: int) -> Community | None:
        """Return a community by id."""
        response = await execute(
            self.client.table("communities")
            .select(COMMUNITY_COLUMNS)
            .eq("id", community_id)
            .limit(1),
            "community lookup",
        )
        if not response.data:
            return None
        return parse_community(response.data[0])

    async def list_communities(self) -> list[Community]:
        """Return every community ordered by id."""
        response = await execute(
            self.client.table("communities")
            .select(COMMUNITY_COLUMNS)
            .order("id"),
            "community listing",
        )
        return [parse_community(row) for row in response.data or []]

    async def list_joined_community_ids(self, user_id: str) -> set[int]:
        """Return ids of the communities the user belongs to."""
        response = await execute(
            self.client.table("community_members")
            .select("community_id")
            .eq("user_id", user_id),
            "joined community listing",
        )
        return {int(row["community_id"]) for row in response.data or []}

    async def list_community_posts(self, community_id: int) -> list[Post]:
        """Return the community's posts newest-first."""
        response = await execute(
            self.client.table("posts")
            .select(POST_COLUMNS)
            .eq("community_id", community_id)
            .order("created_at", desc=True),
            "community post listing",
        )
        return [parse_post(row) for row in response.data or []]

    async def is_member(self, community_id: int, user_id: str) -> bool:
        """Return whether a membership row exists."""
        response = await execute(
            self.client.table("community_members")
            .select("id")
            .eq("community_id", community_id)
            .eq("user_id", user_id)
            .limit(1),
            "membership lookup",
        )
        return bool(response.data)

    async def count_members(self, community_id: int) -> int:
        """Return the exact member count."""
        response = await execute(
            self.client.table("community_members")
            .select("id", count="exact", head=True)
            .eq("community_id", community_id),
            "member count",
        )
        return int(response.count or 0)

    async def add_member(self, community_id: int, user_id: str) -> None:
        """Insert a membership row."""
        await execute(
            self.client.table("community_members").insert(
                {"community_id": community_id, "user_id": user_id}
            ),
            "membership insert",
        )

    async def remove_member(self, community_id: int, user_id: str) -> None:
        """Delete a membership row."""
        await execute(
            self.client.table("community_members")
            .delete()
            .eq("community_id", community_id)
            .eq("user_id", user_id),
            "membership delete",
        )


def parse_community(row: dict[str, object]) -> Community:
    """Map a `communities` row into a community."""
    emoji = row.get("emoji")
    return Community(
        id=int(row["id"]),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        emoji=str(emoji) if emoji else None,
    )
