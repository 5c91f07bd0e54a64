"""Supabase repository for posts, likes and comments."""

from dataclasses import dataclass

from supabase import AsyncClient

from foodshare.adapters.supabase_gateway import execute
from foodshare.domain.errors import GatewayError
from foodshare.domain.posts import Comment, Post, parse_timestamp, post_from_row
from foodshare.domain.profiles import Profile, profile_from_row
from foodshare.services.posts import PostRepository

POST_COLUMNS = (
    "id, user_id, title, caption, image_url, calories, tags, mealtype, "
    "community_id, created_at, "
    "profiles!posts_user_id_fkey (id, name, username, avatar)"
)
COMMENT_COLUMNS = (
    "id, post_id, user_id, content, created_at, "
    "profiles:user_id (id, name, username, avatar)"
)


@dataclass
class SupabasePostRepository(PostRepository):
    """Supabase implementation for posts and engagement rows."""

    client: AsyncClient

    async def get_post(self, post_id: str) -> Post | None:
        """Return a post joined with its author profile."""
        response = await execute(
            self.client.table("posts")
            .select(POST_COLUMNS)
            .eq("id", post_id)
            .limit(1),
            "post lookup",
        )
        if not response.data:
            return None
        return parse_post(response.data[0])

    async def list_posts(self) -> list[Post]:
        """Return all posts newest-first."""
        response = await execute(
            self.client.table("posts")
            .select(POST_COLUMNS)
            .order("created_at", desc=True),
            "post listing",
        )
        return [parse_post(row) for row in response.data or []]

    async def list_user_posts(self, user_id: str) -> list[Post]:
        """Return one author's posts newest-first."""
        response = await execute(
            self.client.table("posts")
            .select(POST_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "user post listing",
        )
        return [parse_post(row) for row in response.data or []]

    async def create_post(self, user_id: str, payload: dict[str, object]) -> Post:
        """Insert a post row and return it."""
        response = await execute(
            self.client.table("posts").insert({**payload, "user_id": user_id}),
            "post insert",
        )
        if not response.data:
            raise GatewayError("Failed to create post in Supabase")
        return parse_post(response.data[0])

    async def get_profile(self, user_id: str) -> Profile | None:
        """Return the display profile for a user."""
        response = await execute(
            self.client.table("profiles")
            .select("id, name, username, avatar")
            .eq("id", user_id)
            .limit(1),
            "profile lookup",
        )
        if not response.data:
            return None
        return profile_from_row(response.data[0])

    async def create_profile(self, profile: Profile) -> Profile:
        """Insert a profile row and return it."""
        response = await execute(
            self.client.table("profiles").insert(
                {
                    "id": profile.id,
                    "name": profile.name,
                    "username": profile.username,
                    "avatar": profile.avatar,
                }
            ),
            "profile insert",
        )
        if not response.data:
            raise GatewayError("Failed to create profile in Supabase")
        return profile_from_row(response.data[0])

    async def update_profile_name(self, user_id: str, name: str) -> Profile:
        """Change the display name of a profile."""
        response = await execute(
            self.client.table("profiles").update({"name": name}).eq("id", user_id),
            "profile update",
        )
        if not response.data:
            raise GatewayError(f"Profile {user_id} was not updated")
        return profile_from_row(response.data[0])

    async def count_likes(self, post_id: str) -> int:
        """Return the exact like count for a post."""
        response = await execute(
            self.client.table("likes")
            .select("id", count="exact", head=True)
            .eq("post_id", post_id),
            "like count",
        )
        return int(response.count or 0)

    async def has_liked(self, post_id: str, user_id: str) -> bool:
        """Return whether a like row exists for the pair."""
        response = await execute(
            self.client.table("likes")
            .select("id")
            .eq("post_id", post_id)
            .eq("user_id", user_id)
            .limit(1),
            "like lookup",
        )
        return bool(response.data)

    async def add_like(self, post_id: str, user_id: str) -> None:
        """Upsert the like so repeating it never duplicates the relation."""
        await execute(
            self.client.table("likes").upsert(
                {"post_id": post_id, "user_id": user_id},
                on_conflict="post_id,user_id",
                ignore_duplicates=True,
            ),
            "like upsert",
        )

    async def remove_like(self, post_id: str, user_id: str) -> None:
        """Delete the like relation for the pair."""
        await execute(
            self.client.table("likes")
            .delete()
            .eq("post_id", post_id)
            .eq("user_id", user_id),
            "like delete",
        )

    async def list_comments(self, post_id: str) -> list[Comment]:
        """Return comments for a post, newest-first."""
        response = await execute(
            self.client.table("comments")
            .select(COMMENT_COLUMNS)
            .eq("post_id", post_id)
            .order("created_at", desc=True),
            "comment listing",
        )
        return [parse_comment(row) for row in response.data or []]

    async def add_comment(self, post_id: str, user_id: str, content: str) -> None:
        """Insert a comment row."""
        await execute(
            self.client.table("comments").insert(
                {"post_id": post_id, "user_id": user_id, "content": content}
            ),
            "comment insert",
        )


def parse_post(row: dict[str, object]) -> Post:
    """Map a joined `posts` row into a post."""
    profile_row = row.get("profiles")
    author = profile_from_row(profile_row) if isinstance(profile_row, dict) else None
    return post_from_row(row, author=author)


def parse_comment(row: dict[str, object]) -> Comment:
    """Map a joined `comments` row into a comment."""
    profile_row = row.get("profiles")
    return Comment(
        id=str(row["id"]),
        post_id=str(row.get("post_id") or ""),
        user_id=str(row.get("user_id") or ""),
        content=str(row.get("content") or ""),
        created_at=parse_timestamp(row.get("created_at")),
        author=profile_from_row(profile_row) if isinstance(profile_row, dict) else None,
    )
