"""Domain models for posts, likes and comments."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from foodshare.domain.profiles import Profile

MAX_TAGS = 5


class MealType(StrEnum):
    """Meal categories a post can be filed under."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    SWEET = "sweet"
    DESSERT = "dessert"
    UNSET = ""


@dataclass(frozen=True)
class Post:
    """A shared meal post."""

    id: str
    user_id: str
    title: str
    caption: str
    image_url: str | None
    calories: int
    tags: list[str]
    meal_type: MealType
    created_at: datetime
    community_id: int | None = None
    author: Profile | None = None


@dataclass(frozen=True)
class Comment:
    """A comment left on a post."""

    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    author: Profile | None = None


def parse_tags(raw: object) -> list[str]:
    """Split the comma-joined tag column into a list."""
    if isinstance(raw, list):
        return [str(tag) for tag in raw if str(tag)]
    if not isinstance(raw, str) or not raw:
        return []
    return [tag for tag in raw.split(",") if tag]


def join_tags(tags: list[str]) -> str:
    """Join tags into the stored column format."""
    return ",".join(tags)


def parse_meal_type(raw: object) -> MealType:
    """Return the meal type for a stored value, unset when unknown."""
    try:
        return MealType(str(raw or "").lower())
    except ValueError:
        return MealType.UNSET


def parse_timestamp(raw: object) -> datetime:
    """Parse a gateway timestamp as an aware UTC datetime."""
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    else:
        return datetime.min.replace(tzinfo=UTC)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_time_ago(created_at: datetime, now: datetime | None = None) -> str:
    """Render a relative timestamp for display."""
    current = now or datetime.now(tz=UTC)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    elapsed = current - created_at
    hours = int(elapsed.total_seconds() // 3600)
    days = elapsed.days
    if hours < 1:
        return "Just now"
    if hours < 24:  # noqa: PLR2004
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:  # noqa: PLR2004
        return f"{days} day{'s' if days > 1 else ''} ago"
    return created_at.strftime("%b %d, %Y")


def post_from_row(row: dict[str, object], author: Profile | None = None) -> Post:
    """Map a `posts` row into a post, attaching an already resolved author."""
    community_id = row.get("community_id")
    image_url = row.get("image_url")
    return Post(
        id=str(row["id"]),
        user_id=str(row.get("user_id") or ""),
        title=str(row.get("title") or ""),
        caption=str(row.get("caption") or ""),
        image_url=str(image_url) if image_url else None,
        calories=int(row.get("calories") or 0),
        tags=parse_tags(row.get("tags")),
        meal_type=parse_meal_type(row.get("mealtype")),
        created_at=parse_timestamp(row.get("created_at")),
        community_id=int(community_id) if community_id is not None else None,
        author=author,
    )
