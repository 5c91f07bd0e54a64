"""Post composition: meal building, tags and publishing."""

import logging
from dataclasses import dataclass, field, replace

from foodshare.domain.drafts import Draft
from foodshare.domain.errors import CompositionError
from foodshare.domain.meals import FOODS, Food, FoodItem, total_calories
from foodshare.domain.posts import MAX_TAGS, Post, join_tags
from foodshare.domain.profiles import Viewer
from foodshare.services.drafts import DraftService
from foodshare.services.feed import FeedService
from foodshare.services.posts import PostRepository

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


@dataclass
class MealBuilder:
    """Selected foods with servings, summed into a calorie total."""

    catalogue: tuple[Food, ...] = FOODS
    items: list[FoodItem] = field(default_factory=list)

    @property
    def total_calories(self) -> int:
        return total_calories(self.items)

    def search(self, query: str) -> list[Food]:
        """Return catalogue foods matching the query."""
        cleaned = query.strip().lower()
        if not cleaned:
            return list(self.catalogue[:SEARCH_LIMIT])
        matches = [food for food in self.catalogue if cleaned in food.name.lower()]
        return matches[:SEARCH_LIMIT]

    def add_food(self, food: Food, servings: int = 1) -> None:
        """Add servings of a food, merging with an existing selection."""
        for index, item in enumerate(self.items):
            if item.name == food.name:
                self.items[index] = replace(item, servings=item.servings + servings)
                return
        self.items.append(
            FoodItem(name=food.name, calories=food.calories, servings=servings)
        )


def add_tag(tags: list[str], tag: str) -> list[str]:
    """Return tags with a trimmed, unique tag appended when room remains."""
    cleaned = tag.strip()
    if not cleaned or cleaned in tags or len(tags) >= MAX_TAGS:
        return tags
    return [*tags, cleaned]


@dataclass
class ComposerService:
    """Publishes a composed post and merges it into the feed."""

    repository: PostRepository
    feed: FeedService
    drafts: DraftService

    async def publish(
        self,
        viewer: Viewer,
        draft: Draft,
        meal: MealBuilder | None = None,
    ) -> Post:
        """Insert the post; raise `CompositionError` when it is incomplete."""
        calories = meal.total_calories if meal and meal.items else draft.calories
        missing_text = not draft.food_name.strip() or not draft.description.strip()
        if missing_text or calories is None:
            raise CompositionError("Please fill all fields!")
        if len(draft.tags) > MAX_TAGS:
            raise CompositionError(f"A post can have at most {MAX_TAGS} tags")
        tags: list[str] = []
        for tag in draft.tags:
            tags = add_tag(tags, tag)

        post = await self.repository.create_post(
            viewer.id,
            {
                "title": draft.food_name.strip(),
                "caption": draft.description.strip(),
                "image_url": draft.image_data_url,
                "calories": calories,
                "tags": join_tags(tags),
                "mealtype": str(draft.meal_type),
            },
        )
        if post.author is None and viewer.profile is not None:
            post = replace(post, author=viewer.profile)
        self.feed.append_if_new(post)
        self.drafts.clear_draft()
        logger.info("Published post %s", post.id)
        return post
