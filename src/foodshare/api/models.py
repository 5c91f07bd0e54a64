"""Request payload models for the HTTP API."""

from pydantic import BaseModel, Field

from foodshare.domain.drafts import Draft


class CommentRequest(BaseModel):
    """Comment submission payload."""

    text: str


class FoodItemPayload(BaseModel):
    """Meal builder item sent with a post."""

    name: str
    calories: int = Field(ge=0)
    servings: int = Field(default=1, ge=1)


class PublishRequest(BaseModel):
    """Post publication payload."""

    draft: Draft
    items: list[FoodItemPayload] | None = None


class ProfileUpdateRequest(BaseModel):
    """Display name change payload."""

    name: str = Field(max_length=100)
