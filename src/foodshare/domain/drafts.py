"""Serialized post composition drafts."""

from pydantic import BaseModel, ConfigDict, Field

from foodshare.domain.posts import MealType


class Draft(BaseModel):
    """In-progress post composition as persisted in local storage."""

    model_config = ConfigDict(populate_by_name=True)

    food_name: str = Field(default="", alias="foodName")
    description: str = ""
    meal_type: MealType = Field(default=MealType.UNSET, alias="mealType")
    calories: int | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    image_data_url: str | None = Field(default=None, alias="imageDataUrl")
