"""Foods and meal calorie arithmetic used when composing a post."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Food:
    """Catalogue food with calories per serving."""

    name: str
    calories: int


@dataclass(frozen=True)
class FoodItem:
    """Food selected for a meal with a serving count."""

    name: str
    calories: int
    servings: int = 1


FOODS: tuple[Food, ...] = (
    Food("Grilled Chicken Breast", 165),
    Food("Avocado Toast", 320),
    Food("Caesar Salad", 280),
    Food("Salmon Fillet", 206),
    Food("Greek Yogurt Bowl", 150),
    Food("Fried Egg (1 large)", 90),
    Food("Pork Chop (100g)", 250),
    Food("Tuna (100g)", 132),
)


def total_calories(items: list[FoodItem]) -> int:
    """Sum calories times servings over the selected items."""
    return sum(item.calories * item.servings for item in items)
