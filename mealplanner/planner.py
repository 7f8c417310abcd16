"""Week arithmetic and shopping list derivation for the weekly planner.

Weeks run Sunday to Saturday. The shopping list is derived purely from the
meal plans of a week: every ingredient of every planned recipe is sorted into
one of a fixed set of aisles by keyword.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .models import MealPlan

DAIRY = "Dairy & Eggs"
MEAT = "Meat & Seafood"
VEGETABLES = "Vegetables"
FRUITS = "Fruits"
GRAINS = "Grains & Bakery"
PANTRY = "Pantry Items"

# Checked in order; the first rule with a matching keyword wins.
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (DAIRY, ("milk", "cheese", "egg", "butter", "yogurt")),
    (MEAT, ("chicken", "beef", "pork", "fish", "meat")),
    (VEGETABLES, ("lettuce", "tomato", "onion", "pepper", "carrot", "vegetable")),
    (FRUITS, ("apple", "banana", "orange", "berry", "fruit")),
    (GRAINS, ("bread", "pasta", "rice", "flour", "cereal")),
)

SHOPPING_CATEGORIES = tuple(name for name, _ in CATEGORY_RULES) + (PANTRY,)


def start_of_week(day: date) -> date:
    """Return the Sunday on or before ``day``."""
    # date.weekday() is Monday=0 .. Sunday=6; shift so Sunday is 0.
    offset = (day.weekday() + 1) % 7
    return day - timedelta(days=offset)


def end_of_week(day: date) -> date:
    """Return the Saturday closing the week that contains ``day``."""
    return start_of_week(day) + timedelta(days=6)


def week_days(day: date) -> List[date]:
    start = start_of_week(day)
    return [start + timedelta(days=index) for index in range(7)]


def shift_week(day: date, weeks: int) -> date:
    return day + timedelta(weeks=weeks)


def meal_for_slot(plans: Iterable[MealPlan], day: date, meal_type: str) -> Optional[MealPlan]:
    """Return the first plan occupying the slot, if any.

    Slots are not unique; later plans for an occupied slot are not shown.
    """
    for plan in plans:
        if plan.date == day and plan.meal_type == meal_type:
            return plan
    return None


def categorize_ingredient(ingredient: str) -> str:
    lower = ingredient.lower()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in lower for keyword in keywords):
            return category
    return PANTRY


@dataclass(frozen=True)
class ShoppingItem:
    name: str
    recipe: str
    category: str

    @property
    def key(self) -> str:
        return f"{self.name}-{self.recipe}"


def build_shopping_list(plans: Iterable[MealPlan]) -> Dict[str, List[ShoppingItem]]:
    """Group the ingredients of all planned recipes by shopping category.

    Categories appear in the order their first ingredient was seen. Plans
    whose recipe could not be joined contribute nothing.
    """
    grouped: Dict[str, List[ShoppingItem]] = {}
    for plan in plans:
        if plan.recipe is None:
            continue
        for ingredient in plan.recipe.ingredients:
            item = ShoppingItem(
                name=ingredient,
                recipe=plan.recipe.name,
                category=categorize_ingredient(ingredient),
            )
            grouped.setdefault(item.category, []).append(item)
    return grouped


class ShoppingChecklist:
    """Tracks which shopping list entries have been picked up.

    State lives only as long as the instance; it is never persisted.
    """

    def __init__(self, items: Sequence[ShoppingItem] = ()) -> None:
        self._items = list(items)
        self._checked: Set[str] = set()

    @classmethod
    def from_grouped(cls, grouped: Dict[str, List[ShoppingItem]]) -> "ShoppingChecklist":
        return cls([item for items in grouped.values() for item in items])

    def toggle(self, item: ShoppingItem) -> bool:
        """Flip the checked state of ``item`` and return the new state."""
        if item.key in self._checked:
            self._checked.discard(item.key)
            return False
        self._checked.add(item.key)
        return True

    def restore(self, keys: Iterable[str]) -> None:
        """Check the entries whose key is in ``keys``; unknown keys are ignored."""
        wanted = set(keys)
        for item in self._items:
            if item.key in wanted and not self.is_checked(item):
                self.toggle(item)

    def is_checked(self, item: ShoppingItem) -> bool:
        return item.key in self._checked

    @property
    def checked_count(self) -> int:
        return len(self._checked)

    @property
    def total(self) -> int:
        return len(self._items)


__all__ = [
    "CATEGORY_RULES",
    "SHOPPING_CATEGORIES",
    "ShoppingChecklist",
    "ShoppingItem",
    "build_shopping_list",
    "categorize_ingredient",
    "end_of_week",
    "meal_for_slot",
    "shift_week",
    "start_of_week",
    "week_days",
]
