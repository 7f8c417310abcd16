from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Protocol

from .models import MealPlan, Recipe


class PlannerStorage(Protocol):
    """Protocol describing the behaviour required by the web and API layers.

    Lookups of missing documents raise :class:`KeyError`.
    """

    def list_recipes(
        self, *, category: Optional[str] = None, search: Optional[str] = None
    ) -> Iterable[Recipe]:
        """Return stored recipes ordered newest first.

        ``category`` keeps only exact matches, ``search`` keeps recipes whose
        name contains the term case-insensitively.
        """

    def get_recipe(self, recipe_id: str) -> Recipe:
        """Return a single recipe or raise :class:`KeyError` if missing."""

    def add_recipe(
        self,
        *,
        name: str,
        category: str,
        prep_time: str,
        cook_time: str,
        servings: int,
        ingredients: List[str],
        instructions: str,
        image_url: str = "",
    ) -> Recipe:
        """Persist a new recipe and return the stored instance."""

    def update_recipe(self, recipe_id: str, **fields) -> Recipe:
        """Merge ``fields`` into an existing recipe and refresh ``updated_at``."""

    def delete_recipe(self, recipe_id: str) -> int:
        """Remove a recipe and every meal plan referencing it.

        Both deletions happen as one unit. Returns the number of meal plans
        removed alongside the recipe.
        """

    def list_meal_plans(
        self, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[MealPlan]:
        """Return meal plans with their recipe joined.

        The inclusive ``start``..``end`` range applies only when both bounds
        are given.
        """

    def add_meal_plan(self, *, day: date, meal_type: str, recipe_id: str) -> MealPlan:
        """Persist a meal plan and return it with its recipe joined.

        Raises :class:`KeyError` when ``recipe_id`` does not exist.
        """

    def delete_meal_plan(self, meal_plan_id: str) -> None:
        """Remove a meal plan or raise :class:`KeyError` if missing."""


def matches_recipe_filters(recipe: Recipe, category: Optional[str], search: Optional[str]) -> bool:
    if category and recipe.category != category:
        return False
    if search and search.lower() not in recipe.name.lower():
        return False
    return True


__all__ = ["PlannerStorage", "matches_recipe_filters"]
