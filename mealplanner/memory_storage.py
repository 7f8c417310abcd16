from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from .models import MealPlan, Recipe
from .storage import PlannerStorage, matches_recipe_filters

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryPlannerStorage(PlannerStorage):
    """Process-local storage used for tests and offline development.

    Every instance is isolated; nothing is shared between instances.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._recipes: Dict[str, Recipe] = {}
        self._meal_plans: Dict[str, MealPlan] = {}
        # Insertion order breaks ties between identical timestamps.
        self._sequence: Dict[str, int] = {}

    def list_recipes(
        self, *, category: Optional[str] = None, search: Optional[str] = None
    ) -> Iterable[Recipe]:
        with self._lock:
            recipes = [
                replace(recipe)
                for recipe in self._recipes.values()
                if matches_recipe_filters(recipe, category, search)
            ]
            return sorted(
                recipes,
                key=lambda recipe: (recipe.created_at or datetime.min.replace(tzinfo=timezone.utc),
                                    self._sequence[recipe.id]),
                reverse=True,
            )

    def get_recipe(self, recipe_id: str) -> Recipe:
        with self._lock:
            try:
                return replace(self._recipes[recipe_id])
            except KeyError:
                raise KeyError(f"Recipe '{recipe_id}' does not exist.") from None

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
        timestamp = _now()
        recipe = Recipe(
            id=uuid.uuid4().hex,
            name=name,
            category=category,
            prep_time=prep_time,
            cook_time=cook_time,
            servings=servings,
            ingredients=list(ingredients),
            instructions=instructions,
            image_url=image_url,
            created_at=timestamp,
            updated_at=timestamp,
        )
        with self._lock:
            self._recipes[recipe.id] = recipe
            self._sequence[recipe.id] = len(self._sequence)
        return replace(recipe)

    def update_recipe(self, recipe_id: str, **fields) -> Recipe:
        with self._lock:
            current = self.get_recipe(recipe_id)
            if "ingredients" in fields:
                fields["ingredients"] = list(fields["ingredients"])
            updated = replace(current, **fields, updated_at=_now())
            self._recipes[recipe_id] = updated
            return replace(updated)

    def delete_recipe(self, recipe_id: str) -> int:
        with self._lock:
            if recipe_id not in self._recipes:
                raise KeyError(f"Recipe '{recipe_id}' does not exist.")
            dependent = [plan_id for plan_id, plan in self._meal_plans.items()
                         if plan.recipe_id == recipe_id]
            for plan_id in dependent:
                del self._meal_plans[plan_id]
            del self._recipes[recipe_id]
            del self._sequence[recipe_id]
        logger.info("Deleted recipe %s and %d meal plan(s)", recipe_id, len(dependent))
        return len(dependent)

    def list_meal_plans(
        self, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[MealPlan]:
        with self._lock:
            plans = list(self._meal_plans.values())
            if start is not None and end is not None:
                plans = [plan for plan in plans if start <= plan.date <= end]
            return [self._join(plan) for plan in plans]

    def add_meal_plan(self, *, day: date, meal_type: str, recipe_id: str) -> MealPlan:
        with self._lock:
            if recipe_id not in self._recipes:
                raise KeyError(f"Recipe '{recipe_id}' does not exist.")
            plan = MealPlan(
                id=uuid.uuid4().hex,
                date=day,
                meal_type=meal_type,
                recipe_id=recipe_id,
                created_at=_now(),
            )
            self._meal_plans[plan.id] = plan
            return self._join(plan)

    def delete_meal_plan(self, meal_plan_id: str) -> None:
        with self._lock:
            try:
                del self._meal_plans[meal_plan_id]
            except KeyError:
                raise KeyError(f"Meal plan '{meal_plan_id}' does not exist.") from None

    def _join(self, plan: MealPlan) -> MealPlan:
        recipe = self._recipes.get(plan.recipe_id)
        return replace(plan, recipe=replace(recipe) if recipe else None)


__all__ = ["MemoryPlannerStorage"]
