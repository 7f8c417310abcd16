from __future__ import annotations

from datetime import date
from typing import List, Optional

from .client import ApiError, PlannerClient
from .models import MealPlan
from .planner import build_shopping_list, end_of_week, meal_for_slot, start_of_week


class PlanCache:
    """Local copy of one week's meal plans.

    The cache is *stale* from the first local patch or failed request until
    the next :meth:`refresh`, since it may no longer match the server.
    """

    def __init__(self, reference: date) -> None:
        self.start = start_of_week(reference)
        self.end = end_of_week(reference)
        self.plans: List[MealPlan] = []
        self.stale = True
        self.error: Optional[str] = None

    def refresh(self, plans: List[MealPlan]) -> None:
        self.plans = list(plans)
        self.stale = False
        self.error = None

    def add(self, plan: MealPlan) -> None:
        self.plans.append(plan)
        self.stale = True

    def remove(self, plan_id: str) -> None:
        self.plans = [plan for plan in self.plans if plan.id != plan_id]
        self.stale = True

    def fail(self, message: str) -> None:
        """Record a failed request; the cached plans are left untouched."""
        self.error = message
        self.stale = True

    def slot(self, day: date, meal_type: str) -> Optional[MealPlan]:
        return meal_for_slot(self.plans, day, meal_type)

    def shopping_list(self):
        return build_shopping_list(self.plans)


class WeekPlanner:
    """Keeps a :class:`PlanCache` in step with the API for one week."""

    def __init__(self, client: PlannerClient, reference: date) -> None:
        self.client = client
        self.cache = PlanCache(reference)

    def load(self) -> bool:
        try:
            plans = self.client.list_meal_plans(self.cache.start, self.cache.end)
        except ApiError as exc:
            self.cache.fail(f"Failed to fetch meal plans: {exc.message}")
            return False
        self.cache.refresh(plans)
        return True

    def assign(self, recipe_id: str, day: date, meal_type: str) -> Optional[MealPlan]:
        try:
            plan = self.client.create_meal_plan(day, meal_type, recipe_id)
        except ApiError as exc:
            self.cache.fail(f"Failed to add meal to plan: {exc.message}")
            return None
        self.cache.add(plan)
        return plan

    def unassign(self, plan_id: str) -> bool:
        try:
            self.client.delete_meal_plan(plan_id)
        except ApiError as exc:
            self.cache.fail(f"Failed to remove meal from plan: {exc.message}")
            return False
        self.cache.remove(plan_id)
        return True


__all__ = ["PlanCache", "WeekPlanner"]
