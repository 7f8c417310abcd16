"""HTTP client for the planner JSON API."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from .models import MealPlan, Recipe

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for failed API calls.

    ``status`` is ``None`` when the request never produced a response.
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class PlannerClient:
    """Thin wrapper mapping each API operation to one HTTP request.

    Requests are never retried; a failure surfaces as :class:`ApiError`.
    """

    def __init__(self, base_url: str, session=None, timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # Recipes

    def list_recipes(self, category: Optional[str] = None, search: Optional[str] = None) -> List[Recipe]:
        params = {}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        data = self._request("GET", "/api/recipes", params=params)
        return [Recipe.from_dict(item) for item in data]

    def get_recipe(self, recipe_id: str) -> Recipe:
        return Recipe.from_dict(self._request("GET", f"/api/recipes/{recipe_id}"))

    def create_recipe(self, fields: Dict[str, Any]) -> Recipe:
        return Recipe.from_dict(self._request("POST", "/api/recipes", json=fields))

    def update_recipe(self, recipe_id: str, fields: Dict[str, Any]) -> Recipe:
        return Recipe.from_dict(self._request("PUT", f"/api/recipes/{recipe_id}", json=fields))

    def delete_recipe(self, recipe_id: str) -> str:
        return self._request("DELETE", f"/api/recipes/{recipe_id}")["message"]

    # Meal plans

    def list_meal_plans(self, start: Optional[date] = None, end: Optional[date] = None) -> List[MealPlan]:
        params = {}
        if start is not None and end is not None:
            params = {"startDate": start.isoformat(), "endDate": end.isoformat()}
        data = self._request("GET", "/api/meal-plans", params=params)
        return [MealPlan.from_dict(item) for item in data]

    def create_meal_plan(self, day: date, meal_type: str, recipe_id: str) -> MealPlan:
        body = {"date": day.isoformat(), "mealType": meal_type, "recipeId": recipe_id}
        return MealPlan.from_dict(self._request("POST", "/api/meal-plans", json=body))

    def delete_meal_plan(self, meal_plan_id: str) -> str:
        return self._request("DELETE", f"/api/meal-plans/{meal_plan_id}")["message"]

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(None, str(exc)) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise ApiError(response.status_code, message or f"HTTP {response.status_code}")
        return payload


__all__ = ["ApiError", "PlannerClient"]
