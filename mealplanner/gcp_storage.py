from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .models import MealPlan, Recipe
from .storage import PlannerStorage, matches_recipe_filters

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: Any) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None


@firestore.transactional
def _delete_recipe_cascade(transaction, recipe_ref, plans_query) -> int:
    snapshot = recipe_ref.get(transaction=transaction)
    if not snapshot.exists:
        raise KeyError(f"Recipe '{recipe_ref.id}' does not exist.")

    # All reads must happen before the first write of a transaction.
    plan_refs = [doc.reference for doc in transaction.get(plans_query)]
    for plan_ref in plan_refs:
        transaction.delete(plan_ref)
    transaction.delete(recipe_ref)
    return len(plan_refs)


class FirestorePlannerStorage(PlannerStorage):
    """Firestore backed storage for recipes and meal plans."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        database: Optional[str] = None,
        recipes_collection: str = "recipes",
        meal_plans_collection: str = "meal_plans",
        client: Optional[firestore.Client] = None,
    ) -> None:
        if client is None:
            kwargs: Dict[str, Any] = {"project": project}
            if database:
                kwargs["database"] = database
            client = firestore.Client(**kwargs)

        self._client = client
        self._recipes = client.collection(recipes_collection)
        self._meal_plans = client.collection(meal_plans_collection)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "FirestorePlannerStorage":
        """Build a storage instance from application configuration values."""

        return cls(
            project=config.get("GCP_PROJECT"),
            database=config.get("FIRESTORE_DATABASE"),
            recipes_collection=config.get("RECIPES_COLLECTION", "recipes"),
            meal_plans_collection=config.get("MEAL_PLANS_COLLECTION", "meal_plans"),
        )

    # Recipes

    def list_recipes(
        self, *, category: Optional[str] = None, search: Optional[str] = None
    ) -> Iterable[Recipe]:
        query = self._recipes
        if category:
            query = query.where(filter=FieldFilter("category", "==", category))

        # Firestore has no substring matching, and sorting in the query would
        # need a composite index for every category filter.
        recipes = [
            self._doc_to_recipe(doc.id, doc.to_dict() or {})
            for doc in query.stream()
        ]
        recipes = [recipe for recipe in recipes if matches_recipe_filters(recipe, None, search)]
        recipes.sort(key=lambda recipe: recipe.created_at or _OLDEST, reverse=True)
        return recipes

    def get_recipe(self, recipe_id: str) -> Recipe:
        snapshot = self._recipes.document(recipe_id).get()

        if not snapshot.exists:
            raise KeyError(f"Recipe '{recipe_id}' does not exist.")

        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

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
        doc = {
            "name": name,
            "category": category,
            "prep_time": prep_time,
            "cook_time": cook_time,
            "servings": servings,
            "ingredients": list(ingredients),
            "instructions": instructions,
            "image_url": image_url,
            "created_at": firestore.SERVER_TIMESTAMP,
            "updated_at": firestore.SERVER_TIMESTAMP,
        }

        doc_ref = self._recipes.document()
        doc_ref.set(doc)
        logger.info("Created recipe %s (%s)", doc_ref.id, name)

        snapshot = doc_ref.get()
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def update_recipe(self, recipe_id: str, **fields) -> Recipe:
        doc_ref = self._recipes.document(recipe_id)
        snapshot = doc_ref.get()

        if not snapshot.exists:
            raise KeyError(f"Recipe '{recipe_id}' does not exist.")

        update_doc = dict(fields)
        update_doc["updated_at"] = firestore.SERVER_TIMESTAMP
        doc_ref.update(update_doc)
        logger.info("Updated recipe %s", recipe_id)

        snapshot = doc_ref.get()
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def delete_recipe(self, recipe_id: str) -> int:
        recipe_ref = self._recipes.document(recipe_id)
        plans_query = self._meal_plans.where(filter=FieldFilter("recipe_id", "==", recipe_id))

        removed = _delete_recipe_cascade(self._client.transaction(), recipe_ref, plans_query)
        logger.info("Deleted recipe %s and %d meal plan(s)", recipe_id, removed)
        return removed

    # Meal plans

    def list_meal_plans(
        self, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[MealPlan]:
        query = self._meal_plans
        if start is not None and end is not None:
            # Days are stored as ISO strings, which sort chronologically.
            query = query.where(filter=FieldFilter("date", ">=", start.isoformat()))
            query = query.where(filter=FieldFilter("date", "<=", end.isoformat()))

        plans = []
        for doc in query.stream():
            try:
                plans.append(self._doc_to_meal_plan(doc.id, doc.to_dict() or {}))
            except ValueError as exc:
                logger.warning("Skipping meal plan %s: %s", doc.id, exc)

        recipes = self._get_recipes({plan.recipe_id for plan in plans if plan.recipe_id})
        for plan in plans:
            plan.recipe = recipes.get(plan.recipe_id)
        return plans

    def add_meal_plan(self, *, day: date, meal_type: str, recipe_id: str) -> MealPlan:
        # Fails with KeyError before anything is written.
        self.get_recipe(recipe_id)

        doc_ref = self._meal_plans.document()
        doc_ref.set(
            {
                "date": day.isoformat(),
                "meal_type": meal_type,
                "recipe_id": recipe_id,
                "created_at": firestore.SERVER_TIMESTAMP,
            }
        )
        logger.info("Planned recipe %s for %s %s", recipe_id, day.isoformat(), meal_type)

        snapshot = doc_ref.get()
        plan = self._doc_to_meal_plan(snapshot.id, snapshot.to_dict() or {})
        plan.recipe = self._get_recipes({plan.recipe_id}).get(plan.recipe_id)
        return plan

    def delete_meal_plan(self, meal_plan_id: str) -> None:
        doc_ref = self._meal_plans.document(meal_plan_id)
        snapshot = doc_ref.get()

        if not snapshot.exists:
            raise KeyError(f"Meal plan '{meal_plan_id}' does not exist.")

        doc_ref.delete()
        logger.info("Deleted meal plan %s", meal_plan_id)

    # Helpers

    def _get_recipes(self, recipe_ids) -> Dict[str, Recipe]:
        if not recipe_ids:
            return {}
        refs = [self._recipes.document(recipe_id) for recipe_id in sorted(recipe_ids)]
        return {
            snapshot.id: self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})
            for snapshot in self._client.get_all(refs)
            if snapshot.exists
        }

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        return Recipe(
            id=doc_id,
            name=data.get("name", ""),
            category=data.get("category", ""),
            prep_time=data.get("prep_time", ""),
            cook_time=data.get("cook_time", ""),
            servings=int(data.get("servings") or 0),
            ingredients=[str(item) for item in data.get("ingredients") or []],
            instructions=data.get("instructions", ""),
            image_url=data.get("image_url") or "",
            created_at=_timestamp(data.get("created_at")),
            updated_at=_timestamp(data.get("updated_at")),
        )

    def _doc_to_meal_plan(self, doc_id: str, data: dict) -> MealPlan:
        raw_date = data.get("date")
        if isinstance(raw_date, datetime):
            day = raw_date.date()
        elif not raw_date:
            raise ValueError("document has no date")
        else:
            day = date.fromisoformat(str(raw_date)[:10])

        return MealPlan(
            id=doc_id,
            date=day,
            meal_type=data.get("meal_type", ""),
            recipe_id=data.get("recipe_id", ""),
            created_at=_timestamp(data.get("created_at")),
        )


__all__ = ["FirestorePlannerStorage"]
