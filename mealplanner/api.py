"""JSON API for recipes and meal plans, mounted under ``/api``."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .schemas import MealPlanInput, RecipeInput, ValidationError, describe_validation_error, parse_day
from .storage import PlannerStorage

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

RECIPE_NOT_FOUND = "Recipe not found"
MEAL_PLAN_NOT_FOUND = "Meal plan not found"


def _storage() -> PlannerStorage:
    return current_app.config["PLANNER_STORAGE"]


def _error(message: str, status: int):
    return jsonify({"message": message}), status


def _key_error_message(exc: KeyError) -> str:
    return str(exc.args[0]) if exc.args else "Not found"


def _json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


@api.get("/recipes")
def list_recipes():
    category = request.args.get("category", "").strip()
    search = request.args.get("search", "").strip()
    if category == "all":
        category = ""

    try:
        recipes = _storage().list_recipes(category=category or None, search=search or None)
    except Exception as exc:
        logger.exception("Failed to list recipes")
        return _error(str(exc), 500)

    return jsonify([recipe.to_dict() for recipe in recipes])


@api.get("/recipes/<recipe_id>")
def get_recipe(recipe_id: str):
    try:
        recipe = _storage().get_recipe(recipe_id)
    except KeyError:
        return _error(RECIPE_NOT_FOUND, 404)
    except Exception as exc:
        logger.exception("Failed to load recipe %s", recipe_id)
        return _error(str(exc), 500)

    return jsonify(recipe.to_dict())


@api.post("/recipes")
def create_recipe():
    body = _json_body()
    if body is None:
        return _error("Request body must be a JSON object.", 400)

    try:
        payload = RecipeInput.model_validate(body)
    except ValidationError as exc:
        return _error(describe_validation_error(exc), 400)

    try:
        recipe = _storage().add_recipe(**payload.model_dump())
    except Exception as exc:
        logger.exception("Failed to save recipe")
        return _error(str(exc), 500)

    return jsonify(recipe.to_dict()), 201


@api.put("/recipes/<recipe_id>")
def update_recipe(recipe_id: str):
    body = _json_body()
    if body is None:
        return _error("Request body must be a JSON object.", 400)

    storage = _storage()
    try:
        current = storage.get_recipe(recipe_id)
        # Partial bodies are merged over the stored document and the result
        # must still be a complete recipe.
        payload = RecipeInput.model_validate({**current.to_dict(), **body})
        recipe = storage.update_recipe(recipe_id, **payload.model_dump())
    except KeyError:
        return _error(RECIPE_NOT_FOUND, 404)
    except ValidationError as exc:
        return _error(describe_validation_error(exc), 400)
    except Exception as exc:
        logger.exception("Failed to update recipe %s", recipe_id)
        return _error(str(exc), 500)

    return jsonify(recipe.to_dict())


@api.delete("/recipes/<recipe_id>")
def delete_recipe(recipe_id: str):
    try:
        removed = _storage().delete_recipe(recipe_id)
    except KeyError:
        return _error(RECIPE_NOT_FOUND, 404)
    except Exception as exc:
        logger.exception("Failed to delete recipe %s", recipe_id)
        return _error(str(exc), 500)

    return jsonify({"message": "Recipe deleted successfully", "mealPlansDeleted": removed})


@api.get("/meal-plans")
def list_meal_plans():
    start_raw = request.args.get("startDate", "")
    end_raw = request.args.get("endDate", "")

    start = end = None
    if start_raw and end_raw:
        try:
            start = parse_day(start_raw)
            end = parse_day(end_raw)
        except ValueError as exc:
            return _error(str(exc), 400)

    try:
        plans = _storage().list_meal_plans(start=start, end=end)
    except Exception as exc:
        logger.exception("Failed to list meal plans")
        return _error(str(exc), 500)

    return jsonify([plan.to_dict() for plan in plans])


@api.post("/meal-plans")
def create_meal_plan():
    body = _json_body()
    if body is None:
        return _error("Request body must be a JSON object.", 400)

    try:
        payload = MealPlanInput.model_validate(body)
    except ValidationError as exc:
        return _error(describe_validation_error(exc), 400)

    try:
        plan = _storage().add_meal_plan(**payload.model_dump())
    except KeyError as exc:
        return _error(_key_error_message(exc), 400)
    except Exception as exc:
        logger.exception("Failed to save meal plan")
        return _error(str(exc), 500)

    return jsonify(plan.to_dict()), 201


@api.delete("/meal-plans/<meal_plan_id>")
def delete_meal_plan(meal_plan_id: str):
    try:
        _storage().delete_meal_plan(meal_plan_id)
    except KeyError:
        return _error(MEAL_PLAN_NOT_FOUND, 404)
    except Exception as exc:
        logger.exception("Failed to delete meal plan %s", meal_plan_id)
        return _error(str(exc), 500)

    return jsonify({"message": "Meal plan deleted successfully"})


@api.get("/health")
def health():
    return jsonify(
        {
            "message": "Recipe Planner API is running!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": current_app.config["ENV_NAME"],
        }
    )


def handle_http_error(exc: HTTPException):
    """Render HTTP errors raised under ``/api`` as JSON."""

    if request.path.startswith(api.url_prefix + "/") or request.path == api.url_prefix:
        return _error(exc.description or exc.name, exc.code or 500)
    return exc


__all__ = ["api", "handle_http_error"]
