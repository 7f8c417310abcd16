"""Server rendered pages: recipe forms, the weekly planner and the shopping list."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from .models import MEAL_TYPES, RECIPE_CATEGORIES
from .planner import (
    ShoppingChecklist,
    build_shopping_list,
    meal_for_slot,
    shift_week,
    start_of_week,
    week_days,
)
from .schemas import MealPlanInput, RecipeInput, ValidationError, describe_validation_error, parse_day
from .storage import PlannerStorage

logger = logging.getLogger(__name__)

web = Blueprint("web", __name__)

RECIPE_FORM_FIELDS = (
    "name",
    "category",
    "prep_time",
    "cook_time",
    "servings",
    "instructions",
    "image_url",
)


def _storage() -> PlannerStorage:
    return current_app.config["PLANNER_STORAGE"]


def _parse_ingredients(ingredients_text: str) -> List[str]:
    return [line.strip() for line in ingredients_text.splitlines() if line.strip()]


def _recipe_form() -> Dict[str, object]:
    data: Dict[str, object] = {field: request.form.get(field, "").strip() for field in RECIPE_FORM_FIELDS}
    data["ingredients"] = _parse_ingredients(request.form.get("ingredients", ""))
    return data


def _selected_week() -> date:
    raw = request.values.get("week", "")
    try:
        return parse_day(raw)
    except ValueError:
        return date.today()


@web.get("/")
def index() -> str:
    return render_template("index.html", title="Recipe & Meal Planner")


@web.get("/recipes")
def recipes() -> str:
    search = request.args.get("search", "").strip()
    category = request.args.get("category", "all").strip() or "all"

    try:
        found = list(
            _storage().list_recipes(
                category=None if category == "all" else category,
                search=search or None,
            )
        )
    except Exception as exc:
        logger.exception("Failed to list recipes")
        flash(f"Failed to fetch recipes: {exc}", "error")
        found = []

    return render_template(
        "recipes.html",
        recipes=found,
        search=search,
        category=category,
        categories=RECIPE_CATEGORIES,
        title="My Recipes",
    )


@web.get("/recipes/new")
def new_recipe() -> str:
    return render_template(
        "recipe_form.html",
        recipe=None,
        ingredients_text="",
        categories=RECIPE_CATEGORIES,
        title="Add recipe",
    )


@web.post("/recipes")
def create_recipe():
    try:
        payload = RecipeInput.model_validate(_recipe_form())
    except ValidationError as exc:
        flash(f"Please fix the recipe: {describe_validation_error(exc)}", "error")
        return redirect(url_for("web.new_recipe"))

    try:
        recipe = _storage().add_recipe(**payload.model_dump())
    except Exception as exc:
        logger.exception("Failed to save recipe")
        flash(f"Failed to save recipe: {exc}", "error")
        return redirect(url_for("web.new_recipe"))

    flash(f"Recipe '{recipe.name}' saved.", "success")
    return redirect(url_for("web.recipes"))


@web.get("/recipes/<recipe_id>/edit")
def edit_recipe(recipe_id: str):
    try:
        recipe = _storage().get_recipe(recipe_id)
    except KeyError:
        flash("Recipe not found.", "error")
        return redirect(url_for("web.recipes"))

    return render_template(
        "recipe_form.html",
        recipe=recipe,
        ingredients_text="\n".join(recipe.ingredients),
        categories=RECIPE_CATEGORIES,
        title=f"Edit {recipe.name}" if recipe.name else "Edit recipe",
    )


@web.post("/recipes/<recipe_id>")
def update_recipe(recipe_id: str):
    try:
        payload = RecipeInput.model_validate(_recipe_form())
    except ValidationError as exc:
        flash(f"Please fix the recipe: {describe_validation_error(exc)}", "error")
        return redirect(url_for("web.edit_recipe", recipe_id=recipe_id))

    try:
        recipe = _storage().update_recipe(recipe_id, **payload.model_dump())
    except KeyError:
        flash("Recipe not found.", "error")
        return redirect(url_for("web.recipes"))
    except Exception as exc:
        logger.exception("Failed to update recipe %s", recipe_id)
        flash(f"Failed to update recipe: {exc}", "error")
        return redirect(url_for("web.edit_recipe", recipe_id=recipe_id))

    flash(f"Recipe '{recipe.name}' updated.", "success")
    return redirect(url_for("web.recipes"))


@web.post("/recipes/<recipe_id>/delete")
def delete_recipe(recipe_id: str):
    try:
        _storage().delete_recipe(recipe_id)
    except KeyError:
        flash("Recipe not found.", "error")
    except Exception as exc:
        logger.exception("Failed to delete recipe %s", recipe_id)
        flash(f"Failed to delete recipe: {exc}", "error")
    else:
        flash("Recipe deleted.", "success")
    return redirect(url_for("web.recipes"))


@web.get("/meal-planner")
def meal_planner() -> str:
    week = _selected_week()
    days = week_days(week)
    storage = _storage()

    try:
        all_recipes = list(storage.list_recipes())
        plans = storage.list_meal_plans(start=days[0], end=days[-1])
    except Exception as exc:
        logger.exception("Failed to load the meal planner")
        flash(f"Failed to fetch meal plans: {exc}", "error")
        all_recipes, plans = [], []

    calendar = [
        (day, [(meal_type, meal_for_slot(plans, day, meal_type)) for meal_type in MEAL_TYPES])
        for day in days
    ]

    return render_template(
        "planner.html",
        recipes=all_recipes,
        calendar=calendar,
        week=days[0],
        week_end=days[-1],
        previous_week=shift_week(days[0], -1),
        next_week=shift_week(days[0], 1),
        title="Meal Planner",
    )


@web.post("/meal-planner")
def assign_meal():
    week = start_of_week(_selected_week())
    form = {
        "date": request.form.get("date", ""),
        "mealType": request.form.get("meal_type", ""),
        "recipeId": request.form.get("recipe_id", ""),
    }

    try:
        payload = MealPlanInput.model_validate(form)
        _storage().add_meal_plan(**payload.model_dump())
    except ValidationError as exc:
        flash(f"Failed to add meal to plan: {describe_validation_error(exc)}", "error")
    except KeyError:
        flash("Failed to add meal to plan: recipe not found.", "error")
    except Exception as exc:
        logger.exception("Failed to add meal plan")
        flash(f"Failed to add meal to plan: {exc}", "error")

    return redirect(url_for("web.meal_planner", week=week.isoformat()))


@web.post("/meal-planner/<meal_plan_id>/delete")
def remove_meal(meal_plan_id: str):
    week = start_of_week(_selected_week())

    try:
        _storage().delete_meal_plan(meal_plan_id)
    except KeyError:
        flash("Meal plan not found.", "error")
    except Exception as exc:
        logger.exception("Failed to delete meal plan %s", meal_plan_id)
        flash(f"Failed to remove meal from plan: {exc}", "error")

    return redirect(url_for("web.meal_planner", week=week.isoformat()))


@web.get("/shopping-list")
def shopping_list() -> str:
    days = week_days(_selected_week())

    try:
        plans = _storage().list_meal_plans(start=days[0], end=days[-1])
    except Exception as exc:
        logger.exception("Failed to load the shopping list")
        flash(f"Failed to fetch meal plans: {exc}", "error")
        plans = []

    grouped = build_shopping_list(plans)
    # The page script mirrors the checked keys into the query string.
    checklist = ShoppingChecklist.from_grouped(grouped)
    checklist.restore(request.args.getlist("checked"))

    return render_template(
        "shopping_list.html",
        plans=sorted(plans, key=lambda plan: (plan.date, MEAL_TYPES.index(plan.meal_type))),
        shopping_list=grouped,
        checklist=checklist,
        week=days[0],
        week_end=days[-1],
        previous_week=shift_week(days[0], -1),
        next_week=shift_week(days[0], 1),
        title="Shopping List",
    )


__all__ = ["web"]
