from datetime import date

import pytest
import requests

from conftest import recipe_payload
from mealplanner.cache import PlanCache, WeekPlanner
from mealplanner.client import ApiError, PlannerClient
from mealplanner.models import MealPlan


@pytest.fixture
def api(api_session):
    return PlannerClient(api_session.base_url, session=api_session)


def test_client_recipe_round_trip(api):
    created = api.create_recipe(recipe_payload(name="Pasta Salad", ingredients=["pasta", "tomatoes"]))

    fetched = api.get_recipe(created.id)

    assert fetched == created
    assert fetched.ingredients == ["pasta", "tomatoes"]
    assert [recipe.id for recipe in api.list_recipes(search="salad")] == [created.id]

    updated = api.update_recipe(created.id, {"servings": 6})
    assert updated.servings == 6

    assert api.delete_recipe(created.id) == "Recipe deleted successfully"
    with pytest.raises(ApiError) as excinfo:
        api.get_recipe(created.id)
    assert excinfo.value.status == 404
    assert excinfo.value.message == "Recipe not found"


def test_client_surfaces_validation_errors(api):
    with pytest.raises(ApiError) as excinfo:
        api.create_recipe(recipe_payload(category="brunch"))

    assert excinfo.value.status == 400
    assert "category" in excinfo.value.message


def test_client_wraps_transport_errors():
    class BrokenSession:
        def request(self, *args, **kwargs):
            raise requests.ConnectionError("connection refused")

    api = PlannerClient("http://planner.test/", session=BrokenSession())

    with pytest.raises(ApiError) as excinfo:
        api.health()

    assert excinfo.value.status is None
    assert "connection refused" in excinfo.value.message


def test_client_only_sends_date_range_with_both_bounds(api, api_session):
    api.list_meal_plans(start=date(2024, 3, 3))
    api.list_meal_plans(start=date(2024, 3, 3), end=date(2024, 3, 9))

    assert api_session.calls == [
        ("GET", "/api/meal-plans", {}),
        ("GET", "/api/meal-plans", {"startDate": "2024-03-03", "endDate": "2024-03-09"}),
    ]


def test_plan_cache_is_stale_until_refresh():
    cache = PlanCache(date(2024, 3, 6))
    plan = MealPlan(id="p1", date=date(2024, 3, 4), meal_type="lunch", recipe_id="r1")

    assert cache.start == date(2024, 3, 3)
    assert cache.end == date(2024, 3, 9)
    assert cache.stale

    cache.refresh([plan])
    assert not cache.stale
    assert cache.slot(date(2024, 3, 4), "lunch") is plan

    cache.remove("p1")
    assert cache.stale
    assert cache.slot(date(2024, 3, 4), "lunch") is None


def test_plan_cache_failure_keeps_contents():
    cache = PlanCache(date(2024, 3, 6))
    plan = MealPlan(id="p1", date=date(2024, 3, 4), meal_type="lunch", recipe_id="r1")
    cache.refresh([plan])

    cache.fail("Failed to add meal to plan")

    assert cache.plans == [plan]
    assert cache.error == "Failed to add meal to plan"
    assert cache.stale


def test_week_planner_patches_cache_after_success(api):
    recipe = api.create_recipe(recipe_payload(name="Soup"))
    planner = WeekPlanner(api, date(2024, 3, 6))

    assert planner.load()
    assert planner.cache.plans == []

    plan = planner.assign(recipe.id, date(2024, 3, 5), "dinner")
    assert plan is not None
    assert planner.cache.slot(date(2024, 3, 5), "dinner").id == plan.id
    assert planner.cache.stale

    assert planner.unassign(plan.id)
    assert planner.cache.plans == []

    assert planner.load()
    assert not planner.cache.stale
    assert planner.cache.plans == []


def test_week_planner_failure_leaves_cache_unchanged(api):
    recipe = api.create_recipe(recipe_payload(name="Soup"))
    planner = WeekPlanner(api, date(2024, 3, 6))
    planner.assign(recipe.id, date(2024, 3, 5), "dinner")
    planner.load()
    before = list(planner.cache.plans)

    assert planner.assign("ghost", date(2024, 3, 5), "lunch") is None
    assert not planner.unassign("missing")

    assert planner.cache.plans == before
    assert planner.cache.error == "Failed to remove meal from plan: Meal plan not found"
    assert planner.cache.stale


def test_oatmeal_shopping_list_scenario(api):
    oatmeal = api.create_recipe(
        recipe_payload(name="Oatmeal", category="breakfast", ingredients=["milk", "oats"])
    )
    monday = date(2024, 3, 4)
    planner = WeekPlanner(api, monday)
    planner.assign(oatmeal.id, monday, "breakfast")

    # A fresh view of the week sees what the server stored.
    week = WeekPlanner(api, date(2024, 3, 9))
    assert week.load()
    grouped = week.cache.shopping_list()

    assert [(item.name, item.recipe) for item in grouped["Dairy & Eggs"]] == [("milk", "Oatmeal")]
    assert [(item.name, item.recipe) for item in grouped["Pantry Items"]] == [("oats", "Oatmeal")]
    assert set(grouped) == {"Dairy & Eggs", "Pantry Items"}
