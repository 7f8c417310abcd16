from datetime import date

from conftest import recipe_fields


def _plan(storage, recipe, day, meal_type="dinner"):
    return storage.add_meal_plan(day=day, meal_type=meal_type, recipe_id=recipe.id)


def test_create_meal_plan_returns_joined_recipe(client, storage):
    recipe = storage.add_recipe(**recipe_fields(name="Oatmeal", category="breakfast"))

    response = client.post(
        "/api/meal-plans",
        json={"date": "2024-03-04", "mealType": "breakfast", "recipeId": recipe.id},
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["id"]
    assert body["date"] == "2024-03-04"
    assert body["mealType"] == "breakfast"
    assert body["recipeId"] == recipe.id
    assert body["recipe"]["name"] == "Oatmeal"


def test_create_meal_plan_ignores_time_of_day(client, storage):
    recipe = storage.add_recipe(**recipe_fields())

    response = client.post(
        "/api/meal-plans",
        json={"date": "2024-03-04T18:30:00.000Z", "mealType": "dinner", "recipeId": recipe.id},
    )

    assert response.status_code == 201
    assert response.get_json()["date"] == "2024-03-04"


def test_create_meal_plan_validates_body(client, storage):
    recipe = storage.add_recipe(**recipe_fields())

    bad_type = client.post(
        "/api/meal-plans", json={"date": "2024-03-04", "mealType": "snack", "recipeId": recipe.id}
    )
    bad_date = client.post(
        "/api/meal-plans", json={"date": "someday", "mealType": "lunch", "recipeId": recipe.id}
    )
    missing = client.post("/api/meal-plans", json={"date": "2024-03-04", "mealType": "lunch"})

    assert bad_type.status_code == 400
    assert bad_date.status_code == 400
    assert "Invalid date" in bad_date.get_json()["message"]
    assert missing.status_code == 400
    assert storage.list_meal_plans() == []


def test_create_meal_plan_for_unknown_recipe_is_rejected(client, storage):
    response = client.post(
        "/api/meal-plans", json={"date": "2024-03-04", "mealType": "lunch", "recipeId": "ghost"}
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "Recipe 'ghost' does not exist."
    assert storage.list_meal_plans() == []


def test_occupied_slot_accepts_a_second_plan(client, storage):
    soup = storage.add_recipe(**recipe_fields(name="Soup"))
    salad = storage.add_recipe(**recipe_fields(name="Salad"))

    for recipe in (soup, salad):
        response = client.post(
            "/api/meal-plans", json={"date": "2024-03-04", "mealType": "lunch", "recipeId": recipe.id}
        )
        assert response.status_code == 201

    assert len(client.get("/api/meal-plans").get_json()) == 2


def test_list_filters_inclusive_date_range(client, storage):
    recipe = storage.add_recipe(**recipe_fields())
    before = _plan(storage, recipe, date(2024, 3, 2))
    first = _plan(storage, recipe, date(2024, 3, 3))
    middle = _plan(storage, recipe, date(2024, 3, 6))
    last = _plan(storage, recipe, date(2024, 3, 9))
    after = _plan(storage, recipe, date(2024, 3, 10))

    response = client.get(
        "/api/meal-plans", query_string={"startDate": "2024-03-03", "endDate": "2024-03-09"}
    )

    assert response.status_code == 200
    ids = {item["id"] for item in response.get_json()}
    assert ids == {first.id, middle.id, last.id}
    assert before.id not in ids and after.id not in ids


def test_list_accepts_iso_datetime_bounds(client, storage):
    recipe = storage.add_recipe(**recipe_fields())
    plan = _plan(storage, recipe, date(2024, 3, 9))

    response = client.get(
        "/api/meal-plans",
        query_string={"startDate": "2024-03-03T05:00:00.000Z", "endDate": "2024-03-09T05:00:00.000Z"},
    )

    assert [item["id"] for item in response.get_json()] == [plan.id]


def test_list_with_one_bound_is_unfiltered(client, storage):
    recipe = storage.add_recipe(**recipe_fields())
    _plan(storage, recipe, date(2024, 1, 1))
    _plan(storage, recipe, date(2024, 6, 1))

    only_start = client.get("/api/meal-plans", query_string={"startDate": "2024-05-01"})
    only_end = client.get("/api/meal-plans", query_string={"endDate": "2024-02-01"})

    assert len(only_start.get_json()) == 2
    assert len(only_end.get_json()) == 2


def test_list_rejects_unparseable_bounds(client):
    response = client.get("/api/meal-plans", query_string={"startDate": "soon", "endDate": "later"})

    assert response.status_code == 400


def test_list_joins_recipe_fields(client, storage):
    recipe = storage.add_recipe(**recipe_fields(name="Tacos", cook_time="15 mins"))
    _plan(storage, recipe, date(2024, 3, 5))

    body = client.get("/api/meal-plans").get_json()

    assert body[0]["recipe"]["name"] == "Tacos"
    assert body[0]["recipe"]["cookTime"] == "15 mins"


def test_delete_meal_plan(client, storage):
    recipe = storage.add_recipe(**recipe_fields())
    plan = _plan(storage, recipe, date(2024, 3, 5))

    response = client.delete(f"/api/meal-plans/{plan.id}")

    assert response.status_code == 200
    assert response.get_json() == {"message": "Meal plan deleted successfully"}
    assert storage.list_meal_plans() == []
    assert storage.get_recipe(recipe.id).name == recipe.name


def test_delete_missing_meal_plan_is_404(client):
    response = client.delete("/api/meal-plans/missing")

    assert response.status_code == 404
    assert response.get_json() == {"message": "Meal plan not found"}
