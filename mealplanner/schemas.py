"""Request payload validation for the JSON API and the web forms."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

RecipeCategory = Literal["breakfast", "lunch", "dinner", "snack", "dessert"]
MealType = Literal["breakfast", "lunch", "dinner"]


def parse_day(value: object) -> date:
    """Return the calendar day of ``value``, ignoring any time of day.

    Accepts ``date`` and ``datetime`` instances as well as ``YYYY-MM-DD`` and
    ISO-8601 datetime strings such as ``2024-03-04T00:00:00.000Z``.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip().split("T", 1)[0]
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
    raise ValueError(f"Invalid date: {value!r}")


class RecipeInput(BaseModel):
    """A complete recipe document as accepted from clients."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    category: RecipeCategory
    prep_time: str = Field(alias="prepTime", min_length=1)
    cook_time: str = Field(alias="cookTime", min_length=1)
    servings: PositiveInt
    ingredients: List[str] = Field(min_length=1)
    instructions: str = Field(min_length=1)
    image_url: str = Field(default="", alias="imageUrl")

    @field_validator("ingredients", mode="after")
    @classmethod
    def _drop_blank_ingredients(cls, value: List[str]) -> List[str]:
        cleaned = [item for item in value if item]
        if not cleaned:
            raise ValueError("at least one ingredient is required")
        return cleaned

    @field_validator("image_url", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class MealPlanInput(BaseModel):
    """Assignment of a recipe to a meal slot."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="ignore")

    day: date = Field(alias="date")
    meal_type: MealType = Field(alias="mealType")
    recipe_id: str = Field(alias="recipeId", min_length=1)

    @field_validator("day", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> date:
        return parse_day(value)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into a single human readable message."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


__all__ = [
    "MealPlanInput",
    "RecipeInput",
    "ValidationError",
    "describe_validation_error",
    "parse_day",
]
