from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

RECIPE_CATEGORIES = ("breakfast", "lunch", "dinner", "snack", "dessert")
MEAL_TYPES = ("breakfast", "lunch", "dinner")


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    name: str
    category: str
    prep_time: str
    cook_time: str
    servings: int
    ingredients: List[str]
    instructions: str
    image_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "prepTime": self.prep_time,
            "cookTime": self.cook_time,
            "servings": self.servings,
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
            "imageUrl": self.image_url,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """Build a recipe from its JSON representation."""

        return cls(
            id=data["id"],
            name=data.get("name", ""),
            category=data.get("category", ""),
            prep_time=data.get("prepTime", ""),
            cook_time=data.get("cookTime", ""),
            servings=data.get("servings", 0),
            ingredients=list(data.get("ingredients") or []),
            instructions=data.get("instructions", ""),
            image_url=data.get("imageUrl") or "",
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass
class MealPlan:
    """A recipe assigned to one meal slot of one calendar day.

    ``recipe`` holds the joined recipe document when the storage layer was
    able to resolve ``recipe_id``; it is ``None`` for orphaned references.
    """

    id: str
    date: date
    meal_type: str
    recipe_id: str
    recipe: Optional[Recipe] = field(default=None, compare=False)
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "mealType": self.meal_type,
            "recipeId": self.recipe_id,
            "recipe": self.recipe.to_dict() if self.recipe else None,
            "createdAt": _isoformat(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MealPlan":
        recipe_data = data.get("recipe")
        return cls(
            id=data["id"],
            date=date.fromisoformat(data["date"][:10]),
            meal_type=data.get("mealType", ""),
            recipe_id=data.get("recipeId", ""),
            recipe=Recipe.from_dict(recipe_data) if recipe_data else None,
            created_at=_parse_timestamp(data.get("createdAt")),
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


__all__ = ["MEAL_TYPES", "RECIPE_CATEGORIES", "MealPlan", "Recipe"]
