"""Pydantic models for API request payloads."""

from datetime import date

from pydantic import BaseModel, Field

from meal_planner.domain.meals import IngredientLine, Meal
from meal_planner.domain.shopping import ShoppingListItem

RawNumberField = float | str | None


class IngredientLinePayload(BaseModel):
    """Ingredient line as edited by the client; numbers may be strings."""

    id: str | None = None
    name: str = ""
    grams: RawNumberField = 0
    calories_per_100g: RawNumberField = 0
    protein_per_100g: RawNumberField = 0
    fat_per_100g: RawNumberField = 0
    carbs_per_100g: RawNumberField = 0
    source: str | None = None

    def to_domain(self) -> IngredientLine:
        return IngredientLine(
            id=self.id,
            name=self.name,
            grams=self.grams,
            calories_per_100g=self.calories_per_100g,
            protein_per_100g=self.protein_per_100g,
            fat_per_100g=self.fat_per_100g,
            carbs_per_100g=self.carbs_per_100g,
            source=self.source,
        )


class MealPayload(BaseModel):
    """Meal with its ingredient lines."""

    id: str = ""
    name: str = ""
    ingredients: list[IngredientLinePayload] = Field(default_factory=list)

    def to_domain(self) -> Meal:
        return Meal(
            id=self.id,
            name=self.name,
            ingredients=[line.to_domain() for line in self.ingredients],
        )


class TotalsRequest(BaseModel):
    """Ingredient lines to total."""

    ingredients: list[IngredientLinePayload] = Field(default_factory=list)


class ShoppingListRequest(BaseModel):
    """Meals in scope for a shopping list."""

    meals: list[MealPayload] = Field(default_factory=list)


class ShoppingListItemPayload(BaseModel):
    """Shopping list item as previously returned to the client."""

    id: str
    ingredient_name: str
    quantity: float
    unit: str = "g"
    meal_names: list[str] = Field(default_factory=list)
    checked: bool = False
    source: str | None = None

    def to_domain(self) -> ShoppingListItem:
        return ShoppingListItem(
            id=self.id,
            ingredient_name=self.ingredient_name,
            quantity=self.quantity,
            unit=self.unit,
            meal_names=tuple(self.meal_names),
            checked=self.checked,
            source=self.source,
        )


class ToggleRequest(BaseModel):
    """Current checklist and the item to flip."""

    items: list[ShoppingListItemPayload]
    item_id: str


class ClearCheckedRequest(BaseModel):
    """Current checklist."""

    items: list[ShoppingListItemPayload]


class AssignTemplateRequest(BaseModel):
    """Day that receives a copy of the template."""

    day: date
