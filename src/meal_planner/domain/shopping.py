"""Domain models for the shopping list."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ShoppingListItem:
    """Aggregated shopping entry for one ingredient."""

    id: str
    ingredient_name: str
    quantity: float
    unit: str
    meal_names: tuple[str, ...]
    checked: bool = False
    source: str | None = None
