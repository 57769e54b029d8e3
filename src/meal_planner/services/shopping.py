"""Shopping list aggregation across meals."""

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from meal_planner.domain.meals import IngredientLine, Meal
from meal_planner.domain.shopping import ShoppingListItem
from meal_planner.services.nutrition import coerce_number, round_half_away_from_zero

DEFAULT_UNIT = "g"
AS_NEEDED = "as needed"


@dataclass
class _Entry:
    key: str
    name: str
    source: str | None
    quantity: float = 0.0
    meal_names: list[str] = field(default_factory=list)

    def to_item(self, unit: str) -> ShoppingListItem:
        return ShoppingListItem(
            id=self.key,
            ingredient_name=self.name,
            quantity=self.quantity,
            unit=unit,
            meal_names=tuple(self.meal_names),
            checked=False,
            source=self.source,
        )


def merge_key(line: IngredientLine) -> str:
    """Return the key that decides which lines share a shopping entry.

    Lines merge by trimmed, lower-cased name only; the source tag is not
    part of the key.
    """
    if not isinstance(line.name, str):
        return ""
    return line.name.strip().lower()


def aggregate(
    meals: Iterable[Meal], unit: str = DEFAULT_UNIT
) -> list[ShoppingListItem]:
    """Merge ingredients of all meals into a sorted shopping list.

    Quantities are summed across every contributing line; each meal name is
    listed once per item. Lines without a name are ignored. Every item starts
    unchecked.
    """
    entries: dict[str, _Entry] = {}
    for meal in meals:
        for line in meal.ingredients:
            key = merge_key(line)
            if not key:
                continue
            entry = entries.get(key)
            if entry is None:
                entry = _Entry(key=key, name=line.name.strip(), source=line.source)
                entries[key] = entry
            elif entry.source is None and line.source:
                entry.source = line.source
            entry.quantity += coerce_number(line.grams)
            if meal.name not in entry.meal_names:
                entry.meal_names.append(meal.name)
    items = [entry.to_item(unit) for entry in entries.values()]
    return sorted(items, key=lambda item: _sort_key(item.ingredient_name))


def format_quantity(
    quantity: float,
    unit: str = DEFAULT_UNIT,
    decimals: int = 1,
    placeholder: str = AS_NEEDED,
) -> str:
    """Render a quantity with its unit, or the placeholder when it rounds to 0."""
    rounded = round_half_away_from_zero(quantity, decimals)
    if rounded <= 0:
        return placeholder
    return f"{_format_number(rounded, decimals)}{unit}"


def toggle(items: list[ShoppingListItem], item_id: str) -> list[ShoppingListItem]:
    """Return a copy of the list with one item's checked flag flipped."""
    return [
        replace(item, checked=not item.checked) if item.id == item_id else item
        for item in items
    ]


def clear_checked(items: list[ShoppingListItem]) -> list[ShoppingListItem]:
    """Return the unchecked items in their original order."""
    return [item for item in items if not item.checked]


def _sort_key(name: str) -> tuple[str, str]:
    """Order by accent-stripped casefolded name, then by casefolded name."""
    folded = name.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base, folded


def _format_number(value: float, decimals: int) -> str:
    text = f"{value:.{max(decimals, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
