"""Domain models for meals, ingredients and day plans."""

from dataclasses import dataclass, field
from datetime import date

RawNumber = float | int | str | None


@dataclass(frozen=True)
class IngredientLine:
    """One ingredient entry with gram quantity and per-100g densities.

    Numeric fields keep whatever the editor produced (numbers, numeric
    strings, empty strings or None); they are coerced when totals are
    computed.
    """

    name: str
    grams: RawNumber = 0
    calories_per_100g: RawNumber = 0
    protein_per_100g: RawNumber = 0
    fat_per_100g: RawNumber = 0
    carbs_per_100g: RawNumber = 0
    source: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class Meal:
    """A named, ordered collection of ingredient lines.

    Used both for library templates and for instances planned on a day.
    """

    id: str
    name: str
    ingredients: list[IngredientLine] = field(default_factory=list)
    template_id: str | None = None
    created_at: int | None = None


@dataclass(frozen=True)
class MealAssignment:
    """Link from a day plan to a meal instance."""

    instance_id: str
    meal_name: str


@dataclass(frozen=True)
class DayPlan:
    """Meal assignments for a single calendar day."""

    day: date
    meal_assignments: list[MealAssignment] = field(default_factory=list)
