"""Nutrition domain models."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NutrientTotals:
    """Calories and macronutrients for an ingredient, meal or day."""

    calories: float
    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class DayTotals:
    """Rounded totals for one planned day."""

    day: date
    totals: NutrientTotals
