"""Nutrient totals for ingredient lines, meals and days."""

import math
import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext

from meal_planner.domain.meals import IngredientLine, Meal
from meal_planner.domain.nutrition import NutrientTotals

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Beyond this magnitude a float carries no fractional digits worth rounding.
_MAX_ROUNDABLE = 1e15

ZERO_TOTALS = NutrientTotals(calories=0.0, protein=0.0, fat=0.0, carbs=0.0)


def coerce_number(value: object) -> float:
    """Parse a raw numeric field, falling back to 0.0.

    Strings contribute their leading numeric prefix ("150g" is 150). Empty
    values, booleans, unparseable text, non-finite numbers and integers too
    large for a float are 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        number = float(match.group())
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_away_from_zero(value: object, decimals: int = 2) -> float:
    """Round to a fixed number of decimals, ties away from zero.

    The shift by 10**decimals happens on the shortest decimal representation
    of the float, so 1.005 rounds to 1.01 rather than to the 1.00 its binary
    approximation would give.
    """
    number = coerce_number(value)
    if abs(number) >= _MAX_ROUNDABLE:
        return number
    with localcontext() as context:
        context.prec = 64
        quantum = Decimal(1).scaleb(-decimals)
        rounded = Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    # + 0.0 turns -0.0 into 0.0
    return float(rounded) + 0.0


def ingredient_totals(line: IngredientLine) -> NutrientTotals:
    """Return one line's contribution: (density / 100) * grams per nutrient."""
    grams = coerce_number(line.grams)
    return NutrientTotals(
        calories=coerce_number(line.calories_per_100g) / 100.0 * grams,
        protein=coerce_number(line.protein_per_100g) / 100.0 * grams,
        fat=coerce_number(line.fat_per_100g) / 100.0 * grams,
        carbs=coerce_number(line.carbs_per_100g) / 100.0 * grams,
    )


def compute_totals(lines: Iterable[IngredientLine]) -> NutrientTotals:
    """Sum contributions of all lines. Results are not rounded."""
    total = ZERO_TOTALS
    for line in lines:
        portion = ingredient_totals(line)
        total = NutrientTotals(
            calories=total.calories + portion.calories,
            protein=total.protein + portion.protein,
            fat=total.fat + portion.fat,
            carbs=total.carbs + portion.carbs,
        )
    return total


def meal_totals(meal: Meal) -> NutrientTotals:
    """Return unrounded totals for a single meal."""
    return compute_totals(meal.ingredients)


def meals_totals(meals: Iterable[Meal]) -> NutrientTotals:
    """Return unrounded totals across several meals, e.g. one day."""
    return compute_totals(line for meal in meals for line in meal.ingredients)


def round_totals(totals: NutrientTotals, decimals: int = 2) -> NutrientTotals:
    """Apply the rounding primitive to every nutrient."""
    return NutrientTotals(
        calories=round_half_away_from_zero(totals.calories, decimals),
        protein=round_half_away_from_zero(totals.protein, decimals),
        fat=round_half_away_from_zero(totals.fat, decimals),
        carbs=round_half_away_from_zero(totals.carbs, decimals),
    )


def macro_split(totals: NutrientTotals) -> dict[str, float]:
    """Return each macro's percentage share of total macro grams.

    Every share is 0.0 when the macros sum to zero or less.
    """
    macro_grams = totals.protein + totals.carbs + totals.fat
    if macro_grams <= 0:
        return {"protein": 0.0, "carbs": 0.0, "fat": 0.0}
    return {
        "protein": totals.protein / macro_grams * 100,
        "carbs": totals.carbs / macro_grams * 100,
        "fat": totals.fat / macro_grams * 100,
    }
