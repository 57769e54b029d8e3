"""Tests for nutrient totals and rounding."""

import pytest

from meal_planner.domain.nutrition import NutrientTotals
from meal_planner.services.nutrition import (
    coerce_number,
    compute_totals,
    ingredient_totals,
    meal_totals,
    macro_split,
    meals_totals,
    round_half_away_from_zero,
    round_totals,
)
from tests.conftest import make_line, make_meal


def test_compute_totals_empty_is_zero() -> None:
    assert compute_totals([]) == NutrientTotals(
        calories=0.0, protein=0.0, fat=0.0, carbs=0.0
    )


def test_scaling_law_for_single_line() -> None:
    line = make_line("Apple", grams=150, calories_per_100g=52)

    totals = compute_totals([line])

    assert round_half_away_from_zero(totals.calories, 0) == 78


def test_zero_grams_contribute_nothing() -> None:
    line = make_line(
        "Butter",
        grams=0,
        calories_per_100g=717,
        protein_per_100g=0.85,
        fat_per_100g=81.1,
        carbs_per_100g=0.06,
    )

    assert ingredient_totals(line) == NutrientTotals(0.0, 0.0, 0.0, 0.0)


@pytest.mark.parametrize("grams", ["", "abc", None, "   "])
def test_non_numeric_grams_behave_like_zero(grams: object) -> None:
    line = make_line("Rice", grams=grams, calories_per_100g=130, carbs_per_100g=28)

    assert compute_totals([line]) == compute_totals(
        [make_line("Rice", grams=0, calories_per_100g=130, carbs_per_100g=28)]
    )


def test_malformed_field_does_not_invalidate_line() -> None:
    line = make_line(
        "Chicken Breast",
        grams="200",
        calories_per_100g="165",
        protein_per_100g="n/a",
        fat_per_100g=3.6,
        carbs_per_100g="",
    )

    totals = compute_totals([line])

    assert totals.calories == pytest.approx(330)
    assert totals.protein == 0
    assert totals.fat == pytest.approx(7.2)
    assert totals.carbs == 0


def test_totals_sum_each_nutrient_independently() -> None:
    lines = [
        make_line(
            "Oats",
            grams=40,
            calories_per_100g=389,
            protein_per_100g=16.9,
            fat_per_100g=6.9,
            carbs_per_100g=66.3,
        ),
        make_line(
            "Milk",
            grams=250,
            calories_per_100g=42,
            protein_per_100g=3.4,
            fat_per_100g=1,
            carbs_per_100g=5,
        ),
    ]

    totals = round_totals(compute_totals(lines), 2)

    assert totals == NutrientTotals(
        calories=260.6, protein=15.26, fat=5.26, carbs=39.02
    )


def test_meal_and_day_totals() -> None:
    breakfast = make_meal("Breakfast", make_line("Egg", 50, calories_per_100g=155))
    lunch = make_meal("Lunch", make_line("Bread", 60, calories_per_100g=265))

    assert meal_totals(breakfast).calories == pytest.approx(77.5)
    assert meals_totals([breakfast, lunch]).calories == pytest.approx(236.5)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (12, 12.0),
        (1.5, 1.5),
        ("42", 42.0),
        (" 7.25 ", 7.25),
        ("150g", 150.0),
        ("1e2", 100.0),
        (".5", 0.5),
        ("-3", -3.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ([1], 0.0),
        (10**400, 0.0),
        ("1e400", 0.0),
    ],
)
def test_coerce_number(raw: object, expected: float) -> None:
    assert coerce_number(raw) == expected


@pytest.mark.parametrize(
    ("value", "decimals", "expected"),
    [
        (1.005, 2, 1.01),
        (1.255, 2, 1.26),
        (2.5, 0, 3.0),
        (-2.5, 0, -3.0),
        (0.049, 1, 0.0),
        (0.05, 1, 0.1),
        (77.999999, 0, 78.0),
        (1234.5, -1, 1230.0),
        ("12.345", 2, 12.35),
        ("", 2, 0.0),
    ],
)
def test_round_half_away_from_zero(
    value: object, decimals: int, expected: float
) -> None:
    assert round_half_away_from_zero(value, decimals) == expected


def test_round_never_returns_negative_zero() -> None:
    result = round_half_away_from_zero(-0.004, 2)

    assert result == 0.0
    assert str(result) == "0.0"


def test_oversized_integer_counts_as_zero() -> None:
    line = make_line("Rice", grams=10**400, calories_per_100g=130)

    assert compute_totals([line]) == NutrientTotals(0.0, 0.0, 0.0, 0.0)


def test_macro_split_shares_macro_grams() -> None:
    split = macro_split(NutrientTotals(calories=400, protein=30, fat=10, carbs=60))

    assert split == pytest.approx({"protein": 30.0, "carbs": 60.0, "fat": 10.0})


def test_macro_split_without_macros_is_zero() -> None:
    assert macro_split(NutrientTotals(calories=120, protein=0, fat=0, carbs=0)) == {
        "protein": 0.0,
        "carbs": 0.0,
        "fat": 0.0,
    }
