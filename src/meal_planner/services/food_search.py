"""Food search across USDA FoodData Central and Open Food Facts."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.adapters.off_client import OpenFoodFactsClient
from meal_planner.domain.foods import (
    FoodCandidate,
    OpenFoodFactsProduct,
    UsdaFood,
    UsdaNutrient,
)
from meal_planner.domain.meals import IngredientLine
from meal_planner.services.cache import Cache
from meal_planner.services.nutrition import coerce_number, round_half_away_from_zero

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

# (nutrient id, legacy nutrient number) pairs as reported by FDC.
_CALORIES = (1008, "208")
_CALORIES_ATWATER = (2047, None)
_PROTEIN = (1003, "203")
_FAT = (1004, "204")
_CARBS = (1005, "205")

_KJ_PER_KCAL = 4.184
_DEFAULT_GRAMS = 100.0
_SERVING_GRAMS = re.compile(r"(\d+(\.\d+)?)\s*g", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class FoodSearchUnavailableError(RuntimeError):
    """Raised when a food database cannot be queried with current settings."""


@dataclass
class FoodSearchService:
    """Searches food databases and caches the normalized candidates."""

    fdc_client: FdcClient | None
    off_client: OpenFoodFactsClient
    cache: Cache
    search_ttl_seconds: int = 3600
    page_size: int = 10
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search_usda(self, query: str) -> list[UsdaFood]:
        """Search generic foods in USDA FoodData Central."""
        fdc_client = self.fdc_client
        if fdc_client is None:
            raise FoodSearchUnavailableError(
                "USDA API key is missing; generic food search is disabled"
            )
        cache_key = f"usda:{query.strip().lower()}:{self.page_size}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: fdc_client.search_foods(query, page_size=self.page_size),
            action="usda_search",
        )
        foods = [_parse_usda_food(food) for food in payload.get("foods") or []]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.info("USDA search: query=%s results=%s", query, len(foods))
        return foods

    async def search_open_food_facts(
        self, query: str, australia_only: bool = False
    ) -> list[OpenFoodFactsProduct]:
        """Search branded products in Open Food Facts."""
        cache_key = f"off:{query.strip().lower()}:{australia_only}:{self.page_size}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.off_client.search_products(
                query, page_size=self.page_size, australia_only=australia_only
            ),
            action="off_search",
        )
        products = [
            _parse_off_product(product) for product in payload.get("products") or []
        ]
        self.cache.set(cache_key, products, ttl_seconds=self.search_ttl_seconds)
        _logger.info(
            "Open Food Facts search: query=%s australia_only=%s results=%s",
            query,
            australia_only,
            len(products),
        )
        return products

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Food search %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def to_ingredient_line(candidate: FoodCandidate) -> IngredientLine:
    """Normalize a search candidate into an ingredient line."""
    if isinstance(candidate, UsdaFood):
        return _usda_to_line(candidate)
    return _off_to_line(candidate)


def parse_serving_size(serving: str | None) -> float | None:
    """Extract grams from a serving size label such as "30 g (1 cup)"."""
    if not serving or not isinstance(serving, str):
        return None
    match = _SERVING_GRAMS.search(serving)
    if match is None:
        return None
    return float(match.group(1))


def _usda_to_line(food: UsdaFood) -> IngredientLine:
    calories = _find_nutrient(food.nutrients, *_CALORIES) or _find_nutrient(
        food.nutrients, *_CALORIES_ATWATER
    )
    protein = _find_nutrient(food.nutrients, *_PROTEIN)
    fat = _find_nutrient(food.nutrients, *_FAT)
    carbs = _find_nutrient(food.nutrients, *_CARBS)
    return IngredientLine(
        name=food.description or "Unknown USDA Product",
        grams=_DEFAULT_GRAMS,
        calories_per_100g=_density(calories),
        protein_per_100g=_density(protein),
        fat_per_100g=_density(fat),
        carbs_per_100g=_density(carbs),
        source=food.source,
    )


def _off_to_line(product: OpenFoodFactsProduct) -> IngredientLine:
    nutriments = product.nutriments
    name = (
        product.product_name_en
        or product.product_name
        or product.generic_name_en
        or product.generic_name
        or "Unknown Product"
    )
    if product.brands:
        name = f"{name} - {product.brands}"
    return IngredientLine(
        name=name,
        grams=parse_serving_size(product.serving_size) or _DEFAULT_GRAMS,
        calories_per_100g=round_half_away_from_zero(_off_calories(nutriments)),
        protein_per_100g=round_half_away_from_zero(nutriments.get("proteins_100g")),
        fat_per_100g=round_half_away_from_zero(nutriments.get("fat_100g")),
        carbs_per_100g=round_half_away_from_zero(
            nutriments.get("carbohydrates_100g")
        ),
        source=product.source,
    )


def _off_calories(nutriments: dict[str, object]) -> float:
    kcal = _parse_optional(nutriments.get("energy-kcal_100g"))
    if kcal is not None:
        return kcal
    kilojoules = _parse_optional(nutriments.get("energy_100g"))
    if kilojoules is not None:
        return kilojoules / _KJ_PER_KCAL
    return 0.0


def _parse_optional(value: object) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    return None


def _find_nutrient(
    nutrients: list[UsdaNutrient], nutrient_id: int, nutrient_number: str | None
) -> UsdaNutrient | None:
    for nutrient in nutrients:
        if nutrient.nutrient_id == nutrient_id:
            return nutrient
        if nutrient_number and nutrient.nutrient_number == nutrient_number:
            return nutrient
    return None


def _density(nutrient: UsdaNutrient | None) -> float:
    if nutrient is None:
        return 0.0
    return round_half_away_from_zero(nutrient.value)


def _parse_usda_food(food: dict[str, object]) -> UsdaFood:
    nutrients = [
        UsdaNutrient(
            nutrient_id=_optional_int(item.get("nutrientId")),
            nutrient_number=(
                str(item["nutrientNumber"]) if item.get("nutrientNumber") else None
            ),
            name=str(item.get("nutrientName") or ""),
            value=coerce_number(item.get("value", item.get("amount"))),
            unit_name=str(item.get("unitName") or ""),
        )
        for item in food.get("foodNutrients") or []
    ]
    return UsdaFood(
        fdc_id=int(food["fdcId"]),
        description=str(food.get("description") or ""),
        data_type=food.get("dataType"),
        nutrients=nutrients,
    )


def _parse_off_product(product: dict[str, object]) -> OpenFoodFactsProduct:
    nutriments = product.get("nutriments")
    return OpenFoodFactsProduct(
        code=str(product.get("code") or ""),
        product_name_en=product.get("product_name_en") or None,
        product_name=product.get("product_name") or None,
        generic_name_en=product.get("generic_name_en") or None,
        generic_name=product.get("generic_name") or None,
        brands=product.get("brands") or None,
        nutriments=dict(nutriments) if isinstance(nutriments, dict) else {},
        serving_size=product.get("serving_size") or None,
        countries_tags=list(product.get("countries_tags") or []),
    )


def _optional_int(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
