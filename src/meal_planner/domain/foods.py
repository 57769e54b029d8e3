"""Food search candidates returned by external nutrition databases."""

from dataclasses import dataclass, field
from typing import Literal

USDA_SOURCE = "USDA"
OPEN_FOOD_FACTS_SOURCE = "OpenFoodFacts"


@dataclass(frozen=True)
class UsdaNutrient:
    """Nutrient value reported by FoodData Central."""

    nutrient_id: int | None
    nutrient_number: str | None
    name: str
    value: float
    unit_name: str


@dataclass(frozen=True)
class UsdaFood:
    """Search result from USDA FoodData Central."""

    fdc_id: int
    description: str
    data_type: str | None
    nutrients: list[UsdaNutrient] = field(default_factory=list)
    source: Literal["USDA"] = USDA_SOURCE


@dataclass(frozen=True)
class OpenFoodFactsProduct:
    """Search result from Open Food Facts."""

    code: str
    product_name_en: str | None = None
    product_name: str | None = None
    generic_name_en: str | None = None
    generic_name: str | None = None
    brands: str | None = None
    nutriments: dict[str, object] = field(default_factory=dict)
    serving_size: str | None = None
    countries_tags: list[str] = field(default_factory=list)
    source: Literal["OpenFoodFacts"] = OPEN_FOOD_FACTS_SOURCE


FoodCandidate = UsdaFood | OpenFoodFactsProduct
