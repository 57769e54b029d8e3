"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID

import pytest

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.adapters.off_client import OpenFoodFactsClient
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.meals import DayPlan, IngredientLine, Meal
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.food_search import FoodSearchService
from meal_planner.services.planner import (
    MealRepository,
    PlannerService,
    PlanRepository,
)


def make_line(name: str, grams: object = 100, **densities: object) -> IngredientLine:
    """Build an ingredient line with optional per-100g densities."""
    return IngredientLine(name=name, grams=grams, **densities)


def make_meal(name: str, *lines: IngredientLine, meal_id: str | None = None) -> Meal:
    """Build a meal from ingredient lines."""
    return Meal(
        id=meal_id or name.lower().replace(" ", "-"),
        name=name,
        ingredients=list(lines),
    )


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    templates: dict[UUID, list[Meal]] = field(default_factory=dict)
    instances: dict[UUID, dict[str, Meal]] = field(default_factory=dict)
    instance_lookups: list[list[str]] = field(default_factory=list)

    def list_templates(self, user_id: UUID) -> list[Meal]:
        return sorted(
            self.templates.get(user_id, []), key=lambda meal: meal.created_at or 0
        )

    def get_instances(self, user_id: UUID, instance_ids: list[str]) -> dict[str, Meal]:
        self.instance_lookups.append(list(instance_ids))
        stored = self.instances.get(user_id, {})
        return {key: stored[key] for key in instance_ids if key in stored}

    def save_template(self, user_id: UUID, meal: Meal) -> Meal:
        templates = [
            existing
            for existing in self.templates.get(user_id, [])
            if existing.id != meal.id
        ]
        templates.append(meal)
        self.templates[user_id] = templates
        return meal

    def save_instance(self, user_id: UUID, meal: Meal) -> Meal:
        self.instances.setdefault(user_id, {})[meal.id] = meal
        return meal

    def delete_template(self, user_id: UUID, template_id: str) -> None:
        self.templates[user_id] = [
            meal for meal in self.templates.get(user_id, []) if meal.id != template_id
        ]

    def delete_instance(self, user_id: UUID, instance_id: str) -> None:
        self.instances.get(user_id, {}).pop(instance_id, None)

    def unlink_template(self, user_id: UUID, template_id: str) -> None:
        stored = self.instances.get(user_id, {})
        for key, meal in stored.items():
            if meal.template_id == template_id:
                stored[key] = replace(meal, template_id=None)


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory day plan repository for tests."""

    plans: dict[UUID, dict[date, DayPlan]] = field(default_factory=dict)
    requested_days: list[list[date]] = field(default_factory=list)

    def list_day_plans(self, user_id: UUID, days: list[date]) -> dict[date, DayPlan]:
        self.requested_days.append(list(days))
        stored = self.plans.get(user_id, {})
        return {day: stored[day] for day in days if day in stored}

    def save_day_plan(self, user_id: UUID, plan: DayPlan) -> None:
        self.plans.setdefault(user_id, {})[plan.day] = replace(plan)

    def days_using_instance(self, user_id: UUID, instance_id: str) -> list[date]:
        return [
            day
            for day, plan in self.plans.get(user_id, {}).items()
            if any(
                assignment.instance_id == instance_id
                for assignment in plan.meal_assignments
            )
        ]


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with an in-memory search response."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 171077,
                    "description": "Chicken, broiler or fryers, breast, raw",
                    "dataType": "SR Legacy",
                    "foodNutrients": [
                        {
                            "nutrientId": 1008,
                            "nutrientNumber": "208",
                            "nutrientName": "Energy",
                            "value": 120,
                            "unitName": "KCAL",
                        },
                        {
                            "nutrientId": 1003,
                            "nutrientNumber": "203",
                            "nutrientName": "Protein",
                            "value": 22.5,
                            "unitName": "G",
                        },
                        {
                            "nutrientId": 1004,
                            "nutrientNumber": "204",
                            "nutrientName": "Total lipid (fat)",
                            "value": 2.62,
                            "unitName": "G",
                        },
                        {
                            "nutrientId": 1005,
                            "nutrientNumber": "205",
                            "nutrientName": "Carbohydrate, by difference",
                            "value": 0,
                            "unitName": "G",
                        },
                    ],
                }
            ]
        }
    )
    calls: list[str] = field(default_factory=list)

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        self.calls.append(query)
        return self.search_payload


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with an in-memory search response."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "products": [
                {
                    "code": "9300633603277",
                    "product_name_en": "Rolled Oats",
                    "brands": "Uncle Tobys",
                    "serving_size": "40 g",
                    "nutriments": {
                        "energy-kcal_100g": 375,
                        "proteins_100g": "11.2",
                        "fat_100g": 8.1,
                        "carbohydrates_100g": 56.4,
                    },
                    "countries_tags": ["en:australia"],
                }
            ]
        }
    )
    calls: list[tuple[str, bool]] = field(default_factory=list)

    async def search_products(
        self, query: str, page_size: int = 10, australia_only: bool = False
    ) -> dict[str, object]:
        self.calls.append((query, australia_only))
        return self.search_payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        fdc_api_key="fdc-key",
    )


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def planner_service(
    meal_repository: InMemoryMealRepository, plan_repository: InMemoryPlanRepository
) -> PlannerService:
    return PlannerService(
        meal_repository=meal_repository, plan_repository=plan_repository
    )


@pytest.fixture
def container(settings: Settings, planner_service: PlannerService) -> AppContainer:
    food_search_service = FoodSearchService(
        fdc_client=FakeFdcClient(),
        off_client=FakeOpenFoodFactsClient(),
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        planner_service=planner_service,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )
