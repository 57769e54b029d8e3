"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.fdc_client import HttpxFdcClient
from meal_planner.adapters.off_client import HttpxOpenFoodFactsClient
from meal_planner.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from meal_planner.config import Settings, resolve_fdc_api_key
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.food_search import FoodSearchService
from meal_planner.services.planner import PlannerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    planner_service: PlannerService
    food_search_service: FoodSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    planner_service = PlannerService(
        meal_repository=SupabaseMealRepository(supabase_client),
        plan_repository=SupabasePlanRepository(supabase_client),
        unit=resolved_settings.shopping_unit,
    )

    fdc_api_key = resolve_fdc_api_key(resolved_settings.fdc_api_key)
    fdc_client = (
        HttpxFdcClient.create(
            api_key=fdc_api_key, base_url=resolved_settings.fdc_base_url
        )
        if fdc_api_key
        else None
    )
    off_client = HttpxOpenFoodFactsClient.create(resolved_settings.off_base_url)
    food_search_service = FoodSearchService(
        fdc_client=fdc_client,
        off_client=off_client,
        cache=InMemoryCache(),
        search_ttl_seconds=resolved_settings.search_ttl_seconds,
    )

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        planner_service=planner_service,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )
