"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from typing import Literal
from uuid import UUID

import httpx
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from meal_planner.api.models import (
    AssignTemplateRequest,
    ClearCheckedRequest,
    MealPayload,
    ShoppingListItemPayload,
    ShoppingListRequest,
    TotalsRequest,
    ToggleRequest,
)
from meal_planner.app_logging import configure_logging
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.shopping import ShoppingListItem
from meal_planner.services.food_search import (
    FoodSearchUnavailableError,
    to_ingredient_line,
)
from meal_planner.services.nutrition import (
    compute_totals,
    ingredient_totals,
    macro_split,
    round_totals,
)
from meal_planner.services.planner import week_start
from meal_planner.services.printing import render_html, render_text
from meal_planner.services.shopping import (
    aggregate,
    clear_checked,
    format_quantity,
    toggle,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/totals")
    async def totals(payload: TotalsRequest, request: Request) -> dict[str, object]:
        """Return rounded totals and per-ingredient figures."""
        settings: Settings = request.app.state.container.settings
        lines = [line.to_domain() for line in payload.ingredients]
        totals = compute_totals(lines)
        return {
            "totals": asdict(round_totals(totals, settings.totals_decimals)),
            "macro_split": macro_split(totals),
            "ingredients": [
                {
                    "name": line.name,
                    **asdict(
                        round_totals(
                            ingredient_totals(line), settings.ingredient_decimals
                        )
                    ),
                }
                for line in lines
            ],
        }

    @app.post("/shopping-list")
    async def shopping_list(
        payload: ShoppingListRequest, request: Request
    ) -> dict[str, object]:
        """Aggregate a shopping list from the posted meals."""
        settings: Settings = request.app.state.container.settings
        meals = [meal.to_domain() for meal in payload.meals]
        items = aggregate(meals, unit=settings.shopping_unit)
        return {"items": _serialize_items(items, settings)}

    @app.post("/shopping-list/toggle")
    async def toggle_item(
        payload: ToggleRequest, request: Request
    ) -> dict[str, object]:
        """Flip the checked flag of one item."""
        settings: Settings = request.app.state.container.settings
        items = toggle(_to_items(payload.items), payload.item_id)
        return {"items": _serialize_items(items, settings)}

    @app.post("/shopping-list/clear-checked")
    async def clear_checked_items(
        payload: ClearCheckedRequest, request: Request
    ) -> dict[str, object]:
        """Drop checked items from the list."""
        settings: Settings = request.app.state.container.settings
        items = clear_checked(_to_items(payload.items))
        return {"items": _serialize_items(items, settings)}

    @app.post("/users/{user_id}/templates", status_code=status.HTTP_201_CREATED)
    async def save_template(
        user_id: UUID, payload: MealPayload, request: Request
    ) -> dict[str, object]:
        """Create or replace a library template."""
        state_container: AppContainer = request.app.state.container
        meal = state_container.planner_service.save_template(
            user_id, payload.to_domain()
        )
        return asdict(meal)

    @app.delete(
        "/users/{user_id}/templates/{template_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def remove_template(
        user_id: UUID, template_id: str, request: Request
    ) -> Response:
        """Delete a template; planned copies keep their data."""
        state_container: AppContainer = request.app.state.container
        state_container.planner_service.remove_template(user_id, template_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post(
        "/users/{user_id}/templates/{template_id}/assignments",
        status_code=status.HTTP_201_CREATED,
    )
    async def assign_template(
        user_id: UUID,
        template_id: str,
        payload: AssignTemplateRequest,
        request: Request,
    ) -> dict[str, object]:
        """Plan a copy of a template on a day."""
        state_container: AppContainer = request.app.state.container
        instance = state_container.planner_service.assign_template_to_day(
            user_id, template_id, payload.day
        )
        if instance is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Template not found"
            )
        return asdict(instance)

    @app.delete("/users/{user_id}/days/{day}/meals/{instance_id}")
    async def remove_meal_from_day(
        user_id: UUID, day: date, instance_id: str, request: Request
    ) -> dict[str, bool]:
        """Remove a planned meal from a day."""
        state_container: AppContainer = request.app.state.container
        deleted = state_container.planner_service.remove_meal_from_day(
            user_id, instance_id, day
        )
        return {"instance_deleted": deleted}

    @app.post(
        "/users/{user_id}/instances/{instance_id}/template",
        status_code=status.HTTP_201_CREATED,
    )
    async def save_instance_as_template(
        user_id: UUID, instance_id: str, request: Request
    ) -> dict[str, object]:
        """Copy a planned meal into the library."""
        state_container: AppContainer = request.app.state.container
        template = state_container.planner_service.save_instance_as_template(
            user_id, instance_id
        )
        if template is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Meal instance not found"
            )
        return asdict(template)

    @app.get("/users/{user_id}/library/shopping-list")
    async def library_shopping_list(
        user_id: UUID, request: Request
    ) -> dict[str, object]:
        """Shopping list covering every meal in the library."""
        state_container: AppContainer = request.app.state.container
        items = state_container.planner_service.shopping_list_for_library(user_id)
        return {"items": _serialize_items(items, state_container.settings)}

    @app.get("/users/{user_id}/weeks/{day}/shopping-list", response_model=None)
    async def week_shopping_list(
        user_id: UUID,
        day: date,
        request: Request,
        output: Literal["json", "text", "html"] = "json",
    ) -> dict[str, object] | Response:
        """Shopping list for the week containing ``day``."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        items = state_container.planner_service.shopping_list_for_week(user_id, day)
        start = week_start(day)
        title = f"Shopping List (week of {start.isoformat()})"
        if output == "text":
            return PlainTextResponse(
                render_text(
                    items,
                    title=title,
                    decimals=settings.quantity_decimals,
                    placeholder=settings.as_needed_label,
                )
            )
        if output == "html":
            return HTMLResponse(
                render_html(
                    items,
                    title=title,
                    decimals=settings.quantity_decimals,
                    placeholder=settings.as_needed_label,
                )
            )
        return {
            "week_start": start.isoformat(),
            "items": _serialize_items(items, settings),
        }

    @app.get("/users/{user_id}/weeks/{day}/totals")
    async def week_totals(
        user_id: UUID, day: date, request: Request
    ) -> dict[str, object]:
        """Per-day nutrient totals for the week containing ``day``."""
        state_container: AppContainer = request.app.state.container
        daily = state_container.planner_service.daily_totals_for_week(
            user_id, day, decimals=state_container.settings.totals_decimals
        )
        return {
            "week_start": week_start(day).isoformat(),
            "days": [
                {
                    "day": entry.day.isoformat(),
                    **asdict(entry.totals),
                    "macro_split": macro_split(entry.totals),
                }
                for entry in daily
            ],
        }

    @app.get("/foods/search")
    async def search_foods(
        query: str,
        request: Request,
        source: Literal["usda", "openfoodfacts"] = "openfoodfacts",
        australia_only: bool = False,
    ) -> dict[str, object]:
        """Search a food database and return ready-to-add ingredient lines."""
        service = request.app.state.container.food_search_service
        try:
            if source == "usda":
                candidates = await service.search_usda(query)
            else:
                candidates = await service.search_open_food_facts(
                    query, australia_only=australia_only
                )
        except FoodSearchUnavailableError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Food search failed: source=%s query=%s", source, query)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Food search request to {source} failed",
            ) from exc
        return {
            "results": [
                asdict(to_ingredient_line(candidate)) for candidate in candidates
            ]
        }

    return app


def _to_items(payloads: list[ShoppingListItemPayload]) -> list[ShoppingListItem]:
    return [payload.to_domain() for payload in payloads]


def _serialize_items(
    items: list[ShoppingListItem], settings: Settings
) -> list[dict[str, object]]:
    return [
        {
            "id": item.id,
            "ingredient_name": item.ingredient_name,
            "quantity": item.quantity,
            "unit": item.unit,
            "display_quantity": format_quantity(
                item.quantity,
                item.unit,
                settings.quantity_decimals,
                settings.as_needed_label,
            ),
            "meal_names": list(item.meal_names),
            "checked": item.checked,
            "source": item.source,
        }
        for item in items
    ]
