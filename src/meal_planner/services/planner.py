"""Week planning service: resolves meals in scope and feeds the engine."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from meal_planner.domain.meals import DayPlan, Meal, MealAssignment
from meal_planner.domain.nutrition import DayTotals
from meal_planner.domain.shopping import ShoppingListItem
from meal_planner.services.nutrition import meals_totals, round_totals
from meal_planner.services.shopping import DEFAULT_UNIT, aggregate

DAYS_PER_WEEK = 7
TEMPLATE_SUFFIX = " (template)"

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meal templates and instances."""

    def list_templates(self, user_id: UUID) -> list[Meal]:
        """Return the user's meal library ordered by creation time."""

    def get_instances(self, user_id: UUID, instance_ids: list[str]) -> dict[str, Meal]:
        """Return meal instances keyed by id; unknown ids are absent."""

    def save_template(self, user_id: UUID, meal: Meal) -> Meal:
        """Create or replace a meal template."""

    def save_instance(self, user_id: UUID, meal: Meal) -> Meal:
        """Create or replace a meal instance."""

    def delete_template(self, user_id: UUID, template_id: str) -> None:
        """Remove a meal template from the library."""

    def delete_instance(self, user_id: UUID, instance_id: str) -> None:
        """Remove a meal instance."""

    def unlink_template(self, user_id: UUID, template_id: str) -> None:
        """Clear the template link of every instance created from it."""


class PlanRepository(Protocol):
    """Persistence interface for per-day meal assignments."""

    def list_day_plans(self, user_id: UUID, days: list[date]) -> dict[date, DayPlan]:
        """Return stored plans for the given days; empty days are absent."""

    def save_day_plan(self, user_id: UUID, plan: DayPlan) -> None:
        """Create or replace the plan for one day."""

    def days_using_instance(self, user_id: UUID, instance_id: str) -> list[date]:
        """Return the days whose plan assigns the given instance."""


def week_start(day: date) -> date:
    """Return the Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_dates(start: date) -> list[date]:
    """Return the seven consecutive dates beginning at ``start``."""
    return [start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


@dataclass
class PlannerService:
    """Application service for planned meals, totals and shopping lists."""

    meal_repository: MealRepository
    plan_repository: PlanRepository
    unit: str = DEFAULT_UNIT

    def library_meals(self, user_id: UUID) -> list[Meal]:
        """Return every meal template in the user's library."""
        return self.meal_repository.list_templates(user_id)

    def meals_for_week(self, user_id: UUID, day: date) -> list[Meal]:
        """Return planned meals for the week containing ``day``, in day order."""
        meals: list[Meal] = []
        for _, day_meals in self._week_meals(user_id, day):
            meals.extend(day_meals)
        return meals

    def shopping_list_for_week(
        self, user_id: UUID, day: date
    ) -> list[ShoppingListItem]:
        """Aggregate the shopping list for the displayed week."""
        meals = self.meals_for_week(user_id, day)
        items = aggregate(meals, unit=self.unit)
        _logger.info(
            "Shopping list built: user=%s week=%s meals=%s items=%s",
            user_id,
            week_start(day).isoformat(),
            len(meals),
            len(items),
        )
        return items

    def shopping_list_for_library(self, user_id: UUID) -> list[ShoppingListItem]:
        """Aggregate the shopping list for the whole meal library."""
        meals = self.library_meals(user_id)
        items = aggregate(meals, unit=self.unit)
        _logger.info(
            "Library shopping list built: user=%s meals=%s items=%s",
            user_id,
            len(meals),
            len(items),
        )
        return items

    def daily_totals_for_week(
        self, user_id: UUID, day: date, decimals: int = 0
    ) -> list[DayTotals]:
        """Return rounded nutrient totals for each day of the week."""
        return [
            DayTotals(day=plan_day, totals=round_totals(meals_totals(meals), decimals))
            for plan_day, meals in self._week_meals(user_id, day)
        ]

    def save_template(self, user_id: UUID, meal: Meal) -> Meal:
        """Store a meal template in the library, assigning an id if missing."""
        return self.meal_repository.save_template(user_id, _with_identity(meal))

    def save_instance(self, user_id: UUID, meal: Meal) -> Meal:
        """Store a planned meal instance, assigning an id if missing."""
        return self.meal_repository.save_instance(user_id, _with_identity(meal))

    def save_day_plan(self, user_id: UUID, plan: DayPlan) -> None:
        """Store the meal assignments of one day."""
        self.plan_repository.save_day_plan(user_id, plan)

    def remove_template(self, user_id: UUID, template_id: str) -> None:
        """Delete a template; planned instances stay but lose their link."""
        self.meal_repository.delete_template(user_id, template_id)
        self.meal_repository.unlink_template(user_id, template_id)
        _logger.info("Template removed: user=%s template=%s", user_id, template_id)

    def assign_template_to_day(
        self, user_id: UUID, template_id: str, day: date
    ) -> Meal | None:
        """Copy a template into a new instance and append it to ``day``.

        Returns the stored instance, or None when the template is unknown.
        """
        template = next(
            (meal for meal in self.library_meals(user_id) if meal.id == template_id),
            None,
        )
        if template is None:
            return None
        instance = self.meal_repository.save_instance(
            user_id,
            Meal(
                id=_new_id(),
                name=template.name,
                ingredients=list(template.ingredients),
                template_id=template.id,
                created_at=_now_ms(),
            ),
        )
        plan = self._day_plan(user_id, day)
        self.plan_repository.save_day_plan(
            user_id,
            replace(
                plan,
                meal_assignments=[
                    *plan.meal_assignments,
                    MealAssignment(instance_id=instance.id, meal_name=instance.name),
                ],
            ),
        )
        _logger.info(
            "Template assigned: user=%s template=%s day=%s instance=%s",
            user_id,
            template_id,
            day.isoformat(),
            instance.id,
        )
        return instance

    def remove_meal_from_day(
        self, user_id: UUID, instance_id: str, day: date
    ) -> bool:
        """Drop an instance from one day's plan.

        The instance itself is deleted once no other day assigns it. Returns
        whether the instance was deleted.
        """
        plan = self.plan_repository.list_day_plans(user_id, [day]).get(day)
        if plan is None:
            return False
        remaining = [
            assignment
            for assignment in plan.meal_assignments
            if assignment.instance_id != instance_id
        ]
        self.plan_repository.save_day_plan(
            user_id, replace(plan, meal_assignments=remaining)
        )
        other_days = [
            used_day
            for used_day in self.plan_repository.days_using_instance(
                user_id, instance_id
            )
            if used_day != day
        ]
        if other_days:
            return False
        self.meal_repository.delete_instance(user_id, instance_id)
        _logger.info(
            "Meal instance deleted: user=%s instance=%s", user_id, instance_id
        )
        return True

    def save_instance_as_template(
        self, user_id: UUID, instance_id: str
    ) -> Meal | None:
        """Store a copy of a planned instance as a new library template."""
        instance = self.meal_repository.get_instances(user_id, [instance_id]).get(
            instance_id
        )
        if instance is None:
            return None
        return self.meal_repository.save_template(
            user_id,
            Meal(
                id=_new_id(),
                name=f"{instance.name}{TEMPLATE_SUFFIX}",
                ingredients=list(instance.ingredients),
                created_at=_now_ms(),
            ),
        )

    def _day_plan(self, user_id: UUID, day: date) -> DayPlan:
        plan = self.plan_repository.list_day_plans(user_id, [day]).get(day)
        return plan if plan is not None else DayPlan(day=day)

    def _week_meals(self, user_id: UUID, day: date) -> list[tuple[date, list[Meal]]]:
        days = week_dates(week_start(day))
        plans = self.plan_repository.list_day_plans(user_id, days)
        instance_ids: list[str] = []
        for plan in plans.values():
            for assignment in plan.meal_assignments:
                if assignment.instance_id not in instance_ids:
                    instance_ids.append(assignment.instance_id)
        instances = (
            self.meal_repository.get_instances(user_id, instance_ids)
            if instance_ids
            else {}
        )

        result: list[tuple[date, list[Meal]]] = []
        for plan_day in days:
            plan = plans.get(plan_day)
            day_meals: list[Meal] = []
            if plan is not None:
                for assignment in plan.meal_assignments:
                    meal = instances.get(assignment.instance_id)
                    if meal is None:
                        _logger.debug(
                            "Skipping missing meal instance: user=%s day=%s id=%s",
                            user_id,
                            plan_day.isoformat(),
                            assignment.instance_id,
                        )
                        continue
                    day_meals.append(meal)
            result.append((plan_day, day_meals))
        return result


def _new_id() -> str:
    return str(uuid4())


def _now_ms() -> int:
    return int(datetime.now(tz=UTC).timestamp() * 1000)


def _with_identity(meal: Meal) -> Meal:
    if meal.id and meal.created_at is not None:
        return meal
    return replace(
        meal,
        id=meal.id or _new_id(),
        created_at=meal.created_at if meal.created_at is not None else _now_ms(),
    )
