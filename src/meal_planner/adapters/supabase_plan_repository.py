"""Supabase implementation for day plans."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from meal_planner.domain.meals import DayPlan, MealAssignment
from meal_planner.services.planner import PlanRepository


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase-backed repository keyed by user and calendar day."""

    client: Client

    def list_day_plans(self, user_id: UUID, days: list[date]) -> dict[date, DayPlan]:
        """Return stored plans for the given days."""
        if not days:
            return {}
        response = (
            self.client.table("day_plans")
            .select("plan_date, meal_assignments")
            .eq("user_id", str(user_id))
            .in_("plan_date", [day.isoformat() for day in days])
            .execute()
        )
        plans = [_parse_plan(row) for row in response.data or []]
        return {plan.day: plan for plan in plans}

    def save_day_plan(self, user_id: UUID, plan: DayPlan) -> None:
        """Create or replace the plan for one day."""
        self.client.table("day_plans").upsert(
            {
                "user_id": str(user_id),
                "plan_date": plan.day.isoformat(),
                "meal_assignments": [
                    {
                        "instance_id": assignment.instance_id,
                        "meal_name": assignment.meal_name,
                    }
                    for assignment in plan.meal_assignments
                ],
            },
            on_conflict="user_id,plan_date",
        ).execute()

    def days_using_instance(self, user_id: UUID, instance_id: str) -> list[date]:
        """Return the days whose assignments reference the instance."""
        response = (
            self.client.table("day_plans")
            .select("plan_date, meal_assignments")
            .eq("user_id", str(user_id))
            .contains("meal_assignments", [{"instance_id": instance_id}])
            .execute()
        )
        return [_parse_plan(row).day for row in response.data or []]


def _parse_plan(row: dict[str, object]) -> DayPlan:
    assignments = [
        MealAssignment(
            instance_id=str(item["instance_id"]),
            meal_name=str(item.get("meal_name") or ""),
        )
        for item in row.get("meal_assignments") or []
        if isinstance(item, dict) and item.get("instance_id")
    ]
    return DayPlan(
        day=date.fromisoformat(str(row["plan_date"])),
        meal_assignments=assignments,
    )
