"""Supabase implementation for meal templates and instances."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.meals import IngredientLine, Meal
from meal_planner.services.planner import MealRepository

_TEMPLATES_TABLE = "meal_templates"
_INSTANCES_TABLE = "meal_instances"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase-backed repository for the meal library and planned meals."""

    client: Client

    def list_templates(self, user_id: UUID) -> list[Meal]:
        """Return the user's meal library ordered by creation time."""
        response = (
            self.client.table(_TEMPLATES_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at")
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def get_instances(self, user_id: UUID, instance_ids: list[str]) -> dict[str, Meal]:
        """Return meal instances keyed by id."""
        if not instance_ids:
            return {}
        response = (
            self.client.table(_INSTANCES_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .in_("id", instance_ids)
            .execute()
        )
        meals = [_parse_meal(row) for row in response.data or []]
        return {meal.id: meal for meal in meals}

    def save_template(self, user_id: UUID, meal: Meal) -> Meal:
        """Create or replace a meal template."""
        return self._upsert(_TEMPLATES_TABLE, user_id, meal)

    def save_instance(self, user_id: UUID, meal: Meal) -> Meal:
        """Create or replace a meal instance."""
        return self._upsert(_INSTANCES_TABLE, user_id, meal)

    def delete_template(self, user_id: UUID, template_id: str) -> None:
        """Remove a meal template."""
        self.client.table(_TEMPLATES_TABLE).delete().eq("user_id", str(user_id)).eq(
            "id", template_id
        ).execute()

    def delete_instance(self, user_id: UUID, instance_id: str) -> None:
        """Remove a meal instance."""
        self.client.table(_INSTANCES_TABLE).delete().eq("user_id", str(user_id)).eq(
            "id", instance_id
        ).execute()

    def unlink_template(self, user_id: UUID, template_id: str) -> None:
        """Clear ``template_id`` on instances created from the template."""
        self.client.table(_INSTANCES_TABLE).update({"template_id": None}).eq(
            "user_id", str(user_id)
        ).eq("template_id", template_id).execute()

    def _upsert(self, table: str, user_id: UUID, meal: Meal) -> Meal:
        payload: dict[str, object] = {
            "id": meal.id,
            "user_id": str(user_id),
            "name": meal.name,
            "ingredients": [_serialize_line(line) for line in meal.ingredients],
            "created_at": meal.created_at,
        }
        if table == _INSTANCES_TABLE:
            payload["template_id"] = meal.template_id
        response = self.client.table(table).upsert(payload).execute()
        if not response.data:
            raise RuntimeError(f"Failed to save meal {meal.id}")
        return _parse_meal(response.data[0])


def _serialize_line(line: IngredientLine) -> dict[str, object]:
    return {
        "id": line.id,
        "name": line.name,
        "grams": line.grams,
        "calories_per_100g": line.calories_per_100g,
        "protein_per_100g": line.protein_per_100g,
        "fat_per_100g": line.fat_per_100g,
        "carbs_per_100g": line.carbs_per_100g,
        "source": line.source,
    }


def _parse_line(row: dict[str, object]) -> IngredientLine:
    return IngredientLine(
        id=row.get("id"),
        name=str(row.get("name") or ""),
        grams=row.get("grams"),
        calories_per_100g=row.get("calories_per_100g"),
        protein_per_100g=row.get("protein_per_100g"),
        fat_per_100g=row.get("fat_per_100g"),
        carbs_per_100g=row.get("carbs_per_100g"),
        source=row.get("source"),
    )


def _parse_meal(row: dict[str, object]) -> Meal:
    """Parse a meal row into a domain model."""
    created_at = row.get("created_at")
    return Meal(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        ingredients=[
            _parse_line(item)
            for item in row.get("ingredients") or []
            if isinstance(item, dict)
        ],
        template_id=row.get("template_id"),
        created_at=int(created_at) if isinstance(created_at, int | float) else None,
    )
