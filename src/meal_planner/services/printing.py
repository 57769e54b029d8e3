"""Printable renditions of a shopping list."""

from html import escape

from meal_planner.domain.shopping import ShoppingListItem
from meal_planner.services.shopping import AS_NEEDED, format_quantity

_PRINT_STYLE = (
    "body{font-family:sans-serif;margin:20px}h1{text-align:center}"
    "ul{list-style-type:none;padding:0}"
    "li{margin-bottom:10px;padding:8px;border-bottom:1px solid #eee}"
    ".checked{text-decoration:line-through;color:#888}"
    ".quantity{font-style:italic;color:#555;margin-left:5px}"
    ".meals{font-size:0.9em;color:#777;margin-left:10px}"
)


def render_text(
    items: list[ShoppingListItem],
    *,
    title: str = "Shopping List",
    decimals: int = 1,
    placeholder: str = AS_NEEDED,
) -> str:
    """Render the list as plain text, one item per line."""
    lines = [title, ""]
    if not items:
        lines.append("Shopping list is empty.")
    for item in items:
        mark = "x" if item.checked else " "
        quantity = format_quantity(item.quantity, item.unit, decimals, placeholder)
        lines.append(
            f"[{mark}] {item.ingredient_name} - {quantity}"
            f" (For: {', '.join(item.meal_names)})"
        )
    return "\n".join(lines) + "\n"


def render_html(
    items: list[ShoppingListItem],
    *,
    title: str = "Shopping List",
    decimals: int = 1,
    placeholder: str = AS_NEEDED,
) -> str:
    """Render the list as a standalone HTML page for printing."""
    rows = []
    for item in items:
        css_class = "checked" if item.checked else ""
        quantity = format_quantity(item.quantity, item.unit, decimals, placeholder)
        meals = ", ".join(item.meal_names)
        rows.append(
            f'<li class="{css_class}"><strong>{escape(item.ingredient_name)}</strong>'
            f'<span class="quantity">{escape(quantity)}</span>'
            f'<span class="meals">(For: {escape(meals)})</span></li>'
        )
    safe_title = escape(title)
    return (
        f"<html><head><title>{safe_title}</title><style>{_PRINT_STYLE}</style></head>"
        f"<body><h1>{safe_title}</h1><ul>{''.join(rows)}</ul></body></html>"
    )
