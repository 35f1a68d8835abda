"""Human-readable labels for orders, used in payment descriptions."""
from typing import List

ITEM_TYPES = [
    {"value": "chicken", "label": "Chicken"},
    {"value": "eeral", "label": "Eeral"},
    {"value": "leg-piece", "label": "Leg Piece"},
    {"value": "goat", "label": "Goat"},
    {"value": "kadai", "label": "Kadai"},
    {"value": "beef", "label": "Beef"},
    {"value": "kodal", "label": "Kodal"},
    {"value": "chops", "label": "Chops"},
    {"value": "boneless", "label": "Boneless"},
    {"value": "order", "label": "Order"},
]

_LABELS = {item["value"]: item["label"] for item in ITEM_TYPES}


def get_item_label(value: str) -> str:
    """Catalogue label, or the raw value capitalised with its first '-' as a space."""
    if value in _LABELS:
        return _LABELS[value]
    if not value:
        return ""
    return value[0].upper() + value[1:].replace("-", " ", 1)


def _format_quantity(quantity: float) -> str:
    # 5.0 -> "5", 2.5 -> "2.5"
    return f"{quantity:g}"


def format_order_items(items: List, limit: int = 2) -> str:
    """
    Summarise the first `limit` items, e.g. "5kg Chicken, 2.5kg Leg Piece...".
    """
    if not items:
        return "No items"
    summary = ", ".join(
        f"{_format_quantity(item.quantity)}kg {get_item_label(item.type)}"
        for item in items[:limit]
    )
    if len(items) > limit:
        summary += "..."
    return summary


def describe_order_payment(order) -> str:
    """Description attached to a per-order payment transaction."""
    return f"Payment for order #{order.id[:8]} - {format_order_items(order.items)}"
