"""
Currency arithmetic helpers.

Every monetary sum in the ledger goes through round2() after each
accumulation step, not only at the end, so that summation order cannot
leak floating point drift into displayed or allocated amounts.
"""
import math
from typing import Any

from debt_ledger.core.config import settings

# Nudges values like 1.005 (stored as 1.00499...) onto the decimal side.
EPSILON = 1e-9

PENDING = "pending"
PARTIALLY_PAID = "partially_paid"
PAID = "paid"


def round2(value: float) -> float:
    """Round to 2 decimal places; halves round up, towards +inf."""
    if value is None or not math.isfinite(value):
        return 0.0
    return math.floor(value * 100 + EPSILON + 0.5) / 100


def to_amount(value: Any) -> float:
    """Coerce loosely typed input to a rounded amount; junk becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return round2(number)


def add_amounts(a: float, b: float) -> float:
    return round2(a + b)


def subtract_amounts(a: float, b: float) -> float:
    return round2(a - b)


def sum_amounts(values) -> float:
    """Sum amounts, rounding after every step."""
    total = 0.0
    for value in values:
        total = round2(total + value)
    return total


def order_balance(total_amount: float, paid_amount: float) -> float:
    """Remaining balance of an order; may be negative for overpaid orders."""
    return subtract_amounts(total_amount or 0, paid_amount or 0)


def determine_payment_status(total_amount: float, paid_amount: float) -> str:
    total = round2(total_amount or 0)
    paid = round2(paid_amount or 0)

    if total <= 0:
        return PENDING
    if paid <= 0:
        return PENDING
    if paid >= total:
        return PAID
    return PARTIALLY_PAID


def format_currency(amount: float) -> str:
    """Format for display, e.g. 1234.5 -> '₹1234.50'."""
    return f"{settings.CURRENCY_SYMBOL}{round2(amount):.2f}"
