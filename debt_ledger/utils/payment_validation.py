"""Payment and adjustment validation utilities."""
import math
from typing import Any

from debt_ledger.core.config import settings
from debt_ledger.utils.money import format_currency, round2


class PaymentValidationError(Exception):
    """Custom exception for payment and adjustment validation errors."""
    pass


def validate_amount(amount: Any) -> float:
    """
    Validate a monetary amount and return it as a float.

    Rules:
    - must be a number (NaN rejected)
    - must be non-negative
    - must not exceed MAX_PAYMENT_AMOUNT
    - at most two decimal places
    """
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise PaymentValidationError("Amount must be a valid number")

    if math.isnan(value) or math.isinf(value):
        raise PaymentValidationError("Amount must be a valid number")

    if value < 0:
        raise PaymentValidationError("Amount cannot be negative")

    if value > settings.MAX_PAYMENT_AMOUNT:
        raise PaymentValidationError(
            f"Amount cannot exceed {format_currency(settings.MAX_PAYMENT_AMOUNT)}"
        )

    if abs(round2(value) - value) > 1e-9:
        raise PaymentValidationError("Amount can only have up to 2 decimal places")

    return value


def validate_payment_amount(amount: Any) -> float:
    """Validate a payment: same as validate_amount, but zero is rejected too."""
    value = validate_amount(amount)
    if value <= 0:
        raise PaymentValidationError(
            f"Payment amount must be greater than {format_currency(0)}"
        )
    return value
