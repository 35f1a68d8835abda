"""
Order model - read-only input to balance and allocation logic.

Design principles:
- Stored payment_status decides whether an order counts as unpaid
- remaining_balance() is the numeric quantity used for allocation
- Malformed numbers coalesce to 0 here, once, instead of inside the algorithms
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator

from debt_ledger.models.base import LedgerModel
from debt_ledger.utils.money import PENDING, PAID, order_balance, to_amount


class OrderItem(BaseModel):
    type: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    details: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        return value or ""

    @field_validator("quantity", "rate", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float:
        return to_amount(value)


class Order(LedgerModel):
    """
    A customer's order.

    Invariants (not enforced, tolerated when violated):
    - paid_amount <= total_amount
    - payment_status agrees with paid_amount vs total_amount
    """
    customer_id: str
    items: List[OrderItem] = Field(default_factory=list)

    total_amount: float = 0.0
    paid_amount: float = 0.0

    payment_status: str = PENDING  # pending | partially_paid | paid
    order_status: str = "confirmed"

    @field_validator("customer_id", mode="before")
    @classmethod
    def _coerce_customer_id(cls, value: Any) -> str:
        # None stays None so a missing customer is rejected
        return value if value is None else str(value)

    @field_validator("total_amount", "paid_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> list:
        return value or []

    def remaining_balance(self) -> float:
        """What is still owed on this order (negative if overpaid)."""
        return order_balance(self.total_amount, self.paid_amount)

    def is_unpaid(self) -> bool:
        return self.payment_status != PAID
