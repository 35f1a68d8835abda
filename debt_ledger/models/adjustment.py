"""
Debt adjustment - a manual charge or credit not tied to any order.

debit  -> customer owes more
credit -> customer owes less
"""

from typing import Any, Literal
from pydantic import field_validator

from debt_ledger.core.config import settings
from debt_ledger.models.base import LedgerModel
from debt_ledger.utils.money import to_amount

DEBIT = "debit"
CREDIT = "credit"


class DebtAdjustment(LedgerModel):
    customer_id: str
    type: Literal["debit", "credit"]
    amount: float = 0.0
    reason: str = ""
    adjusted_by: str = settings.DEFAULT_ADJUSTED_BY

    @field_validator("customer_id", mode="before")
    @classmethod
    def _coerce_customer_id(cls, value: Any) -> str:
        # None stays None so a missing customer is rejected
        return value if value is None else str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return to_amount(value)

    @field_validator("adjusted_by", mode="before")
    @classmethod
    def _default_adjusted_by(cls, value: Any) -> str:
        return value or settings.DEFAULT_ADJUSTED_BY

    def signed_amount(self) -> float:
        """Contribution to the customer's balance."""
        return self.amount if self.type == DEBIT else -self.amount
