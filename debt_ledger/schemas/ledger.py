from typing import Literal
from pydantic import BaseModel


class CustomerBalanceResponse(BaseModel):
    """What a customer owes: unpaid orders plus manual adjustments."""
    customer_id: str
    order_debt: float = 0.0
    adjustment_balance: float = 0.0
    total_owed: float = 0.0
    order_count: int = 0
    adjustment_count: int = 0


class AdjustmentCreate(BaseModel):
    """Request body to add a manual debit or credit."""
    type: Literal["debit", "credit"]
    amount: float
    reason: str
    adjusted_by: str = ""
