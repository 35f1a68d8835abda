from typing import List, Optional
from pydantic import BaseModel, Field

from debt_ledger.models.order import Order
from debt_ledger.utils.money import round2


class OrderPaymentEntry(BaseModel):
    """One order inside a payment session."""
    order: Order
    requested_amount: float = 0.0
    remaining_balance: float = 0.0
    selected: bool = False

    @classmethod
    def from_order(cls, order: Order) -> "OrderPaymentEntry":
        return cls(order=order, remaining_balance=order.remaining_balance())

    @property
    def order_id(self) -> str:
        return self.order.id

    @property
    def payable_balance(self) -> float:
        """Upper bound for any allocation to this order."""
        return max(0.0, round2(self.remaining_balance))


class PaymentAllocation(BaseModel):
    """Request body handed to the payment recorder, one per order."""
    order_id: str
    amount: float
    description: str


class PaymentResult(BaseModel):
    applied_amount: float = 0.0
    remaining_credit: float = 0.0
    updated_orders: List[str] = Field(default_factory=list)
    transaction_id: Optional[str] = None


class FailedAllocation(BaseModel):
    allocation: PaymentAllocation
    error: str


class SettlementResult(BaseModel):
    batch_id: str
    customer_id: str
    succeeded: List[PaymentAllocation] = Field(default_factory=list)
    failed: List[FailedAllocation] = Field(default_factory=list)
    applied_amount: float = 0.0
    remaining_credit: float = 0.0

    @property
    def is_complete(self) -> bool:
        return not self.failed
