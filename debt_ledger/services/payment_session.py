"""
PaymentSession - working state while a payment is being split across orders.

A session is opened for one customer, holds one entry per unpaid order
(oldest first) and is discarded after submit() or when the caller is done.

Two ways to fill it:
- enter a total and let it be distributed oldest-first
- pick orders and type per-order amounts by hand

Once the user has hand-picked an order with a non-zero amount, changing the
total no longer redistributes; only a total of 0 clears everything. With
auto_redistribute off the total never redistributes at all.
"""

import logging
from typing import Iterable, List, Optional

from debt_ledger.core.config import settings
from debt_ledger.models.order import Order
from debt_ledger.schemas.payment import OrderPaymentEntry, PaymentAllocation
from debt_ledger.services.allocation_service import distribute
from debt_ledger.utils.money import round2, sum_amounts, to_amount
from debt_ledger.utils.order_format import describe_order_payment
from debt_ledger.utils.payment_validation import PaymentValidationError

logger = logging.getLogger(__name__)


class PaymentSession:
    def __init__(
        self,
        customer_id: str,
        orders: Iterable[Order],
        auto_redistribute: Optional[bool] = None,
        cap_to_pending: Optional[bool] = None,
    ):
        self.customer_id = str(customer_id)
        self.auto_redistribute = (
            settings.AUTO_REDISTRIBUTE if auto_redistribute is None else auto_redistribute
        )
        self.cap_to_pending = (
            settings.CAP_TOTAL_TO_PENDING if cap_to_pending is None else cap_to_pending
        )

        unpaid = [
            order for order in orders
            if order is not None and order.customer_id == self.customer_id and order.is_unpaid()
        ]
        unpaid.sort(key=lambda order: order.created_at)
        if any(not order.id for order in unpaid):
            raise PaymentValidationError("Every order in a payment needs an id")

        self.entries: List[OrderPaymentEntry] = [OrderPaymentEntry.from_order(o) for o in unpaid]
        # What the user typed into the total field (after capping).
        self.entered_amount: float = 0.0

    # ===== TOTALS =====

    @property
    def total_payment_amount(self) -> float:
        """Sum of amounts on selected entries."""
        return sum_amounts(e.requested_amount for e in self.entries if e.selected)

    @property
    def allocated_amount(self) -> float:
        return sum_amounts(e.requested_amount for e in self.entries)

    @property
    def total_pending(self) -> float:
        return sum_amounts(e.remaining_balance for e in self.entries)

    @property
    def remaining_after_payment(self) -> float:
        return round2(self.total_pending - self.allocated_amount)

    def has_manual_selections(self) -> bool:
        return any(e.selected and e.requested_amount > 0 for e in self.entries)

    # ===== MUTATIONS =====

    def toggle_selection(self, order_id: str, selected: bool) -> None:
        """
        Select or unselect one order.

        Unselecting clears its amount. Selecting keeps whatever amount the
        entry already had, which may be 0 until the user types one.
        """
        index = self._index_of(order_id)
        entry = self.entries[index]
        self.entries[index] = entry.model_copy(update={
            "selected": selected,
            "requested_amount": entry.requested_amount if selected else 0.0,
        })

    def set_order_amount(self, order_id: str, amount) -> None:
        """Set one order's amount, clamped to [0, balance]; selection follows the amount."""
        index = self._index_of(order_id)
        entry = self.entries[index]
        capped = round2(min(max(to_amount(amount), 0.0), entry.payable_balance))
        self.entries[index] = entry.model_copy(update={
            "requested_amount": capped,
            "selected": capped > 0,
        })

    def pay_full(self, order_id: str) -> None:
        entry = self.entries[self._index_of(order_id)]
        self.set_order_amount(order_id, entry.remaining_balance)

    def set_total_amount(self, amount) -> None:
        """
        Record a new total and redistribute when allowed.

        0 always clears every entry. A non-zero total redistributes only
        when auto_redistribute is on and no order has been hand-picked.
        """
        value = max(to_amount(amount), 0.0)
        if self.cap_to_pending:
            value = min(value, max(self.total_pending, 0.0))
        self.entered_amount = value

        if value == 0:
            self._clear()
            return

        if self.auto_redistribute and not self.has_manual_selections():
            self.entries = distribute(value, self.entries)

    def select_all(self) -> None:
        """Distribute the entered total, or everything pending if none was entered."""
        amount = self.entered_amount or max(self.total_pending, 0.0)
        self.entered_amount = amount
        self.entries = distribute(amount, self.entries)

    def unselect_all(self) -> None:
        self.entered_amount = 0.0
        self._clear()

    def toggle_all(self) -> None:
        if self.entries and all(e.selected for e in self.entries):
            self.unselect_all()
        else:
            self.select_all()

    # ===== SUBMISSION =====

    def submit(self) -> List[PaymentAllocation]:
        """
        Build one allocation per selected order with a positive amount.

        Raises PaymentValidationError if nothing is selected or the
        allocated total is not positive.
        """
        allocations = [
            PaymentAllocation(
                order_id=entry.order_id,
                amount=entry.requested_amount,
                description=describe_order_payment(entry.order),
            )
            for entry in self.entries
            if entry.selected and entry.requested_amount > 0
        ]

        if not allocations:
            raise PaymentValidationError(
                "No orders selected: select at least one order to apply payment to"
            )

        if self.allocated_amount <= 0:
            raise PaymentValidationError("Invalid amount: enter a valid payment amount")

        logger.info(
            "Prepared %d allocation(s) totalling %.2f for customer %s",
            len(allocations), self.total_payment_amount, self.customer_id,
        )
        return allocations

    # ===== PRIVATE HELPERS =====

    def _clear(self) -> None:
        self.entries = distribute(0, self.entries)

    def _index_of(self, order_id: str) -> int:
        for i, entry in enumerate(self.entries):
            if entry.order_id == order_id:
                return i
        raise PaymentValidationError(f"Order {order_id} is not part of this payment")
