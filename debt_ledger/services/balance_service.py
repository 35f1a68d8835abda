import logging
from typing import Iterable

from debt_ledger.db.session import get_database
from debt_ledger.models.adjustment import DebtAdjustment
from debt_ledger.models.order import Order
from debt_ledger.repositories.ledger_repo import LedgerRepository
from debt_ledger.schemas.ledger import CustomerBalanceResponse
from debt_ledger.utils.money import round2

logger = logging.getLogger(__name__)


def compute_balance(
    orders: Iterable[Order],
    adjustments: Iterable[DebtAdjustment],
    customer_id: str,
) -> CustomerBalanceResponse:
    """
    Derive a customer's outstanding balance.

    - Orders marked paid are skipped, even if a residual remains.
    - Overpaid orders contribute a negative term; order_debt is not floored.
    - Debits add to the balance, credits subtract from it.
    """
    customer_id = str(customer_id)

    # 1. Unpaid orders
    order_debt = 0.0
    order_count = 0
    for order in orders:
        if order.customer_id != customer_id or not order.is_unpaid():
            continue
        order_debt = round2(order_debt + order.remaining_balance())
        order_count += 1

    # 2. Manual adjustments
    adjustment_balance = 0.0
    adjustment_count = 0
    for adjustment in adjustments:
        if adjustment.customer_id != customer_id:
            continue
        adjustment_balance = round2(adjustment_balance + adjustment.signed_amount())
        adjustment_count += 1

    return CustomerBalanceResponse(
        customer_id=customer_id,
        order_debt=order_debt,
        adjustment_balance=adjustment_balance,
        total_owed=round2(order_debt + adjustment_balance),
        order_count=order_count,
        adjustment_count=adjustment_count,
    )


class BalanceService:
    @staticmethod
    async def get_customer_balance(customer_id: str) -> CustomerBalanceResponse:
        db = await get_database()
        repo = LedgerRepository(db)

        orders = await repo.get_orders_by_customer(customer_id)
        adjustments = await repo.get_adjustments(customer_id)

        balance = compute_balance(orders, adjustments, customer_id)
        logger.debug(
            "Balance for customer %s: orders=%.2f adjustments=%.2f total=%.2f",
            customer_id, balance.order_debt, balance.adjustment_balance, balance.total_owed,
        )
        return balance
