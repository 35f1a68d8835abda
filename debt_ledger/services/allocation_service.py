"""
Oldest-first payment distribution.

Core algorithm:
1. Sort entries by order creation time (stable, oldest first)
2. Walk them, giving each min(remaining payment, its payable balance)
3. Hand the entries back in the caller's order
4. Whatever is left after the walk is not assigned anywhere
"""

from typing import List, Sequence, Tuple

from debt_ledger.schemas.payment import OrderPaymentEntry
from debt_ledger.utils.money import round2


def _cleared(entry: OrderPaymentEntry) -> OrderPaymentEntry:
    return entry.model_copy(update={"requested_amount": 0.0, "selected": False})


def _walk(total_amount: float, entries: Sequence[OrderPaymentEntry]) -> Tuple[List[OrderPaymentEntry], float]:
    """Allocate greedily; returns entries in input order and the leftover."""
    if total_amount is None or total_amount <= 0:
        return [_cleared(entry) for entry in entries], 0.0

    # sorted() is stable, so equal timestamps keep their input order
    by_age = sorted(range(len(entries)), key=lambda i: entries[i].order.created_at)

    remaining = round2(total_amount)
    allocated = [None] * len(entries)

    for i in by_age:
        entry = entries[i]
        if remaining <= 0:
            allocated[i] = _cleared(entry)
            continue

        allocation = round2(min(remaining, entry.payable_balance))
        remaining = round2(remaining - allocation)
        allocated[i] = entry.model_copy(update={
            "requested_amount": allocation,
            "selected": allocation > 0,
        })

    return allocated, max(0.0, remaining)


def distribute(total_amount: float, entries: Sequence[OrderPaymentEntry]) -> List[OrderPaymentEntry]:
    """
    Spread `total_amount` over `entries`, oldest order first.

    Never allocates more than an order's remaining balance. Excess payment
    is dropped; callers wanting to cap input should bound it by the total
    pending amount first.
    """
    allocated, _ = _walk(total_amount, entries)
    return allocated


def unallocated_amount(total_amount: float, entries: Sequence[OrderPaymentEntry]) -> float:
    """The part of `total_amount` that distribute() would leave unassigned."""
    _, leftover = _walk(total_amount, entries)
    return leftover
