import pytest
from unittest.mock import patch

from debt_ledger.services.balance_service import BalanceService, compute_balance


def test_compute_balance_orders_and_adjustments(make_order, make_adjustment):
    orders = [
        make_order("o1", total=100, paid=40, status="pending"),
        make_order("o2", total=50, paid=50, status="paid"),
    ]
    adjustments = [
        make_adjustment("debit", 20),
        make_adjustment("credit", 5),
    ]

    balance = compute_balance(orders, adjustments, "hotel-1")

    assert balance.order_debt == 60.0
    assert balance.adjustment_balance == 15.0
    assert balance.total_owed == 75.0
    assert balance.order_count == 1
    assert balance.adjustment_count == 2


def test_compute_balance_empty_inputs():
    balance = compute_balance([], [], "hotel-1")
    assert balance.order_debt == 0.0
    assert balance.adjustment_balance == 0.0
    assert balance.total_owed == 0.0


def test_compute_balance_ignores_other_customers(make_order, make_adjustment):
    orders = [
        make_order("o1", total=100, customer_id="hotel-1"),
        make_order("o2", total=999, customer_id="hotel-2"),
    ]
    adjustments = [make_adjustment("debit", 500, customer_id="hotel-2")]

    balance = compute_balance(orders, adjustments, "hotel-1")

    assert balance.order_debt == 100.0
    assert balance.adjustment_balance == 0.0


def test_compute_balance_paid_residual_is_excluded(make_order):
    # Marked paid while 10 is still open: status wins
    orders = [make_order("o1", total=100, paid=90, status="paid")]

    assert compute_balance(orders, [], "hotel-1").order_debt == 0.0


def test_compute_balance_overpayment_nets_out(make_order):
    orders = [
        make_order("o1", total=100, paid=0),
        make_order("o2", total=50, paid=80, status="partially_paid"),
    ]

    assert compute_balance(orders, [], "hotel-1").order_debt == 70.0


def test_compute_balance_rounds_every_step(make_order):
    orders = [make_order(f"o{i}", total=0.1) for i in range(3)]

    balance = compute_balance(orders, [], "hotel-1")

    assert balance.order_debt == 0.3
    assert balance.total_owed == 0.3


def test_compute_balance_credits_can_go_negative(make_adjustment):
    balance = compute_balance([], [make_adjustment("credit", 25.5)], "hotel-1")

    assert balance.adjustment_balance == -25.5
    assert balance.total_owed == -25.5


@pytest.mark.asyncio
async def test_get_customer_balance(mock_db, make_cursor):
    mock_db.orders.find.return_value = make_cursor([
        {"_id": "o1", "customer_id": "hotel-1", "total_amount": 300, "paid_amount": 100,
         "payment_status": "partially_paid"},
        {"_id": "o2", "customer_id": "hotel-1", "total_amount": 80, "paid_amount": 80,
         "payment_status": "paid"},
    ])
    mock_db.debt_adjustments.find.return_value = make_cursor([
        {"_id": "a1", "customer_id": "hotel-1", "type": "debit", "amount": 40, "reason": "Old dues"},
    ])

    with patch("debt_ledger.services.balance_service.get_database", return_value=mock_db):
        balance = await BalanceService.get_customer_balance("hotel-1")

    assert balance.customer_id == "hotel-1"
    assert balance.order_debt == 200.0
    assert balance.adjustment_balance == 40.0
    assert balance.total_owed == 240.0
    mock_db.orders.find.assert_called_once_with({"customer_id": "hotel-1"})
