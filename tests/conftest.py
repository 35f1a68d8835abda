import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from debt_ledger.models.adjustment import DebtAdjustment
from debt_ledger.models.order import Order, OrderItem

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db():
    """Fake motor database: collections with async write/read methods."""
    db = MagicMock()
    for name in ("orders", "debt_adjustments", "transactions"):
        collection = getattr(db, name)
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock()
        collection.find_one = AsyncMock(return_value=None)
    return db


@pytest.fixture
def make_cursor():
    """Cursor whose sort() chains and to_list() returns `docs`."""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        return cursor
    return _make


@pytest.fixture
def make_order():
    """Order factory; `day` offsets created_at from a fixed base time."""
    def _make(order_id, total, paid=0.0, day=0, status="pending", customer_id="hotel-1", items=None):
        return Order(
            id=order_id,
            customer_id=customer_id,
            items=items if items is not None else [OrderItem(type="chicken", quantity=5, rate=200)],
            total_amount=total,
            paid_amount=paid,
            payment_status=status,
            created_at=BASE_TIME + timedelta(days=day),
        )
    return _make


@pytest.fixture
def make_adjustment():
    def _make(adj_type, amount, customer_id="hotel-1", reason="Manual entry"):
        return DebtAdjustment(
            customer_id=customer_id,
            type=adj_type,
            amount=amount,
            reason=reason,
        )
    return _make
