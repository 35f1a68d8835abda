"""
LedgerRepository - reads orders/adjustments and records customer payments.

Payment recording:
1. Validate the amount
2. Look up the idempotency key; an applied payment is returned as-is
3. Plan: spread the amount over the target order, or oldest-first over all unpaid orders
4. Insert the payment transaction as "pending", carrying the plan, before touching orders
5. Write each order's planned paid_amount / payment_status
6. Mark the transaction "applied"

Plans hold absolute paid_amount values, so a pending transaction left behind
by a failure in step 5 or 6 is finished by writing the same plan again.
"""
import logging
from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from debt_ledger.core.config import settings
from debt_ledger.models.adjustment import DebtAdjustment
from debt_ledger.models.order import Order
from debt_ledger.schemas.ledger import AdjustmentCreate
from debt_ledger.schemas.payment import OrderPaymentEntry, PaymentResult
from debt_ledger.services.allocation_service import distribute
from debt_ledger.utils.money import determine_payment_status, round2, sum_amounts
from debt_ledger.utils.payment_validation import PaymentValidationError, validate_payment_amount

logger = logging.getLogger(__name__)

PENDING_TRANSACTION = "pending"
APPLIED_TRANSACTION = "applied"


def _as_object_id(value: str):
    """Stored ids may be ObjectIds or plain strings; match either."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


class LedgerRepository:
    """Repository for orders, debt adjustments and payment transactions."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.orders = db.orders
        self.adjustments = db.debt_adjustments
        self.transactions = db.transactions

    async def get_orders_by_customer(self, customer_id: str) -> List[Order]:
        """All orders of a customer, oldest first."""
        docs = await self.orders.find({"customer_id": str(customer_id)}).sort("created_at", 1).to_list(None)
        return [Order(**doc) for doc in docs]

    async def get_adjustments(self, customer_id: str) -> List[DebtAdjustment]:
        """All manual debits/credits for a customer."""
        docs = await self.adjustments.find({"customer_id": str(customer_id)}).sort("created_at", 1).to_list(None)
        return [DebtAdjustment(**doc) for doc in docs]

    async def create_adjustment(self, customer_id: str, adjustment_in: AdjustmentCreate) -> DebtAdjustment:
        """
        Add a manual debit or credit.

        - amount must be a valid positive amount
        - reason is required
        - adjusted_by falls back to the configured default
        """
        amount = validate_payment_amount(adjustment_in.amount)

        reason = adjustment_in.reason.strip()
        if not reason:
            raise PaymentValidationError("Please provide a reason for this adjustment")

        adjustment = DebtAdjustment(
            customer_id=str(customer_id),
            type=adjustment_in.type,
            amount=amount,
            reason=reason,
            adjusted_by=adjustment_in.adjusted_by.strip() or settings.DEFAULT_ADJUSTED_BY,
        )
        doc = adjustment.model_dump(by_alias=True, exclude_none=True)
        result = await self.adjustments.insert_one(doc)
        adjustment.id = str(result.inserted_id)

        logger.info(
            "Recorded %s of %.2f for customer %s (%s)",
            adjustment.type, adjustment.amount, adjustment.customer_id, adjustment.adjusted_by,
        )
        return adjustment

    async def record_payment(
        self,
        customer_id: str,
        amount: float,
        description: str,
        target_order_id: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> PaymentResult:
        """
        Record a customer payment.

        With target_order_id the payment goes to that order only (capped at
        its balance); otherwise it is spread over unpaid orders oldest first.
        Anything that could not be applied is reported as remaining_credit.

        A repeated idempotency_key never pays twice: an applied payment is
        returned unchanged, a pending one is completed from its stored plan.

        Raises PaymentValidationError for an invalid amount or an unknown /
        already paid target order.
        """
        amount = validate_payment_amount(amount)
        customer_id = str(customer_id)

        if idempotency_key:
            previous = await self.transactions.find_one({"idempotency_key": idempotency_key})
            if previous:
                return await self._resume(previous)

        unpaid = [o for o in await self.get_orders_by_customer(customer_id) if o.is_unpaid()]
        if target_order_id is not None:
            unpaid = [o for o in unpaid if o.id == str(target_order_id)]
            if not unpaid:
                raise PaymentValidationError(
                    f"Order {target_order_id} not found or already paid"
                )

        entries = distribute(amount, [OrderPaymentEntry.from_order(o) for o in unpaid])

        plan = []
        for entry in entries:
            if not entry.selected:
                continue
            order = entry.order
            new_paid = round2(order.paid_amount + entry.requested_amount)
            plan.append({
                "order_id": order.id,
                "amount": entry.requested_amount,
                "paid_amount": new_paid,
                "payment_status": determine_payment_status(order.total_amount, new_paid),
            })

        applied = sum_amounts(step["amount"] for step in plan)

        doc = {
            "entity_id": customer_id,
            "entity_type": "customer",
            "type": "payment",
            "amount": amount,
            "description": description or "Payment from customer",
            "order_id": target_order_id,
            "applied_amount": applied,
            "remaining_credit": round2(amount - applied),
            "updated_orders": [step["order_id"] for step in plan],
            "plan": plan,
            "status": PENDING_TRANSACTION,
            "created_at": datetime.now(timezone.utc),
        }
        if idempotency_key:
            doc["idempotency_key"] = idempotency_key
            try:
                result = await self.transactions.insert_one(doc)
            except DuplicateKeyError:
                # Another call with the same key got there first
                previous = await self.transactions.find_one({"idempotency_key": idempotency_key})
                return await self._resume(previous)
        else:
            result = await self.transactions.insert_one(doc)
        doc["_id"] = result.inserted_id

        payment = await self._apply_plan(doc)
        logger.info(
            "Payment of %.2f from customer %s applied %.2f across %d order(s)",
            amount, customer_id, payment.applied_amount, len(payment.updated_orders),
        )
        return payment

    # ===== PRIVATE HELPERS =====

    async def _resume(self, doc: dict) -> PaymentResult:
        if doc.get("status") == PENDING_TRANSACTION:
            logger.warning(
                "Payment %s was left pending, completing it", doc.get("idempotency_key")
            )
            return await self._apply_plan(doc)
        logger.info("Payment %s already recorded, skipping", doc.get("idempotency_key"))
        return self._result_from_transaction(doc)

    async def _apply_plan(self, doc: dict) -> PaymentResult:
        """Write the planned order values, then mark the transaction applied."""
        now = datetime.now(timezone.utc)
        for step in doc.get("plan", []):
            await self.orders.update_one(
                {"_id": _as_object_id(step["order_id"])},
                {
                    "$set": {
                        "paid_amount": step["paid_amount"],
                        "payment_status": step["payment_status"],
                        "updated_at": now
                    }
                }
            )

        await self.transactions.update_one(
            {"_id": doc["_id"]},
            {"$set": {"status": APPLIED_TRANSACTION, "applied_at": now}}
        )
        return self._result_from_transaction(doc)

    @staticmethod
    def _result_from_transaction(doc: dict) -> PaymentResult:
        return PaymentResult(
            applied_amount=doc.get("applied_amount", 0.0),
            remaining_credit=doc.get("remaining_credit", 0.0),
            updated_orders=doc.get("updated_orders", []),
            transaction_id=str(doc["_id"]) if doc.get("_id") is not None else None,
        )
