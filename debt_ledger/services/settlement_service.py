import logging
import uuid
from typing import List, Optional, Protocol

from debt_ledger.db.session import get_database
from debt_ledger.repositories.ledger_repo import LedgerRepository
from debt_ledger.schemas.payment import FailedAllocation, PaymentAllocation, PaymentResult, SettlementResult
from debt_ledger.utils.money import round2
from debt_ledger.utils.payment_validation import PaymentValidationError

logger = logging.getLogger(__name__)


class PaymentRecorder(Protocol):
    async def record_payment(
        self,
        customer_id: str,
        amount: float,
        description: str,
        target_order_id: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> PaymentResult: ...


class SettlementService:
    @staticmethod
    async def submit(
        customer_id: str,
        allocations: List[PaymentAllocation],
        recorder: Optional[PaymentRecorder] = None,
        batch_id: Optional[str] = None,
    ) -> SettlementResult:
        """
        Record a batch of per-order payments, one call per allocation, in order.

        The batch is not atomic: a failing order is reported in `failed` and
        the remaining orders are still attempted. applied_amount and
        remaining_credit add up what the recorder reports, which is less than
        allocated when an order was paid down in the meantime. Every call
        carries the key "<batch_id>:<order_id>" so replaying the batch does
        not pay twice.
        """
        if not allocations:
            raise PaymentValidationError("No orders selected: nothing to submit")

        if recorder is None:
            recorder = LedgerRepository(await get_database())

        result = SettlementResult(
            batch_id=batch_id or uuid.uuid4().hex,
            customer_id=str(customer_id),
        )

        for allocation in allocations:
            try:
                payment = await recorder.record_payment(
                    result.customer_id,
                    allocation.amount,
                    allocation.description,
                    target_order_id=allocation.order_id,
                    idempotency_key=f"{result.batch_id}:{allocation.order_id}",
                )
            except Exception as exc:
                logger.warning(
                    "Payment of %.2f to order %s failed: %s",
                    allocation.amount, allocation.order_id, exc,
                )
                result.failed.append(FailedAllocation(allocation=allocation, error=str(exc)))
                continue

            result.succeeded.append(allocation)
            result.applied_amount = round2(result.applied_amount + payment.applied_amount)
            if payment.remaining_credit > 0:
                # The order owed less than was allocated to it
                logger.warning(
                    "Order %s took %.2f of %.2f; %.2f left as credit",
                    allocation.order_id, payment.applied_amount,
                    allocation.amount, payment.remaining_credit,
                )
                result.remaining_credit = round2(result.remaining_credit + payment.remaining_credit)

        logger.info(
            "Batch %s for customer %s: %d succeeded, %d failed, %.2f applied, %.2f credit",
            result.batch_id, result.customer_id, len(result.succeeded),
            len(result.failed), result.applied_amount, result.remaining_credit,
        )
        return result

    @staticmethod
    async def retry_failed(
        result: SettlementResult,
        recorder: Optional[PaymentRecorder] = None,
    ) -> SettlementResult:
        """Replay only the failed allocations of a batch, under the same batch id."""
        if not result.failed:
            return result
        retried = await SettlementService.submit(
            result.customer_id,
            [failure.allocation for failure in result.failed],
            recorder=recorder,
            batch_id=result.batch_id,
        )
        return SettlementResult(
            batch_id=result.batch_id,
            customer_id=result.customer_id,
            succeeded=result.succeeded + retried.succeeded,
            failed=retried.failed,
            applied_amount=round2(result.applied_amount + retried.applied_amount),
            remaining_credit=round2(result.remaining_credit + retried.remaining_credit),
        )
