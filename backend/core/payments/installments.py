"""
core/payments/installments.py

InstallmentScheduler - 2 or 3 part plan for the outstanding camp fee.

Rounding: every slot gets the even split rounded half-up to 0.01 and the last
slot absorbs the difference, so the expected amounts always add up to the
amount being split.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple
import logging

from core.payments.models import (
    CENT, DEFAULT_CONFIG, ZERO, EngineConfig, Installment, ItemStatus,
    PaymentItem, PaymentRecord, ReservationSnapshot,
)
from core.payments.normalizer import NormalizedPayments

logger = logging.getLogger(__name__)

SUPPORTED_PLANS = (2, 3)


def split_evenly(amount: Decimal, count: int) -> List[Decimal]:
    """Split an amount into count parts; the last part takes the rounding remainder"""
    if count <= 0:
        raise ValueError("Installment count must be positive")
    share = (amount / count).quantize(CENT, rounding=ROUND_HALF_UP)
    parts = [share] * (count - 1)
    parts.append(amount - share * (count - 1))
    return parts


class InstallmentScheduler:
    """
    Build the installment list of the camp item

    Example:
        >>> scheduler = InstallmentScheduler()
        >>> scheduler.schedule(snapshot, camp_item, payments, deposit_paid=Decimal("0"))
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self._config = config

    def applies(self, reservation: ReservationSnapshot, camp_item: Optional[PaymentItem]) -> bool:
        return (
            camp_item is not None
            and reservation.payment_plan in SUPPORTED_PLANS
            and camp_item.status == ItemStatus.PARTIALLY_PAID
        )

    def remaining_for_installments(self, reservation: ReservationSnapshot, camp_item: PaymentItem,
                                   deposit_paid: Decimal,
                                   deposit_amount: Optional[Decimal] = None) -> Decimal:
        if deposit_paid > ZERO:
            base = self._config.deposit_base if deposit_amount is None else deposit_amount
            return max(ZERO, reservation.total_price - base)
        return camp_item.amount

    def schedule(self, reservation: ReservationSnapshot, camp_item: Optional[PaymentItem],
                 payments: NormalizedPayments,
                 deposit_paid: Decimal = ZERO,
                 deposit_amount: Optional[Decimal] = None) -> Tuple[Installment, ...]:
        """
        Installments for the camp item, empty when no plan applies

        Args:
            reservation: reservation snapshot
            camp_item: allocated camp item
            payments: normalized effective payments
            deposit_paid: amount allocated to the deposit item
            deposit_amount: price of the deposit item, the deposit base when omitted
        """
        if not self.applies(reservation, camp_item):
            return ()

        count = reservation.payment_plan
        installments: List[Installment] = []

        if deposit_paid > ZERO:
            installments.append(self._deposit_installment(count, payments, deposit_paid, deposit_amount))

        expected = split_evenly(
            self.remaining_for_installments(reservation, camp_item, deposit_paid, deposit_amount), count
        )
        tagged = {}
        for record in payments.tagged(count):
            # first record wins when a slot was tagged twice
            tagged.setdefault(record.installment.index, record)

        for index in range(1, count + 1):
            record = tagged.get(index)
            if record is None:
                installments.append(Installment(index=index, total=count, amount=expected[index - 1], paid=False))
                continue
            installments.append(Installment(
                index=index,
                total=count,
                amount=record.amount,
                paid=True,
                paid_date=record.paid_date,
                method=record.method,
            ))

        logger.debug(
            f"Reservation {reservation.id}: {count}-part plan, "
            f"{sum(1 for i in installments if i.paid)} of {len(installments)} slots paid"
        )
        return tuple(installments)

    def _deposit_installment(self, count: int, payments: NormalizedPayments,
                             deposit_paid: Decimal,
                             deposit_amount: Optional[Decimal] = None) -> Installment:
        # a small camp fee caps the deposit item below the configured base
        base = self._config.deposit_base if deposit_amount is None else deposit_amount
        paid = deposit_paid >= base
        record = self._deposit_record(payments)
        if record is None and paid:
            record = payments.latest()
        return Installment(
            index=0,
            total=count,
            amount=base,
            paid=paid,
            paid_date=record.paid_date if record is not None else None,
            method=record.method if record is not None else None,
        )

    def _deposit_record(self, payments: NormalizedPayments) -> Optional[PaymentRecord]:
        """First untagged payment close to the deposit base"""
        low = self._config.deposit_base - self._config.deposit_match_tolerance
        high = self._config.deposit_base + self._config.deposit_match_tolerance
        for record in payments.records:
            if record.installment is None and low <= record.amount <= high:
                return record
        return None


__all__ = ["SUPPORTED_PLANS", "split_evenly", "InstallmentScheduler"]
