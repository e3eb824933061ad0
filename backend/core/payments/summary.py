"""
core/payments/summary.py

ReservationPaymentSummary - item statuses aggregated into reservation totals.
"""
from decimal import Decimal
from typing import Sequence

from core.payments.models import (
    ZERO, ItemStatus, OverallStatus, PaymentItem, PaymentSummary,
)


def total_amount(items: Sequence[PaymentItem]) -> Decimal:
    """Sum of active items; canceled and returned items count as zero"""
    return max(ZERO, sum((i.amount for i in items if i.is_active), ZERO))


def overall_status(items: Sequence[PaymentItem], paid: Decimal, total: Decimal) -> OverallStatus:
    """First match wins: returned, paid, partial, unpaid"""
    if any(i.status == ItemStatus.RETURNED for i in items):
        return OverallStatus.RETURNED

    active = [i for i in items if i.is_active]
    if active and all(i.is_fully_paid for i in active) and paid >= total:
        return OverallStatus.PAID

    if ZERO < paid < total or any(i.status == ItemStatus.PARTIALLY_PAID for i in items):
        return OverallStatus.PARTIAL
    return OverallStatus.UNPAID


def summarize(items: Sequence[PaymentItem], actual_paid: Decimal,
              has_effective_payment: bool) -> PaymentSummary:
    """
    Build the reservation summary

    Args:
        items: derived items, inactive ones included
        actual_paid: sum of effective payments
        has_effective_payment: at least one effective payment record exists
    """
    total = total_amount(items)
    paid = min(max(ZERO, actual_paid), total)
    remaining = max(ZERO, total - paid)
    status = overall_status(items, paid, total)
    has_canceled = any(i.status == ItemStatus.CANCELED for i in items)

    return PaymentSummary(
        total_amount=total,
        paid_amount=paid,
        remaining_amount=remaining,
        overall_status=status,
        invoice_paid_eligible=(
            status == OverallStatus.PAID and not has_canceled and has_effective_payment
        ),
    )


__all__ = ["total_amount", "overall_status", "summarize"]
