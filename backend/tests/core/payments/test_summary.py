"""
ReservationPaymentSummary
"""
from decimal import Decimal

from core.payments import ComponentId, ComponentType, ItemStatus, OverallStatus, PaymentItem, summarize


def item(ref, amount, status):
    return PaymentItem(
        component_id=ComponentId.addon(ref),
        component_type=ComponentType.ADDON,
        label=f"Addon {ref}",
        amount=Decimal(amount),
        status=status,
    )


class TestTotals:

    def test_inactive_items_excluded_from_total(self):
        items = [
            item(1, "2350.00", ItemStatus.PAID),
            item(2, "200.00", ItemStatus.CANCELED),
            item(3, "100.00", ItemStatus.RETURNED),
        ]
        summary = summarize(items, Decimal("2350.00"), True)
        assert summary.total_amount == Decimal("2350.00")
        assert summary.remaining_amount == Decimal("0.00")

    def test_paid_clamped_to_total(self):
        summary = summarize([item(1, "1000.00", ItemStatus.PAID)], Decimal("1500.00"), True)
        assert summary.paid_amount == Decimal("1000.00")
        assert summary.remaining_amount == Decimal("0.00")

    def test_negative_paid_is_zero(self):
        summary = summarize([item(1, "1000.00", ItemStatus.UNPAID)], Decimal("-10.00"), False)
        assert summary.paid_amount == Decimal("0.00")
        assert summary.remaining_amount == Decimal("1000.00")


class TestOverallStatus:

    def test_paid(self):
        summary = summarize([item(1, "500.00", ItemStatus.PAID)], Decimal("500.00"), True)
        assert summary.overall_status == OverallStatus.PAID

    def test_pending_refund_still_paid(self):
        items = [item(1, "500.00", ItemStatus.PAID), item(2, "100.00", ItemStatus.PENDING_REFUND)]
        assert summarize(items, Decimal("600.00"), True).overall_status == OverallStatus.PAID

    def test_partial(self):
        items = [item(1, "500.00", ItemStatus.PARTIALLY_PAID)]
        assert summarize(items, Decimal("100.00"), True).overall_status == OverallStatus.PARTIAL

    def test_unpaid(self):
        items = [item(1, "500.00", ItemStatus.UNPAID)]
        assert summarize(items, Decimal("0.00"), False).overall_status == OverallStatus.UNPAID

    def test_returned_takes_precedence(self):
        items = [item(1, "500.00", ItemStatus.PAID), item(2, "100.00", ItemStatus.RETURNED)]
        assert summarize(items, Decimal("600.00"), True).overall_status == OverallStatus.RETURNED

    def test_all_canceled_is_not_paid(self):
        items = [item(1, "500.00", ItemStatus.CANCELED)]
        assert summarize(items, Decimal("0.00"), False).overall_status == OverallStatus.UNPAID


class TestInvoiceEligibility:

    def test_eligible(self):
        items = [item(1, "2350.00", ItemStatus.PAID), item(2, "200.00", ItemStatus.PAID)]
        assert summarize(items, Decimal("2550.00"), True).invoice_paid_eligible

    def test_canceled_item_blocks_invoice(self):
        items = [item(1, "2350.00", ItemStatus.PAID), item(2, "200.00", ItemStatus.CANCELED)]
        summary = summarize(items, Decimal("2350.00"), True)
        assert summary.overall_status == OverallStatus.PAID
        assert summary.remaining_amount == Decimal("0.00")
        assert not summary.invoice_paid_eligible

    def test_needs_an_effective_payment(self):
        items = [item(1, "0.00", ItemStatus.PAID)]
        summary = summarize(items, Decimal("0.00"), False)
        assert summary.overall_status == OverallStatus.PAID
        assert not summary.invoice_paid_eligible

    def test_not_paid_not_eligible(self):
        items = [item(1, "500.00", ItemStatus.PARTIALLY_PAID)]
        assert not summarize(items, Decimal("200.00"), True).invoice_paid_eligible
