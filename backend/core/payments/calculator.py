"""
core/payments/calculator.py

PaymentCalculator - the whole engine pipeline for one reservation or a batch.

    normalize payments -> resolve catalog -> allocate -> installments
    -> lifecycle overlay -> summary

The calculator is a pure function of its inputs apart from catalog loading,
which is memoized by the resolver's cache. Reusing one calculator for a batch
loads each turnus catalog once.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence
import logging

from core.payments.allocation import AllocationEngine, with_payment_info
from core.payments.catalog import CatalogCache, CatalogSource, PriceCatalogResolver
from core.payments.identifiers import ComponentId
from core.payments.installments import InstallmentScheduler
from core.payments.lifecycle import apply_item_states
from core.payments.models import (
    DEFAULT_CONFIG, ZERO, EngineConfig, GatewayTransaction, ItemStatus,
    ManualEntry, PaymentDetails, ReservationSnapshot,
)
from core.payments.normalizer import PaymentRecordNormalizer
from core.payments.summary import summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationInput:
    """Everything the engine reads for one reservation"""

    reservation: ReservationSnapshot
    gateway: Sequence[GatewayTransaction] = ()
    manual: Sequence[ManualEntry] = ()
    item_states: Mapping[ComponentId, ItemStatus] = field(default_factory=dict)
    canceled_dates: Mapping[ComponentId, date] = field(default_factory=dict)


def invoice_number(reservation: ReservationSnapshot) -> Optional[str]:
    if reservation.created_at is None:
        return None
    return f"FV-{reservation.created_at.year}-{reservation.id:04d}"


def reservation_name(reservation: ReservationSnapshot) -> Optional[str]:
    if reservation.created_at is None:
        return None
    return f"REZ-{reservation.created_at.year}-{reservation.id:03d}"


class PaymentCalculator:
    """
    Payment engine facade

    Example:
        >>> calculator = PaymentCalculator(source)
        >>> details = calculator.compute(CalculationInput(snapshot, gateway=txs, manual=entries))
        >>> details.summary.overall_status
    """

    def __init__(self, source: CatalogSource, config: EngineConfig = DEFAULT_CONFIG,
                 cache: Optional[CatalogCache] = None):
        self._config = config
        self._resolver = PriceCatalogResolver(source, cache=cache)
        self._normalizer = PaymentRecordNormalizer(config)
        self._allocation = AllocationEngine(config)
        self._installments = InstallmentScheduler(config)

    @property
    def resolver(self) -> PriceCatalogResolver:
        return self._resolver

    @property
    def config(self) -> EngineConfig:
        return self._config

    def compute(self, data: CalculationInput) -> PaymentDetails:
        reservation = data.reservation
        payments = self._normalizer.normalize(reservation.id, data.gateway, data.manual)
        resolved = self._resolver.resolve(reservation)

        warnings: List[str] = [f"Missing catalog entry for {cid}" for cid in resolved.missing]
        if resolved.extras_total > reservation.total_price > ZERO:
            logger.warning(
                f"Reservation {reservation.id}: extras {resolved.extras_total} exceed "
                f"total price {reservation.total_price}"
            )
            warnings.append(
                f"Selected extras ({resolved.extras_total}) exceed the total price ({reservation.total_price})"
            )

        allocation = self._allocation.run(reservation, resolved, payments.actual_paid, data.item_states)
        latest = payments.latest()
        items = list(with_payment_info(
            allocation.items,
            latest.paid_date if latest else None,
            latest.method if latest else None,
        ))

        deposit_item = allocation.get(ComponentId.deposit())
        deposit_paid = deposit_item.allocated if deposit_item is not None else ZERO
        deposit_amount = deposit_item.amount if deposit_item is not None else None
        for position, item in enumerate(items):
            if item.component_id == ComponentId.camp():
                installments = self._installments.schedule(
                    reservation, item, payments, deposit_paid, deposit_amount
                )
                if installments:
                    items[position] = replace(item, installments=installments)

        final_items = apply_item_states(items, data.item_states, data.canceled_dates)
        summary = summarize(final_items, payments.actual_paid, payments.has_effective_payment)

        if allocation.unallocated > ZERO and reservation.total_price > ZERO:
            warnings.append(f"Effective payments exceed the amount due by {allocation.unallocated}")

        return PaymentDetails(
            reservation_id=reservation.id,
            items=final_items,
            summary=summary,
            actual_paid=payments.actual_paid,
            deposit_amount=self._config.deposit_base + resolved.deposit_extras_total,
            in_deposit_phase=allocation.in_deposit_phase,
            payment_history=payments.chronological(),
            invoice_number=invoice_number(reservation),
            reservation_name=reservation_name(reservation),
            order_date=reservation.created_at.date() if reservation.created_at else None,
            warnings=tuple(warnings),
        )

    def compute_many(self, inputs: Iterable[CalculationInput]) -> List[PaymentDetails]:
        """Compute a batch; turnus catalogs are loaded once per (camp, property)"""
        results = [self.compute(data) for data in inputs]
        logger.info(
            f"Computed payment details for {len(results)} reservations "
            f"({len(self._resolver.cache)} turnus catalogs loaded)"
        )
        return results


__all__ = ["CalculationInput", "PaymentCalculator", "invoice_number", "reservation_name"]
