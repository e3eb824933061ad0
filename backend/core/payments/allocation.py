"""
core/payments/allocation.py

AllocationEngine - greedy priority waterfall of the effective paid total over
the billable components of a reservation.

The priority order is data, not code: ``STANDARD_ORDER`` and ``DEPOSIT_ORDER``
below are the two named orders, and ``AllocationEngine.allocate`` walks
whatever component list it is given. Reordering a plan means editing the
slot tuple only.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple
import logging

from core.payments.catalog import ResolvedCatalog, ResolvedComponent
from core.payments.identifiers import ComponentId, ComponentKind
from core.payments.models import (
    COMPONENT_TYPES, DEFAULT_CONFIG, INACTIVE_STATUSES, ZERO,
    EngineConfig, ItemStatus, PaymentItem, ReservationSnapshot,
)

logger = logging.getLogger(__name__)


class Slot(str, Enum):
    """Position in an allocation order; list slots expand to every selected entry"""
    CAMP = "camp"
    DEPOSIT = "deposit"
    PROTECTIONS = "protections"
    ADDONS = "addons"
    DIET = "diet"
    CAMP_REMAINDER = "camp_remainder"


@dataclass(frozen=True)
class AllocationOrder:
    name: str
    slots: Tuple[Slot, ...]


# reservations without a deposit
STANDARD_ORDER = AllocationOrder(
    name="standard",
    slots=(Slot.CAMP, Slot.PROTECTIONS, Slot.DIET, Slot.ADDONS),
)

# deposit first, then the extras paid with it, then the rest of the camp fee
DEPOSIT_ORDER = AllocationOrder(
    name="deposit",
    slots=(Slot.DEPOSIT, Slot.PROTECTIONS, Slot.ADDONS, Slot.DIET, Slot.CAMP_REMAINDER),
)


@dataclass(frozen=True)
class BillableComponent:
    """One entry of an expanded allocation order"""

    component_id: ComponentId
    label: str
    price: Decimal


@dataclass(frozen=True)
class AllocationResult:
    """
    Attributes:
        order: the order that was applied
        items: one item per billable component, in order, inactive ones included
        unallocated: effective money left after the last component
        in_deposit_phase: deposit covered, reservation not fully paid
    """

    order: AllocationOrder
    items: Tuple[PaymentItem, ...]
    unallocated: Decimal
    in_deposit_phase: bool = False

    def get(self, component_id: ComponentId) -> Optional[PaymentItem]:
        for item in self.items:
            if item.component_id == component_id:
                return item
        return None


def camp_label(reservation: ReservationSnapshot) -> str:
    return f"Obóz: {reservation.camp_name or 'Nieznany obóz'}"


def _extra_label(resolved: ResolvedComponent) -> str:
    if resolved.component_id.kind == ComponentKind.PROTECTION:
        return f"Ochrona rezerwacji ({resolved.entry.name})"
    return resolved.entry.name


def camp_amount(reservation: ReservationSnapshot, resolved: ResolvedCatalog) -> Decimal:
    """Camp fee = total price minus every resolved extra, never negative"""
    return max(ZERO, reservation.total_price - resolved.extras_total)


def is_deposit_phase(reservation: ReservationSnapshot, actual_paid: Decimal,
                     config: EngineConfig = DEFAULT_CONFIG) -> bool:
    """Deposit selected, deposit covered, reservation not fully paid"""
    if not reservation.deposit_selected:
        return False
    return config.deposit_base <= actual_paid < reservation.total_price


def select_order(reservation: ReservationSnapshot,
                 item_states: Optional[Mapping[ComponentId, ItemStatus]] = None) -> AllocationOrder:
    """
    A reservation with a deposit keeps the deposit split at every paid amount

    The order never changes as payments arrive, so allocations only grow and
    the deposit item keeps its lifecycle state after the reservation is paid
    in full. A persisted deposit state forces the split as well.
    """
    if reservation.deposit_selected or ComponentId.deposit() in (item_states or {}):
        return DEPOSIT_ORDER
    return STANDARD_ORDER


def expand_order(order: AllocationOrder, reservation: ReservationSnapshot,
                 resolved: ResolvedCatalog,
                 config: EngineConfig = DEFAULT_CONFIG) -> List[BillableComponent]:
    """Turn an order's slots into the concrete component list"""
    camp = camp_amount(reservation, resolved)
    deposit = min(config.deposit_base, camp)
    components: List[BillableComponent] = []

    for slot in order.slots:
        if slot == Slot.CAMP:
            components.append(BillableComponent(ComponentId.camp(), camp_label(reservation), camp))
        elif slot == Slot.DEPOSIT:
            components.append(BillableComponent(ComponentId.deposit(), "Zaliczka", deposit))
        elif slot == Slot.CAMP_REMAINDER:
            components.append(BillableComponent(ComponentId.camp(), camp_label(reservation), camp - deposit))
        elif slot == Slot.PROTECTIONS:
            components.extend(
                BillableComponent(c.component_id, _extra_label(c), c.entry.price)
                for c in resolved.protections
            )
        elif slot == Slot.ADDONS:
            components.extend(
                BillableComponent(c.component_id, _extra_label(c), c.entry.price)
                for c in resolved.addons
            )
        elif slot == Slot.DIET:
            # a free diet is not billed
            if resolved.diet is not None and resolved.diet.entry.price > ZERO:
                components.append(
                    BillableComponent(resolved.diet.component_id, _extra_label(resolved.diet),
                                      resolved.diet.entry.price)
                )
    return components


def status_for(allocated: Decimal, price: Decimal) -> ItemStatus:
    if allocated == price:
        return ItemStatus.PAID
    if allocated > ZERO:
        return ItemStatus.PARTIALLY_PAID
    return ItemStatus.UNPAID


class AllocationEngine:
    """
    Waterfall allocation

    Example:
        >>> engine = AllocationEngine()
        >>> result = engine.run(snapshot, resolved, actual_paid=Decimal("600"))
        >>> [(i.id, i.status) for i in result.items]
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self._config = config

    def allocate(self, components: Sequence[BillableComponent], actual_paid: Decimal,
                 item_states: Optional[Mapping[ComponentId, ItemStatus]] = None
                 ) -> Tuple[Tuple[PaymentItem, ...], Decimal]:
        """
        Walk the components in order

        Components whose lifecycle state is canceled or returned keep their
        position in the output but are skipped by the walk.
        """
        states = item_states or {}
        remaining = max(ZERO, actual_paid)
        items: List[PaymentItem] = []

        for component in components:
            component_type = COMPONENT_TYPES[component.component_id.kind]
            state = states.get(component.component_id)
            if state in INACTIVE_STATUSES:
                items.append(PaymentItem(
                    component_id=component.component_id,
                    component_type=component_type,
                    label=component.label,
                    amount=component.price,
                    status=state,
                ))
                continue

            allocated = min(remaining, component.price)
            remaining -= allocated
            items.append(PaymentItem(
                component_id=component.component_id,
                component_type=component_type,
                label=component.label,
                amount=component.price,
                status=status_for(allocated, component.price),
                allocated=allocated,
            ))

        return tuple(items), remaining

    def run(self, reservation: ReservationSnapshot, resolved: ResolvedCatalog,
            actual_paid: Decimal,
            item_states: Optional[Mapping[ComponentId, ItemStatus]] = None) -> AllocationResult:
        if reservation.total_price <= ZERO:
            logger.warning(
                f"Reservation {reservation.id}: total price {reservation.total_price} <= 0, "
                f"allocation skipped"
            )
            components = expand_order(STANDARD_ORDER, reservation, resolved, self._config)
            items = self._unallocated(components, item_states or {})
            return AllocationResult(order=STANDARD_ORDER, items=items, unallocated=max(ZERO, actual_paid))

        order = select_order(reservation, item_states)
        components = expand_order(order, reservation, resolved, self._config)
        items, unallocated = self.allocate(components, actual_paid, item_states)
        logger.debug(
            f"Reservation {reservation.id}: {order.name} order, paid {actual_paid}, "
            f"{len(items)} items, {unallocated} unallocated"
        )
        return AllocationResult(
            order=order,
            items=items,
            unallocated=unallocated,
            in_deposit_phase=is_deposit_phase(reservation, actual_paid, self._config),
        )

    @staticmethod
    def _unallocated(components: Sequence[BillableComponent],
                     states: Mapping[ComponentId, ItemStatus]) -> Tuple[PaymentItem, ...]:
        items = []
        for component in components:
            state = states.get(component.component_id)
            items.append(PaymentItem(
                component_id=component.component_id,
                component_type=COMPONENT_TYPES[component.component_id.kind],
                label=component.label,
                amount=component.price,
                status=state if state in INACTIVE_STATUSES else ItemStatus.UNPAID,
            ))
        return tuple(items)


def with_payment_info(items: Sequence[PaymentItem], paid_date, method) -> Tuple[PaymentItem, ...]:
    """Stamp fully paid items with the latest payment's date and method"""
    return tuple(
        replace(item, paid_date=paid_date, method=method) if item.status == ItemStatus.PAID else item
        for item in items
    )


__all__ = [
    "Slot", "AllocationOrder", "STANDARD_ORDER", "DEPOSIT_ORDER",
    "BillableComponent", "AllocationResult", "AllocationEngine",
    "camp_label", "camp_amount", "is_deposit_phase", "select_order",
    "expand_order", "status_for", "with_payment_info",
]
