"""
core/payments/lifecycle.py

Payment item lifecycle.

    unpaid -> partially_paid -> paid        derived from the paid total
    unpaid -> canceled                      manual, terminal
    paid -> pending_refund -> returned      two-step refund, terminal
    pending_refund -> paid                  refund withdrawn before confirmation

Only the manual transitions are persisted (as the item's lifecycle state);
the derived ones are recomputed on every read.
"""
from dataclasses import replace
from datetime import date
from enum import Enum
from typing import Mapping, Optional, Sequence, Tuple
import logging

from core.engine.state_machine import (
    StateMachine, StateMachineConfig, StateTransition, state_machine_registry,
)
from core.payments.errors import InvalidItemTransition
from core.payments.identifiers import ComponentId
from core.payments.models import ItemStatus, PaymentItem

logger = logging.getLogger(__name__)


class ItemAction(str, Enum):
    """Manual item actions"""
    CANCEL = "cancel"
    REQUEST_REFUND = "request_refund"
    CONFIRM_REFUND = "confirm_refund"
    WITHDRAW_REFUND = "withdraw_refund"


ITEM_LIFECYCLE = StateMachineConfig(
    name="PaymentItem",
    states=tuple(s.value for s in ItemStatus),
    transitions=(
        StateTransition(ItemStatus.UNPAID.value, ItemStatus.PARTIALLY_PAID.value, "pay_partially"),
        StateTransition(ItemStatus.UNPAID.value, ItemStatus.PAID.value, "pay_in_full"),
        StateTransition(ItemStatus.PARTIALLY_PAID.value, ItemStatus.PAID.value, "pay_in_full"),
        StateTransition(ItemStatus.UNPAID.value, ItemStatus.CANCELED.value, ItemAction.CANCEL.value),
        StateTransition(ItemStatus.PAID.value, ItemStatus.PENDING_REFUND.value, ItemAction.REQUEST_REFUND.value),
        StateTransition(ItemStatus.PENDING_REFUND.value, ItemStatus.RETURNED.value, ItemAction.CONFIRM_REFUND.value),
        StateTransition(ItemStatus.PENDING_REFUND.value, ItemStatus.PAID.value, ItemAction.WITHDRAW_REFUND.value),
    ),
    initial_state=ItemStatus.UNPAID.value,
    final_states=(ItemStatus.CANCELED.value, ItemStatus.RETURNED.value),
)

state_machine_registry.register(ITEM_LIFECYCLE)

# lifecycle states that are stored at the source
PERSISTED_STATES = (ItemStatus.CANCELED, ItemStatus.PENDING_REFUND, ItemStatus.RETURNED)


def next_status(item: PaymentItem, action: ItemAction) -> ItemStatus:
    """
    Status the item moves to when the action is applied

    Raises:
        InvalidItemTransition: action not allowed from the item's status
    """
    machine = StateMachine(ITEM_LIFECYCLE, state=item.status.value)
    if not machine.fire(action.value):
        raise InvalidItemTransition(item.id, item.status.value, action.value)
    return ItemStatus(machine.current_state)


def allowed_actions(item: PaymentItem) -> Tuple[ItemAction, ...]:
    manual = {a.value for a in ItemAction}
    return tuple(
        ItemAction(trigger)
        for trigger in ITEM_LIFECYCLE.triggers_from(item.status.value)
        if trigger in manual
    )


def apply_item_states(items: Sequence[PaymentItem],
                      states: Mapping[ComponentId, ItemStatus],
                      canceled_dates: Optional[Mapping[ComponentId, date]] = None
                      ) -> Tuple[PaymentItem, ...]:
    """
    Overlay persisted lifecycle states on allocated items

    Canceled and returned items already come out of the allocation with their
    state. A pending refund only holds while the item is still fully paid.
    """
    canceled_dates = canceled_dates or {}
    result = []
    for item in items:
        state = states.get(item.component_id)
        if state == ItemStatus.PENDING_REFUND:
            if item.status == ItemStatus.PAID:
                item = replace(item, status=ItemStatus.PENDING_REFUND)
            else:
                logger.warning(
                    f"Item {item.id}: refund pending but item is {item.status.value}, ignoring refund state"
                )
        elif state == ItemStatus.CANCELED and item.component_id in canceled_dates:
            item = replace(item, canceled_date=canceled_dates[item.component_id])
        result.append(item)
    return tuple(result)


__all__ = [
    "ItemAction", "ITEM_LIFECYCLE", "PERSISTED_STATES",
    "next_status", "allowed_actions", "apply_item_states",
]
