"""
core/payments/errors.py

Payment engine errors. All derive from ValueError so service and router
layers can keep catching ValueError.
"""


class PaymentError(ValueError):
    """Base payment engine error"""


class InvalidComponentId(PaymentError):
    """A stored component selection could not be parsed"""


class UnknownPaymentItem(PaymentError):
    """The requested component is not part of the reservation"""

    def __init__(self, reservation_id: int, component_id: str):
        self.reservation_id = reservation_id
        self.component_id = component_id
        super().__init__(f"Reservation {reservation_id} has no payment item {component_id}")


class InvalidItemTransition(PaymentError):
    """A cancel/refund action is not allowed from the item's current status"""

    def __init__(self, component_id: str, current: str, trigger: str):
        self.component_id = component_id
        self.current = current
        self.trigger = trigger
        super().__init__(f"Cannot {trigger} item {component_id} in status {current}")


__all__ = ["PaymentError", "InvalidComponentId", "UnknownPaymentItem", "InvalidItemTransition"]
