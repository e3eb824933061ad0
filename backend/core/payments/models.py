"""
core/payments/models.py

Payment engine value objects.

Inputs (reservation snapshot, raw gateway/manual records, catalog entries) and
derived outputs (items, installments, summary, details). Everything here is
immutable; the engine builds new objects instead of mutating old ones.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
import logging

from core.payments.identifiers import ComponentId, ComponentKind, InstallmentTag

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Any) -> Decimal:
    """
    Coerce an amount to a 2-decimal Decimal

    Missing or malformed values become zero instead of failing the whole
    computation.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        logger.debug(f"Malformed amount {value!r} treated as 0")
        return ZERO
    if not amount.is_finite():
        logger.debug(f"Non-finite amount {value!r} treated as 0")
        return ZERO
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# ============== Enums ==============

class PaymentSource(str, Enum):
    """Payment record origin"""
    GATEWAY = "gateway"
    MANUAL = "manual"


class GatewayStatus(str, Enum):
    """Gateway transaction status"""
    SUCCESS = "success"
    PENDING = "pending"
    CANCELED = "canceled"

    @classmethod
    def coerce(cls, raw: Any) -> Optional["GatewayStatus"]:
        text = str(raw or "").strip().lower()
        if text == "cancelled":
            text = "canceled"
        try:
            return cls(text)
        except ValueError:
            return None


class ComponentType(str, Enum):
    """Payment item type"""
    CAMP = "camp"
    PROTECTION = "protection"
    ADDON = "addon"
    DIET = "diet"
    OTHER = "other"


COMPONENT_TYPES = {
    ComponentKind.CAMP: ComponentType.CAMP,
    ComponentKind.DEPOSIT: ComponentType.OTHER,
    ComponentKind.PROTECTION: ComponentType.PROTECTION,
    ComponentKind.ADDON: ComponentType.ADDON,
    ComponentKind.DIET: ComponentType.DIET,
}


class ItemStatus(str, Enum):
    """Payment item status"""
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    CANCELED = "canceled"
    PENDING_REFUND = "pending_refund"
    RETURNED = "returned"


# statuses removed from allocation and from the reservation totals
INACTIVE_STATUSES = (ItemStatus.CANCELED, ItemStatus.RETURNED)


class OverallStatus(str, Enum):
    """Reservation level payment status"""
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    RETURNED = "returned"


def parse_payment_plan(raw: Any) -> Optional[int]:
    """'2' / 3 / 'full' / None -> 2, 3 or None"""
    if raw is None:
        return None
    text = str(raw).strip()
    if text in ("2", "3"):
        return int(text)
    return None


# ============== Engine configuration ==============

@dataclass(frozen=True)
class EngineConfig:
    """
    Engine constants

    Attributes:
        deposit_base: base deposit amount
        deposit_match_tolerance: window around deposit_base used to find the deposit record
        order_id_prefix: gateway order id prefix
        channel_methods: gateway channel id -> display method
        default_gateway_method: method for unknown channels
        default_manual_method: method for manual entries without one
    """

    deposit_base: Decimal = Decimal("500.00")
    deposit_match_tolerance: Decimal = Decimal("100.00")
    order_id_prefix: str = "RES"
    channel_methods: Tuple[Tuple[int, str], ...] = ((64, "BLIK"), (53, "Karta"))
    default_gateway_method: str = "Online"
    default_manual_method: str = "Ręczna"

    def method_for_channel(self, channel_id: Optional[int]) -> str:
        for known_id, method in self.channel_methods:
            if channel_id == known_id:
                return method
        return self.default_gateway_method


DEFAULT_CONFIG = EngineConfig()


# ============== Inputs ==============

@dataclass(frozen=True)
class CatalogEntry:
    """Resolved catalog entry (protection, addon or diet)"""

    id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class ReservationSnapshot:
    """
    Immutable reservation input for one computation

    Attributes:
        id: reservation id
        total_price: reservation total (source of truth for the totals)
        created_at: order timestamp
        selected_protections: selected protection ids
        selected_addons: selected addon ids
        selected_diet: selected diet id, if any
        payment_plan: 2, 3 or None
        camp_id / property_id: turnus coordinates for catalog resolution
        deposit_selected: the client chose to pay a deposit first
    """

    id: int
    total_price: Decimal
    created_at: Optional[datetime] = None
    selected_protections: Tuple[ComponentId, ...] = ()
    selected_addons: Tuple[ComponentId, ...] = ()
    selected_diet: Optional[ComponentId] = None
    payment_plan: Optional[int] = None
    camp_id: Optional[int] = None
    property_id: Optional[int] = None
    camp_name: Optional[str] = None
    deposit_selected: bool = False
    wants_invoice: bool = False

    @property
    def turnus_key(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.camp_id, self.property_id)


@dataclass(frozen=True)
class GatewayTransaction:
    """Gateway transaction as delivered by the webhook/API"""

    transaction_id: Optional[str]
    order_id: Optional[str]
    amount: Any
    status: Any
    paid_amount: Any = None
    channel_id: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


@dataclass(frozen=True)
class ManualEntry:
    """Manually logged payment (bank transfer, cash)"""

    id: Optional[int]
    reservation_id: int
    amount: Any
    payment_date: Optional[Union[date, datetime]] = None
    payment_method: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentRecord:
    """
    Normalized effective payment

    Attributes:
        source: gateway or manual
        amount: counted amount (paid_amount priority for gateway records)
        status: gateway status, None for manual records
        timestamp: paid/booked time
        method: display method (BLIK, Karta, Online, Przelew...)
        installment: parsed installment tag
        reference: transaction id or manual entry id
    """

    source: PaymentSource
    amount: Decimal
    status: Optional[GatewayStatus] = None
    timestamp: Optional[datetime] = None
    method: Optional[str] = None
    installment: Optional[InstallmentTag] = None
    reference: Optional[str] = None
    description: Optional[str] = None

    @property
    def paid_date(self) -> Optional[date]:
        return self.timestamp.date() if self.timestamp else None


# ============== Outputs ==============

@dataclass(frozen=True)
class Installment:
    """Installment slot; index 0 is the deposit"""

    index: int
    total: int
    amount: Decimal
    paid: bool
    paid_date: Optional[date] = None
    method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "total": self.total,
            "amount": str(self.amount),
            "paid": self.paid,
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "method": self.method,
        }


@dataclass(frozen=True)
class PaymentItem:
    """Derived per-component payment state"""

    component_id: ComponentId
    component_type: ComponentType
    label: str
    amount: Decimal
    status: ItemStatus
    allocated: Decimal = ZERO
    paid_date: Optional[date] = None
    method: Optional[str] = None
    installments: Tuple[Installment, ...] = ()
    canceled_date: Optional[date] = None

    @property
    def id(self) -> str:
        return str(self.component_id)

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    @property
    def is_fully_paid(self) -> bool:
        return self.status in (ItemStatus.PAID, ItemStatus.PENDING_REFUND)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "component_type": self.component_type.value,
            "label": self.label,
            "amount": str(self.amount),
            "allocated": str(self.allocated),
            "status": self.status.value,
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "method": self.method,
            "canceled_date": self.canceled_date.isoformat() if self.canceled_date else None,
            "installments": [i.to_dict() for i in self.installments],
        }


@dataclass(frozen=True)
class PaymentSummary:
    """Reservation level totals"""

    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    overall_status: OverallStatus
    invoice_paid_eligible: bool


@dataclass(frozen=True)
class PaymentDetails:
    """Full derived payment view of one reservation"""

    reservation_id: int
    items: Tuple[PaymentItem, ...]
    summary: PaymentSummary
    actual_paid: Decimal
    deposit_amount: Decimal
    in_deposit_phase: bool
    payment_history: Tuple[PaymentRecord, ...] = ()
    invoice_number: Optional[str] = None
    reservation_name: Optional[str] = None
    order_date: Optional[date] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def item(self, component_id: Union[str, ComponentId]) -> Optional[PaymentItem]:
        key = ComponentId.parse(component_id)
        for item in self.items:
            if item.component_id == key:
                return item
        return None


__all__ = [
    "CENT", "ZERO", "money",
    "PaymentSource", "GatewayStatus", "ComponentType", "COMPONENT_TYPES",
    "ItemStatus", "INACTIVE_STATUSES", "OverallStatus", "parse_payment_plan",
    "EngineConfig", "DEFAULT_CONFIG",
    "CatalogEntry", "ReservationSnapshot", "GatewayTransaction", "ManualEntry",
    "PaymentRecord", "Installment", "PaymentItem", "PaymentSummary", "PaymentDetails",
]
