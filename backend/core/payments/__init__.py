"""
core/payments - payment allocation & reconciliation engine

Modules:
- identifiers: typed component ids and installment tags
- models: engine inputs and derived outputs
- catalog: PriceCatalogResolver and the per-turnus cache
- normalizer: PaymentRecordNormalizer
- allocation: AllocationEngine and the named allocation orders
- installments: InstallmentScheduler
- summary: ReservationPaymentSummary
- lifecycle: cancel / two-step refund state machine
- calculator: pipeline facade

Usage:
    >>> from core.payments import PaymentCalculator, CalculationInput
"""
from core.payments.errors import (
    PaymentError, InvalidComponentId, UnknownPaymentItem, InvalidItemTransition,
)
from core.payments.identifiers import ComponentId, ComponentKind, InstallmentTag
from core.payments.models import (
    money, EngineConfig, DEFAULT_CONFIG,
    PaymentSource, GatewayStatus, ComponentType, ItemStatus, OverallStatus,
    CatalogEntry, ReservationSnapshot, GatewayTransaction, ManualEntry,
    PaymentRecord, Installment, PaymentItem, PaymentSummary, PaymentDetails,
    parse_payment_plan,
)
from core.payments.catalog import (
    TurnusCatalog, CatalogSource, StaticCatalogSource, CatalogCache, PriceCatalogResolver,
)
from core.payments.normalizer import PaymentRecordNormalizer, NormalizedPayments, order_matches
from core.payments.allocation import (
    AllocationEngine, AllocationOrder, STANDARD_ORDER, DEPOSIT_ORDER, Slot,
)
from core.payments.installments import InstallmentScheduler, split_evenly
from core.payments.lifecycle import ItemAction, ITEM_LIFECYCLE, next_status, allowed_actions
from core.payments.summary import summarize
from core.payments.calculator import CalculationInput, PaymentCalculator

__all__ = [
    "PaymentError", "InvalidComponentId", "UnknownPaymentItem", "InvalidItemTransition",
    "ComponentId", "ComponentKind", "InstallmentTag",
    "money", "EngineConfig", "DEFAULT_CONFIG",
    "PaymentSource", "GatewayStatus", "ComponentType", "ItemStatus", "OverallStatus",
    "CatalogEntry", "ReservationSnapshot", "GatewayTransaction", "ManualEntry",
    "PaymentRecord", "Installment", "PaymentItem", "PaymentSummary", "PaymentDetails",
    "parse_payment_plan",
    "TurnusCatalog", "CatalogSource", "StaticCatalogSource", "CatalogCache", "PriceCatalogResolver",
    "PaymentRecordNormalizer", "NormalizedPayments", "order_matches",
    "AllocationEngine", "AllocationOrder", "STANDARD_ORDER", "DEPOSIT_ORDER", "Slot",
    "InstallmentScheduler", "split_evenly",
    "ItemAction", "ITEM_LIFECYCLE", "next_status", "allowed_actions",
    "summarize",
    "CalculationInput", "PaymentCalculator",
]
