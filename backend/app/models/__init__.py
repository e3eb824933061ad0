# Persistent objects
from app.models.ontology import (
    Employee, CampReservation, GatewayPayment, ManualPayment,
    CatalogItem, TurnusCatalogPrice, PaymentItemAction
)

__all__ = [
    'Employee', 'CampReservation', 'GatewayPayment', 'ManualPayment',
    'CatalogItem', 'TurnusCatalogPrice', 'PaymentItemAction'
]
