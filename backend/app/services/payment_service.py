"""
Payment service - reservation payment reconciliation
Stores raw gateway/manual records and item lifecycle actions; derives the
per-item payment view through core.payments on every read.
"""
from datetime import datetime
from typing import Dict, List, Optional, Tuple
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.config import settings
from app.models.ontology import (
    CampReservation, GatewayPayment, ItemActionState, ManualPayment, PaymentItemAction
)
from app.models.schemas import GatewayPaymentUpsert, ManualPaymentCreate
from app.services.catalog_service import DatabaseCatalogSource
from app.services.reservation_service import to_snapshot
from core.payments import (
    CalculationInput, CatalogCache, ComponentId, GatewayTransaction, ItemAction,
    ItemStatus, ManualEntry, PaymentCalculator, PaymentDetails, UnknownPaymentItem,
    allowed_actions, money, next_status,
)
from core.payments.normalizer import order_matches

logger = logging.getLogger(__name__)

STATE_FOR_STATUS = {
    ItemStatus.CANCELED: ItemActionState.CANCELED,
    ItemStatus.PENDING_REFUND: ItemActionState.PENDING_REFUND,
    ItemStatus.RETURNED: ItemActionState.RETURNED,
}

STATUS_FOR_STATE = {state: status for status, state in STATE_FOR_STATUS.items()}


def gateway_transaction(row: GatewayPayment) -> GatewayTransaction:
    return GatewayTransaction(
        transaction_id=row.transaction_id,
        order_id=row.order_id,
        amount=row.amount,
        status=row.status.value if row.status else None,
        paid_amount=row.paid_amount,
        channel_id=row.channel_id,
        description=row.description,
        created_at=row.created_at,
        paid_at=row.paid_at,
    )


def manual_entry(row: ManualPayment) -> ManualEntry:
    return ManualEntry(
        id=row.id,
        reservation_id=row.reservation_id,
        amount=row.amount,
        payment_date=row.payment_date,
        payment_method=row.payment_method,
        description=row.description,
        created_at=row.created_at,
    )


def item_states(actions: List[PaymentItemAction]) -> Tuple[Dict[ComponentId, ItemStatus], Dict]:
    """Latest action per component is its state; ACTIVE clears it"""
    states: Dict[ComponentId, ItemStatus] = {}
    canceled_dates = {}
    for action in sorted(actions, key=lambda a: a.id):
        component_id = ComponentId.parse(action.component_id)
        status = STATUS_FOR_STATE.get(action.state)
        if status is None:
            states.pop(component_id, None)
            canceled_dates.pop(component_id, None)
            continue
        states[component_id] = status
        if status == ItemStatus.CANCELED and action.created_at:
            canceled_dates[component_id] = action.created_at.date()
    return states, canceled_dates


def details_to_dict(details: PaymentDetails) -> dict:
    items = []
    for item in details.items:
        data = item.to_dict()
        data["allowed_actions"] = [a.value for a in allowed_actions(item)]
        items.append(data)

    summary = details.summary
    return {
        "reservation_id": details.reservation_id,
        "reservation_name": details.reservation_name,
        "invoice_number": details.invoice_number,
        "order_date": details.order_date,
        "summary": {
            "total_amount": summary.total_amount,
            "paid_amount": summary.paid_amount,
            "remaining_amount": summary.remaining_amount,
            "overall_status": summary.overall_status.value,
            "invoice_paid_eligible": summary.invoice_paid_eligible,
        },
        "items": items,
        "actual_paid": details.actual_paid,
        "deposit_amount": details.deposit_amount,
        "in_deposit_phase": details.in_deposit_phase,
        "payment_history": [history_entry(r) for r in details.payment_history],
        "warnings": list(details.warnings),
    }


def history_entry(record) -> dict:
    return {
        "source": record.source.value,
        "amount": record.amount,
        "paid_date": record.paid_date,
        "method": record.method,
        "installment": str(record.installment) if record.installment else None,
        "reference": record.reference,
    }


class PaymentService:
    """Payment service"""

    def __init__(self, db: Session):
        self.db = db
        self.config = settings.engine_config()

    def calculator(self, cache: Optional[CatalogCache] = None) -> PaymentCalculator:
        return PaymentCalculator(DatabaseCatalogSource(self.db), self.config, cache)

    # ============== Raw records ==============

    def upsert_gateway_payment(self, data: GatewayPaymentUpsert) -> GatewayPayment:
        """Webhook deliveries may repeat; transaction_id identifies the transaction"""
        row = self.db.query(GatewayPayment).filter(
            GatewayPayment.transaction_id == data.transaction_id
        ).first()
        created = row is None
        if created:
            row = GatewayPayment(transaction_id=data.transaction_id)
            self.db.add(row)

        row.order_id = data.order_id
        row.amount = data.amount
        row.paid_amount = data.paid_amount
        row.status = data.status
        row.channel_id = data.channel_id
        row.description = data.description
        row.paid_at = data.paid_at

        self.db.commit()
        self.db.refresh(row)
        logger.info(
            f"Gateway transaction {row.transaction_id} {'stored' if created else 'updated'}: "
            f"order {row.order_id}, {row.status.value}"
        )
        return row

    def add_manual_payment(self, data: ManualPaymentCreate, operator_id: Optional[int] = None) -> ManualPayment:
        reservation = self.db.query(CampReservation).filter(CampReservation.id == data.reservation_id).first()
        if not reservation:
            raise ValueError(f"Reservation {data.reservation_id} not found")

        payment = ManualPayment(
            reservation_id=data.reservation_id,
            amount=data.amount,
            payment_date=data.payment_date,
            payment_method=data.payment_method,
            description=data.description,
            created_by=operator_id
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"Manual payment {payment.id} of {payment.amount} logged for reservation {reservation.id}")
        return payment

    def get_manual_payments(self, reservation_id: int) -> List[ManualPayment]:
        return self.db.query(ManualPayment).filter(
            ManualPayment.reservation_id == reservation_id
        ).order_by(ManualPayment.payment_date, ManualPayment.id).all()

    def delete_manual_payment(self, payment_id: int) -> None:
        payment = self.db.query(ManualPayment).filter(ManualPayment.id == payment_id).first()
        if not payment:
            raise ValueError(f"Manual payment {payment_id} not found")
        self.db.delete(payment)
        self.db.commit()
        logger.info(f"Manual payment {payment_id} deleted")

    def gateway_payments_for(self, reservation_id: int) -> List[GatewayPayment]:
        prefix = self.config.order_id_prefix
        rows = self.db.query(GatewayPayment).filter(or_(
            GatewayPayment.order_id == str(reservation_id),
            GatewayPayment.order_id.like(f"{prefix}-{reservation_id}"),
            GatewayPayment.order_id.like(f"{prefix}-{reservation_id}-%"),
        )).order_by(GatewayPayment.id).all()
        return [r for r in rows if order_matches(r.order_id, reservation_id, prefix)]

    # ============== Derived view ==============

    def _input_for(self, reservation: CampReservation,
                   gateway: List[GatewayTransaction]) -> CalculationInput:
        states, canceled_dates = item_states(reservation.item_actions)
        return CalculationInput(
            reservation=to_snapshot(reservation),
            gateway=tuple(gateway),
            manual=tuple(manual_entry(m) for m in reservation.manual_payments),
            item_states=states,
            canceled_dates=canceled_dates,
        )

    def get_payment_details(self, reservation_id: int) -> Optional[PaymentDetails]:
        reservation = self.db.query(CampReservation).filter(CampReservation.id == reservation_id).first()
        if not reservation:
            return None
        gateway = [gateway_transaction(r) for r in self.gateway_payments_for(reservation_id)]
        return self.calculator().compute(self._input_for(reservation, gateway))

    def list_payment_details(self, camp_id: Optional[int] = None) -> List[Tuple[CampReservation, PaymentDetails]]:
        """
        Batch view over all reservations
        One calculator and one catalog cache for the whole batch
        """
        query = self.db.query(CampReservation)
        if camp_id is not None:
            query = query.filter(CampReservation.camp_id == camp_id)
        reservations = query.order_by(CampReservation.id).all()

        # normalizer drops transactions of other reservations
        gateway = [gateway_transaction(r) for r in self.db.query(GatewayPayment).order_by(GatewayPayment.id).all()]
        calculator = self.calculator(CatalogCache())
        results = calculator.compute_many(self._input_for(r, gateway) for r in reservations)
        return list(zip(reservations, results))

    def list_payment_summaries(self, camp_id: Optional[int] = None) -> List[dict]:
        rows = []
        for reservation, details in self.list_payment_details(camp_id):
            data = details_to_dict(details)
            rows.append({
                "reservation_id": reservation.id,
                "reservation_name": details.reservation_name,
                "participant_name": reservation.participant_name,
                "camp_name": reservation.camp_name,
                "summary": data["summary"],
                "payments": data["payment_history"],
            })
        return rows

    # ============== Item lifecycle ==============

    def apply_item_action(self, reservation_id: int, component_id: str, action: ItemAction,
                          operator_id: Optional[int] = None, note: Optional[str] = None) -> dict:
        """
        Cancel an item or move it through the refund steps

        Raises:
            ValueError: reservation not found
            UnknownPaymentItem: component not part of the reservation
            InvalidItemTransition: action not allowed from the current status
        """
        details = self.get_payment_details(reservation_id)
        if details is None:
            raise ValueError(f"Reservation {reservation_id} not found")

        key = ComponentId.parse(component_id)
        item = details.item(key)
        if item is None:
            raise UnknownPaymentItem(reservation_id, str(key))

        status = next_status(item, action)
        state = STATE_FOR_STATUS.get(status, ItemActionState.ACTIVE)
        self.db.add(PaymentItemAction(
            reservation_id=reservation_id,
            component_id=str(key),
            state=state,
            amount=money(item.amount),
            note=note,
            created_by=operator_id,
            created_at=datetime.utcnow()
        ))
        self.db.commit()
        logger.info(
            f"Reservation {reservation_id}: item {key} {item.status.value} -> {status.value} "
            f"({action.value}) by employee {operator_id}"
        )
        return {
            "reservation_id": reservation_id,
            "component_id": str(key),
            "previous_status": item.status.value,
            "status": status.value,
        }
