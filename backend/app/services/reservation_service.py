"""
Reservation service
Camp reservations and their conversion into payment engine snapshots
"""
import json
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from app.models.ontology import CampReservation, ReservationStatus
from app.models.schemas import ReservationCreate
from core.payments import (
    ComponentId, ComponentKind, InvalidComponentId, ReservationSnapshot,
    money, parse_payment_plan,
)

logger = logging.getLogger(__name__)


def _parse_selection(reservation_id: int, raw_values, kind: ComponentKind) -> tuple:
    parsed = []
    for raw in raw_values:
        try:
            parsed.append(ComponentId.parse(raw, default_kind=kind))
        except InvalidComponentId as e:
            logger.warning(f"Reservation {reservation_id}: {e}, selection skipped")
    return tuple(parsed)


def to_snapshot(reservation: CampReservation) -> ReservationSnapshot:
    """Immutable engine input for a stored reservation"""
    diet = None
    if reservation.selected_diet:
        diets = _parse_selection(reservation.id, [reservation.selected_diet], ComponentKind.DIET)
        diet = diets[0] if diets else None

    return ReservationSnapshot(
        id=reservation.id,
        total_price=money(reservation.total_price),
        created_at=reservation.created_at,
        selected_protections=_parse_selection(
            reservation.id, reservation.protection_selection, ComponentKind.PROTECTION
        ),
        selected_addons=_parse_selection(reservation.id, reservation.addon_selection, ComponentKind.ADDON),
        selected_diet=diet,
        payment_plan=parse_payment_plan(reservation.payment_plan),
        camp_id=reservation.camp_id,
        property_id=reservation.property_id,
        camp_name=reservation.camp_name,
        deposit_selected=money(reservation.deposit_amount) > 0,
        wants_invoice=bool(reservation.wants_invoice),
    )


class ReservationService:
    """Reservation service"""

    def __init__(self, db: Session):
        self.db = db

    def get_reservation(self, reservation_id: int) -> Optional[CampReservation]:
        return self.db.query(CampReservation).filter(CampReservation.id == reservation_id).first()

    def get_reservations(self, status: Optional[ReservationStatus] = None,
                         camp_id: Optional[int] = None) -> List[CampReservation]:
        query = self.db.query(CampReservation)
        if status:
            query = query.filter(CampReservation.status == status)
        if camp_id is not None:
            query = query.filter(CampReservation.camp_id == camp_id)
        return query.order_by(CampReservation.id).all()

    def create_reservation(self, data: ReservationCreate) -> CampReservation:
        # reject selections the engine could never resolve
        for raw in data.selected_protection:
            ComponentId.parse(raw, default_kind=ComponentKind.PROTECTION)
        for raw in data.selected_addons:
            ComponentId.parse(raw, default_kind=ComponentKind.ADDON)
        if data.selected_diet is not None:
            ComponentId.parse(data.selected_diet, default_kind=ComponentKind.DIET)

        reservation = CampReservation(
            camp_id=data.camp_id,
            property_id=data.property_id,
            camp_name=data.camp_name,
            property_name=data.property_name,
            participant_first_name=data.participant_first_name,
            participant_last_name=data.participant_last_name,
            total_price=data.total_price,
            deposit_amount=data.deposit_amount,
            payment_plan=data.payment_plan,
            selected_protection=json.dumps(data.selected_protection),
            selected_addons=json.dumps(data.selected_addons),
            selected_diet=str(data.selected_diet) if data.selected_diet is not None else None,
            wants_invoice=data.wants_invoice,
        )
        self.db.add(reservation)
        self.db.commit()
        self.db.refresh(reservation)
        logger.info(f"Reservation {reservation.id} created, total {reservation.total_price}")
        return reservation

    def get_reservation_detail(self, reservation_id: int) -> Optional[dict]:
        reservation = self.get_reservation(reservation_id)
        if not reservation:
            return None
        return {
            "id": reservation.id,
            "camp_id": reservation.camp_id,
            "property_id": reservation.property_id,
            "camp_name": reservation.camp_name,
            "property_name": reservation.property_name,
            "participant_name": reservation.participant_name,
            "status": reservation.status,
            "total_price": reservation.total_price,
            "deposit_amount": reservation.deposit_amount,
            "payment_plan": reservation.payment_plan,
            "selected_protection": reservation.protection_selection,
            "selected_addons": reservation.addon_selection,
            "selected_diet": reservation.selected_diet,
            "wants_invoice": bool(reservation.wants_invoice),
            "created_at": reservation.created_at,
        }
