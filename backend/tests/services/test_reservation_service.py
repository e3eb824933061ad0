"""
ReservationService and engine snapshots
"""
from decimal import Decimal

import pytest

from app.models.ontology import CampReservation
from app.models.schemas import ReservationCreate
from app.services.reservation_service import ReservationService, to_snapshot
from core.payments import ComponentId, InvalidComponentId


class TestCreateReservation:

    def test_create(self, db_session):
        reservation = ReservationService(db_session).create_reservation(ReservationCreate(
            camp_id=1, property_id=2, camp_name="Bieszczady",
            participant_first_name="Anna", participant_last_name="Nowak",
            total_price=Decimal("1800.00"), payment_plan="3",
            selected_protection=["protection-1"], selected_addons=[3, "7"], selected_diet=5,
        ))
        detail = ReservationService(db_session).get_reservation_detail(reservation.id)
        assert detail["participant_name"] == "Anna Nowak"
        assert detail["selected_protection"] == ["protection-1"]
        assert detail["selected_addons"] == [3, "7"]
        assert detail["selected_diet"] == "5"

    def test_invalid_selection_rejected(self, db_session):
        with pytest.raises(InvalidComponentId):
            ReservationService(db_session).create_reservation(ReservationCreate(
                total_price=Decimal("100"), selected_addons=["protection-1"],
            ))
        assert db_session.query(CampReservation).count() == 0

    def test_unknown_reservation(self, db_session):
        assert ReservationService(db_session).get_reservation_detail(404) is None


class TestSnapshot:

    def _reservation(self, **kwargs):
        values = dict(id=7, total_price=Decimal("2550.00"), selected_protection=None, selected_addons=None)
        values.update(kwargs)
        return CampReservation(**values)

    def test_selections_parsed(self):
        snapshot = to_snapshot(self._reservation(
            selected_protection='["protection-1", "protection:2"]',
            selected_addons='[3, "addon-4"]',
            selected_diet="5",
        ))
        assert snapshot.selected_protections == (ComponentId.protection(1), ComponentId.protection(2))
        assert snapshot.selected_addons == (ComponentId.addon(3), ComponentId.addon(4))
        assert snapshot.selected_diet == ComponentId.diet(5)

    def test_single_value_selection(self):
        snapshot = to_snapshot(self._reservation(selected_protection="protection-9"))
        assert snapshot.selected_protections == (ComponentId.protection(9),)

    def test_unparseable_selection_skipped(self):
        snapshot = to_snapshot(self._reservation(selected_addons='["???", 4]'))
        assert snapshot.selected_addons == (ComponentId.addon(4),)

    def test_deposit_and_plan(self):
        snapshot = to_snapshot(self._reservation(deposit_amount=Decimal("500.00"), payment_plan="2"))
        assert snapshot.deposit_selected
        assert snapshot.payment_plan == 2

    def test_defaults(self):
        snapshot = to_snapshot(self._reservation(payment_plan="full"))
        assert not snapshot.deposit_selected
        assert snapshot.payment_plan is None
        assert snapshot.selected_diet is None
