"""
Payment routes
Raw payment records, derived payment view and item lifecycle actions
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.ontology import Employee
from app.models.schemas import (
    GatewayPaymentUpsert, GatewayPaymentResponse, ManualPaymentCreate, ManualPaymentResponse,
    PaymentDetailsResponse, ReservationPaymentRow, ItemActionRequest, ItemActionResponse
)
from app.services.payment_service import PaymentService, details_to_dict
from app.services.reservation_service import ReservationService
from app.security.auth import require_any_role, require_accountant
from core.payments import ItemAction, UnknownPaymentItem

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/gateway", response_model=GatewayPaymentResponse)
def upsert_gateway_payment(
    data: GatewayPaymentUpsert,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Record or refresh a gateway transaction"""
    return PaymentService(db).upsert_gateway_payment(data)


@router.post("/manual", response_model=ManualPaymentResponse)
def add_manual_payment(
    data: ManualPaymentCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Log a manual payment"""
    try:
        return PaymentService(db).add_manual_payment(data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/manual/reservation/{reservation_id}", response_model=List[ManualPaymentResponse])
def list_manual_payments(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    return PaymentService(db).get_manual_payments(reservation_id)


@router.delete("/manual/{payment_id}")
def delete_manual_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    try:
        PaymentService(db).delete_manual_payment(payment_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"message": "Manual payment deleted", "payment_id": payment_id}


@router.get("/reservations", response_model=List[ReservationPaymentRow])
def list_reservation_payments(
    camp_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    """Payment summary of every reservation"""
    return PaymentService(db).list_payment_summaries(camp_id)


@router.get("/reservations/{reservation_id}", response_model=PaymentDetailsResponse)
def get_reservation_payments(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    """Per-item payment view of one reservation"""
    details = PaymentService(db).get_payment_details(reservation_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return details_to_dict(details)


def _apply(db: Session, reservation_id: int, component_id: str, action: ItemAction,
           current_user: Employee, data: Optional[ItemActionRequest]) -> dict:
    if ReservationService(db).get_reservation(reservation_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    service = PaymentService(db)
    try:
        return service.apply_item_action(
            reservation_id, component_id, action,
            operator_id=current_user.id,
            note=data.note if data else None
        )
    except UnknownPaymentItem as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/reservations/{reservation_id}/items/{component_id}/cancel", response_model=ItemActionResponse)
def cancel_item(
    reservation_id: int,
    component_id: str,
    data: Optional[ItemActionRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Cancel an unpaid item"""
    return _apply(db, reservation_id, component_id, ItemAction.CANCEL, current_user, data)


@router.post("/reservations/{reservation_id}/items/{component_id}/refund/request", response_model=ItemActionResponse)
def request_refund(
    reservation_id: int,
    component_id: str,
    data: Optional[ItemActionRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Start the refund of a paid item"""
    return _apply(db, reservation_id, component_id, ItemAction.REQUEST_REFUND, current_user, data)


@router.post("/reservations/{reservation_id}/items/{component_id}/refund/confirm", response_model=ItemActionResponse)
def confirm_refund(
    reservation_id: int,
    component_id: str,
    data: Optional[ItemActionRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Confirm a pending refund"""
    return _apply(db, reservation_id, component_id, ItemAction.CONFIRM_REFUND, current_user, data)


@router.post("/reservations/{reservation_id}/items/{component_id}/refund/withdraw", response_model=ItemActionResponse)
def withdraw_refund(
    reservation_id: int,
    component_id: str,
    data: Optional[ItemActionRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_accountant)
):
    """Withdraw a pending refund"""
    return _apply(db, reservation_id, component_id, ItemAction.WITHDRAW_REFUND, current_user, data)
