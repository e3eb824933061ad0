"""
Reservation routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.ontology import Employee, ReservationStatus
from app.models.schemas import ReservationCreate, ReservationResponse
from app.services.reservation_service import ReservationService
from app.security.auth import require_any_role, require_admin

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.get("", response_model=List[ReservationResponse])
def list_reservations(
    status: Optional[ReservationStatus] = None,
    camp_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    """List reservations"""
    service = ReservationService(db)
    reservations = service.get_reservations(status, camp_id)
    return [ReservationResponse(**service.get_reservation_detail(r.id)) for r in reservations]


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    """Reservation detail"""
    service = ReservationService(db)
    detail = service.get_reservation_detail(reservation_id)
    if not detail:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return ReservationResponse(**detail)


@router.post("", response_model=ReservationResponse)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_admin)
):
    """Create a reservation"""
    service = ReservationService(db)
    try:
        reservation = service.create_reservation(data)
        return ReservationResponse(**service.get_reservation_detail(reservation.id))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
