"""
Catalog routes
Turnus-specific protections, addons and diets with general fallback
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.ontology import CatalogKind, Employee
from app.models.schemas import CatalogEntryResponse, CatalogItemCreate, TurnusPriceCreate
from app.services.catalog_service import CatalogService
from app.security.auth import require_any_role, require_admin

router = APIRouter(prefix="/api", tags=["Catalog"])


def _turnus_entries(db: Session, camp_id: int, property_id: int, kind: CatalogKind):
    service = CatalogService(db)
    return [CatalogEntryResponse(**e) for e in service.list_turnus_entries(camp_id, property_id, kind)]


@router.get("/camps/{camp_id}/properties/{property_id}/protections", response_model=List[CatalogEntryResponse])
def list_turnus_protections(
    camp_id: int,
    property_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    return _turnus_entries(db, camp_id, property_id, CatalogKind.PROTECTION)


@router.get("/camps/{camp_id}/properties/{property_id}/addons", response_model=List[CatalogEntryResponse])
def list_turnus_addons(
    camp_id: int,
    property_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    return _turnus_entries(db, camp_id, property_id, CatalogKind.ADDON)


@router.get("/camps/{camp_id}/properties/{property_id}/diets", response_model=List[CatalogEntryResponse])
def list_turnus_diets(
    camp_id: int,
    property_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_any_role)
):
    return _turnus_entries(db, camp_id, property_id, CatalogKind.DIET)


@router.post("/catalog/items")
def create_catalog_item(
    data: CatalogItemCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_admin)
):
    """Add a general catalog entry"""
    item = CatalogService(db).create_item(data)
    return {"id": item.id, "kind": item.kind, "name": item.name, "price": item.price}


@router.put("/camps/{camp_id}/properties/{property_id}/prices")
def set_turnus_price(
    camp_id: int,
    property_id: int,
    data: TurnusPriceCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_admin)
):
    """Set the turnus price of a general entry"""
    try:
        row = CatalogService(db).set_turnus_price(camp_id, property_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {
        "camp_id": row.camp_id,
        "property_id": row.property_id,
        "item_id": row.item_id,
        "name": row.name,
        "price": row.price
    }
