"""
Catalog service
General catalog and turnus price overrides, plus the database-backed
catalog source used by the payment engine
"""
from collections import defaultdict
from typing import Dict, List, Optional
import logging
from sqlalchemy.orm import Session
from app.models.ontology import CatalogItem, CatalogKind, TurnusCatalogPrice
from app.models.schemas import CatalogItemCreate, TurnusPriceCreate
from core.payments import CatalogEntry, CatalogSource, ComponentKind, TurnusCatalog, money

logger = logging.getLogger(__name__)

KIND_MAP = {
    CatalogKind.PROTECTION: ComponentKind.PROTECTION,
    CatalogKind.ADDON: ComponentKind.ADDON,
    CatalogKind.DIET: ComponentKind.DIET,
}


class DatabaseCatalogSource(CatalogSource):
    """Loads one turnus catalog per call; callers memoize through CatalogCache"""

    def __init__(self, db: Session):
        self.db = db

    def load(self, camp_id: Optional[int], property_id: Optional[int]) -> TurnusCatalog:
        general: Dict[ComponentKind, Dict[int, CatalogEntry]] = defaultdict(dict)
        for item in self.db.query(CatalogItem).filter(CatalogItem.is_active == True).all():  # noqa: E712
            general[KIND_MAP[item.kind]][item.id] = CatalogEntry(item.id, item.name, money(item.price))

        overrides: Dict[ComponentKind, Dict[int, CatalogEntry]] = defaultdict(dict)
        if camp_id is not None and property_id is not None:
            rows = self.db.query(TurnusCatalogPrice).filter(
                TurnusCatalogPrice.camp_id == camp_id,
                TurnusCatalogPrice.property_id == property_id
            ).all()
            for row in rows:
                name = row.name or (row.item.name if row.item else f"#{row.item_id}")
                overrides[KIND_MAP[row.item.kind]][row.item_id] = CatalogEntry(row.item_id, name, money(row.price))

        logger.debug(f"Loaded catalog for turnus ({camp_id}, {property_id}): {len(overrides)} override kinds")
        return TurnusCatalog(overrides=dict(overrides), general=dict(general))


class CatalogService:
    """Catalog service"""

    def __init__(self, db: Session):
        self.db = db

    def create_item(self, data: CatalogItemCreate) -> CatalogItem:
        item = CatalogItem(kind=data.kind, name=data.name, price=data.price)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def set_turnus_price(self, camp_id: int, property_id: int, data: TurnusPriceCreate) -> TurnusCatalogPrice:
        """Create or replace the turnus override of a general entry"""
        item = self.db.query(CatalogItem).filter(CatalogItem.id == data.item_id).first()
        if not item:
            raise ValueError(f"Catalog item {data.item_id} not found")

        row = self.db.query(TurnusCatalogPrice).filter(
            TurnusCatalogPrice.camp_id == camp_id,
            TurnusCatalogPrice.property_id == property_id,
            TurnusCatalogPrice.item_id == data.item_id
        ).first()
        if row is None:
            row = TurnusCatalogPrice(camp_id=camp_id, property_id=property_id, item_id=data.item_id)
            self.db.add(row)
        row.price = data.price
        row.name = data.name
        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Turnus ({camp_id}, {property_id}) price for item {item.id} set to {data.price}")
        return row

    def list_turnus_entries(self, camp_id: int, property_id: int, kind: CatalogKind) -> List[dict]:
        """Effective entries of one kind for a turnus; overrides replace general entries"""
        catalog = DatabaseCatalogSource(self.db).load(camp_id, property_id)
        component_kind = KIND_MAP[kind]
        overrides = catalog.overrides.get(component_kind, {})
        general = catalog.general.get(component_kind, {})

        entries = []
        for item_id in sorted(set(general) | set(overrides)):
            entry = overrides.get(item_id) or general[item_id]
            entries.append({
                "id": entry.id,
                "general_id": item_id,
                "kind": kind,
                "name": entry.name,
                "price": entry.price,
                "turnus_specific": item_id in overrides
            })
        return entries
