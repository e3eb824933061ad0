"""
core/payments/catalog.py

PriceCatalogResolver - turnus-specific prices with general catalog fallback.

Catalog lookups are the only I/O of the engine. They go through a
``CatalogSource`` and are memoized per (camp_id, property_id) in a
``CatalogCache`` shared by a batch of reservations.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
import logging
import threading

from core.payments.identifiers import ComponentId, ComponentKind
from core.payments.models import ZERO, CatalogEntry, ReservationSnapshot

logger = logging.getLogger(__name__)

CATALOG_KINDS = (ComponentKind.PROTECTION, ComponentKind.ADDON, ComponentKind.DIET)

TurnusKey = Tuple[Optional[int], Optional[int]]


@dataclass(frozen=True)
class TurnusCatalog:
    """
    Catalog view for one turnus

    Attributes:
        overrides: kind -> {id: entry} turnus-scoped prices
        general: kind -> {id: entry} general catalog
    """

    overrides: Dict[ComponentKind, Dict[int, CatalogEntry]] = field(default_factory=dict)
    general: Dict[ComponentKind, Dict[int, CatalogEntry]] = field(default_factory=dict)

    def lookup(self, component_id: ComponentId) -> Optional[CatalogEntry]:
        override = self.overrides.get(component_id.kind, {}).get(component_id.ref)
        if override is not None:
            return override
        return self.general.get(component_id.kind, {}).get(component_id.ref)


class CatalogSource(ABC):
    """Catalog collaborator (database, remote API...)"""

    @abstractmethod
    def load(self, camp_id: Optional[int], property_id: Optional[int]) -> TurnusCatalog:
        """Fetch the catalog for a turnus; no turnus means general prices only"""


class StaticCatalogSource(CatalogSource):
    """In-memory catalog, used by tooling and tests"""

    def __init__(self,
                 general: Optional[Dict[ComponentKind, Dict[int, CatalogEntry]]] = None,
                 overrides: Optional[Dict[TurnusKey, Dict[ComponentKind, Dict[int, CatalogEntry]]]] = None):
        self._general = general or {}
        self._overrides = overrides or {}
        self.load_count = 0

    def load(self, camp_id: Optional[int], property_id: Optional[int]) -> TurnusCatalog:
        self.load_count += 1
        return TurnusCatalog(
            overrides=self._overrides.get((camp_id, property_id), {}),
            general=self._general,
        )


class CatalogCache:
    """
    Fill-once cache keyed by (camp_id, property_id)

    The lock only guards the fill; a populated entry is never replaced, so
    concurrent readers of a filled key see the same object.
    """

    def __init__(self):
        self._entries: Dict[TurnusKey, TurnusCatalog] = {}
        self._lock = threading.Lock()

    def get(self, key: TurnusKey, loader: Callable[[], TurnusCatalog]) -> TurnusCatalog:
        cached = self._entries.get(key)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                cached = loader()
                self._entries[key] = cached
                logger.debug(f"Catalog cached for turnus {key}")
            return cached

    def __contains__(self, key: TurnusKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ResolvedComponent:
    component_id: ComponentId
    entry: CatalogEntry


@dataclass(frozen=True)
class ResolvedCatalog:
    """Catalog resolution result for one reservation, in selection order"""

    protections: Tuple[ResolvedComponent, ...] = ()
    addons: Tuple[ResolvedComponent, ...] = ()
    diet: Optional[ResolvedComponent] = None
    missing: Tuple[ComponentId, ...] = ()

    @property
    def extras_total(self) -> Decimal:
        components = list(self.protections) + list(self.addons)
        if self.diet is not None:
            components.append(self.diet)
        return sum((c.entry.price for c in components), ZERO)

    @property
    def deposit_extras_total(self) -> Decimal:
        """Protections and addons, the parts paid together with the deposit"""
        return sum((c.entry.price for c in self.protections + self.addons), ZERO)


class PriceCatalogResolver:
    """
    Resolve selected components to names and prices

    Example:
        >>> resolver = PriceCatalogResolver(source, cache=CatalogCache())
        >>> resolved = resolver.resolve(snapshot)
        >>> [c.entry.price for c in resolved.protections]
    """

    def __init__(self, source: CatalogSource, cache: Optional[CatalogCache] = None):
        self._source = source
        self._cache = cache if cache is not None else CatalogCache()

    @property
    def cache(self) -> CatalogCache:
        return self._cache

    def catalog_for(self, camp_id: Optional[int], property_id: Optional[int]) -> TurnusCatalog:
        key = (camp_id, property_id)
        return self._cache.get(key, lambda: self._source.load(camp_id, property_id))

    def resolve(self, reservation: ReservationSnapshot) -> ResolvedCatalog:
        catalog = self.catalog_for(reservation.camp_id, reservation.property_id)
        missing: List[ComponentId] = []

        def _resolve_all(selection) -> Tuple[ResolvedComponent, ...]:
            resolved: List[ResolvedComponent] = []
            seen = set()
            for component_id in selection:
                if component_id in seen:
                    logger.warning(
                        f"Reservation {reservation.id}: duplicate selection {component_id} ignored"
                    )
                    continue
                seen.add(component_id)
                entry = catalog.lookup(component_id)
                if entry is None:
                    logger.warning(
                        f"Reservation {reservation.id}: no catalog entry for {component_id} "
                        f"(turnus {reservation.turnus_key}), excluded from allocation"
                    )
                    missing.append(component_id)
                    continue
                resolved.append(ResolvedComponent(component_id, entry))
            return tuple(resolved)

        protections = _resolve_all(reservation.selected_protections)
        addons = _resolve_all(reservation.selected_addons)
        diet = None
        if reservation.selected_diet is not None:
            resolved_diet = _resolve_all((reservation.selected_diet,))
            diet = resolved_diet[0] if resolved_diet else None

        return ResolvedCatalog(
            protections=protections,
            addons=addons,
            diet=diet,
            missing=tuple(missing),
        )


__all__ = [
    "CATALOG_KINDS", "TurnusCatalog", "CatalogSource", "StaticCatalogSource",
    "CatalogCache", "ResolvedComponent", "ResolvedCatalog", "PriceCatalogResolver",
]
