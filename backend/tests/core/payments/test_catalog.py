"""
PriceCatalogResolver and the per-turnus cache
"""
import threading
from decimal import Decimal

from core.payments import CatalogCache, ComponentId, PriceCatalogResolver, TurnusCatalog


class TestResolve:
    """Turnus override first, general catalog second"""

    def test_turnus_override_wins(self, catalog_source, make_snapshot):
        resolver = PriceCatalogResolver(catalog_source)
        resolved = resolver.resolve(make_snapshot(protections=(1, 2), camp_id=10, property_id=20))

        prices = {c.component_id: c.entry.price for c in resolved.protections}
        assert prices[ComponentId.protection(1)] == Decimal("250.00")
        assert prices[ComponentId.protection(2)] == Decimal("150.00")

    def test_general_fallback_without_turnus(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(make_snapshot(protections=(1,)))
        assert resolved.protections[0].entry.price == Decimal("200.00")
        assert resolved.protections[0].entry.name == "Rezygnacja"

    def test_other_turnus_uses_general(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(
            make_snapshot(protections=(1,), camp_id=10, property_id=99)
        )
        assert resolved.protections[0].entry.price == Decimal("200.00")

    def test_missing_entry_excluded_and_reported(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(
            make_snapshot(protections=(1, 99), addons=(42,))
        )
        assert [c.component_id for c in resolved.protections] == [ComponentId.protection(1)]
        assert resolved.addons == ()
        assert set(resolved.missing) == {ComponentId.protection(99), ComponentId.addon(42)}

    def test_duplicate_selection_counted_once(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(make_snapshot(addons=(7, 7)))
        assert len(resolved.addons) == 1
        assert resolved.extras_total == Decimal("100.00")

    def test_selection_order_kept(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(make_snapshot(protections=(2, 1)))
        assert [c.component_id.ref for c in resolved.protections] == [2, 1]

    def test_totals(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(
            make_snapshot(protections=(1,), addons=(7,), diet=5)
        )
        assert resolved.extras_total == Decimal("380.00")
        # diet is not paid with the deposit
        assert resolved.deposit_extras_total == Decimal("300.00")

    def test_diet_resolved(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(make_snapshot(diet=5))
        assert resolved.diet.entry.price == Decimal("80.00")

    def test_missing_diet(self, catalog_source, make_snapshot):
        resolved = PriceCatalogResolver(catalog_source).resolve(make_snapshot(diet=404))
        assert resolved.diet is None
        assert resolved.missing == (ComponentId.diet(404),)


class TestCatalogCache:
    """One load per (camp, property) per batch"""

    def test_same_turnus_loaded_once(self, catalog_source, make_snapshot):
        resolver = PriceCatalogResolver(catalog_source)
        for reservation_id in range(1, 6):
            resolver.resolve(make_snapshot(protections=(1,), camp_id=10, property_id=20,
                                           reservation_id=reservation_id))
        assert catalog_source.load_count == 1

    def test_each_turnus_loaded_once(self, catalog_source, make_snapshot):
        resolver = PriceCatalogResolver(catalog_source)
        for key in [(10, 20), (10, 21), (10, 20), (None, None), (10, 21)]:
            resolver.resolve(make_snapshot(camp_id=key[0], property_id=key[1]))
        assert catalog_source.load_count == 3
        assert len(resolver.cache) == 3
        assert (10, 21) in resolver.cache

    def test_shared_cache_across_resolvers(self, catalog_source, make_snapshot):
        cache = CatalogCache()
        PriceCatalogResolver(catalog_source, cache=cache).resolve(make_snapshot(camp_id=1, property_id=1))
        PriceCatalogResolver(catalog_source, cache=cache).resolve(make_snapshot(camp_id=1, property_id=1))
        assert catalog_source.load_count == 1

    def test_concurrent_fill_loads_once(self):
        cache = CatalogCache()
        calls = []
        barrier = threading.Barrier(8)

        def loader():
            calls.append(1)
            return TurnusCatalog()

        def worker():
            barrier.wait()
            cache.get((1, 1), loader)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
