from types import SimpleNamespace

import pytest

from zenstore.common.models import Order
from zenstore.common.services.catalog_service import CatalogService


@pytest.fixture
def catalog(session_factory):
    return CatalogService(session_factory, app_env="development")


class TestListings:
    def test_published_only_newest_first(self, catalog, make_laptop):
        old_id, _ = make_laptop(days_ago=10)
        new_id, _ = make_laptop(days_ago=1)
        make_laptop(published=False)

        result = catalog.list_published(page=1, page_size=12)

        assert [item["id"] for item in result["items"]] == [new_id, old_id]
        assert result["pagination"]["total"] == 2
        assert result["pagination"]["has_next"] is False

    def test_pagination(self, catalog, make_laptop):
        for n in range(5):
            make_laptop(days_ago=n)

        first = catalog.list_published(page=1, page_size=2)
        last = catalog.list_published(page=3, page_size=2)

        assert len(first["items"]) == 2
        assert first["pagination"]["total_pages"] == 3
        assert first["pagination"]["has_next"] is True
        assert len(last["items"]) == 1
        assert last["pagination"]["has_prev"] is True

    def test_images_come_in_position_order(self, catalog, make_laptop):
        laptop_id, ids = make_laptop(positions=(5, 0, 3))

        laptop = catalog.get_laptop(laptop_id)

        assert [img["position"] for img in laptop["images"]] == [0, 3, 5]
        assert [img["id"] for img in laptop["images"]] == [ids[1], ids[2], ids[0]]

    def test_hidden_laptop(self, catalog, make_laptop):
        laptop_id, _ = make_laptop(published=False)

        assert catalog.get_laptop(laptop_id) == {}
        assert catalog.get_laptop(laptop_id, published_only=False)["id"] == laptop_id

    def test_admin_listing_includes_drafts(self, catalog, make_laptop):
        a, _ = make_laptop()
        b, _ = make_laptop(published=False)

        assert [item["id"] for item in catalog.list_admin()] == [b, a]

    def test_price_is_float(self, catalog, make_laptop):
        laptop_id, _ = make_laptop(price=4381100)
        laptop = catalog.get_laptop(laptop_id)
        assert laptop["price"] == 4381100.0
        assert isinstance(laptop["price"], float)


class TestSearchAndRelated:
    def test_search_by_title_and_description(self, catalog, make_laptop):
        hit, _ = make_laptop(title="MacBook Air M3")
        make_laptop(title="Dell XPS 13")
        make_laptop(title="MacBook Pro draft", published=False)

        result = catalog.search("macbook")

        assert [item["id"] for item in result] == [hit]
        assert len(result[0]["images"]) == 1
        assert len(catalog.search("keyboard")) == 2

    def test_empty_query(self, catalog, make_laptop):
        make_laptop()
        assert catalog.search("   ") == []

    def test_related_excludes_current(self, catalog, make_laptop):
        ids = [make_laptop(days_ago=n)[0] for n in range(6)]

        related = catalog.related(ids[0])

        assert ids[0] not in [item["id"] for item in related]
        assert len(related) == 4


class TestStats:
    def test_counts(self, catalog, make_laptop, session_factory):
        make_laptop()
        make_laptop(published=False)
        with session_factory() as session:
            session.add(Order(username="Bat", laptop_choice="X1", phone_number="99112233", email="b@x.mn"))
            session.add(Order(username="Dorj", laptop_choice="X1", phone_number="99112234", email="d@x.mn", status="completed"))

        assert catalog.stats() == {"laptops": 2, "published": 1, "orders": 2, "pending_orders": 1}


class TestCaching:
    def test_results_cached_until_invalidated(self, session_factory, make_laptop):
        catalog = CatalogService(session_factory, app_env="production")
        make_laptop()
        assert catalog.list_published()["pagination"]["total"] == 1

        make_laptop()
        assert catalog.list_published()["pagination"]["total"] == 1

        catalog.invalidate_cache()
        assert catalog.list_published()["pagination"]["total"] == 2

    def test_development_does_not_cache(self, catalog, make_laptop):
        make_laptop()
        assert catalog.list_published()["pagination"]["total"] == 1
        make_laptop()
        assert catalog.list_published()["pagination"]["total"] == 2

    def test_expired_entry_is_reloaded(self, session_factory, make_laptop, monkeypatch):
        import zenstore.common.services.catalog_service as module

        clock = {"now": 1000.0}
        monkeypatch.setattr(module, "time", SimpleNamespace(time=lambda: clock["now"]))
        catalog = CatalogService(session_factory, app_env="production")
        make_laptop()
        catalog.stats()
        make_laptop()

        assert catalog.stats()["laptops"] == 1
        clock["now"] += 31  # realtime ttl is 30s
        assert catalog.stats()["laptops"] == 2

    def test_expired_entries_are_dropped_on_write(self, session_factory, make_laptop, monkeypatch):
        import zenstore.common.services.catalog_service as module

        clock = {"now": 1000.0}
        monkeypatch.setattr(module, "time", SimpleNamespace(time=lambda: clock["now"]))
        catalog = CatalogService(session_factory, app_env="production")
        make_laptop(title="HP Spectre")
        for i in range(5):
            catalog.search(f"term{i}")
        catalog.stats()
        assert len(catalog._cache) == 6

        clock["now"] += 601  # public ttl is 600s
        catalog.search("spectre")

        assert list(catalog._cache) == [("search", "spectre", 10)]

    def test_cache_size_is_capped(self, session_factory, make_laptop):
        catalog = CatalogService(session_factory, app_env="production", max_entries=3)
        make_laptop()
        for i in range(10):
            catalog.search(f"term{i}")

        assert len(catalog._cache) == 3
        assert [key[1] for key in catalog._cache] == ["term7", "term8", "term9"]
