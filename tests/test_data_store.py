"""Tests for data persistence layer."""

import json

import pytest

from basket_advisor.data_store import BasketNotFoundError, DataStore, InvalidBasketError


class TestDataStoreInit:
    """Tests for DataStore initialization."""

    def test_creates_history_file(self, temp_data_dir):
        """DataStore creates an empty history file."""
        DataStore(data_dir=temp_data_dir)

        with open(temp_data_dir / "history.json") as f:
            assert json.load(f) == {"baskets": []}

    def test_default_data_dir(self, monkeypatch, tmp_path):
        """DataStore uses ./data by default."""
        monkeypatch.chdir(tmp_path)
        store = DataStore()
        assert store.data_dir == tmp_path / "data"

    def test_corrupt_file_reads_empty(self, temp_data_dir):
        """Unreadable history is treated as empty."""
        (temp_data_dir / "history.json").write_text("{not json")
        assert DataStore(data_dir=temp_data_dir).list_baskets() == []

    def test_wrong_shape_reads_empty(self, temp_data_dir):
        """History without a basket list is treated as empty."""
        (temp_data_dir / "history.json").write_text('{"baskets": "nope"}')
        assert DataStore(data_dir=temp_data_dir).list_baskets() == []

    def test_malformed_record_skipped(self, temp_data_dir):
        """Bad records are skipped, good ones kept."""
        (temp_data_dir / "history.json").write_text(
            json.dumps(
                {
                    "baskets": [
                        {"items": ["milk"]},
                        {"items": ["x"], "total": "lots"},
                        {"items": 5},
                        {"items": ["y"], "items_detailed": 7},
                    ]
                }
            )
        )
        baskets = DataStore(data_dir=temp_data_dir).list_baskets()
        assert [b.items for b in baskets] == [["milk"]]


class TestAddBasket:
    """Tests for recording baskets."""

    def test_add_and_persist(self, data_store, temp_data_dir):
        """Baskets survive a new store instance."""
        basket = data_store.add_basket(items=["Milk", "bread", "milk"], store="Market", total=9.5)

        assert basket.items == ["milk", "bread"]
        reloaded = DataStore(data_dir=temp_data_dir).get_basket(basket.id)
        assert reloaded == basket

    def test_items_from_detailed(self, data_store):
        """Items derive from itemized entries."""
        basket = data_store.add_basket(
            items_detailed=[{"name": "Coffee", "price": 12.0, "qty": 0}]
        )

        assert basket.items == ["coffee"]
        assert basket.items_detailed[0].qty == 1
        assert basket.items_detailed[0].price == 12.0

    def test_empty_basket_rejected(self, data_store):
        """A basket needs at least one real item."""
        with pytest.raises(InvalidBasketError):
            data_store.add_basket(items=["", "   "])
        assert data_store.list_baskets() == []

    def test_blank_store_is_none(self, data_store):
        """Empty store names are stored as missing."""
        assert data_store.add_basket(items=["a"], store="").store is None


class TestListBaskets:
    """Tests for listing history."""

    def test_newest_first(self, data_store, days_ago):
        """Baskets are listed newest first."""
        old = data_store.add_basket(items=["a"], created_at=days_ago(10))
        new = data_store.add_basket(items=["b"], created_at=days_ago(1))

        assert [b.id for b in data_store.list_baskets()] == [new.id, old.id]

    def test_limit(self, data_store, days_ago):
        """Limit keeps only the newest baskets."""
        for d in (3, 2, 1):
            data_store.add_basket(items=[f"item {d}"], created_at=days_ago(d))

        baskets = data_store.list_baskets(limit=2)
        assert [b.items for b in baskets] == [["item 1"], ["item 2"]]

    def test_user_scoping(self, data_store):
        """Baskets are filtered by owner."""
        data_store.add_basket(items=["a"], user_id="alice")
        data_store.add_basket(items=["b"], user_id="bob")

        assert [b.items for b in data_store.list_baskets(user_id="alice")] == [["a"]]
        assert len(data_store.list_baskets()) == 2

    def test_get_basket_scoping(self, data_store):
        """Lookups by id follow the same ownership rule as listing."""
        owned = data_store.add_basket(items=["a"], user_id="alice")
        shared = data_store.add_basket(items=["b"])

        assert data_store.get_basket(owned.id, user_id="alice") == owned
        assert data_store.get_basket(owned.id, user_id="bob") is None
        assert data_store.get_basket(shared.id, user_id="bob") is None
        assert data_store.get_basket(shared.id) == shared
        assert data_store.list_baskets(user_id="bob") == []


class TestUpdateDeleteBasket:
    """Tests for editing and removing baskets."""

    def test_update_fields(self, data_store):
        """Partial updates leave other fields alone."""
        basket = data_store.add_basket(items=["a"], store="Market", total=5.0)

        updated = data_store.update_basket(basket.id, items=["B", "c"], total=7.0)

        assert updated.items == ["b", "c"]
        assert updated.total == 7.0
        assert updated.store == "Market"
        assert updated.id == basket.id
        assert updated.created_at == basket.created_at
        assert data_store.get_basket(basket.id) == updated

    def test_clear_store(self, data_store):
        """Store can be cleared explicitly."""
        basket = data_store.add_basket(items=["a"], store="Market")
        assert data_store.update_basket(basket.id, store=None).store is None

    def test_update_missing(self, data_store):
        """Updating an unknown basket raises."""
        with pytest.raises(BasketNotFoundError):
            data_store.update_basket("bkt_missing", items=["a"])

    def test_update_to_empty_rejected(self, data_store):
        """An update cannot empty a basket."""
        basket = data_store.add_basket(items=["a"])

        with pytest.raises(InvalidBasketError):
            data_store.update_basket(basket.id, items=[""])
        assert data_store.get_basket(basket.id).items == ["a"]

    def test_delete(self, data_store):
        """Deleted baskets are gone."""
        basket = data_store.add_basket(items=["a"])

        removed = data_store.delete_basket(basket.id)

        assert removed.id == basket.id
        assert data_store.get_basket(basket.id) is None

    def test_delete_missing(self, data_store):
        """Deleting an unknown basket raises."""
        with pytest.raises(BasketNotFoundError) as exc_info:
            data_store.delete_basket("bkt_missing")
        assert exc_info.value.basket_id == "bkt_missing"


class TestExportImport:
    """Tests for history transfer."""

    def test_export_plain_dicts(self, data_store):
        """Export yields JSON-ready dicts."""
        data_store.add_basket(items=["milk"], user_id="alice")
        data_store.add_basket(items=["beer"], user_id="bob")

        exported = data_store.export_baskets(user_id="alice")

        assert len(exported) == 1
        assert exported[0]["items"] == ["milk"]
        json.dumps(exported)

    def test_import_keeps_timestamps(self, data_store, days_ago):
        """Imported baskets keep valid timestamps and get the new owner."""
        stamp = days_ago(30)
        records = [
            {"items": ["Milk"], "created_at": stamp, "user_id": "someone"},
            {"items": [], "items_detailed": [{"name": "eggs", "price": 3}]},
            {"items": ["", " "]},
            "not a record",
        ]

        count = data_store.import_baskets(records, user_id="alice")

        assert count == 2
        baskets = data_store.list_baskets(user_id="alice")
        assert {tuple(b.items) for b in baskets} == {("milk",), ("eggs",)}
        milk = next(b for b in baskets if b.items == ["milk"])
        assert milk.created_at == stamp

    def test_import_replaces_bad_timestamp(self, data_store):
        """Unparsable timestamps are replaced on import."""
        data_store.import_baskets([{"items": ["a"], "created_at": "someday"}])
        assert data_store.list_baskets()[0].created_at != "someday"

    def test_import_skips_non_list_items(self, data_store):
        """Records with scalar items are skipped, the rest imported."""
        records = [{"items": ["milk"]}, {"items": 5}, {"items": ["x"], "items_detailed": 7}]

        assert data_store.import_baskets(records) == 1
        assert [b.items for b in data_store.list_baskets()] == [["milk"]]

    def test_import_out_of_range_timestamp(self, data_store):
        """Timestamps outside the datetime range are replaced on import."""
        data_store.import_baskets([{"items": ["a"], "created_at": "0001-01-01T00:00:00+05:00"}])
        assert data_store.list_baskets()[0].created_at != "0001-01-01T00:00:00+05:00"

    def test_export_import_round_trip(self, data_store, temp_data_dir, tmp_path):
        """Exported history imports into another store."""
        data_store.add_basket(items=["milk", "bread"], total=5.0)
        other = DataStore(data_dir=tmp_path / "other")

        assert other.import_baskets(data_store.export_baskets()) == 1
        assert other.list_baskets()[0].items == ["milk", "bread"]
