"""
Tests for the offline API facade.
"""

import re
from datetime import datetime

import pytest
from pydantic import ValidationError

from offline_pos.api import OfflineAPI, RecordNotFoundError
from offline_pos.database import StoreError, create_local_store
from offline_pos.services import OfflineDataService


def _break_reads(monkeypatch, store):
    def broken_get(collection, key=None):
        raise StoreError("database is locked")

    monkeypatch.setattr(store, "get", broken_get)


def _break_writes(monkeypatch, store):
    def broken_put(collection, record):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(store, "put", broken_put)


class TestCreateOrder:
    """Order creation and the matching stock decrement."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.store = create_local_store(tmp_path / "data" / "orders.db")
        self.service = OfflineDataService(self.store)
        self.api = OfflineAPI(self.service)

    def test_order_decrements_stock(self):
        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 2, "price": 1500}],
            "total_amount": 3000,
            "payment_method": "cash",
        })

        assert response.success is True
        assert response.message == "Order saved successfully."
        assert self.store.get("items", "1")["stock_quantity"] == 48

    def test_order_is_stored_with_generated_id(self):
        response = self.api.create_order({
            "items": [{"item_id": "7", "quantity": 1, "price": 500}],
        })

        order = response.data
        assert re.fullmatch(r"MA-JAF-[0-9A-Z]{6}", order["id"])
        assert order["status"] == "completed"
        assert order["offline"] is True
        assert self.store.get("orders", order["id"]) == order
        assert len(self.api.get_orders().data) == 3

    def test_caller_total_is_kept(self):
        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 2, "price": 1500}],
            "total_amount": 2500,
        })

        assert response.data["total_amount"] == 2500

    def test_total_computed_when_missing(self):
        response = self.api.create_order({
            "items": [
                {"item_id": "1", "quantity": 2, "price": 1500},
                {"item_id": "8", "quantity": 3, "price": 300},
            ],
        })

        assert response.data["total_amount"] == 3900

    def test_oversell_clamps_stock_at_zero(self):
        response = self.api.create_order({
            "items": [{"item_id": "10", "quantity": 70, "price": 800}],
        })

        assert response.success is True
        assert self.store.get("items", "10")["stock_quantity"] == 0

    def test_unknown_item_line_is_skipped(self):
        response = self.api.create_order({
            "items": [
                {"item_id": "missing", "quantity": 1, "price": 100},
                {"item_id": "2", "quantity": 1, "price": 1800},
            ],
        })

        assert response.success is True
        assert self.store.get("items", "missing") is None
        assert self.store.get("items", "2")["stock_quantity"] == 29

    def test_order_without_lines_is_invalid(self):
        with pytest.raises(ValidationError):
            self.api.create_order({"items": []})

    def test_order_with_zero_quantity_is_invalid(self):
        with pytest.raises(ValidationError):
            self.api.create_order({"items": [{"item_id": "1", "quantity": 0, "price": 1500}]})

    def test_order_is_queued_in_outbox(self):
        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 1, "price": 1500}],
        })

        pending = self.service.get_pending_mutations()

        assert len(pending) == 1
        assert pending[0].collection == "orders"
        assert pending[0].record_id == response.data["id"]

    def test_failed_write_leaves_store_unchanged(self, monkeypatch):
        def broken_queue(*args, **kwargs):
            raise StoreError("disk full")

        monkeypatch.setattr(self.service, "queue_mutation", broken_queue)

        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 2, "price": 1500}],
        })

        assert response.success is False
        assert response.error == "Failed to save order to local storage"
        assert self.store.get("items", "1")["stock_quantity"] == 50
        assert len(self.store.get("orders")) == 2

    def test_unreadable_store_returns_error_response(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 1, "price": 1500}],
        })

        assert response.success is False
        assert response.error == "Failed to save order to local storage"

    def test_unwritable_store_returns_error_response(self, monkeypatch):
        _break_writes(monkeypatch, self.store)

        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 1, "price": 1500}],
        })

        assert response.success is False
        assert self.store.get("items", "1")["stock_quantity"] == 50

    def test_decrement_rewrites_item_record(self):
        self.api.create_order({"items": [{"item_id": "4", "quantity": 5, "price": 1200}]})

        item = self.store.get("items", "4")

        assert item["stock_quantity"] == 35
        assert item["name"] == "Pepper Soup"
        assert item["updated_at"] != item["created_at"]

    def test_invalid_cached_item_fails_whole_order(self):
        self.store.put("items", {"id": "bad", "name": "Broken", "price": -1, "stock_quantity": 3})

        response = self.api.create_order({
            "items": [
                {"item_id": "1", "quantity": 1, "price": 1500},
                {"item_id": "bad", "quantity": 1, "price": 1},
            ],
        })

        assert response.success is False
        assert self.store.get("items", "1")["stock_quantity"] == 50
        assert len(self.store.get("orders")) == 2

    def test_order_writes_audit_entries(self):
        response = self.api.create_order({
            "items": [{"item_id": "1", "quantity": 2, "price": 1500}],
        })

        entries = self.store.get("audit_log")
        created = [e for e in entries if e["action_type"] == "order_created"]
        decremented = [e for e in entries if e["action_type"] == "inventory_decremented"]

        assert created[-1]["order_id"] == response.data["id"]
        assert created[-1]["details"]["unit_count"] == 2
        assert decremented[-1]["item_id"] == "1"
        assert decremented[-1]["details"]["stock_quantity"] == 48


class TestItems:
    """Item reads and local edits."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.store = create_local_store(tmp_path / "data" / "items.db")
        self.service = OfflineDataService(self.store)
        self.api = OfflineAPI(self.service)

    def test_get_items(self):
        response = self.api.get_items()

        assert response.success is True
        assert response.offline is True
        assert len(response.data) == 10

    def test_get_item(self):
        assert self.api.get_item("1").data["name"] == "Jollof Rice"

    def test_get_missing_item_raises(self):
        with pytest.raises(RecordNotFoundError):
            self.api.get_item("404")

    def test_create_item(self):
        response = self.api.create_item({"name": "Moi Moi", "price": 700, "stock_quantity": 12})

        item = response.data
        assert response.message == "Item saved successfully."
        assert item["id"].startswith("MA-JAF-")
        assert item["offline"] is True
        assert self.store.get("items", item["id"])["name"] == "Moi Moi"

    def test_create_invalid_item_raises(self):
        with pytest.raises(ValidationError):
            self.api.create_item({"name": "   ", "price": 100})

    def test_update_item_merges_fields(self):
        response = self.api.update_item("1", {"price": 1600, "id": "other"})

        item = self.store.get("items", "1")
        assert response.success is True
        assert item["id"] == "1"
        assert item["price"] == 1600
        assert item["name"] == "Jollof Rice"
        assert item["offline_updated"] is True
        assert self.store.get("items", "other") is None

    def test_update_missing_item_raises(self):
        with pytest.raises(RecordNotFoundError):
            self.api.update_item("404", {"price": 1})

    def test_delete_is_soft(self):
        response = self.api.delete_item("3")

        item = self.api.get_item("3").data
        assert response.success is True
        assert item["status"] == "deleted"
        assert item["deleted_at"] is not None
        assert item["offline_deleted"] is True
        assert len(self.api.get_items().data) == 10

    def test_deleted_item_not_active(self):
        self.api.delete_item("3")

        active_ids = [item["id"] for item in self.api.get_active_items().data]

        assert "3" not in active_ids
        assert len(active_ids) == 9

    def test_delete_missing_item_raises(self):
        with pytest.raises(RecordNotFoundError):
            self.api.delete_item("404")

    def test_item_edits_are_queued(self):
        self.api.update_item("1", {"price": 1600})
        self.api.delete_item("2")

        actions = [(m.action.value, m.record_id) for m in self.service.get_pending_mutations()]

        assert actions == [("update", "1"), ("delete", "2")]

    def test_reference_data(self):
        assert len(self.api.get_categories().data) == 5
        assert len(self.api.get_users().data) == 3

    def test_create_item_on_unreadable_store(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.create_item({"name": "Moi Moi", "price": 700})

        assert response.success is False
        assert response.error == "Failed to save item to local storage"

    def test_create_item_on_unwritable_store(self, monkeypatch):
        _break_writes(monkeypatch, self.store)

        response = self.api.create_item({"name": "Moi Moi", "price": 700})

        assert response.success is False
        assert len(self.store.get("items")) == 10

    def test_update_item_on_unreadable_store(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.update_item("1", {"price": 1600})

        assert response.success is False
        assert response.error == "Failed to update item in local storage"

    def test_update_item_on_unwritable_store(self, monkeypatch):
        _break_writes(monkeypatch, self.store)

        response = self.api.update_item("1", {"price": 1600})

        assert response.success is False
        assert self.store.get("items", "1")["price"] == 1500

    def test_delete_item_on_unreadable_store(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.delete_item("1")

        assert response.success is False
        assert response.error == "Failed to delete item in local storage"

    def test_delete_item_on_unwritable_store(self, monkeypatch):
        _break_writes(monkeypatch, self.store)

        response = self.api.delete_item("1")

        assert response.success is False
        assert self.store.get("items", "1")["status"] == "active"

    def test_read_failure_returns_error_response(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.get_items()

        assert response.success is False
        assert response.data == []
        assert response.error == "Failed to fetch items from local storage"


class TestReports:
    """Dashboard, sales and inventory figures."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.store = create_local_store(tmp_path / "data" / "reports.db")
        self.service = OfflineDataService(self.store, seed_sample_data=False)
        self.api = OfflineAPI(self.service)

    def _add_item(self, item_id, stock, status="active"):
        self.store.put("items", {
            "id": item_id,
            "name": f"Item {item_id}",
            "price": 100,
            "stock_quantity": stock,
            "status": status,
        })

    def test_dashboard_on_empty_store(self):
        response = self.api.get_dashboard_stats()

        assert response.success is True
        assert response.data == {
            "total_orders": 0,
            "total_revenue": 0,
            "total_items": 0,
            "low_stock_items": 0,
            "today_orders": 0,
            "today_revenue": 0,
        }

    def test_dashboard_on_seeded_store(self):
        self.service.initialize_sample_data_if_needed()

        stats = self.api.get_dashboard_stats().data

        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == 6300
        assert stats["total_items"] == 10
        assert stats["low_stock_items"] == 0

    def test_dashboard_low_stock_and_deleted(self):
        self._add_item("a", 3)
        self._add_item("b", 10)
        self._add_item("c", 9)
        self._add_item("d", 0, status="deleted")

        stats = self.api.get_dashboard_stats().data

        assert stats["total_items"] == 3
        assert stats["low_stock_items"] == 2

    def test_dashboard_today_figures(self):
        self._add_item("a", 20)
        response = self.api.create_order({
            "items": [{"item_id": "a", "quantity": 2, "price": 100}],
        })
        self.store.put("orders", {
            "id": "old",
            "items": [],
            "total_amount": 999,
            "created_at": "2020-01-01T10:00:00",
        })
        order_day = datetime.fromisoformat(response.data["created_at"]).date()

        stats = self.api.get_dashboard_stats(today=order_day).data

        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == 1199
        assert stats["today_orders"] == 1
        assert stats["today_revenue"] == 200

    def test_dashboard_failure_returns_zeroes(self, monkeypatch):
        _break_reads(monkeypatch, self.store)

        response = self.api.get_dashboard_stats()

        assert response.success is True
        assert response.error == "Using default stats due to error"
        assert set(response.data.values()) == {0}

    def test_inventory_status_buckets(self):
        for item_id, stock in (("a", 0), ("b", 5), ("c", 10), ("d", 11)):
            self._add_item(item_id, stock)
        self._add_item("e", 50, status="deleted")

        statuses = {row["id"]: row["status"] for row in self.api.get_inventory_status().data}

        assert statuses == {
            "a": "out_of_stock",
            "b": "low_stock",
            "c": "low_stock",
            "d": "in_stock",
        }

    def test_sales_per_order(self):
        self.service.initialize_sample_data_if_needed()

        sales = self.api.get_sales_analytics().data

        assert [entry["amount"] for entry in sales] == [3500, 2800]
        assert all(entry["orders"] == 1 for entry in sales)

    def test_sales_grouped_by_day(self):
        for order_id, day, amount in (
            ("o1", "2025-01-01T09:00:00", 100),
            ("o2", "2025-01-02T12:00:00", 300),
            ("o3", "2025-01-01T18:30:00", 250),
        ):
            self.store.put("orders", {"id": order_id, "total_amount": amount, "created_at": day})

        sales = self.api.get_sales_analytics(group_by_day=True).data

        assert sales == [
            {"date": "2025-01-01", "amount": 350, "orders": 2},
            {"date": "2025-01-02", "amount": 300, "orders": 1},
        ]

    def test_sync_status(self):
        self.service.initialize_sample_data_if_needed()
        self._add_item("a", 20)
        self.api.update_item("a", {"price": 150})

        status = self.api.get_sync_status().data

        assert status["offline"] is True
        assert status["last_sync"] is not None
        assert status["pending_mutations"] == 1


class TestClearOfflineData:

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        self.store = create_local_store(tmp_path / "data" / "clear.db")
        self.api = OfflineAPI(OfflineDataService(self.store))

    def test_clear_then_reads_are_empty(self):
        response = self.api.clear_offline_data()

        assert response.success is True
        assert response.data["records_removed"] > 0
        assert self.api.get_items().data == []
        assert self.api.get_orders().data == []
        assert self.api.get_categories().data == []
        assert self.api.get_users().data == []

    def test_to_dict_drops_empty_fields(self):
        body = self.api.clear_offline_data().to_dict()

        assert body["success"] is True
        assert body["offline"] is True
        assert "error" not in body
