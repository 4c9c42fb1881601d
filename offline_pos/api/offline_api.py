"""
Offline API facade.

Mirrors the remote API's operations (orders, items, reference data and
dashboard reports) but serves them entirely from the local store, so the
register keeps working without a network.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..database.local_store import InvalidRecordError, StoreError
from ..models import (
    LOW_STOCK_LEVEL,
    ActionType,
    Actor,
    Item,
    ItemStatus,
    MutationAction,
    Order,
    OrderStatus,
    Outcome,
    classify_stock,
)
from ..services.offline_service import OfflineDataService
from ..utils import generate_reference, get_logger
from .responses import ApiResponse


class OfflineAPIError(Exception):
    """Base error for facade operations."""
    pass


class RecordNotFoundError(OfflineAPIError):
    """Raised when an operation targets a record that is not in the store."""
    pass


def _as_number(value: Any) -> float:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def _order_date(order: Dict[str, Any]) -> Optional[date]:
    created_at = order.get("created_at")
    if not created_at:
        return None
    try:
        return datetime.fromisoformat(str(created_at)).date()
    except ValueError:
        return None


def _is_deleted(item: Dict[str, Any]) -> bool:
    return item.get("status") == ItemStatus.DELETED.value


class OfflineAPI:
    """Local-only implementation of the POS API surface."""

    def __init__(self, service: OfflineDataService, id_prefix: str = "MA-JAF") -> None:
        """
        Initialize the facade.

        Args:
            service: Offline data service owning the store
            id_prefix: Label prepended to locally generated ids
        """
        self.service = service
        self.store = service.store
        self.audit_logger = service.audit_logger
        self.id_prefix = id_prefix
        self.logger = get_logger("offline_api")

    def _new_id(self, collection: str) -> str:
        """Generate a prefixed id that is not yet used in ``collection``."""
        while True:
            candidate = generate_reference(self.id_prefix)
            if self.store.get(collection, candidate) is None:
                return candidate

    def _read_collection(self, collection: str) -> ApiResponse:
        try:
            records = self.store.get(collection)
            return ApiResponse(
                success=True,
                data=records if isinstance(records, list) else [],
            )
        except StoreError as e:
            self.logger.error(f"Error fetching {collection}: {e}")
            return ApiResponse(
                success=False,
                data=[],
                error=f"Failed to fetch {collection} from local storage",
            )

    # Orders

    def create_order(self, order_data: Dict[str, Any]) -> ApiResponse:
        """
        Save an order locally and take its lines out of stock.

        The order, the stock decrements and the outbox entry commit together.
        Stock is clamped at zero; a shortfall is not rejected here.

        Args:
            order_data: Order fields; ``items`` holds lines with
                ``item_id``, ``quantity`` and ``price``

        Returns:
            ApiResponse carrying the stored order

        Raises:
            pydantic.ValidationError: If ``order_data`` is not a valid order
        """
        now = datetime.now()
        try:
            order_id = self._new_id("orders")
        except StoreError as e:
            self.logger.error(f"Error creating order: {e}")
            return ApiResponse(success=False, error="Failed to save order to local storage")

        order = Order.model_validate({
            **order_data,
            "id": order_id,
            "status": OrderStatus.COMPLETED,
            "created_at": now,
            "updated_at": now,
            "offline": True,
        })
        record = order.model_dump(mode="json")

        stock_changes: Dict[str, int] = {}
        try:
            with self.store.transaction():
                self.store.put("orders", record)
                for line in order.items:
                    new_quantity = self._decrement_inventory_locally(line.item_id, line.quantity)
                    if new_quantity is not None:
                        stock_changes[line.item_id] = new_quantity
                self.service.queue_mutation("orders", MutationAction.CREATE, order.id, record)
        except StoreError as e:
            self.logger.error(f"Error creating order {order.id}: {e}")
            self.audit_logger.log_action(
                action_type=ActionType.ORDER_CREATED,
                actor=Actor.USER,
                outcome=Outcome.FAILURE,
                order_id=order.id,
                error_message=str(e),
            )
            return ApiResponse(success=False, error="Failed to save order to local storage")

        self.audit_logger.log_action(
            action_type=ActionType.ORDER_CREATED,
            actor=Actor.USER,
            details={
                "total_amount": order.total_amount,
                "item_count": order.get_item_count(),
                "unit_count": order.get_total_quantity(),
                "payment_method": order.payment_method.value,
            },
            order_id=order.id,
        )
        for item_id, new_quantity in stock_changes.items():
            self.audit_logger.log_action(
                action_type=ActionType.INVENTORY_DECREMENTED,
                actor=Actor.SYSTEM,
                details={"order_id": order.id, "stock_quantity": new_quantity},
                item_id=item_id,
            )
        self.logger.info(f"Order {order.id} saved locally ({order.total_amount})")
        return ApiResponse(success=True, data=record, message="Order saved successfully.")

    def _decrement_inventory_locally(self, item_id: str, quantity: int) -> Optional[int]:
        """
        Take sold units out of one item's stock, clamping at zero.

        Returns:
            The new stock quantity, or None if the item is not cached

        Raises:
            InvalidRecordError: If the cached item is not a valid item
        """
        record = self.store.get("items", item_id)
        if record is None:
            self.logger.warning(f"Item {item_id} not in local store; stock left unchanged")
            return None

        try:
            item = Item.model_validate(record)
        except ValidationError as e:
            raise InvalidRecordError(f"Cached item {item_id} is invalid: {e}") from e

        new_quantity = item.decrement_stock(quantity)
        self.store.put("items", item.model_dump(mode="json"))
        return new_quantity

    def get_orders(self) -> ApiResponse:
        return self._read_collection("orders")

    # Items

    def get_items(self) -> ApiResponse:
        """All cached items, soft-deleted ones included."""
        return self._read_collection("items")

    def get_active_items(self) -> ApiResponse:
        """Items that can be sold: status ``active`` only."""
        response = self._read_collection("items")
        if response.success:
            response.data = [
                item for item in response.data
                if item.get("status") == ItemStatus.ACTIVE.value
            ]
        return response

    def get_item(self, item_id: str) -> ApiResponse:
        """
        Read one item by id.

        Raises:
            RecordNotFoundError: If the item is not cached
        """
        try:
            record = self.store.get("items", item_id)
        except StoreError as e:
            self.logger.error(f"Error fetching item {item_id}: {e}")
            return ApiResponse(success=False, error="Failed to fetch item from local storage")

        if record is None:
            raise RecordNotFoundError(f"Item not found: {item_id}")
        return ApiResponse(success=True, data=record)

    def create_item(self, item_data: Dict[str, Any]) -> ApiResponse:
        """
        Create an item locally.

        Raises:
            pydantic.ValidationError: If ``item_data`` is not a valid item
        """
        now = datetime.now()
        try:
            item_id = self._new_id("items")
        except StoreError as e:
            self.logger.error(f"Error creating item: {e}")
            return ApiResponse(success=False, error="Failed to save item to local storage")

        item = Item.model_validate({
            **item_data,
            "id": item_id,
            "created_at": now,
            "updated_at": now,
            "offline": True,
        })
        record = item.model_dump(mode="json")

        try:
            with self.store.transaction():
                self.store.put("items", record)
                self.service.queue_mutation("items", MutationAction.CREATE, item.id, record)
        except StoreError as e:
            self.logger.error(f"Error creating item: {e}")
            return ApiResponse(success=False, error="Failed to save item to local storage")

        self.audit_logger.log_action(
            action_type=ActionType.ITEM_CREATED,
            details={"name": item.name},
            item_id=item.id,
        )
        self.logger.info(f"Created item: {item.name} ({item.id})")
        return ApiResponse(success=True, data=record, message="Item saved successfully.")

    def update_item(self, item_id: str, item_data: Dict[str, Any]) -> ApiResponse:
        """
        Merge partial fields into an existing item.

        Args:
            item_id: Item to update; its id cannot be changed
            item_data: Fields to overwrite

        Raises:
            RecordNotFoundError: If the item is not cached
            pydantic.ValidationError: If the merged item is invalid
        """
        try:
            existing = self.store.get("items", item_id)
        except StoreError as e:
            self.logger.error(f"Error updating item {item_id}: {e}")
            return ApiResponse(success=False, error="Failed to update item in local storage")

        if existing is None:
            raise RecordNotFoundError(f"Item not found: {item_id}")

        item = Item.model_validate({
            **existing,
            **item_data,
            "id": existing["id"],
            "updated_at": datetime.now(),
            "offline_updated": True,
        })
        record = item.model_dump(mode="json")

        try:
            with self.store.transaction():
                self.store.put("items", record)
                self.service.queue_mutation(
                    "items", MutationAction.UPDATE, item.id, dict(item_data)
                )
        except StoreError as e:
            self.logger.error(f"Error updating item {item_id}: {e}")
            return ApiResponse(success=False, error="Failed to update item in local storage")

        self.audit_logger.log_action(
            action_type=ActionType.ITEM_UPDATED,
            details={"fields": sorted(item_data)},
            item_id=item.id,
        )
        self.logger.info(f"Updated item: {item.name} ({item.id})")
        return ApiResponse(success=True, data=record, message="Item updated successfully.")

    def delete_item(self, item_id: str) -> ApiResponse:
        """
        Soft-delete an item: it stays in the store with status ``deleted``.

        Raises:
            RecordNotFoundError: If the item is not cached
        """
        try:
            existing = self.store.get("items", item_id)
        except StoreError as e:
            self.logger.error(f"Error deleting item {item_id}: {e}")
            return ApiResponse(success=False, error="Failed to delete item in local storage")

        if existing is None:
            raise RecordNotFoundError(f"Item not found: {item_id}")

        now = datetime.now().isoformat()
        record = {
            **existing,
            "status": ItemStatus.DELETED.value,
            "deleted_at": now,
            "updated_at": now,
            "offline_deleted": True,
        }

        try:
            with self.store.transaction():
                self.store.put("items", record)
                self.service.queue_mutation("items", MutationAction.DELETE, item_id)
        except StoreError as e:
            self.logger.error(f"Error deleting item {item_id}: {e}")
            return ApiResponse(success=False, error="Failed to delete item in local storage")

        self.audit_logger.log_action(
            action_type=ActionType.ITEM_DELETED,
            details={"name": existing.get("name")},
            item_id=item_id,
        )
        self.logger.info(f"Soft-deleted item {item_id}")
        return ApiResponse(success=True, data=record, message="Item deleted successfully.")

    # Reference data

    def get_categories(self) -> ApiResponse:
        return self._read_collection("categories")

    def get_users(self) -> ApiResponse:
        return self._read_collection("users")

    def clear_offline_data(self) -> ApiResponse:
        try:
            removed = self.service.clear_offline_data()
        except StoreError as e:
            self.logger.error(f"Error clearing offline data: {e}")
            return ApiResponse(success=False, error="Failed to clear offline data")
        return ApiResponse(
            success=True,
            data={"records_removed": removed},
            message="Offline data cleared",
        )

    # Reports

    def get_dashboard_stats(self, today: Optional[date] = None) -> ApiResponse:
        """
        Headline counts and sums over the cached orders and items.

        Args:
            today: Day used for the "today" figures (defaults to the local date)
        """
        empty = {
            "total_orders": 0,
            "total_revenue": 0,
            "total_items": 0,
            "low_stock_items": 0,
            "today_orders": 0,
            "today_revenue": 0,
        }

        try:
            orders = self.store.get("orders")
            items = [item for item in self.store.get("items") if not _is_deleted(item)]
        except StoreError as e:
            self.logger.error(f"Error fetching dashboard stats: {e}")
            return ApiResponse(success=True, data=empty, error="Using default stats due to error")

        today = today or date.today()
        todays_orders = [order for order in orders if _order_date(order) == today]

        stats = {
            "total_orders": len(orders),
            "total_revenue": sum(_as_number(order.get("total_amount")) for order in orders),
            "total_items": len(items),
            "low_stock_items": sum(
                1 for item in items
                if _as_number(item.get("stock_quantity")) < LOW_STOCK_LEVEL
            ),
            "today_orders": len(todays_orders),
            "today_revenue": sum(_as_number(order.get("total_amount")) for order in todays_orders),
        }
        return ApiResponse(success=True, data=stats)

    def get_sales_analytics(self, group_by_day: bool = False) -> ApiResponse:
        """
        Sales series built from cached orders.

        Args:
            group_by_day: Sum orders per calendar day instead of one row each

        Returns:
            ApiResponse whose data is a list of ``{date, amount, orders}``
        """
        try:
            orders = self.store.get("orders")
        except StoreError as e:
            self.logger.error(f"Error fetching sales analytics: {e}")
            return ApiResponse(success=True, data=[], error="Using empty analytics due to error")

        sales: List[Dict[str, Any]] = [
            {
                "date": order.get("created_at") or datetime.now().isoformat(),
                "amount": _as_number(order.get("total_amount")),
                "orders": 1,
            }
            for order in orders
        ]

        if group_by_day:
            by_day: Dict[str, Dict[str, Any]] = {}
            for entry in sales:
                day = str(entry["date"])[:10]
                bucket = by_day.setdefault(day, {"date": day, "amount": 0, "orders": 0})
                bucket["amount"] += entry["amount"]
                bucket["orders"] += 1
            sales = [by_day[day] for day in sorted(by_day)]

        return ApiResponse(success=True, data=sales)

    def get_inventory_status(self) -> ApiResponse:
        """Stock level per item: in_stock (> 10), low_stock (> 0) or out_of_stock."""
        try:
            items = self.store.get("items")
        except StoreError as e:
            self.logger.error(f"Error fetching inventory status: {e}")
            return ApiResponse(success=True, data=[], error="Using empty inventory due to error")

        inventory = []
        for item in items:
            if _is_deleted(item):
                continue
            stock = int(_as_number(item.get("stock_quantity")))
            inventory.append({
                "id": item.get("id"),
                "name": item.get("name"),
                "stock_quantity": stock,
                "status": classify_stock(stock).value,
            })
        return ApiResponse(success=True, data=inventory)

    def get_sync_status(self) -> ApiResponse:
        """Connectivity, last sync time and outbox depth."""
        try:
            last_sync = self.service.get_last_sync()
            pending = len(self.service.get_pending_mutations())
        except StoreError as e:
            self.logger.error(f"Error fetching sync status: {e}")
            return ApiResponse(success=False, error="Failed to read sync status")

        return ApiResponse(
            success=True,
            data={
                "offline": self.service.is_offline(),
                "last_sync": last_sync.isoformat() if last_sync else None,
                "pending_mutations": pending,
            },
        )
