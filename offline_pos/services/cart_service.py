"""
Register cart service.

Builds a basket against cached stock and checks it out through the offline
API. Stock is checked when lines are added, not when the order commits, so
two registers sharing a store could oversell.
"""

from typing import Optional

from ..api.offline_api import OfflineAPI, RecordNotFoundError
from ..api.responses import ApiResponse
from ..models import Cart, CartLine, ItemStatus
from ..utils import get_logger


class CartError(Exception):
    """Base error for cart operations."""
    pass


class InsufficientStockError(CartError):
    """Raised when a cart line would exceed the cached stock."""
    pass


class EmptyCartError(CartError):
    """Raised when checking out an empty cart."""
    pass


class CartService:
    """Service for the register's basket and checkout."""

    def __init__(self, api: OfflineAPI, default_payment_method: str = "cash"):
        """
        Initialize cart service.

        Args:
            api: Offline API used for item lookups and order creation
            default_payment_method: Payment method used when checkout names none
        """
        self.api = api
        self.default_payment_method = default_payment_method
        self.cart = Cart()
        self.logger = get_logger("cart_service")

    def _fetch_item(self, item_id: str) -> dict:
        response = self.api.get_item(item_id)
        if not response.success:
            raise CartError(response.error or f"Could not load item {item_id}")

        item = response.data
        if item.get("status") != ItemStatus.ACTIVE.value:
            raise RecordNotFoundError(f"Item {item_id} is not available for sale")
        return item

    def add_to_cart(self, item_id: str, quantity: int = 1) -> Cart:
        """
        Add units of an item, merging with an existing line.

        Args:
            item_id: Item to add
            quantity: Units to add

        Returns:
            Updated cart

        Raises:
            RecordNotFoundError: If the item is missing or not active
            InsufficientStockError: If stock cannot cover the new quantity
        """
        if quantity <= 0:
            raise ValueError("Quantity must be positive")

        item = self._fetch_item(item_id)
        stock = int(item.get("stock_quantity") or 0)
        if stock <= 0:
            raise InsufficientStockError(f"{item.get('name', item_id)} is out of stock")

        line = self.cart.find(item_id)
        new_quantity = (line.quantity if line else 0) + quantity
        if new_quantity > stock:
            raise InsufficientStockError(
                f"Cannot add more {item.get('name', item_id)} than available in stock ({stock})"
            )

        if line:
            line.quantity = new_quantity
            line.stock_quantity = stock
        else:
            self.cart.items.append(CartLine(
                item_id=item_id,
                name=item.get("name", item_id),
                price=item.get("price", 0),
                quantity=quantity,
                stock_quantity=stock,
                image_url=item.get("image_url"),
            ))

        self.logger.info(f"Added {quantity} x {item.get('name', item_id)} to cart")
        return self.cart

    def update_quantity(self, item_id: str, quantity: int) -> Cart:
        """
        Set a line's quantity; zero or less removes the line.

        Raises:
            InsufficientStockError: If stock cannot cover ``quantity``
        """
        if quantity <= 0:
            self.remove_from_cart(item_id)
            return self.cart

        line = self.cart.find(item_id)
        if line is None:
            self.logger.warning(f"Item {item_id} not found in cart")
            return self.cart

        item = self._fetch_item(item_id)
        stock = int(item.get("stock_quantity") or 0)
        if quantity > stock:
            raise InsufficientStockError(
                f"Cannot add more {line.name} than available in stock ({stock})"
            )

        line.quantity = quantity
        line.stock_quantity = stock
        self.logger.info(f"Updated {item_id} quantity to {quantity}")
        return self.cart

    def remove_from_cart(self, item_id: str) -> Cart:
        if self.cart.remove(item_id):
            self.logger.info(f"Removed item {item_id} from cart")
        else:
            self.logger.warning(f"Item {item_id} not found in cart")
        return self.cart

    def clear_cart(self) -> None:
        self.cart.clear()
        self.logger.info("Cleared cart")

    def get_cart(self) -> Cart:
        return self.cart

    def get_total(self) -> float:
        return self.cart.get_total()

    def get_item_count(self) -> int:
        return self.cart.get_item_count()

    def checkout(
        self,
        payment_method: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> ApiResponse:
        """
        Turn the cart into an order.

        The cart is cleared only when the order was saved.

        Returns:
            The create_order response

        Raises:
            EmptyCartError: If the cart has no lines
        """
        if self.cart.is_empty():
            raise EmptyCartError("Cart is empty")

        payload = self.cart.to_order_payload(
            payment_method=payment_method or self.default_payment_method,
            customer_name=customer_name,
            customer_phone=customer_phone,
        )
        response = self.api.create_order(payload)

        if response.success:
            self.logger.info(f"Checked out order {response.data['id']}")
            self.cart.clear()
        else:
            self.logger.error(f"Checkout failed: {response.error}")

        return response
