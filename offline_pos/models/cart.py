"""
Register cart models.

A cart is the in-memory basket built on the order screen before checkout.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """One item in the cart, with the stock seen when it was added."""

    item_id: str
    name: str
    price: float = Field(..., ge=0.0)
    quantity: int = Field(default=1, gt=0)
    stock_quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = None

    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(BaseModel):
    """The register's current basket."""

    items: List[CartLine] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.now)

    def find(self, item_id: str) -> Optional[CartLine]:
        for line in self.items:
            if line.item_id == item_id:
                return line
        return None

    def remove(self, item_id: str) -> bool:
        """Remove a line; returns False if it was not in the cart."""
        original_length = len(self.items)
        self.items = [line for line in self.items if line.item_id != item_id]
        if len(self.items) < original_length:
            self.updated_at = datetime.now()
            return True
        return False

    def clear(self) -> None:
        self.items.clear()
        self.updated_at = datetime.now()

    def is_empty(self) -> bool:
        return not self.items

    def get_total(self) -> float:
        """Calculate cart total."""
        return sum(line.line_total() for line in self.items)

    def get_item_count(self) -> int:
        """Units in the cart, across all lines."""
        return sum(line.quantity for line in self.items)

    def to_order_payload(
        self,
        payment_method: str = "cash",
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build the ``create_order`` payload for this cart."""
        payload: Dict[str, Any] = {
            "items": [
                {
                    "item_id": line.item_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": line.price,
                }
                for line in self.items
            ],
            "total_amount": self.get_total(),
            "payment_method": payment_method,
            "order_type": "pos",
        }
        if customer_name:
            payload["customer_name"] = customer_name
        if customer_phone:
            payload["customer_phone"] = customer_phone
        return payload
