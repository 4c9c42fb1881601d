"""
Order data models.

Defines data structures for POS orders and their line items.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class OrderStatus(str, Enum):
    """Order status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Accepted payment methods at the register."""
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class OrderLine(BaseModel):
    """A single line of an order."""

    # Seeded orders key their lines by "id"; new orders use "item_id".
    item_id: str = Field(..., validation_alias=AliasChoices("item_id", "id"))
    name: Optional[str] = None
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0.0)
    total: Optional[float] = Field(None, ge=0.0)

    @model_validator(mode='after')
    def fill_total(self) -> "OrderLine":
        if self.total is None:
            self.total = self.line_total()
        return self

    def line_total(self) -> float:
        """Calculate total price for this line."""
        return self.quantity * self.price

    class Config:
        """Pydantic configuration."""
        extra = "allow"
        populate_by_name = True


class Order(BaseModel):
    """A POS order, possibly created while disconnected."""

    id: str = Field(..., min_length=1)
    items: List[OrderLine]
    total_amount: Optional[float] = Field(None, ge=0.0)
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)
    order_type: Optional[str] = Field(None, max_length=50)
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    customer_name: Optional[str] = Field(None, max_length=200)
    customer_phone: Optional[str] = Field(None, max_length=50)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    offline: bool = False

    @field_validator('items')
    @classmethod
    def validate_items_not_empty(cls, v: List[OrderLine]) -> List[OrderLine]:
        """Ensure order has at least one item."""
        if len(v) == 0:
            raise ValueError('Order must have at least one item')
        return v

    @model_validator(mode='after')
    def fill_total_amount(self) -> "Order":
        # A caller-supplied total wins; compute only when it is missing.
        if self.total_amount is None:
            self.total_amount = self.calculate_total()
        return self

    def calculate_total(self) -> float:
        """Calculate total cost of all lines."""
        return sum(line.line_total() for line in self.items)

    def get_item_count(self) -> int:
        return len(self.items)

    def get_total_quantity(self) -> int:
        """Get total quantity across all lines."""
        return sum(line.quantity for line in self.items)

    class Config:
        """Pydantic configuration."""
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": "MA-JAF-4K9Z2Q",
                "items": [
                    {"item_id": "1", "quantity": 2, "price": 1500}
                ],
                "total_amount": 3000,
                "payment_method": "cash",
                "order_type": "pos",
                "status": "completed",
                "offline": True
            }
        }
