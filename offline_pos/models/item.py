"""
Menu item and category data models.

Items are the sellable stock records mirrored from the backend; categories
group them and are referenced by id and by denormalised name.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Stock above this level counts as "in stock"; at or below it is "low".
LOW_STOCK_LEVEL = 10


class ItemStatus(str, Enum):
    """Item lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class StockLevel(str, Enum):
    """Three-bucket stock classification."""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def classify_stock(stock_quantity: int) -> StockLevel:
    """Bucket a stock quantity: > 10 in stock, > 0 low, otherwise out."""
    if stock_quantity > LOW_STOCK_LEVEL:
        return StockLevel.IN_STOCK
    if stock_quantity > 0:
        return StockLevel.LOW_STOCK
    return StockLevel.OUT_OF_STOCK


class Item(BaseModel):
    """A sellable menu item with its stock count."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: float = Field(..., ge=0.0)
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=LOW_STOCK_LEVEL, ge=0)
    status: ItemStatus = Field(default=ItemStatus.ACTIVE)
    type: Optional[str] = Field(None, max_length=50)  # food, beverage, snack
    category_id: Optional[str] = None
    category_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    deleted_at: Optional[datetime] = None

    # Local-origin markers; cleared only by a future sync job.
    offline: bool = False
    offline_updated: bool = False
    offline_deleted: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        if not v.strip():
            raise ValueError('Item name must not be blank')
        return v.strip()

    def decrement_stock(self, quantity: int) -> int:
        """
        Remove sold units from stock, clamping at zero.

        Args:
            quantity: Units sold

        Returns:
            The new stock quantity
        """
        self.stock_quantity = max(0, self.stock_quantity - quantity)
        self.updated_at = datetime.now()
        return self.stock_quantity

    class Config:
        """Pydantic configuration."""
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": "1",
                "name": "Jollof Rice",
                "description": "Spicy Nigerian rice dish",
                "price": 1500,
                "stock_quantity": 50,
                "low_stock_threshold": 10,
                "status": "active",
                "type": "food",
                "category_id": "2",
                "category_name": "Rice Dishes"
            }
        }


class Category(BaseModel):
    """Item category."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic configuration."""
        extra = "allow"
