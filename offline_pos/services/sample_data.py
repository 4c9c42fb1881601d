"""
Sample data used to bootstrap an empty local store.

Timestamps are generated when the bundle is built, not at import.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List

from ..models import Category, Item, Order, User

_CATEGORIES = [
    ("1", "Traditional Nigerian Meals", "Authentic Nigerian dishes"),
    ("2", "Rice Dishes", "Various rice preparations"),
    ("3", "Soups & Stews", "Nigerian soups and stews"),
    ("4", "Beverages", "Drinks and beverages"),
    ("5", "Snacks", "Light snacks and appetizers"),
]

# id, name, description, price, stock, threshold, type, category_id, image
_ITEMS = [
    ("1", "Jollof Rice", "Spicy Nigerian rice dish", 1500, 50, 10, "food", "2", "jollof-rice"),
    ("2", "Fried Rice", "Nigerian style fried rice", 1800, 30, 8, "food", "2", "fried-rice"),
    ("3", "Egusi Soup", "Traditional melon seed soup", 2000, 25, 5, "food", "3", "egusi-soup"),
    ("4", "Pepper Soup", "Spicy Nigerian pepper soup", 1200, 40, 10, "food", "3", "pepper-soup"),
    ("5", "Pounded Yam", "Traditional pounded yam", 800, 35, 8, "food", "1", "pounded-yam"),
    ("6", "Suya", "Grilled spiced meat", 1000, 20, 5, "food", "5", "suya"),
    ("7", "Zobo Drink", "Nigerian hibiscus drink", 500, 60, 15, "beverage", "4", "zobo"),
    ("8", "Chin Chin", "Crunchy fried pastry", 300, 80, 20, "snack", "5", "chin-chin"),
    ("9", "Amala", "Yam flour swallow", 600, 45, 10, "food", "1", "amala"),
    ("10", "Palm Wine", "Traditional palm wine", 800, 15, 3, "beverage", "4", "palm-wine"),
]

_USERS = [
    ("1", "Admin", "User", "admin@marksjaf.com", "+234-800-000-0001", "admin"),
    ("2", "John", "Doe", "john.doe@example.com", "+234-800-000-0002", "staff"),
    ("3", "Jane", "Smith", "jane.smith@example.com", "+234-800-000-0003", "customer"),
]


def sample_categories() -> List[Category]:
    now = datetime.now()
    return [
        Category(id=cid, name=name, description=description, created_at=now, updated_at=now)
        for cid, name, description in _CATEGORIES
    ]


def sample_items() -> List[Item]:
    now = datetime.now()
    category_names = {cid: name for cid, name, _ in _CATEGORIES}
    return [
        Item(
            id=iid,
            name=name,
            description=description,
            price=price,
            stock_quantity=stock,
            low_stock_threshold=threshold,
            type=item_type,
            category_id=category_id,
            category_name=category_names[category_id],
            image_url=f"/images/{image}.jpg",
            created_at=now,
            updated_at=now,
        )
        for iid, name, description, price, stock, threshold, item_type, category_id, image in _ITEMS
    ]


def sample_users() -> List[User]:
    now = datetime.now()
    return [
        User(
            id=uid,
            first_name=first,
            last_name=last,
            email=email,
            phone_number=phone,
            role=role,
            is_active=True,
            is_email_verified=True,
            created_at=now,
            updated_at=now,
        )
        for uid, first, last, email, phone, role in _USERS
    ]


def sample_orders() -> List[Order]:
    now = datetime.now()
    one_day_ago = now - timedelta(days=1)
    twelve_hours_ago = now - timedelta(hours=12)
    return [
        Order(
            id="1",
            customer_name="Walk-in Customer",
            customer_phone="+234-800-000-0004",
            items=[
                {"id": "1", "name": "Jollof Rice", "price": 1500, "quantity": 2, "total": 3000},
                {"id": "7", "name": "Zobo Drink", "price": 500, "quantity": 1, "total": 500},
            ],
            total_amount=3500,
            status="completed",
            payment_method="cash",
            created_at=one_day_ago,
            updated_at=one_day_ago,
        ),
        Order(
            id="2",
            customer_name="Mary Johnson",
            customer_phone="+234-800-000-0005",
            items=[
                {"id": "3", "name": "Egusi Soup", "price": 2000, "quantity": 1, "total": 2000},
                {"id": "5", "name": "Pounded Yam", "price": 800, "quantity": 1, "total": 800},
            ],
            total_amount=2800,
            status="completed",
            payment_method="card",
            created_at=twelve_hours_ago,
            updated_at=twelve_hours_ago,
        ),
    ]


def build_sample_bundle() -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the first-run seed bundle as JSON-ready records.

    Returns:
        Mapping of collection name to records, in seeding order
    """
    return {
        "categories": [c.model_dump(mode="json") for c in sample_categories()],
        "items": [i.model_dump(mode="json") for i in sample_items()],
        "users": [u.model_dump(mode="json") for u in sample_users()],
        "orders": [o.model_dump(mode="json") for o in sample_orders()],
    }
