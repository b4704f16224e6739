"""
Store-neutral record structures

Records are immutable snapshots of a row. Both store implementations hand
these out, so callers never hold a live ORM object outside a transaction.
``to_dict`` produces the camelCase wire format the dashboard client expects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from backoffice.business.commerce.status_policy import OrderStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        # password_hash never leaves the server
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'email': self.email,
            'avatarUrl': self.avatar_url,
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class ProductRecord:
    id: int
    name: str
    description: str
    price: float
    stock_quantity: int
    low_stock_threshold: int = 5
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'stockQuantity': self.stock_quantity,
            'lowStockThreshold': self.low_stock_threshold,
            'imageUrl': self.image_url,
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class ClientRecord:
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'avatarUrl': self.avatar_url,
            'lastActive': _iso(self.last_active),
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class OrderRecord:
    id: int
    order_number: str
    client_id: int
    order_date: datetime
    status: OrderStatus
    total: float
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'orderNumber': self.order_number,
            'clientId': self.client_id,
            'orderDate': _iso(self.order_date),
            'status': str(self.status),
            'total': self.total,
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class OrderItemRecord:
    """One line of an order. unit_price is the price captured at submission time."""
    id: int
    order_id: int
    product_id: int
    quantity: int
    unit_price: float
    created_at: Optional[datetime] = None

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'orderId': self.order_id,
            'productId': self.product_id,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class ActivityRecord:
    id: int
    client_id: int
    activity_type: str
    description: str
    timestamp: datetime
    related_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'clientId': self.client_id,
            'activityType': self.activity_type,
            'description': self.description,
            'timestamp': _iso(self.timestamp),
            'relatedId': self.related_id,
            'createdAt': _iso(self.created_at),
        }


@dataclass(frozen=True)
class OrderLine:
    item: OrderItemRecord
    product: ProductRecord

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict()
        data['product'] = self.product.to_dict()
        return data


@dataclass(frozen=True)
class OrderDetails:
    """An order with its client and line items resolved"""
    order: OrderRecord
    client: ClientRecord
    lines: List[OrderLine] = field(default_factory=list)

    @property
    def items_total(self) -> float:
        return sum(line.item.line_total for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        data = self.order.to_dict()
        data['client'] = self.client.to_dict()
        data['items'] = [line.to_dict() for line in self.lines]
        return data
