"""
Entity store capability interface

The workflow engine and projections only talk to this interface. Production
wires the SQLAlchemy-backed store; tests and demos can run against the
in-process store without touching a database.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Dict, List, Optional

from backoffice.business.commerce.records import (
    ActivityRecord,
    ClientRecord,
    OrderItemRecord,
    OrderRecord,
    ProductRecord,
    UserRecord,
)
from backoffice.business.commerce.status_policy import OrderStatus


# Fields a partial product update may touch
PRODUCT_UPDATABLE_FIELDS = frozenset({
    'name', 'description', 'price', 'stock_quantity', 'low_stock_threshold', 'image_url',
})


class EntityStore(ABC):
    """
    Abstract store for users, products, clients, orders, order items and
    client activities.

    Contract:
    - All writes must happen inside ``transaction()``; the outermost
      transaction commits on normal exit and rolls back on any exception.
      Nested ``transaction()`` calls join the outer one.
    - ``get_*`` return None for unknown ids; ``update_*``/``adjust_stock``
      raise NotFoundError.
    - Unique-key violations raise ConflictError.
    - ``adjust_stock`` is a single atomic read-modify-write that floors at 0.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        pass

    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    def insert_user(self, fields: Dict[str, Any]) -> UserRecord:
        pass

    # Products
    @abstractmethod
    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    def list_products(self) -> List[ProductRecord]:
        pass

    @abstractmethod
    def insert_product(self, fields: Dict[str, Any]) -> ProductRecord:
        pass

    @abstractmethod
    def update_product(self, product_id: int, fields: Dict[str, Any]) -> ProductRecord:
        pass

    @abstractmethod
    def adjust_stock(self, product_id: int, delta: int) -> ProductRecord:
        """
        Atomically apply ``stock_quantity = max(0, stock_quantity + delta)``.

        Raises:
            NotFoundError: If the product does not exist
        """
        pass

    # Clients
    @abstractmethod
    def get_client(self, client_id: int) -> Optional[ClientRecord]:
        pass

    @abstractmethod
    def list_clients(self) -> List[ClientRecord]:
        pass

    @abstractmethod
    def insert_client(self, fields: Dict[str, Any]) -> ClientRecord:
        pass

    @abstractmethod
    def touch_client(self, client_id: int, when: datetime) -> ClientRecord:
        """Set last_active on a client"""
        pass

    # Orders
    @abstractmethod
    def get_order(self, order_id: int) -> Optional[OrderRecord]:
        pass

    @abstractmethod
    def list_orders(self) -> List[OrderRecord]:
        """All orders, newest order_date first"""
        pass

    @abstractmethod
    def insert_order(self, fields: Dict[str, Any]) -> OrderRecord:
        pass

    @abstractmethod
    def update_order_status(self, order_id: int, status: OrderStatus) -> OrderRecord:
        pass

    @abstractmethod
    def list_order_items(self, order_id: int) -> List[OrderItemRecord]:
        """Items of one order in insertion order"""
        pass

    @abstractmethod
    def insert_order_item(self, fields: Dict[str, Any]) -> OrderItemRecord:
        pass

    # Client activities
    @abstractmethod
    def list_activities(self) -> List[ActivityRecord]:
        """All activities, newest timestamp first"""
        pass

    @abstractmethod
    def insert_activity(self, fields: Dict[str, Any]) -> ActivityRecord:
        pass
