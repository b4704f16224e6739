"""
In-process entity store

Tables are dicts of immutable records keyed by id. One re-entrant lock
serialises every operation; a transaction holds the lock for its whole body
and restores the pre-transaction snapshot if the body raises.
"""

from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
import threading
from typing import Any, Dict, List, Optional

from backoffice.business.commerce.errors import ConflictError, NotFoundError
from backoffice.business.commerce.inventory_ledger import applied_delta
from backoffice.business.commerce.records import (
    ActivityRecord,
    ClientRecord,
    OrderItemRecord,
    OrderRecord,
    ProductRecord,
    UserRecord,
)
from backoffice.business.commerce.status_policy import OrderStatus
from backoffice.business.commerce.store.base import EntityStore, PRODUCT_UPDATABLE_FIELDS


_TABLES = ('users', 'products', 'clients', 'orders', 'order_items', 'client_activities')


class MemoryStore(EntityStore):

    def __init__(self):
        self._lock = threading.RLock()
        self._tables: Dict[str, Dict[int, Any]] = {name: {} for name in _TABLES}
        self._sequences: Dict[str, int] = {name: 0 for name in _TABLES}
        self._depth = 0

    @contextmanager
    def transaction(self):
        with self._lock:
            if self._depth:
                # Join the enclosing transaction
                yield self
                return

            # Records are frozen, so copying each table dict is a full snapshot
            tables = {name: dict(rows) for name, rows in self._tables.items()}
            sequences = dict(self._sequences)
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._tables = tables
                self._sequences = sequences
                raise
            finally:
                self._depth -= 1

    def _next_id(self, table: str) -> int:
        self._sequences[table] += 1
        return self._sequences[table]

    def _insert(self, table: str, record_cls, fields: Dict[str, Any]):
        with self._lock:
            record = record_cls(id=self._next_id(table), created_at=datetime.now(), **fields)
            self._tables[table][record.id] = record
            return record

    def _get(self, table: str, record_id) -> Optional[Any]:
        with self._lock:
            return self._tables[table].get(record_id)

    def _require(self, table: str, entity: str, record_id):
        record = self._get(table, record_id)
        if record is None:
            raise NotFoundError(entity, record_id)
        return record

    # Users
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self._get('users', user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return next((u for u in self._tables['users'].values() if u.username == username), None)

    def insert_user(self, fields: Dict[str, Any]) -> UserRecord:
        with self._lock:
            if self.get_user_by_username(fields['username']) is not None:
                raise ConflictError(f"Username '{fields['username']}' already exists", field='username')
            return self._insert('users', UserRecord, fields)

    # Products
    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        return self._get('products', product_id)

    def list_products(self) -> List[ProductRecord]:
        with self._lock:
            return sorted(self._tables['products'].values(), key=lambda p: p.id)

    def insert_product(self, fields: Dict[str, Any]) -> ProductRecord:
        return self._insert('products', ProductRecord, fields)

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> ProductRecord:
        unknown = set(fields) - PRODUCT_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable on product: {', '.join(sorted(unknown))}")
        with self._lock:
            product = replace(self._require('products', 'Product', product_id), **fields)
            self._tables['products'][product_id] = product
            return product

    def adjust_stock(self, product_id: int, delta: int) -> ProductRecord:
        with self._lock:
            product = self._require('products', 'Product', product_id)
            product = replace(product, stock_quantity=applied_delta(product.stock_quantity, delta))
            self._tables['products'][product_id] = product
            return product

    # Clients
    def get_client(self, client_id: int) -> Optional[ClientRecord]:
        return self._get('clients', client_id)

    def list_clients(self) -> List[ClientRecord]:
        with self._lock:
            return sorted(self._tables['clients'].values(), key=lambda c: c.id)

    def insert_client(self, fields: Dict[str, Any]) -> ClientRecord:
        with self._lock:
            email = fields['email']
            if any(c.email == email for c in self._tables['clients'].values()):
                raise ConflictError(f"Client with email '{email}' already exists", field='email')
            return self._insert('clients', ClientRecord, fields)

    def touch_client(self, client_id: int, when: datetime) -> ClientRecord:
        with self._lock:
            client = replace(self._require('clients', 'Client', client_id), last_active=when)
            self._tables['clients'][client_id] = client
            return client

    # Orders
    def get_order(self, order_id: int) -> Optional[OrderRecord]:
        return self._get('orders', order_id)

    def list_orders(self) -> List[OrderRecord]:
        with self._lock:
            return sorted(self._tables['orders'].values(), key=lambda o: (o.order_date, o.id), reverse=True)

    def insert_order(self, fields: Dict[str, Any]) -> OrderRecord:
        with self._lock:
            number = fields['order_number']
            if any(o.order_number == number for o in self._tables['orders'].values()):
                raise ConflictError(f"Order number '{number}' already exists", field='order_number')
            return self._insert('orders', OrderRecord, fields)

    def update_order_status(self, order_id: int, status: OrderStatus) -> OrderRecord:
        with self._lock:
            order = replace(self._require('orders', 'Order', order_id), status=status)
            self._tables['orders'][order_id] = order
            return order

    def list_order_items(self, order_id: int) -> List[OrderItemRecord]:
        with self._lock:
            return sorted(
                (i for i in self._tables['order_items'].values() if i.order_id == order_id),
                key=lambda i: i.id,
            )

    def insert_order_item(self, fields: Dict[str, Any]) -> OrderItemRecord:
        return self._insert('order_items', OrderItemRecord, fields)

    # Client activities
    def list_activities(self) -> List[ActivityRecord]:
        with self._lock:
            return sorted(
                self._tables['client_activities'].values(),
                key=lambda a: (a.timestamp, a.id),
                reverse=True,
            )

    def insert_activity(self, fields: Dict[str, Any]) -> ActivityRecord:
        return self._insert('client_activities', ActivityRecord, fields)
