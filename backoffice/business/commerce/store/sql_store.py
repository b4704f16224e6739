"""
SQLAlchemy-backed entity store

Uses the Flask-SQLAlchemy session of the current app context. Stock changes
are issued as one conditional UPDATE so concurrent orders and restocks
cannot lose each other's deltas.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError

from backoffice import db
from backoffice.business.commerce.errors import ConflictError, NotFoundError
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
from backoffice.data import Client, ClientActivity, Order, OrderItem, Product, User
from backoffice.logger import get_logger

logger = get_logger("backoffice.store.sql")

_DEPTH_KEY = 'backoffice.transaction_depth'


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return 'unique' in message or 'duplicate key' in message


class SqlAlchemyStore(EntityStore):

    @contextmanager
    def transaction(self):
        session = db.session()
        depth = session.info.get(_DEPTH_KEY, 0)
        session.info[_DEPTH_KEY] = depth + 1
        try:
            yield self
            if depth == 0:
                session.commit()
        except BaseException:
            if depth == 0:
                session.rollback()
                logger.debug("Transaction rolled back")
            raise
        finally:
            session.info[_DEPTH_KEY] = depth

    def _add(self, row, conflict: ConflictError):
        session = db.session()
        session.add(row)
        try:
            session.flush()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise conflict from e
            raise
        return row

    def _fresh(self, model, record_id):
        # populate_existing discards identity-map state left stale by bulk UPDATEs
        return db.session.get(model, record_id, populate_existing=True)

    # Row -> record conversion
    @staticmethod
    def _user(row: User) -> UserRecord:
        return UserRecord(**row.column_values(exclude={'updated_at'}))

    @staticmethod
    def _product(row: Product) -> ProductRecord:
        return ProductRecord(**row.column_values(exclude={'updated_at'}))

    @staticmethod
    def _client(row: Client) -> ClientRecord:
        return ClientRecord(**row.column_values())

    @staticmethod
    def _order(row: Order) -> OrderRecord:
        values = row.column_values()
        values['status'] = OrderStatus(values['status'])
        return OrderRecord(**values)

    @staticmethod
    def _order_item(row: OrderItem) -> OrderItemRecord:
        return OrderItemRecord(**row.column_values())

    @staticmethod
    def _activity(row: ClientActivity) -> ActivityRecord:
        return ActivityRecord(**row.column_values())

    # Users
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        row = db.session.get(User, user_id)
        return self._user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        row = User.query.filter_by(username=username).first()
        return self._user(row) if row else None

    def insert_user(self, fields: Dict[str, Any]) -> UserRecord:
        row = self._add(
            User.from_dict(fields),
            ConflictError(f"Username '{fields.get('username')}' already exists", field='username'),
        )
        return self._user(row)

    # Products
    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        row = self._fresh(Product, product_id)
        return self._product(row) if row else None

    def list_products(self) -> List[ProductRecord]:
        return [self._product(row) for row in Product.query.order_by(Product.id).all()]

    def insert_product(self, fields: Dict[str, Any]) -> ProductRecord:
        row = self._add(Product.from_dict(fields), ConflictError("Product already exists"))
        return self._product(row)

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> ProductRecord:
        unknown = set(fields) - PRODUCT_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable on product: {', '.join(sorted(unknown))}")
        row = self._fresh(Product, product_id)
        if row is None:
            raise NotFoundError('Product', product_id)
        row.apply_dict(fields)
        db.session.flush()
        return self._product(row)

    def adjust_stock(self, product_id: int, delta: int) -> ProductRecord:
        adjusted = Product.stock_quantity + delta
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=case((adjusted < 0, 0), else_=adjusted))
            .execution_options(synchronize_session=False)
        )
        result = db.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError('Product', product_id)
        return self._product(self._fresh(Product, product_id))

    # Clients
    def get_client(self, client_id: int) -> Optional[ClientRecord]:
        row = self._fresh(Client, client_id)
        return self._client(row) if row else None

    def list_clients(self) -> List[ClientRecord]:
        return [self._client(row) for row in Client.query.order_by(Client.id).all()]

    def insert_client(self, fields: Dict[str, Any]) -> ClientRecord:
        row = self._add(
            Client.from_dict(fields),
            ConflictError(f"Client with email '{fields.get('email')}' already exists", field='email'),
        )
        return self._client(row)

    def touch_client(self, client_id: int, when: datetime) -> ClientRecord:
        row = self._fresh(Client, client_id)
        if row is None:
            raise NotFoundError('Client', client_id)
        row.last_active = when
        db.session.flush()
        return self._client(row)

    # Orders
    def get_order(self, order_id: int) -> Optional[OrderRecord]:
        row = self._fresh(Order, order_id)
        return self._order(row) if row else None

    def list_orders(self) -> List[OrderRecord]:
        rows = Order.query.order_by(Order.order_date.desc(), Order.id.desc()).all()
        return [self._order(row) for row in rows]

    def insert_order(self, fields: Dict[str, Any]) -> OrderRecord:
        values = dict(fields)
        values['status'] = OrderStatus(values['status']).value
        row = self._add(
            Order.from_dict(values),
            ConflictError(f"Order number '{fields.get('order_number')}' already exists", field='order_number'),
        )
        return self._order(row)

    def update_order_status(self, order_id: int, status: OrderStatus) -> OrderRecord:
        row = self._fresh(Order, order_id)
        if row is None:
            raise NotFoundError('Order', order_id)
        row.status = OrderStatus(status).value
        db.session.flush()
        return self._order(row)

    def list_order_items(self, order_id: int) -> List[OrderItemRecord]:
        rows = OrderItem.query.filter_by(order_id=order_id).order_by(OrderItem.id).all()
        return [self._order_item(row) for row in rows]

    def insert_order_item(self, fields: Dict[str, Any]) -> OrderItemRecord:
        row = self._add(OrderItem.from_dict(fields), ConflictError("Order item already exists"))
        return self._order_item(row)

    # Client activities
    def list_activities(self) -> List[ActivityRecord]:
        rows = ClientActivity.query.order_by(ClientActivity.timestamp.desc(), ClientActivity.id.desc()).all()
        return [self._activity(row) for row in rows]

    def insert_activity(self, fields: Dict[str, Any]) -> ActivityRecord:
        row = self._add(ClientActivity.from_dict(fields), ConflictError("Activity already exists"))
        return self._activity(row)
