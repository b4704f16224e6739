"""
Order workflow engine

Orchestrates every mutation that touches more than one entity: order
creation (header, items, stock decrement, activity), status changes,
restocks and product/client maintenance. Each public write runs inside one
store transaction, so a failure at any step leaves nothing behind.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
import math
from numbers import Real
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
import uuid

from backoffice.business.commerce.errors import CommerceDomainError, InvalidArgumentError, NotFoundError
from backoffice.business.commerce.inventory_ledger import DEFAULT_LOW_STOCK_THRESHOLD, validate_quantity
from backoffice.business.commerce.narrator import ActivityNarrator
from backoffice.business.commerce.records import (
    ActivityRecord,
    ClientRecord,
    OrderDetails,
    OrderLine,
    OrderRecord,
    ProductRecord,
)
from backoffice.business.commerce.status_policy import FreeTransitionPolicy, OrderStatus
from backoffice.business.commerce.store.base import EntityStore, PRODUCT_UPDATABLE_FIELDS
from backoffice.logger import get_logger

logger = get_logger("backoffice.workflow")

DEFAULT_RESTOCK_QUANTITY = 10

# A supplied order total may differ from the computed one by rounding only
TOTAL_TOLERANCE = 0.01

_ORDER_DRAFT_FIELDS = frozenset({'client_id', 'order_number', 'order_date', 'status', 'total'})
_LINE_ITEM_FIELDS = frozenset({'product_id', 'quantity', 'unit_price'})
_CLIENT_FIELDS = frozenset({'name', 'email', 'phone', 'avatar_url'})


def generate_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


def _require_id(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field} must be an integer", field=field)
    return value


def _require_text(value, field: str, allow_empty: bool = False) -> str:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be a string", field=field)
    if not allow_empty and not value.strip():
        raise InvalidArgumentError(f"{field} is required", field=field)
    return value


def _optional_text(value, field: str) -> Optional[str]:
    if value is None:
        return None
    return _require_text(value, field, allow_empty=True)


def _require_amount(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgumentError(f"{field} must be a number", field=field)
    if not math.isfinite(value):
        raise InvalidArgumentError(f"{field} must be a finite number", field=field)
    if value < 0:
        raise InvalidArgumentError(f"{field} must not be negative", field=field)
    return float(value)


def _require_datetime(value, field: str) -> datetime:
    """Naive local datetime; aware values are converted to local time first"""
    if not isinstance(value, datetime):
        raise InvalidArgumentError(f"{field} must be a datetime", field=field)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def _require_count(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field} must be an integer", field=field)
    if value < 0:
        raise InvalidArgumentError(f"{field} must not be negative", field=field)
    return value


def _reject_unknown(fields: Mapping[str, Any], allowed: frozenset, what: str) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise InvalidArgumentError(f"Unknown {what} field(s): {', '.join(sorted(unknown))}")


_PRODUCT_VALIDATORS: Dict[str, Callable[[Any, str], Any]] = {
    'name': _require_text,
    'description': lambda value, field: _require_text(value, field, allow_empty=True),
    'price': _require_amount,
    'stock_quantity': _require_count,
    'low_stock_threshold': _require_count,
    'image_url': _optional_text,
}


def validate_product_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Type/range check a (partial) product field mapping.

    Raises:
        InvalidArgumentError: On unknown keys or out-of-range values
    """
    _reject_unknown(fields, PRODUCT_UPDATABLE_FIELDS, 'product')
    return {key: _PRODUCT_VALIDATORS[key](value, key) for key, value in fields.items()}


class OrderWorkflow:
    """
    Transactional order and inventory operations over an injected EntityStore.

    Args:
        store: Persistence capability (SQL or in-memory)
        policy: Status transition policy; defaults to free-form transitions
        clock: Zero-argument callable returning the current local datetime
        default_restock_quantity: Quantity used when a restock omits one
    """

    def __init__(
        self,
        store: EntityStore,
        policy: FreeTransitionPolicy | None = None,
        clock: Callable[[], datetime] = datetime.now,
        default_restock_quantity: int = DEFAULT_RESTOCK_QUANTITY,
    ):
        self.store = store
        self.policy = policy or FreeTransitionPolicy()
        self.clock = clock
        self.default_restock_quantity = validate_quantity(default_restock_quantity, 'default_restock_quantity')

    @contextmanager
    def _logged(self, operation: str):
        try:
            yield
        except CommerceDomainError as e:
            logger.warning(f"{operation} rejected: {e}")
            raise
        except Exception:
            logger.exception(f"{operation} failed unexpectedly")
            raise

    def _append_activity(
        self,
        client_id: int,
        activity_type: str,
        description: str,
        related_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> ActivityRecord:
        # Must run inside an open transaction; appending also marks the client active
        when = timestamp or self.clock()
        activity = self.store.insert_activity({
            'client_id': client_id,
            'activity_type': activity_type,
            'description': description,
            'timestamp': when,
            'related_id': related_id,
        })
        client = self.store.get_client(client_id)
        if client is not None and (client.last_active is None or when > client.last_active):
            self.store.touch_client(client_id, when)
        return activity

    def _hydrate(self, order: OrderRecord) -> OrderDetails:
        client = self.store.get_client(order.client_id)
        if client is None:
            raise NotFoundError('Client', order.client_id)
        lines = []
        for item in self.store.list_order_items(order.id):
            product = self.store.get_product(item.product_id)
            if product is None:
                raise NotFoundError('Product', item.product_id)
            lines.append(OrderLine(item=item, product=product))
        return OrderDetails(order=order, client=client, lines=lines)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def _validate_line_items(self, line_items) -> List[Dict[str, Any]]:
        if not isinstance(line_items, (list, tuple)) or not line_items:
            raise InvalidArgumentError("Order must contain at least one item", field='items')
        validated = []
        for position, raw in enumerate(line_items):
            if not isinstance(raw, Mapping):
                raise InvalidArgumentError(f"Item {position} must be an object", field='items')
            _reject_unknown(raw, _LINE_ITEM_FIELDS, 'order item')
            if 'product_id' not in raw:
                raise InvalidArgumentError(f"Item {position} is missing product_id", field='product_id')
            line = {
                'product_id': _require_id(raw['product_id'], 'product_id'),
                'quantity': validate_quantity(raw.get('quantity')),
                'unit_price': None,
            }
            if raw.get('unit_price') is not None:
                line['unit_price'] = _require_amount(raw['unit_price'], 'unit_price')
            validated.append(line)
        return validated

    def create_order(self, order_draft: Mapping[str, Any], line_items: Sequence[Mapping[str, Any]]) -> OrderDetails:
        """
        Create an order with its items, decrement stock and log the activity.

        Stock is decremented per item in the given order and floors at 0;
        an oversell still creates the order. Items without a unit_price
        snapshot the product's current price.

        Returns:
            OrderDetails: The persisted order with client and products resolved

        Raises:
            InvalidArgumentError: Empty item list, bad quantity/price/status, total mismatch
            NotFoundError: Client or any product does not exist
            ConflictError: Order number already used
        """
        with self._logged("Order creation"):
            if not isinstance(order_draft, Mapping):
                raise InvalidArgumentError("Order draft must be an object", field='order')
            _reject_unknown(order_draft, _ORDER_DRAFT_FIELDS, 'order')
            lines = self._validate_line_items(line_items)

            client_id = _require_id(order_draft.get('client_id'), 'client_id')
            status = OrderStatus.parse(order_draft.get('status') or OrderStatus.PENDING)
            order_number = order_draft.get('order_number') or generate_order_number()
            _require_text(order_number, 'order_number')
            order_date = _require_datetime(order_draft.get('order_date') or self.clock(), 'order_date')
            supplied_total = order_draft.get('total')
            if supplied_total is not None:
                supplied_total = _require_amount(supplied_total, 'total')

            with self.store.transaction():
                if self.store.get_client(client_id) is None:
                    raise NotFoundError('Client', client_id)
                for line in lines:
                    product = self.store.get_product(line['product_id'])
                    if product is None:
                        raise NotFoundError('Product', line['product_id'])
                    if line['unit_price'] is None:
                        line['unit_price'] = product.price

                total = sum(line['unit_price'] * line['quantity'] for line in lines)
                if supplied_total is not None and abs(supplied_total - total) > TOTAL_TOLERANCE:
                    raise InvalidArgumentError(
                        f"Order total {supplied_total:.2f} does not match item total {total:.2f}",
                        field='total',
                    )

                order = self.store.insert_order({
                    'order_number': order_number,
                    'client_id': client_id,
                    'order_date': order_date,
                    'status': status,
                    'total': total,
                })
                for line in lines:
                    self.store.insert_order_item({'order_id': order.id, **line})
                for line in lines:
                    self.store.adjust_stock(line['product_id'], -line['quantity'])

                item_count = sum(line['quantity'] for line in lines)
                self._append_activity(
                    client_id,
                    ActivityNarrator.ORDER,
                    ActivityNarrator.order_placed(order_number, item_count, total),
                    related_id=order_number,
                )
                details = self._hydrate(order)

            logger.info(f"Created order {order_number} for client {client_id} ({len(lines)} lines, total {total:.2f})")
            return details

    def update_order_status(self, order_id: int, new_status) -> OrderRecord:
        """
        Change an order's status and log an "order_status" activity.

        Raises:
            InvalidArgumentError: Unknown status label or a transition the policy rejects
            NotFoundError: Order does not exist
        """
        with self._logged("Order status update"):
            order_id = _require_id(order_id, 'order_id')
            status = OrderStatus.parse(new_status)

            with self.store.transaction():
                order = self.store.get_order(order_id)
                if order is None:
                    raise NotFoundError('Order', order_id)
                self.policy.validate_transition(order.status, status)

                updated = self.store.update_order_status(order_id, status)
                self._append_activity(
                    order.client_id,
                    ActivityNarrator.ORDER_STATUS,
                    ActivityNarrator.order_status_changed(order.order_number, str(order.status), str(status)),
                    related_id=order.order_number,
                )

            logger.info(f"Order {order.order_number} status {order.status} -> {status}")
            return updated

    def get_order_details(self, order_id: int) -> OrderDetails:
        order = self.store.get_order(order_id)
        if order is None:
            raise NotFoundError('Order', order_id)
        return self._hydrate(order)

    def list_orders(self) -> List[OrderRecord]:
        return self.store.list_orders()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def restock_product(self, product_id: int, quantity: int | None = None) -> ProductRecord:
        """
        Add stock to a product. quantity defaults to the configured restock quantity.

        Raises:
            InvalidArgumentError: quantity is not a positive integer
            NotFoundError: Product does not exist (nothing is changed)
        """
        with self._logged("Restock"):
            product_id = _require_id(product_id, 'product_id')
            quantity = validate_quantity(self.default_restock_quantity if quantity is None else quantity)

            with self.store.transaction():
                if self.store.get_product(product_id) is None:
                    raise NotFoundError('Product', product_id)
                product = self.store.adjust_stock(product_id, quantity)

            logger.info(f"Restocked product {product_id} by {quantity} (now {product.stock_quantity})")
            return product

    def update_product(self, product_id: int, fields: Mapping[str, Any]) -> ProductRecord:
        """
        Partial product edit. A stock_quantity written here is a correction and
        is not logged as a restock or sale.
        """
        with self._logged("Product update"):
            product_id = _require_id(product_id, 'product_id')
            if not isinstance(fields, Mapping):
                raise InvalidArgumentError("Product fields must be an object")
            validated = validate_product_fields(fields)

            with self.store.transaction():
                current = self.store.get_product(product_id)
                if current is None:
                    raise NotFoundError('Product', product_id)
                if not validated:
                    return current
                product = self.store.update_product(product_id, validated)

            logger.info(f"Updated product {product_id}: {', '.join(sorted(validated))}")
            return product

    def create_product(self, fields: Mapping[str, Any]) -> ProductRecord:
        with self._logged("Product creation"):
            if not isinstance(fields, Mapping):
                raise InvalidArgumentError("Product fields must be an object")
            for required in ('name', 'price', 'stock_quantity'):
                if required not in fields:
                    raise InvalidArgumentError(f"{required} is required", field=required)
            values = {
                'description': '',
                'low_stock_threshold': DEFAULT_LOW_STOCK_THRESHOLD,
                'image_url': None,
            }
            values.update(validate_product_fields(fields))

            with self.store.transaction():
                product = self.store.insert_product(values)

            logger.info(f"Created product {product.id} ({product.name})")
            return product

    def get_product(self, product_id: int) -> ProductRecord:
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFoundError('Product', product_id)
        return product

    def list_products(self) -> List[ProductRecord]:
        return self.store.list_products()

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def create_client(self, fields: Mapping[str, Any]) -> ClientRecord:
        """
        Register a client and log a "registration" activity.

        Raises:
            InvalidArgumentError: Missing name or malformed email
            ConflictError: Email already registered
        """
        with self._logged("Client creation"):
            if not isinstance(fields, Mapping):
                raise InvalidArgumentError("Client fields must be an object")
            _reject_unknown(fields, _CLIENT_FIELDS, 'client')
            name = _require_text(fields.get('name'), 'name').strip()
            email = _require_text(fields.get('email'), 'email').strip()
            if '@' not in email:
                raise InvalidArgumentError("email is not a valid address", field='email')

            now = self.clock()
            with self.store.transaction():
                client = self.store.insert_client({
                    'name': name,
                    'email': email,
                    'phone': _optional_text(fields.get('phone'), 'phone'),
                    'avatar_url': _optional_text(fields.get('avatar_url'), 'avatar_url'),
                    'last_active': now,
                })
                self._append_activity(
                    client.id,
                    ActivityNarrator.REGISTRATION,
                    ActivityNarrator.client_registered(name),
                    timestamp=now,
                )
                client = self.store.get_client(client.id)

            logger.info(f"Registered client {client.id} ({email})")
            return client

    def record_activity(
        self,
        client_id: int,
        activity_type: str,
        description: str,
        related_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> ActivityRecord:
        """Append a free-form activity entry ("profile", "review", ...) for a client"""
        with self._logged("Activity append"):
            client_id = _require_id(client_id, 'client_id')
            _require_text(activity_type, 'activity_type')
            _require_text(description, 'description')
            if related_id is not None:
                related_id = str(related_id)
            if timestamp is not None:
                timestamp = _require_datetime(timestamp, 'timestamp')

            with self.store.transaction():
                if self.store.get_client(client_id) is None:
                    raise NotFoundError('Client', client_id)
                activity = self._append_activity(client_id, activity_type, description, related_id, timestamp)

            logger.debug(f"Recorded {activity_type} activity for client {client_id}")
            return activity

    def get_client(self, client_id: int) -> ClientRecord:
        client = self.store.get_client(client_id)
        if client is None:
            raise NotFoundError('Client', client_id)
        return client

    def list_clients(self) -> List[ClientRecord]:
        return self.store.list_clients()
