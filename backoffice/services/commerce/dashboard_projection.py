"""
Dashboard Projection Service

Read-only views for the dashboard: recent orders, the client activity feed,
low-stock items and the headline analytics. Everything is recomputed from
current store state on each call; nothing is cached or persisted.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from backoffice.business.commerce.errors import NotFoundError
from backoffice.business.commerce.inventory_ledger import low_stock
from backoffice.business.commerce.records import (
    ActivityRecord,
    ClientRecord,
    OrderDetails,
    OrderLine,
    OrderRecord,
    ProductRecord,
)
from backoffice.business.commerce.store.base import EntityStore

UNKNOWN_CLIENT_NAME = 'Unknown Client'
UNKNOWN_PRODUCT_NAME = 'Unknown Product'

DEFAULT_NEW_CLIENT_WINDOW_DAYS = 30
DEFAULT_RECENT_LIMIT = 10


def unknown_client() -> ClientRecord:
    return ClientRecord(id=0, name=UNKNOWN_CLIENT_NAME, email='')


def unknown_product() -> ProductRecord:
    return ProductRecord(
        id=0,
        name=UNKNOWN_PRODUCT_NAME,
        description='',
        price=0.0,
        stock_quantity=0,
        low_stock_threshold=0,
    )


@dataclass(frozen=True)
class RecentOrder:
    order: OrderRecord
    client_name: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.order.to_dict()
        data['clientName'] = self.client_name
        return data


@dataclass(frozen=True)
class ActivityEntry:
    activity: ActivityRecord
    client: ClientRecord

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.activity.id,
            'client': {
                'id': self.client.id,
                'name': self.client.name,
                'avatarUrl': self.client.avatar_url,
            },
            'activityType': self.activity.activity_type,
            'description': self.activity.description,
            'timestamp': self.activity.timestamp.isoformat(),
            'relatedId': self.activity.related_id,
        }


@dataclass(frozen=True)
class DashboardAnalytics:
    orders_today: int
    revenue: float
    low_stock_items: int
    new_clients: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ordersToday': self.orders_today,
            'revenue': self.revenue,
            'lowStockItems': self.low_stock_items,
            'newClients': self.new_clients,
        }


class DashboardProjection:
    """
    Derived views over an EntityStore.

    Args:
        store: Persistence capability to read from
        clock: Zero-argument callable returning the current local datetime
        new_client_window_days: Trailing window on Client.last_active counted as "new"
        revenue_window_days: Trailing window on Order.order_date for revenue; None means all-time
    """

    def __init__(
        self,
        store: EntityStore,
        clock: Callable[[], datetime] = datetime.now,
        new_client_window_days: int = DEFAULT_NEW_CLIENT_WINDOW_DAYS,
        revenue_window_days: Optional[int] = None,
    ):
        self.store = store
        self.clock = clock
        self.new_client_window_days = new_client_window_days
        self.revenue_window_days = revenue_window_days

    def _clients_by_id(self) -> Dict[int, ClientRecord]:
        return {client.id: client for client in self.store.list_clients()}

    def get_recent_orders(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[RecentOrder]:
        """Newest orders first, each with its client's name"""
        clients = self._clients_by_id()
        recent = []
        for order in self.store.list_orders()[:limit]:
            client = clients.get(order.client_id)
            recent.append(RecentOrder(order=order, client_name=client.name if client else UNKNOWN_CLIENT_NAME))
        return recent

    def get_client_activities(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[ActivityEntry]:
        """Newest activities first, each with a client summary"""
        clients = self._clients_by_id()
        return [
            ActivityEntry(activity=activity, client=clients.get(activity.client_id) or unknown_client())
            for activity in self.store.list_activities()[:limit]
        ]

    def get_low_stock_items(self) -> List[ProductRecord]:
        return low_stock(self.store.list_products())

    def get_analytics(self) -> DashboardAnalytics:
        now = self.clock()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        orders = self.store.list_orders()

        orders_today = sum(1 for order in orders if order.order_date >= midnight)

        if self.revenue_window_days is None:
            revenue = sum(order.total for order in orders)
        else:
            revenue_since = now - timedelta(days=self.revenue_window_days)
            revenue = sum(order.total for order in orders if order.order_date >= revenue_since)

        new_client_since = now - timedelta(days=self.new_client_window_days)
        new_clients = sum(
            1 for client in self.store.list_clients()
            if client.last_active is not None and client.last_active >= new_client_since
        )

        return DashboardAnalytics(
            orders_today=orders_today,
            revenue=revenue,
            low_stock_items=len(self.get_low_stock_items()),
            new_clients=new_clients,
        )

    def get_order_details(self, order_id: int) -> OrderDetails:
        """
        Order with client and products resolved for display. A product or
        client that no longer resolves is shown as a placeholder.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = self.store.get_order(order_id)
        if order is None:
            raise NotFoundError('Order', order_id)
        client = self.store.get_client(order.client_id) or unknown_client()
        lines = [
            OrderLine(item=item, product=self.store.get_product(item.product_id) or unknown_product())
            for item in self.store.list_order_items(order.id)
        ]
        return OrderDetails(order=order, client=client, lines=lines)
