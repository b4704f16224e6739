"""
Data layer: SQLAlchemy models for the back-office tables.

Importing this package registers every model with the shared metadata.
"""

from backoffice.data.core.user_info.user import User
from backoffice.data.commerce.product import Product
from backoffice.data.commerce.client import Client
from backoffice.data.commerce.order import Order
from backoffice.data.commerce.order_item import OrderItem
from backoffice.data.commerce.client_activity import ClientActivity

__all__ = [
    'User',
    'Product',
    'Client',
    'Order',
    'OrderItem',
    'ClientActivity',
]
