"""
Inventory ledger rules

The ledger is the stock_quantity column on each product plus its
low_stock_threshold. These helpers state the arithmetic once so the stores,
the workflow and the projections agree on it. Low stock is always derived,
never persisted.
"""

from typing import Iterable, List

from backoffice.business.commerce.errors import InvalidArgumentError
from backoffice.business.commerce.records import ProductRecord


DEFAULT_LOW_STOCK_THRESHOLD = 5


def is_low_stock(product: ProductRecord) -> bool:
    return product.stock_quantity <= product.low_stock_threshold


def low_stock(products: Iterable[ProductRecord]) -> List[ProductRecord]:
    """All low-stock products, most urgent (lowest stock) first"""
    return sorted(
        (p for p in products if is_low_stock(p)),
        key=lambda p: (p.stock_quantity, p.id),
    )


def decremented(stock_quantity: int, quantity: int) -> int:
    """Stock after fulfilling `quantity` units. Floors at 0 instead of rejecting an oversell."""
    return max(0, stock_quantity - quantity)


def restocked(stock_quantity: int, quantity: int) -> int:
    return stock_quantity + quantity


def applied_delta(stock_quantity: int, delta: int) -> int:
    """Signed adjustment used by the store primitive: positive restocks, negative fulfils"""
    if delta >= 0:
        return restocked(stock_quantity, delta)
    return decremented(stock_quantity, -delta)


def validate_quantity(quantity, field: str = 'quantity') -> int:
    """
    Quantities are positive integers. Booleans are rejected even though they
    are ints in Python.

    Raises:
        InvalidArgumentError: If quantity is not an int >= 1
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidArgumentError(f"{field} must be an integer", field=field)
    if quantity < 1:
        raise InvalidArgumentError(f"{field} must be at least 1", field=field)
    return quantity
