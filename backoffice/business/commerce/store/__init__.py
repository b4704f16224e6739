"""
Entity store implementations
"""

from backoffice.business.commerce.store.base import EntityStore, PRODUCT_UPDATABLE_FIELDS
from backoffice.business.commerce.store.memory_store import MemoryStore
from backoffice.business.commerce.store.sql_store import SqlAlchemyStore

__all__ = [
    'EntityStore',
    'PRODUCT_UPDATABLE_FIELDS',
    'MemoryStore',
    'SqlAlchemyStore',
]
