from .auth import User
from .inventory import Product, InventoryAdjustment, ADJUSTMENT_TYPES
from .sales import Sale, SaleItem, PAYMENT_METHODS

__all__ = [
    'User',
    'Product', 'InventoryAdjustment', 'ADJUSTMENT_TYPES',
    'Sale', 'SaleItem', 'PAYMENT_METHODS',
]
