from .auth import User, ROLES, STATUSES
from .inventory import Product
from .sales import Sale, SaleItem

__all__ = [
    'User', 'ROLES', 'STATUSES',
    'Product',
    'Sale', 'SaleItem',
]
