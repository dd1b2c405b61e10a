"""
Routes package.
"""

from .auth import router as auth_router
from .customers import router as customers_router
from .notifications import router as notifications_router
from .orders import router as orders_router
from .pincodes import router as pincodes_router
from .products import router as products_router
from .shipping import router as shipping_router
from .staff import router as staff_router
from .stores import router as stores_router
from .sync import router as sync_router

__all__ = [
    "auth_router",
    "customers_router",
    "notifications_router",
    "orders_router",
    "pincodes_router",
    "products_router",
    "shipping_router",
    "staff_router",
    "stores_router",
    "sync_router",
]
