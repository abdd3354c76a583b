"""Storefront order API package."""

from storefront.api.errors import register_storefront_exception_handlers
from storefront.api.routes import order_router

__all__ = ["order_router", "register_storefront_exception_handlers"]
