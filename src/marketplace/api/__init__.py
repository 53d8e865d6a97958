"""Marketplace API package."""

from marketplace.api.application import ROUTERS, create_app
from marketplace.api.errors import register_error_handlers

__all__ = ["ROUTERS", "create_app", "register_error_handlers"]
