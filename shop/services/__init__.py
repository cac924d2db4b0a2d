# shop/services/__init__.py
from dataclasses import dataclass
from functools import wraps

from flask import current_app, request

from ..errors import Forbidden
from ..storage.base import Store
from .auth_service import AuthService, SessionRegistry
from .order_service import OrderService

EXTENSION_KEY = "shop"


@dataclass
class ShopServices:
    store: Store
    orders: OrderService
    auth: AuthService


def build_services(store: Store) -> ShopServices:
    return ShopServices(store=store, orders=OrderService(store), auth=AuthService(store, SessionRegistry()))


def get_services() -> ShopServices:
    return current_app.extensions[EXTENSION_KEY]


def require_admin(view):
    """Exige token de um usuário admin (desligável com ADMIN_AUTH_REQUIRED=0)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_app.config["ADMIN_AUTH_REQUIRED"]:
            user = get_services().auth.resolve(request.headers.get("Authorization"))
            if user.role != "admin":
                raise Forbidden("Admin role required")
        return view(*args, **kwargs)

    return wrapper


__all__ = ["ShopServices", "build_services", "get_services", "require_admin", "AuthService", "OrderService"]
