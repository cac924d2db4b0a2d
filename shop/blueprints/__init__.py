# shop/blueprints/__init__.py
from flask import Blueprint

from .admin import bp as admin_bp
from .auth import bp as auth_bp
from .orders import bp as orders_bp
from .products import bp as products_bp


def api_blueprint() -> Blueprint:
    """Agrupa tudo sob /api (auth, produtos, pedidos, admin)."""
    api = Blueprint("api", __name__, url_prefix="/api")
    api.register_blueprint(auth_bp)
    api.register_blueprint(products_bp)
    api.register_blueprint(orders_bp)
    api.register_blueprint(admin_bp)
    return api
