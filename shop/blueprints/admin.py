# shop/blueprints/admin.py
import logging

from flask import Blueprint, current_app, jsonify, request

from ..config import postgres_url
from ..errors import InternalError, NotFound
from ..schemas import ConnectionIn, ProductIn, parse
from ..serializers import order_to_dict, product_to_dict, stats_to_dict, user_to_dict
from ..services import get_services, require_admin
from ..storage import ping_database
from ..storage.base import Product
from ..storage.seed import DEMO_USERS, demo_products
from .products import parse_id

logger = logging.getLogger(__name__)

bp = Blueprint("admin", __name__, url_prefix="/admin")


def _product_from_body(payload) -> Product:
    data = parse(ProductIn, payload, error="Invalid product data")
    return Product(
        id=None,
        name=data.name.strip(),
        description=data.description.strip(),
        price=data.price,
        category=data.category.strip(),
        image=data.image.strip(),
        stock=data.stock,
    )


@bp.post("/test-connection")
@require_admin
def check_connection():
    conn = parse(ConnectionIn, request.get_json(silent=True), error="Invalid request")
    url = postgres_url(conn.host, conn.port, conn.username, conn.password, conn.database)
    try:
        ping_database(url, timeout=current_app.config["DB_CONNECT_TIMEOUT"])
    except Exception as e:
        logger.warning(f"Teste de conexão falhou para {conn.host}:{conn.port}/{conn.database}: {e}")
        raise InternalError(str(e), error="Connection test failed") from e
    return jsonify({"success": True, "message": "Database connection successful"})


@bp.get("/stats")
@require_admin
def admin_stats():
    return jsonify({"success": True, "data": stats_to_dict(get_services().store.stats())})


@bp.get("/users")
@require_admin
def list_users():
    users = get_services().store.list_users()
    return jsonify({"success": True, "data": [user_to_dict(u) for u in users]})


@bp.delete("/users/<user_id>")
@require_admin
def delete_user(user_id):
    if not get_services().store.delete_user(parse_id(user_id, "user")):
        raise NotFound(error="User not found")
    return jsonify({"success": True, "message": "User deleted successfully"})


@bp.post("/products")
@require_admin
def create_product():
    product = get_services().store.create_product(_product_from_body(request.get_json(silent=True)))
    logger.info(f"Produto {product.id} criado: {product.name}")
    return jsonify({
        "success": True,
        "data": product_to_dict(product),
        "message": "Product created successfully",
    }), 201


@bp.put("/products/<product_id>")
@require_admin
def update_product(product_id):
    pid = parse_id(product_id)
    product = get_services().store.update_product(pid, _product_from_body(request.get_json(silent=True)))
    if product is None:
        raise NotFound(error="Product not found")
    return jsonify({
        "success": True,
        "data": product_to_dict(product),
        "message": "Product updated successfully",
    })


@bp.delete("/products/<product_id>")
@require_admin
def delete_product(product_id):
    if not get_services().store.delete_product(parse_id(product_id)):
        raise NotFound(error="Product not found")
    return jsonify({"success": True, "message": "Product deleted successfully"})


@bp.post("/seed")
@require_admin
def seed_database():
    created = get_services().store.seed(demo_products(), DEMO_USERS)
    return jsonify({"success": True, "message": "Database seeded successfully", "data": created})


@bp.post("/clear")
@require_admin
def clear_database():
    get_services().store.clear()
    return jsonify({"success": True, "message": "Database cleared successfully"})


@bp.get("/export")
@require_admin
def export_data():
    dump = get_services().store.export()
    return jsonify({
        "success": True,
        "data": {
            "products": [product_to_dict(p) for p in dump["products"]],
            "users": [user_to_dict(u) for u in dump["users"]],
            "orders": [order_to_dict(o) for o in dump["orders"]],
        },
    })
