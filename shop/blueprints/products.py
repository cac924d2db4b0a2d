# shop/blueprints/products.py
from flask import Blueprint, jsonify, request

from ..errors import NotFound, ValidationError
from ..schemas import MAX_ID
from ..serializers import product_to_dict
from ..services import get_services

bp = Blueprint("products", __name__)


def parse_id(raw, label="product"):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(error=f"Invalid {label} ID") from None
    if not 1 <= value <= MAX_ID:
        raise ValidationError(error=f"Invalid {label} ID")
    return value


@bp.get("/products")
def list_products():
    category = (request.args.get("category") or "").strip()
    search = (request.args.get("search") or "").strip()
    sort = (request.args.get("sort") or "").strip().lower()

    products = get_services().store.list_products(category=category, search=search, sort=sort)
    return jsonify({
        "success": True,
        "data": [product_to_dict(p) for p in products],
        "total": len(products),
    })


# rota estática: o Flask a prefere a /products/<product_id>
@bp.get("/products/categories")
def list_categories():
    return jsonify({"success": True, "data": get_services().store.list_categories()})


@bp.get("/products/<product_id>")
def get_product(product_id):
    p = get_services().store.get_product(parse_id(product_id))
    if p is None:
        raise NotFound(error="Product not found")
    return jsonify({"success": True, "data": product_to_dict(p)})
