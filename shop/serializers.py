# shop/serializers.py: registros -> JSON (camelCase, decimais como número)
from .storage.base import Order, Product, StoreStats, User


def _money(value) -> float:
    return float(value or 0)


def product_to_dict(p: Product):
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description or "",
        "price": _money(p.price),
        "category": p.category,
        "image": p.image or "",
        "stock": int(p.stock or 0),
    }


def user_to_dict(u: User):
    # password_hash nunca sai da API
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "name": u.name,
        "role": u.role,
    }


def order_to_dict(o: Order):
    return {
        "id": o.id,
        "orderNumber": o.order_number,
        "customer": {
            "name": o.customer.name,
            "email": o.customer.email,
            "address": o.customer.address,
        },
        "items": [
            {"id": i.product_id, "name": i.name, "price": _money(i.price), "quantity": i.quantity}
            for i in o.items
        ],
        "subtotal": _money(o.totals.subtotal),
        "shipping": _money(o.totals.shipping),
        "tax": _money(o.totals.tax),
        "total": _money(o.totals.total),
        "status": o.status,
        "createdAt": o.created_at.isoformat(),
        "updatedAt": o.updated_at.isoformat(),
    }


def confirmation_to_dict(o: Order):
    return {
        "orderId": o.id,
        "orderNumber": o.order_number,
        "total": _money(o.totals.total),
        "status": o.status,
    }


def stats_to_dict(s: StoreStats):
    return {
        "products": s.products,
        "users": s.users,
        "orders": s.orders,
        "totalValue": _money(s.total_value),
    }
