# shop/blueprints/orders.py
from flask import Blueprint, jsonify, request

from ..serializers import confirmation_to_dict, order_to_dict
from ..services import get_services

bp = Blueprint("orders", __name__)


@bp.post("/orders")
def create_order():
    order = get_services().orders.place_order(request.get_json(silent=True))
    return jsonify({
        "success": True,
        "message": "Order created successfully",
        "data": confirmation_to_dict(order),
    }), 201


@bp.get("/orders")
def list_orders():
    orders = get_services().orders.list_orders()
    return jsonify({
        "success": True,
        "data": [order_to_dict(o) for o in orders],
        "total": len(orders),
    })


@bp.get("/orders/<order_number>")
def get_order(order_number: str):
    order = get_services().orders.get_order(order_number)
    return jsonify({"success": True, "data": order_to_dict(order)})


@bp.put("/orders/<order_id>/status")
def update_order_status(order_id: str):
    order = get_services().orders.update_status(order_id, request.get_json(silent=True))
    return jsonify({"success": True, "data": order_to_dict(order)})


@bp.delete("/orders/<order_id>")
def delete_order(order_id: str):
    get_services().orders.delete_order(order_id)
    return jsonify({"success": True, "message": "Order deleted successfully"})
