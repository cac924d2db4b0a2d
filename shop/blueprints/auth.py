# shop/blueprints/auth.py
from flask import Blueprint, jsonify, request

from ..serializers import user_to_dict
from ..services import get_services

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.post("/login")
def login():
    user, token = get_services().auth.login(request.get_json(silent=True))
    return jsonify({
        "success": True,
        "message": "Login successful",
        "data": {"user": user_to_dict(user), "token": token},
    })


@bp.post("/logout")
def logout():
    get_services().auth.logout(request.headers.get("Authorization"))
    return jsonify({"success": True, "message": "Logout successful"})


@bp.get("/me")
def me():
    user = get_services().auth.resolve(request.headers.get("Authorization"))
    return jsonify({"success": True, "data": user_to_dict(user)})
