# shop/errors.py
"""
Hierarquia de erros da API.
Cada erro carrega o status HTTP, um rótulo curto (``error``) e uma
``message`` opcional; os handlers abaixo devolvem tudo no envelope
``{success, error, message}``.
"""

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = 500
    error = "Internal error"

    def __init__(self, message=None, error=None):
        super().__init__(message or error or self.error)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self):
        body = {"success": False, "error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(ShopError):
    status_code = 400
    error = "Validation failed"


class OrderError(ShopError):
    """Pedido recusado antes de qualquer escrita."""
    status_code = 400


class ProductNotFound(OrderError):
    error = "Product not found"

    def __init__(self, product_id):
        super().__init__(f"Product with ID {product_id} does not exist")
        self.product_id = product_id


class InsufficientStock(OrderError):
    error = "Insufficient stock"

    def __init__(self, product_id, available, name=None):
        label = name or product_id
        super().__init__(f"Product {label} only has {available} items in stock")
        self.product_id = product_id
        self.available = available

    def to_dict(self):
        body = super().to_dict()
        body["data"] = {"productId": self.product_id, "available": self.available}
        return body


class NotFound(ShopError):
    status_code = 404
    error = "Not found"


class Unauthorized(ShopError):
    status_code = 401
    error = "Unauthorized"


class Forbidden(ShopError):
    status_code = 403
    error = "Forbidden"


class StoreUnavailable(ShopError):
    status_code = 503
    error = "Database not connected"


class InternalError(ShopError):
    status_code = 500
    error = "DB error"


def register_error_handlers(app):
    @app.errorhandler(ShopError)
    def _shop_error(exc: ShopError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.name, "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception(f"Erro inesperado: {exc}")
        return jsonify({"success": False, "error": "Internal server error"}), 500
