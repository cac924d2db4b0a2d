"""
Serviço de pedidos: validação do corpo, criação e manutenção de pedidos
"""

import logging

from ..errors import NotFound, ValidationError
from ..schemas import OrderIn, StatusIn, parse
from ..storage.base import ORDER_STATUSES, Customer, OrderLine, Totals

logger = logging.getLogger(__name__)


class OrderService:
    """Processa pedidos contra o estoque do backend escolhido"""

    def __init__(self, store):
        self.store = store

    def place_order(self, payload):
        """
        Cria um pedido a partir do JSON enviado pelo checkout.

        Args:
            payload: dict com customer, items[{id, quantity}], subtotal, shipping, tax, total

        Returns:
            Order gravado com status pending

        Os totais chegam calculados pelo cliente e são gravados como vieram.
        """
        data = parse(OrderIn, payload)
        customer = Customer(data.customer.name, str(data.customer.email), data.customer.address)
        lines = [OrderLine(item.id, item.quantity) for item in data.items]
        totals = Totals(data.subtotal, data.shipping, data.tax, data.total)

        order = self.store.place_order(customer, lines, totals)
        logger.info(f"Pedido {order.order_number} criado: {len(order.items)} itens, total {order.totals.total}")
        return order

    def list_orders(self):
        return self.store.list_orders()

    def get_order(self, order_number):
        order = self.store.get_order_by_number(order_number)
        if order is None:
            raise NotFound(error="Order not found")
        return order

    def update_status(self, order_id, payload):
        data = parse(StatusIn, payload, error="Invalid status")
        if data.status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}", error="Invalid status")
        order = self.store.update_order_status(order_id, data.status)
        if order is None:
            raise NotFound(error="Order not found")
        logger.info(f"Pedido {order.order_number} agora está {order.status}")
        return order

    def delete_order(self, order_id):
        if not self.store.delete_order(order_id):
            raise NotFound(error="Order not found")
        logger.info(f"Pedido {order_id} removido")
