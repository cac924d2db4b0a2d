"""
Backend em memória (sem durabilidade).
Usado quando o banco relacional não responde na inicialização.
"""

import copy
import logging
import threading
from contextlib import ExitStack
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..errors import InsufficientStock, ProductNotFound
from .base import (
    SORT_OPTIONS,
    Customer,
    Order,
    OrderItem,
    OrderLine,
    OrderNumberSequence,
    Product,
    SeedUser,
    Store,
    StoreStats,
    Totals,
    User,
    requested_quantities,
    utcnow,
)
from .seed import hash_seed_user

logger = logging.getLogger(__name__)


def filter_products(products: List[Product], category=None, search=None, sort=None) -> List[Product]:
    items = products
    if category and category != "all":
        items = [p for p in items if p.category == category]
    if search:
        term = search.lower()
        items = [p for p in items if term in p.name.lower() or term in p.description.lower()]

    if sort not in SORT_OPTIONS:
        return list(items)
    key, direction = sort.split("-")
    return sorted(
        items,
        key=(lambda p: p.price) if key == "price" else (lambda p: p.name),
        reverse=direction == "desc",
    )


class MemoryStore(Store):
    """
    Guarda produtos, pedidos e usuários em dicionários do processo.

    Cada produto tem o seu próprio lock; um pedido trava todos os produtos
    envolvidos em ordem crescente de id antes de validar e decrementar o
    estoque. ``self._lock`` protege apenas os dicionários e nunca é mantido
    enquanto se espera por um lock de produto.
    """

    name = "memory"

    def __init__(self, sequence: OrderNumberSequence, products: Optional[List[Product]] = None,
                 users: Optional[List[User]] = None):
        super().__init__(sequence)
        self._lock = threading.Lock()
        self._products: Dict[int, Product] = {}
        self._product_locks: Dict[int, threading.Lock] = {}
        self._orders: Dict[str, Order] = {}
        self._users: Dict[int, User] = {}
        self._next_product_id = 1
        self._next_user_id = 1
        for p in products or []:
            self._insert_product(p)
        for u in users or []:
            self._insert_user(u)

    # chamar com self._lock adquirido (ou durante o __init__)
    def _insert_product(self, product: Product) -> Product:
        pid = product.id if product.id is not None else self._next_product_id
        stored = replace(product, id=pid)
        self._products[pid] = stored
        self._product_locks.setdefault(pid, threading.Lock())
        self._next_product_id = max(self._next_product_id, pid + 1)
        return stored

    def _insert_user(self, user: User) -> User:
        uid = user.id if user.id is not None else self._next_user_id
        stored = replace(user, id=uid)
        self._users[uid] = stored
        self._next_user_id = max(self._next_user_id, uid + 1)
        return stored

    def _locked_product(self, product_id: int):
        """Lock do produto (ou None se não existir); adquira fora de self._lock."""
        with self._lock:
            return self._product_locks.get(product_id) if product_id in self._products else None

    # --------- Catálogo ---------
    def list_products(self, category=None, search=None, sort=None) -> List[Product]:
        with self._lock:
            snapshot = [replace(p) for p in self._products.values()]
        return filter_products(snapshot, category, search, sort)

    def get_product(self, product_id: int) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return replace(product) if product else None

    def list_categories(self) -> List[str]:
        with self._lock:
            return sorted({p.category for p in self._products.values()})

    def create_product(self, product: Product) -> Product:
        with self._lock:
            stored = self._insert_product(replace(product, id=None))
            return replace(stored)

    def update_product(self, product_id: int, product: Product) -> Optional[Product]:
        lock = self._locked_product(product_id)
        if lock is None:
            return None
        with lock, self._lock:
            if product_id not in self._products:
                return None
            stored = replace(product, id=product_id)
            self._products[product_id] = stored
            return replace(stored)

    def delete_product(self, product_id: int) -> bool:
        lock = self._locked_product(product_id)
        if lock is None:
            return False
        with lock, self._lock:
            return self._products.pop(product_id, None) is not None

    # --------- Pedidos ---------
    def place_order(self, customer: Customer, lines: List[OrderLine], totals: Totals) -> Order:
        wanted = requested_quantities(lines)
        with self._lock:
            locks = {pid: self._product_locks[pid] for pid in wanted if pid in self._products}

        with ExitStack() as stack:
            for pid in sorted(locks):
                stack.enter_context(locks[pid])

            with self._lock:
                # o produto pode ter sido removido enquanto esperávamos o lock
                current = {pid: self._products.get(pid) for pid in wanted}

            items = []
            for line in lines:
                product = current[line.product_id]
                if product is None:
                    raise ProductNotFound(line.product_id)
                if product.stock < wanted[line.product_id]:
                    raise InsufficientStock(product.id, product.stock, product.name)
                items.append(OrderItem(product.id, product.name, product.price, line.quantity))

            for pid, quantity in wanted.items():
                current[pid].stock -= quantity

            order = self._new_order(customer, items, totals)
            with self._lock:
                self._orders[order.id] = order
                return copy.deepcopy(order)

    def list_orders(self) -> List[Order]:
        with self._lock:
            orders = copy.deepcopy(list(self._orders.values()))
        return sorted(orders, key=lambda o: (o.created_at, o.sequence), reverse=True)

    def get_order_by_number(self, order_number: str) -> Optional[Order]:
        with self._lock:
            for order in self._orders.values():
                if order.order_number == order_number:
                    return copy.deepcopy(order)
        return None

    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            order.status = status
            order.updated_at = utcnow()
            return copy.deepcopy(order)

    def delete_order(self, order_id: str) -> bool:
        with self._lock:
            return self._orders.pop(order_id, None) is not None

    # --------- Usuários ---------
    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def list_users(self) -> List[User]:
        with self._lock:
            return [replace(u) for u in sorted(self._users.values(), key=lambda u: u.id)]

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    # --------- Administração ---------
    def stats(self) -> StoreStats:
        with self._lock:
            return StoreStats(
                products=len(self._products),
                users=len(self._users),
                orders=len(self._orders),
                total_value=sum((o.totals.total for o in self._orders.values()), Decimal("0")),
            )

    def seed(self, products: List[Product], users: List[SeedUser]) -> Dict[str, int]:
        with self._lock:
            names = {p.name for p in self._products.values()}
            usernames = {u.username for u in self._users.values()}
        new_users = [hash_seed_user(s) for s in users if s.username not in usernames]

        created = {"products": 0, "users": 0}
        with self._lock:
            for p in products:
                if p.name not in names:
                    self._insert_product(replace(p, id=None))
                    names.add(p.name)
                    created["products"] += 1
            for u in new_users:
                if all(existing.username != u.username for existing in self._users.values()):
                    self._insert_user(u)
                    created["users"] += 1
        logger.info(f"Seed em memória: {created['products']} produtos, {created['users']} usuários")
        return created

    def clear(self) -> None:
        with self._lock:
            self._orders.clear()
            self._products.clear()
            self._users.clear()
        logger.info("Dados em memória apagados")

    def export(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "products": [replace(p) for p in self._products.values()],
                "users": [replace(u) for u in self._users.values()],
                "orders": copy.deepcopy(list(self._orders.values())),
            }
