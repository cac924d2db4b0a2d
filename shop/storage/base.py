"""
Classe base abstrata para os backends de armazenamento.
Define a interface comum que o backend relacional e o backend em memória
implementam, além das estruturas de dados padronizadas da loja.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class OrderStatus(Enum):
    """Status do pedido"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUSES = [s.value for s in OrderStatus]

SORT_OPTIONS = ("price-asc", "price-desc", "name-asc", "name-desc")


@dataclass
class Product:
    """Produto do catálogo"""
    id: Optional[int]
    name: str
    description: str
    price: Decimal
    category: str
    image: str
    stock: int


@dataclass
class User:
    """Usuário (nunca carrega a senha em texto puro)"""
    id: Optional[int]
    username: str
    email: str
    name: str
    role: str
    password_hash: str = field(default="", repr=False)


@dataclass
class Customer:
    name: str
    email: str
    address: str


@dataclass
class OrderLine:
    """Item pedido pelo cliente, antes da validação de estoque"""
    product_id: int
    quantity: int


@dataclass
class OrderItem:
    """Snapshot do produto no momento do pedido"""
    product_id: int
    name: str
    price: Decimal
    quantity: int


@dataclass
class Totals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


@dataclass
class Order:
    """Estrutura de pedido padronizada"""
    id: str
    order_number: str
    sequence: int
    customer: Customer
    items: List[OrderItem]
    totals: Totals
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass
class StoreStats:
    products: int
    users: int
    orders: int
    total_value: Decimal


@dataclass
class SeedUser:
    username: str
    email: str
    name: str
    role: str
    password: str = field(repr=False)


class OrderNumberSequence:
    """
    Contador de números de pedido compartilhado pelo processo.
    O primeiro número emitido é ``base + 1`` (VUE-1001 com os defaults).
    """

    def __init__(self, prefix: str = "VUE", base: int = 1000):
        self.prefix = prefix
        self._value = base
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        with self._lock:
            return self._value

    def advance_to(self, value: int) -> None:
        with self._lock:
            self._value = max(self._value, value)

    def next(self):
        with self._lock:
            self._value += 1
            return self._value, f"{self.prefix}-{self._value}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def requested_quantities(lines: List[OrderLine]) -> Dict[int, int]:
    """Soma as quantidades por produto, mantendo a ordem do pedido."""
    totals: Dict[int, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals


class Store(ABC):
    """
    Interface comum de armazenamento.
    Escolhida uma única vez na inicialização (ver ``shop.storage.select_store``).
    """

    name = "base"

    def __init__(self, sequence: OrderNumberSequence):
        self.sequence = sequence

    def _new_order(self, customer: Customer, items: List[OrderItem], totals: Totals) -> Order:
        sequence, number = self.sequence.next()
        now = utcnow()
        return Order(
            id=str(uuid.uuid4()),
            order_number=number,
            sequence=sequence,
            customer=customer,
            items=items,
            totals=totals,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    # --------- Catálogo ---------
    @abstractmethod
    def list_products(self, category: Optional[str] = None, search: Optional[str] = None,
                      sort: Optional[str] = None) -> List[Product]:
        """
        Lista produtos com filtro e ordenação.

        Args:
            category: categoria exata; None, "" ou "all" não filtram
            search: termo buscado (sem diferenciar maiúsculas) no nome ou descrição
            sort: uma de SORT_OPTIONS; qualquer outro valor mantém a ordem de origem
        """

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    def list_categories(self) -> List[str]:
        pass

    @abstractmethod
    def create_product(self, product: Product) -> Product:
        pass

    @abstractmethod
    def update_product(self, product_id: int, product: Product) -> Optional[Product]:
        pass

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        pass

    # --------- Pedidos ---------
    @abstractmethod
    def place_order(self, customer: Customer, lines: List[OrderLine], totals: Totals) -> Order:
        """
        Valida estoque e grava o pedido de forma atômica.

        Raises:
            ProductNotFound: algum produto não existe
            InsufficientStock: estoque menor que a quantidade pedida
        Nada é gravado nem decrementado quando a validação falha.
        """

    @abstractmethod
    def list_orders(self) -> List[Order]:
        """Pedidos do mais recente para o mais antigo."""

    @abstractmethod
    def get_order_by_number(self, order_number: str) -> Optional[Order]:
        pass

    @abstractmethod
    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        pass

    @abstractmethod
    def delete_order(self, order_id: str) -> bool:
        pass

    # --------- Usuários ---------
    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_users(self) -> List[User]:
        pass

    @abstractmethod
    def delete_user(self, user_id: int) -> bool:
        pass

    # --------- Administração ---------
    @abstractmethod
    def stats(self) -> StoreStats:
        pass

    @abstractmethod
    def seed(self, products: List[Product], users: List[SeedUser]) -> Dict[str, int]:
        """Insere produtos e usuários que ainda não existem; devolve as contagens."""

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def export(self) -> Dict[str, Any]:
        pass

    def info(self) -> Dict[str, Any]:
        return {"backend": self.name, "next_order_number": self.sequence.current + 1}
