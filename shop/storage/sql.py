"""
Backend relacional (Flask-SQLAlchemy).
Todas as operações usam ``db.session``, então precisam de um app context.
"""

import logging
from datetime import timezone
from decimal import Decimal
from functools import wraps
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from .. import models
from ..errors import InsufficientStock, InternalError, ProductNotFound, StoreUnavailable
from .base import (
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

_SORT_COLUMNS = {
    "price-asc": models.Product.price.asc(),
    "price-desc": models.Product.price.desc(),
    "name-asc": models.Product.name.asc(),
    "name-desc": models.Product.name.desc(),
}


def _aware(value):
    # SQLite devolve datetime sem fuso; tudo é gravado em UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def product_from_row(row: models.Product) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description or "",
        price=Decimal(row.price),
        category=row.category,
        image=row.image or "",
        stock=int(row.stock),
    )


def user_from_row(row: models.User) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        name=row.name,
        role=row.role,
        password_hash=row.password_hash,
    )


def order_from_row(row: models.Order) -> Order:
    return Order(
        id=row.id,
        order_number=row.order_number,
        sequence=row.sequence,
        customer=Customer(row.customer_name, row.customer_email, row.customer_address),
        items=[OrderItem(i.product_id, i.name, Decimal(i.price), i.quantity) for i in row.items],
        totals=Totals(Decimal(row.subtotal), Decimal(row.shipping), Decimal(row.tax), Decimal(row.total)),
        status=row.status,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _translated(method):
    """Faz rollback e traduz erros do SQLAlchemy para a hierarquia da API."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OperationalError as e:
            self.db.session.rollback()
            logger.error(f"Banco indisponível em {method.__name__}: {e}")
            raise StoreUnavailable(str(e.orig) if e.orig else str(e)) from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error(f"Erro de banco em {method.__name__}: {e}")
            raise InternalError(str(e.orig) if getattr(e, "orig", None) else str(e)) from e
        except Exception:
            self.db.session.rollback()
            raise

    return wrapper


class SqlStore(Store):
    name = "sql"

    def __init__(self, db, sequence: OrderNumberSequence):
        super().__init__(sequence)
        self.db = db

    def sync_sequence(self) -> None:
        """Avança o contador para depois do maior número já gravado."""
        highest = self.db.session.scalar(select(func.max(models.Order.sequence)))
        if highest:
            self.sequence.advance_to(int(highest))

    # --------- Catálogo ---------
    @_translated
    def list_products(self, category=None, search=None, sort=None) -> List[Product]:
        stmt = select(models.Product)
        if category and category != "all":
            stmt = stmt.where(models.Product.category == category)
        if search:
            # % e _ do termo são literais, como no backend em memória
            term = search.lower()
            stmt = stmt.where(or_(
                func.lower(models.Product.name).contains(term, autoescape=True),
                func.lower(models.Product.description).contains(term, autoescape=True),
            ))
        stmt = stmt.order_by(_SORT_COLUMNS.get(sort, models.Product.id.asc()))
        if sort in _SORT_COLUMNS:
            stmt = stmt.order_by(models.Product.id.asc())
        return [product_from_row(p) for p in self.db.session.scalars(stmt)]

    @_translated
    def get_product(self, product_id: int) -> Optional[Product]:
        row = self.db.session.get(models.Product, product_id)
        return product_from_row(row) if row else None

    @_translated
    def list_categories(self) -> List[str]:
        stmt = select(models.Product.category).distinct().order_by(models.Product.category.asc())
        return list(self.db.session.scalars(stmt))

    @_translated
    def create_product(self, product: Product) -> Product:
        row = models.Product(
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            image=product.image,
            stock=product.stock,
        )
        self.db.session.add(row)
        self.db.session.commit()
        return product_from_row(row)

    @_translated
    def update_product(self, product_id: int, product: Product) -> Optional[Product]:
        row = self.db.session.get(models.Product, product_id, with_for_update=True)
        if row is None:
            self.db.session.rollback()
            return None
        row.name = product.name
        row.description = product.description
        row.price = product.price
        row.category = product.category
        row.image = product.image
        row.stock = product.stock
        self.db.session.commit()
        return product_from_row(row)

    @_translated
    def delete_product(self, product_id: int) -> bool:
        result = self.db.session.execute(delete(models.Product).where(models.Product.id == product_id))
        self.db.session.commit()
        return result.rowcount > 0

    # --------- Pedidos ---------
    @_translated
    def place_order(self, customer: Customer, lines: List[OrderLine], totals: Totals) -> Order:
        session = self.db.session
        wanted = requested_quantities(lines)

        # trava as linhas sempre na mesma ordem (evita deadlock entre pedidos)
        stmt = (
            select(models.Product)
            .where(models.Product.id.in_(sorted(wanted)))
            .order_by(models.Product.id)
            .with_for_update()
        )
        rows = {p.id: p for p in session.scalars(stmt)}

        items = []
        for line in lines:
            row = rows.get(line.product_id)
            if row is None:
                raise ProductNotFound(line.product_id)
            if row.stock < wanted[line.product_id]:
                raise InsufficientStock(row.id, row.stock, row.name)
            items.append(OrderItem(row.id, row.name, Decimal(row.price), line.quantity))

        for pid, quantity in wanted.items():
            result = session.execute(
                update(models.Product)
                .where(models.Product.id == pid, models.Product.stock >= quantity)
                .values(stock=models.Product.stock - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # outro pedido levou o estoque entre a leitura e o UPDATE
                session.rollback()
                current = session.get(models.Product, pid)
                raise InsufficientStock(pid, current.stock if current else 0, current.name if current else None)

        order = self._new_order(customer, items, totals)
        session.add(models.Order(
            id=order.id,
            order_number=order.order_number,
            sequence=order.sequence,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_address=customer.address,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                models.OrderItem(product_id=i.product_id, name=i.name, price=i.price, quantity=i.quantity)
                for i in items
            ],
        ))
        session.commit()
        return order

    @_translated
    def list_orders(self) -> List[Order]:
        stmt = select(models.Order).order_by(models.Order.created_at.desc(), models.Order.sequence.desc())
        return [order_from_row(o) for o in self.db.session.scalars(stmt)]

    @_translated
    def get_order_by_number(self, order_number: str) -> Optional[Order]:
        row = self.db.session.scalar(select(models.Order).where(models.Order.order_number == order_number))
        return order_from_row(row) if row else None

    @_translated
    def update_order_status(self, order_id: str, status: str) -> Optional[Order]:
        row = self.db.session.get(models.Order, order_id)
        if row is None:
            return None
        row.status = status
        row.updated_at = utcnow()
        self.db.session.commit()
        return order_from_row(row)

    @_translated
    def delete_order(self, order_id: str) -> bool:
        row = self.db.session.get(models.Order, order_id)
        if row is None:
            return False
        self.db.session.delete(row)
        self.db.session.commit()
        return True

    # --------- Usuários ---------
    @_translated
    def get_user_by_username(self, username: str) -> Optional[User]:
        row = self.db.session.scalar(select(models.User).where(models.User.username == username))
        return user_from_row(row) if row else None

    @_translated
    def list_users(self) -> List[User]:
        return [user_from_row(u) for u in self.db.session.scalars(select(models.User).order_by(models.User.id))]

    @_translated
    def delete_user(self, user_id: int) -> bool:
        result = self.db.session.execute(delete(models.User).where(models.User.id == user_id))
        self.db.session.commit()
        return result.rowcount > 0

    # --------- Administração ---------
    @_translated
    def stats(self) -> StoreStats:
        session = self.db.session
        orders, total_value = session.execute(
            select(func.count(models.Order.id), func.coalesce(func.sum(models.Order.total), 0))
        ).one()
        return StoreStats(
            products=session.scalar(select(func.count(models.Product.id))),
            users=session.scalar(select(func.count(models.User.id))),
            orders=orders,
            total_value=Decimal(total_value),
        )

    @_translated
    def seed(self, products: List[Product], users: List[SeedUser]) -> Dict[str, int]:
        session = self.db.session
        names = set(session.scalars(select(models.Product.name)))
        usernames = set(session.scalars(select(models.User.username)))

        created = {"products": 0, "users": 0}
        for p in products:
            if p.name in names:
                continue
            session.add(models.Product(
                name=p.name, description=p.description, price=p.price,
                category=p.category, image=p.image, stock=p.stock,
            ))
            names.add(p.name)
            created["products"] += 1
        for seed_user in users:
            if seed_user.username in usernames:
                continue
            u = hash_seed_user(seed_user)
            session.add(models.User(
                username=u.username, email=u.email, name=u.name,
                role=u.role, password_hash=u.password_hash,
            ))
            usernames.add(u.username)
            created["users"] += 1
        session.commit()
        logger.info(f"Seed no banco: {created['products']} produtos, {created['users']} usuários")
        return created

    @_translated
    def clear(self) -> None:
        session = self.db.session
        # ordem inversa de dependência
        for model in (models.OrderItem, models.Order, models.Product, models.User):
            session.execute(delete(model))
        session.commit()
        logger.info("Banco de dados apagado")

    @_translated
    def export(self) -> Dict[str, Any]:
        session = self.db.session
        return {
            "products": [product_from_row(p) for p in session.scalars(select(models.Product).order_by(models.Product.id))],
            "users": [user_from_row(u) for u in session.scalars(select(models.User).order_by(models.User.id))],
            "orders": [order_from_row(o) for o in session.scalars(select(models.Order).order_by(models.Order.sequence))],
        }
