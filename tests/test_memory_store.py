import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from shop.errors import InsufficientStock, ProductNotFound
from shop.storage import MemoryStore, OrderNumberSequence
from shop.storage.base import Customer, OrderLine, Product, Totals
from shop.storage.seed import demo_products

CUSTOMER = Customer("Grace Hopper", "grace@example.com", "1 Cobol Way")
TOTALS = Totals(Decimal("10"), Decimal("0"), Decimal("0"), Decimal("10"))


@pytest.fixture
def store():
    return MemoryStore(OrderNumberSequence(), products=demo_products())


def _stock(store, pid):
    return store.get_product(pid).stock


def test_place_order_decrements_and_snapshots(store):
    order = store.place_order(CUSTOMER, [OrderLine(3, 5)], TOTALS)
    assert order.order_number == "VUE-1001"
    assert order.items[0].name == "Wireless Headphones"
    assert order.items[0].price == Decimal("89.99")
    assert _stock(store, 3) == 10


def test_failure_applies_nothing(store):
    with pytest.raises(InsufficientStock) as exc:
        store.place_order(CUSTOMER, [OrderLine(1, 1), OrderLine(3, 16)], TOTALS)
    assert exc.value.available == 15
    assert _stock(store, 1) == 50

    with pytest.raises(ProductNotFound):
        store.place_order(CUSTOMER, [OrderLine(1, 1), OrderLine(42, 1)], TOTALS)
    assert _stock(store, 1) == 50
    assert store.list_orders() == []


def test_returned_records_are_copies(store):
    product = store.get_product(1)
    product.stock = 0
    assert _stock(store, 1) == 50

    order = store.place_order(CUSTOMER, [OrderLine(1, 1)], TOTALS)
    order.status = "delivered"
    assert store.get_order_by_number(order.order_number).status == "pending"


def test_concurrent_orders_never_oversell(store):
    # produto 7 tem 10 unidades; 20 pedidos de 3 disputam o estoque
    barrier = threading.Barrier(20)

    def attempt(_):
        barrier.wait()
        try:
            return store.place_order(CUSTOMER, [OrderLine(7, 3)], TOTALS)
        except InsufficientStock:
            return None

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(attempt, range(20)))

    placed = [r for r in results if r is not None]
    assert len(placed) == 3
    assert _stock(store, 7) == 1


def test_concurrent_multi_product_orders_do_not_deadlock(store):
    # ordens opostas de itens; os locks são sempre pegos por id crescente
    def attempt(i):
        lines = [OrderLine(1, 1), OrderLine(2, 1)] if i % 2 else [OrderLine(2, 1), OrderLine(1, 1)]
        return store.place_order(CUSTOMER, lines, TOTALS)

    with ThreadPoolExecutor(max_workers=8) as pool:
        orders = list(pool.map(attempt, range(20)))

    assert len(orders) == 20
    assert _stock(store, 1) == 30
    assert _stock(store, 2) == 5


def test_concurrent_order_numbers_are_unique(store):
    with ThreadPoolExecutor(max_workers=10) as pool:
        orders = list(pool.map(lambda _: store.place_order(CUSTOMER, [OrderLine(8, 1)], TOTALS), range(50)))

    sequences = sorted(o.sequence for o in orders)
    assert sequences == list(range(1001, 1051))
    assert len({o.order_number for o in orders}) == 50
    assert _stock(store, 8) == 50


def test_sequence_is_monotonic():
    seq = OrderNumberSequence("SHOP", 10)
    assert seq.next() == (11, "SHOP-11")
    seq.advance_to(40)
    seq.advance_to(20)
    assert seq.next() == (41, "SHOP-41")


def test_update_and_delete_product(store):
    updated = store.update_product(3, Product(None, "Headphones", "", Decimal("80"), "audio", "", 2))
    assert updated.id == 3
    assert store.list_categories() == ["audio", "books", "clothing", "electronics"]
    assert store.update_product(99, updated) is None

    assert store.delete_product(3) is True
    assert store.delete_product(3) is False
    with pytest.raises(ProductNotFound):
        store.place_order(CUSTOMER, [OrderLine(3, 1)], TOTALS)
