# shop/storage/seed.py: catálogo e usuários de demonstração
from decimal import Decimal

from werkzeug.security import generate_password_hash

from .base import Product, SeedUser, User

_IMG = "https://images.unsplash.com/{}?w=400&h=300&fit=crop&bg=white"

DEMO_PRODUCTS = [
    ("Vue.js T-Shirt", "Comfortable cotton t-shirt with Vue.js logo", "25.99", "clothing", "photo-1521572163474-6864f9cf17ab", 50),
    ("JavaScript Book", "Comprehensive guide to modern JavaScript", "39.99", "books", "photo-1544947950-fa07a98d237f", 25),
    ("Wireless Headphones", "High-quality wireless headphones with noise cancellation", "89.99", "electronics", "photo-1505740420928-5e560c06d30e", 15),
    ("Vue Hoodie", "Warm and cozy hoodie perfect for Vue developers", "45.99", "clothing", "photo-1556821840-3a63f95609a7", 30),
    ("Laptop Stand", "Ergonomic laptop stand for better posture", "29.99", "electronics", "photo-1586953208448-b95a79798f07", 20),
    ("Vue.js Guide", "Complete Vue.js 3 tutorial and reference", "19.99", "books", "photo-1481627834876-b7833e8f5570", 40),
    ("Mechanical Keyboard", "Premium mechanical keyboard with RGB backlighting", "129.99", "electronics", "photo-1541140532154-b024d705b90a", 10),
    ("Developer Mug", "Ceramic coffee mug perfect for coding sessions", "12.99", "clothing", "photo-1578662996442-48f60103fc96", 100),
    ("React vs Vue Book", "In-depth comparison of modern JavaScript frameworks", "34.99", "books", "photo-1589829085413-56de8ae18c73", 35),
]

DEMO_USERS = [
    SeedUser("admin", "admin@vueshop.com", "Admin User", "admin", "admin123"),
    SeedUser("john", "john@example.com", "John Doe", "customer", "password123"),
    SeedUser("jane", "jane@example.com", "Jane Smith", "customer", "password456"),
]


def demo_products():
    """Lista nova a cada chamada; ids 1..9 na ordem acima."""
    return [
        Product(
            id=idx,
            name=name,
            description=description,
            price=Decimal(price),
            category=category,
            image=_IMG.format(photo),
            stock=stock,
        )
        for idx, (name, description, price, category, photo, stock) in enumerate(DEMO_PRODUCTS, start=1)
    ]


def hash_seed_user(seed: SeedUser, user_id=None) -> User:
    return User(
        id=user_id,
        username=seed.username,
        email=seed.email,
        name=seed.name,
        role=seed.role,
        password_hash=generate_password_hash(seed.password),
    )
