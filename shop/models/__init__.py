# shop/models/__init__.py
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class Product(db.Model):
    __tablename__ = "products"
    __table_args__ = (db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False)
    category = db.Column(db.Text, nullable=False, index=True)
    image = db.Column(db.Text, nullable=False, default="")
    stock = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"


from .user import User  # noqa: E402
from .order import Order, OrderItem  # noqa: E402

__all__ = ["db", "Product", "User", "Order", "OrderItem"]
