from __future__ import annotations

from ..extensions import db
from discpos.time_utils import to_utc_z


def money(value) -> str | None:
    """Render a Numeric(10, 2) amount as a fixed two-decimal string."""
    if value is None:
        return None
    return f"{value:.2f}"


class Product(db.Model):
    """
    Product master data with the on-hand stock count.

    Stock is a plain integer on the row; sales decrement it in place inside
    the sale transaction.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "name"),
        db.CheckConstraint("purchase_price >= 0", name="ck_products_purchase_price"),
        db.CheckConstraint("selling_price >= 0", name="ck_products_selling_price"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(50), nullable=False)

    purchase_price = db.Column(db.Numeric(10, 2), nullable=False)
    selling_price = db.Column(db.Numeric(10, 2), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "purchase_price": money(self.purchase_price),
            "selling_price": money(self.selling_price),
            "stock": self.stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
