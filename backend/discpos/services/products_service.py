# backend/discpos/services/products_service.py
"""
Products Service

Product catalogue and on-hand stock. Every mutation is mirrored to the
realtime channel as a product_updated event.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from ..extensions import db
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_stock,
    parse_int,
    validate_payload,
)
from . import realtime_service
from discpos.time_utils import utcnow

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "purchase_price", "selling_price", "stock"},
    required_on_create={"name", "category", "purchase_price", "selling_price"},
)


def list_products(*, session: Session | None = None) -> list[Product]:
    session = session or db.session
    return session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()


def get_product(product_id: int, *, session: Session | None = None) -> Product:
    session = session or db.session
    product = session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(payload: dict, actor_name: str | None = None, *, session: Session | None = None) -> Product:
    """
    Create a product from a raw JSON payload.

    name, category and both prices are required; stock defaults to 0.
    Prices of 0 are accepted, only missing/blank/negative ones are rejected.

    Raises:
        ValidationError: missing or malformed fields
    """
    session = session or db.session

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    patch.setdefault("stock", 0)
    enforce_rules_stock(patch["stock"])

    product = Product(**patch)
    session.add(product)
    session.commit()

    realtime_service.publish_product_updated("created", product.to_dict(), actor_name)
    return product


def adjust_stock(product_id: int, new_stock, actor_name: str | None = None, *, session: Session | None = None) -> Product:
    """
    Set (not add to) the stock count of a product.

    Raises:
        ValidationError: stock is not an integer >= 0
        NotFoundError: product does not exist
    """
    session = session or db.session

    if new_stock is None:
        raise ValidationError("stock is required")
    stock = parse_int(new_stock, "stock")
    enforce_rules_stock(stock)

    product = get_product(product_id, session=session)
    product.stock = stock
    product.updated_at = utcnow()
    session.commit()

    realtime_service.publish_product_updated("stock_updated", product.to_dict(), actor_name)
    return product
