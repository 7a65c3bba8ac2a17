"""
Sales Service - atomic multi-line sale recording

WHY: A sale touches three tables (sales, sale_items, products). A crash or a
bad line halfway through must never leave stock decremented without a
recorded sale, or a sale without its lines. Everything between the sale
insert and the commit runs in one store transaction and is rolled back as a
whole on any failure. Nothing is retried.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..extensions import db
from ..models import Sale, SaleItem, Product, User
from ..validation import MAX_MONEY, NotFoundError, ValidationError, parse_int, parse_money
from . import realtime_service
from .auth_service import ensure_role
from discpos.time_utils import utc_today, utcnow


class TransactionError(Exception):
    """Sale could not be recorded; the whole transaction was rolled back."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientStockError(TransactionError):
    """A line asked for more units than are on hand."""


def normalize_items(items) -> list[dict]:
    """
    Validate raw line items from the request body.

    Returns a list of {product_id, quantity, unit_price} with parsed types,
    in the order given.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    lines = []
    for i, raw in enumerate(items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{i}] must be an object")

        for field in ("product_id", "quantity", "unit_price"):
            if raw.get(field) in (None, ""):
                raise ValidationError(f"items[{i}].{field} is required")

        quantity = parse_int(raw["quantity"], f"items[{i}].quantity")
        if quantity <= 0:
            raise ValidationError(f"items[{i}].quantity must be > 0")

        lines.append({
            "product_id": parse_int(raw["product_id"], f"items[{i}].product_id"),
            "quantity": quantity,
            "unit_price": parse_money(raw["unit_price"], f"items[{i}].unit_price"),
        })
    return lines


def compute_total(lines: list[dict]) -> Decimal:
    return sum((line["quantity"] * line["unit_price"] for line in lines), Decimal("0.00"))


def _decrement_stock(session: Session, product: Product, quantity: int) -> None:
    """
    Take quantity units off the product in a single UPDATE.

    Unless ALLOW_NEGATIVE_STOCK is set, the UPDATE only matches while enough
    stock is on hand, so two concurrent sales can't both take the last unit.
    """
    query = session.query(Product).filter(Product.id == product.id)
    if not current_app.config.get("ALLOW_NEGATIVE_STOCK", False):
        query = query.filter(Product.stock >= quantity)

    updated = query.update(
        {Product.stock: Product.stock - quantity, Product.updated_at: utcnow()},
        synchronize_session="fetch",
    )
    if updated == 0:
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}",
            details={
                "product_id": product.id,
                "requested_quantity": quantity,
                "on_hand": product.stock,
            },
        )


def _record_sale(session: Session, customer: str, lines: list[dict], user_id: int | None) -> Sale:
    sale = Sale(
        date=utc_today(),
        customer=customer,
        total=compute_total(lines),
        user_id=user_id,
    )
    session.add(sale)
    session.flush()

    for line in lines:
        product = session.get(Product, line["product_id"])
        if not product:
            raise TransactionError(f"Product {line['product_id']} not found")

        session.add(SaleItem(
            sale_id=sale.id,
            product_id=product.id,
            quantity=line["quantity"],
            unit_price=line["unit_price"],
            total_price=line["quantity"] * line["unit_price"],
        ))
        session.flush()

        _decrement_stock(session, product, line["quantity"])

    return sale


def create_sale(
    customer: str,
    items,
    user_id: int | None,
    user_name: str | None = None,
    *,
    session: Session | None = None,
) -> Sale:
    """
    Record a sale and take its quantities off stock, all or nothing.

    The total is always computed here from the lines; any total the client
    sent is ignored.

    Raises:
        ValidationError: bad customer or line items (nothing was written)
        InsufficientStockError: a product is short; rolled back
        TransactionError: any other failure; rolled back
    """
    session = session or db.session

    if not isinstance(customer, str) or not customer.strip():
        raise ValidationError("customer is required")
    customer = customer.strip()
    lines = normalize_items(items)
    if compute_total(lines) > MAX_MONEY:
        raise ValidationError(f"sale total cannot exceed {MAX_MONEY}")

    try:
        sale = _record_sale(session, customer, lines, user_id)
        session.commit()
    except TransactionError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        raise TransactionError(str(getattr(e, "orig", None) or e)) from e
    except Exception as e:
        session.rollback()
        raise TransactionError(str(e)) from e

    sale_dict = sale.to_dict()
    item_dicts = [item.to_dict() for item in sale.items]
    realtime_service.publish_sale_created(sale_dict, item_dicts, user_name)
    return sale


def list_sales(*, session: Session | None = None) -> list[dict]:
    """All sales, newest first, each with the recording user's name."""
    session = session or db.session

    rows = (
        session.query(Sale, User.full_name)
        .outerjoin(User, Sale.user_id == User.id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )

    result = []
    for sale, user_name in rows:
        data = sale.to_dict()
        data["user_name"] = user_name
        result.append(data)
    return result


def get_sale(sale_id: int, *, session: Session | None = None) -> Sale:
    session = session or db.session
    sale = session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def delete_sale(sale_id: int, actor_role: str, *, session: Session | None = None) -> None:
    """
    Delete a sale and, by cascade, its items.

    Stock is not put back; this removes a record, it is not a return.
    """
    ensure_role(actor_role)
    session = session or db.session

    sale = get_sale(sale_id, session=session)
    session.delete(sale)
    session.commit()
