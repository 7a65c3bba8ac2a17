# Overview: Service-layer read-only aggregates for the dashboard.

from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..extensions import db
from ..models import Product, Sale, User
from discpos.time_utils import utc_today


def get_stats(*, session: Session | None = None) -> dict:
    """
    Point-in-time dashboard figures.

    Each number is its own query; they are not read from one consistent
    snapshot, which is fine for a dashboard.
    """
    session = session or db.session
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    today_total = session.query(
        func.coalesce(func.sum(Sale.total), 0)
    ).filter(Sale.date == utc_today()).scalar()

    total_products = session.query(func.count(Product.id)).scalar()
    low_stock = session.query(func.count(Product.id)).filter(Product.stock < threshold).scalar()

    active_users = session.query(func.count(User.id)).filter(User.status == "active").scalar()
    pending_users = session.query(func.count(User.id)).filter(User.status == "pending").scalar()

    return {
        "todaySales": float(today_total or 0),
        "totalProducts": int(total_products or 0),
        "lowStock": int(low_stock or 0),
        "totalUsers": int(active_users or 0),
        "pendingUsers": int(pending_users or 0),
    }
