# Overview: Flask API route for dashboard statistics.

from flask import Blueprint, jsonify

from ..services import dashboard_service
from ..decorators import require_auth

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
def dashboard_stats():
    """Today's revenue, product and low-stock counts, active and pending users."""
    return jsonify({"success": True, "stats": dashboard_service.get_stats()})
