# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/discpos/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import sales_service
from ..services.sales_service import TransactionError, InsufficientStockError
from ..services.auth_service import AuthzError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Record a sale and take its quantities off stock, atomically.

    Body: customer, items[{product_id, quantity, unit_price}]
    The total is computed server-side; a client-sent total is ignored.
    """
    data = request.get_json(silent=True) or {}
    user = g.current_user

    try:
        sale = sales_service.create_sale(
            data.get("customer"),
            data.get("items"),
            user_id=user.id,
            user_name=user.name,
        )
    except ValidationError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except InsufficientStockError as e:
        return jsonify({"success": False, "error": str(e), "details": e.details}), 409
    except TransactionError as e:
        current_app.logger.error("Create sale error: %s", e)
        return jsonify({"success": False, "error": str(e)}), 500
    except Exception as e:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"success": False, "error": str(e)}), 500

    current_app.logger.info("Sale %s recorded by %s", sale.id, user.email)
    return jsonify({"success": True, "sale": sale.to_dict(include_items=True)}), 200


@sales_bp.get("")
@require_auth
def list_sales_route():
    """List sales newest first, each with the recording user's name."""
    return jsonify({"success": True, "sales": sales_service.list_sales()})


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    """Get sale with its items."""
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    return jsonify({"success": True, "sale": sale.to_dict(include_items=True)})


@sales_bp.delete("/<int:sale_id>")
@require_auth
def delete_sale_route(sale_id: int):
    """Delete a sale and its items. Admin only; stock is not restored."""
    try:
        sales_service.delete_sale(sale_id, g.current_user.role)
    except AuthzError as e:
        return jsonify({"success": False, "error": str(e)}), 403
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404

    current_app.logger.info("Sale %s deleted by %s", sale_id, g.current_user.email)
    return jsonify({"success": True})
