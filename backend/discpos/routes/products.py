# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/discpos/routes/products.py
"""
Product management routes.

All routes require authentication. Creating a product and setting its
stock are broadcast to other connected clients as product_updated.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..services import products_service
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products():
    """List all products ordered by name."""
    products = products_service.list_products()
    return jsonify({"success": True, "products": [p.to_dict() for p in products]})


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    return jsonify({"success": True, "product": product.to_dict()})


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create a new product.

    Body: name, category, purchase_price, selling_price, stock (optional, default 0)
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = products_service.create_product(payload, g.current_user.name)
    except ValidationError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    current_app.logger.info("Product added: %s", product.name)
    return jsonify({"success": True, "product": product.to_dict()}), 200


@products_bp.put("/<int:product_id>/stock")
@require_auth
def update_stock_route(product_id: int):
    """
    Set the stock count of a product (absolute value, not a delta).

    Body: stock
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = products_service.adjust_stock(product_id, payload.get("stock"), g.current_user.name)
    except ValidationError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    current_app.logger.info("Stock set: %s -> %s", product.name, product.stock)
    return jsonify({"success": True, "product": product.to_dict()}), 200
