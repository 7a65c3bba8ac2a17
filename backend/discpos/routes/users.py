# Overview: Flask API routes for user listing and the approval workflow.

# backend/discpos/routes/users.py
"""
User management routes.

Listing is open to any signed-in user; the pending queue, approval and
blocking are limited to superadmin/admin (enforced in auth_service).
"""

from flask import Blueprint, jsonify, g, current_app

from ..services import auth_service
from ..services.auth_service import AuthzError
from ..validation import NotFoundError
from ..decorators import require_auth

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
def list_users():
    """List all users, newest first."""
    users = auth_service.list_users()
    return jsonify({"success": True, "users": [u.to_dict() for u in users]})


@users_bp.get("/pending")
@require_auth
def list_pending_users():
    """List accounts waiting for approval. Admin only."""
    try:
        users = auth_service.list_pending(g.current_user.role)
    except AuthzError as e:
        return jsonify({"success": False, "error": str(e)}), 403

    return jsonify({"success": True, "users": [u.to_dict() for u in users]})


@users_bp.put("/<int:user_id>/approve")
@require_auth
def approve_user(user_id: int):
    """
    Approve a pending account. Admin only.

    Approving an already-active account is a no-op and still returns 200.
    """
    try:
        user = auth_service.approve_user(user_id, g.current_user.role)
    except AuthzError as e:
        return jsonify({"success": False, "error": str(e)}), 403
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404

    current_app.logger.info("User approved: %s by %s", user.email, g.current_user.email)

    return jsonify({
        "success": True,
        "message": "User approved successfully",
        "user": user.to_dict(),
    })


@users_bp.put("/<int:user_id>/block")
@require_auth
def block_user(user_id: int):
    """Block an account. Admin only; cannot target yourself or the superadmin."""
    try:
        user = auth_service.block_user(user_id, g.current_user.id, g.current_user.role)
    except AuthzError as e:
        return jsonify({"success": False, "error": str(e)}), 403
    except NotFoundError as e:
        return jsonify({"success": False, "error": str(e)}), 404

    current_app.logger.info("User blocked: %s by %s", user.email, g.current_user.email)

    return jsonify({
        "success": True,
        "message": "User blocked successfully",
        "user": user.to_dict(),
    })
