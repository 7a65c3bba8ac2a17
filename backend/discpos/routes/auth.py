# Overview: Flask API routes for registration and login; parses input and returns JSON responses.

# backend/discpos/routes/auth.py
"""
Authentication API routes

- Open self-registration; the first account becomes the superadmin,
  later ones wait for approval
- Login returns a 24-hour bearer token
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import auth_service
from ..services.auth_service import AuthError
from ..validation import ValidationError, ConflictError, require_fields


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/register")
def register_route():
    """
    Register a new account.

    Returns the public user fields plus requiresApproval, which is false only
    for the bootstrap superadmin.
    """
    data = request.get_json(silent=True) or {}

    try:
        fields = require_fields(data, "full_name", "email", "password")
        user, requires_approval = auth_service.register(
            fields["full_name"],
            fields["email"],
            data["password"],
        )
    except (ValidationError, ConflictError) as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"success": False, "error": "Registration failed"}), 500

    current_app.logger.info("User registered: %s (status=%s)", user.email, user.status)

    message = (
        "Registration successful! Please wait for admin approval."
        if requires_approval
        else "Super Admin created successfully!"
    )
    return jsonify({
        "success": True,
        "message": message,
        "user": user.to_dict(),
        "requiresApproval": requires_approval,
    }), 200


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and issue a bearer token.

    Unknown email and wrong password give the same 400 response; pending
    and blocked accounts get their own message once the password matched.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    try:
        token, user = auth_service.authenticate(email, password)
    except AuthError as e:
        current_app.logger.info("Login refused for %s: %s", email, e)
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"success": False, "error": "Login failed"}), 500

    current_app.logger.info("Login successful: %s", user.email)

    return jsonify({
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": user.to_dict(),
    }), 200
