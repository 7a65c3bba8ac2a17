# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import token_service


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the TokenContext decoded from the token
    (id, email, role, name). No database lookup is made.

    Returns 401 if the Authorization header is missing or not a Bearer
    token, 403 if the token is invalid or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        token = None
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1].strip()

        if not token:
            return jsonify({"success": False, "error": "Access token required"}), 401

        context = token_service.verify_token(token)

        if not context:
            return jsonify({"success": False, "error": "Invalid or expired token"}), 403

        g.current_user = context
        return f(*args, **kwargs)

    return decorated_function
