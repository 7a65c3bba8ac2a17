"""
Authorization tests.

Verifies:
- Protected endpoints return 401 without a bearer token
- A bad, tampered or expired token returns 403
- The token carries id, email, role and name and lasts 24 hours
- /health and the auth endpoints stay public
"""

from datetime import timedelta

import pytest
from jose import jwt

from discpos.services import token_service


PROTECTED = [
    ("GET", "/api/users"),
    ("GET", "/api/users/pending"),
    ("PUT", "/api/users/1/approve"),
    ("PUT", "/api/users/1/block"),
    ("GET", "/api/products"),
    ("GET", "/api/products/1"),
    ("POST", "/api/products"),
    ("PUT", "/api/products/1/stock"),
    ("GET", "/api/sales"),
    ("GET", "/api/sales/1"),
    ("POST", "/api/sales"),
    ("DELETE", "/api/sales/1"),
    ("GET", "/api/dashboard/stats"),
]


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize("method,path", PROTECTED)
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json() == {"success": False, "error": "Access token required"}

    @pytest.mark.parametrize("header", ["Bearer", "Bearer ", "Token abc", "abc"])
    def test_malformed_header_is_missing_token(self, client, header):
        resp = client.get("/api/products", headers={"Authorization": header})
        assert resp.status_code == 401

    def test_public_endpoints(self, client):
        assert client.get("/health").status_code == 200
        assert client.post("/api/login", json={}).status_code == 400
        assert client.post("/api/register", json={}).status_code == 400


# =============================================================================
# INVALID TOKENS (403)
# =============================================================================


class TestInvalidToken:

    @pytest.mark.parametrize("method,path", PROTECTED)
    def test_garbage_token(self, client, method, path):
        resp = getattr(client, method.lower())(path, headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 403
        assert resp.get_json() == {"success": False, "error": "Invalid or expired token"}

    def test_expired_token(self, client, superadmin):
        token = token_service.issue_token(superadmin, expires_delta=timedelta(seconds=-1))
        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_token_signed_with_other_secret(self, client, superadmin):
        token = jwt.encode(
            {"id": superadmin.id, "email": superadmin.email, "role": "superadmin", "name": "Alice"},
            "some-other-secret",
            algorithm="HS256",
        )
        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_token_missing_claims(self, app, superadmin):
        token = jwt.encode({"id": superadmin.id}, app.config["JWT_SECRET_KEY"], algorithm="HS256")
        assert token_service.verify_token(token) is None


# =============================================================================
# TOKEN CONTENTS
# =============================================================================


class TestTokenClaims:

    def test_claims_round_trip(self, app, superadmin):
        token = token_service.issue_token(superadmin)
        context = token_service.verify_token(token)

        assert context.id == superadmin.id
        assert context.email == "alice@x.com"
        assert context.role == "superadmin"
        assert context.name == "Alice"
        assert context.is_admin

    def test_lifetime_is_24_hours(self, app, cashier):
        token = token_service.issue_token(cashier)
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_cashier_is_not_admin(self, app, cashier):
        context = token_service.verify_token(token_service.issue_token(cashier))
        assert not context.is_admin

    def test_token_from_login_is_accepted(self, client, superadmin, login):
        token = login("alice@x.com")
        resp = client.get("/api/products", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
