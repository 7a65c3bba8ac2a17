# Overview: Service-layer operations for bearer tokens; issues and verifies signed JWTs.

"""
Bearer Token Service

Tokens are stateless HS256 JWTs. Nothing is stored server-side: the claims
carry everything the request guard needs (id, email, role, display name),
so protected routes never hit the users table just to authenticate.

SECURITY NOTES:
- Fixed 24-hour lifetime (JWT_EXPIRES_HOURS)
- Signature and expiry are checked on every protected request
- A user blocked after login keeps a valid token until it expires
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from flask import current_app
from jose import JWTError, jwt

from ..models import User


@dataclass(frozen=True)
class TokenContext:
    """Identity attached to an authenticated request."""
    id: int
    email: str
    role: str
    name: str

    @property
    def is_admin(self) -> bool:
        return self.role in ("superadmin", "admin")


def issue_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"])

    now = datetime.now(timezone.utc)
    claims = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "name": user.full_name,
        "iat": now,
        "exp": now + expires_delta,
    }

    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def verify_token(token: str) -> TokenContext | None:
    """
    Verify signature and expiry.

    Returns the TokenContext if the token is valid, None otherwise
    (bad signature, malformed token, expired, or missing claims).
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError:
        return None

    try:
        return TokenContext(
            id=int(payload["id"]),
            email=payload["email"],
            role=payload["role"],
            name=payload["name"],
        )
    except (KeyError, TypeError, ValueError):
        return None
