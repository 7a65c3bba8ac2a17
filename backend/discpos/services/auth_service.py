# Overview: Service-layer operations for accounts; encapsulates business logic and database work.

"""
Account Service: registration, login and the admin approval workflow.

WHY: Every sale must be attributable to a person, and nobody gets into the
till without an admin saying so. The first account ever registered
bootstraps the shop as an active superadmin; everyone after that is a
pending cashier.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS)
- Unknown email and wrong password produce the same error (no enumeration)
- Account status is checked only after the password matched
"""

from __future__ import annotations

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..extensions import db
from ..models import User
from ..validation import ConflictError, NotFoundError, ValidationError
from discpos.time_utils import utcnow
from .token_service import issue_token

ADMIN_ROLES = ("superadmin", "admin")

INVALID_CREDENTIALS = "Invalid email or password"
PENDING_APPROVAL = "Account is pending approval. Please contact administrator."
ACCOUNT_BLOCKED = "Account is blocked. Please contact administrator."


class AuthError(Exception):
    """Bad credentials or an account that may not log in."""


class AuthzError(Exception):
    """Authenticated, but the caller's role is not allowed to do this."""


def ensure_role(actor_role: str | None, allowed=ADMIN_ROLES) -> None:
    if actor_role not in allowed:
        raise AuthzError("Access denied. Admin only.")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Cost factor comes from config so tests can run with the minimum (4).
    """
    rounds = current_app.config.get("BCRYPT_ROUNDS", 10)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _email_taken(session: Session, email: str) -> bool:
    return session.query(User.id).filter(User.email == email).first() is not None


def register(full_name: str, email: str, password: str, *, session: Session | None = None) -> tuple[User, bool]:
    """
    Create a new account.

    Returns (user, requires_approval). requires_approval is False only for
    the bootstrap superadmin.

    Raises:
        ValidationError: a field is empty
        ConflictError: the email is already registered (exact match)
    """
    session = session or db.session

    full_name = full_name.strip() if isinstance(full_name, str) else ""
    email = email.strip() if isinstance(email, str) else ""
    if not full_name or not email or not isinstance(password, str) or not password:
        raise ValidationError("All fields are required")

    if _email_taken(session, email):
        raise ConflictError("User already exists")

    password_hash = hash_password(password)

    is_first_user = session.query(User.id).first() is None
    user = User(
        full_name=full_name,
        email=email,
        password_hash=password_hash,
        role="superadmin" if is_first_user else "cashier",
        status="active" if is_first_user else "pending",
    )

    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # a concurrent registration won the unique index on email
        session.rollback()
        raise ConflictError("User already exists") from e
    return user, not is_first_user


def authenticate(email: str, password: str, *, session: Session | None = None) -> tuple[str, User]:
    """
    Check credentials and issue a bearer token.

    Returns (token, user). Updates last_login on success.

    Raises:
        AuthError: unknown email, wrong password, or account not active
    """
    session = session or db.session

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise AuthError(INVALID_CREDENTIALS)

    user = session.query(User).filter(User.email == email.strip()).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthError(INVALID_CREDENTIALS)

    if user.status == "blocked":
        raise AuthError(ACCOUNT_BLOCKED)
    if user.status != "active":
        raise AuthError(PENDING_APPROVAL)

    user.last_login = utcnow()
    session.commit()

    return issue_token(user), user


def list_users(*, session: Session | None = None) -> list[User]:
    session = session or db.session
    return session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def list_pending(actor_role: str, *, session: Session | None = None) -> list[User]:
    ensure_role(actor_role)
    session = session or db.session
    return (
        session.query(User)
        .filter(User.status == "pending")
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def _get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def approve_user(user_id: int, actor_role: str, *, session: Session | None = None) -> User:
    """
    Activate an account.

    Idempotent: approving an account that is already active changes nothing
    and still succeeds. Approving a blocked account re-activates it.
    """
    ensure_role(actor_role)
    session = session or db.session

    user = _get_user(session, user_id)
    if user.status != "active":
        user.status = "active"
        session.commit()
    return user


def block_user(user_id: int, actor_id: int | None, actor_role: str, *, session: Session | None = None) -> User:
    """Block an account so it can no longer log in."""
    ensure_role(actor_role)
    session = session or db.session

    user = _get_user(session, user_id)
    if user.id == actor_id:
        raise AuthzError("You cannot block your own account")
    if user.role == "superadmin":
        raise AuthzError("The superadmin account cannot be blocked")

    if user.status != "blocked":
        user.status = "blocked"
        session.commit()
    return user
