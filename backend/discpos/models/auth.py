from __future__ import annotations

from ..extensions import db
from discpos.time_utils import to_utc_z

ROLES = ("superadmin", "admin", "manager", "cashier")
STATUSES = ("active", "pending", "blocked")


class User(db.Model):
    """
    Staff accounts for authentication and attribution.

    The very first registered account bootstraps the shop as an active
    superadmin; everyone after that starts as a pending cashier until an
    admin approves them.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint(f"role IN {ROLES}", name="ck_users_role"),
        db.CheckConstraint(f"status IN {STATUSES}", name="ck_users_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column("password", db.String(255), nullable=False)

    role = db.Column(db.String(20), nullable=False, default="cashier")
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    bio = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_admin(self) -> bool:
        return self.role in ("superadmin", "admin")

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role,
            "status": self.status,
            "bio": self.bio,
            "created_at": to_utc_z(self.created_at),
            "last_login": to_utc_z(self.last_login) if self.last_login else None,
        }
