"""User model definition."""

from werkzeug.security import check_password_hash, generate_password_hash

from . import db, utcnow


ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(db.Model):
    """Represents an account that can keep a calculation history."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(32), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*ROLES, name="user_role"),
        nullable=False,
        default=ROLE_USER,
        server_default=db.text(f"'{ROLE_USER}'"),
    )
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("true"),
    )
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    avatar = db.Column(db.String(512), nullable=True)
    last_login_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = db.relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    records = db.relationship(
        "CalculatorRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def record_login(self) -> None:
        self.last_login_at = utcnow()

    def to_dict(self, include_profile: bool = False) -> dict:
        """Serialize the user for API responses; never includes the password hash."""

        data = {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "isActive": self.is_active,
            "emailVerified": self.email_verified,
            "avatar": self.avatar,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_profile:
            data["profile"] = self.profile.to_dict() if self.profile else None
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.username}>"
