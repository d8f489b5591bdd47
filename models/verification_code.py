"""Verification code model definition."""

from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db, utcnow


CODE_PURPOSES = ("register", "reset-password", "verify-email")


class VerificationCode(db.Model):
    """A hashed one-time code mailed to an address for a single purpose."""

    __tablename__ = "verification_codes"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    purpose = db.Column(
        db.Enum(*CODE_PURPOSES, name="verification_purpose"), nullable=False
    )
    code_hash = db.Column(db.String(255), nullable=False)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    expires_at = db.Column(db.DateTime, nullable=False)
    consumed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_code(self, code: str) -> None:
        self.code_hash = generate_password_hash(code)

    def matches(self, code: str) -> bool:
        return check_password_hash(self.code_hash, code)

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return self.expires_at <= now

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<VerificationCode {self.purpose} {self.email}>"
