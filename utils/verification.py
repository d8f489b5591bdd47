"""Issue and check one-time email verification codes."""

from __future__ import annotations

import secrets
from datetime import timedelta

from flask import current_app

from models import db, utcnow
from models.verification_code import VerificationCode


CODE_LENGTH = 6


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"


def issue_code(email: str, purpose: str) -> str:
    """Store a fresh code for ``email`` and ``purpose`` and return it in clear.

    Earlier codes for the same address and purpose stop working.
    """

    VerificationCode.query.filter_by(email=email, purpose=purpose).delete()
    code = generate_code()
    ttl = int(current_app.config.get("VERIFICATION_CODE_TTL_MINUTES", 10))
    record = VerificationCode(
        email=email,
        purpose=purpose,
        expires_at=utcnow() + timedelta(minutes=ttl),
    )
    record.set_code(code)
    db.session.add(record)
    db.session.commit()
    return code


def consume_code(email: str, purpose: str, code: object) -> bool:
    """Return True and burn the code if it is the live code for this address."""

    if not isinstance(code, str) or not code.strip():
        return False

    record = (
        VerificationCode.query.filter_by(email=email, purpose=purpose, consumed_at=None)
        .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
        .first()
    )
    if record is None or record.is_expired():
        return False

    max_attempts = int(current_app.config.get("VERIFICATION_CODE_MAX_ATTEMPTS", 5))
    if record.attempts >= max_attempts:
        return False

    if not record.matches(code.strip()):
        record.attempts += 1
        db.session.commit()
        return False

    record.consumed_at = utcnow()
    db.session.commit()
    return True

