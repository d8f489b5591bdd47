"""Outbound account email."""

from __future__ import annotations

import smtplib

from flask import current_app
from flask_mail import Mail, Message


mail = Mail()

CODE_SUBJECTS = {
    "register": "Your Health Calculator verification code",
    "verify-email": "Confirm your Health Calculator email address",
    "reset-password": "Your Health Calculator password reset code",
}

CODE_INTROS = {
    "register": "Thanks for signing up. Use this code to finish creating your account:",
    "verify-email": "Use this code to confirm your email address:",
    "reset-password": "We received a request to reset your password. Use this code to continue:",
}


class MailDeliveryError(RuntimeError):
    """Raised when the mail transport rejects or cannot deliver a message."""


def _send(message: Message) -> None:
    try:
        mail.send(message)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.exception("Failed to deliver mail to %s", message.recipients)
        raise MailDeliveryError(str(exc)) from exc


def send_verification_code(email: str, username: str | None, code: str, purpose: str) -> None:
    minutes = current_app.config.get("VERIFICATION_CODE_TTL_MINUTES", 10)
    body = (
        f"Hello {username or 'there'},\n\n"
        f"{CODE_INTROS[purpose]}\n\n"
        f"    {code}\n\n"
        f"The code expires in {minutes} minutes. If you did not request it, "
        "you can ignore this email.\n"
    )
    _send(Message(subject=CODE_SUBJECTS[purpose], recipients=[email], body=body))


def send_welcome_email(email: str, username: str) -> None:
    body = (
        f"Hello {username},\n\n"
        "Your Health Calculator account is ready. Calculations you run while "
        "signed in are saved to your history.\n"
    )
    _send(Message(subject="Welcome to Health Calculator", recipients=[email], body=body))
