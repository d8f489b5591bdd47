"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from flask import Request
from werkzeug.exceptions import BadRequest


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100
MAX_PAGE = 100_000


class ValidationError(BadRequest):
    """A 400 error carrying one entry per offending field."""

    def __init__(self, details: Sequence[dict[str, str]]):
        self.details = list(details)
        message = self.details[0]["message"] if self.details else "Invalid input."
        super().__init__(message)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


@dataclass(frozen=True)
class Field:
    """Declarative rule for one payload field."""

    name: str
    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    choices: tuple[str, ...] | None = None
    required: bool = True
    label: str | None = None

    @property
    def display(self) -> str:
        return self.label or self.name


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise ValidationError(
                [{"field": key, "message": f"{key} is required."} for key in sorted(missing)]
            )

    return data


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None


def _coerce_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _check_field(spec: Field, value: Any) -> tuple[Any, str | None]:
    if spec.choices is not None:
        if value not in spec.choices:
            return None, f"{spec.display} must be one of: {', '.join(spec.choices)}."
        return value, None

    number = _coerce_number(value)
    if number is None:
        return None, f"{spec.display} must be a number."
    if spec.integer:
        if not number.is_integer():
            return None, f"{spec.display} must be a whole number."
        number = int(number)
    if spec.minimum is not None and number < spec.minimum:
        return None, f"{spec.display} must be at least {spec.minimum:g}."
    if spec.maximum is not None and number > spec.maximum:
        return None, f"{spec.display} must be at most {spec.maximum:g}."
    return number, None


def validate_fields(fields: Sequence[Field], data: dict) -> dict:
    """Validate and coerce ``data`` against ``fields``.

    Returns a new dictionary holding only the declared fields. Every failing
    field is reported; the first one becomes the error message.
    """

    cleaned: dict[str, Any] = {}
    errors: list[dict[str, str]] = []
    for spec in fields:
        value = data.get(spec.name)
        if value is None or (isinstance(value, str) and not value.strip()):
            if spec.required:
                errors.append({"field": spec.name, "message": f"{spec.display} is required."})
            continue
        coerced, message = _check_field(spec, value)
        if message:
            errors.append({"field": spec.name, "message": message})
        else:
            cleaned[spec.name] = coerced

    if errors:
        raise ValidationError(errors)
    return cleaned


def normalize_email(raw_email: object) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""

    return raw_email.strip().lower() if isinstance(raw_email, str) else ""


def validate_email(raw_email: object) -> str:
    email = normalize_email(raw_email)
    if not email:
        raise ValidationError.single("email", "Email is required.")
    if not EMAIL_PATTERN.match(email) or len(email) > 255:
        raise ValidationError.single("email", "Please enter a valid email address.")
    return email


def username_errors(raw_username: object) -> list[dict[str, str]]:
    username = raw_username.strip() if isinstance(raw_username, str) else ""
    if len(username) < 3:
        return [{"field": "username", "message": "Username must be at least 3 characters."}]
    if len(username) > 20:
        return [{"field": "username", "message": "Username must be at most 20 characters."}]
    if not USERNAME_PATTERN.match(username):
        return [
            {
                "field": "username",
                "message": "Username may only contain letters, digits and underscores.",
            }
        ]
    return []


def password_errors(raw_password: object, field: str = "password") -> list[dict[str, str]]:
    password = raw_password if isinstance(raw_password, str) else ""
    if len(password) < PASSWORD_MIN_LENGTH:
        return [
            {
                "field": field,
                "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters.",
            }
        ]
    if len(password) > PASSWORD_MAX_LENGTH:
        return [
            {
                "field": field,
                "message": f"Password must be at most {PASSWORD_MAX_LENGTH} characters.",
            }
        ]
    return []


def parse_int_arg(
    args,
    name: str,
    default: int,
    minimum: int = 1,
    maximum: int | None = None,
    *,
    clamp: bool = True,
) -> int:
    """Read an integer query parameter.

    Values above ``maximum`` are clamped to it, or rejected when ``clamp`` is false.
    """

    raw = args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(f"{name} must be an integer.")
    if value < minimum:
        raise BadRequest(f"{name} must be at least {minimum}.")
    if maximum is not None and value > maximum:
        if not clamp:
            raise BadRequest(f"{name} must be at most {maximum}.")
        value = maximum
    return value
