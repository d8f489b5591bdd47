"""Authentication blueprint covering the account credential lifecycle."""

from __future__ import annotations

from datetime import date
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import (
    BadRequest,
    Forbidden,
    InternalServerError,
    NotFound,
    Unauthorized,
)

from models import db
from models.profile import GENDERS, Profile
from models.user import ROLE_USER, User
from models.verification_code import CODE_PURPOSES
from utils.auth import clear_session, current_user, issue_session, require_session, require_user
from utils.mailer import MailDeliveryError, send_verification_code, send_welcome_email
from utils.request_validation import (
    Field,
    ValidationError,
    parse_json_request,
    password_errors,
    username_errors,
    validate_email,
    validate_fields,
)
from utils.verification import consume_code, issue_code

auth_bp = Blueprint("auth", __name__)

GENERIC_CODE_MESSAGE = "If that email is registered, a verification code has been sent."
GENERIC_RESET_MESSAGE = "If that email is registered, you will receive a password reset code."
DUPLICATE_ACCOUNT_MESSAGE = "That email address or username is already taken."

PROFILE_FIELDS = (
    Field("gender", choices=GENDERS, required=False),
    Field("height", minimum=50, maximum=300, required=False, label="Height (cm)"),
    Field("weight", minimum=20, maximum=500, required=False, label="Weight (kg)"),
)


def _find_by_email(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email).first()


def _commit_account_change() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise BadRequest(DUPLICATE_ACCOUNT_MESSAGE)


def _send_code_or_fail(email: str, username: str | None, purpose: str) -> None:
    code = issue_code(email, purpose)
    try:
        send_verification_code(email, username, code, purpose)
    except MailDeliveryError:
        raise InternalServerError("Failed to send the verification code. Please try again later.")


@auth_bp.route("/send-code", methods=["POST"])
def send_code():
    """Email a one-time code for registration, email verification or password reset."""

    payload = parse_json_request(request)
    purpose = payload.get("purpose")
    if purpose not in CODE_PURPOSES:
        raise ValidationError.single(
            "purpose", f"purpose must be one of: {', '.join(CODE_PURPOSES)}."
        )
    email = validate_email(payload.get("email"))
    user = _find_by_email(email)

    if purpose == "register":
        if user is not None:
            raise BadRequest("That email address is already registered.")
        _send_code_or_fail(email, None, purpose)
        return jsonify({"message": "Verification code sent. Please check your inbox."})

    if purpose == "reset-password":
        return _request_password_reset(email, user)

    if user is not None and not user.email_verified:
        _send_code_or_fail(email, user.username, purpose)
    return jsonify({"message": GENERIC_CODE_MESSAGE})


def _request_password_reset(email: str, user: User | None):
    if user is None:
        return jsonify({"message": GENERIC_RESET_MESSAGE})
    if not user.email_verified:
        raise BadRequest("Your email address has not been verified yet.")
    _send_code_or_fail(email, user.username, "reset-password")
    return jsonify({"message": GENERIC_RESET_MESSAGE})


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    payload = parse_json_request(request)
    email = validate_email(payload.get("email"))
    return _request_password_reset(email, _find_by_email(email))


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create an account once the emailed registration code checks out."""

    payload = parse_json_request(request)
    email = validate_email(payload.get("email"))
    errors = username_errors(payload.get("username")) + password_errors(payload.get("password"))
    if not payload.get("code"):
        errors.append({"field": "code", "message": "Verification code is required."})
    if errors:
        raise ValidationError(errors)
    username = payload["username"].strip()

    if _find_by_email(email) is not None:
        raise BadRequest("That email address is already registered.")
    if User.query.filter(func.lower(User.username) == username.lower()).first() is not None:
        raise BadRequest("That username is already taken.")
    if not consume_code(email, "register", str(payload["code"])):
        raise BadRequest("The verification code is invalid or has expired.")

    user = User(email=email, username=username, role=ROLE_USER, email_verified=True)
    user.set_password(payload["password"])
    user.profile = Profile()
    db.session.add(user)
    _commit_account_change()
    current_app.logger.info("Registered user %s (%s)", user.id, user.username)

    try:
        send_welcome_email(user.email, user.username)
    except MailDeliveryError:
        current_app.logger.warning("Welcome email to user %s was not delivered", user.id)

    response = jsonify({"message": "Registration successful.", "user": user.to_dict()})
    response.status_code = HTTPStatus.CREATED
    return issue_session(response, user)


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate by username or email and set the session cookie."""

    payload = parse_json_request(request)
    identifier = payload.get("username") or payload.get("email")
    password = payload.get("password")
    if not isinstance(identifier, str) or not identifier.strip():
        raise BadRequest("Username and password are required.")
    if not isinstance(password, str) or not password:
        raise BadRequest("Username and password are required.")

    identifier = identifier.strip()
    user = User.query.filter(
        or_(User.username == identifier, func.lower(User.email) == identifier.lower())
    ).first()
    if user is None or not user.check_password(password):
        current_app.logger.warning("Failed login attempt for %s", identifier)
        raise Unauthorized("Invalid username or password.")
    if not user.is_active:
        raise Forbidden("This account has been disabled. Please contact an administrator.")

    user.record_login()
    db.session.commit()
    current_app.logger.info("User %s logged in", user.id)

    response = jsonify({"message": "Login successful.", "user": user.to_dict()})
    return issue_session(response, user)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    return clear_session(jsonify({"message": "Logged out."}))


@auth_bp.route("/me", methods=["GET"])
def me():
    require_session()
    user = current_user()
    if user is None:
        raise NotFound("User not found.")
    return jsonify({"user": user.to_dict(include_profile=True)})


def _parse_birth_date(raw: object) -> date | None:
    if raw in (None, ""):
        return None
    try:
        parsed = date.fromisoformat(str(raw)[:10])
    except ValueError:
        raise ValidationError.single("birthDate", "birthDate must be an ISO 8601 date.")
    if parsed > date.today():
        raise ValidationError.single("birthDate", "birthDate cannot be in the future.")
    return parsed


@auth_bp.route("/profile", methods=["PATCH"])
def update_profile():
    """Edit the caller's username, avatar and body measurements."""

    user = require_user()
    payload = parse_json_request(request)
    measurements = validate_fields(PROFILE_FIELDS, payload)

    if "username" in payload:
        errors = username_errors(payload.get("username"))
        if errors:
            raise ValidationError(errors)
        username = payload["username"].strip()
        taken = User.query.filter(
            func.lower(User.username) == username.lower(), User.id != user.id
        ).first()
        if taken is not None:
            raise BadRequest("That username is already taken.")
        user.username = username

    if "avatar" in payload:
        avatar = payload.get("avatar")
        if avatar is not None and (not isinstance(avatar, str) or len(avatar) > 512):
            raise ValidationError.single("avatar", "avatar must be a URL string.")
        user.avatar = avatar or None

    profile = user.profile or Profile(user=user)
    for field, value in measurements.items():
        setattr(profile, field, value)
    if "birthDate" in payload:
        profile.birth_date = _parse_birth_date(payload.get("birthDate"))

    _commit_account_change()
    return jsonify({"message": "Profile updated.", "user": user.to_dict(include_profile=True)})


@auth_bp.route("/change-password", methods=["POST"])
def change_password():
    user = require_user()
    payload = parse_json_request(request)
    current_password = payload.get("currentPassword")
    if not isinstance(current_password, str) or not user.check_password(current_password):
        raise BadRequest("Current password is incorrect.")
    errors = password_errors(payload.get("newPassword"), field="newPassword")
    if errors:
        raise ValidationError(errors)

    user.set_password(payload["newPassword"])
    db.session.commit()
    current_app.logger.info("User %s changed their password", user.id)
    return jsonify({"message": "Password changed."})


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    """Set a new password using an emailed reset code."""

    payload = parse_json_request(request)
    email = validate_email(payload.get("email"))
    errors = password_errors(payload.get("password"))
    if not payload.get("code"):
        errors.insert(0, {"field": "code", "message": "Verification code is required."})
    if errors:
        raise ValidationError(errors)

    user = _find_by_email(email)
    if user is None or not consume_code(email, "reset-password", str(payload["code"])):
        raise BadRequest("The verification code is invalid or has expired.")

    user.set_password(payload["password"])
    db.session.commit()
    current_app.logger.info("User %s reset their password", user.id)
    return jsonify({"message": "Password has been reset.", "user": user.to_dict()})


@auth_bp.route("/verify-email", methods=["GET"])
def verify_email():
    """Confirm an address with the emailed code and sign the user in."""

    email = validate_email(request.args.get("email"))
    code = request.args.get("code")
    if not code:
        raise ValidationError.single("code", "Verification code is required.")

    user = _find_by_email(email)
    if user is None:
        raise BadRequest("The verification code is invalid or has expired.")
    if user.email_verified:
        return jsonify({"message": "Email address already verified.", "alreadyVerified": True})
    if not consume_code(email, "verify-email", code):
        raise BadRequest("The verification code is invalid or has expired.")

    user.email_verified = True
    db.session.commit()
    current_app.logger.info("User %s verified their email address", user.id)

    try:
        send_welcome_email(user.email, user.username)
    except MailDeliveryError:
        current_app.logger.warning("Welcome email to user %s was not delivered", user.id)

    response = jsonify({"message": "Email address verified.", "user": user.to_dict()})
    if not user.is_active:
        return response
    return issue_session(response, user)
