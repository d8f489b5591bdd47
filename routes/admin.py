"""Administrator endpoints for managing user accounts."""

from __future__ import annotations

import math
from datetime import datetime, time

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import db, utcnow
from models.record import CALCULATOR_KINDS
from models.user import ROLE_ADMIN, ROLES, User
from storage import AbstractRecordStore
from utils.auth import require_admin
from utils.request_validation import (
    MAX_PAGE,
    ValidationError,
    parse_bool,
    parse_int_arg,
    parse_json_request,
    password_errors,
)

admin_bp = Blueprint("admin", __name__)

ADMIN_MAX_PAGE_SIZE = 100


def _record_store() -> AbstractRecordStore:
    return current_app.extensions["record_store"]


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def _empty_counts() -> dict[str, int]:
    return dict.fromkeys(CALCULATOR_KINDS, 0)


@admin_bp.route("/users", methods=["GET"])
def list_users():
    """Return a page of users, newest first, optionally filtered by role or status."""

    require_admin()
    page = parse_int_arg(request.args, "page", 1, maximum=MAX_PAGE, clamp=False)
    limit = parse_int_arg(
        request.args,
        "limit",
        current_app.config.get("ADMIN_PAGE_SIZE", 20),
        maximum=ADMIN_MAX_PAGE_SIZE,
    )

    query = User.query
    role = request.args.get("role")
    if role:
        if role not in ROLES:
            raise BadRequest(f"role must be one of: {', '.join(ROLES)}.")
        query = query.filter(User.role == role)

    if request.args.get("isActive") not in (None, ""):
        is_active = parse_bool(request.args.get("isActive"))
        if is_active is None:
            raise BadRequest("isActive must be true or false.")
        query = query.filter(User.is_active.is_(is_active))

    pagination = query.order_by(User.created_at.desc(), User.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    users = pagination.items
    counts = _record_store().count_by_kind(user.id for user in users)

    payload = []
    for user in users:
        data = user.to_dict()
        data["recordCounts"] = counts.get(user.id, _empty_counts())
        payload.append(data)

    return jsonify(
        {
            "users": payload,
            "pagination": {
                "total": pagination.total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(pagination.total / limit),
            },
        }
    )


@admin_bp.route("/users/<int:user_id>", methods=["GET"])
def get_user(user_id: int):
    require_admin()
    user = _get_user_or_404(user_id)
    data = user.to_dict(include_profile=True)
    data["recordCounts"] = _record_store().count_by_kind([user.id]).get(
        user.id, _empty_counts()
    )
    return jsonify({"user": data})


@admin_bp.route("/users/<int:user_id>", methods=["PATCH"])
def update_user(user_id: int):
    """Change a user's role and/or active flag; admins cannot demote or disable themselves."""

    session = require_admin()
    payload = parse_json_request(request)

    role = payload.get("role")
    is_active = payload.get("isActive")
    if role is None and is_active is None:
        raise BadRequest("Provide role and/or isActive.")

    errors = []
    if role is not None and role not in ROLES:
        errors.append({"field": "role", "message": f"role must be one of: {', '.join(ROLES)}."})
    if is_active is not None and not isinstance(is_active, bool):
        errors.append({"field": "isActive", "message": "isActive must be a boolean."})
    if errors:
        raise ValidationError(errors)

    if user_id == session.user_id:
        if role is not None and role != session.role:
            raise Forbidden("You cannot change your own role.")
        if is_active is False:
            raise Forbidden("You cannot deactivate your own account.")

    user = _get_user_or_404(user_id)
    if role is not None:
        user.role = role
    if is_active is not None:
        user.is_active = is_active
    db.session.commit()

    current_app.logger.info(
        "Admin %s updated user %s (role=%s, active=%s)",
        session.user_id,
        user.id,
        user.role,
        user.is_active,
    )
    return jsonify({"message": "User updated.", "user": user.to_dict()})


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
def delete_user(user_id: int):
    """Delete a user together with their profile and calculator records."""

    session = require_admin()
    if user_id == session.user_id:
        raise Forbidden("You cannot delete your own account.")

    user = _get_user_or_404(user_id)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Admin %s deleted user %s", session.user_id, user_id)
    return jsonify({"message": "User deleted."})


@admin_bp.route("/users/<int:user_id>/reset-password", methods=["POST"])
def reset_user_password(user_id: int):
    session = require_admin()
    payload = parse_json_request(request)
    if user_id == session.user_id:
        raise Forbidden("Use the change-password flow to update your own password.")

    errors = password_errors(payload.get("newPassword"), field="newPassword")
    if errors:
        raise ValidationError(errors)

    user = _get_user_or_404(user_id)
    user.set_password(payload["newPassword"])
    db.session.commit()
    current_app.logger.info("Admin %s reset the password of user %s", session.user_id, user.id)
    return jsonify(
        {"success": True, "message": f'Password for "{user.username}" has been reset.'}
    )


@admin_bp.route("/stats", methods=["GET"])
def stats():
    """Return account and record totals plus the most recent sign-ups."""

    require_admin()
    total_users = User.query.count()
    active_users = User.query.filter(User.is_active.is_(True)).count()
    start_of_day = datetime.combine(utcnow().date(), time.min)
    records_by_kind = _record_store().count_records()

    recent_users = User.query.order_by(User.created_at.desc(), User.id.desc()).limit(5).all()

    return jsonify(
        {
            "stats": {
                "totalUsers": total_users,
                "activeUsers": active_users,
                "inactiveUsers": total_users - active_users,
                "adminUsers": User.query.filter(User.role == ROLE_ADMIN).count(),
                "todayUsers": User.query.filter(User.created_at >= start_of_day).count(),
                "totalRecords": sum(records_by_kind.values()),
                "recordsByKind": records_by_kind,
            },
            "recentUsers": [
                {
                    "id": user.id,
                    "username": user.username,
                    "email": user.email,
                    "role": user.role,
                    "createdAt": user.created_at.isoformat() if user.created_at else None,
                }
                for user in recent_users
            ],
        }
    )
