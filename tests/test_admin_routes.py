"""Tests for the administrator user management endpoints."""

from __future__ import annotations

import pytest
from flask import Flask
from flask.testing import FlaskClient

from conftest import login
from models import db
from models.record import CalculatorRecord
from models.user import ROLE_ADMIN, User


@pytest.fixture()
def admin_id(client: FlaskClient, make_user) -> int:
    user_id = make_user("root", role=ROLE_ADMIN)
    login(client, "root")
    return user_id


def test_admin_routes_require_session(client: FlaskClient):
    assert client.get("/admin/users").status_code == 401


def test_admin_routes_reject_regular_users(client: FlaskClient, make_user):
    make_user("plain")
    login(client, "plain")

    response = client.get("/admin/stats")

    assert response.status_code == 403
    assert response.get_json()["error"] == "Administrator privileges required."


def test_demoted_admin_is_rejected(client: FlaskClient, app: Flask, admin_id):
    with app.app_context():
        db.session.get(User, admin_id).role = "USER"
        db.session.commit()

    assert client.get("/admin/users").status_code == 403


def test_list_users_paginates(client: FlaskClient, make_user, admin_id):
    for index in range(25):
        make_user(f"member{index:02d}")

    first = client.get("/admin/users").get_json()
    second = client.get("/admin/users?page=2").get_json()

    assert len(first["users"]) == 20
    assert len(second["users"]) == min(20, 26 - 20)
    assert second["pagination"] == {"total": 26, "page": 2, "limit": 20, "totalPages": 2}
    assert first["users"][0]["username"] == "member24"
    assert "password_hash" not in first["users"][0]
    assert first["users"][0]["recordCounts"]["bmi"] == 0


def test_list_users_filters(client: FlaskClient, make_user, admin_id):
    make_user("idle", active=False)
    make_user("busy")

    inactive = client.get("/admin/users?isActive=false").get_json()["users"]
    admins = client.get("/admin/users?role=ADMIN").get_json()["users"]

    assert [user["username"] for user in inactive] == ["idle"]
    assert [user["username"] for user in admins] == ["root"]
    assert client.get("/admin/users?role=OWNER").status_code == 400


def test_get_user_includes_record_counts(client: FlaskClient, app: Flask, make_user, admin_id):
    member_id = make_user("counted")
    with app.app_context():
        db.session.add(
            CalculatorRecord(
                user_id=member_id, kind="sli", inputs={}, result={"sli": 1.0}, advice=None
            )
        )
        db.session.commit()

    response = client.get(f"/admin/users/{member_id}")

    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["recordCounts"]["sli"] == 1
    assert user["profile"] is not None
    assert client.get("/admin/users/9999").status_code == 404


def test_update_user_role_and_status(client: FlaskClient, make_user, admin_id):
    member_id = make_user("promoted")

    response = client.patch(
        f"/admin/users/{member_id}", json={"role": "ADMIN", "isActive": False}
    )

    assert response.status_code == 200
    assert response.get_json()["user"]["role"] == "ADMIN"
    assert response.get_json()["user"]["isActive"] is False


@pytest.mark.parametrize(
    "payload",
    [{"role": "OWNER"}, {"isActive": "no"}, {"other": 1}],
)
def test_update_user_validation(client: FlaskClient, make_user, admin_id, payload):
    member_id = make_user("target")

    response = client.patch(f"/admin/users/{member_id}", json=payload)

    assert response.status_code == 400


@pytest.mark.parametrize(
    "payload",
    [{"role": "USER"}, {"isActive": False}],
)
def test_admin_cannot_demote_or_disable_self(client: FlaskClient, admin_id, payload):
    response = client.patch(f"/admin/users/{admin_id}", json=payload)

    assert response.status_code == 403


def test_admin_cannot_delete_or_reset_self(client: FlaskClient, admin_id):
    delete = client.delete(f"/admin/users/{admin_id}")
    reset = client.post(
        f"/admin/users/{admin_id}/reset-password", json={"newPassword": "another123"}
    )

    assert delete.status_code == 403
    assert reset.status_code == 403


def test_delete_user_cascades_records(client: FlaskClient, app: Flask, make_user, admin_id):
    member_id = make_user("leaving")
    with app.app_context():
        db.session.add(
            CalculatorRecord(
                user_id=member_id, kind="bmi", inputs={}, result={"bmi": 20.0}, advice=None
            )
        )
        db.session.commit()

    response = client.delete(f"/admin/users/{member_id}")

    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(User, member_id) is None
        assert CalculatorRecord.query.filter_by(user_id=member_id).count() == 0
    assert client.delete(f"/admin/users/{member_id}").status_code == 404


def test_reset_user_password(client: FlaskClient, make_user, admin_id):
    member_id = make_user("forgetful")

    short = client.post(f"/admin/users/{member_id}/reset-password", json={"newPassword": "123"})
    response = client.post(
        f"/admin/users/{member_id}/reset-password", json={"newPassword": "brand-new"}
    )

    assert short.status_code == 400
    assert short.get_json()["details"][0]["field"] == "newPassword"
    assert response.status_code == 200
    assert response.get_json()["success"] is True

    client.post("/auth/logout")
    login(client, "forgetful", "brand-new")


def test_stats(client: FlaskClient, app: Flask, make_user, admin_id):
    member_id = make_user("stat", active=False)
    with app.app_context():
        db.session.add(
            CalculatorRecord(
                user_id=member_id, kind="calorie", inputs={}, result={}, advice=None
            )
        )
        db.session.commit()

    response = client.get("/admin/stats")

    assert response.status_code == 200
    payload = response.get_json()
    stats = payload["stats"]
    assert stats["totalUsers"] == 2
    assert stats["activeUsers"] == 1
    assert stats["inactiveUsers"] == 1
    assert stats["adminUsers"] == 1
    assert stats["todayUsers"] == 2
    assert stats["totalRecords"] == 1
    assert stats["recordsByKind"]["calorie"] == 1
    assert [user["username"] for user in payload["recentUsers"]] == ["stat", "root"]


def test_list_users_rejects_oversized_page(client: FlaskClient, admin_id):
    response = client.get("/admin/users?page=100000000000000000000")

    assert response.status_code == 400
    assert response.get_json()["error"] == "page must be at most 100000."
