"""Tests for the calculator endpoints and history persistence."""

from __future__ import annotations

from flask import Flask
from flask.testing import FlaskClient

from conftest import login
from models import db
from models.record import CalculatorRecord
from models.user import User

BMI_PAYLOAD = {"gender": "male", "height": 175, "weight": 70}


def test_anonymous_calculation_is_not_saved(client: FlaskClient, app: Flask):
    response = client.post("/calculate/bmi", json=BMI_PAYLOAD)

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["recordId"] is None
    assert payload["savedToHistory"] is False
    assert payload["data"]["bmi"] == 22.86
    assert payload["data"]["advice"]

    with app.app_context():
        assert CalculatorRecord.query.count() == 0


def test_signed_in_calculation_round_trips(client: FlaskClient, make_user):
    make_user("alice")
    login(client, "alice")

    response = client.post(
        "/calculate/blood-pressure", json={"systolic": "185", "diastolic": 70}
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["savedToHistory"] is True
    assert isinstance(payload["recordId"], int)
    assert payload["data"]["category"] == "stage-2"

    listing = client.get("/calculate/blood-pressure")

    assert listing.status_code == 200
    records = listing.get_json()["records"]
    assert len(records) == 1
    assert records[0]["id"] == payload["recordId"]
    assert records[0]["kind"] == "blood-pressure"
    assert records[0]["inputs"] == {"systolic": 185.0, "diastolic": 70.0}
    assert records[0]["result"] == {"category": "stage-2"}
    assert records[0]["advice"] == payload["data"]["advice"]


def test_records_are_listed_newest_first_with_paging(client: FlaskClient, make_user):
    make_user("bob")
    login(client, "bob")

    ids = []
    for weight in (60, 65, 70):
        response = client.post("/calculate/bmi", json={**BMI_PAYLOAD, "weight": weight})
        ids.append(response.get_json()["recordId"])

    first_page = client.get("/calculate/bmi?limit=2").get_json()["records"]
    second_page = client.get("/calculate/bmi?limit=2&page=2").get_json()["records"]

    assert [record["id"] for record in first_page] == [ids[2], ids[1]]
    assert [record["id"] for record in second_page] == [ids[0]]


def test_records_are_scoped_to_the_caller(client: FlaskClient, app: Flask, make_user):
    make_user("carol")
    make_user("dave")
    login(client, "carol")
    client.post("/calculate/bmi", json=BMI_PAYLOAD)
    client.post("/auth/logout")

    login(client, "dave")
    response = client.get("/calculate/bmi")

    assert response.get_json()["records"] == []


def test_listing_requires_session(client: FlaskClient):
    response = client.get("/calculate/bmi")

    assert response.status_code == 401
    assert response.get_json()["error"] == "Please log in first."


def test_unknown_kind_returns_404(client: FlaskClient):
    response = client.post("/calculate/ldl", json={"value": 1})

    assert response.status_code == 404
    assert "Unknown calculator" in response.get_json()["error"]


def test_validation_errors_include_details(client: FlaskClient):
    response = client.post("/calculate/bmi", json={"gender": "male", "height": 10})

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "Height (cm) must be at least 50."
    assert payload["details"] == [
        {"field": "height", "message": "Height (cm) must be at least 50."},
        {"field": "weight", "message": "Weight (kg) is required."},
    ]


def test_deactivated_user_results_are_not_saved(client: FlaskClient, app: Flask, make_user):
    user_id = make_user("erin")
    login(client, "erin")

    with app.app_context():
        user = db.session.get(User, user_id)
        user.is_active = False
        db.session.commit()

    response = client.post("/calculate/bmi", json=BMI_PAYLOAD)

    assert response.status_code == 200
    assert response.get_json()["savedToHistory"] is False


def test_dashboard_and_history(client: FlaskClient, make_user):
    make_user("frank")
    login(client, "frank")
    client.post("/calculate/target-heart-rate", json={"age": 30})
    latest = client.post("/calculate/target-heart-rate", json={"age": 40}).get_json()

    dashboard = client.get("/calculate/dashboard").get_json()
    history = client.get("/calculate/history").get_json()

    assert dashboard["bmi"] is None
    assert dashboard["target-heart-rate"]["id"] == latest["recordId"]
    assert dashboard["target-heart-rate"]["result"]["maxHeartRate"] == 180
    assert dashboard["target-heart-rate"]["advice"] is None
    assert len(history["target-heart-rate"]) == 2
    assert history["sli"] == []


def test_oversized_page_is_rejected(client: FlaskClient, make_user):
    make_user("gina")
    login(client, "gina")

    response = client.get("/calculate/bmi?page=100000000000000000000")
    last_page = client.get("/calculate/bmi?page=100000")

    assert response.status_code == 400
    assert response.get_json()["error"] == "page must be at most 100000."
    assert last_page.status_code == 200
    assert last_page.get_json()["records"] == []
