"""Tests for the SQL calculator record store."""

from __future__ import annotations

import pytest
from flask import Flask

from models import db
from models.record import CalculatorRecord, ImmutableRecordError
from storage import SQLRecordStore


@pytest.fixture()
def store(app: Flask):
    with app.app_context():
        yield SQLRecordStore()


def test_create_and_list_records(store, make_user):
    owner = make_user("owner")
    other = make_user("other")

    first = store.create_record("bmi", owner, {"height": 170}, {"bmi": 20.1}, "advice")
    second = store.create_record("bmi", owner, {"height": 171}, {"bmi": 20.2}, "advice")
    store.create_record("bmi", other, {"height": 180}, {"bmi": 25.0}, "advice")
    store.create_record("sli", owner, {"age": 30}, {"sli": 12.0}, "advice")

    records = store.list_records("bmi", owner)

    assert [record.id for record in records] == [second, first]
    assert store.list_records("bmi", owner, limit=1, offset=1)[0].id == first


def test_latest_by_kind_and_history(store, make_user):
    owner = make_user("hist")
    store.create_record("calorie", owner, {}, {"maintenance": 2000}, None)
    latest = store.create_record("calorie", owner, {}, {"maintenance": 2100}, None)

    by_kind = store.latest_by_kind(owner)
    history = store.history(owner, limit=1)

    assert by_kind["calorie"].id == latest
    assert by_kind["bmr"] is None
    assert [record.id for record in history["calorie"]] == [latest]
    assert set(history) == set(by_kind)


def test_counts(store, make_user):
    first = make_user("counter1")
    second = make_user("counter2")
    store.create_record("bmi", first, {}, {}, None)
    store.create_record("bmi", first, {}, {}, None)
    store.create_record("sli", second, {}, {}, None)

    per_user = store.count_by_kind([first, second])
    totals = store.count_records()

    assert per_user[first]["bmi"] == 2
    assert per_user[first]["sli"] == 0
    assert per_user[second]["sli"] == 1
    assert store.count_by_kind([]) == {}
    assert totals["bmi"] == 2
    assert totals["waist-hip"] == 0


def test_create_record_rejects_unknown_kind(store, make_user):
    owner = make_user("strict")

    with pytest.raises(ValueError):
        store.create_record("ldl", owner, {}, {}, None)
    with pytest.raises(ValueError):
        store.create_record("bmi", None, {}, {}, None)


def test_records_are_immutable(store, make_user):
    owner = make_user("frozen")
    record_id = store.create_record("bmi", owner, {"height": 170}, {"bmi": 20.1}, "advice")

    record = db.session.get(CalculatorRecord, record_id)
    record.advice = "changed"

    with pytest.raises(ImmutableRecordError):
        db.session.commit()
    db.session.rollback()

    assert db.session.get(CalculatorRecord, record_id).advice == "advice"
