"""Calculator endpoints: compute a metric and keep it in the caller's history."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import NotFound

from calculators import is_known_kind, run_calculation
from storage import AbstractRecordStore
from utils.auth import current_user, require_session
from utils.request_validation import MAX_PAGE, parse_int_arg, parse_json_request

calculators_bp = Blueprint("calculators", __name__)


def _record_store() -> AbstractRecordStore:
    return current_app.extensions["record_store"]


def _require_kind(kind: str) -> str:
    if not is_known_kind(kind):
        raise NotFound(f"Unknown calculator: {kind}.")
    return kind


@calculators_bp.route("/<kind>", methods=["POST"])
def calculate(kind: str):
    """Run a calculator; signed-in, active callers also get the result saved."""

    _require_kind(kind)
    payload = parse_json_request(request)
    calculation = run_calculation(kind, payload)

    record_id = None
    user = current_user()
    if user is not None and user.is_active:
        record_id = _record_store().create_record(
            kind, user.id, calculation.inputs, calculation.result, calculation.advice
        )

    return jsonify(
        {
            "success": True,
            "data": calculation.response_data(),
            "recordId": record_id,
            "savedToHistory": record_id is not None,
        }
    )


@calculators_bp.route("/<kind>", methods=["GET"])
def list_records(kind: str):
    """Return the caller's most recent records for one calculator."""

    _require_kind(kind)
    session = require_session()
    config = current_app.config
    limit = parse_int_arg(
        request.args, "limit", config["HISTORY_PAGE_SIZE"], maximum=config["HISTORY_MAX_RECORDS"]
    )
    page = parse_int_arg(request.args, "page", 1, maximum=MAX_PAGE, clamp=False)

    records = _record_store().list_records(
        kind, session.user_id, limit=limit, offset=(page - 1) * limit
    )
    return jsonify({"records": [record.to_dict() for record in records]})


@calculators_bp.route("/history", methods=["GET"])
def history():
    session = require_session()
    records = _record_store().history(
        session.user_id, limit=current_app.config["HISTORY_MAX_RECORDS"]
    )
    return jsonify(
        {kind: [record.to_dict() for record in items] for kind, items in records.items()}
    )


@calculators_bp.route("/dashboard", methods=["GET"])
def dashboard():
    """Latest record of each calculator, for the signed-in overview."""

    session = require_session()
    latest = _record_store().latest_by_kind(session.user_id)
    return jsonify(
        {kind: record.to_dict() if record else None for kind, record in latest.items()}
    )
