"""SQLAlchemy implementation of the calculator record store."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import func

from models import db
from models.record import CALCULATOR_KINDS, CalculatorRecord

from .abstract_storage import AbstractRecordStore


class SQLRecordStore(AbstractRecordStore):
    """Persist calculator records through the application's SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session or db.session

    def _owned(self, user_id: int, kind: str | None = None):
        query = CalculatorRecord.query.filter(CalculatorRecord.user_id == user_id)
        if kind is not None:
            query = query.filter(CalculatorRecord.kind == kind)
        return query.order_by(
            CalculatorRecord.created_at.desc(), CalculatorRecord.id.desc()
        )

    def create_record(
        self,
        kind: str,
        user_id: int,
        inputs: Mapping[str, Any],
        result: Mapping[str, Any],
        advice: str | None,
    ) -> int:
        if kind not in CALCULATOR_KINDS:
            raise ValueError(f"Unknown calculator kind: {kind}")
        if user_id is None:
            raise ValueError("Calculator records require an owning user.")

        record = CalculatorRecord(
            user_id=user_id,
            kind=kind,
            inputs=dict(inputs),
            result=dict(result),
            advice=advice,
        )
        self.session.add(record)
        self.session.commit()
        return record.id

    def list_records(
        self, kind: str, user_id: int, limit: int = 10, offset: int = 0
    ) -> Sequence[CalculatorRecord]:
        return self._owned(user_id, kind).offset(offset).limit(limit).all()

    def latest_by_kind(self, user_id: int) -> dict[str, CalculatorRecord | None]:
        return {kind: self._owned(user_id, kind).first() for kind in CALCULATOR_KINDS}

    def history(self, user_id: int, limit: int = 100) -> dict[str, list[CalculatorRecord]]:
        return {
            kind: self._owned(user_id, kind).limit(limit).all()
            for kind in CALCULATOR_KINDS
        }

    def count_by_kind(
        self, user_ids: Iterable[int] | None = None
    ) -> dict[int, dict[str, int]]:
        query = self.session.query(
            CalculatorRecord.user_id, CalculatorRecord.kind, func.count(CalculatorRecord.id)
        )
        if user_ids is not None:
            ids = list(user_ids)
            if not ids:
                return {}
            query = query.filter(CalculatorRecord.user_id.in_(ids))

        counts: dict[int, dict[str, int]] = {}
        for user_id, kind, total in query.group_by(
            CalculatorRecord.user_id, CalculatorRecord.kind
        ):
            counts.setdefault(user_id, dict.fromkeys(CALCULATOR_KINDS, 0))[kind] = total
        return counts

    def count_records(self) -> dict[str, int]:
        totals = dict.fromkeys(CALCULATOR_KINDS, 0)
        rows = (
            self.session.query(CalculatorRecord.kind, func.count(CalculatorRecord.id))
            .group_by(CalculatorRecord.kind)
            .all()
        )
        for kind, total in rows:
            totals[kind] = total
        return totals
