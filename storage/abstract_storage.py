"""Storage abstraction layer for calculator records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Sequence

from models.record import CalculatorRecord


class AbstractRecordStore(ABC):
    """Interface for calculator record backends.

    Writes are append-only. Every read is scoped to a single user and returns
    records newest first.
    """

    @abstractmethod
    def create_record(
        self,
        kind: str,
        user_id: int,
        inputs: Mapping[str, Any],
        result: Mapping[str, Any],
        advice: str | None,
    ) -> int:
        """Persist a record and return its identifier."""

    @abstractmethod
    def list_records(
        self, kind: str, user_id: int, limit: int = 10, offset: int = 0
    ) -> Sequence[CalculatorRecord]:
        """Return up to ``limit`` records of ``kind`` owned by ``user_id``."""

    @abstractmethod
    def latest_by_kind(self, user_id: int) -> dict[str, CalculatorRecord | None]:
        """Return the most recent record of every kind for ``user_id``."""

    @abstractmethod
    def history(self, user_id: int, limit: int = 100) -> dict[str, list[CalculatorRecord]]:
        """Return up to ``limit`` records per kind for ``user_id``."""

    @abstractmethod
    def count_by_kind(
        self, user_ids: Iterable[int] | None = None
    ) -> dict[int, dict[str, int]]:
        """Return ``{user_id: {kind: count}}``, optionally restricted to ``user_ids``."""

    @abstractmethod
    def count_records(self) -> dict[str, int]:
        """Return the total number of stored records per kind."""
