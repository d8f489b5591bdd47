"""Storage backends for calculator records."""

from .abstract_storage import AbstractRecordStore
from .sql_storage import SQLRecordStore

__all__ = ["AbstractRecordStore", "SQLRecordStore"]
