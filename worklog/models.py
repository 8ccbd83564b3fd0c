from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import StorageError


def _text(record: Mapping[str, Any], key: str, kind: str) -> str:
    value = record[key]
    if not isinstance(value, str):
        raise StorageError(f"Malformed {kind} record, {key!r} is not a string: {record!r}")
    return value


def _case_id(record: Mapping[str, Any]) -> str:
    # Optional; absent and null both mean "no case".
    value = record.get("caseId")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise StorageError(f"Malformed work item record, 'caseId' is not a string: {record!r}")
    return value


def _timestamp(record: Mapping[str, Any]) -> int:
    value = record["timestamp"]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StorageError(f"Malformed work item record, 'timestamp' is not a number: {record!r}")
    return int(value)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str

    def to_record(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Category:
        try:
            return cls(
                id=_text(record, "id", "category"),
                name=_text(record, "name", "category"),
                color=_text(record, "color", "category"),
            )
        except (KeyError, TypeError) as exc:
            raise StorageError(f"Malformed category record: {record!r}") from exc


@dataclass(frozen=True)
class WorkItem:
    id: str
    case_id: str
    description: str
    category_id: str
    timestamp: int

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "caseId": self.case_id,
            "description": self.description,
            "categoryId": self.category_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> WorkItem:
        try:
            return cls(
                id=_text(record, "id", "work item"),
                case_id=_case_id(record),
                description=_text(record, "description", "work item"),
                category_id=_text(record, "categoryId", "work item"),
                timestamp=_timestamp(record),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StorageError(f"Malformed work item record: {record!r}") from exc


@dataclass(frozen=True)
class Window:
    """Inclusive millisecond range."""

    start: int
    end: int

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp <= self.end


@dataclass(frozen=True)
class ChartBucket:
    category_id: str
    name: str
    color: str
    count: int
    orphaned: bool = False
