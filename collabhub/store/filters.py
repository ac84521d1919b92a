"""Composable row filters.

A filter renders to a SQLAlchemy clause for a model (``clause``) and can be
evaluated against an already-loaded row or a dict of values (``matches``).
The second form is what the write policies use to check rows before a
mutation is sent.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import String, and_, cast, false, or_, true
from sqlalchemy.sql.elements import ColumnElement


def _column(model, field: str):
    try:
        return getattr(model, field)
    except AttributeError:
        raise ValueError(f"Unknown column {model.__tablename__}.{field}") from None


def _value(row: Any, field: str) -> Any:
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def _norm(value: Any) -> Any:
    # ids arrive as UUID objects or strings depending on the caller
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Filter:
    def clause(self, model) -> ColumnElement[bool]:
        raise NotImplementedError

    def matches(self, row: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Filter):
    field: str
    value: Any

    def clause(self, model):
        return _column(model, self.field) == self.value

    def matches(self, row):
        return _norm(_value(row, self.field)) == _norm(self.value)


@dataclass(frozen=True)
class Neq(Filter):
    field: str
    value: Any

    def clause(self, model):
        return _column(model, self.field) != self.value

    def matches(self, row):
        return _norm(_value(row, self.field)) != _norm(self.value)


@dataclass(frozen=True)
class In(Filter):
    """Set membership: the column value is one of ``values``."""

    field: str
    values: Iterable[Any]

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))

    def clause(self, model):
        if not self.values:
            return false()
        return _column(model, self.field).in_(self.values)

    def matches(self, row):
        return _norm(_value(row, self.field)) in {_norm(v) for v in self.values}


@dataclass(frozen=True)
class Contains(Filter):
    """Array containment: ``value`` is an element of a JSON list column."""

    field: str
    value: Any

    def clause(self, model):
        # JSON lists of strings serialise each element as "<value>" on both
        # PostgreSQL and SQLite, so a quoted substring match is exact.
        needle = _escape_like(str(_norm(self.value)))
        return cast(_column(model, self.field), String).like(f'%"{needle}"%', escape="\\")

    def matches(self, row):
        items = _value(row, self.field) or []
        return str(_norm(self.value)) in {str(_norm(i)) for i in items}


@dataclass(frozen=True)
class ILike(Filter):
    """Case-insensitive substring match."""

    field: str
    text: str

    def clause(self, model):
        return _column(model, self.field).ilike(f"%{_escape_like(self.text)}%", escape="\\")

    def matches(self, row):
        return self.text.lower() in (_value(row, self.field) or "").lower()


@dataclass(frozen=True)
class Gte(Filter):
    field: str
    value: Any

    def clause(self, model):
        return _column(model, self.field) >= self.value

    def matches(self, row):
        current = _value(row, self.field)
        return current is not None and current >= self.value


@dataclass(frozen=True)
class Lte(Filter):
    field: str
    value: Any

    def clause(self, model):
        return _column(model, self.field) <= self.value

    def matches(self, row):
        current = _value(row, self.field)
        return current is not None and current <= self.value


class Or(Filter):
    def __init__(self, *filters: Filter):
        self.filters = filters

    def clause(self, model):
        if not self.filters:
            return false()
        return or_(*(f.clause(model) for f in self.filters))

    def matches(self, row):
        return any(f.matches(row) for f in self.filters)

    def __repr__(self) -> str:
        return f"Or{self.filters!r}"


class And(Filter):
    def __init__(self, *filters: Filter):
        self.filters = filters

    def clause(self, model):
        if not self.filters:
            return true()
        return and_(*(f.clause(model) for f in self.filters))

    def matches(self, row):
        return all(f.matches(row) for f in self.filters)

    def __repr__(self) -> str:
        return f"And{self.filters!r}"


@dataclass(frozen=True)
class Order:
    field: str
    desc: bool = False

    def clause(self, model):
        column = _column(model, self.field)
        return column.desc() if self.desc else column.asc()


Always = And()
Never = Or()
