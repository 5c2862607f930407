"""
Search-parameter → SQL predicate builder.

Each searchable entity declares a tuple of rules. A rule names the request
key(s) it reacts to and the column (or relationship path) it constrains.
``build_filter`` walks the rules, asks each one for its clause given the
request's parameters, and ANDs the results together:

    BOOKING_FILTERS = (
        InRule("status"),
        RangeRule("start_date", "end_date", "booking_date"),
        ContainsRule("name"),
    )
    query.filter(build_filter(LocationBooking, params, BOOKING_FILTERS))

Keys that no rule claims are ignored, as are keys whose value is ``None``.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import and_, true

from app.core.exceptions import ValidationConflictError


def _present(params: Mapping[str, Any], key: str) -> bool:
    value = params.get(key)
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, frozenset)) and not value:
        return False
    return True


def _as_collection(value) -> list:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _target(model, relation: str):
    attr = getattr(model, relation)
    return attr, attr.property.mapper.class_


@dataclass(frozen=True)
class InRule:
    """Column value is one of the given values."""
    key: str
    field: Optional[str] = None

    def clause(self, model, params):
        if not _present(params, self.key):
            return None
        column = getattr(model, self.field or self.key)
        return column.in_(_as_collection(params[self.key]))


@dataclass(frozen=True)
class ContainsRule:
    """Case-insensitive substring match."""
    key: str
    field: Optional[str] = None

    def clause(self, model, params):
        if not _present(params, self.key):
            return None
        column = getattr(model, self.field or self.key)
        return column.icontains(params[self.key], autoescape=True)


@dataclass(frozen=True)
class BoolRule:
    key: str
    field: Optional[str] = None

    def clause(self, model, params):
        if not _present(params, self.key):
            return None
        value = params[self.key]
        if not isinstance(value, bool):
            raise ValidationConflictError(f"Search parameter '{self.key}' must be true or false!")
        column = getattr(model, self.field or self.key)
        return column == value


@dataclass(frozen=True)
class RangeRule:
    """
    A ``from``/``to`` key pair.

    - only ``from_key`` present → ``from_field > value``
    - only ``to_key`` present   → ``to_field < value``
    - both present              → ``to_field BETWEEN lo AND hi`` (inclusive)
    """
    from_key: str
    to_key: str
    from_field: str
    to_field: Optional[str] = None

    def clause(self, model, params):
        has_from = _present(params, self.from_key)
        has_to = _present(params, self.to_key)
        lower = getattr(model, self.from_field)
        upper = getattr(model, self.to_field or self.from_field)

        if has_from and has_to:
            return upper.between(params[self.from_key], params[self.to_key])
        if has_from:
            return lower > params[self.from_key]
        if has_to:
            return upper < params[self.to_key]
        return None


@dataclass(frozen=True)
class JoinContainsRule:
    """Substring match on a field of a many-to-one related entity, e.g. ``user.full_name``."""
    key: str
    relation: str
    field: str

    def clause(self, model, params):
        if not _present(params, self.key):
            return None
        rel, target = _target(model, self.relation)
        return rel.has(getattr(target, self.field).icontains(params[self.key], autoescape=True))


@dataclass(frozen=True)
class JoinInRule:
    """
    Membership through an association entity, e.g.
    ``location_categories -> category -> name IN (...)``.

    Rendered as EXISTS, so a base row matching several associated rows is
    still returned once.
    """
    key: str
    association: str
    relation: str
    field: str

    def clause(self, model, params):
        if not _present(params, self.key):
            return None
        assoc, assoc_cls = _target(model, self.association)
        inner, target = _target(assoc_cls, self.relation)
        values = _as_collection(params[self.key])
        return assoc.any(inner.has(getattr(target, self.field).in_(values)))


def build_filter(model, params: Optional[Mapping[str, Any]], rules: Iterable):
    """AND every clause the rules produce; no clauses means match-all."""
    if not params:
        return true()
    clauses = [c for c in (rule.clause(model, params) for rule in rules) if c is not None]
    if not clauses:
        return true()
    return and_(*clauses)


def search_params(**kwargs) -> dict:
    """Drop unset query parameters so only supplied filters reach the builder."""
    return {k: v for k, v in kwargs.items() if _present(kwargs, k)}
