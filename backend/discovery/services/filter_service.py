"""Translate a validated ``FilterSet`` into a predicate tree.

Semantics:
    * category, cuisine and price range are OR within the selection;
    * features are AND (every selected feature must be present);
    * hours is a single-choice option;
    * the groups themselves combine with AND.

An empty selection contributes no node, so it never narrows the result set.
Each node evaluates itself against an ``EstablishmentRecord``; the SQL store
compiles the same tree into bound SQLAlchemy clauses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .contracts import EstablishmentRecord, FilterSet
from .hours_service import matches_hours
from .taxonomy import HoursFilter


@dataclass(frozen=True)
class AnyOf:
    """Scalar attribute equals one of ``values``."""

    field: str
    values: tuple[str, ...]

    def matches(self, record: EstablishmentRecord) -> bool:
        return getattr(record, self.field) in self.values


@dataclass(frozen=True)
class Overlaps:
    """Array attribute shares at least one element with ``values``."""

    field: str
    values: tuple[str, ...]

    def matches(self, record: EstablishmentRecord) -> bool:
        present = getattr(record, self.field) or ()
        return not set(present).isdisjoint(self.values)


@dataclass(frozen=True)
class ContainsAll:
    """Array attribute contains every element of ``values``."""

    field: str
    values: tuple[str, ...]

    def matches(self, record: EstablishmentRecord) -> bool:
        present = getattr(record, self.field) or ()
        return set(self.values).issubset(present)


@dataclass(frozen=True)
class AtLeast:
    field: str
    value: float

    def matches(self, record: EstablishmentRecord) -> bool:
        current = getattr(record, self.field)
        return current is not None and current >= self.value


@dataclass(frozen=True)
class HoursMatch:
    option: HoursFilter

    def matches(self, record: EstablishmentRecord) -> bool:
        return matches_hours(self.option, record.is_24_hours, record.latest_close_minute)


@dataclass(frozen=True)
class AllOf:
    clauses: tuple["Predicate", ...] = ()

    def matches(self, record: EstablishmentRecord) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


Predicate = Union[AnyOf, Overlaps, ContainsAll, AtLeast, HoursMatch, AllOf]

MATCH_ALL = AllOf()


def compose_filters(filters: FilterSet) -> AllOf:
    clauses: list[Predicate] = []
    if filters.categories:
        clauses.append(AnyOf(field="category", values=filters.categories))
    if filters.cuisines:
        clauses.append(Overlaps(field="cuisines", values=filters.cuisines))
    if filters.price_ranges:
        clauses.append(AnyOf(field="price_range", values=filters.price_ranges))
    if filters.features:
        clauses.append(ContainsAll(field="features", values=filters.features))
    if filters.hours is not None:
        clauses.append(HoursMatch(option=filters.hours))
    if filters.min_rating is not None:
        clauses.append(AtLeast(field="average_rating", value=filters.min_rating))
    return AllOf(clauses=tuple(clauses))


def describe(predicate: Predicate) -> str:
    """Compact, log-friendly rendering of a predicate tree."""
    if isinstance(predicate, AllOf):
        if not predicate.clauses:
            return "TRUE"
        return " AND ".join(describe(clause) for clause in predicate.clauses)
    if isinstance(predicate, AnyOf):
        return f"{predicate.field} IN ({', '.join(predicate.values)})"
    if isinstance(predicate, Overlaps):
        return f"{predicate.field} && ({', '.join(predicate.values)})"
    if isinstance(predicate, ContainsAll):
        return f"{predicate.field} @> ({', '.join(predicate.values)})"
    if isinstance(predicate, AtLeast):
        return f"{predicate.field} >= {predicate.value:g}"
    if isinstance(predicate, HoursMatch):
        return f"hours = {predicate.option.value}"
    raise TypeError(f"Unsupported predicate node: {predicate!r}")
