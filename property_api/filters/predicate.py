"""
Typed building blocks of a compiled listing query.
A predicate maps document field paths to exactly one constraint each.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Equals:
    """Field equals a single value."""
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """Field (or, for collection fields, any element of it) is one of the values."""
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Between:
    """Field lies in the inclusive range [low, high]."""
    low: Union[int, float]
    high: Union[int, float]


@dataclass(frozen=True)
class NotNull:
    """Field is present and not null."""


Constraint = Union[Equals, AnyOf, Between, NotNull]


def is_resolved(constraint: Optional[Constraint]) -> bool:
    """Whether a constraint carries usable values."""
    if constraint is None:
        return False
    if isinstance(constraint, Equals):
        return constraint.value is not None
    if isinstance(constraint, AnyOf):
        return len(constraint.values) > 0 and all(v is not None for v in constraint.values)
    if isinstance(constraint, Between):
        return constraint.low is not None and constraint.high is not None
    return isinstance(constraint, NotNull)


class Predicate(Mapping[str, Constraint]):
    """
    Immutable field -> constraint mapping.
    Iteration is ordered by field path so equal inputs always compare and render the same.
    """

    __slots__ = ("_constraints",)

    def __init__(self, constraints: Optional[Mapping[str, Optional[Constraint]]] = None):
        cleaned = {
            field: constraint
            for field, constraint in (constraints or {}).items()
            if is_resolved(constraint)
        }
        self._constraints: Dict[str, Constraint] = dict(sorted(cleaned.items()))

    def __getitem__(self, field: str) -> Constraint:
        return self._constraints[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._constraints)

    def __len__(self) -> int:
        return len(self._constraints)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Predicate):
            return list(self._constraints.items()) == list(other._constraints.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._constraints.items()))

    def __repr__(self) -> str:
        return f"Predicate({self._constraints!r})"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortOption(str, Enum):
    """Sort choices accepted by the list endpoint."""
    POPULAR = "popular"
    NEWEST = "newest"
    LOWEST_PRICE = "lowestPrice"
    HIGHEST_PRICE = "highestPrice"


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: SortDirection


@dataclass(frozen=True)
class CompiledQuery:
    """Predicate plus optional sort produced from one set of query parameters."""
    predicate: Predicate
    sort: Optional[SortSpec] = None
