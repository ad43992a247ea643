"""
Filter compiler translating decoded query parameters into a listing predicate and sort.
"""

from typing import Callable, Dict, Optional
import logging

from property_api.filters.predicate import (
    AnyOf,
    Between,
    CompiledQuery,
    Constraint,
    Equals,
    NotNull,
    Predicate,
    SortDirection,
    SortOption,
    SortSpec,
)
from property_api.filters.query_parser import QueryParams, QueryValue, to_integer, to_number

logger = logging.getLogger(__name__)

# Categorical parameters matched by equality or set membership
CATEGORICAL_FIELDS = {
    "purpose": "purpose.purpose.id",
    "location": "address.location",
    "type": "type.id",
    "subType": "subType.id",
}

# Whole-number parameters; fractions and out-of-range values are dropped
INTEGER_FIELDS = {
    "bed": "bed",
    "bath": "bath",
}

# field -> (min param, max param)
RANGE_FIELDS = {
    "price": ("priceMin", "priceMax"),
    "size": ("areaMin", "areaMax"),
}

SORT_SPECS: Dict[SortOption, Optional[SortSpec]] = {
    SortOption.POPULAR: None,
    SortOption.NEWEST: SortSpec("createdAt", SortDirection.DESC),
    SortOption.LOWEST_PRICE: SortSpec("price", SortDirection.ASC),
    SortOption.HIGHEST_PRICE: SortSpec("price", SortDirection.DESC),
}


def _present(value: Optional[QueryValue]) -> bool:
    if value is None:
        return False
    if isinstance(value, list):
        return any(item != "" for item in value)
    return value != ""


def _match(value: QueryValue, coerce: Callable[[str], object] = lambda v: v) -> Optional[Constraint]:
    """Equality for a scalar, membership for a list; rejected entries are dropped."""
    if isinstance(value, list):
        values = []
        for item in value:
            if item == "":
                continue
            coerced = coerce(item)
            if coerced is not None and coerced not in values:
                values.append(coerced)
        return AnyOf(tuple(sorted(values)))
    return Equals(coerce(value))


class FilterCompiler:
    """
    Builds a CompiledQuery from decoded query parameters.
    Parameters that are absent, blank or fail numeric coercion add no constraint.
    """

    def __init__(self, status_field: str = "status"):
        self.status_field = status_field

    def compile(self, params: QueryParams) -> CompiledQuery:
        predicate = self.build_predicate(params)
        sort = self.build_sort(params.get("sort"))
        logger.debug(f"Compiled filters: {predicate!r}, sort: {sort}")
        return CompiledQuery(predicate=predicate, sort=sort)

    def build_predicate(self, params: QueryParams) -> Predicate:
        constraints: Dict[str, Optional[Constraint]] = {}

        for param, field in CATEGORICAL_FIELDS.items():
            if _present(params.get(param)):
                constraints[field] = _match(params[param])

        if _present(params.get("status")):
            constraints[self.status_field] = _match(params["status"])

        for param, field in INTEGER_FIELDS.items():
            if _present(params.get(param)):
                constraints[field] = _match(params[param], to_integer)

        for field, (min_param, max_param) in RANGE_FIELDS.items():
            constraints[field] = self._range(params.get(min_param), params.get(max_param))

        keyword = params.get("keyword")
        if _present(keyword):
            constraints["keywords"] = _match(keyword if isinstance(keyword, list) else [keyword])

        if params.get("tour") == "video":
            constraints["video"] = NotNull()

        # Predicate drops whatever resolved to nothing
        return Predicate(constraints)

    @staticmethod
    def _range(low: Optional[QueryValue], high: Optional[QueryValue]) -> Optional[Between]:
        """Inclusive range, only when both bounds are given as numbers."""
        if not isinstance(low, str) or not isinstance(high, str):
            return None
        low_number, high_number = to_number(low), to_number(high)
        if low_number is None or high_number is None:
            return None
        return Between(low_number, high_number)

    @staticmethod
    def build_sort(value: Optional[QueryValue]) -> Optional[SortSpec]:
        if not isinstance(value, str):
            return None
        try:
            option = SortOption(value)
        except ValueError:
            logger.debug(f"Unrecognized sort '{value}', results left unsorted")
            return None
        if option is SortOption.POPULAR:
            logger.debug("Popularity ranking is not tracked, results left unsorted")
        return SORT_SPECS[option]


def compile_query(params: QueryParams, status_field: str = "status") -> CompiledQuery:
    """Compile decoded parameters with a one-off compiler."""
    return FilterCompiler(status_field).compile(params)
