"""
Query parsing and filter compilation for listing searches.
"""

from property_api.filters.query_parser import parse_query_string, parse_pagination, to_integer, to_number, QueryParams
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
from property_api.filters.compiler import FilterCompiler, compile_query

__all__ = [
    "parse_query_string",
    "parse_pagination",
    "to_integer",
    "to_number",
    "QueryParams",
    "AnyOf",
    "Between",
    "CompiledQuery",
    "Constraint",
    "Equals",
    "NotNull",
    "Predicate",
    "SortDirection",
    "SortOption",
    "SortSpec",
    "FilterCompiler",
    "compile_query",
]
