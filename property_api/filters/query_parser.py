"""
Query string decoding for the listing endpoints.
Turns a raw query string into scalars and lists and coerces numeric inputs.
"""

from urllib.parse import parse_qsl
from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import math
import re

logger = logging.getLogger(__name__)

QueryValue = Union[str, List[str]]
QueryParams = Dict[str, QueryValue]

# key[] or key[3]
_BRACKETED_KEY = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<index>\d*)\]$")

# Leading integer of a pagination value, so "10abc" reads as 10
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

MAX_INT32 = 2**31 - 1
MAX_INT64 = 2**63 - 1


def parse_query_string(raw: Optional[str]) -> QueryParams:
    """
    Decode a raw query string.

    A key becomes a list when it is repeated or written with brackets
    (``key[]=a`` or ``key[0]=a``). When one key shows up both ways, every
    value is kept in a flat list.

    Args:
        raw: Query string with or without the leading '?'

    Returns:
        Mapping of parameter name to a string or a list of strings
    """
    if not raw:
        return {}

    scalars: Dict[str, List[str]] = {}
    listed: Dict[str, List[Tuple[int, int, str]]] = {}
    order: List[str] = []

    for position, (key, value) in enumerate(parse_qsl(raw.lstrip("?"), keep_blank_values=True)):
        match = _BRACKETED_KEY.match(key)
        name = match.group("name") if match else key
        if name not in order:
            order.append(name)

        if match:
            index = match.group("index")
            # Explicit indexes sort first, unindexed entries keep arrival order
            sort_key = int(index) if index else math.inf
            listed.setdefault(name, []).append((sort_key, position, value))
        else:
            scalars.setdefault(name, []).append(value)

    params: QueryParams = {}
    for name in order:
        plain = scalars.get(name, [])
        bracketed = [value for _, _, value in sorted(listed.get(name, []))]
        if bracketed or len(plain) > 1:
            params[name] = plain + bracketed
        else:
            params[name] = plain[0]

    return params


def to_number(value: Any) -> Optional[Union[int, float]]:
    """
    Coerce a query value to a number.

    Returns None for anything non-numeric (including blanks, NaN and
    infinities) so callers can drop the constraint instead of querying with it.
    Integral values that fit a 64-bit integer come back as int, the rest as float.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    if number.is_integer() and abs(number) <= MAX_INT64:
        return int(number)
    return number


def to_integer(value: Any, max_value: int = MAX_INT32) -> Optional[int]:
    """
    Coerce a query value to a whole number within +/- ``max_value``.

    Fractions and out-of-range values return None like any other non-numeric input.
    """
    number = to_number(value)
    if not isinstance(number, int) or abs(number) > max_value:
        return None
    return number


def _parse_int(value: Optional[QueryValue]) -> Optional[int]:
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_pagination(params: QueryParams, default_limit: int = 20, max_limit: int = 100) -> Tuple[int, int]:
    """
    Read page and limit from decoded parameters.

    Only scalar values are honored, read up to the first non-digit. Page falls
    back to 1 and limit to ``default_limit``; limit is capped at ``max_limit``
    and page is capped so the row offset fits a 64-bit integer.

    Returns:
        Tuple of (page, limit)
    """
    page = _parse_int(params.get("page"))
    limit = _parse_int(params.get("limit"))

    if page is None or page < 1:
        page = 1
    if limit is None or limit < 1:
        limit = default_limit
    if limit > max_limit:
        logger.debug(f"Requested limit {limit} capped at {max_limit}")
        limit = max_limit

    max_page = MAX_INT64 // limit + 1
    if page > max_page:
        logger.debug(f"Requested page {page} capped at {max_page}")
        page = max_page

    return page, limit
