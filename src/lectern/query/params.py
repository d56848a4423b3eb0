"""Parsing and clamping of request parameters.

The ``parse_*`` functions are strict and raise InvalidRequestParameter.
Strategies catch that and fall back, so a bad parameter never fails the
whole request.
"""

from typing import Any, Mapping, Optional, Tuple

from ..errors import InvalidRequestParameter

ALLOWED_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT_ORDER = "updated_at:desc"

TRUE_STRINGS = ("true",)
FALSE_STRINGS = ("false",)


def get_param(params: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read ``name`` from params; None and empty strings count as absent."""
    value = params.get(name, default) if params else default
    return default if value is None or value == "" else value


def parse_int(name: str, value: Any) -> int:
    """Integer request value. Range checks are left to the caller's clamping."""
    if isinstance(value, bool):
        raise InvalidRequestParameter(name, value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequestParameter(name, value) from None


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def parse_order(value: str) -> Tuple[str, str]:
    """
    Split an ``"<sort name>:<asc|desc>"`` string.

    A missing direction means ``asc``.

    Raises:
        InvalidRequestParameter: If the name is empty or the direction is not allowed
    """
    if not isinstance(value, str):
        raise InvalidRequestParameter("order", value)
    name, _, direction = value.partition(":")
    name = name.strip()
    direction = (direction.strip() or "asc").lower()
    if not name:
        raise InvalidRequestParameter("order", value, "Sort name is required")
    if direction not in ALLOWED_DIRECTIONS:
        raise InvalidRequestParameter("order", value, f"Sort direction must be one of {ALLOWED_DIRECTIONS}")
    return name, direction


def coerce_filter_value(value: Any) -> Any:
    """Map ``"true"``/``"false"`` to booleans, pass anything else through."""
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return value


def split_list(value: Any) -> list[str]:
    """Comma-separated string (or list) to a list of stripped, non-empty names."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item).strip()]


def search_term(params: Mapping[str, Any]) -> Optional[str]:
    term = get_param(params, "search")
    if term is None:
        return None
    term = str(term).strip()
    return term or None
