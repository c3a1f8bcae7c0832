"""Parameterized WHERE clause construction from request filters.

Only keys present in a dataset's column map are ever turned into SQL text,
and only the mapped column identifier is interpolated. Values are always
passed as bound parameters.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from limnohub.exceptions import InvalidFilterError

PARAM_PREFIX = "p"


def placeholder(index: int) -> str:
    """Bind parameter placeholder for a positional slot."""
    return f":{PARAM_PREFIX}{index}"


@dataclass(frozen=True)
class FilterResult:
    """Output of ``build_filter``."""

    where_clause: str = ""
    fragments: tuple[str, ...] = ()
    params: tuple[Any, ...] = ()
    start_index: int = 1
    next_index: int = 1

    def bind_params(self, extra: tuple[Any, ...] = ()) -> dict[str, Any]:
        """Named bind mapping for ``params`` followed by ``extra`` values."""
        values = (*self.params, *extra)
        return {
            f"{PARAM_PREFIX}{self.start_index + offset}": value
            for offset, value in enumerate(values)
        }


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def build_filter(
    filters: Mapping[str, Any],
    column_map: Mapping[str, str],
    start_index: int = 1,
) -> FilterResult:
    """Build an equality-only WHERE clause from allow-listed filter keys.

    Args:
        filters: Request filters, e.g. query parameters or a JSON object.
        column_map: Allow-list of filter key -> qualified column name.
        start_index: Index of the first placeholder to use.

    Returns:
        A FilterResult whose ``next_index`` is the first unused placeholder.
    """
    fragments: list[str] = []
    params: list[Any] = []
    index = start_index

    for key, value in filters.items():
        column = column_map.get(key)
        if column is None or _is_blank(value):
            continue
        # Only equality is supported
        fragments.append(f"{column} = {placeholder(index)}")
        params.append(value)
        index += 1

    if not fragments:
        return FilterResult(start_index=start_index, next_index=start_index)

    return FilterResult(
        where_clause="WHERE " + " AND ".join(fragments),
        fragments=tuple(fragments),
        params=tuple(params),
        start_index=start_index,
        next_index=index,
    )


def coerce_filters(
    filters: Mapping[str, Any],
    filter_types: Mapping[str, Callable[[Any], Any]],
) -> dict[str, Any]:
    """Convert typed filter values, leaving everything else untouched.

    Query strings arrive as text while drivers such as asyncpg insist on
    the column's Python type, so ``{"idcampanha": "5"}`` becomes
    ``{"idcampanha": 5}``.

    Raises:
        InvalidFilterError: If a typed value cannot be converted.
    """
    coerced: dict[str, Any] = {}
    for key, value in filters.items():
        converter = filter_types.get(key)
        if converter is None or _is_blank(value):
            coerced[key] = value
            continue
        try:
            coerced[key] = converter(value)
        except (TypeError, ValueError):
            raise InvalidFilterError(key, value) from None
    return coerced
