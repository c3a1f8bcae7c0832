"""Dataset definition shared by the query layer."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Dataset:
    """Static SQL and filter allow-list for one exposed table.

    ``select_sql`` and ``count_sql`` must end right before where a WHERE
    clause would go. ``detail_sql`` takes a single ``:id`` parameter.
    """

    entity: str
    select_sql: str
    count_sql: str
    order_by: str
    detail_sql: str
    column_map: Mapping[str, str]
    filter_types: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
