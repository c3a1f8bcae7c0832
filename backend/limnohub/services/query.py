"""Query orchestration for dataset listings, exports and detail lookups."""

import asyncio
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

import structlog
from sqlalchemy import text
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from limnohub.datasets.base import Dataset
from limnohub.services.filters import FilterResult, build_filter, coerce_filters, placeholder

logger = structlog.get_logger()

ExportScope = Literal["page", "all"]


@dataclass(frozen=True)
class DatasetQuery:
    """Data and count SQL sharing one filter predicate."""

    data_sql: str
    count_sql: str
    filter: FilterResult

    @property
    def params(self) -> dict[str, Any]:
        return self.filter.bind_params()

    def paginated(self, limit: int, offset: int) -> tuple[str, dict[str, Any]]:
        """Data SQL with LIMIT/OFFSET placeholders following the filters."""
        index = self.filter.next_index
        sql = f"{self.data_sql} LIMIT {placeholder(index)} OFFSET {placeholder(index + 1)}"
        return sql, self.filter.bind_params((limit, offset))


@dataclass(frozen=True)
class PageResult:
    """One page of rows plus the total number of matching rows."""

    rows: Sequence[RowMapping]
    total: int


def build_dataset_query(dataset: Dataset, filters: Mapping[str, Any]) -> DatasetQuery:
    """Combine the dataset templates with the request filters."""
    result = build_filter(filters, dataset.column_map, start_index=1)
    where = f" {result.where_clause}" if result.where_clause else ""
    return DatasetQuery(
        data_sql=f"{dataset.select_sql.strip()}{where} ORDER BY {dataset.order_by}",
        count_sql=f"{dataset.count_sql.strip()}{where}",
        filter=result,
    )


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


class MeasurementRepository:
    """Read-only access to a dataset.

    Each query runs in its own session so independent queries can be
    awaited concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], dataset: Dataset):
        self.session_factory = session_factory
        self.dataset = dataset

    def prepare(self, filters: Mapping[str, Any]) -> DatasetQuery:
        """Coerce filter values and build the dataset query."""
        typed = coerce_filters(filters, self.dataset.filter_types)
        return build_dataset_query(self.dataset, typed)

    async def _fetch_rows(self, sql: str, params: dict[str, Any]) -> Sequence[RowMapping]:
        async with self.session_factory() as session:
            result = await session.execute(text(sql), params)
            return result.mappings().all()

    async def _fetch_count(self, sql: str, params: dict[str, Any]) -> int:
        async with self.session_factory() as session:
            result = await session.execute(text(sql), params)
            return int(result.scalar() or 0)

    async def fetch_page(self, filters: Mapping[str, Any], page: int, limit: int) -> PageResult:
        """Fetch one page and the filtered total.

        Both queries must succeed; a failure in either propagates and no
        partial result is returned.
        """
        query = self.prepare(filters)
        sql, params = query.paginated(limit, page_offset(page, limit))

        rows, total = await asyncio.gather(
            self._fetch_rows(sql, params),
            self._fetch_count(query.count_sql, query.params),
        )
        logger.debug(
            "dataset_page_fetched",
            entity=self.dataset.entity,
            page=page,
            limit=limit,
            rows=len(rows),
            total=total,
        )
        return PageResult(rows=rows, total=total)

    async def fetch_for_export(
        self,
        filters: Mapping[str, Any],
        scope: ExportScope,
        page: int,
        limit: int,
    ) -> Sequence[RowMapping]:
        """Fetch rows for an export; ``scope="all"`` ignores page and limit."""
        query = self.prepare(filters)
        if scope == "page":
            sql, params = query.paginated(limit, page_offset(page, limit))
        else:
            sql, params = query.data_sql, query.params

        rows = await self._fetch_rows(sql, params)
        logger.info(
            "dataset_export_rows_fetched",
            entity=self.dataset.entity,
            scope=scope,
            rows=len(rows),
        )
        return rows

    async def fetch_one(self, record_id: int) -> RowMapping | None:
        """Fetch the joined detail row for one record."""
        async with self.session_factory() as session:
            result = await session.execute(text(self.dataset.detail_sql), {"id": record_id})
            return result.mappings().first()
