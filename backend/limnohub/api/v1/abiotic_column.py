"""Abiotic water-column endpoints: listing, detail and file export."""

import re
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from limnohub.api.errors import EXPORT_ERROR, GENERIC_ERROR, error_response
from limnohub.config import get_settings
from limnohub.datasets.abiotic_column import ABIOTIC_COLUMN
from limnohub.db.session import get_session_factory
from limnohub.exceptions import ExportGenerationError, InvalidFilterError
from limnohub.services.export import (
    ExportDelimiter,
    ExportEncoding,
    ExportFormat,
    ExportOptions,
    export_filename,
    export_media_type,
    generate_export_file,
)
from limnohub.services.formatter import format_detail_output, format_list_output
from limnohub.services.query import ExportScope, MeasurementRepository, total_pages

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()

_RECORD_ID = re.compile(r"-?\d+", re.ASCII)


# --- Schemas ---

class MeasurementListResponse(BaseModel):
    """Paginated list of flattened measurements."""

    success: bool = True
    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")
    data: list[dict[str, Any]]


class MeasurementDetailResponse(BaseModel):
    """Single measurement with nested site and campaign."""

    success: bool = True
    data: dict[str, Any]


class ExportRequest(BaseModel):
    """Export request body."""

    model_config = ConfigDict(populate_by_name=True)

    format: ExportFormat = "csv"
    range: ExportScope = "page"
    include_headers: bool = Field(default=True, alias="includeHeaders")
    delimiter: ExportDelimiter | None = None
    encoding: ExportEncoding | None = None
    filters: dict[str, StrictStr | StrictInt | StrictFloat | None] = Field(default_factory=dict)
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1, le=settings.max_page_size)

    def to_options(self) -> ExportOptions:
        return ExportOptions(
            format=self.format,
            include_headers=self.include_headers,
            delimiter=self.delimiter or ";",
            encoding=self.encoding or "utf-8",
        )


# --- Dependencies ---

def get_repository(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> MeasurementRepository:
    return MeasurementRepository(session_factory, ABIOTIC_COLUMN)


# --- Endpoints ---

@router.get("/all", response_model=MeasurementListResponse)
async def list_measurements(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=settings.max_page_size),
    repository: MeasurementRepository = Depends(get_repository),
) -> Any:
    """List measurements, newest first.

    Any query parameter matching an allow-listed filter key (``idcampanha``,
    ``idsitio``) narrows the result; other parameters are ignored.
    """
    limit = limit or settings.page_size
    filters = dict(request.query_params)

    try:
        result = await repository.fetch_page(filters, page, limit)
        data = [format_list_output(row) for row in result.rows]
    except InvalidFilterError as exc:
        return error_response(400, exc.message)
    except Exception as exc:
        logger.exception("measurement_list_failed", error=str(exc))
        return error_response(500, GENERIC_ERROR)

    return {
        "page": page,
        "limit": limit,
        "total": result.total,
        "total_pages": total_pages(result.total, limit),
        "data": data,
    }


@router.post("/export")
async def export_measurements(
    body: ExportRequest,
    repository: MeasurementRepository = Depends(get_repository),
) -> Response:
    """Download the filtered measurements as CSV or XLSX.

    On failure the response is a JSON error body instead of a file, so
    clients must check ``Content-Type`` before saving.
    """
    options = body.to_options()
    limit = body.limit or settings.page_size

    try:
        rows = await repository.fetch_for_export(body.filters, body.range, body.page, limit)
        records = [format_list_output(row) for row in rows]
        content = generate_export_file(records, options)
    except InvalidFilterError as exc:
        return error_response(400, exc.message)
    except ExportGenerationError:
        return error_response(500, EXPORT_ERROR)
    except Exception as exc:
        logger.exception("measurement_export_failed", error=str(exc), format=options.format)
        return error_response(500, EXPORT_ERROR)

    filename = export_filename(
        ABIOTIC_COLUMN.entity, options.format, datetime.now(timezone.utc).date()
    )
    return Response(
        content=content,
        media_type=export_media_type(options),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{idabioticocoluna}", response_model=MeasurementDetailResponse)
async def get_measurement(
    idabioticocoluna: str,
    repository: MeasurementRepository = Depends(get_repository),
) -> Any:
    """Get one measurement with its site, campaign and reservoir."""
    if not _RECORD_ID.fullmatch(idabioticocoluna):
        return error_response(400, f"ID {idabioticocoluna} is invalid.")
    record_id = int(idabioticocoluna)

    try:
        row = await repository.fetch_one(record_id)
    except Exception as exc:
        logger.exception("measurement_detail_failed", error=str(exc), record_id=record_id)
        return error_response(500, GENERIC_ERROR)

    if row is None:
        return error_response(404, "Abiotic column record not found.")

    return {"data": format_detail_output(row)}
