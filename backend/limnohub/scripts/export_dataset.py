"""Export abiotic water-column measurements to a file.

Runs the same query, formatting and export pipeline as the HTTP export
endpoint, against the configured database.

Usage:
    python -m limnohub.scripts.export_dataset --output export.csv

Options:
    --format {csv,xlsx}           Output format (default: csv)
    --filter KEY=VALUE            Filter, repeatable (e.g. idcampanha=5)
    --scope {page,all}            Export one page or every row (default: all)
    --page N / --limit N          Page selection when --scope page
    --delimiter {",",";"}         CSV delimiter (default: ;)
    --encoding {utf-8,iso-8859-1} CSV encoding (default: utf-8)
    --no-headers                  Omit the header row
"""

import argparse
import asyncio
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from limnohub.config import get_settings
from limnohub.datasets.abiotic_column import ABIOTIC_COLUMN
from limnohub.exceptions import LimnoError
from limnohub.services.export import ExportOptions, generate_export_file
from limnohub.services.formatter import format_list_output
from limnohub.services.query import ExportScope, MeasurementRepository


def parse_filter_args(items: list[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a filter mapping."""
    filters: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Filter must look like KEY=VALUE, got {item!r}")
        filters[key.strip()] = value.strip()
    return filters


async def run_export(
    session_factory: async_sessionmaker[AsyncSession],
    options: ExportOptions,
    filters: dict[str, str],
    scope: ExportScope = "all",
    page: int = 1,
    limit: int | None = None,
) -> tuple[bytes, int]:
    """Fetch, format and serialize rows. Returns the file and its row count."""
    repository = MeasurementRepository(session_factory, ABIOTIC_COLUMN)
    rows = await repository.fetch_for_export(
        filters, scope, page, limit or get_settings().page_size
    )
    records = [format_list_output(row) for row in rows]
    return generate_export_file(records, options), len(records)


async def _export_to_file(args: argparse.Namespace) -> int:
    from limnohub.db.session import async_session_factory, close_db

    options = ExportOptions(
        format=args.format,
        include_headers=not args.no_headers,
        delimiter=args.delimiter,
        encoding=args.encoding,
    )
    try:
        content, count = await run_export(
            async_session_factory,
            options,
            parse_filter_args(args.filter),
            scope=args.scope,
            page=args.page,
            limit=args.limit,
        )
    finally:
        await close_db()

    args.output.write_bytes(content)
    print(f"Wrote {count} rows to {args.output}")
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export abiotic water-column measurements to CSV or XLSX"
    )
    parser.add_argument("--output", type=Path, required=True, help="Destination file")
    parser.add_argument("--format", choices=["csv", "xlsx"], default="csv")
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Equality filter on an allow-listed key (repeatable)",
    )
    parser.add_argument("--scope", choices=["page", "all"], default="all")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--delimiter", choices=[",", ";"], default=";")
    parser.add_argument("--encoding", choices=["utf-8", "iso-8859-1"], default="utf-8")
    parser.add_argument("--no-headers", action="store_true", help="Omit the header row")

    args = parser.parse_args(argv)

    try:
        asyncio.run(_export_to_file(args))
    except (ValueError, LimnoError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
