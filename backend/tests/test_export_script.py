from __future__ import annotations

import asyncio

import pytest

from limnohub.scripts.export_dataset import parse_filter_args, run_export
from limnohub.services.export import ExportOptions


def test_parse_filter_args() -> None:
    assert parse_filter_args(["idcampanha=5", " idsitio = 2 "]) == {"idcampanha": "5", "idsitio": "2"}


def test_parse_filter_args_rejects_missing_separator() -> None:
    with pytest.raises(ValueError, match="KEY=VALUE"):
        parse_filter_args(["idcampanha"])


def test_run_export_writes_filtered_rows(session_factory) -> None:
    content, count = asyncio.run(
        run_export(
            session_factory,
            ExportOptions(format="csv", delimiter=","),
            {"idcampanha": "6"},
        )
    )

    lines = content.decode("utf-8").split("\n")
    assert count == 4
    assert lines[0].startswith("idabioticocoluna,datamedida,horamedida")
    assert lines[1].startswith("104,2023-06-04,14:00:00,3,")


def test_run_export_page_scope(session_factory) -> None:
    content, count = asyncio.run(
        run_export(
            session_factory,
            ExportOptions(format="csv", include_headers=False),
            {"idcampanha": "5"},
            scope="page",
            page=5,
            limit=5,
        )
    )

    assert count == 3
    assert [line.split(";")[0] for line in content.decode("utf-8").split("\n")] == ["3", "2", "1"]
