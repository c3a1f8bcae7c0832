from __future__ import annotations

import csv
import io
from datetime import date

import pytest
from openpyxl import load_workbook
from structlog.testing import capture_logs

from limnohub.exceptions import ExportGenerationError
from limnohub.services.export import (
    EMPTY_MESSAGE,
    XLSX_MEDIA_TYPE,
    ExportOptions,
    escape_csv_value,
    export_filename,
    export_media_type,
    generate_export_file,
)

RECORDS = [
    {"id": 1, "site": "Ponto A", "depth": 1234.56, "note": None},
    {"id": 2, "site": "Ponto; B", "depth": 3.0, "note": 'says "hi"'},
    {"id": 3, "site": "multi\nline", "depth": None, "note": "a,b"},
]


def test_csv_with_headers_uses_first_record_key_order() -> None:
    content = generate_export_file(RECORDS, ExportOptions(format="csv", delimiter=";"))

    assert content.decode("utf-8") == (
        "id;site;depth;note\n"
        "1;Ponto A;1234.56;\n"
        '2;"Ponto; B";3;"says ""hi"""\n'
        '3;"multi\nline";;a,b'
    )


def test_csv_without_headers() -> None:
    content = generate_export_file(
        RECORDS[:1], ExportOptions(format="csv", include_headers=False, delimiter=",")
    )

    assert content == b"1,Ponto A,1234.56,"


def test_csv_missing_keys_render_empty_and_extra_keys_are_dropped() -> None:
    records = [{"a": 1, "b": 2}, {"a": 3, "c": 4}]

    content = generate_export_file(records, ExportOptions(format="csv", delimiter=","))

    assert content == b"a,b\n1,2\n3,"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plain", "plain"),
        ("x,y", '"x,y"'),
        ("x;y", "x;y"),
        ('q"q', '"q""q"'),
        ("l\nl", '"l\nl"'),
        (None, ""),
        (True, "true"),
        (2.0, "2"),
        (2.5, "2.5"),
    ],
)
def test_escape_csv_value(value: object, expected: str) -> None:
    assert escape_csv_value(value, ",") == expected


@pytest.mark.parametrize("delimiter", [",", ";"])
def test_csv_round_trip_preserves_values(delimiter: str) -> None:
    records = [
        {"name": "plain", "notes": 'quote " inside', "site": "a,b;c"},
        {"name": "two\nlines", "notes": "", "site": "Represa de Furnas"},
        {"name": '"wrapped"', "notes": "x", "site": "ç ã é"},
    ]

    content = generate_export_file(records, ExportOptions(format="csv", delimiter=delimiter))
    reader = csv.DictReader(io.StringIO(content.decode("utf-8"), newline=""), delimiter=delimiter)

    assert list(reader) == records


def test_csv_empty_input() -> None:
    with_headers = generate_export_file([], ExportOptions(format="csv"))
    without_headers = generate_export_file([], ExportOptions(format="csv", include_headers=False))

    assert with_headers == EMPTY_MESSAGE.encode("utf-8")
    assert without_headers == b""


def test_csv_latin1_encoding() -> None:
    content = generate_export_file(
        [{"site": "Ribeirão São José"}], ExportOptions(format="csv", encoding="iso-8859-1")
    )

    assert content == "site\nRibeirão São José".encode("iso-8859-1")
    assert b"\xe3" in content


def test_csv_latin1_replaces_characters_outside_range() -> None:
    content = generate_export_file(
        [{"cost": "€5 ≥ 3"}],
        ExportOptions(format="csv", encoding="iso-8859-1", include_headers=False),
    )

    assert content == b"?5 ? 3"


def test_xlsx_writes_bold_headers_and_values_in_key_order() -> None:
    content = generate_export_file(RECORDS, ExportOptions(format="xlsx"))

    ws = load_workbook(io.BytesIO(content)).active
    rows = list(ws.iter_rows(values_only=True))

    assert ws.title == "Data"
    assert rows[0] == ("id", "site", "depth", "note")
    assert rows[1] == (1, "Ponto A", 1234.56, None)
    assert rows[3] == (3, "multi\nline", None, "a,b")
    assert all(cell.font.bold for cell in ws[1])
    assert not ws["A2"].font.bold


def test_xlsx_column_widths_are_clamped() -> None:
    records = [{"short": "x", "long": "y" * 200, "mid": "z" * 20}]

    content = generate_export_file(records, ExportOptions(format="xlsx", include_headers=False))
    ws = load_workbook(io.BytesIO(content)).active

    assert ws.column_dimensions["A"].width == 10
    assert ws.column_dimensions["B"].width == 50
    assert ws.column_dimensions["C"].width == 22


def test_xlsx_empty_input() -> None:
    with_headers = load_workbook(
        io.BytesIO(generate_export_file([], ExportOptions(format="xlsx")))
    ).active
    without_headers = load_workbook(
        io.BytesIO(generate_export_file([], ExportOptions(format="xlsx", include_headers=False)))
    ).active

    assert list(with_headers.iter_rows(values_only=True)) == [(EMPTY_MESSAGE,)]
    assert with_headers.max_row == 1
    assert without_headers["A1"].value is None


class _Unprintable:
    def __str__(self) -> str:
        raise RuntimeError("secret internal detail")


def test_generation_failure_is_logged_and_wrapped() -> None:
    with capture_logs() as logs:
        with pytest.raises(ExportGenerationError) as excinfo:
            generate_export_file([{"bad": _Unprintable()}], ExportOptions(format="csv"))

    assert str(excinfo.value) == "Failed to generate export file."
    assert "secret" not in str(excinfo.value)
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__
    assert logs[0]["event"] == "export_generation_failed"
    assert logs[0]["error"] == "secret internal detail"
    assert logs[0]["error_type"] == "RuntimeError"


def test_export_media_type_and_filename() -> None:
    assert export_media_type(ExportOptions(format="xlsx")) == XLSX_MEDIA_TYPE
    assert (
        export_media_type(ExportOptions(format="csv", encoding="iso-8859-1"))
        == "text/csv; charset=iso-8859-1"
    )
    assert (
        export_filename("abiotico_coluna", "csv", date(2024, 5, 1))
        == "export_abiotico_coluna_2024-05-01.csv"
    )
