"""Row formatting for list and detail responses.

Relationship keys are left out of a record entirely when their foreign key
is empty. API consumers tell "no site" apart from "site with no name" by the
presence of the key, so never replace the omission with ``None``.
"""

from collections.abc import Mapping
from typing import Any

from limnohub.services.normalizer import normalize_date, normalize_time, parse_locale_number

MEASUREMENT_FIELDS = ("profundidade", "dic", "nt", "pt", "delta13c", "delta15n")


def _time_field(value: Any) -> Any:
    # Unrecognized text is kept as stored
    normalized = normalize_time(value)
    if normalized is None and isinstance(value, str) and value.strip():
        return value
    return normalized


def _measurement_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {
        "idabioticocoluna": row.get("idabioticocoluna"),
        "datamedida": normalize_date(row.get("datamedida")),
        "horamedida": _time_field(row.get("horamedida")),
    }
    for name in MEASUREMENT_FIELDS:
        record[name] = parse_locale_number(row.get(name))
    return record


def format_list_output(row: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Flatten a row for listings and exports.

    ``sitio`` collapses to the site name and ``campanha`` to the campaign
    number.
    """
    if row is None:
        return None

    record = _measurement_fields(row)
    if row.get("idsitio"):
        record["sitio"] = row.get("sitio_nome")
    if row.get("idcampanha"):
        record["campanha"] = row.get("nrocampanha")
    return record


def format_detail_output(row: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Expand a row into the nested detail shape."""
    if row is None:
        return None

    record = _measurement_fields(row)

    if row.get("idsitio"):
        record["sitio"] = {
            "idsitio": row.get("idsitio"),
            "nome": row.get("sitio_nome"),
            "lat": parse_locale_number(row.get("sitio_lat")),
            "lng": parse_locale_number(row.get("sitio_lng")),
            "descricao": row.get("sitio_descricao"),
        }

    if row.get("idcampanha"):
        campanha: dict[str, Any] = {
            "idcampanha": row.get("idcampanha"),
            "nroCampanha": row.get("nrocampanha"),
            "dataInicio": normalize_date(row.get("campanha_datainicio")),
            "dataFim": normalize_date(row.get("campanha_datafim")),
        }
        if row.get("idreservatorio"):
            campanha["reservatorio"] = {
                "idreservatorio": row.get("idreservatorio"),
                "nome": row.get("reservatorio_nome"),
            }
        record["campanha"] = campanha

    return record
