from __future__ import annotations

import csv
import io
from datetime import date

from models import City, State, VehicleType
from services import EXPORT_COLUMNS, export_csv, export_filename, format_date, to_export_rows
from conftest import make_vehicle


def test_export_row_has_labeled_columns_in_order() -> None:
    v = make_vehicle(
        1202890,
        plate="ABC1D23",
        state=State.PR,
        inspection_date="2024-03-15",
        brand="VW",
        model="GOL",
        vehicle_type=VehicleType.AUTOMOVEL,
        has_key=True,
        chassis_observation="",
        release_date="2024-04-01",
        city=City.ITAIPULANDIA,
    )

    (row,) = to_export_rows([v])

    assert list(row) == EXPORT_COLUMNS
    assert list(row.values()) == [
        "1202890",
        "ABC1D23",
        "PR",
        "15/03/2024",
        "VW",
        "GOL",
        "Automóvel",
        "Sim",
        "",
        "01/04/2024",
        "Itaipulândia",
    ]


def test_one_row_per_record_with_two_key_tokens() -> None:
    records = [make_vehicle(n, has_key=n % 2 == 0) for n in range(7)]

    rows = to_export_rows(records)

    assert len(rows) == len(records)
    assert {r["Chave"] for r in rows} == {"Sim", "Não"}


def test_format_date_passes_malformed_text_through() -> None:
    assert format_date("2024-12-31") == "31/12/2024"
    assert format_date("") == ""
    assert format_date(None) == ""
    assert format_date("31/12/2024") == "31/12/2024"
    assert format_date("2024-13-45") == "2024-13-45"


def test_export_filename_embeds_day_month_year() -> None:
    assert export_filename(date(2024, 3, 5)) == "veiculos-05-03-2024.csv"


def test_export_csv_has_bom_header_and_rows() -> None:
    rows = to_export_rows([make_vehicle(2, brand="Marca, com vírgula"), make_vehicle(1)])

    text = export_csv(rows)

    assert text.startswith("\ufeff")
    parsed = list(csv.DictReader(io.StringIO(text[1:])))
    assert parsed[0]["Marca"] == "Marca, com vírgula"
    assert [r["Número de Registro"] for r in parsed] == ["2", "1"]
    assert list(parsed[0]) == EXPORT_COLUMNS
