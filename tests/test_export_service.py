"""
tests/test_export_service.py
Tests for services/export_service.py (summary CSV, results JSON, balancing).
"""
import csv
import io
import json

import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.heat_load import CalculationMeta, CalculationResults, RoomSummary
from domain.models import BuildingMetadata, Floor, Heater, Room
from services.export_service import (
    BALANCING_HEADER, SUMMARY_HEADER, balancing_rows, export_balancing_csv, export_balancing_json,
    export_results_json, export_summary_csv, format_de, summary_csv_lines,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def results():
    room = RoomSummary(
        room_id="r1", room_name="Wohnen", floor_name="EG",
        transmission_kw=1.0, ventilation_kw=0.5, thermal_bridge_kw=0.1,
        safety_margin_kw=0.16, room_heat_load_kw=1.76, area=20.0,
    )
    meta = CalculationMeta(effective_outdoor_temp_c=-10.0, bivalence_applied_c=None,
                           dhw_allowance_kw=0.0, total_space_kw=1.76)
    return CalculationResults(per_room=[room], total_heat_load_kw=1.76, meta=meta)


@pytest.fixture
def floors():
    radiator = Heater(id="h1", output=1000.0, valve_type="Danfoss RA-N", brand="Kermi",
                      series="Profil-K", height=600, width=600)
    floor_heating = Heater(id="h2", type="underfloor", output=500.0)
    room = Room(id="r1", name="Wohnen", area=20.0, heaters=(radiator, floor_heating))
    return [Floor(id="f1", name="EG", rooms=(room,))]


class TestFormatDe:
    @pytest.mark.parametrize("value,decimals,expected", [
        (1234.56, 1, "1.234,6"),
        (0.5, 1, "0,5"),
        (-2.25, 2, "-2,25"),
        ("abc", 1, "0,0"),
        (None, 1, "0,0"),
    ])
    def test_german_format(self, value, decimals, expected):
        assert format_de(value, decimals) == expected


class TestSummaryCsv:
    def test_layout(self, results):
        lines = summary_csv_lines(results)
        assert lines[0] == ["Gesamtlast (kW)", "1,8"]
        assert lines[3][0] == "Energieklasse"
        assert lines[5] == []
        assert lines[6] == SUMMARY_HEADER
        assert lines[7][0] == "EG – Wohnen"
        assert lines[7][-1] == "1,6"        # base load without margin

    def test_encoding_and_separator_hint(self, results):
        raw = export_summary_csv(results)
        text = raw.decode("utf-16-le")
        assert text.startswith("\ufeffsep=\\t\r\n")
        rows = text.split("\r\n")
        assert rows[1].split("\t") == ["Gesamtlast (kW)", "1,8"]

    def test_tabs_in_names_are_quoted(self, results):
        from dataclasses import replace
        tabbed = replace(results, per_room=[replace(results.per_room[0], room_name="Wohn\tzimmer")])
        text = export_summary_csv(tabbed).decode("utf-16-le")
        rows = list(csv.reader(io.StringIO(text.split("\r\n", 1)[1]), delimiter="\t"))
        assert rows[7][0] == "EG – Wohn\tzimmer"
        assert len(rows[7]) == len(SUMMARY_HEADER)


class TestResultsJson:
    def test_contains_results_and_summary(self, results):
        payload = json.loads(export_results_json(results, BuildingMetadata(address="Hauptstr. 1")))
        assert payload["results"]["totalHeatLoadKW"] == pytest.approx(1.76)
        assert payload["summary"]["totalRooms"] == 1
        assert payload["building"]["address"] == "Hauptstr. 1"

    def test_building_optional(self, results):
        assert "building" not in json.loads(export_results_json(results))


class TestBalancing:
    def test_only_radiators(self, floors):
        df = balancing_rows(floors)
        assert len(df) == 1
        row = df.iloc[0]
        assert row["label"] == "Kermi Profil-K 600x600"
        assert row["flow_L_h"] == 86
        assert row["valveBrand"] == "Danfoss"
        assert row["preset"] == "5"

    def test_csv(self, floors):
        raw = export_balancing_csv(floors)
        assert raw.startswith("\ufeff".encode("utf-8"))
        lines = raw.decode("utf-8-sig").split("\r\n")
        assert lines[0] == ";".join(BALANCING_HEADER)
        assert lines[1] == "EG;Wohnen;Kermi Profil-K 600x600;1000;10;86;Danfoss 5"

    def test_json(self, floors):
        payload = json.loads(export_balancing_json(BuildingMetadata(construction_year=1970), floors))
        assert payload["building"]["constructionYear"] == 1970
        rad = payload["radiators"][0]
        assert rad["size"] == "600x600"
        assert rad["suggestedPreset"] == {"brand": "Danfoss", "preset": "5"}

    def test_no_radiators(self):
        assert export_balancing_csv([]).decode("utf-8-sig").strip() == ";".join(BALANCING_HEADER)
        assert json.loads(export_balancing_json(BuildingMetadata(), []))["radiators"] == []
