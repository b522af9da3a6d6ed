"""
tests/test_calculation_service.py
Tests for services/calculation_service.py.
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.models import BuildingMetadata, Floor, ProjectMeta, Room, Wall
from domain.ventilation import VentilationConfig
from services.calculation_service import (
    SUMMARY_COLUMNS, display_ventilation_kw, energy_class, recommendation, result_summary,
    run_calculation, run_calculation_from_payload, split_load_to_heaters, summary_dataframe,
    watts_per_sqm,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def floors():
    living = Room(id="r1", name="Wohnen", area=20.0, target_temperature=20.0,
                  walls=(Wall(area=12.0, u_value=0.8),),
                  ventilation=VentilationConfig(air_change_rate=0.5))
    bath = Room(id="r2", name="Bad", area=6.0, target_temperature=24.0,
                walls=(Wall(area=5.0, u_value=0.8),))
    return [Floor(id="f1", name="EG", rooms=(living,)), Floor(id="f2", name="OG", rooms=(bath,))]


class TestRunCalculation:
    def test_rooms_in_floor_order(self, floors):
        res = run_calculation(floors, outdoor_temp_c=-10.0)
        assert [r.room_name for r in res.per_room] == ["Wohnen", "Bad"]
        assert res.total_heat_load_kw > 0

    def test_payload_matches_models(self, floors):
        payload = {
            "floors": [f.to_dict() for f in floors],
            "building": BuildingMetadata(manual_design_outdoor_temp_c=-12.0).to_dict(),
            "projectMeta": ProjectMeta().to_dict(),
        }
        from_payload = run_calculation_from_payload(payload)
        direct = run_calculation(floors, BuildingMetadata(manual_design_outdoor_temp_c=-12.0))
        assert from_payload.total_heat_load_kw == pytest.approx(direct.total_heat_load_kw)

    def test_empty_payload(self):
        assert run_calculation_from_payload({}).per_room == []


class TestSummaryTable:
    def test_columns_and_rows(self, floors):
        df = summary_dataframe(run_calculation(floors, outdoor_temp_c=-10.0), floors)
        assert list(df.columns) == SUMMARY_COLUMNS
        assert list(df["Room"]) == ["Wohnen", "Bad"]
        assert df["Heat load (kW)"].sum() > 0

    def test_empty_results_keep_columns(self):
        df = summary_dataframe(run_calculation([]))
        assert df.empty
        assert list(df.columns) == SUMMARY_COLUMNS

    def test_ventilation_estimate_when_calculated_is_zero(self, floors):
        res = run_calculation(floors, outdoor_temp_c=-10.0)
        room = floors[0].rooms[0]
        summary = res.per_room[0]
        assert display_ventilation_kw(summary, None) == summary.ventilation_kw
        assert display_ventilation_kw(summary, room, -10.0) == pytest.approx(summary.ventilation_kw)


class TestIndicators:
    @pytest.mark.parametrize("w_m2,label", [(10, "A+"), (15, "A+"), (40, "B"), (120, "E"), (250, "H")])
    def test_energy_class(self, w_m2, label):
        assert energy_class(w_m2) == label

    def test_recommendation(self):
        assert recommendation(0, 0) == "Keine Heizlast berechnet."
        assert "Wärmepumpe" in recommendation(6.0, 40)
        assert "Sanierung" in recommendation(15.0, 150)

    def test_watts_per_sqm(self, floors):
        res = run_calculation(floors, outdoor_temp_c=-10.0)
        assert watts_per_sqm(res) == pytest.approx(res.total_heat_load_kw * 1000 / 26.0)
        assert watts_per_sqm(run_calculation([])) == 0.0

    def test_result_summary_keys(self, floors):
        summary = result_summary(run_calculation(floors, outdoor_temp_c=-10.0))
        assert summary["totalRooms"] == 2
        assert summary["totalArea"] == pytest.approx(26.0)
        assert summary["energyClass"] == energy_class(summary["wattsPerSqm"])


class TestSplitLoad:
    def test_equal_split(self):
        assert split_load_to_heaters(1000.0, 4) == [250.0] * 4

    @pytest.mark.parametrize("n", [0, -2, "x"])
    def test_no_heaters(self, n):
        assert split_load_to_heaters(1000.0, n) == []
