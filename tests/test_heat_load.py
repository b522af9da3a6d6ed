"""
tests/test_heat_load.py
Tests for domain/heat_load.py (room DIN sections, summary view and building
aggregation).
"""
from dataclasses import replace

import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.heat_load import (
    apply_bivalence, calculate_building, calculate_din_sections, dhw_allowance_kw,
    din_target_temperature, resolve_design_outdoor_temp, resolve_u, summarize_room,
)
from domain.models import (
    BuildingMetadata, CeilingConfig, Dimensioning, Floor, FloorConfig, ProjectMeta, Room, ThermalBridge, Wall,
    Window,
)
from domain.presets import BuildingEra, InsulationLevel
from domain.ventilation import VentilationConfig
from services.preset_service import apply_preset_u_values


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def old_building():
    return BuildingMetadata(building_era=BuildingEra.PRE_1978, insulation_level=InsulationLevel.NONE)


@pytest.fixture
def wall_room(old_building):
    room = Room(id="r1", name="Wohnen", area=20.0, target_temperature=20.0, walls=(Wall(area=10.0),), windows=(Window(area=2.0),))
    return apply_preset_u_values(room, old_building)


@pytest.fixture
def living_room():
    return Room(
        id="r2", name="Wohnzimmer", area=20.0, height=2.5, target_temperature=20.0,
        walls=(Wall(area=10.0),),
        ventilation=VentilationConfig(air_change_rate=0.5),
    )


# ---------------------------------------------------------------------------
# Design conditions
# ---------------------------------------------------------------------------
class TestDesignConditions:
    def test_manual_override_wins(self):
        b = BuildingMetadata(design_outdoor_temp_c=-12.0, manual_design_outdoor_temp_c=-8.0)
        assert resolve_design_outdoor_temp(b) == -8.0

    def test_looked_up_then_fallback(self):
        assert resolve_design_outdoor_temp(BuildingMetadata(design_outdoor_temp_c=-12.0)) == -12.0
        assert resolve_design_outdoor_temp(BuildingMetadata()) == -10.0
        assert resolve_design_outdoor_temp(None) == -10.0

    @pytest.mark.parametrize("outdoor,bivalence,expected", [
        (-15, -5, -5),
        (-3, -5, -3),
        (-15, None, -15),
        (-15, "abc", -15),
    ])
    def test_bivalence(self, outdoor, bivalence, expected):
        assert apply_bivalence(outdoor, bivalence) == expected

    def test_dhw_allowance(self):
        assert dhw_allowance_kw(4, 40) == pytest.approx(0.3067, abs=1e-4)
        assert dhw_allowance_kw(0, 40) == 0.0
        assert dhw_allowance_kw(4, None) == 0.0

    def test_resolve_u(self):
        assert resolve_u(0.4, 2.0, 1.1) == 0.4
        assert resolve_u(None, 2.0, 1.1) == pytest.approx(0.5)
        assert resolve_u(0, 0, 1.1) == 1.1


# ---------------------------------------------------------------------------
# DIN sections
# ---------------------------------------------------------------------------
class TestDinSections:
    def test_pre1978_wall_and_window(self, wall_room):
        din = calculate_din_sections(wall_room, -10.0)
        assert din.delta_t == pytest.approx(30.0)
        # wall 1.30 · 10 · 30 plus window 3.00 · 2 · 30
        assert din.transmission_w == pytest.approx(390 + 180)
        assert din.thermal_bridge.sum_w == pytest.approx(0.05 * 570)
        assert din.ventilation.q_w == 0.0
        assert din.total_w == pytest.approx(570 * 1.05)

    def test_infiltration_ach_counted_once(self):
        room = Room.from_dict({"id": "r3", "name": "Flur", "area": 20, "height": 2.5,
                               "ventilation": {"infiltrationACH": 0.5}})
        din = calculate_din_sections(room, -10.0)
        assert din.ventilation.q_w == 0.0
        # 50 m³ · 0.5 1/h at 30 K
        assert din.infiltration_w == pytest.approx(50 * 0.5 / 3600 * 1.204 * 1005 * 30)

    def test_target_from_room_type(self):
        room = Room(ventilation=VentilationConfig(room_type="bathroom"))
        assert din_target_temperature(room) == 24.0
        assert din_target_temperature(Room()) == 20.0

    def test_heat_recovery_reduces_ventilation(self, living_room):
        plain = calculate_din_sections(living_room, -10.0)
        mvhr = calculate_din_sections(
            replace(living_room, ventilation=VentilationConfig(
                air_change_rate=0.5, ventilation_system=True, heat_recovery_efficiency=0.8)),
            -10.0,
        )
        assert mvhr.ventilation.q_w == pytest.approx(0.2 * plain.ventilation.q_w)
        assert mvhr.ventilation.effective_dt == pytest.approx(6.0)

    def test_infiltration_from_project(self, living_room):
        din = calculate_din_sections(living_room, -10.0, ProjectMeta(infiltration_ach=0.2))
        assert din.infiltration_w > 0

    def test_psi_list_used(self, wall_room):
        room = replace(wall_room, thermal_bridges=(ThermalBridge(psi_value=0.1, length=5.0),))
        din = calculate_din_sections(room, -10.0, ProjectMeta(thermal_bridge_factor=0.5))
        assert din.thermal_bridge.sum_w == pytest.approx(0.1 * 5 * 30)

    def test_intermittent_factor(self, wall_room):
        base = calculate_din_sections(wall_room, -10.0).total_w
        assert calculate_din_sections(wall_room, -10.0, ProjectMeta(intermittent_factor=1.2)).total_w \
            == pytest.approx(1.2 * base)
        assert calculate_din_sections(wall_room, -10.0, ProjectMeta(intermittent_factor=0.5)).total_w \
            == pytest.approx(base)

    def test_gains_never_make_load_negative(self, wall_room):
        room = replace(wall_room, internal_gains_w=10_000)
        assert calculate_din_sections(room, -10.0).total_w == 0.0

    def test_warm_outside_gives_zero(self, wall_room):
        assert calculate_din_sections(wall_room, 25.0).total_w == 0.0


# ---------------------------------------------------------------------------
# Summary view
# ---------------------------------------------------------------------------
class TestSummary:
    def test_fallback_u_values_and_margin(self):
        room = Room(id="s", name="Bad", area=20.0, target_temperature=20.0, walls=(Wall(area=10.0),))
        s = summarize_room(room, -10.0)
        # wall 1.10, roof 0.18 and floor 0.30 at room area
        assert s.transmission_kw == pytest.approx((10 * 1.10 + 20 * 0.18 + 20 * 0.30) * 30 / 1000)
        assert s.ventilation_kw > 0                       # 0.5 1/h fallback
        assert s.safety_margin_kw == pytest.approx(0.1 * s.base_load_kw)
        assert s.room_heat_load_kw == pytest.approx(1.1 * s.base_load_kw)

    def test_infiltration_rate_stands_in_for_ach(self):
        room = Room(area=20.0, height=2.5, target_temperature=20.0,
                    ventilation=VentilationConfig(infiltration_ach=1.0))
        s = summarize_room(room, -10.0)
        assert s.ventilation_kw == pytest.approx(50 * 1.0 / 3600 * 1.204 * 1005 * 30 / 1000)

    def test_floor_type_fallback(self):
        room = Room(area=10.0, target_temperature=20.0, ceiling=CeilingConfig(area=0),
                    floor=FloorConfig(floor_type="erdreich"),
                    ventilation=VentilationConfig(air_change_rate=0))
        s = summarize_room(room, 0.0)
        assert s.transmission_kw == pytest.approx(10 * 0.35 * 20 / 1000)

    def test_indoor_from_building_preference(self):
        room = Room(area=10.0, walls=(Wall(area=5.0, u_value=1.0),))
        s = summarize_room(room, 0.0, BuildingMetadata(temperature_preference=22.0))
        assert s.transmission_kw == pytest.approx((5 * 1.0 + 10 * 0.18 + 10 * 0.30) * 22 / 1000)


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------
class TestBuilding:
    def test_total_is_rooms_plus_dhw(self, living_room, wall_room):
        floors = [Floor(name="EG", rooms=(living_room,)), Floor(name="OG", rooms=(wall_room,))]
        meta = ProjectMeta(dimensioning=Dimensioning(residents=4, dhw_per_resident_l_per_day=40))
        res = calculate_building(floors, BuildingMetadata(), meta)
        rooms_kw = sum(r.room_heat_load_kw for r in res.per_room)
        assert res.meta.dhw_allowance_kw == pytest.approx(0.30667, abs=1e-4)
        assert res.total_heat_load_kw == pytest.approx(rooms_kw + res.meta.dhw_allowance_kw)
        assert [r.floor_name for r in res.per_room] == ["EG", "OG"]
        assert all(r.din is not None for r in res.per_room)

    def test_bivalence_applies_to_both_paths(self, living_room):
        building = BuildingMetadata(manual_design_outdoor_temp_c=-15.0)
        meta = ProjectMeta(dimensioning=Dimensioning(bivalence_temperature_c=-5.0))
        res = calculate_building([Floor(rooms=(living_room,))], building, meta)
        assert res.meta.effective_outdoor_temp_c == -5.0
        assert res.per_room[0].din.delta_t == pytest.approx(25.0)

    def test_colder_means_more_load(self, living_room):
        floors = [Floor(rooms=(living_room,))]
        mild = calculate_building(floors, outdoor_temp_c=0.0).total_heat_load_kw
        cold = calculate_building(floors, outdoor_temp_c=-15.0).total_heat_load_kw
        assert cold > mild

    def test_never_negative(self, living_room):
        res = calculate_building([Floor(rooms=(living_room,))], outdoor_temp_c=30.0)
        assert res.total_heat_load_kw >= 0.0
        assert res.din_totals.total_w == 0.0

    def test_empty_project(self):
        res = calculate_building([])
        assert res.per_room == []
        assert res.total_heat_load_kw == 0.0

    def test_to_dict_shape(self, living_room):
        d = calculate_building([Floor(rooms=(living_room,))]).to_dict()
        assert {"perRoomLoads", "totalHeatLoadKW", "dinTotals", "meta"} == d.keys()
        assert "roomHeatLoad" in d["perRoomLoads"][0]
