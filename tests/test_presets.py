"""
tests/test_presets.py
Tests for domain/presets.py and services/preset_service.py.
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.models import BuildingMetadata, CeilingConfig, FloorConfig, Room, ThermalBridge, Wall, Window
from domain.presets import (
    BuildingEra, InsulationLevel, coerce_era, coerce_insulation, era_from_year,
    get_u_value_preset, thermal_bridge_k,
)
from services.preset_service import (
    ALLOWANCE_BRIDGE_ID, apply_building_thermal_bridge_preset, apply_preset_u_values,
    apply_thermal_bridge_allowance,
    new_room, reapply_presets_if_changed,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def old_building():
    return BuildingMetadata(building_era=BuildingEra.PRE_1978, insulation_level=InsulationLevel.NONE)


@pytest.fixture
def room_with_gaps():
    return Room(
        id="r1", area=20.0,
        walls=(Wall(id="w1", area=10.0, u_value=0.5), Wall(id="w2", area=8.0)),
        windows=(Window(id="f1", area=2.0, u_value=0),),
        ceiling=CeilingConfig(),
        floor=FloorConfig(u_value=0.25),
    )


# ---------------------------------------------------------------------------
# Preset tables
# ---------------------------------------------------------------------------
class TestUValuePresets:
    def test_pre1978_unrenovated(self):
        p = get_u_value_preset(BuildingEra.PRE_1978, InsulationLevel.NONE)
        assert p.wall == pytest.approx(1.30)
        assert p.window == pytest.approx(3.00)

    def test_insulation_lowers_every_surface(self):
        none = get_u_value_preset("1978-1995", "none")
        high = get_u_value_preset("1978-1995", "high")
        for field in ("wall", "window", "door", "ceiling", "floor"):
            assert getattr(high, field) < getattr(none, field)

    def test_newer_era_is_never_worse(self):
        eras = list(BuildingEra)
        walls = [get_u_value_preset(e, "partial").wall for e in eras]
        assert walls == sorted(walls, reverse=True)

    def test_unknown_keys_fall_back(self):
        assert get_u_value_preset("nonsense", None) == get_u_value_preset(BuildingEra.Y2002_2009, InsulationLevel.PARTIAL)

    def test_legacy_keys(self):
        assert coerce_era("1978_1995") is BuildingEra.Y1978_1995
        assert coerce_insulation("basic") is InsulationLevel.PARTIAL


class TestEraFromYear:
    @pytest.mark.parametrize("year,era", [
        (1950, BuildingEra.PRE_1978),
        (1978, BuildingEra.Y1978_1995),
        (1995, BuildingEra.Y1978_1995),
        (2001, BuildingEra.Y1996_2001),
        (2009, BuildingEra.Y2002_2009),
        (2015, BuildingEra.Y2010_2015),
        (2020, BuildingEra.Y2016_2020),
        (2024, BuildingEra.Y2021_PLUS),
        ("1985", BuildingEra.Y1978_1995),
    ])
    def test_boundaries(self, year, era):
        assert era_from_year(year) is era

    def test_missing_year(self):
        assert era_from_year(None) is BuildingEra.Y2002_2009


class TestThermalBridgePresets:
    def test_named_and_unknown(self):
        assert thermal_bridge_k("dinA005") == pytest.approx(0.05)
        assert thermal_bridge_k(None) == pytest.approx(0.04)


# ---------------------------------------------------------------------------
# Fill-missing merge
# ---------------------------------------------------------------------------
class TestApplyPresets:
    def test_fills_only_missing(self, room_with_gaps, old_building):
        out = apply_preset_u_values(room_with_gaps, old_building)
        assert out.walls[0].u_value == pytest.approx(0.5)          # user value kept
        assert out.walls[1].u_value == pytest.approx(1.30)         # filled
        assert out.windows[0].u_value == pytest.approx(3.00)       # zero counts as missing
        assert out.ceiling.u_value == pytest.approx(1.00)
        assert out.floor.u_value == pytest.approx(0.25)

    def test_force_overwrites(self, room_with_gaps, old_building):
        out = apply_preset_u_values(room_with_gaps, old_building, force=True)
        assert out.walls[0].u_value == pytest.approx(1.30)
        assert out.floor.u_value == pytest.approx(0.90)

    def test_idempotent(self, room_with_gaps, old_building):
        once = apply_preset_u_values(room_with_gaps, old_building)
        assert apply_preset_u_values(once, old_building) == once

    def test_input_not_mutated(self, room_with_gaps, old_building):
        apply_preset_u_values(room_with_gaps, old_building)
        assert room_with_gaps.walls[1].u_value is None

    def test_new_room_has_ceiling_and_floor(self, old_building):
        room = new_room("Küche", old_building)
        assert room.name == "Küche"
        assert room.ceiling.u_value == pytest.approx(1.00)
        assert room.floor.u_value == pytest.approx(0.90)

    def test_reapply_only_on_change(self, room_with_gaps, old_building):
        same = reapply_presets_if_changed(room_with_gaps, old_building, old_building)
        assert same is room_with_gaps
        newer = BuildingMetadata(building_era=BuildingEra.Y2021_PLUS, insulation_level=InsulationLevel.NONE)
        changed = reapply_presets_if_changed(room_with_gaps, old_building, newer)
        assert changed.walls[1].u_value == pytest.approx(0.22)
        assert changed.walls[0].u_value == pytest.approx(0.5)


class TestThermalBridgeAllowance:
    def test_inserts_then_replaces(self, room_with_gaps):
        once = apply_thermal_bridge_allowance(room_with_gaps, 0.05)
        assert [tb.id for tb in once.thermal_bridges] == [ALLOWANCE_BRIDGE_ID]
        # walls 18 + window 2 + ceiling 20 + floor 20
        assert once.thermal_bridges[0].length == pytest.approx(60.0)
        twice = apply_thermal_bridge_allowance(once, 0.10)
        assert len(twice.thermal_bridges) == 1
        assert twice.thermal_bridges[0].psi_value == pytest.approx(0.10)

    def test_building_preset_sets_allowance(self, room_with_gaps):
        building = BuildingMetadata(thermal_bridge_preset="dinA005")
        out = apply_building_thermal_bridge_preset(room_with_gaps, building)
        assert out.thermal_bridges[0].psi_value == pytest.approx(thermal_bridge_k("dinA005"))

    def test_cleared_preset_drops_only_the_allowance(self, room_with_gaps):
        own = ThermalBridge(id="sill", psi_value=0.1, length=2.0)
        room = apply_thermal_bridge_allowance(
            Room(id="r", area=10.0, thermal_bridges=(own,)), 0.10)
        out = apply_building_thermal_bridge_preset(room, BuildingMetadata())
        assert [tb.id for tb in out.thermal_bridges] == ["sill"]
        assert apply_building_thermal_bridge_preset(room_with_gaps, None) is room_with_gaps

    def test_new_room_follows_building_preset(self):
        room = new_room("Flur", BuildingMetadata(thermal_bridge_preset="standard"))
        assert [tb.id for tb in room.thermal_bridges] == [ALLOWANCE_BRIDGE_ID]
