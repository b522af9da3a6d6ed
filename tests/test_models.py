"""
tests/test_models.py
Tests for the immutable room builders in domain/models.py.
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.models import (
    CeilingConfig, Door, Heater, Room, ThermalBridge, Wall, Window, add_element, remove_element,
    with_ceiling, with_door, with_floor_config, with_room_fields, with_ventilation, with_wall, with_window,
)
from services.room_service import row_to_room


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def room():
    return Room(
        id="r1", name="Wohnen", area=20.0,
        walls=(Wall(id="w1", area=10.0, u_value=1.3), Wall(id="w2", area=5.0)),
        windows=(Window(id="f1", area=2.0),),
        doors=(Door(id="d1", area=1.8),),
    )


class TestFieldBuilders:
    def test_lists_become_tuples(self, room):
        out = with_room_fields(room, name="Bad", heaters=[Heater(id="h1")])
        assert out.name == "Bad"
        assert isinstance(out.heaters, tuple)
        assert room.heaters == ()

    def test_element_update_by_index(self, room):
        out = with_wall(room, 1, area=6.0)
        assert [w.area for w in out.walls] == [10.0, 6.0]
        assert out.walls[1].id == "w2"
        assert room.walls[1].area == 5.0
        assert with_window(room, 0, u_value=1.1).windows[0].u_value == 1.1
        assert with_door(room, 0, area=2.0).doors[0].area == 2.0

    def test_index_out_of_range(self, room):
        with pytest.raises(IndexError):
            with_wall(room, 5, area=1.0)
        with pytest.raises(IndexError):
            with_door(room, -1, area=1.0)

    def test_nested_configs_created_on_demand(self, room):
        assert with_ceiling(room, u_value=0.3).ceiling == CeilingConfig(u_value=0.3)
        assert with_floor_config(room, floor_type="erdreich").floor.floor_type == "erdreich"
        assert with_ventilation(room, air_change_rate=0.7).ventilation.air_change_rate == 0.7

    def test_nested_config_keeps_other_fields(self, room):
        out = with_ceiling(with_ceiling(room, u_value=0.3), area=18.0)
        assert (out.ceiling.u_value, out.ceiling.area) == (0.3, 18.0)


class TestElementLists:
    def test_add_routes_by_type(self, room):
        out = add_element(add_element(room, Window(id="f2", area=1.0)), ThermalBridge(id="tb"))
        assert [w.id for w in out.windows] == ["f1", "f2"]
        assert [tb.id for tb in out.thermal_bridges] == ["tb"]

    def test_add_unknown_type(self, room):
        with pytest.raises(KeyError):
            add_element(room, "wall")

    def test_remove_by_id(self, room):
        out = remove_element(room, "w1")
        assert [w.id for w in out.walls] == ["w2"]
        assert out.windows == room.windows

    def test_remove_missing_returns_same_room(self, room):
        assert remove_element(room, "nope") is room


class TestRowEdits:
    def test_single_wall_resized_in_place(self):
        previous = Room(id="r1", walls=(Wall(id="w1", area=10.0, u_value=0.8),))
        walls = row_to_room({"id": "r1", "wall_area": 12.0}, previous).walls
        assert [(w.id, w.area, w.u_value) for w in walls] == [("w1", 12.0, 0.8)]

    def test_cleared_area_drops_elements(self, room):
        assert row_to_room({"id": "r1", "wall_area": 0}, room).walls == ()
