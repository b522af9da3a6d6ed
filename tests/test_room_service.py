"""
tests/test_room_service.py
Tests for services/room_service.py (room and radiator tables ↔ model).
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.models import BuildingMetadata, Floor, Heater, Room, Wall
from domain.presets import BuildingEra, InsulationLevel
from services.room_service import (
    ROOM_COLUMNS, apply_heater_rows, default_room_rows, floors_to_rows, heater_rows, room_to_row,
    row_to_room, rows_to_floors,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def row():
    return {
        "id": "r1", "floor": "EG", "room": "Bad", "room_type": "bathroom",
        "area": "8,5", "height": 2.4, "target": None, "wall_area": 12.0, "window_area": 1.0,
        "door_area": 0, "ceiling": True, "floor_type": "erdreich", "mvhr": True, "hrv_pct": 85,
    }


@pytest.fixture
def old_building():
    return BuildingMetadata(building_era=BuildingEra.PRE_1978, insulation_level=InsulationLevel.NONE)


class TestRowToRoom:
    def test_fields(self, row):
        room = row_to_room(row)
        assert room.id == "r1"
        assert room.area == pytest.approx(8.5)
        assert room.target_temperature is None
        assert room.room_type == "bathroom"
        assert room.ventilation.air_change_rate == pytest.approx(1.0)
        assert room.ventilation.ventilation_system is True
        assert room.ventilation.heat_recovery_efficiency == pytest.approx(0.85)

    def test_one_element_per_area(self, row):
        room = row_to_room(row)
        assert [w.area for w in room.walls] == [12.0]
        assert len(room.windows) == 1
        assert room.doors == ()
        assert room.ceiling is not None
        assert room.floor.floor_type == "erdreich"

    def test_detailed_walls_kept_when_total_unchanged(self, row):
        previous = Room(id="r1", walls=(Wall(id="a", area=7.0), Wall(id="b", area=5.0)))
        assert [w.id for w in row_to_room(row, previous).walls] == ["a", "b"]

    def test_detailed_walls_replaced_when_total_edited(self, row):
        previous = Room(id="r1", walls=(Wall(id="a", area=7.0), Wall(id="b", area=4.0)))
        walls = row_to_room(row, previous).walls
        assert len(walls) == 1 and walls[0].area == 12.0

    def test_no_ceiling_no_floor(self, row):
        room = row_to_room({**row, "ceiling": False, "floor_type": None})
        assert room.ceiling is None
        assert room.floor is None


class TestTableRoundTrip:
    def test_row_shape(self, row):
        out = room_to_row(row_to_room(row), "EG")
        assert {c["id"] for c in ROOM_COLUMNS} <= set(out)
        assert out["hrv_pct"] == pytest.approx(85.0)
        assert out["wall_area"] == pytest.approx(12.0)

    def test_rows_grouped_by_floor(self, old_building):
        floors = rows_to_floors(default_room_rows(), old_building)
        assert [f.name for f in floors] == ["Erdgeschoss", "Obergeschoss"]
        wall = floors[0].rooms[0].walls[0]
        assert wall.u_value == pytest.approx(1.30)

    def test_floor_ids_survive_edits(self, row):
        previous = (Floor(id="keep", name="EG"),)
        assert rows_to_floors([row], previous=previous)[0].id == "keep"

    def test_floors_to_rows(self, row):
        floors = rows_to_floors([row, {**row, "id": "r2", "floor": "OG", "room": "Flur"}])
        assert [r["room"] for r in floors_to_rows(floors)] == ["Bad", "Flur"]

    def test_empty(self):
        assert rows_to_floors([]) == ()
        assert rows_to_floors(None) == ()


class TestHeaterTable:
    @pytest.fixture
    def floors(self):
        return (Floor(name="EG", rooms=(Room(id="r1", name="Wohnen"), Room(id="r2", name="Bad"))),)

    def test_assign_rows_to_rooms(self, floors):
        rows = [
            {"id": "h1", "room_id": "r1", "brand": "Kermi", "series": "Profil-K",
             "height": 600, "width": 600, "output": "1080", "regime": "75/65/20", "valve_type": ""},
            {"id": "h2", "room_id": "r1", "output": 500},
            {"id": "h3", "room_id": "missing", "output": 200},
            {"id": "h4", "room_id": None, "output": 200},
        ]
        out = apply_heater_rows(floors, rows)
        wohnen, bad = out[0].rooms
        assert [h.id for h in wohnen.heaters] == ["h1", "h2"]
        assert wohnen.heaters[0].output == pytest.approx(1080.0)
        assert wohnen.heaters[1].regime == "75/65/20"
        assert bad.heaters == ()

    def test_rows_from_model(self):
        room = Room(id="r1", heaters=(Heater(id="h1", output=900.0, brand="Purmo"),))
        rows = heater_rows([Floor(rooms=(room,))])
        assert rows == [{
            "id": "h1", "room_id": "r1", "brand": "Purmo", "series": "", "height": None,
            "width": None, "output": 900.0, "regime": "75/65/20", "valve_type": "",
        }]
