"""
services/room_service.py
========================
Maps the editable room table of the wizard to the data model and back.

One table row describes one room with aggregated envelope areas (one wall, one
window, one door entry). Rooms loaded from a stored project keep their detailed
element lists as long as the row's areas are not edited. The radiator table of
the materials step is handled the same way. No Dash imports here.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from domain.models import (
    BuildingMetadata, Door, Floor, Heater, Room, Wall, Window, add_element, new_id, with_ceiling, with_door,
    with_floor_config, with_room_fields, with_ventilation, with_wall, with_window,
)
from domain.units import non_negative, parse_number
from domain.ventilation import with_heat_recovery_percent, with_room_type
from services.preset_service import apply_building_thermal_bridge_preset, apply_preset_u_values

ROOM_COLUMNS: List[Dict[str, Any]] = [
    {"name": "Stockwerk",          "id": "floor",       "type": "text"},
    {"name": "Raum",               "id": "room",        "type": "text"},
    {"name": "Raumtyp",            "id": "room_type",   "type": "text",    "presentation": "dropdown"},
    {"name": "Fläche (m²)",        "id": "area",        "type": "numeric"},
    {"name": "Höhe (m)",           "id": "height",      "type": "numeric"},
    {"name": "Soll (°C)",          "id": "target",      "type": "numeric"},
    {"name": "Wand (m²)",          "id": "wall_area",   "type": "numeric"},
    {"name": "Fenster (m²)",       "id": "window_area", "type": "numeric"},
    {"name": "Tür (m²)",           "id": "door_area",   "type": "numeric"},
    {"name": "Dach/Decke",         "id": "ceiling",     "type": "any",     "presentation": "dropdown"},
    {"name": "Boden gegen",        "id": "floor_type",  "type": "text",    "presentation": "dropdown"},
    {"name": "Lüftungsanlage",     "id": "mvhr",        "type": "any",     "presentation": "dropdown"},
    {"name": "WRG (%)",            "id": "hrv_pct",     "type": "numeric"},
]


def default_room_rows() -> List[Dict[str, Any]]:
    return [
        {"id": new_id(), "floor": "Erdgeschoss", "room": "Wohnzimmer", "room_type": "living",
         "area": 25.0, "height": 2.5, "target": 20.0, "wall_area": 18.0, "window_area": 4.0,
         "door_area": 0.0, "ceiling": False, "floor_type": "erdreich", "mvhr": False, "hrv_pct": None},
        {"id": new_id(), "floor": "Obergeschoss", "room": "Schlafzimmer", "room_type": "bedroom",
         "area": 14.0, "height": 2.5, "target": 18.0, "wall_area": 12.0, "window_area": 2.0,
         "door_area": 0.0, "ceiling": True, "floor_type": "beheizt", "mvhr": False, "hrv_pct": None},
    ]


def _total_area(elements) -> float:
    return sum(non_negative(e.area) for e in elements)


def room_to_row(room: Room, floor_name: str) -> Dict[str, Any]:
    vent = room.ventilation
    eta = vent.heat_recovery_efficiency if vent else None
    return {
        "id": room.id,
        "floor": floor_name,
        "room": room.name,
        "room_type": room.room_type,
        "area": room.area,
        "height": room.height,
        "target": room.target_temperature,
        "wall_area": _total_area(room.walls),
        "window_area": _total_area(room.windows),
        "door_area": _total_area(room.doors),
        "ceiling": room.ceiling is not None,
        "floor_type": room.floor.floor_type if room.floor else None,
        "mvhr": bool(vent and vent.ventilation_system),
        "hrv_pct": None if eta is None else round(eta * 100.0, 1),
    }


def floors_to_rows(floors: Sequence[Floor]) -> List[Dict[str, Any]]:
    return [room_to_row(room, floor.name) for floor in floors for room in floor.rooms]


_ELEMENT_BUILDERS = {
    "walls": (Wall, with_wall),
    "windows": (Window, with_window),
    "doors": (Door, with_door),
}


def _with_element_area(room: Room, attr: str, area: float) -> Room:
    """Keep the detailed list when its total still matches the row.

    A single element is resized in place (id and U-value survive); a longer list
    collapses into one new element.
    """
    factory, resize = _ELEMENT_BUILDERS[attr]
    existing = getattr(room, attr)
    if existing and abs(_total_area(existing) - area) < 1e-6:
        return room
    if area <= 0:
        return with_room_fields(room, **{attr: ()})
    if len(existing) == 1:
        return resize(room, 0, area=area)
    return add_element(with_room_fields(room, **{attr: ()}), factory(area=area))


def row_to_room(row: Mapping[str, Any], previous: Optional[Room] = None) -> Room:
    room = previous or Room(id=str(row.get("id") or new_id()))
    room_type = str(row.get("room_type") or "living")

    if room.ventilation is None or room.ventilation.room_type != room_type:
        room = with_room_fields(room, ventilation=with_room_type(room.ventilation, room_type))
    room = with_ventilation(room, ventilation_system=bool(row.get("mvhr")))
    if row.get("hrv_pct") not in (None, ""):
        room = with_room_fields(room, ventilation=with_heat_recovery_percent(room.ventilation, row.get("hrv_pct")))

    room = with_ceiling(room) if row.get("ceiling") else with_room_fields(room, ceiling=None)
    floor_type = row.get("floor_type")
    if floor_type:
        room = with_floor_config(room, floor_type=str(floor_type))
    else:
        room = with_room_fields(room, floor=None)

    room = _with_element_area(room, "walls", non_negative(row.get("wall_area")))
    room = _with_element_area(room, "windows", non_negative(row.get("window_area")))
    room = _with_element_area(room, "doors", non_negative(row.get("door_area")))

    height = parse_number(row.get("height"))
    return with_room_fields(
        room,
        name=str(row.get("room") or ""),
        area=non_negative(row.get("area")),
        height=2.5 if height is None else max(0.0, height),
        target_temperature=parse_number(row.get("target")),
    )


def rows_to_floors(
    rows: Sequence[Mapping[str, Any]],
    building: Optional[BuildingMetadata] = None,
    previous: Sequence[Floor] = (),
) -> Tuple[Floor, ...]:
    """Group table rows by floor name (first-seen order) and fill missing U-values."""
    old_rooms = {r.id: r for f in previous for r in f.rooms}
    old_floor_ids = {f.name: f.id for f in previous}
    grouped: Dict[str, List[Room]] = {}
    for row in rows or []:
        name = str(row.get("floor") or "Erdgeschoss")
        room = row_to_room(row, old_rooms.get(str(row.get("id"))))
        room = apply_preset_u_values(room, building)
        grouped.setdefault(name, []).append(apply_building_thermal_bridge_preset(room, building))
    return tuple(
        Floor(id=old_floor_ids.get(name) or new_id(), name=name, rooms=tuple(rooms))
        for name, rooms in grouped.items()
    )


# ---------------------------------------------------------------------------
# Radiator table (materials step)
# ---------------------------------------------------------------------------
HEATER_COLUMNS: List[Dict[str, Any]] = [
    {"name": "Raum",            "id": "room_id",    "presentation": "dropdown"},
    {"name": "Hersteller",      "id": "brand",      "type": "text",    "presentation": "dropdown"},
    {"name": "Serie",           "id": "series",     "type": "text"},
    {"name": "Höhe (mm)",       "id": "height",     "type": "numeric"},
    {"name": "Breite (mm)",     "id": "width",      "type": "numeric"},
    {"name": "Leistung (W)",    "id": "output",     "type": "numeric"},
    {"name": "Systemtemp.",     "id": "regime",     "type": "text",    "presentation": "dropdown"},
    {"name": "Ventil",          "id": "valve_type", "type": "text"},
]


def heater_rows(floors: Sequence[Floor]) -> List[Dict[str, Any]]:
    rows = []
    for floor in floors:
        for room in floor.rooms:
            for h in room.heaters:
                rows.append({
                    "id": h.id, "room_id": room.id, "brand": h.brand, "series": h.series,
                    "height": h.height, "width": h.width, "output": h.output,
                    "regime": h.regime, "valve_type": h.valve_type,
                })
    return rows


def apply_heater_rows(floors: Sequence[Floor], rows: Sequence[Mapping[str, Any]]) -> Tuple[Floor, ...]:
    """Replace every room's radiators with the table rows assigned to it.

    Rows pointing at an unknown room are dropped.
    """
    by_room: Dict[str, List[Heater]] = {}
    for row in rows or []:
        room_id = row.get("room_id")
        if not room_id:
            continue
        by_room.setdefault(str(room_id), []).append(Heater(
            id=str(row.get("id") or new_id()),
            output=non_negative(row.get("output")),
            valve_type=str(row.get("valve_type") or ""),
            regime=str(row.get("regime") or "75/65/20"),
            brand=str(row.get("brand") or ""),
            series=str(row.get("series") or ""),
            height=parse_number(row.get("height")),
            width=parse_number(row.get("width")),
        ))
    return tuple(
        replace(floor, rooms=tuple(
            with_room_fields(room, heaters=by_room.get(room.id, ())) for room in floor.rooms
        ))
        for floor in floors
    )
