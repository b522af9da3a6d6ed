"""
services/project_state.py
=========================
Explicit application state of the wizard and the actions that change it.

``ProjectState`` is immutable; every action returns a new state. The Dash
callbacks serialise it into a ``dcc.Store`` via ``to_dict`` / ``from_dict``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from domain.heat_load import CalculationResults
from domain.models import BuildingMetadata, Dimensioning, Floor, ProjectMeta, Room
from services.preset_service import apply_building_thermal_bridge_preset, new_room, reapply_presets_if_changed
from services.validation_service import validate_project

logger = logging.getLogger(__name__)

STEP_BUILDING, STEP_FLOORS, STEP_RESULTS, STEP_MATERIALS = 0, 1, 2, 3
LAST_STEP = STEP_MATERIALS


@dataclass(frozen=True)
class ProjectState:
    step: int = STEP_BUILDING
    building: BuildingMetadata = field(default_factory=BuildingMetadata)
    project_meta: ProjectMeta = field(default_factory=ProjectMeta)
    floors: Tuple[Floor, ...] = ()
    selected_room_id: Optional[str] = None
    results: Optional[CalculationResults] = None

    def find_room(self, room_id: Optional[str]) -> Optional[Room]:
        for floor in self.floors:
            for room in floor.rooms:
                if room.id == room_id:
                    return room
        return None

    @property
    def selected_room(self) -> Optional[Room]:
        return self.find_room(self.selected_room_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "building": self.building.to_dict(),
            "projectMeta": self.project_meta.to_dict(),
            "floors": [f.to_dict() for f in self.floors],
            "selectedRoomId": self.selected_room_id,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ProjectState":
        """Results are not serialised; recalculate after loading."""
        if not data:
            return cls()
        return cls(
            step=go_to_step(cls(), data.get("step") or 0).step,
            building=BuildingMetadata.from_dict(data.get("building") or {}),
            project_meta=ProjectMeta.from_dict(data.get("projectMeta") or {}),
            floors=tuple(Floor.from_dict(f) for f in data.get("floors") or []),
            selected_room_id=data.get("selectedRoomId"),
        )


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def go_to_step(state: ProjectState, step: Any) -> ProjectState:
    try:
        target = int(step)
    except (TypeError, ValueError):
        return state
    return replace(state, step=max(STEP_BUILDING, min(LAST_STEP, target)))


def next_step(state: ProjectState) -> ProjectState:
    return go_to_step(state, state.step + 1)


def prev_step(state: ProjectState) -> ProjectState:
    return go_to_step(state, state.step - 1)


# ---------------------------------------------------------------------------
# Building / project meta
# ---------------------------------------------------------------------------

def set_building(state: ProjectState, building: BuildingMetadata) -> ProjectState:
    """Replace building data.

    Rooms get U-value presets re-applied if era/insulation changed and their
    thermal-bridge allowance follows the building preset.
    """
    floors = tuple(
        replace(f, rooms=tuple(
            apply_building_thermal_bridge_preset(reapply_presets_if_changed(r, state.building, building), building)
            for r in f.rooms
        ))
        for f in state.floors
    )
    return replace(state, building=building, floors=floors)


def update_building(state: ProjectState, **changes: Any) -> ProjectState:
    return set_building(state, replace(state.building, **changes))


def set_project_meta(state: ProjectState, project_meta: ProjectMeta) -> ProjectState:
    return replace(state, project_meta=project_meta)


def set_dimensioning(state: ProjectState, **changes: Any) -> ProjectState:
    dim: Dimensioning = replace(state.project_meta.dimensioning, **changes)
    return replace(state, project_meta=replace(state.project_meta, dimensioning=dim))


# ---------------------------------------------------------------------------
# Floors
# ---------------------------------------------------------------------------

def set_floors(state: ProjectState, floors: Sequence[Floor]) -> ProjectState:
    """Replace all floors; a selection pointing at a removed room is cleared."""
    new = replace(state, floors=tuple(floors))
    if new.selected_room is None:
        new = replace(new, selected_room_id=None)
    return new


def add_floor(state: ProjectState, name: Optional[str] = None) -> ProjectState:
    floor = Floor(name=name or f"Stockwerk {len(state.floors) + 1}")
    return replace(state, floors=state.floors + (floor,))


def remove_floor(state: ProjectState, floor_id: str) -> ProjectState:
    """Drop the floor and its rooms; clear the selection if it pointed inside."""
    removed = next((f for f in state.floors if f.id == floor_id), None)
    if removed is None:
        return state
    selected = state.selected_room_id
    if any(r.id == selected for r in removed.rooms):
        selected = None
    return replace(state, floors=tuple(f for f in state.floors if f.id != floor_id), selected_room_id=selected)


def rename_floor(state: ProjectState, floor_id: str, name: str) -> ProjectState:
    return replace(state, floors=tuple(replace(f, name=name) if f.id == floor_id else f for f in state.floors))


def reorder_floors(state: ProjectState, floor_ids: Sequence[str]) -> ProjectState:
    """Order floors by ``floor_ids``; unknown ids are ignored, missing floors appended."""
    by_id = {f.id: f for f in state.floors}
    ordered = [by_id[i] for i in floor_ids if i in by_id]
    ordered += [f for f in state.floors if f.id not in set(floor_ids)]
    return replace(state, floors=tuple(ordered))


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------

def _map_floor(state: ProjectState, floor_id: str, fn) -> ProjectState:
    return replace(state, floors=tuple(fn(f) if f.id == floor_id else f for f in state.floors))


def add_room(state: ProjectState, floor_id: str, name: str = "Neuer Raum") -> ProjectState:
    """Append a preset-seeded room to the floor and select it."""
    room = new_room(name, state.building)
    new_state = _map_floor(state, floor_id, lambda f: replace(f, rooms=f.rooms + (room,)))
    if new_state.floors == state.floors:
        return state
    return replace(new_state, selected_room_id=room.id)


def remove_room(state: ProjectState, room_id: str) -> ProjectState:
    floors = tuple(replace(f, rooms=tuple(r for r in f.rooms if r.id != room_id)) for f in state.floors)
    selected = None if state.selected_room_id == room_id else state.selected_room_id
    return replace(state, floors=floors, selected_room_id=selected)


def replace_room(state: ProjectState, room: Room) -> ProjectState:
    floors = tuple(
        replace(f, rooms=tuple(room if r.id == room.id else r for r in f.rooms)) for f in state.floors
    )
    return replace(state, floors=floors)


def rename_room(state: ProjectState, room_id: str, name: str) -> ProjectState:
    room = state.find_room(room_id)
    return state if room is None else replace_room(state, replace(room, name=name))


def select_room(state: ProjectState, room_id: Optional[str]) -> ProjectState:
    if room_id is not None and state.find_room(room_id) is None:
        return state
    return replace(state, selected_room_id=room_id)


def reorder_rooms(state: ProjectState, floor_id: str, room_ids: Sequence[str]) -> ProjectState:
    def _reorder(floor: Floor) -> Floor:
        by_id = {r.id: r for r in floor.rooms}
        ordered = [by_id[i] for i in room_ids if i in by_id]
        ordered += [r for r in floor.rooms if r.id not in set(room_ids)]
        return replace(floor, rooms=tuple(ordered))
    return _map_floor(state, floor_id, _reorder)


def move_room(state: ProjectState, room_id: str, target_floor_id: str) -> ProjectState:
    room = state.find_room(room_id)
    if room is None or not any(f.id == target_floor_id for f in state.floors):
        return state
    stripped = tuple(replace(f, rooms=tuple(r for r in f.rooms if r.id != room_id)) for f in state.floors)
    return _map_floor(replace(state, floors=stripped), target_floor_id,
                      lambda f: replace(f, rooms=f.rooms + (room,)))


# ---------------------------------------------------------------------------
# Results / loading
# ---------------------------------------------------------------------------

def set_results(state: ProjectState, results: Optional[CalculationResults]) -> ProjectState:
    """Store the latest results; the previous ones are discarded."""
    return replace(state, results=results)


def load_project(payload: Mapping[str, Any]) -> ProjectState:
    """State from a stored heat-load document (as returned by the repository)."""
    state = ProjectState.from_dict({
        "building": payload.get("building") or {},
        "projectMeta": payload.get("projectMeta") or {},
        "floors": payload.get("floors") or [],
    })
    logger.debug("Loaded project with %d floors", len(state.floors))
    return state


class ProjectIncomplete(ValueError):
    """Save refused; ``issues`` lists what is missing."""

    def __init__(self, issues):
        super().__init__(f"{len(issues)} open issue(s)")
        self.issues = issues


def save_payload(state: ProjectState, results: Optional[CalculationResults] = None) -> Dict[str, Any]:
    """Document body for the heat-load repository.

    Raises ``ProjectIncomplete`` while building or rooms fail validation.
    """
    issues = validate_project(state.building, state.floors)
    if issues:
        raise ProjectIncomplete(issues)
    results = results or state.results
    return {
        "building": state.building.to_dict(),
        "pvHeatPump": state.building.pv_heat_pump.to_dict(),
        "projectMeta": state.project_meta.to_dict(),
        "floors": [f.to_dict() for f in state.floors],
        "results": results.to_dict() if results else None,
    }
