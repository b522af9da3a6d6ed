"""
services/validation_service.py
==============================
Submit-time checks on rooms and building data.

The calculators accept anything; these checks only decide whether a project
may be saved or submitted. Issues are returned, never raised.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from domain.heat_load import resolve_u
from domain.models import BuildingMetadata, Floor, Room
from domain.units import non_negative

MIN_ROOM_HEIGHT: float = 2.0     # m
MAX_ROOM_HEIGHT: float = 4.0     # m
MIN_ROOM_TEMP: float = 10.0      # °C
MAX_ROOM_TEMP: float = 30.0      # °C


@dataclass(frozen=True)
class ValidationIssue:
    floor: str
    room: str
    problem: str


def _has_envelope(room: Room) -> bool:
    elements = [(w.area, resolve_u(w.u_value, w.r_value, 0.0)) for w in room.walls]
    elements += [(w.area, resolve_u(w.u_value, None, 0.0)) for w in room.windows]
    elements += [(d.area, resolve_u(d.u_value, None, 0.0)) for d in room.doors]
    if room.ceiling is not None:
        elements.append((room.ceiling.area or room.area, resolve_u(room.ceiling.u_value, None, 0.0)))
    if room.floor is not None:
        elements.append((room.floor.area or room.area, resolve_u(room.floor.u_value, None, 0.0)))
    return any(non_negative(a) > 0 and u > 0 for a, u in elements)


def room_issues(room: Room, floor_name: str = "") -> List[ValidationIssue]:
    issues: List[str] = []
    if not room.name.strip():
        issues.append("Name fehlt")
    if non_negative(room.area) <= 0:
        issues.append("Fläche muss größer 0 sein")
    if not MIN_ROOM_HEIGHT <= non_negative(room.height) <= MAX_ROOM_HEIGHT:
        issues.append(f"Raumhöhe muss zwischen {MIN_ROOM_HEIGHT:g} und {MAX_ROOM_HEIGHT:g} m liegen")
    t = room.target_temperature
    if t is not None and not MIN_ROOM_TEMP <= t <= MAX_ROOM_TEMP:
        issues.append(f"Solltemperatur muss zwischen {MIN_ROOM_TEMP:g} und {MAX_ROOM_TEMP:g} °C liegen")
    if not _has_envelope(room):
        issues.append("Mindestens ein Bauteil mit Fläche und U-Wert erforderlich")
    label = room.name or "Unbenannter Raum"
    return [ValidationIssue(floor=floor_name, room=label, problem=p) for p in issues]


def find_incomplete_rooms(floors: Sequence[Floor]) -> List[ValidationIssue]:
    return [issue for floor in floors for room in floor.rooms for issue in room_issues(room, floor.name)]


def building_issues(building: Optional[BuildingMetadata]) -> List[ValidationIssue]:
    if building is None:
        return [ValidationIssue("", "", "Gebäudedaten fehlen")]
    missing = []
    if not building.building_type.strip():
        missing.append("Gebäudetyp fehlt")
    if not building.address.strip():
        missing.append("Adresse fehlt")
    if not building.postal_code.strip():
        missing.append("Postleitzahl fehlt")
    return [ValidationIssue("", "", p) for p in missing]


def validate_project(building: Optional[BuildingMetadata], floors: Sequence[Floor]) -> List[ValidationIssue]:
    """All blocking issues; an empty list means the project may be saved."""
    issues = building_issues(building) + find_incomplete_rooms(floors)
    if not any(floor.rooms for floor in floors):
        issues.append(ValidationIssue("", "", "Mindestens ein Raum erforderlich"))
    return issues
