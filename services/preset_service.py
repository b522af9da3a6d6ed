"""
services/preset_service.py
==========================
Applies era/insulation U-value presets and thermal-bridge allowances to rooms.

The merge is fill-missing-only: a surface keeps any positive U-value the user
entered and only empty or non-positive ones are replaced, unless ``force``.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from domain.envelope import envelope_area
from domain.models import BuildingMetadata, CeilingConfig, FloorConfig, Room, ThermalBridge, remove_element
from domain.presets import DEFAULT_THERMAL_BRIDGE_K, get_u_value_preset, thermal_bridge_k
from domain.units import positive_or_none

logger = logging.getLogger(__name__)

ALLOWANCE_BRIDGE_ID = "default-k_tb"


def _fill(current: Any, preset: float, force: bool) -> float:
    if force:
        return preset
    u = positive_or_none(current)
    return preset if u is None else u


def apply_preset_u_values(
    room: Room,
    building: Optional[BuildingMetadata] = None,
    force: bool = False,
) -> Room:
    """Return ``room`` with missing U-values taken from the building's presets."""
    era = building.building_era if building else None
    level = building.insulation_level if building else None
    preset = get_u_value_preset(era, level)

    ceiling = room.ceiling
    if ceiling is not None:
        ceiling = replace(ceiling, u_value=_fill(ceiling.u_value, preset.ceiling, force))
    floor = room.floor
    if floor is not None:
        floor = replace(floor, u_value=_fill(floor.u_value, preset.floor, force))

    return replace(
        room,
        walls=tuple(replace(w, u_value=_fill(w.u_value, preset.wall, force)) for w in room.walls),
        windows=tuple(replace(w, u_value=_fill(w.u_value, preset.window, force)) for w in room.windows),
        doors=tuple(replace(d, u_value=_fill(d.u_value, preset.door, force)) for d in room.doors),
        ceiling=ceiling,
        floor=floor,
    )


def new_room(name: str = "Neuer Raum", building: Optional[BuildingMetadata] = None) -> Room:
    """Fresh room with ceiling and floor, seeded with the current presets."""
    room = Room(name=name, ceiling=CeilingConfig(), floor=FloorConfig())
    return apply_building_thermal_bridge_preset(apply_preset_u_values(room, building), building)


def apply_thermal_bridge_allowance(room: Room, k_tb: float = DEFAULT_THERMAL_BRIDGE_K) -> Room:
    """Insert or replace the synthetic ``k_tb × A_envelope`` bridge item.

    The room then uses the ψ-list policy instead of the percentage allowance.
    """
    item = ThermalBridge(
        id=ALLOWANCE_BRIDGE_ID,
        name="Default allowance (k_tb × A)",
        psi_value=max(0.0, float(k_tb)),
        length=envelope_area(room),
    )
    bridges = list(room.thermal_bridges)
    for idx, tb in enumerate(bridges):
        if tb.id == ALLOWANCE_BRIDGE_ID:
            bridges[idx] = item
            break
    else:
        bridges.append(item)
    return replace(room, thermal_bridges=tuple(bridges))


def apply_building_thermal_bridge_preset(room: Room, building: Optional[BuildingMetadata]) -> Room:
    """Allowance from the building's named preset (standard, dinA005, ...).

    Without a preset the allowance item is dropped again and the room falls back
    to the percentage allowance.
    """
    if building is None or not building.thermal_bridge_preset:
        return remove_element(room, ALLOWANCE_BRIDGE_ID)
    return apply_thermal_bridge_allowance(room, thermal_bridge_k(building.thermal_bridge_preset))


def reapply_presets_if_changed(
    room: Room,
    previous: Optional[BuildingMetadata],
    current: BuildingMetadata,
) -> Room:
    """Re-run the fill-missing merge only when era or insulation changed."""
    if previous is not None and (
        previous.building_era == current.building_era
        and previous.insulation_level == current.insulation_level
    ):
        return room
    logger.debug("Re-applying U-value presets to room %s (%s / %s)",
                 room.id, current.building_era.value, current.insulation_level.value)
    return apply_preset_u_values(room, current)
