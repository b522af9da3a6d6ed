"""
services/calculation_service.py
===============================
Runs the building heat-load calculation for the UI and exports.

Takes model objects (or raw stored dicts) → delegates to ``domain.heat_load`` →
returns ``CalculationResults`` and DataFrames ready for the UI layer.
No Dash imports here.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from domain.heat_load import CalculationResults, RoomSummary, calculate_building
from domain.models import BuildingMetadata, Floor, ProjectMeta
from domain.units import non_negative
from domain.ventilation import estimate_ventilation_w

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS: List[str] = [
    "Floor", "Room", "Transmission (kW)", "Ventilation (kW)", "Thermal bridges (kW)",
    "Safety margin (kW)", "Heat load (kW)", "Area (m²)", "Base load (kW)",
]

# Specific heat load [W/m²] upper bounds → class label
ENERGY_CLASSES = [(15, "A+"), (30, "A"), (50, "B"), (75, "C"), (100, "D"), (130, "E"), (160, "F"), (200, "G")]


def run_calculation(
    floors: Sequence[Floor],
    building: Optional[BuildingMetadata] = None,
    project_meta: Optional[ProjectMeta] = None,
    outdoor_temp_c: Optional[float] = None,
) -> CalculationResults:
    """Full building calculation; a pure function of its inputs."""
    results = calculate_building(floors, building, project_meta, outdoor_temp_c)
    logger.debug(
        "Calculated %d rooms at %.1f °C: %.2f kW",
        len(results.per_room), results.meta.effective_outdoor_temp_c, results.total_heat_load_kw,
    )
    return results


def run_calculation_from_payload(payload: Mapping[str, Any]) -> CalculationResults:
    """Same as ``run_calculation`` for a stored camelCase project document."""
    floors = [Floor.from_dict(f) for f in payload.get("floors") or [] if isinstance(f, Mapping)]
    building = BuildingMetadata.from_dict(payload.get("building") or {})
    meta = ProjectMeta.from_dict(payload.get("projectMeta") or {})
    return run_calculation(floors, building, meta, payload.get("outdoorTempC"))


def _room_lookup(floors: Sequence[Floor]) -> Dict[str, Any]:
    return {room.id: room for floor in floors for room in floor.rooms}


def display_ventilation_kw(summary: RoomSummary, room=None, outdoor_temp_c: float = 0.0) -> float:
    """Ventilation shown in tables: the calculated value, else the 0.33 estimate."""
    if summary.ventilation_kw > 0 or room is None:
        return summary.ventilation_kw
    indoor = room.target_temperature if room.target_temperature is not None else 20.0
    return estimate_ventilation_w(room.ventilation, room.volume, indoor - outdoor_temp_c) / 1000.0


def summary_dataframe(results: CalculationResults, floors: Sequence[Floor] = ()) -> pd.DataFrame:
    """One row per room for tables, charts and CSV export."""
    rooms = _room_lookup(floors)
    outdoor = results.meta.effective_outdoor_temp_c if results.meta else 0.0
    rows = []
    for r in results.per_room:
        vent = display_ventilation_kw(r, rooms.get(r.room_id), outdoor)
        rows.append({
            "Floor": r.floor_name,
            "Room": r.room_name,
            "Transmission (kW)": r.transmission_kw,
            "Ventilation (kW)": vent,
            "Thermal bridges (kW)": r.thermal_bridge_kw,
            "Safety margin (kW)": r.safety_margin_kw,
            "Heat load (kW)": r.room_heat_load_kw,
            "Area (m²)": r.area,
            "Base load (kW)": r.base_load_kw,
        })
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def watts_per_sqm(results: CalculationResults) -> float:
    area = results.total_area
    if area <= 0:
        return 0.0
    return results.total_heat_load_kw * 1000.0 / area


def energy_class(w_per_m2: float) -> str:
    for upper, label in ENERGY_CLASSES:
        if w_per_m2 <= upper:
            return label
    return "H"


def recommendation(total_kw: float, w_per_m2: float) -> str:
    """Short German sizing hint for the results page and exports."""
    if total_kw <= 0:
        return "Keine Heizlast berechnet."
    if w_per_m2 <= 50:
        return f"Wärmepumpe mit ca. {total_kw:.1f} kW gut geeignet; Flächenheizung empfohlen."
    if w_per_m2 <= 100:
        return f"Wärmepumpe mit ca. {total_kw:.1f} kW möglich; Heizkörper prüfen."
    return f"Hohe Heizlast ({total_kw:.1f} kW): Sanierung der Gebäudehülle prüfen."


def result_summary(results: CalculationResults) -> Dict[str, Any]:
    """Totals block shown above the room table."""
    w_m2 = watts_per_sqm(results)
    return {
        "totalRooms": len(results.per_room),
        "totalLoad": results.total_heat_load_kw,
        "totalArea": results.total_area,
        "wattsPerSqm": w_m2,
        "energyClass": energy_class(w_m2),
        "recommendation": recommendation(results.total_heat_load_kw, w_m2),
        "dhwAllowanceKW": results.meta.dhw_allowance_kw if results.meta else 0.0,
    }


def split_load_to_heaters(room_load_w: float, n_heaters: int) -> List[float]:
    """Equal split of a room load over its heaters [W]."""
    n = int(non_negative(n_heaters))
    if n <= 0:
        return []
    return [room_load_w / n] * n
