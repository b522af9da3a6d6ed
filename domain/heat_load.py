"""
domain/heat_load.py
===================
Room- and building-level design heat load (steady state, DIN EN 12831 style).

Two room sub-models are kept side by side on purpose:

* ``calculate_din_sections`` – detailed sections (transmission per surface,
  thermal bridges by ψ-list or flat factor, mechanical ventilation with heat
  recovery, infiltration, internal gains, intermittent-heating factor).
* ``summarize_room`` – the compact per-room view shown in the results table and
  exports: transmission + ventilation + ψ-bridges with fallback U-values and a
  flat 10 % safety margin, in kW.

``calculate_building`` runs both for every room, applies the bivalence clamp,
adds the domestic-hot-water allowance and rolls up the DIN totals.

All functions are pure; temperatures in °C, powers in W unless suffixed _kw.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from domain.defaults import (
    DEFAULT_INDOOR_TEMP_C,
    DESIGN_OUTDOOR_TEMP_C,
    DHW_KWH_PER_LITRE,
    FALLBACK_ACH,
    FALLBACK_DOOR_U,
    FALLBACK_ROOF_U,
    FALLBACK_WALL_U,
    FALLBACK_WINDOW_U,
    ROOM_DESIGN_TEMPS,
    SAFETY_MARGIN_FRACTION,
    floor_fallback_u,
)
from domain.envelope import (
    ThermalBridgeResult,
    TransmissionSurface,
    thermal_bridge_loss,
    transmission_sum,
    transmission_surfaces,
)
from domain.models import BuildingMetadata, Floor, ProjectMeta, Room
from domain.units import non_negative, parse_number, positive_or_none, w_to_kw
from domain.ventilation import (
    VentilationConfig,
    infiltration_loss_w,
    mechanical_flow_m3_s,
    ventilation_loss_w,
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class VentilationSection:
    vdot_m3_s: float = 0.0
    effective_dt: float = 0.0
    efficiency: float = 0.0
    q_w: float = 0.0


@dataclass(frozen=True)
class DinSections:
    """Detailed breakdown of one room [W]."""

    surfaces: List[TransmissionSurface]
    transmission_w: float
    thermal_bridge: ThermalBridgeResult
    ventilation: VentilationSection
    infiltration_w: float
    internal_gains_w: float
    intermittent_factor: float
    total_before_factor_w: float
    total_w: float
    delta_t: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transmission": {
                "surfaces": [
                    {"kind": s.kind, "name": s.name, "area": s.area, "uValue": s.u_value,
                     "deltaT": s.delta_t, "qW": s.q_w}
                    for s in self.surfaces
                ],
                "sumW": self.transmission_w,
            },
            "thermalBridge": {
                "items": [
                    {"id": i.id, "name": i.name, "psiValue": i.psi_value, "length": i.length,
                     "deltaT": i.delta_t, "qW": i.q_w}
                    for i in self.thermal_bridge.items
                ],
                "sumW": self.thermal_bridge.sum_w,
                "factorApplied": self.thermal_bridge.factor_applied,
            },
            "ventilation": {
                "vdot_m3_s": self.ventilation.vdot_m3_s,
                "effectiveDT": self.ventilation.effective_dt,
                "efficiency": self.ventilation.efficiency,
                "qW": self.ventilation.q_w,
            },
            "infiltrationW": self.infiltration_w,
            "internalGainsW": self.internal_gains_w,
            "intermittentFactor": self.intermittent_factor,
            "totalW": self.total_w,
        }


@dataclass(frozen=True)
class RoomSummary:
    """Per-room result row [kW], plus the detailed DIN sections."""

    room_id: str
    room_name: str
    floor_name: str
    transmission_kw: float
    ventilation_kw: float
    thermal_bridge_kw: float
    safety_margin_kw: float
    room_heat_load_kw: float
    area: float
    din: Optional[DinSections] = None

    @property
    def base_load_kw(self) -> float:
        """Load without the safety margin."""
        return self.transmission_kw + self.ventilation_kw + self.thermal_bridge_kw

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomId": self.room_id,
            "roomName": self.room_name,
            "floorName": self.floor_name,
            "transmissionLoss": self.transmission_kw,
            "ventilationLoss": self.ventilation_kw,
            "thermalBridgeLoss": self.thermal_bridge_kw,
            "safetyMargin": self.safety_margin_kw,
            "roomHeatLoad": self.room_heat_load_kw,
            "area": self.area,
            "din": self.din.to_dict() if self.din else None,
        }


@dataclass(frozen=True)
class DinTotals:
    transmission_w: float = 0.0
    thermal_bridge_w: float = 0.0
    ventilation_w: float = 0.0
    total_w: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "transmissionW": self.transmission_w,
            "thermalBridgeW": self.thermal_bridge_w,
            "ventilationW": self.ventilation_w,
            "totalW": self.total_w,
        }


@dataclass(frozen=True)
class CalculationMeta:
    effective_outdoor_temp_c: float
    bivalence_applied_c: Optional[float]
    dhw_allowance_kw: float
    total_space_kw: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effectiveOutdoorTempC": self.effective_outdoor_temp_c,
            "bivalenceAppliedC": self.bivalence_applied_c,
            "dhwAllowanceKW": self.dhw_allowance_kw,
            "totalSpaceKW": self.total_space_kw,
        }


@dataclass(frozen=True)
class CalculationResults:
    per_room: List[RoomSummary] = field(default_factory=list)
    total_heat_load_kw: float = 0.0
    din_totals: DinTotals = field(default_factory=DinTotals)
    meta: Optional[CalculationMeta] = None

    @property
    def total_area(self) -> float:
        return sum(r.area for r in self.per_room)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "perRoomLoads": [r.to_dict() for r in self.per_room],
            "totalHeatLoadKW": self.total_heat_load_kw,
            "dinTotals": self.din_totals.to_dict(),
            "meta": self.meta.to_dict() if self.meta else None,
        }


# ---------------------------------------------------------------------------
# Design conditions
# ---------------------------------------------------------------------------

def resolve_design_outdoor_temp(building: Optional[BuildingMetadata]) -> float:
    """Manual override, then looked-up value, then the -10 °C fallback."""
    if building is not None and building.design_outdoor_temp is not None:
        return building.design_outdoor_temp
    return DESIGN_OUTDOOR_TEMP_C


def apply_bivalence(outdoor_temp_c: float, bivalence_c: Any) -> float:
    """Never size below the bivalence point: max(outdoor, bivalence)."""
    b = parse_number(bivalence_c)
    return outdoor_temp_c if b is None else max(outdoor_temp_c, b)


def dhw_allowance_kw(residents: Any, litres_per_person_per_day: Any) -> float:
    """Continuous DHW draw: residents · L · 0.046 kWh/L / 24 h."""
    n = parse_number(residents) or 0.0
    litres = parse_number(litres_per_person_per_day) or 0.0
    if n <= 0 or litres <= 0:
        return 0.0
    return n * litres * DHW_KWH_PER_LITRE / 24.0


# ---------------------------------------------------------------------------
# DIN sections
# ---------------------------------------------------------------------------

def din_target_temperature(room: Room) -> float:
    return (
        non_negative(room.target_temperature)
        or ROOM_DESIGN_TEMPS.get(room.room_type, 0.0)
        or DEFAULT_INDOOR_TEMP_C
    )


def calculate_din_sections(
    room: Room,
    outdoor_temp_c: float = DESIGN_OUTDOOR_TEMP_C,
    project_meta: Optional[ProjectMeta] = None,
) -> DinSections:
    """Detailed heat load of ``room`` at ``outdoor_temp_c``."""
    meta = project_meta or ProjectMeta()
    delta_t = din_target_temperature(room) - outdoor_temp_c

    surfaces = transmission_surfaces(room, delta_t)
    q_t = transmission_sum(surfaces)
    bridges = thermal_bridge_loss(room.thermal_bridges, q_t, delta_t, meta.thermal_bridge_factor)

    volume = room.volume
    config = room.ventilation or VentilationConfig()
    vdot = mechanical_flow_m3_s(config, volume)
    eta = config.efficiency
    q_v = ventilation_loss_w(vdot, delta_t, eta)

    inf_ach = config.infiltration_ach or non_negative(meta.infiltration_ach)
    q_inf = infiltration_loss_w(volume, inf_ach, delta_t)

    gains = room.gains_w
    before = max(0.0, q_t + bridges.sum_w + q_v + q_inf - gains)
    factor = max(1.0, non_negative(meta.intermittent_factor) or 1.0)

    return DinSections(
        surfaces=surfaces,
        transmission_w=q_t,
        thermal_bridge=bridges,
        ventilation=VentilationSection(vdot_m3_s=vdot, effective_dt=delta_t * (1 - eta), efficiency=eta, q_w=q_v),
        infiltration_w=q_inf,
        internal_gains_w=gains,
        intermittent_factor=factor,
        total_before_factor_w=before,
        total_w=before * factor,
        delta_t=delta_t,
    )


# ---------------------------------------------------------------------------
# Summary view
# ---------------------------------------------------------------------------

def resolve_u(u_value: Any, r_value: Any = None, fallback: float = 1.0) -> float:
    """U if positive, else 1/R if R positive, else ``fallback``."""
    u = positive_or_none(u_value)
    if u is not None:
        return u
    r = positive_or_none(r_value)
    if r is not None:
        return 1.0 / r
    return fallback


def summary_elements(room: Room) -> List[tuple]:
    """(name, area, U) for every element, with fallback U-values filled in.

    Ceiling and floor are always counted at the room area unless configured
    otherwise; zero-area ceiling/floor entries are skipped.
    """
    elements = [(w.name or "Wand", w.area, resolve_u(w.u_value, w.r_value, FALLBACK_WALL_U)) for w in room.walls]

    ceiling = room.ceiling
    ceil_area = ceiling.area if ceiling is not None and ceiling.area is not None else room.area
    if ceil_area > 0:
        elements.append(("Decke", ceil_area, resolve_u(ceiling.u_value if ceiling else None, None, FALLBACK_ROOF_U)))

    floor = room.floor
    floor_area = floor.area if floor is not None and floor.area is not None else room.area
    if floor_area > 0:
        fallback = floor_fallback_u(floor.floor_type if floor else "")
        elements.append(("Boden", floor_area, resolve_u(floor.u_value if floor else None, None, fallback)))

    elements += [(w.type or "Fenster", w.area, resolve_u(w.u_value, None, FALLBACK_WINDOW_U)) for w in room.windows]
    elements += [("Tür", d.area, resolve_u(d.u_value, None, FALLBACK_DOOR_U)) for d in room.doors]
    return elements


def summarize_room(
    room: Room,
    outdoor_temp_c: float,
    building: Optional[BuildingMetadata] = None,
    floor_name: str = "",
) -> RoomSummary:
    """Compact per-room loads in kW with a flat 10 % safety margin."""
    if room.target_temperature is not None:
        indoor = room.target_temperature
    elif building is not None and building.temperature_preference is not None:
        indoor = building.temperature_preference
    else:
        indoor = DEFAULT_INDOOR_TEMP_C
    delta_t = max(0.0, indoor - outdoor_temp_c)

    q_t = sum(non_negative(area) * u * delta_t for _, area, u in summary_elements(room))

    config = room.ventilation or VentilationConfig()
    if config.air_change_rate is None:
        config = replace(config, air_change_rate=config.infiltration_ach or FALLBACK_ACH)
    vdot = mechanical_flow_m3_s(config, room.volume)
    q_v = ventilation_loss_w(vdot, delta_t, config.efficiency)

    q_tb = sum(non_negative(tb.psi_value) * non_negative(tb.length) * delta_t for tb in room.thermal_bridges)

    total = q_t + q_v + q_tb
    safety = total * SAFETY_MARGIN_FRACTION
    return RoomSummary(
        room_id=room.id,
        room_name=room.name or "Raum",
        floor_name=floor_name,
        transmission_kw=w_to_kw(q_t),
        ventilation_kw=w_to_kw(q_v),
        thermal_bridge_kw=w_to_kw(q_tb),
        safety_margin_kw=w_to_kw(safety),
        room_heat_load_kw=w_to_kw(total + safety),
        area=non_negative(room.area),
    )


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------

def calculate_building(
    floors: Sequence[Floor],
    building: Optional[BuildingMetadata] = None,
    project_meta: Optional[ProjectMeta] = None,
    outdoor_temp_c: Optional[float] = None,
) -> CalculationResults:
    """Run both room sub-models over every room and aggregate.

    ``outdoor_temp_c`` defaults to the building's design temperature; it is
    clamped to the bivalence temperature before any room is evaluated.
    """
    meta = project_meta or ProjectMeta()
    raw_outdoor = resolve_design_outdoor_temp(building) if outdoor_temp_c is None else outdoor_temp_c
    bivalence = meta.dimensioning.bivalence_temperature_c
    outdoor = apply_bivalence(raw_outdoor, bivalence)

    per_room: List[RoomSummary] = []
    for floor in floors:
        for room in floor.rooms:
            summary = summarize_room(room, outdoor, building, floor.name)
            din = calculate_din_sections(room, outdoor, meta)
            per_room.append(replace(summary, din=din))

    total_space_kw = sum(r.room_heat_load_kw for r in per_room)
    dhw_kw = dhw_allowance_kw(meta.dimensioning.residents, meta.dimensioning.dhw_per_resident_l_per_day)

    din_totals = DinTotals(
        transmission_w=sum(r.din.transmission_w for r in per_room),
        thermal_bridge_w=sum(r.din.thermal_bridge.sum_w for r in per_room),
        ventilation_w=sum(r.din.ventilation.q_w for r in per_room),
        total_w=sum(r.din.total_w for r in per_room),
    )
    return CalculationResults(
        per_room=per_room,
        total_heat_load_kw=total_space_kw + dhw_kw,
        din_totals=din_totals,
        meta=CalculationMeta(
            effective_outdoor_temp_c=outdoor,
            bivalence_applied_c=bivalence,
            dhw_allowance_kw=dhw_kw,
            total_space_kw=total_space_kw,
        ),
    )
