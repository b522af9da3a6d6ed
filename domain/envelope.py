"""
domain/envelope.py
==================
Transmission losses through the room envelope and linear thermal bridges.

    Q_T  = Σ A · U · ΔT                      [W]
    Q_WB = Σ ψ · L · ΔT          (explicit list)
         = Q_T · f_WB            (no list: flat allowance)

Inputs are taken as-is from the data model; every number goes through
``domain.units`` so malformed values contribute 0 instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from domain.defaults import SURFACE_LABELS, THERMAL_BRIDGE_DEFAULT_FACTOR
from domain.models import Room, ThermalBridge
from domain.units import non_negative, parse_number


@dataclass(frozen=True)
class TransmissionSurface:
    kind: str          # wall | window | door | ceiling | floor
    name: str
    area: float        # m²
    u_value: float     # W/(m²·K)
    delta_t: float     # K
    q_w: float         # W

    @property
    def label(self) -> str:
        return SURFACE_LABELS.get(self.kind, self.kind)


@dataclass(frozen=True)
class ThermalBridgeItem:
    id: str
    name: str
    psi_value: float   # W/(m·K)
    length: float      # m
    delta_t: float     # K
    q_w: float         # W


@dataclass(frozen=True)
class ThermalBridgeResult:
    items: List[ThermalBridgeItem] = field(default_factory=list)
    sum_w: float = 0.0
    factor_applied: Optional[float] = None   # None when the ψ list was used


def _surface(kind: str, name: str, area, u_value, delta_t: float) -> TransmissionSurface:
    a = non_negative(area)
    u = non_negative(u_value)
    return TransmissionSurface(kind=kind, name=name, area=a, u_value=u, delta_t=delta_t, q_w=a * u * delta_t)


def transmission_surfaces(room: Room, delta_t: float) -> List[TransmissionSurface]:
    """One entry per wall, window, door, ceiling and floor of ``room``.

    Ceiling and floor area default to the room area when not set separately.
    A missing U-value counts as 0; fill it beforehand with presets.
    """
    surfaces: List[TransmissionSurface] = []
    for idx, w in enumerate(room.walls, start=1):
        surfaces.append(_surface("wall", w.name or f"Wand {idx}", w.area, w.u_value, delta_t))
    for idx, w in enumerate(room.windows, start=1):
        surfaces.append(_surface("window", w.name or f"Fenster {idx}", w.area, w.u_value, delta_t))
    for idx, d in enumerate(room.doors, start=1):
        surfaces.append(_surface("door", d.name or f"Tür {idx}", d.area, d.u_value, delta_t))

    if room.ceiling is not None:
        area = room.ceiling.area if room.ceiling.area is not None else room.area
        surfaces.append(_surface("ceiling", "Decke", area, room.ceiling.u_value, delta_t))
    if room.floor is not None:
        area = room.floor.area if room.floor.area is not None else room.area
        surfaces.append(_surface("floor", "Boden", area, room.floor.u_value, delta_t))
    return surfaces


def transmission_sum(surfaces: Sequence[TransmissionSurface]) -> float:
    """Σ q over surfaces, each floored at 0 (no credit for negative ΔT)."""
    return sum(max(0.0, s.q_w) for s in surfaces)


def thermal_bridge_loss(
    bridges: Sequence[ThermalBridge],
    transmission_w: float,
    delta_t: float,
    factor=None,
) -> ThermalBridgeResult:
    """ψ-list when ``bridges`` is non-empty, otherwise ``transmission_w × factor``.

    ``factor`` defaults to 5 % and is floored at 0.
    """
    if bridges:
        items = []
        for tb in bridges:
            psi = non_negative(tb.psi_value)
            length = non_negative(tb.length)
            items.append(ThermalBridgeItem(
                id=tb.id or "",
                name=tb.name or "Wärmebrücke",
                psi_value=psi,
                length=length,
                delta_t=delta_t,
                q_w=psi * length * delta_t,
            ))
        return ThermalBridgeResult(items=items, sum_w=sum(i.q_w for i in items))

    raw = parse_number(factor)
    applied = THERMAL_BRIDGE_DEFAULT_FACTOR if raw is None else raw
    return ThermalBridgeResult(sum_w=transmission_w * max(0.0, applied), factor_applied=applied)


def envelope_area(room: Room) -> float:
    """Total envelope area; ceiling and floor fall back to the room area."""
    walls = sum(non_negative(w.area) for w in room.walls)
    windows = sum(non_negative(w.area) for w in room.windows)
    doors = sum(non_negative(d.area) for d in room.doors)
    ceiling = non_negative(room.ceiling.area) if room.ceiling else 0.0
    floor = non_negative(room.floor.area) if room.floor else 0.0
    return walls + windows + doors + (ceiling or non_negative(room.area)) + (floor or non_negative(room.area))
