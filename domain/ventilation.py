"""
domain/ventilation.py
=====================
Canonical per-room ventilation settings and the ventilation / infiltration
loss formulas.

Stored projects use several generations of field names for the same quantity
(``airExchangeRate`` vs ``ach`` vs ``airChangesPerHour``, efficiency as fraction
or percent, ...). ``normalize_ventilation`` is the only place that knows about
those aliases; everything downstream works on ``VentilationConfig``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from domain.defaults import (
    AIR_DENSITY,
    AIR_HEAT_CAPACITY,
    DEFAULT_MVHR_EFFICIENCY,
    MAX_HEAT_RECOVERY_EFFICIENCY,
    VENTILATION_WH_PER_M3K,
    room_type_defaults,
)
from domain.units import clamp, clamp01, non_negative, parse_number

FLOW_ALIASES = ("airVolumeFlowM3h", "flowM3h", "supplyFlowM3h", "extractFlowM3h")
ACH_ALIASES = ("airChangesPerHour", "ach", "airExchangeRate")
EFFICIENCY_ALIASES = ("etaHRV", "heatRecoveryEfficiency", "heatRecovery")
ENABLED_ALIASES = ("enabled", "active", "includeInCalc")


@dataclass(frozen=True)
class VentilationConfig:
    """
    Ventilation settings of one room.

    Parameters
    ----------
    room_type                : Key into the room-type defaults
    target_temp              : Design indoor temperature          [°C]
    air_change_rate          : Mechanical air change rate (None = unset) [1/h]
    flow_m3h                 : Explicit mechanical flow, wins over ACH    [m³/h]
    ventilation_system       : Mechanical system with heat recovery present
    heat_recovery_efficiency : η as fraction, within [0, 0.95] (None = unset)
    internal_gains_w         : Internal gains subtracted from the load   [W]
    infiltration_ach         : Leakage air change rate, no recovery      [1/h]
    enabled                  : Include mechanical ventilation in the calc
    """

    room_type: str = "living"
    target_temp: Optional[float] = None
    air_change_rate: Optional[float] = None
    flow_m3h: Optional[float] = None
    ventilation_system: bool = False
    heat_recovery_efficiency: Optional[float] = None
    internal_gains_w: float = 0.0
    infiltration_ach: float = 0.0
    enabled: bool = True

    @property
    def efficiency(self) -> float:
        """η credited against the mechanical loss (0 without a system)."""
        if not self.ventilation_system:
            return 0.0
        eta = self.heat_recovery_efficiency
        return clamp(DEFAULT_MVHR_EFFICIENCY if eta is None else eta, 0.0, MAX_HEAT_RECOVERY_EFFICIENCY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomType": self.room_type,
            "targetTemp": self.target_temp,
            "airExchangeRate": self.air_change_rate,
            "flowM3h": self.flow_m3h,
            "ventilationSystem": self.ventilation_system,
            "heatRecoveryEfficiency": self.heat_recovery_efficiency,
            "internalGainsW": self.internal_gains_w,
            "infiltrationACH": self.infiltration_ach,
            "enabled": self.enabled,
        }


# ---------------------------------------------------------------------------
# Alias adapter
# ---------------------------------------------------------------------------

def normalize_efficiency(raw: Any) -> Optional[float]:
    """Efficiency as fraction: values ≤ 1 are fractions, larger ones percent."""
    n = parse_number(raw)
    if n is None:
        return None
    fraction = n if n <= 1 else n / 100.0
    return clamp(fraction, 0.0, MAX_HEAT_RECOVERY_EFFICIENCY)


def _first_positive(data: Mapping[str, Any], keys) -> Optional[float]:
    """First strictly positive alias; 0.0 if only zeros were given; None if none parse."""
    seen_zero = False
    for key in keys:
        n = parse_number(data.get(key))
        if n is None:
            continue
        if n > 0:
            return n
        seen_zero = True
    return 0.0 if seen_zero else None


def _first_flag(data: Mapping[str, Any], keys, default: bool) -> bool:
    for key in keys:
        if data.get(key) is not None:
            return bool(data[key])
    return default


def normalize_ventilation(raw: Any) -> Optional[VentilationConfig]:
    """Build a ``VentilationConfig`` from any stored ventilation payload.

    Returns None for a missing payload, passes an existing config through.
    """
    if raw is None:
        return None
    if isinstance(raw, VentilationConfig):
        return raw
    if not isinstance(raw, Mapping):
        return VentilationConfig()

    eta = None
    for key in EFFICIENCY_ALIASES:
        eta = normalize_efficiency(raw.get(key))
        if eta is not None:
            break
    if eta is None:
        pct = parse_number(raw.get("heatRecoveryPercent"))
        if pct is not None:
            eta = normalize_efficiency(pct / 100.0)

    flow = _first_positive(raw, FLOW_ALIASES)
    return VentilationConfig(
        room_type=str(raw.get("roomType") or "living"),
        target_temp=parse_number(raw.get("targetTemp")),
        air_change_rate=_first_positive(raw, ACH_ALIASES),
        flow_m3h=flow if flow else None,
        ventilation_system=bool(raw.get("ventilationSystem", False)),
        heat_recovery_efficiency=eta,
        internal_gains_w=non_negative(raw.get("internalGainsW")),
        infiltration_ach=non_negative(raw.get("infiltrationACH")),
        enabled=_first_flag(raw, ENABLED_ALIASES, True),
    )


def with_room_type(config: Optional[VentilationConfig], room_type: str) -> VentilationConfig:
    """Switch room type and re-seed target temperature and ACH from its defaults."""
    temp, ach = room_type_defaults(room_type)
    return replace(config or VentilationConfig(), room_type=room_type, target_temp=temp, air_change_rate=ach)


def with_heat_recovery_percent(config: VentilationConfig, percent: Any) -> VentilationConfig:
    """The UI edits η in percent; storage keeps the fraction."""
    n = parse_number(percent)
    return replace(config, heat_recovery_efficiency=None if n is None else normalize_efficiency(n / 100.0))


# ---------------------------------------------------------------------------
# Loss formulas
# ---------------------------------------------------------------------------

def mechanical_flow_m3_s(config: Optional[VentilationConfig], volume_m3: float) -> float:
    """Mechanical volume flow [m³/s]; explicit flow wins over ACH × volume."""
    if config is None or not config.enabled:
        return 0.0
    if config.flow_m3h:
        return non_negative(config.flow_m3h) / 3600.0
    ach = non_negative(config.air_change_rate)
    volume = non_negative(volume_m3)
    if ach <= 0 or volume <= 0:
        return 0.0
    return volume * ach / 3600.0


def air_loss_w(vdot_m3_s: float, delta_t: float) -> float:
    """ṅ · ρ · cp · ΔT; exactly 0 unless both flow and ΔT are positive."""
    if vdot_m3_s <= 0 or delta_t <= 0:
        return 0.0
    return vdot_m3_s * AIR_DENSITY * AIR_HEAT_CAPACITY * delta_t


def ventilation_loss_w(vdot_m3_s: float, delta_t: float, efficiency: float) -> float:
    """Mechanical loss with heat-recovery credit on ΔT."""
    return air_loss_w(vdot_m3_s, delta_t * (1.0 - clamp01(efficiency)))


def infiltration_loss_w(volume_m3: float, ach: float, delta_t: float) -> float:
    """Leakage loss at raw ΔT, without heat recovery."""
    volume = non_negative(volume_m3)
    ach = non_negative(ach)
    if volume <= 0 or ach <= 0:
        return 0.0
    return air_loss_w(volume * ach / 3600.0, delta_t)


def estimate_ventilation_w(config: Optional[VentilationConfig], volume_m3: float, delta_t: float) -> float:
    """Quick estimate 0.33 · V̇[m³/h] · ΔT · (1 − η), used when no detailed value exists."""
    if config is None or not config.enabled or delta_t <= 0:
        return 0.0
    if not config.flow_m3h and config.air_change_rate is None and config.infiltration_ach:
        config = replace(config, air_change_rate=config.infiltration_ach)
    flow_m3h = mechanical_flow_m3_s(config, volume_m3) * 3600.0
    return max(0.0, VENTILATION_WH_PER_M3K * flow_m3h * delta_t * (1.0 - config.efficiency))
