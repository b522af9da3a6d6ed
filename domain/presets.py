"""
domain/presets.py
=================
U-value presets by construction era × insulation level.

Each table is a baseline U-value per era scaled by an insulation multiplier and
rounded to 2 decimals:

    U = round2(ERA_BASE[era] · LEVEL_MULTIPLIER[level])

Pure data plus lookup helpers. All values in W/(m²·K).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from domain.units import parse_number, round2


class BuildingEra(str, Enum):
    PRE_1978 = "pre1978"
    Y1978_1995 = "1978-1995"
    Y1996_2001 = "1996-2001"
    Y2002_2009 = "2002-2009"
    Y2010_2015 = "2010-2015"
    Y2016_2020 = "2016-2020"
    Y2021_PLUS = "2021+"


class InsulationLevel(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    RENOVATED = "renovated"
    HIGH_EFFICIENCY = "high"


DEFAULT_ERA = BuildingEra.Y2002_2009
DEFAULT_INSULATION = InsulationLevel.PARTIAL

LEVEL_MULTIPLIER: Dict[InsulationLevel, float] = {
    InsulationLevel.NONE:            1.00,
    InsulationLevel.PARTIAL:         0.80,
    InsulationLevel.RENOVATED:       0.60,
    InsulationLevel.HIGH_EFFICIENCY: 0.45,
}

ERA_LABELS: Dict[BuildingEra, str] = {
    BuildingEra.PRE_1978:   "bis 1977",
    BuildingEra.Y1978_1995: "1978–1995",
    BuildingEra.Y1996_2001: "1996–2001",
    BuildingEra.Y2002_2009: "2002–2009",
    BuildingEra.Y2010_2015: "2010–2015",
    BuildingEra.Y2016_2020: "2016–2020",
    BuildingEra.Y2021_PLUS: "ab 2021",
}

INSULATION_LABELS: Dict[InsulationLevel, str] = {
    InsulationLevel.NONE:            "Unsaniert",
    InsulationLevel.PARTIAL:         "Teilsaniert",
    InsulationLevel.RENOVATED:       "Saniert",
    InsulationLevel.HIGH_EFFICIENCY: "Hocheffizient",
}

# ---------------------------------------------------------------------------
# Era baselines (unrenovated)
# ---------------------------------------------------------------------------
_ERAS = list(BuildingEra)

_WALL_BASE    = dict(zip(_ERAS, [1.30, 1.00, 0.80, 0.50, 0.35, 0.28, 0.22]))
_WINDOW_BASE  = dict(zip(_ERAS, [3.00, 2.70, 1.90, 1.60, 1.30, 1.10, 0.95]))
_CEILING_BASE = dict(zip(_ERAS, [1.00, 0.80, 0.50, 0.30, 0.22, 0.18, 0.14]))
_FLOOR_BASE   = dict(zip(_ERAS, [0.90, 0.80, 0.50, 0.35, 0.25, 0.22, 0.18]))
_DOOR_BASE    = dict(zip(_ERAS, [2.50, 2.20, 2.00, 1.80, 1.50, 1.30, 1.00]))


def _build_table(base: Dict[BuildingEra, float]) -> Dict[BuildingEra, Dict[InsulationLevel, float]]:
    return {
        era: {level: round2(u * mult) for level, mult in LEVEL_MULTIPLIER.items()}
        for era, u in base.items()
    }


WALL_U_PRESETS    = _build_table(_WALL_BASE)
WINDOW_U_PRESETS  = _build_table(_WINDOW_BASE)
CEILING_U_PRESETS = _build_table(_CEILING_BASE)
FLOOR_U_PRESETS   = _build_table(_FLOOR_BASE)
DOOR_U_PRESETS    = _build_table(_DOOR_BASE)


@dataclass(frozen=True)
class UValuePreset:
    """One row of presets for a given era/insulation pair."""

    wall: float
    window: float
    door: float
    ceiling: float
    floor: float


def coerce_era(value: Any) -> BuildingEra:
    """Map an era (enum, value string or legacy underscore key) to BuildingEra."""
    if isinstance(value, BuildingEra):
        return value
    if isinstance(value, str):
        key = value.strip().replace("_", "-")
        for era in BuildingEra:
            if era.value == key:
                return era
        if key in ("2021-plus", "2021plus"):
            return BuildingEra.Y2021_PLUS
    return DEFAULT_ERA


def coerce_insulation(value: Any) -> InsulationLevel:
    if isinstance(value, InsulationLevel):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for level in InsulationLevel:
            if level.value == key:
                return level
        if key == "basic":
            return InsulationLevel.PARTIAL
    return DEFAULT_INSULATION


def get_u_value_preset(era: Any = None, level: Any = None) -> UValuePreset:
    """Presets for ``era``/``level``; unknown keys fall back to 2002–2009 / partial."""
    e = coerce_era(era)
    lv = coerce_insulation(level)
    return UValuePreset(
        wall=WALL_U_PRESETS[e][lv],
        window=WINDOW_U_PRESETS[e][lv],
        door=DOOR_U_PRESETS[e][lv],
        ceiling=CEILING_U_PRESETS[e][lv],
        floor=FLOOR_U_PRESETS[e][lv],
    )


def era_from_year(year: Any) -> BuildingEra:
    """Classify a construction year; a missing year yields the default era."""
    y = parse_number(year)
    if y is None or y <= 0:
        return DEFAULT_ERA
    if y < 1978:
        return BuildingEra.PRE_1978
    if y <= 1995:
        return BuildingEra.Y1978_1995
    if y <= 2001:
        return BuildingEra.Y1996_2001
    if y <= 2009:
        return BuildingEra.Y2002_2009
    if y <= 2015:
        return BuildingEra.Y2010_2015
    if y <= 2020:
        return BuildingEra.Y2016_2020
    return BuildingEra.Y2021_PLUS


# ---------------------------------------------------------------------------
# Thermal-bridge allowance presets (ΔU_WB)  [W/(m²·K)]
# ---------------------------------------------------------------------------
THERMAL_BRIDGE_PRESETS: Dict[str, float] = {
    "standard":           0.10,
    "dinA005":            0.05,
    "dinA003":            0.03,
    "interiorInsulation": 0.15,
}
DEFAULT_THERMAL_BRIDGE_K: float = 0.04


def thermal_bridge_k(preset: Optional[str]) -> float:
    """ΔU_WB for a named preset, falling back to the generic allowance."""
    return THERMAL_BRIDGE_PRESETS.get(preset or "", DEFAULT_THERMAL_BRIDGE_K)
