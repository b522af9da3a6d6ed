"""
domain/radiator.py
==================
Radiator catalog, regime scaling, design water flow and TRV preset advice.

Nominal outputs are catalogued at 75/65/20 (EN 442). For other regimes the
output scales with the mean excess temperature:

    Q = Q_nom · (ΔT / ΔT_nom) ^ n        n ≈ 1.3

No Dash / pandas / service-layer dependencies.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from domain.units import non_negative, parse_number

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
WATER_CP: float = 4180.0               # J/(kg·K); 1 kg ≈ 1 L
EXPONENT_RADIATOR: float = 1.3         # Radiator exponent n (–)
STANDARD_REGIME: str = "75/65/20"
FALLBACK_WATER_DT: float = 10.0        # K
NO_PRESET: str = "—"

REGIMES: List[str] = ["75/65/20", "70/55/20", "65/55/20", "55/45/20"]


@dataclass(frozen=True)
class RadiatorModel:
    """
    One catalog series.

    Parameters
    ----------
    table      : Nominal output per size key "HxW" (mm) at ``regime``  [W]
    kv_presets : Optional human label → kv value
    """

    brand: str
    series: str
    type: str
    heights: Tuple[int, ...]
    widths: Tuple[int, ...]
    table: Dict[str, float]
    regime: str = STANDARD_REGIME
    kv_presets: Dict[str, float] = field(default_factory=dict)


RADIATOR_CATALOG: List[RadiatorModel] = [
    RadiatorModel(
        brand="Kermi", series="Profil-K", type="panel",
        heights=(300, 600), widths=(400, 600, 1000),
        table={"300x400": 380, "300x600": 560, "300x1000": 900,
               "600x400": 720, "600x600": 1080, "600x1000": 1750},
        kv_presets={"Voreinstellung 1": 0.15, "Voreinstellung 2": 0.20, "Werk": 0.25},
    ),
    RadiatorModel(
        brand="Purmo", series="Ventil Compact", type="panel",
        heights=(300, 600), widths=(400, 600, 1000),
        table={"300x400": 360, "300x600": 540, "300x1000": 880,
               "600x400": 700, "600x600": 1040, "600x1000": 1700},
        kv_presets={"Werk": 0.25, "Niedrig": 0.18, "Hoch": 0.32},
    ),
    RadiatorModel(
        brand="Vogel & Noot", series="Compact", type="panel",
        heights=(300, 600), widths=(400, 600, 1000),
        table={"300x400": 350, "300x600": 520, "300x1000": 860,
               "600x400": 680, "600x600": 1020, "600x1000": 1650},
    ),
]

# Flow [L/s] upper bounds → preset label, per valve brand
KV_PRESET_BINS: Dict[str, List[Tuple[float, str]]] = {
    "Heimeier": [(0.005, "1"), (0.010, "2"), (0.015, "3"), (0.025, "4"), (0.040, "5"), (math.inf, "6")],
    "Oventrop": [(0.004, "1"), (0.008, "2"), (0.012, "3"), (0.020, "4"), (0.032, "5"), (math.inf, "6")],
    "Danfoss":  [(0.004, "1"), (0.008, "2"), (0.012, "3"), (0.018, "4"), (0.028, "5"), (0.040, "6"),
                 (math.inf, "7")],
}


# ---------------------------------------------------------------------------
# Catalog lookups
# ---------------------------------------------------------------------------

def list_brands() -> List[str]:
    return sorted({m.brand for m in RADIATOR_CATALOG})


def list_series(brand: Optional[str] = None) -> List[str]:
    return sorted({m.series for m in RADIATOR_CATALOG if not brand or m.brand == brand})


def find_model(brand: Optional[str], series: Optional[str]) -> Optional[RadiatorModel]:
    if not brand or not series:
        return None
    for model in RADIATOR_CATALOG:
        if model.brand == brand and model.series == series:
            return model
    return None


# ---------------------------------------------------------------------------
# Regimes
# ---------------------------------------------------------------------------

def _regime_temps(regime: str) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    parts = [parse_number(p) for p in str(regime or "").split("/")]
    parts += [None] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def mean_excess_temperature(regime: str) -> float:
    """Mean water temperature minus room temperature [K]."""
    supply, ret, room = _regime_temps(regime)
    if supply is None or ret is None or room is None:
        return 0.0
    return (supply + ret) / 2.0 - room


def water_delta_t(regime: str = STANDARD_REGIME) -> float:
    """Supply − return [K]; 10 K when the regime is unusable."""
    supply, ret, _ = _regime_temps(regime)
    d_t = (non_negative(supply) or 75.0) - (non_negative(ret) or 65.0)
    return d_t if d_t > 0 else FALLBACK_WATER_DT


def nominal_output(
    brand: Optional[str],
    series: Optional[str],
    height: Optional[int],
    width: Optional[int],
    regime: str = STANDARD_REGIME,
    exponent: float = EXPONENT_RADIATOR,
) -> Optional[float]:
    """Catalog output [W] at ``regime``; None for unknown models or sizes."""
    model = find_model(brand, series)
    if model is None or not height or not width:
        return None
    base = model.table.get(f"{int(height)}x{int(width)}")
    if not base or base <= 0:
        return None
    if regime == model.regime:
        return float(base)

    dt_base = mean_excess_temperature(model.regime)
    dt_target = mean_excess_temperature(regime)
    if dt_base <= 0 or dt_target <= 0:
        return float(base)
    return float(round(base * (dt_target / dt_base) ** exponent))


# ---------------------------------------------------------------------------
# Flow and valve presets
# ---------------------------------------------------------------------------

def design_flow_lps(output_w, regime: str = STANDARD_REGIME) -> float:
    """Water flow needed to deliver ``output_w``: Q / (cp · ΔT_water)  [L/s]."""
    q = non_negative(output_w)
    d_t = water_delta_t(regime)
    if q <= 0 or d_t <= 0:
        return 0.0
    return q / (WATER_CP * d_t)


def detect_valve_brand(valve_text: Optional[str]) -> str:
    text = (valve_text or "").lower()
    if "oventrop" in text:
        return "Oventrop"
    if "danfoss" in text:
        return "Danfoss"
    return "Heimeier"


def recommend_preset(flow_lps: float, brand: str = "Heimeier") -> str:
    """Coarse TRV preset for a design flow; ``—`` when there is no flow."""
    flow = non_negative(flow_lps)
    if flow <= 0:
        return NO_PRESET
    for upper, label in KV_PRESET_BINS.get(brand, KV_PRESET_BINS["Heimeier"]):
        if flow <= upper:
            return label
    return NO_PRESET


@dataclass(frozen=True)
class RadiatorSizing:
    output_w: float
    delta_t_water: float
    flow_lps: float
    valve_brand: str
    preset: str

    @property
    def flow_l_h(self) -> float:
        return self.flow_lps * 3600.0


def size_radiator(output_w, regime: str = STANDARD_REGIME, valve_text: Optional[str] = None) -> RadiatorSizing:
    """Flow and valve preset for one heater."""
    flow = design_flow_lps(output_w, regime)
    brand = detect_valve_brand(valve_text)
    return RadiatorSizing(
        output_w=non_negative(output_w),
        delta_t_water=water_delta_t(regime),
        flow_lps=flow,
        valve_brand=brand,
        preset=recommend_preset(flow, brand),
    )
