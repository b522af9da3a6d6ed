"""
domain/defaults.py
==================
Physical constants, design defaults and fallback U-values used by the
heat-load calculators.

Pure data. All U-values in W/(m²·K), temperatures in °C.
"""
from __future__ import annotations

from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Air properties (20 °C)
# ---------------------------------------------------------------------------
AIR_DENSITY: float = 1.204               # ρ  [kg/m³]
AIR_HEAT_CAPACITY: float = 1005.0        # cp [J/(kg·K)]

# Simplified ventilation model: ρ·cp / 3600 ≈ 0.33 Wh/(m³·K)
VENTILATION_WH_PER_M3K: float = 0.33

# ---------------------------------------------------------------------------
# Design conditions
# ---------------------------------------------------------------------------
DESIGN_OUTDOOR_TEMP_C: float = -10.0     # Fallback when no climate data [°C]
DEFAULT_INDOOR_TEMP_C: float = 20.0
DEFAULT_ROOM_HEIGHT_M: float = 2.5

THERMAL_BRIDGE_DEFAULT_FACTOR: float = 0.05   # 5 % of transmission
DEFAULT_MVHR_EFFICIENCY: float = 0.8
MAX_HEAT_RECOVERY_EFFICIENCY: float = 0.95
SAFETY_MARGIN_FRACTION: float = 0.10          # summary view only

# Domestic hot water: ~0.046 kWh per litre for a 40–45 K rise
DHW_KWH_PER_LITRE: float = 0.046

# ---------------------------------------------------------------------------
# Room types → (design temperature [°C], air change rate [1/h])
# ---------------------------------------------------------------------------
ROOM_TYPE_DEFAULTS: Dict[str, Tuple[float, float]] = {
    "living":   (20.0, 0.5),
    "bathroom": (24.0, 1.0),
    "bedroom":  (18.0, 0.3),
    "kitchen":  (20.0, 0.6),
    "hallway":  (15.0, 0.3),
    "storage":  (12.0, 0.2),
    "basement": (10.0, 0.2),
    "custom":   (20.0, 0.5),
}

ROOM_TYPE_LABELS: Dict[str, str] = {
    "living":   "Wohnen",
    "bathroom": "Bad",
    "bedroom":  "Schlafen",
    "kitchen":  "Küche",
    "hallway":  "Flur",
    "storage":  "Abstellraum",
    "basement": "Keller",
    "custom":   "Benutzerdefiniert",
}

ROOM_DESIGN_TEMPS: Dict[str, float] = {
    "living":   20.0,
    "bedroom":  18.0,
    "kitchen":  20.0,
    "bathroom": 24.0,
    "hallway":  15.0,
    "custom":   20.0,
}

# ---------------------------------------------------------------------------
# Fallback U-values when neither U nor R is known
# ---------------------------------------------------------------------------
FALLBACK_WALL_U: float = 1.10
FALLBACK_WINDOW_U: float = 0.95
FALLBACK_DOOR_U: float = 1.50
FALLBACK_ROOF_U: float = 0.18
FALLBACK_ACH: float = 0.5

FALLBACK_FLOOR_U: Dict[str, float] = {
    "beheizt":     0.20,
    "unbeheizt":   0.30,
    "erdreich":    0.35,
    "aussenluft":  0.25,
    "heated":      0.20,
    "unheated":    0.30,
    "ground":      0.35,
    "outside_air": 0.25,
}
FALLBACK_FLOOR_U_DEFAULT: float = 0.30

# Display labels per surface kind
SURFACE_LABELS: Dict[str, str] = {
    "wall":    "Wand",
    "window":  "Fenster",
    "door":    "Tür",
    "ceiling": "Decke",
    "floor":   "Boden",
}


def floor_fallback_u(floor_type: str) -> float:
    return FALLBACK_FLOOR_U.get(floor_type or "", FALLBACK_FLOOR_U_DEFAULT)


def room_type_defaults(room_type: str) -> Tuple[float, float]:
    """Design temperature and ACH for a room type; unknown types map to custom."""
    return ROOM_TYPE_DEFAULTS.get(room_type, ROOM_TYPE_DEFAULTS["custom"])
