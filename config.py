"""
config.py
=========
Application-wide constants: wizard steps, UI options, export names and
environment-driven settings. No business logic lives here; calculation
constants live in domain/defaults.py and domain/presets.py.
"""
from __future__ import annotations

import os
from typing import Dict, List


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
CLIMATE_SERVICE_URL: str = os.environ.get(
    "HEATLOAD_CLIMATE_URL", "http://localhost:8000/climate/design-temp"
)
CLIMATE_TIMEOUT_S: float = _env_float("HEATLOAD_CLIMATE_TIMEOUT_S", 5.0)
CLIMATE_DEBOUNCE_S: float = _env_float("HEATLOAD_CLIMATE_DEBOUNCE_S", 0.4)

LOG_LEVEL: str = os.environ.get("HEATLOAD_LOG_LEVEL", "INFO")
DEBUG: bool = _env_bool("HEATLOAD_DEBUG")
HOST: str = os.environ.get("HEATLOAD_HOST", "127.0.0.1")
PORT: int = int(_env_float("HEATLOAD_PORT", 8050))

USER_HEADER: str = "X-User-Id"
LOCAL_USER_ID: str = os.environ.get("HEATLOAD_LOCAL_USER", "local")

# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------
STEP_LABELS: List[str] = ["Gebäude", "Räume", "Ergebnis", "Materialien"]

BUILDING_TYPE_OPTIONS: List[str] = [
    "Einfamilienhaus", "Doppelhaushälfte", "Reihenhaus", "Mehrfamilienhaus", "Bungalow",
]

FLOOR_TYPE_OPTIONS: Dict[str, str] = {
    "beheizt": "Gegen beheizt",
    "unbeheizt": "Gegen unbeheizt",
    "erdreich": "Gegen Erdreich",
    "aussenluft": "Gegen Außenluft",
}

THERMAL_BRIDGE_OPTIONS: Dict[str, str] = {
    "standard": "Standard (ΔU 0,10)",
    "dinA005": "DIN 4108 Bbl. 2 (ΔU 0,05)",
    "dinA003": "Optimiert (ΔU 0,03)",
    "interiorInsulation": "Innendämmung (ΔU 0,15)",
}

# ---------------------------------------------------------------------------
# UI display
# ---------------------------------------------------------------------------
CHART_HEIGHT_PX = 460
ROOM_TYPE_HELP_MD = (
    "**Raumtyp** bestimmt Solltemperatur und Luftwechsel:\n\n"
    "- **Wohnen**: 20 °C, 0,5 1/h\n"
    "- **Schlafen**: 18 °C, 0,3 1/h\n"
    "- **Küche**: 20 °C, 0,6 1/h\n"
    "- **Bad**: 24 °C, 1,0 1/h\n"
    "- **Flur**: 15 °C, 0,3 1/h"
)
