"""
services/export_service.py
==========================
File exports of calculation results and hydraulic balancing data.

* Summary CSV  – UTF-16LE with BOM, tab separated, German number format.
* Results JSON – nested dict mirroring ``CalculationResults``.
* Balancing CSV / JSON – per radiator design flow and TRV preset.

Every function returns the file content (bytes or str) so the UI layer can hand
it to ``dcc.send_bytes`` / ``dcc.send_string`` or the API can stream it.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from domain.heat_load import CalculationResults
from domain.models import BuildingMetadata, Floor
from domain.radiator import size_radiator
from domain.units import parse_number
from services.calculation_service import result_summary, summary_dataframe

logger = logging.getLogger(__name__)

SUMMARY_CSV_NAME = "heizlast-bericht.csv"
RESULTS_JSON_NAME = "heizlast-ergebnis.json"
BALANCING_CSV_NAME = "hydraulic-balancing.csv"
BALANCING_JSON_NAME = "hydraulic-balancing.json"

SUMMARY_HEADER: List[str] = [
    "Stockwerk/Raum",
    "Transmissionsverluste (kW)",
    "Lüftungsverluste (kW)",
    "Wärmebrücken (kW)",
    "Sicherheitszuschlag (kW)",
    "Heizlast inkl. Zuschlag (kW)",
    "Fläche (m²)",
    "Basislast ohne Zuschlag (kW)",
]

BALANCING_HEADER: List[str] = [
    "Floor", "Room", "Radiator", "Target_W", "DeltaT_water_K", "Flow_L_h", "Suggested_Preset",
]


def format_de(value: Any, decimals: int = 1) -> str:
    """German number format: ``1234.56`` → ``"1.234,6"``; non-numbers → ``"0,0"``."""
    n = parse_number(value)
    if n is None:
        n = 0.0
    text = f"{n:,.{decimals}f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


# ---------------------------------------------------------------------------
# Summary CSV
# ---------------------------------------------------------------------------

def summary_csv_lines(results: CalculationResults, floors: Sequence[Floor] = ()) -> List[List[str]]:
    """Meta block, blank line, header and one row per room."""
    summary = result_summary(results)
    lines: List[List[str]] = [
        ["Gesamtlast (kW)", format_de(summary["totalLoad"])],
        ["Gesamtfläche (m²)", format_de(summary["totalArea"])],
        ["Heizlast pro m² (W/m²)", format_de(summary["wattsPerSqm"])],
        ["Energieklasse", summary["energyClass"]],
        ["Empfehlung", summary["recommendation"]],
        [],
        list(SUMMARY_HEADER),
    ]
    df = summary_dataframe(results, floors)
    for _, row in df.iterrows():
        base = row["Transmission (kW)"] + row["Ventilation (kW)"] + row["Thermal bridges (kW)"]
        lines.append([
            f"{row['Floor']} – {row['Room']}",
            format_de(row["Transmission (kW)"]),
            format_de(row["Ventilation (kW)"]),
            format_de(row["Thermal bridges (kW)"]),
            format_de(row["Safety margin (kW)"]),
            format_de(row["Heat load (kW)"]),
            format_de(row["Area (m²)"]),
            format_de(base),
        ])
    return lines


def export_summary_csv(results: CalculationResults, floors: Sequence[Floor] = ()) -> bytes:
    """Excel-friendly summary: BOM + ``sep=\\t`` hint, UTF-16LE."""
    buf = io.StringIO()
    buf.write("sep=\\t\r\n")
    writer = csv.writer(buf, delimiter="\t", lineterminator="\r\n")
    writer.writerows(summary_csv_lines(results, floors))
    content = "\ufeff" + buf.getvalue()
    logger.info("Exported summary CSV with %d rooms", len(results.per_room))
    return content.encode("utf-16-le")


# ---------------------------------------------------------------------------
# Results JSON
# ---------------------------------------------------------------------------

def export_results_json(results: CalculationResults, building: Optional[BuildingMetadata] = None) -> str:
    payload: Dict[str, Any] = {"results": results.to_dict(), "summary": result_summary(results)}
    if building is not None:
        payload["building"] = building.to_dict()
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Hydraulic balancing
# ---------------------------------------------------------------------------

def _radiator_label(heater) -> str:
    size = f"{int(heater.height) if heater.height else ''}x{int(heater.width) if heater.width else ''}"
    return f"{heater.brand} {heater.series} {size}".strip()


def balancing_rows(floors: Sequence[Floor]) -> pd.DataFrame:
    """One row per radiator with design flow and suggested preset."""
    rows = []
    for floor in floors:
        for room in floor.rooms:
            for heater in room.heaters:
                if heater.type != "radiator":
                    continue
                sizing = size_radiator(heater.output, heater.regime, heater.valve_type)
                rows.append({
                    "floor": floor.name,
                    "room": room.name,
                    "heaterId": heater.id,
                    "label": _radiator_label(heater) or "Radiator",
                    "brand": heater.brand,
                    "series": heater.series,
                    "size": f"{int(heater.height)}x{int(heater.width)}" if heater.height and heater.width else None,
                    "output_W": round(sizing.output_w),
                    "regime": heater.regime,
                    "deltaTwater_K": sizing.delta_t_water,
                    "flow_L_s": round(sizing.flow_lps, 4),
                    "flow_L_h": round(sizing.flow_l_h),
                    "valveBrand": sizing.valve_brand,
                    "preset": sizing.preset,
                })
    return pd.DataFrame(rows)


def export_balancing_csv(floors: Sequence[Floor]) -> bytes:
    """Semicolon separated, UTF-8 with BOM."""
    df = balancing_rows(floors)
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=";", lineterminator="\r\n")
    writer.writerow(BALANCING_HEADER)
    for _, r in df.iterrows():
        writer.writerow([
            r["floor"], r["room"], r["label"], r["output_W"],
            f"{r['deltaTwater_K']:g}", r["flow_L_h"], f"{r['valveBrand']} {r['preset']}",
        ])
    logger.info("Exported balancing CSV with %d radiators", len(df))
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


def export_balancing_json(building: BuildingMetadata, floors: Sequence[Floor]) -> str:
    df = balancing_rows(floors)
    radiators = []
    for _, r in df.iterrows():
        radiators.append({
            "floor": r["floor"],
            "room": r["room"],
            "heaterId": r["heaterId"],
            "brand": r["brand"] or None,
            "series": r["series"] or None,
            "size": r["size"],
            "output_W": int(r["output_W"]),
            "regime": r["regime"],
            "deltaTwater_K": float(r["deltaTwater_K"]),
            "flow_L_s": float(r["flow_L_s"]),
            "flow_L_h": int(r["flow_L_h"]),
            "suggestedPreset": {"brand": r["valveBrand"], "preset": r["preset"]},
        })
    payload = {
        "building": {
            "address": building.address,
            "constructionYear": building.construction_year,
            "type": building.building_type,
        },
        "radiators": radiators,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
