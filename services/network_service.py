"""
services/network_service.py
===========================
Builds the distribution pipe network of the materials step from the project's
radiators and solves it with ``domain.hydraulics``.

Topology is a simple tree: the heat generator feeds one riser per floor and
each riser feeds one branch per room that has radiators. Every radiator draws
its design flow at its room node. Pipe lengths, diameters and fitting
K-values live in an editable table; edited values survive when rooms or
radiators change. No Dash imports here.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from domain.hydraulics import (
    MAX_VELOCITY_DEFAULT, Network, NetworkResult, PipeSegment, RadiatorTap, check_pipe_velocities, solve_network,
)
from domain.models import Floor
from domain.radiator import design_flow_lps
from domain.units import non_negative, parse_number

logger = logging.getLogger(__name__)

SOURCE_NODE = "source"

RISER_DEFAULTS = {"length_m": 8.0, "diameter_mm": 22.0, "k_minor": 2.0}
BRANCH_DEFAULTS = {"length_m": 6.0, "diameter_mm": 16.0, "k_minor": 4.0}

PIPE_COLUMNS: List[Dict[str, Any]] = [
    {"name": "Abschnitt",       "id": "segment",     "type": "text",    "editable": False},
    {"name": "Länge (m)",       "id": "length_m",    "type": "numeric"},
    {"name": "Innen-Ø (mm)",    "id": "diameter_mm", "type": "numeric"},
    {"name": "Σ ζ Einbauten",   "id": "k_minor",     "type": "numeric"},
]

PIPE_RESULT_COLUMNS = {
    "segment": "Abschnitt",
    "Flow (L/s)": "Volumenstrom (L/s)",
    "Velocity (m/s)": "Geschwindigkeit (m/s)",
    "Pressure loss (Pa)": "Druckverlust (Pa)",
}


def _radiators(room):
    return [h for h in room.heaters if h.type == "radiator"]


def default_pipe_rows(floors: Sequence[Floor]) -> List[Dict[str, Any]]:
    """One riser row per floor and one branch row per room with radiators."""
    rows: List[Dict[str, Any]] = []
    for floor in floors:
        rooms = [r for r in floor.rooms if _radiators(r)]
        if not rooms:
            continue
        rows.append({"id": floor.id, "segment": f"Steigleitung {floor.name}",
                     "from": SOURCE_NODE, "to": floor.id, **RISER_DEFAULTS})
        for room in rooms:
            rows.append({"id": room.id, "segment": f"Anbindung {floor.name} – {room.name}",
                         "from": floor.id, "to": room.id, **BRANCH_DEFAULTS})
    return rows


def merge_pipe_rows(floors: Sequence[Floor], current: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Current topology, keeping lengths/diameters/K-values the user already edited."""
    edited = {str(r.get("id")): r for r in current or []}
    rows = []
    for row in default_pipe_rows(floors):
        old = edited.get(row["id"])
        if old is not None:
            row.update({k: old.get(k, row[k]) for k in ("length_m", "diameter_mm", "k_minor")})
        rows.append(row)
    return rows


def build_network(floors: Sequence[Floor], rows: Sequence[Mapping[str, Any]]) -> Network:
    edges = [
        PipeSegment(
            id=str(r["id"]),
            from_node=str(r["from"]),
            to_node=str(r["to"]),
            length_m=non_negative(r.get("length_m")),
            diameter_mm=non_negative(r.get("diameter_mm")),
            k_minor=non_negative(r.get("k_minor")),
        )
        for r in rows
    ]
    taps = [
        RadiatorTap(id=h.id, node_id=room.id, flow_lps=design_flow_lps(h.output, h.regime), name=room.name)
        for floor in floors for room in floor.rooms for h in _radiators(room)
    ]
    nodes = [SOURCE_NODE] + [f.id for f in floors] + [r.id for f in floors for r in f.rooms]
    return Network(nodes=nodes, edges=edges, source=SOURCE_NODE, taps=taps)


def solve_pipe_table(
    floors: Sequence[Floor],
    rows: Sequence[Mapping[str, Any]],
    max_velocity=None,
) -> NetworkResult:
    """Solve the pipe table; velocity warnings are appended to the solver's own."""
    limit = parse_number(max_velocity)
    result = solve_network(build_network(floors, rows))
    check_pipe_velocities(result.edges, MAX_VELOCITY_DEFAULT if limit is None else limit, result.warnings)
    logger.debug("Pipe network: %d segments, %.4f L/s, %d warnings",
                 len(rows), result.total_flow_lps, len(result.warnings))
    return result


def pump_head_m(result: NetworkResult) -> float:
    """Head the circulator must cover: the largest cumulative loss to any node."""
    if result.nodes.empty:
        return 0.0
    return float(result.nodes["Head loss (m)"].max())


def pipe_results_table(result: NetworkResult, rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Edge results with the segment labels of the pipe table, rounded for display."""
    if result.edges.empty:
        return pd.DataFrame(columns=list(PIPE_RESULT_COLUMNS.values()))
    labels = {str(r["id"]): r.get("segment", r["id"]) for r in rows}
    df = result.edges.copy()
    df["segment"] = df["Edge"].map(labels)
    df = df[list(PIPE_RESULT_COLUMNS)].rename(columns=PIPE_RESULT_COLUMNS)
    return df.round({"Volumenstrom (L/s)": 4, "Geschwindigkeit (m/s)": 2, "Druckverlust (Pa)": 0})
