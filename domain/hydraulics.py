"""
domain/hydraulics.py
====================
Pressure drop on a two-pipe tree network (no loops).

Edges are directed away from the source; radiator taps draw their design flow
at nodes. Per edge, Darcy–Weisbach with a smooth-pipe friction factor:

    Δp_fric  = f · (L/D) · ρv²/2
    f        = 64/Re               Re < 2300   (laminar)
             = 0.3164 / Re^0.25    otherwise   (Blasius)
    Δp_minor = ΣK · ρv²/2

No Dash, no UI, no business-logic orchestration.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
GRAVITY: float = 9.80665              # m/s²
WATER_DENSITY: float = 998.0          # kg/m³ at ~20 °C
WATER_VISCOSITY: float = 0.001        # Pa·s
LAMINAR_LIMIT: float = 2300.0
FALLBACK_FRICTION: float = 0.03
MAX_VELOCITY_DEFAULT: float = 0.5     # m/s comfort limit


@dataclass(frozen=True)
class PipeSegment:
    """
    Directed pipe between two nodes.

    Parameters
    ----------
    length_m    : Pipe length           [m]
    diameter_mm : Inner diameter        [mm]
    k_minor     : Σ fitting K-values    (–)
    """

    id: str
    from_node: str
    to_node: str
    length_m: float
    diameter_mm: float
    k_minor: float = 0.0


@dataclass(frozen=True)
class RadiatorTap:
    id: str
    node_id: str
    flow_lps: float
    name: str = ""


@dataclass
class Network:
    nodes: List[str]
    edges: List[PipeSegment]
    source: str
    taps: List[RadiatorTap] = field(default_factory=list)
    rho: float = WATER_DENSITY
    mu: float = WATER_VISCOSITY


@dataclass
class NetworkResult:
    edges: pd.DataFrame
    nodes: pd.DataFrame
    total_flow_lps: float
    warnings: List[str]


# ---------------------------------------------------------------------------
# Pipe physics
# ---------------------------------------------------------------------------

def calc_velocity(flow_lps: float, diameter_mm: float) -> float:
    """Water velocity in a circular pipe [m/s]."""
    d_m = max(0.0, float(diameter_mm)) / 1000.0
    area = math.pi * d_m ** 2 / 4.0
    if area == 0:
        return 0.0
    return float(flow_lps) / 1000.0 / area


def reynolds_number(rho: float, velocity: float, diameter_m: float, mu: float) -> float:
    if mu <= 0 or diameter_m <= 0:
        return 0.0
    return rho * velocity * diameter_m / mu


def friction_factor(reynolds: float) -> float:
    if reynolds <= 0:
        return FALLBACK_FRICTION
    if reynolds < LAMINAR_LIMIT:
        return 64.0 / reynolds
    return 0.3164 / reynolds ** 0.25


# ---------------------------------------------------------------------------
# Network solver
# ---------------------------------------------------------------------------

def _children(edges: List[PipeSegment]) -> Dict[str, List[PipeSegment]]:
    children: Dict[str, List[PipeSegment]] = {}
    for e in edges:
        children.setdefault(e.from_node, []).append(e)
    return children


def _check_references(net: Network) -> List[str]:
    warnings = []
    node_ids = set(net.nodes)
    for e in net.edges:
        if e.from_node not in node_ids:
            warnings.append(f'Edge "{e.id}" references missing from-node "{e.from_node}".')
        if e.to_node not in node_ids:
            warnings.append(f'Edge "{e.id}" references missing to-node "{e.to_node}".')
    for t in net.taps:
        if t.node_id not in node_ids:
            warnings.append(f'Tap "{t.id}" references missing node "{t.node_id}".')
    if net.source not in node_ids:
        warnings.append(f'Source node "{net.source}" not found in nodes.')
    return warnings


def solve_network(net: Network) -> NetworkResult:
    """Per-edge flow / velocity / Δp and per-node cumulative Δp from the source."""
    warnings = _check_references(net)
    children = _children(net.edges)

    tap_flow: Dict[str, float] = {}
    for t in net.taps:
        if t.node_id and math.isfinite(t.flow_lps):
            tap_flow[t.node_id] = tap_flow.get(t.node_id, 0.0) + max(0.0, t.flow_lps)

    # Downstream flow per node (post-order, iterative)
    downstream: Dict[str, float] = {}
    order: List[str] = []
    stack = [net.source]
    visited = set()
    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        order.append(node)
        stack.extend(e.to_node for e in children.get(node, []))
    for node in reversed(order):
        downstream[node] = tap_flow.get(node, 0.0) + sum(
            downstream.get(e.to_node, 0.0) for e in children.get(node, [])
        )

    mu = max(net.mu, 1e-9)
    edge_rows = []
    edge_dp: Dict[str, float] = {}
    for e in net.edges:
        q = downstream.get(e.to_node, 0.0)
        d_m = max(0.0, e.diameter_mm) / 1000.0
        v = calc_velocity(q, e.diameter_mm)
        re = reynolds_number(net.rho, v, d_m, mu)
        f = friction_factor(re)
        dynamic = 0.5 * net.rho * v ** 2
        dp_fric = f * (max(0.0, e.length_m) / d_m) * dynamic if d_m > 0 else 0.0
        dp_minor = max(0.0, e.k_minor) * dynamic
        dp = dp_fric + dp_minor
        edge_dp[e.id] = dp
        edge_rows.append({
            "Edge": e.id, "From": e.from_node, "To": e.to_node,
            "Flow (L/s)": q, "Velocity (m/s)": v, "Reynolds": re,
            "Friction factor": f, "Friction loss (Pa)": dp_fric,
            "Minor loss (Pa)": dp_minor, "Pressure loss (Pa)": dp,
            "Head loss (m)": dp / (net.rho * GRAVITY),
        })

    cumulative: Dict[str, float] = {net.source: 0.0}
    stack = [net.source]
    while stack:
        node = stack.pop()
        for e in children.get(node, []):
            if e.to_node in cumulative:
                continue
            cumulative[e.to_node] = cumulative[node] + edge_dp[e.id]
            stack.append(e.to_node)

    node_rows = []
    for n in net.nodes:
        dp = cumulative.get(n, 0.0)
        node_rows.append({
            "Node": n,
            "Downstream flow (L/s)": downstream.get(n, 0.0),
            "Cumulative pressure loss (Pa)": dp,
            "Head loss (m)": dp / (net.rho * GRAVITY),
        })
        if tap_flow.get(n, 0.0) > 0 and n not in cumulative:
            warnings.append(f'Node "{n}" has demand but is not reachable from source "{net.source}".')

    return NetworkResult(
        edges=pd.DataFrame(edge_rows),
        nodes=pd.DataFrame(node_rows),
        total_flow_lps=downstream.get(net.source, 0.0),
        warnings=warnings,
    )


def check_pipe_velocities(
    edges: pd.DataFrame,
    max_velocity: float = MAX_VELOCITY_DEFAULT,
    warnings_list: Optional[List[str]] = None,
) -> List[str]:
    """Flag segments above the comfort velocity limit."""
    if warnings_list is None:
        warnings_list = []
    if edges.empty:
        return warnings_list
    for _, row in edges.iterrows():
        v = row.get("Velocity (m/s)", 0.0) or 0.0
        if v > max_velocity:
            warnings_list.append(f"High velocity on segment {row['Edge']}: {v:.2f} m/s > {max_velocity:.2f} m/s")
    return warnings_list
