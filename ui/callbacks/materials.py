"""
ui/callbacks/materials.py
=========================
Callbacks for the materials step: radiator table, hydraulic balancing table
and its downloads, pipe network table and its pressure-loss results.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import Input, Output, State, callback_context, dash_table, dcc, html, no_update

from domain.models import new_id
from domain.radiator import REGIMES, STANDARD_REGIME, list_brands
from services.export_service import (
    BALANCING_CSV_NAME, BALANCING_JSON_NAME, balancing_rows, export_balancing_csv, export_balancing_json,
)
from services.network_service import merge_pipe_rows, pipe_results_table, pump_head_m, solve_pipe_table
from services.project_state import ProjectState, STEP_MATERIALS, set_floors
from services.room_service import apply_heater_rows, heater_rows
from ui.layout import TAB_IDS, TABLE_STYLE

MATERIALS_TAB = TAB_IDS[STEP_MATERIALS]

BALANCING_COLUMNS = {
    "floor": "Stockwerk", "room": "Raum", "label": "Heizkörper", "output_W": "Leistung (W)",
    "regime": "Systemtemp.", "deltaTwater_K": "ΔT Wasser (K)", "flow_L_h": "Volumenstrom (L/h)",
    "valveBrand": "Ventil", "preset": "Voreinstellung",
}


def _room_options(state: ProjectState) -> list:
    return [{"label": f"{f.name} – {r.name}", "value": r.id} for f in state.floors for r in f.rooms]


def register(app):

    @app.callback(
        Output("heater-table", "data"),
        Output("heater-table", "dropdown"),
        Input("tabs", "active_tab"),
        Input("btn-add-heater", "n_clicks"),
        State("project-store", "data"),
        State("heater-table", "data"),
    )
    def fill_heater_table(active_tab, n_add, data, rows):
        state = ProjectState.from_dict(data)
        dropdown = {
            "room_id": {"options": _room_options(state)},
            "brand":   {"options": [{"label": b, "value": b} for b in list_brands()]},
            "regime":  {"options": [{"label": r, "value": r} for r in REGIMES]},
        }
        triggered = [t["prop_id"] for t in callback_context.triggered]
        if "btn-add-heater.n_clicks" in triggered:
            rows = list(rows or [])
            first_room = state.floors[0].rooms[0].id if state.floors and state.floors[0].rooms else None
            rows.append({"id": new_id(), "room_id": first_room, "brand": "", "series": "",
                         "height": None, "width": None, "output": None,
                         "regime": STANDARD_REGIME, "valve_type": ""})
            return rows, dropdown
        if active_tab != MATERIALS_TAB:
            return no_update, dropdown
        return heater_rows(state.floors), dropdown

    @app.callback(
        Output("project-store", "data", allow_duplicate=True),
        Input("heater-table", "data"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def store_heater_table(rows, data):
        state = ProjectState.from_dict(data)
        return set_floors(state, apply_heater_rows(state.floors, rows or [])).to_dict()

    @app.callback(
        Output("balancing-table", "children"),
        Input("project-store", "data"),
    )
    def show_balancing(data):
        df = balancing_rows(ProjectState.from_dict(data).floors)
        if df.empty:
            return html.Small("Noch keine Heizkörper erfasst.", className="text-muted")
        df = df[list(BALANCING_COLUMNS)].rename(columns=BALANCING_COLUMNS)
        return dash_table.DataTable(
            columns=[{"name": c, "id": c} for c in df.columns],
            data=df.to_dict("records"), page_size=20,
            style_data_conditional=[{"if": {"row_index": "odd"}, "backgroundColor": "rgb(248,248,248)"}],
            **TABLE_STYLE,
        )

    @app.callback(
        Output("dl-balancing-csv", "data"),
        Input("btn-dl-balancing-csv", "n_clicks"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def download_balancing_csv(n_clicks, data):
        if not n_clicks:
            return no_update
        floors = ProjectState.from_dict(data).floors
        return dcc.send_bytes(export_balancing_csv(floors), BALANCING_CSV_NAME)

    @app.callback(
        Output("dl-balancing-json", "data"),
        Input("btn-dl-balancing-json", "n_clicks"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def download_balancing_json(n_clicks, data):
        if not n_clicks:
            return no_update
        state = ProjectState.from_dict(data)
        return dict(content=export_balancing_json(state.building, state.floors),
                    filename=BALANCING_JSON_NAME, type="application/json")

    @app.callback(
        Output("pipe-table", "data"),
        Input("project-store", "data"),
        State("pipe-table", "data"),
    )
    def fill_pipe_table(data, rows):
        return merge_pipe_rows(ProjectState.from_dict(data).floors, rows or [])

    @app.callback(
        Output("pipe-results", "children"),
        Input("pipe-table", "data"),
        State("project-store", "data"),
    )
    def show_pipe_results(rows, data):
        if not rows:
            return html.Small("Noch keine Heizkörper erfasst.", className="text-muted")
        result = solve_pipe_table(ProjectState.from_dict(data).floors, rows)
        df = pipe_results_table(result, rows)
        children = [
            dash_table.DataTable(
                columns=[{"name": c, "id": c} for c in df.columns],
                data=df.to_dict("records"), page_size=20,
                **TABLE_STYLE,
            ),
            html.P([
                html.Strong("Gesamtvolumenstrom: "), f"{result.total_flow_lps * 3600:.0f} L/h  ·  ",
                html.Strong("Förderhöhe ungünstigster Strang: "), f"{pump_head_m(result):.2f} m",
            ], className="mt-2 mb-0"),
        ]
        if result.warnings:
            children.append(dbc.Alert(html.Ul([html.Li(w) for w in result.warnings], className="mb-0"),
                                      color="warning", className="mt-2"))
        return children
