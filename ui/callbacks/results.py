"""
ui/callbacks/results.py
=======================
Callbacks for the results step: calculation, metrics, charts, table, report
downloads and saving to the heat-load repository.
"""
from __future__ import annotations

import logging

import dash_bootstrap_components as dbc
from dash import Input, Output, State, dash_table, dcc, no_update

import config
from services.calculation_service import result_summary, run_calculation, summary_dataframe
from services.export_service import (
    RESULTS_JSON_NAME, SUMMARY_CSV_NAME, export_results_json, export_summary_csv, format_de,
)
from services.persistence_service import HeatLoadValidationError
from services.project_state import ProjectIncomplete, ProjectState, save_payload
from services.validation_service import validate_project
from ui.layout import TABLE_STYLE, issues_alert
from utils.plotting import loss_share_pie, room_load_bar

logger = logging.getLogger(__name__)


def _calculate(data):
    state = ProjectState.from_dict(data)
    results = run_calculation(state.floors, state.building, state.project_meta)
    return state, results


def register(app, repository=None):

    @app.callback(
        Output("metric-total-load", "children"),
        Output("metric-w-m2", "children"),
        Output("metric-energy-class", "children"),
        Output("metric-dhw", "children"),
        Output("metric-outdoor", "children"),
        Output("results-recommendation", "children"),
        Output("results-warnings", "children"),
        Output("room-load-chart", "figure"),
        Output("loss-share-chart", "figure"),
        Output("results-table", "children"),
        Input("project-store", "data"),
    )
    def update_results(data):
        state, results = _calculate(data)
        summary = result_summary(results)
        df = summary_dataframe(results, state.floors)

        table = dash_table.DataTable(
            columns=[{"name": c, "id": c} for c in df.columns],
            data=df.round(2).to_dict("records"),
            page_size=25, sort_action="native",
            style_data_conditional=[{"if": {"row_index": "odd"}, "backgroundColor": "rgb(248,248,248)"}],
            **TABLE_STYLE,
        )
        return (
            f"{format_de(summary['totalLoad'], 2)} kW",
            f"{format_de(summary['wattsPerSqm'], 0)} W/m²",
            summary["energyClass"],
            f"{format_de(summary['dhwAllowanceKW'], 2)} kW",
            f"{format_de(results.meta.effective_outdoor_temp_c)} °C",
            summary["recommendation"],
            issues_alert(validate_project(state.building, state.floors), "Vor dem Speichern ergänzen:"),
            room_load_bar(df),
            loss_share_pie(results.din_totals.to_dict()),
            table,
        )

    @app.callback(
        Output("dl-summary-csv", "data"),
        Input("btn-dl-summary-csv", "n_clicks"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def download_summary_csv(n_clicks, data):
        if not n_clicks:
            return no_update
        state, results = _calculate(data)
        content = export_summary_csv(results, state.floors)
        return dcc.send_bytes(content, SUMMARY_CSV_NAME)

    @app.callback(
        Output("dl-results-json", "data"),
        Input("btn-dl-results-json", "n_clicks"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def download_results_json(n_clicks, data):
        if not n_clicks:
            return no_update
        state, results = _calculate(data)
        return dict(content=export_results_json(results, state.building), filename=RESULTS_JSON_NAME,
                    type="application/json")

    if repository is None:
        return

    @app.callback(
        Output("save-status", "children"),
        Input("btn-save-project", "n_clicks"),
        State("quote-id", "value"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def save_project(n_clicks, quote_id, data):
        if not n_clicks:
            return no_update
        state, results = _calculate(data)
        try:
            payload = save_payload(state, results)
            doc = repository.upsert(config.LOCAL_USER_ID, (quote_id or "").strip(), payload)
        except ProjectIncomplete as e:
            return issues_alert(e.issues, "Nicht gespeichert, bitte ergänzen:")
        except HeatLoadValidationError as e:
            return dbc.Alert(f"Nicht gespeichert: {e}", color="warning")
        logger.info("Saved project for quote %s", doc["quoteId"])
        return dbc.Alert(f"Gespeichert ({doc['updatedAt'][:19].replace('T', ' ')})", color="success")
