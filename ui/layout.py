"""
ui/layout.py
============
All Dash layout components: navbar, wizard tabs, and their child cards.

Callbacks are NOT defined here – see ui/callbacks/.
This file only builds static (or mostly-static) component trees.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html, dash_table

from config import (
    BUILDING_TYPE_OPTIONS, CHART_HEIGHT_PX, FLOOR_TYPE_OPTIONS, ROOM_TYPE_HELP_MD,
    STEP_LABELS, THERMAL_BRIDGE_OPTIONS,
)
from domain.defaults import ROOM_TYPE_LABELS
from domain.models import BuildingMetadata, Dimensioning
from domain.presets import DEFAULT_ERA, DEFAULT_INSULATION, ERA_LABELS, INSULATION_LABELS
from domain.radiator import REGIMES, list_brands
from services.network_service import PIPE_COLUMNS
from services.project_state import ProjectState
from services.room_service import HEATER_COLUMNS, ROOM_COLUMNS, default_room_rows, rows_to_floors

TAB_IDS = [f"tab-{i}" for i in range(len(STEP_LABELS))]

TABLE_STYLE = dict(
    style_table={"overflowX": "auto"},
    style_header={"backgroundColor": "#f8f9fa", "fontWeight": "bold", "textAlign": "center"},
    style_cell={"padding": "8px", "textAlign": "left", "border": "1px solid #dee2e6"},
)
_YES_NO = {"options": [{"label": "Nein", "value": False}, {"label": "Ja", "value": True}]}

# ---------------------------------------------------------------------------
# Navbar
# ---------------------------------------------------------------------------
navbar = dbc.Navbar(
    dbc.Container([
        html.A(
            dbc.Row([
                dbc.Col(html.I(className="bi bi-thermometer-half text-white",
                               style={"fontSize": "1.8rem"}), width="auto"),
                dbc.Col(dbc.NavbarBrand("Heizlastrechner", className="ms-2"), width="auto"),
            ], align="center", className="g-0"),
            href="/", style={"textDecoration": "none"},
        ),
        dbc.Nav([
            dbc.NavItem(dbc.NavLink([html.I(className="bi bi-info-circle me-1"), " DIN EN 12831 (vereinfacht)"],
                                    disabled=True)),
        ], navbar=True, className="ms-auto"),
    ], fluid=True),
    color="dark", dark=True, sticky="top",
)


def initial_project() -> ProjectState:
    building = BuildingMetadata(building_era=DEFAULT_ERA, insulation_level=DEFAULT_INSULATION)
    return ProjectState(building=building, floors=rows_to_floors(default_room_rows(), building))


def _options(mapping) -> list:
    return [{"label": label, "value": getattr(key, "value", key)} for key, label in mapping.items()]


# ---------------------------------------------------------------------------
# Tab 0: Building
# ---------------------------------------------------------------------------
def _address_card(b: BuildingMetadata) -> dbc.Card:
    return dbc.Card([
        dbc.CardHeader("🏠 Gebäude"),
        dbc.CardBody([
            dbc.Label("Gebäudetyp"),
            dcc.Dropdown(id="building-type", className="mb-2", value=b.building_type or None,
                         options=[{"label": t, "value": t} for t in BUILDING_TYPE_OPTIONS]),
            dbc.Label("Adresse"),
            dbc.Input(id="building-address", type="text", className="mb-2", debounce=True, value=b.address),
            dbc.Row([
                dbc.Col([dbc.Label("PLZ"),
                         dbc.Input(id="building-postal-code", type="text", debounce=True, value=b.postal_code)], md=4),
                dbc.Col([dbc.Label("Ort"),
                         dbc.Input(id="building-location", type="text", debounce=True, value=b.location)], md=8),
            ], className="mb-2"),
            dbc.Label("Baujahr"),
            dbc.Input(id="building-construction-year", type="number", min=1800, max=2100, step=1,
                      debounce=True, value=b.construction_year),
            dbc.FormText("Das Baujahr wählt die Baualtersklasse automatisch vor."),
        ])
    ], className="mb-4")


def _envelope_preset_card(b: BuildingMetadata) -> dbc.Card:
    return dbc.Card([
        dbc.CardHeader("📐 Gebäudehülle"),
        dbc.CardBody([
            dbc.Label("Baualtersklasse"),
            dcc.Dropdown(id="building-era", clearable=False, className="mb-2", options=_options(ERA_LABELS),
                         value=b.building_era.value),
            dbc.Label("Dämmstandard"),
            dcc.Dropdown(id="insulation-level", clearable=False, className="mb-2",
                         options=_options(INSULATION_LABELS), value=b.insulation_level.value),
            dbc.Label("Wärmebrücken"),
            dcc.Dropdown(id="thermal-bridge-preset", clearable=True, placeholder="Pauschal 5 % der Transmission",
                         options=_options(THERMAL_BRIDGE_OPTIONS), value=b.thermal_bridge_preset),
            dbc.FormText("Vorgaben füllen nur fehlende U-Werte; eigene Werte bleiben erhalten."),
        ])
    ], className="mb-4")


def _climate_card(b: BuildingMetadata) -> dbc.Card:
    return dbc.Card([
        dbc.CardHeader("🌡️ Norm-Außentemperatur"),
        dbc.CardBody([
            dbc.Button([html.I(className="bi bi-geo-alt me-1"), "Aus Adresse ermitteln"],
                       id="btn-climate-lookup", color="secondary", outline=True, size="sm",
                       className="mb-2"),
            html.Div(id="design-temp-info", className="small text-muted mb-3"),
            dbc.Label("Manuelle Norm-Außentemperatur (°C)"),
            dbc.Input(id="manual-design-temp", type="number", min=-30, max=10, step=0.5, debounce=True,
                      value=b.manual_design_outdoor_temp_c),
            dbc.FormText("Ein manueller Wert hat Vorrang vor dem ermittelten."),
        ])
    ], className="mb-4")


def _dimensioning_card(dim: Dimensioning) -> dbc.Card:
    return dbc.Card([
        dbc.CardHeader("⚙️ Auslegung"),
        dbc.CardBody([
            dbc.Label("Bewohner"),
            dbc.Input(id="residents", type="number", min=0, step=1, className="mb-2", debounce=True,
                      value=dim.residents),
            dbc.Label("Warmwasser je Person (L/Tag)"),
            dbc.Input(id="dhw-litres", type="number", min=0, step=5, className="mb-2", debounce=True,
                      value=dim.dhw_per_resident_l_per_day),
            dbc.Label("Bivalenztemperatur (°C)"),
            dbc.Input(id="bivalence-temp", type="number", min=-30, max=10, step=0.5, debounce=True,
                      value=dim.bivalence_temperature_c),
            dbc.FormText("Liegt die Norm-Außentemperatur darunter, wird auf diesen Wert ausgelegt."),
        ])
    ], className="mb-4")


def build_building_tab(state: ProjectState) -> dbc.Tab:
    b, dim = state.building, state.project_meta.dimensioning
    return dbc.Tab(
        label=f"1️⃣ {STEP_LABELS[0]}", tab_id=TAB_IDS[0],
        children=[dbc.Card([dbc.CardBody([
            dbc.Row([
                dbc.Col([_address_card(b)], md=3),
                dbc.Col([_envelope_preset_card(b)], md=3),
                dbc.Col([_climate_card(b)], md=3),
                dbc.Col([_dimensioning_card(dim)], md=3),
            ]),
            html.Div(id="building-issues"),
        ])])]
    )


# ---------------------------------------------------------------------------
# Tab 1: Rooms
# ---------------------------------------------------------------------------
def build_rooms_tab() -> dbc.Tab:
    editable = [c["id"] for c in ROOM_COLUMNS]
    return dbc.Tab(
        label=f"2️⃣ {STEP_LABELS[1]}", tab_id=TAB_IDS[1],
        children=[dbc.Card([dbc.CardBody([
            dbc.Card([
                dbc.CardHeader("🧾 Räume"),
                dbc.CardBody([
                    dash_table.DataTable(
                        id="room-table", editable=True, row_deletable=True,
                        columns=ROOM_COLUMNS,
                        dropdown={
                            "room_type":  {"options": _options(ROOM_TYPE_LABELS)},
                            "floor_type": {"options": _options(FLOOR_TYPE_OPTIONS)},
                            "ceiling":    _YES_NO,
                            "mvhr":       _YES_NO,
                        },
                        tooltip_header={
                            "room_type":   ROOM_TYPE_HELP_MD,
                            "ceiling":     "Raum grenzt nach oben an Dach oder unbeheizten Dachraum.",
                            "floor_type":  "Wogegen der Boden des Raums grenzt.",
                            "mvhr":        "Mechanische Lüftung im Raum.",
                            "hrv_pct":     "Wärmerückgewinnung der Lüftungsanlage in % (max. 95).",
                            "target":      "Leer lassen für die Vorgabe des Raumtyps.",
                        },
                        data=[], page_size=25,
                        style_data_conditional=[
                            {"if": {"column_id": c}, "backgroundColor": "#fffef0"} for c in editable
                        ] + [{"if": {"row_index": "odd"}, "backgroundColor": "rgb(248,248,248)"}],
                        tooltip_delay=200, tooltip_duration=None,
                        **TABLE_STYLE,
                    ),
                    dbc.Button([html.I(className="bi bi-plus-lg me-1"), "Raum hinzufügen"],
                               id="btn-add-room", color="primary", outline=True, size="sm",
                               className="mt-2"),
                    html.Div([html.Small(
                        "Tipp: Doppelklick zum Bearbeiten. Räume mit gleichem Stockwerk werden gruppiert.",
                        className="text-muted")], className="mt-2"),
                ])
            ], className="mb-4"),
            html.Div(id="room-issues"),
        ])])]
    )


# ---------------------------------------------------------------------------
# Tab 2: Results
# ---------------------------------------------------------------------------
def _metric_card(icon_cls: str, icon_color: str, metric_id: str, label: str, default: str, md: int) -> dbc.Col:
    return dbc.Col([dbc.Card([dbc.CardBody([
        html.Div([
            html.I(className=f"{icon_cls} me-2", style={"fontSize": "2rem", "color": icon_color}),
            html.Div([
                html.H3(id=metric_id, children=default, className="mb-0"),
                html.P(label, className="text-muted mb-0 small"),
            ]),
        ], className="d-flex align-items-center"),
    ])], className="shadow-sm border-0 h-100")], md=md, className="mb-3")


def _chart_card(header: str, cid: str, md: int = 6) -> dbc.Col:
    return dbc.Col([dbc.Card([
        dbc.CardHeader(header, className="fw-bold"),
        dbc.CardBody(dcc.Graph(id=cid, style={"height": f"{CHART_HEIGHT_PX}px"},
                               config={"displayModeBar": False}), className="p-2"),
    ])], md=md, className="mb-3")


def build_results_tab() -> dbc.Tab:
    return dbc.Tab(
        label=f"3️⃣ {STEP_LABELS[2]}", tab_id=TAB_IDS[2],
        children=[dbc.Card([dbc.CardBody([
            html.Div(id="results-warnings"),
            dbc.Row([
                _metric_card("bi bi-building",     "#e74c3c", "metric-total-load",   "Gebäudeheizlast",    "0 kW", md=3),
                _metric_card("bi bi-rulers",       "#3498db", "metric-w-m2",         "Spezifische Heizlast", "0 W/m²", md=3),
                _metric_card("bi bi-award",        "#27ae60", "metric-energy-class", "Effizienzklasse",    "–", md=2),
                _metric_card("bi bi-droplet-half", "#f39c12", "metric-dhw",          "Warmwasserzuschlag", "0 kW", md=2),
                _metric_card("bi bi-snow",         "#2c3e50", "metric-outdoor",      "Auslegungstemperatur", "–", md=2),
            ], className="mb-2"),
            dbc.Alert(id="results-recommendation", color="info", className="mb-4"),
            dbc.Row([_chart_card("Heizlast je Raum", "room-load-chart", md=8),
                     _chart_card("Verlustanteile", "loss-share-chart", md=4)], className="g-3"),
            dbc.Card([
                dbc.CardHeader("📊 Raumweise Heizlast"),
                dbc.CardBody([html.Div(id="results-table")]),
            ], className="mb-4",
               style={"backgroundColor": "#f0f4ff", "border": "1px solid #cce", "boxShadow": "0 0 6px rgba(0,0,0,0.1)"}),
            dbc.ButtonGroup([
                dbc.Button([html.I(className="bi bi-filetype-csv me-1"), "Bericht (CSV)"],
                           id="btn-dl-summary-csv", color="secondary", outline=True),
                dbc.Button([html.I(className="bi bi-filetype-json me-1"), "Ergebnis (JSON)"],
                           id="btn-dl-results-json", color="secondary", outline=True),
            ]),
            dcc.Download(id="dl-summary-csv"),
            dcc.Download(id="dl-results-json"),
            html.Hr(),
            dbc.InputGroup([
                dbc.InputGroupText("Angebotsnummer"),
                dbc.Input(id="quote-id", type="text", placeholder="z. B. A-2024-017"),
                dbc.Button([html.I(className="bi bi-save me-1"), "Speichern"], id="btn-save-project", color="primary"),
            ], className="mt-2", style={"maxWidth": "520px"}),
            html.Div(id="save-status", className="mt-2"),
        ])])]
    )


# ---------------------------------------------------------------------------
# Tab 3: Materials / hydraulic balancing
# ---------------------------------------------------------------------------
def build_materials_tab() -> dbc.Tab:
    return dbc.Tab(
        label=f"4️⃣ {STEP_LABELS[3]}", tab_id=TAB_IDS[3],
        children=[dbc.Card([dbc.CardBody([
            dbc.Card([
                dbc.CardHeader("🌡️ Heizkörper"),
                dbc.CardBody([
                    dash_table.DataTable(
                        id="heater-table", editable=True, row_deletable=True,
                        columns=HEATER_COLUMNS, data=[],
                        dropdown={
                            "brand":  {"options": [{"label": b, "value": b} for b in list_brands()]},
                            "regime": {"options": [{"label": r, "value": r} for r in REGIMES]},
                        },
                        tooltip_header={
                            "output":     "Auslegungsleistung bei der gewählten Systemtemperatur (W).",
                            "valve_type": "Ventilbezeichnung, z. B. 'Danfoss RA-N'.",
                        },
                        tooltip_delay=200, tooltip_duration=None, page_size=20,
                        style_data_conditional=[{"if": {"row_index": "odd"}, "backgroundColor": "rgb(248,248,248)"}],
                        **TABLE_STYLE,
                    ),
                    dbc.Button([html.I(className="bi bi-plus-lg me-1"), "Heizkörper hinzufügen"],
                               id="btn-add-heater", color="primary", outline=True, size="sm",
                               className="mt-2"),
                ])
            ], className="mb-4"),
            dbc.Card([
                dbc.CardHeader("🔧 Hydraulischer Abgleich"),
                dbc.CardBody([html.Div(id="balancing-table")]),
            ], className="mb-4"),
            dbc.Card([
                dbc.CardHeader("🚿 Rohrnetz"),
                dbc.CardBody([
                    dash_table.DataTable(
                        id="pipe-table", editable=True, columns=PIPE_COLUMNS, data=[],
                        tooltip_header={
                            "k_minor": "Summe der Einzelwiderstandsbeiwerte (Bögen, T-Stücke, Ventile).",
                        },
                        tooltip_delay=200, tooltip_duration=None, page_size=20,
                        **TABLE_STYLE,
                    ),
                    html.Div(id="pipe-results", className="mt-3"),
                ]),
            ], className="mb-4"),
            dbc.ButtonGroup([
                dbc.Button([html.I(className="bi bi-filetype-csv me-1"), "Abgleich (CSV)"],
                           id="btn-dl-balancing-csv", color="secondary", outline=True),
                dbc.Button([html.I(className="bi bi-filetype-json me-1"), "Abgleich (JSON)"],
                           id="btn-dl-balancing-json", color="secondary", outline=True),
            ]),
            dcc.Download(id="dl-balancing-csv"),
            dcc.Download(id="dl-balancing-json"),
        ])])]
    )


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
def build_layout() -> dbc.Container:
    state = initial_project()
    return dbc.Container(
        [
            navbar,
            dcc.Store(id="project-store", data=state.to_dict()),
            dbc.Row([
                dbc.Col([
                    dbc.Tabs(
                        id="tabs", active_tab=TAB_IDS[0], className="justify-content-center",
                        children=[build_building_tab(state), build_rooms_tab(),
                                  build_results_tab(), build_materials_tab()],
                    ),
                    html.Div([
                        dbc.Button([html.I(className="bi bi-arrow-left me-1"), "Zurück"],
                                   id="btn-prev", color="secondary", outline=True),
                        dbc.Button(["Weiter", html.I(className="bi bi-arrow-right ms-1")],
                                   id="btn-next", color="primary"),
                    ], className="d-flex justify-content-between my-3"),
                    html.Footer(html.Small("Vereinfachte Heizlastberechnung nach DIN EN 12831",
                                           className="text-muted")),
                ], width=12)
            ], className="mb-4"),
        ],
        fluid=True,
        style={"backgroundColor": "#f4f6fa", "padding": "24px 0 0 0"},
    )


def issues_alert(issues, title: str):
    """Warning box listing validation issues; None when there are none."""
    if not issues:
        return None
    return dbc.Alert([
        html.Strong(title),
        html.Ul([html.Li(" – ".join(p for p in (i.floor, i.room, i.problem) if p)) for i in issues],
                className="mb-0"),
    ], color="warning", className="mt-2")
