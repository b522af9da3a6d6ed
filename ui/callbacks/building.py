"""
ui/callbacks/building.py
========================
Callbacks for the building step: form → project store, design-temperature
lookup and the building checklist.
"""
from __future__ import annotations

import logging

from dash import Input, Output, State, callback_context, no_update

from domain.heat_load import resolve_design_outdoor_temp
from domain.presets import coerce_era, coerce_insulation, era_from_year
from domain.units import non_negative, parse_number
from services.climate_service import fetch_design_outdoor_temp, lookup_query, with_design_temperature
from services.project_state import ProjectState, set_building, set_dimensioning, update_building
from services.validation_service import building_issues
from ui.layout import issues_alert

logger = logging.getLogger(__name__)


def register(app):

    @app.callback(
        Output("project-store", "data", allow_duplicate=True),
        Output("building-era", "value"),
        Input("building-type", "value"),
        Input("building-address", "value"),
        Input("building-postal-code", "value"),
        Input("building-location", "value"),
        Input("building-construction-year", "value"),
        Input("building-era", "value"),
        Input("insulation-level", "value"),
        Input("thermal-bridge-preset", "value"),
        Input("manual-design-temp", "value"),
        Input("residents", "value"),
        Input("dhw-litres", "value"),
        Input("bivalence-temp", "value"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def update_building_from_form(building_type, address, postal_code, location, year, era,
                                  insulation, tb_preset, manual_temp, residents, dhw_litres,
                                  bivalence, data):
        state = ProjectState.from_dict(data)
        triggered = [t["prop_id"] for t in callback_context.triggered]

        year_n = parse_number(year)
        era_out = no_update
        if "building-construction-year.value" in triggered and year_n is not None:
            era = era_from_year(year_n).value
            era_out = era

        n_residents = int(non_negative(residents))
        state = update_building(
            state,
            building_type=building_type or "",
            address=address or "",
            postal_code=postal_code or "",
            location=location or "",
            construction_year=None if year_n is None else int(year_n),
            building_era=coerce_era(era),
            insulation_level=coerce_insulation(insulation),
            thermal_bridge_preset=tb_preset or None,
            manual_design_outdoor_temp_c=parse_number(manual_temp),
            residents=max(1, n_residents),
        )
        state = set_dimensioning(
            state,
            residents=n_residents,
            dhw_per_resident_l_per_day=non_negative(dhw_litres),
            bivalence_temperature_c=parse_number(bivalence),
        )
        return state.to_dict(), era_out

    @app.callback(
        Output("project-store", "data", allow_duplicate=True),
        Input("btn-climate-lookup", "n_clicks"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def lookup_design_temperature(n_clicks, data):
        if not n_clicks:
            return no_update
        state = ProjectState.from_dict(data)
        query = lookup_query(state.building)
        if not query:
            return no_update
        result = fetch_design_outdoor_temp(query)
        if result is None:
            return no_update
        logger.info("Design outdoor temperature for %r: %.1f °C", query, result.temp_c)
        return set_building(state, with_design_temperature(state.building, result)).to_dict()

    @app.callback(
        Output("design-temp-info", "children"),
        Output("building-issues", "children"),
        Input("project-store", "data"),
    )
    def show_building_status(data):
        building = ProjectState.from_dict(data).building
        temp = resolve_design_outdoor_temp(building)
        if building.manual_design_outdoor_temp_c is not None:
            source = "manuell"
        elif building.design_outdoor_temp_c is not None:
            source = building.design_outdoor_temp_meta.get("provider") or "Klimadienst"
        else:
            source = "Standardwert"
        info = f"Auslegung mit {temp:.1f} °C ({source})"
        return info, issues_alert(building_issues(building), "Noch fehlende Angaben:")
