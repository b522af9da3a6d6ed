"""
ui/callbacks/navigation.py
==========================
Wizard navigation: previous/next buttons and tab clicks keep the active tab
and the stored step in sync.
"""
from __future__ import annotations

from dash import Input, Output, State, callback_context, no_update

from services.project_state import LAST_STEP, STEP_BUILDING, ProjectState, go_to_step, next_step, prev_step
from ui.layout import TAB_IDS


def register(app):
    """Register all navigation callbacks on the given Dash app."""

    @app.callback(
        Output("tabs", "active_tab"),
        Output("project-store", "data", allow_duplicate=True),
        Input("btn-prev", "n_clicks"),
        Input("btn-next", "n_clicks"),
        Input("tabs", "active_tab"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def navigate(n_prev, n_next, active_tab, data):
        state = ProjectState.from_dict(data)
        triggered = [t["prop_id"] for t in callback_context.triggered]
        if "btn-next.n_clicks" in triggered:
            state = next_step(state)
        elif "btn-prev.n_clicks" in triggered:
            state = prev_step(state)
        elif active_tab in TAB_IDS:
            state = go_to_step(state, TAB_IDS.index(active_tab))
            return no_update, state.to_dict()
        else:
            return no_update, no_update
        return TAB_IDS[state.step], state.to_dict()

    @app.callback(
        Output("btn-prev", "disabled"),
        Output("btn-next", "disabled"),
        Input("tabs", "active_tab"),
    )
    def toggle_buttons(active_tab):
        step = TAB_IDS.index(active_tab) if active_tab in TAB_IDS else STEP_BUILDING
        return step == STEP_BUILDING, step == LAST_STEP
