"""
ui/callbacks/rooms.py
=====================
Callbacks for the rooms step: table ↔ project store and room checklist.
"""
from __future__ import annotations

from dash import Input, Output, State, callback_context, no_update

from domain.models import new_id
from services.project_state import ProjectState, STEP_FLOORS, set_floors
from services.room_service import floors_to_rows, rows_to_floors
from services.validation_service import find_incomplete_rooms
from ui.layout import TAB_IDS, issues_alert

ROOMS_TAB = TAB_IDS[STEP_FLOORS]


def _blank_row(rows) -> dict:
    floor = rows[-1]["floor"] if rows else "Erdgeschoss"
    return {"id": new_id(), "floor": floor, "room": f"Raum {len(rows) + 1}", "room_type": "living",
            "area": None, "height": 2.5, "target": None, "wall_area": None, "window_area": None,
            "door_area": None, "ceiling": False, "floor_type": "beheizt", "mvhr": False, "hrv_pct": None}


def register(app):

    @app.callback(
        Output("room-table", "data"),
        Input("tabs", "active_tab"),
        Input("btn-add-room", "n_clicks"),
        State("project-store", "data"),
        State("room-table", "data"),
    )
    def fill_room_table(active_tab, n_add, data, rows):
        triggered = [t["prop_id"] for t in callback_context.triggered]
        if "btn-add-room.n_clicks" in triggered:
            rows = list(rows or [])
            rows.append(_blank_row(rows))
            return rows
        if rows and active_tab != ROOMS_TAB:
            return no_update
        return floors_to_rows(ProjectState.from_dict(data).floors)

    @app.callback(
        Output("project-store", "data", allow_duplicate=True),
        Input("room-table", "data"),
        State("project-store", "data"),
        prevent_initial_call=True,
    )
    def store_room_table(rows, data):
        state = ProjectState.from_dict(data)
        floors = rows_to_floors(rows or [], state.building, state.floors)
        return set_floors(state, floors).to_dict()

    @app.callback(
        Output("room-issues", "children"),
        Input("project-store", "data"),
    )
    def show_room_issues(data):
        issues = find_incomplete_rooms(ProjectState.from_dict(data).floors)
        return issues_alert(issues, "Unvollständige Räume:")
