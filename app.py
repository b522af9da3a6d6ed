"""
app.py
======
Dash entry point: builds the wizard, registers callbacks and mounts the
/heat-load API on the same Flask server.

    python app.py
"""
from __future__ import annotations

import logging

import dash_bootstrap_components as dbc
from dash import Dash

import config
from api.routes import create_blueprint
from services.persistence_service import HeatLoadRepository
from ui.callbacks import building, materials, navigation, results, rooms
from ui.layout import build_layout
from utils.logging_config import setup_logging

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ---------- Dash app ----------
external_stylesheets = [dbc.themes.ZEPHYR, dbc.icons.BOOTSTRAP]
app = Dash(__name__, external_stylesheets=external_stylesheets, suppress_callback_exceptions=True)
app.title = "Heizlastrechner"
server = app.server
repository = HeatLoadRepository()
server.register_blueprint(create_blueprint(repository))

app.layout = build_layout

for module in (navigation, building, rooms, materials):
    module.register(app)
results.register(app, repository)


if __name__ == "__main__":
    logger.info("Starting on http://%s:%d", config.HOST, config.PORT)
    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT)
