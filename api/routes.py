"""
api/routes.py
=============
HTTP endpoints for saved heat-load documents.

    POST /heat-load        upsert by (user, quoteId)     → 201
    GET  /heat-load        list the caller's documents    → 200
    GET  /heat-load/<id>   one document of the caller     → 200 / 404

The caller is identified by the ``X-User-Id`` header. No calculation happens
server-side.
"""
from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

import config
from services.persistence_service import HeatLoadNotFound, HeatLoadRepository, HeatLoadValidationError

logger = logging.getLogger(__name__)


def _reply(status: int, message: str, data=None):
    body = {"code": status, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def _public(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "_seq"}


def create_blueprint(repository: Optional[HeatLoadRepository] = None) -> Blueprint:
    repo = repository or HeatLoadRepository()
    bp = Blueprint("heat_load", __name__)

    @bp.errorhandler(HeatLoadValidationError)
    def _validation_error(e: HeatLoadValidationError):
        return _reply(e.status, str(e))

    @bp.errorhandler(HeatLoadNotFound)
    def _not_found(e: HeatLoadNotFound):
        return _reply(404, str(e))

    @bp.errorhandler(Exception)
    def _unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Heat-load request failed")
        return _reply(500, "Internal server error")

    @bp.route("/heat-load", methods=["POST"])
    def save_heat_load():
        payload = request.get_json(silent=True) or {}
        doc = repo.upsert(request.headers.get(config.USER_HEADER), payload.get("quoteId"), payload)
        return _reply(201, "Saved", _public(doc))

    @bp.route("/heat-load", methods=["GET"])
    def list_heat_loads():
        docs = repo.list_for_user(request.headers.get(config.USER_HEADER))
        return _reply(200, "OK", [_public(d) for d in docs])

    @bp.route("/heat-load/<doc_id>", methods=["GET"])
    def get_heat_load(doc_id: str):
        doc = repo.get(doc_id, request.headers.get(config.USER_HEADER))
        return _reply(200, "OK", _public(doc))

    bp.repository = repo
    return bp
