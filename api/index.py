"""
api/index.py
============
Serverless entry point: adapts an API-gateway style event to the WSGI app
that serves both the Dash wizard and the /heat-load endpoints.
"""
from __future__ import annotations

import logging

from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Response

from app import server

logger = logging.getLogger(__name__)

server.wsgi_app = ProxyFix(server.wsgi_app)


def handler(event, context):
    builder = EnvironBuilder(
        path=event.get("path", "/"),
        method=event.get("httpMethod", "GET"),
        headers=event.get("headers") or {},
        query_string=event.get("queryStringParameters"),
        data=event.get("body", None),
    )
    env = builder.get_environ()
    resp = Response.from_app(server.wsgi_app, env)
    if resp.status_code >= 500:
        logger.error("%s %s → %d", env["REQUEST_METHOD"], env["PATH_INFO"], resp.status_code)
    return {
        "statusCode": resp.status_code,
        "headers": dict(resp.headers),
        "body": resp.get_data(as_text=True),
    }
