"""
Flask application factory for the ThreadRest gateway

Run with threaded=False: RestServer, the diagnostic cache and the mesh
controller all assume they are only touched from one thread.
"""

import logging

from flask import Flask, Response as FlaskResponse

from rest.config import RestConfig
from rest.server import RestServer
from rest.status import HttpStatusCode, error_body, get_http_status

from .blueprints import register_blueprints

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = "DELETE, GET, OPTIONS, POST, PUT"
CORS_ALLOW_HEADERS = "Content-Type, Accept"


def _error_response(code: HttpStatusCode) -> FlaskResponse:
    return FlaskResponse(error_body(code), status=get_http_status(code),
                         content_type="application/json")


def create_app(server: RestServer, config: RestConfig = None) -> Flask:
    """Build the Flask app serving `server`."""
    app = Flask(__name__)
    app.config['REST_SERVER'] = server
    app.config['REST_CONFIG'] = config or server.config

    register_blueprints(app)

    @app.after_request
    def add_headers(response):
        """CORS for browser clients plus the usual security headers"""
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Methods'] = CORS_ALLOW_METHODS
        response.headers['Access-Control-Allow-Headers'] = CORS_ALLOW_HEADERS
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'no-referrer'
        response.headers['Content-Security-Policy'] = "default-src 'none'"
        return response

    # Methods outside the dispatch table never reach the blueprint
    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error_response(HttpStatusCode.METHOD_NOT_ALLOWED)

    @app.errorhandler(404)
    def not_found(error):
        return _error_response(HttpStatusCode.RESOURCE_NOT_FOUND)

    logger.debug(f"REST app created ({len(server.resource.paths)} resources)")
    return app
