"""
REST Blueprint - Thread border router API

Converts Flask requests into rest.message.Request objects, hands them to
the RestServer and blocks (ticking the event loop) until the response is
complete.
"""

import logging

from flask import Blueprint, Response as FlaskResponse, current_app, request

from rest.message import CONTENT_TYPE_JSON, HttpMethod, Request
from rest.status import HttpStatusCode, error_body, get_http_status

logger = logging.getLogger(__name__)

rest_bp = Blueprint('rest', __name__)

METHODS = [m.value for m in HttpMethod]


def get_server():
    """RestServer bound to the running app."""
    return current_app.config['REST_SERVER']


@rest_bp.route('/', defaults={'path': ''}, methods=METHODS)
@rest_bp.route('/<path:path>', methods=METHODS)
def dispatch(path):
    """Every path and method goes through the dispatch table."""
    server = get_server()

    try:
        method = HttpMethod.parse(request.method)
    except ValueError:
        # HEAD reaches GET views in Flask
        return FlaskResponse(error_body(HttpStatusCode.METHOD_NOT_ALLOWED),
                             status=get_http_status(HttpStatusCode.METHOD_NOT_ALLOWED),
                             content_type=CONTENT_TYPE_JSON)

    rest_request = Request(
        method=method,
        url=f"/{path}",
        headers=dict(request.headers),
        body=request.get_data(),
    )

    response = server.wait_for(server.handle_request(rest_request))

    logger.debug(f"{request.method} /{path} -> {response.status}")
    return FlaskResponse(
        response.body_bytes,
        status=response.status,
        content_type=response.content_type,
    )
