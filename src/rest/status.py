"""
HTTP status mapping

Every error response goes through this module: the status line comes from
get_http_status() and the machine-readable body from error_body().
"""

import json
from enum import Enum

from mesh.errors import OtError


class HttpStatusCode(Enum):
    """Status codes the REST API can return."""
    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    BAD_REQUEST = 400
    RESOURCE_NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    INSUFFICIENT_STORAGE = 507


HTTP_STATUS_LINES = {
    HttpStatusCode.OK: "200 OK",
    HttpStatusCode.CREATED: "201 Created",
    HttpStatusCode.NO_CONTENT: "204 No Content",
    HttpStatusCode.BAD_REQUEST: "400 Bad Request",
    HttpStatusCode.RESOURCE_NOT_FOUND: "404 Not Found",
    HttpStatusCode.METHOD_NOT_ALLOWED: "405 Method Not Allowed",
    HttpStatusCode.REQUEST_TIMEOUT: "408 Request Timeout",
    HttpStatusCode.CONFLICT: "409 Conflict",
    HttpStatusCode.INTERNAL_SERVER_ERROR: "500 Internal Server Error",
    HttpStatusCode.INSUFFICIENT_STORAGE: "507 Insufficient Storage",
}

# Library errors that handlers remap instead of reporting as 500
MESH_ERROR_STATUS = {
    OtError.INVALID_ARGS: HttpStatusCode.BAD_REQUEST,
    OtError.NO_BUFS: HttpStatusCode.INSUFFICIENT_STORAGE,
    OtError.INVALID_STATE: HttpStatusCode.CONFLICT,
    OtError.BUSY: HttpStatusCode.CONFLICT,
    OtError.ALREADY: HttpStatusCode.CONFLICT,
    OtError.NOT_FOUND: HttpStatusCode.RESOURCE_NOT_FOUND,
}


def get_http_status(code: HttpStatusCode) -> str:
    """Status line for a code, e.g. '404 Not Found'."""
    return HTTP_STATUS_LINES.get(code, "")


def error_body(code: HttpStatusCode) -> str:
    """JSON error body: {"ErrorCode": 404, "ErrorMessage": "404 Not Found"}."""
    return json.dumps({
        "ErrorCode": code.value,
        "ErrorMessage": get_http_status(code),
    })


def mesh_error_to_status(error: OtError) -> HttpStatusCode:
    """Map a library error to the status a handler reports for it."""
    return MESH_ERROR_STATUS.get(error, HttpStatusCode.INTERNAL_SERVER_ERROR)
