"""
REST gateway error taxonomy

Handlers raise these instead of building error responses by hand.
Resource.handle() turns any RestError into a completed error response
through the status mapper.
"""

from mesh.errors import MeshError

from .status import HttpStatusCode, mesh_error_to_status


class RestError(Exception):
    """Base class for errors that end a request with an error status."""
    status = HttpStatusCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)


class InvalidArgsError(RestError):
    """Malformed or out-of-range caller input."""
    status = HttpStatusCode.BAD_REQUEST


class InvalidStateError(RestError):
    """Operation not permitted in the current mesh state."""
    status = HttpStatusCode.CONFLICT


class NotFoundError(RestError):
    """Requested sub-resource does not exist."""
    status = HttpStatusCode.RESOURCE_NOT_FOUND


class InternalError(RestError):
    """Library or engine failure with no corrective action."""
    status = HttpStatusCode.INTERNAL_SERVER_ERROR


class InsufficientStorageError(RestError):
    """The library ran out of buffers or table space."""
    status = HttpStatusCode.INSUFFICIENT_STORAGE


class RequestTimeoutError(RestError):
    """Transport-level request timeout."""
    status = HttpStatusCode.REQUEST_TIMEOUT


class MeshCallError(RestError):
    """A library failure whose status comes from mesh_error_to_status()."""

    def __init__(self, mesh_error: MeshError):
        super().__init__(str(mesh_error))
        self.mesh_error = mesh_error
        self.status = mesh_error_to_status(mesh_error.error)
