"""
Mesh control library error codes

Every controller call that fails raises MeshError carrying one of these
codes. The REST layer remaps them into HTTP status codes per handler.
"""

from enum import Enum


class OtError(Enum):
    """Error codes surfaced by the Thread control library."""
    NONE = 0
    FAILED = 1
    DROP = 2
    NO_BUFS = 3
    NO_ROUTE = 4
    BUSY = 5
    PARSE = 6
    INVALID_ARGS = 7
    SECURITY = 8
    ADDRESS_QUERY = 9
    NO_ADDRESS = 10
    ABORT = 11
    NOT_IMPLEMENTED = 12
    INVALID_STATE = 13
    NO_ACK = 14
    CHANNEL_ACCESS_FAILURE = 15
    DETACHED = 16
    FCS = 17
    NO_FRAME_RECEIVED = 18
    UNKNOWN_NEIGHBOR = 19
    INVALID_SOURCE_ADDRESS = 20
    ADDRESS_FILTERED = 21
    DESTINATION_ADDRESS_FILTERED = 22
    NOT_FOUND = 23
    ALREADY = 24
    IP6_ADDRESS_CREATION_FAILURE = 26
    NOT_CAPABLE = 27
    RESPONSE_TIMEOUT = 28
    DUPLICATED = 29
    REASSEMBLY_TIMEOUT = 30
    NOT_TMF = 31
    NOT_LOWPAN_DATA_FRAME = 32
    LINK_MARGIN_LOW = 34
    INVALID_COMMAND = 35
    PENDING = 36
    REJECTED = 37

    def describe(self) -> str:
        """CamelCase name, e.g. NO_BUFS -> NoBufs."""
        return ''.join(part.capitalize() for part in self.name.split('_'))


class MeshError(Exception):
    """Raised when the mesh control library rejects an operation."""

    def __init__(self, error: OtError, message: str = ""):
        self.error = error
        super().__init__(message or f"mesh operation failed: {error.describe()}")
