"""
Request and Response objects

A Request is immutable once built. A Response is mutable until
set_complete() is called; after that every setter raises
ResponseCompletedError. The transport must only write complete responses.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .status import HttpStatusCode, get_http_status

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_PLAIN = "text/plain"

ACCEPT_HEADER = "accept"
CONTENT_TYPE_HEADER = "content-type"


class HttpMethod(Enum):
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, method: str) -> 'HttpMethod':
        """Parse an HTTP method name. Raises ValueError if unsupported."""
        return cls(method.upper())


@dataclass(frozen=True)
class Request:
    """An inbound request as seen by the dispatch table."""
    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b''
    arrival_time: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        # Strip any query string; dispatch is exact-match on the path
        path = self.url.split('?', 1)[0]
        object.__setattr__(self, 'url', path)
        normalized = {k.lower(): v for k, v in dict(self.headers).items()}
        object.__setattr__(self, 'headers', MappingProxyType(normalized))
        if isinstance(self.body, str):
            object.__setattr__(self, 'body', self.body.encode('utf-8'))

    def get_header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


class ResponseCompletedError(RuntimeError):
    """Raised when code tries to modify an already completed response."""


class Response:
    """Outbound response, filled in by a handler or the completion poller."""

    def __init__(self):
        self._status = get_http_status(HttpStatusCode.OK)
        self._content_type = CONTENT_TYPE_JSON
        self._body = ""
        self._complete = False
        self._callback = False
        self._start_time: Optional[float] = None

    def _check_mutable(self):
        if self._complete:
            raise ResponseCompletedError("response already completed")

    # --- setters ---

    def set_status(self, code: HttpStatusCode):
        self._check_mutable()
        self._status = get_http_status(code)

    def set_body(self, body: str):
        self._check_mutable()
        self._body = body

    def set_content_type(self, content_type: str):
        self._check_mutable()
        self._content_type = content_type

    def set_callback(self, now: float):
        """Mark this response as pending; `now` starts the collection window."""
        self._check_mutable()
        self._callback = True
        self._start_time = now

    def set_complete(self):
        self._check_mutable()
        self._complete = True

    # --- getters ---

    @property
    def status(self) -> str:
        return self._status

    @property
    def status_code(self) -> int:
        return int(self._status.split(' ', 1)[0]) if self._status else 0

    @property
    def content_type(self) -> str:
        return self._content_type

    @property
    def body(self) -> str:
        return self._body

    @property
    def body_bytes(self) -> bytes:
        return self._body.encode('utf-8')

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def needs_callback(self) -> bool:
        return self._callback

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    def __repr__(self) -> str:
        state = "complete" if self._complete else ("pending" if self._callback else "open")
        return f"<Response {self._status!r} {state}>"
