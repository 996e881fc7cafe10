"""
REST Server Core

Owns the mesh controller, the dispatch table and the list of outstanding
(deferred) responses, and drives them with process() ticks.

Everything here runs on one thread. The HTTP adapter calls
handle_request() and then wait_for(), which keeps ticking the mesh
library and the completion poller until the response is complete.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from mesh.controller import MeshController

from .config import RestConfig
from .diagnostics import DiagnosticAggregator, DiagnosticCache
from .message import Request, Response
from .resource import Resource
from .status import HttpStatusCode

logger = logging.getLogger(__name__)


@dataclass
class OutstandingRequest:
    """A request whose response is still pending."""
    request: Request
    response: Response
    received_at: float

    def age(self, now: float) -> float:
        return now - self.received_at


class RestServer:
    """Transport-independent request processing."""

    def __init__(self, controller: MeshController,
                 config: Optional[RestConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.controller = controller
        self.config = config or RestConfig()
        self._clock = clock
        self._sleep = sleep

        self.cache = DiagnosticCache(eviction_threshold=self.config.diag_reset_timeout)
        self.aggregator = DiagnosticAggregator(
            controller,
            cache=self.cache,
            collect_timeout=self.config.collect_timeout,
            clock=clock,
        )
        self.resource = Resource(controller, self.aggregator)

        self._outstanding: List[OutstandingRequest] = []
        self.requests_handled = 0
        self.requests_timed_out = 0

    @property
    def outstanding_count(self) -> int:
        return len(self._outstanding)

    def handle_request(self, request: Request) -> Response:
        """Dispatch one request. The returned response may still be pending."""
        now = self._clock()
        response = Response()
        self.requests_handled += 1

        self.resource.handle(request, response, now)

        if not response.is_complete:
            self._outstanding.append(OutstandingRequest(request, response, now))
        return response

    def process(self, now: Optional[float] = None) -> None:
        """One event-loop tick: library callbacks, then the completion poller."""
        if now is None:
            now = self._clock()

        self.controller.process(now)

        remaining = []
        for item in self._outstanding:
            if not item.response.is_complete:
                self.resource.handle_callback(item.request, item.response, now)

            if not item.response.is_complete and item.age(now) >= self.config.request_timeout:
                logger.warning(f"{item.request.method.value} {item.request.url} timed out "
                               f"after {item.age(now):.1f}s")
                self.requests_timed_out += 1
                self.resource.error_handler(item.response, HttpStatusCode.REQUEST_TIMEOUT)
                self.aggregator.discard(item.response)

            if not item.response.is_complete:
                remaining.append(item)

        self._outstanding = remaining

    def wait_for(self, response: Response) -> Response:
        """Tick until `response` is complete; request_timeout bounds the wait."""
        while not response.is_complete:
            self.process()
            if response.is_complete:
                break
            self._sleep(self.config.tick_interval)
        return response
