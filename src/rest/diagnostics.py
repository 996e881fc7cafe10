"""
Network Diagnostic Aggregation

A GET on /diagnostics fans a query out to the mesh: one query to this
device's own RLOC and one to the all-routers multicast group. Any number of
devices may answer, at any time, in any order, or not at all. Replies are
folded into a shared DiagnosticCache as they arrive.

The request itself is finished by polling, not by reply arrival: on every
event-loop tick the transport calls poll() for each pending response, and
once the collection window has elapsed the cache is flushed into the body.

Lifecycle of one request:

    IDLE --start()--> QUERY_SENT --> COLLECTING --poll() after window--> FLUSHED

A failure while issuing either query completes the response with 500 and
never enters COLLECTING.

Threading: the cache and the pending-window table are plain dicts with no
locking. They are only safe because the transport, the mesh library and
this module all run on one event-loop thread. Moving any of them to a
worker thread requires a lock or a message queue around this class.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from mesh.controller import MeshController
from mesh.errors import MeshError, OtError
from mesh.tlv import ALL_TLV_TYPES, DiagnosticReply, DiagnosticTlv

from .errors import InternalError
from .json_codec import diag_to_json
from .message import Response
from .status import HttpStatusCode

logger = logging.getLogger(__name__)

# Seconds after which a cached record is considered stale
DIAG_RESET_TIMEOUT = 3.0

# Seconds a diagnostics request collects replies before it is answered
DIAG_COLLECT_TIMEOUT = 2.0

MULTICAST_ADDR_ALL_ROUTERS = "ff03::2"

# Key for replies that carry no short-address TLV. All such replies share
# it, so a later one replaces an earlier one.
PLACEHOLDER_KEY = "0xffee"


def format_originator_key(rloc16: int) -> str:
    """Cache key for a device, e.g. 0x1200 -> '0x1200'."""
    return f"0x{rloc16:04x}"


# ============================================================================
# Cache
# ============================================================================

@dataclass
class DiagnosticRecord:
    """Most recent reply from one originator."""
    key: str
    tlvs: List[DiagnosticTlv]
    received_at: float

    def age(self, now: float) -> float:
        return now - self.received_at


class DiagnosticCache:
    """
    Originator key -> latest DiagnosticRecord.

    put() overwrites: entries from two replies under the same key are never
    merged. Call evict() before any externally visible read so records from
    an earlier, already flushed round do not leak into a new answer.
    """

    def __init__(self, eviction_threshold: float = DIAG_RESET_TIMEOUT):
        self.eviction_threshold = eviction_threshold
        self._records: Dict[str, DiagnosticRecord] = {}

    def put(self, key: str, tlvs: List[DiagnosticTlv], now: float) -> None:
        self._records[key] = DiagnosticRecord(key=key, tlvs=list(tlvs), received_at=now)

    def evict(self, now: float) -> int:
        """Drop records aged >= threshold. Returns how many were dropped."""
        stale = [key for key, record in self._records.items()
                 if record.age(now) >= self.eviction_threshold]
        for key in stale:
            del self._records[key]
        if stale:
            logger.debug(f"Evicted {len(stale)} stale diagnostic record(s)")
        return len(stale)

    def snapshot(self) -> List[List[DiagnosticTlv]]:
        """TLV lists of every held record. Order across keys is unspecified."""
        return [list(record.tlvs) for record in self._records.values()]

    def get(self, key: str) -> Optional[DiagnosticRecord]:
        return self._records.get(key)

    def keys(self) -> List[str]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records


# ============================================================================
# Aggregation engine + completion poller
# ============================================================================

class AggregationState(Enum):
    IDLE = "idle"
    QUERY_SENT = "query_sent"
    COLLECTING = "collecting"
    FLUSHED = "flushed"


@dataclass
class PendingAggregation:
    """Per-request collection window."""
    response: Response
    state: AggregationState = AggregationState.IDLE
    started_at: Optional[float] = None
    issued_to: List[str] = field(default_factory=list)


class DiagnosticAggregator:
    """
    Issues diagnostic fan-out queries and finishes the pending responses.

    One aggregator (and its cache) lives as long as the gateway. Every
    diagnostics request gets its own PendingAggregation but shares the
    cache, so concurrent requests see each other's replies.
    """

    def __init__(self, controller: MeshController,
                 cache: Optional[DiagnosticCache] = None,
                 collect_timeout: float = DIAG_COLLECT_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic):
        self.controller = controller
        self.cache = cache if cache is not None else DiagnosticCache()
        self.collect_timeout = collect_timeout
        self._clock = clock
        self._windows: Dict[Response, PendingAggregation] = {}
        self.replies_received = 0
        self.replies_failed = 0

    # --- Idle -> QuerySent -> Collecting ---

    def start(self, response: Response, now: float) -> PendingAggregation:
        """Send both queries and leave `response` pending.

        Raises:
            InternalError: if the library refuses either query
        """
        window = PendingAggregation(response=response)
        try:
            rloc = self.controller.get_rloc_address()
            for destination in (rloc, MULTICAST_ADDR_ALL_ROUTERS):
                self.controller.send_diagnostic_get(destination, ALL_TLV_TYPES, self.handle_reply)
                window.issued_to.append(destination)
        except MeshError as e:
            logger.error(f"Failed to send diagnostic query: {e}")
            raise InternalError(str(e))

        window.state = AggregationState.QUERY_SENT
        response.set_callback(now)
        window.started_at = now
        window.state = AggregationState.COLLECTING
        self._windows[response] = window
        logger.debug(f"Diagnostic collection started at {now:.3f} ({', '.join(window.issued_to)})")
        return window

    # --- reply callback ---

    def handle_reply(self, error: OtError, reply: Optional[DiagnosticReply],
                     now: Optional[float] = None) -> None:
        """Fold one device reply into the cache.

        A failed reply is logged and dropped; it never fails the request.
        `now` is the time of the tick that delivered the reply.
        """
        if error != OtError.NONE or reply is None:
            self.replies_failed += 1
            logger.warning(f"Failed to get diagnostic data: {error.describe()}")
            return

        if now is None:
            now = self._clock()

        key = PLACEHOLDER_KEY
        tlvs = []
        for tlv in reply:
            if tlv.is_short_address:
                key = format_originator_key(tlv.value)
            tlvs.append(tlv)

        self.cache.put(key, tlvs, now)
        self.replies_received += 1
        logger.debug(f"Diagnostic reply from {key} ({len(tlvs)} TLVs)")

    # --- Collecting -> Flushed ---

    def poll(self, response: Response, now: float) -> bool:
        """Finish `response` if its window has elapsed. Returns True if done."""
        if response.is_complete or not response.needs_callback:
            return response.is_complete

        elapsed = now - response.start_time
        if elapsed < self.collect_timeout:
            return False

        self.cache.evict(now)
        body = diag_to_json(self.cache.snapshot())

        response.set_status(HttpStatusCode.OK)
        response.set_body(body)
        response.set_complete()

        window = self._windows.pop(response, None)
        if window is not None:
            window.state = AggregationState.FLUSHED
        logger.debug(f"Diagnostic response flushed after {elapsed:.3f}s with {len(self.cache)} record(s)")
        return True

    def discard(self, response: Response) -> None:
        """Forget the window of a response that was answered some other way."""
        self._windows.pop(response, None)

    def state_of(self, response: Response) -> AggregationState:
        """Current phase of a request (FLUSHED once it has been answered)."""
        window = self._windows.get(response)
        if window is not None:
            return window.state
        return AggregationState.FLUSHED if response.is_complete else AggregationState.IDLE

    @property
    def pending_count(self) -> int:
        return len(self._windows)
