"""
Simulated Thread Mesh Controller

Provides an in-memory MeshController for development, demos and tests,
without a radio co-processor attached.

Diagnostic queries are answered by a set of simulated nodes. Each answer is
queued with a delivery time and handed to the caller's callback from
process(), never from inside send_diagnostic_get(), matching how the real
stack delivers replies on a later event-loop tick.

Usage:
    controller = SimulatedMeshController()
    controller.send_diagnostic_get("ff03::2", ALL_TLV_TYPES, on_reply)
    controller.process(time.monotonic() + 1.0)   # delivers due replies
"""

import copy
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .controller import (
    DiagnosticCallback,
    JoinerDiscerner,
    JoinerInfo,
    LeaderData,
    MeshController,
    SrpClientHostInfo,
    SrpClientService,
)
from .dataset import OperationalDataset, SecurityPolicy, Timestamp
from .errors import MeshError, OtError
from .names import CommissionerState, DeviceRole, SrpClientItemState, SrpServerState
from .tlv import DiagnosticReply, DiagnosticTlv, DiagTlvType

logger = logging.getLogger(__name__)

MULTICAST_ALL_ROUTERS = "ff03::2"
MESH_LOCAL_PREFIX = "fd11:22:0:0"
MAX_JOINERS = 4

# SRP client buffer sizes (host name excludes the terminating NUL)
MAX_SRP_HOST_NAME_LENGTH = 63
MAX_SRP_SERVICES = 2


def rloc_address(rloc16: int) -> str:
    """Mesh-local RLOC IPv6 address for a 16-bit short address."""
    return f"{MESH_LOCAL_PREFIX}:0:ff:fe00:{rloc16:x}"


@dataclass
class SimulatedThreadNode:
    """A simulated device that answers diagnostic queries."""
    rloc16: int
    ext_address: bytes
    role: DeviceRole = DeviceRole.ROUTER
    reply_delay: float = 0.1  # seconds between query and reply
    battery_level: int = 100
    include_short_address: bool = True
    reachable: bool = True

    @property
    def address(self) -> str:
        return rloc_address(self.rloc16)

    @property
    def is_router(self) -> bool:
        return self.role in (DeviceRole.ROUTER, DeviceRole.LEADER)

    def build_reply(self, tlv_types: Sequence[int], leader: LeaderData) -> DiagnosticReply:
        """Answer the requested TLV types in request order."""
        values = {
            DiagTlvType.EXT_ADDRESS: self.ext_address.hex(),
            DiagTlvType.SHORT_ADDRESS: self.rloc16,
            DiagTlvType.MODE: {"RxOnWhenIdle": 1, "DeviceType": 1, "NetworkData": 1},
            DiagTlvType.TIMEOUT: 240,
            DiagTlvType.CONNECTIVITY: {
                "ParentPriority": 0,
                "LinkQuality3": 1,
                "LinkQuality2": 0,
                "LinkQuality1": 0,
                "LeaderCost": 1,
                "IdSequence": 1,
                "ActiveRouters": 2,
            },
            DiagTlvType.ROUTE: {"IdSequence": 1, "RouteData": []},
            DiagTlvType.LEADER_DATA: leader.to_dict(),
            DiagTlvType.NETWORK_DATA: "08040b02174703140040fd00db800000000000",
            DiagTlvType.IP6_ADDRESS_LIST: [self.address],
            DiagTlvType.MAC_COUNTERS: {"IfInUnknownProtos": 0, "IfInErrors": 0, "IfOutErrors": 0},
            DiagTlvType.BATTERY_LEVEL: self.battery_level,
            DiagTlvType.SUPPLY_VOLTAGE: 3300,
            DiagTlvType.CHILD_TABLE: [],
            DiagTlvType.CHANNEL_PAGES: [0],
            DiagTlvType.MAX_CHILD_TIMEOUT: 240,
        }
        tlvs = []
        for tlv_type in tlv_types:
            if tlv_type == DiagTlvType.SHORT_ADDRESS and not self.include_short_address:
                continue
            if tlv_type in values:
                tlvs.append(DiagnosticTlv(int(tlv_type), values[tlv_type]))
        return DiagnosticReply(source=self.address, tlvs=tlvs)


@dataclass(order=True)
class _ScheduledReply:
    deliver_at: float
    sequence: int
    callback: DiagnosticCallback = field(compare=False)
    error: OtError = field(compare=False)
    reply: Optional[DiagnosticReply] = field(compare=False)


class SimulatedMeshController(MeshController):
    """
    In-memory Thread stack.

    Failure injection:
        controller.fail_next("send_diagnostic_get", OtError.NO_BUFS)

    makes the next call of that method raise MeshError(NO_BUFS).
    """

    DEFAULT_NODES = [
        (0x1200, "1aa2b3c4d5e6f701", DeviceRole.ROUTER, 0.10),
        (0x3400, "1aa2b3c4d5e6f702", DeviceRole.ROUTER, 0.50),
        (0x5800, "1aa2b3c4d5e6f703", DeviceRole.ROUTER, 1.20),
    ]

    def __init__(self, nodes: Optional[List[SimulatedThreadNode]] = None,
                 clock: Callable[[], float] = time.monotonic,
                 use_default_nodes: bool = True):
        self._clock = clock
        self._failures: Dict[str, OtError] = {}
        self._scheduled: List[_ScheduledReply] = []
        self._sequence = 0
        self._last_tick: Optional[float] = None

        if nodes is not None:
            self.nodes = list(nodes)
        elif use_default_nodes:
            self.nodes = [
                SimulatedThreadNode(rloc16=rloc, ext_address=bytes.fromhex(ext), role=role, reply_delay=delay)
                for rloc, ext, role, delay in self.DEFAULT_NODES
            ]
        else:
            self.nodes = []

        self._factory_defaults()

    def _factory_defaults(self):
        self.role = DeviceRole.LEADER
        self.rloc16 = 0x0400
        self.extended_address = bytes.fromhex("aabbccddeeff0011")
        self.factory_eui64 = bytes.fromhex("f4ce36000000abcd")
        self.mesh_local_eid = f"{MESH_LOCAL_PREFIX}:8c3b:2a41:d0f5:9e31"
        self.border_agent_id = bytes.fromhex("00112233445566778899aabbccddeeff")
        self.leader_data = LeaderData(
            partition_id=0x5a3c9b2d,
            weighting=64,
            data_version=3,
            stable_data_version=2,
            leader_router_id=1,
        )
        self.ip6_enabled = True
        self.thread_enabled = True
        self.active_dataset: Optional[OperationalDataset] = OperationalDataset(
            active_timestamp=Timestamp(seconds=1),
            network_key=bytes.fromhex("00112233445566778899aabbccddeeff"),
            network_name="OpenThread-sim",
            extended_pan_id=bytes.fromhex("dead00beef00cafe"),
            mesh_local_prefix=bytes.fromhex("fd11002200000000"),
            pan_id=0xface,
            channel=15,
            pskc=bytes.fromhex("c23a76e98f1a6483639b1ac1271e2e27"),
            security_policy=SecurityPolicy(),
            channel_mask=0x07fff800,
        )
        self.pending_dataset: Optional[OperationalDataset] = None
        self.commissioner_state = CommissionerState.DISABLED
        self.joiners: List[JoinerInfo] = []
        self.srp_server_state = SrpServerState.DISABLED
        self.srp_client_running = False
        self.srp_host = SrpClientHostInfo()
        self.srp_services: List[SrpClientService] = []

    # ========================================
    # Simulation controls
    # ========================================

    def fail_next(self, operation: str, error: OtError = OtError.FAILED):
        """Make the next call to `operation` raise MeshError(error)."""
        self._failures[operation] = error

    def _check(self, operation: str):
        error = self._failures.pop(operation, None)
        if error is not None:
            raise MeshError(error, f"{operation} failed: {error.describe()}")

    def schedule_reply(self, deliver_at: float, callback: DiagnosticCallback,
                       reply: Optional[DiagnosticReply] = None,
                       error: OtError = OtError.NONE):
        """Queue a reply (or failure) for delivery at `deliver_at`."""
        self._sequence += 1
        self._scheduled.append(_ScheduledReply(deliver_at, self._sequence, callback, error, reply))

    @property
    def pending_reply_count(self) -> int:
        return len(self._scheduled)

    def add_node(self, node: SimulatedThreadNode):
        self.nodes.append(node)

    def _now(self) -> float:
        """Current time: the clock, but never earlier than the last tick."""
        now = self._clock()
        if self._last_tick is not None and self._last_tick > now:
            return self._last_tick
        return now

    # ========================================
    # Node identity / addressing
    # ========================================

    def get_device_role(self) -> DeviceRole:
        return self.role

    def get_rloc16(self) -> int:
        return self.rloc16

    def get_rloc_address(self) -> str:
        return rloc_address(self.rloc16)

    def get_mesh_local_eid(self) -> str:
        return self.mesh_local_eid

    def get_extended_address(self) -> bytes:
        return self.extended_address

    def get_factory_eui64(self) -> bytes:
        return self.factory_eui64

    def set_extended_address(self, ext_address: bytes) -> None:
        self._check("set_extended_address")
        if self.role != DeviceRole.DISABLED:
            raise MeshError(OtError.INVALID_STATE, "extended address can only change while disabled")
        self.extended_address = bytes(ext_address)

    def get_network_name(self) -> str:
        if self.active_dataset and self.active_dataset.network_name is not None:
            return self.active_dataset.network_name
        return ""

    def get_extended_panid(self) -> bytes:
        if self.active_dataset and self.active_dataset.extended_pan_id is not None:
            return self.active_dataset.extended_pan_id
        return bytes(8)

    def get_leader_data(self) -> LeaderData:
        self._check("get_leader_data")
        if self.role in (DeviceRole.DISABLED, DeviceRole.DETACHED):
            raise MeshError(OtError.DETACHED)
        return self.leader_data

    def get_router_count(self) -> int:
        count = sum(1 for node in self.nodes if node.is_router)
        if self.role in (DeviceRole.ROUTER, DeviceRole.LEADER):
            count += 1
        return count

    def get_border_agent_id(self) -> bytes:
        self._check("get_border_agent_id")
        return self.border_agent_id

    # ========================================
    # Interface state
    # ========================================

    def is_ip6_enabled(self) -> bool:
        return self.ip6_enabled

    def set_ip6_enabled(self, enabled: bool) -> None:
        self._check("set_ip6_enabled")
        self.ip6_enabled = enabled

    def set_thread_enabled(self, enabled: bool) -> None:
        self._check("set_thread_enabled")
        if enabled:
            if not self.ip6_enabled:
                raise MeshError(OtError.INVALID_STATE, "IPv6 interface is down")
            if self.active_dataset is None:
                raise MeshError(OtError.INVALID_STATE, "no active dataset")
            self.thread_enabled = True
            self.role = DeviceRole.LEADER
        else:
            self.thread_enabled = False
            self.role = DeviceRole.DISABLED

    def detach(self) -> None:
        self._check("detach")
        self.thread_enabled = False
        self.role = DeviceRole.DISABLED

    def erase_persistent_info(self) -> None:
        self._check("erase_persistent_info")
        if self.thread_enabled:
            raise MeshError(OtError.INVALID_STATE, "thread still enabled")
        self.active_dataset = None
        self.pending_dataset = None

    def reset(self) -> None:
        logger.info("Simulated controller reset")
        self._scheduled.clear()
        self.thread_enabled = False
        self.role = DeviceRole.DISABLED
        self.commissioner_state = CommissionerState.DISABLED
        self.joiners.clear()
        self.srp_client_running = False
        self.srp_host = SrpClientHostInfo()
        self.srp_services.clear()

    # ========================================
    # Operational datasets
    # ========================================

    def get_active_dataset(self) -> OperationalDataset:
        self._check("get_active_dataset")
        if self.active_dataset is None:
            raise MeshError(OtError.NOT_FOUND)
        return copy.deepcopy(self.active_dataset)

    def get_pending_dataset(self) -> OperationalDataset:
        self._check("get_pending_dataset")
        if self.pending_dataset is None:
            raise MeshError(OtError.NOT_FOUND)
        return copy.deepcopy(self.pending_dataset)

    def set_active_dataset(self, dataset: OperationalDataset) -> None:
        self._check("set_active_dataset")
        self.active_dataset = copy.deepcopy(dataset)

    def set_pending_dataset(self, dataset: OperationalDataset) -> None:
        self._check("set_pending_dataset")
        self.pending_dataset = copy.deepcopy(dataset)

    def create_new_network(self) -> OperationalDataset:
        self._check("create_new_network")
        return OperationalDataset(
            active_timestamp=Timestamp(seconds=1),
            network_key=bytes(random.getrandbits(8) for _ in range(16)),
            network_name=f"OpenThread-{random.getrandbits(16):04x}",
            extended_pan_id=bytes(random.getrandbits(8) for _ in range(8)),
            mesh_local_prefix=bytes([0xfd]) + bytes(random.getrandbits(8) for _ in range(5)) + bytes(2),
            pan_id=random.getrandbits(16) & 0xFFFE,
            channel=random.randint(11, 26),
            pskc=bytes(random.getrandbits(8) for _ in range(16)),
            security_policy=SecurityPolicy(),
            channel_mask=0x07fff800,
        )

    # ========================================
    # Commissioner
    # ========================================

    def get_commissioner_state(self) -> CommissionerState:
        return self.commissioner_state

    def commissioner_start(self) -> None:
        self._check("commissioner_start")
        if self.role in (DeviceRole.DISABLED, DeviceRole.DETACHED):
            raise MeshError(OtError.INVALID_STATE, "not attached")
        if self.commissioner_state != CommissionerState.DISABLED:
            raise MeshError(OtError.ALREADY)
        self.commissioner_state = CommissionerState.ACTIVE

    def commissioner_stop(self) -> None:
        self._check("commissioner_stop")
        if self.commissioner_state == CommissionerState.DISABLED:
            raise MeshError(OtError.ALREADY)
        self.commissioner_state = CommissionerState.DISABLED
        self.joiners.clear()

    def get_joiners(self) -> List[JoinerInfo]:
        return list(self.joiners)

    def add_joiner(self, joiner: JoinerInfo) -> None:
        self._check("add_joiner")
        if self.commissioner_state != CommissionerState.ACTIVE:
            raise MeshError(OtError.INVALID_STATE)
        self.joiners = [j for j in self.joiners
                        if (j.eui64, j.discerner) != (joiner.eui64, joiner.discerner)]
        if len(self.joiners) >= MAX_JOINERS:
            raise MeshError(OtError.NO_BUFS, "joiner table full")
        self.joiners.append(joiner)

    def remove_joiner(self, eui64: Optional[bytes] = None,
                      discerner: Optional[JoinerDiscerner] = None) -> None:
        self._check("remove_joiner")
        remaining = [j for j in self.joiners if (j.eui64, j.discerner) != (eui64, discerner)]
        if len(remaining) == len(self.joiners):
            raise MeshError(OtError.NOT_FOUND)
        self.joiners = remaining

    # ========================================
    # SRP
    # ========================================

    def get_srp_server_state(self) -> SrpServerState:
        return self.srp_server_state

    def set_srp_server_enabled(self, enabled: bool) -> None:
        self._check("set_srp_server_enabled")
        self.srp_server_state = SrpServerState.RUNNING if enabled else SrpServerState.DISABLED

    def is_srp_client_running(self) -> bool:
        return self.srp_client_running

    def srp_client_autostart(self) -> None:
        self._check("srp_client_autostart")
        self.srp_client_running = True
        self._register_srp_items()

    def srp_client_stop(self) -> None:
        self._check("srp_client_stop")
        self.srp_client_running = False

    def _register_srp_items(self):
        # A running client with a named host registers instantly
        if not self.srp_client_running or not self.srp_host.name:
            return
        self.srp_host.state = SrpClientItemState.REGISTERED
        for service in self.srp_services:
            service.state = SrpClientItemState.REGISTERED

    def get_srp_client_host(self) -> SrpClientHostInfo:
        return copy.deepcopy(self.srp_host)

    def set_srp_client_host_name(self, name: str) -> None:
        self._check("set_srp_client_host_name")
        if self.srp_host.state not in (SrpClientItemState.TO_ADD, SrpClientItemState.REMOVED):
            raise MeshError(OtError.INVALID_STATE, "host name can only change before registration")
        if len(name) > MAX_SRP_HOST_NAME_LENGTH:
            raise MeshError(OtError.INVALID_ARGS, "host name too long")
        self.srp_host.name = name
        self.srp_host.state = SrpClientItemState.TO_ADD
        self._register_srp_items()

    def set_srp_client_host_address(self, address: Optional[str]) -> None:
        self._check("set_srp_client_host_address")
        if address is None:
            self.srp_host.auto_address = True
            self.srp_host.addresses = []
        else:
            self.srp_host.auto_address = False
            self.srp_host.addresses = [address]

    def remove_srp_client_host_and_services(self) -> None:
        self._check("remove_srp_client_host_and_services")
        if self.srp_host.state == SrpClientItemState.REMOVED and not self.srp_services:
            raise MeshError(OtError.ALREADY, "nothing registered")
        self.srp_host = SrpClientHostInfo()
        self.srp_services.clear()

    def get_srp_client_services(self) -> List[SrpClientService]:
        return copy.deepcopy(self.srp_services)

    def add_srp_client_service(self, service: SrpClientService) -> None:
        self._check("add_srp_client_service")
        for existing in self.srp_services:
            if (existing.service_name, existing.instance_name) == (service.service_name, service.instance_name):
                raise MeshError(OtError.ALREADY, "service already added")
        if len(self.srp_services) >= MAX_SRP_SERVICES:
            raise MeshError(OtError.NO_BUFS, "no free service entry")
        entry = copy.deepcopy(service)
        entry.state = SrpClientItemState.TO_ADD
        self.srp_services.append(entry)
        self._register_srp_items()

    def remove_srp_client_service(self, service_name: str, instance_name: str) -> None:
        self._check("remove_srp_client_service")
        remaining = [s for s in self.srp_services
                     if (s.service_name, s.instance_name) != (service_name, instance_name)]
        if len(remaining) == len(self.srp_services):
            raise MeshError(OtError.NOT_FOUND)
        self.srp_services = remaining

    # ========================================
    # Network diagnostics
    # ========================================

    def _local_node(self) -> SimulatedThreadNode:
        return SimulatedThreadNode(
            rloc16=self.rloc16,
            ext_address=self.extended_address,
            role=self.role,
            reply_delay=0.05,
        )

    def send_diagnostic_get(self, destination: str, tlv_types: Sequence[int],
                            callback: DiagnosticCallback) -> None:
        self._check("send_diagnostic_get")
        if self.role in (DeviceRole.DISABLED, DeviceRole.DETACHED):
            raise MeshError(OtError.INVALID_STATE, "not attached")

        now = self._now()
        local = self._local_node()

        if destination == MULTICAST_ALL_ROUTERS:
            responders = [local] + [n for n in self.nodes if n.is_router]
        elif destination == local.address:
            responders = [local]
        else:
            responders = [n for n in self.nodes if n.address == destination]

        logger.debug(f"Diagnostic query to {destination}: {len(responders)} responder(s)")

        for node in responders:
            if node.reachable:
                self.schedule_reply(now + node.reply_delay, callback,
                                    node.build_reply(tlv_types, self.leader_data))
            else:
                self.schedule_reply(now + node.reply_delay, callback,
                                    error=OtError.RESPONSE_TIMEOUT)

    # ========================================
    # Event loop
    # ========================================

    def process(self, now: float) -> None:
        """Deliver every reply whose delivery time has come, oldest first."""
        if self._last_tick is None or now > self._last_tick:
            self._last_tick = now
        due = sorted(r for r in self._scheduled if r.deliver_at <= now)
        if not due:
            return
        self._scheduled = [r for r in self._scheduled if r.deliver_at > now]
        for item in due:
            item.callback(item.error, item.reply, now)
