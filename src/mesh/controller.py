"""
Mesh Controller Interface

The REST gateway never talks to the Thread stack directly. It calls into a
MeshController, which wraps whatever binding is available on the device
(the simulator in tests and --simulate mode).

Contract:
- Every method that can fail raises MeshError.
- send_diagnostic_get() only dispatches the query. Replies arrive later,
  zero or more times, through the callback, from inside process(now),
  stamped with that tick's `now`.
- All calls happen on the event-loop thread; implementations need no locks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .dataset import OperationalDataset
from .errors import OtError
from .names import (
    CommissionerState,
    DeviceRole,
    SrpClientItemState,
    SrpServerState,
    get_srp_client_item_state_name,
)
from .tlv import DiagnosticReply

# callback(error, reply, now); reply is None whenever error is not OtError.NONE.
# `now` is the time of the process() tick that delivered the reply.
DiagnosticCallback = Callable[[OtError, Optional[DiagnosticReply], float], None]

EXT_ADDRESS_SIZE = 8
BORDER_AGENT_ID_SIZE = 16


@dataclass
class LeaderData:
    """Thread network partition leader information."""
    partition_id: int
    weighting: int
    data_version: int
    stable_data_version: int
    leader_router_id: int

    def to_dict(self) -> dict:
        return {
            "PartitionId": self.partition_id,
            "Weighting": self.weighting,
            "DataVersion": self.data_version,
            "StableDataVersion": self.stable_data_version,
            "LeaderRouterId": self.leader_router_id,
        }


@dataclass(frozen=True)
class JoinerDiscerner:
    """Joiner discerner: `length` low-order bits of `value`."""
    value: int
    length: int

    def __str__(self) -> str:
        return f"0x{self.value:x}/{self.length}"


@dataclass
class JoinerInfo:
    """A joiner entry in the commissioner table.

    Exactly one of eui64/discerner identifies the joiner; both None means
    'any joiner' (the "*" wildcard).
    """
    pskd: str
    eui64: Optional[bytes] = None
    discerner: Optional[JoinerDiscerner] = None
    timeout: int = 120  # seconds

    def to_dict(self) -> dict:
        data = {"Pskd": self.pskd}
        if self.discerner is not None:
            data["Discerner"] = str(self.discerner)
        elif self.eui64 is not None:
            data["Eui64"] = self.eui64.hex()
        else:
            data["Eui64"] = "*"
        data["Timeout"] = self.timeout
        return data


@dataclass
class SrpClientHostInfo:
    """Host the SRP client registers. An empty address list with
    auto_address set means the client picks the addresses itself."""
    name: str = ""
    addresses: List[str] = field(default_factory=list)
    auto_address: bool = False
    state: SrpClientItemState = SrpClientItemState.REMOVED

    def to_dict(self) -> dict:
        return {
            "HostName": self.name,
            "HostAddresses": list(self.addresses),
            "AutoAddress": self.auto_address,
            "State": get_srp_client_item_state_name(self.state),
        }


@dataclass
class SrpClientService:
    """A service registered through the SRP client."""
    service_name: str  # e.g. "_ipps._tcp"
    instance_name: str
    port: int
    priority: int = 0
    weight: int = 0
    state: SrpClientItemState = SrpClientItemState.TO_ADD

    def to_dict(self) -> dict:
        return {
            "ServiceName": self.service_name,
            "InstanceName": self.instance_name,
            "Port": self.port,
            "Priority": self.priority,
            "Weight": self.weight,
            "State": get_srp_client_item_state_name(self.state),
        }


class MeshController(ABC):
    """Capability surface the REST gateway needs from the Thread stack."""

    # --- node identity / addressing ---

    @abstractmethod
    def get_device_role(self) -> DeviceRole:
        pass

    @abstractmethod
    def get_rloc16(self) -> int:
        pass

    @abstractmethod
    def get_rloc_address(self) -> str:
        pass

    @abstractmethod
    def get_mesh_local_eid(self) -> str:
        pass

    @abstractmethod
    def get_extended_address(self) -> bytes:
        pass

    @abstractmethod
    def get_factory_eui64(self) -> bytes:
        pass

    @abstractmethod
    def set_extended_address(self, ext_address: bytes) -> None:
        pass

    @abstractmethod
    def get_network_name(self) -> str:
        pass

    @abstractmethod
    def get_extended_panid(self) -> bytes:
        pass

    @abstractmethod
    def get_leader_data(self) -> LeaderData:
        pass

    @abstractmethod
    def get_router_count(self) -> int:
        pass

    @abstractmethod
    def get_border_agent_id(self) -> bytes:
        pass

    # --- interface state ---

    @abstractmethod
    def is_ip6_enabled(self) -> bool:
        pass

    @abstractmethod
    def set_ip6_enabled(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def set_thread_enabled(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def detach(self) -> None:
        pass

    @abstractmethod
    def erase_persistent_info(self) -> None:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    # --- operational datasets ---

    @abstractmethod
    def get_active_dataset(self) -> OperationalDataset:
        """Raises MeshError(NOT_FOUND) when no active dataset exists."""

    @abstractmethod
    def get_pending_dataset(self) -> OperationalDataset:
        """Raises MeshError(NOT_FOUND) when no pending dataset exists."""

    @abstractmethod
    def set_active_dataset(self, dataset: OperationalDataset) -> None:
        pass

    @abstractmethod
    def set_pending_dataset(self, dataset: OperationalDataset) -> None:
        pass

    @abstractmethod
    def create_new_network(self) -> OperationalDataset:
        """Generate a fresh random dataset (not applied)."""

    # --- commissioner ---

    @abstractmethod
    def get_commissioner_state(self) -> CommissionerState:
        pass

    @abstractmethod
    def commissioner_start(self) -> None:
        pass

    @abstractmethod
    def commissioner_stop(self) -> None:
        pass

    @abstractmethod
    def get_joiners(self) -> List[JoinerInfo]:
        pass

    @abstractmethod
    def add_joiner(self, joiner: JoinerInfo) -> None:
        pass

    @abstractmethod
    def remove_joiner(self, eui64: Optional[bytes] = None,
                      discerner: Optional[JoinerDiscerner] = None) -> None:
        """Remove one joiner; both None removes the wildcard entry."""

    # --- SRP ---

    @abstractmethod
    def get_srp_server_state(self) -> SrpServerState:
        pass

    @abstractmethod
    def set_srp_server_enabled(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def is_srp_client_running(self) -> bool:
        pass

    @abstractmethod
    def srp_client_autostart(self) -> None:
        pass

    @abstractmethod
    def srp_client_stop(self) -> None:
        pass

    @abstractmethod
    def get_srp_client_host(self) -> SrpClientHostInfo:
        pass

    @abstractmethod
    def set_srp_client_host_name(self, name: str) -> None:
        """Raises MeshError(INVALID_STATE) once the host is registered."""

    @abstractmethod
    def set_srp_client_host_address(self, address: Optional[str]) -> None:
        """Use one explicit IPv6 address, or None for automatic addresses."""

    @abstractmethod
    def remove_srp_client_host_and_services(self) -> None:
        pass

    @abstractmethod
    def get_srp_client_services(self) -> List[SrpClientService]:
        pass

    @abstractmethod
    def add_srp_client_service(self, service: SrpClientService) -> None:
        """Raises MeshError(NO_BUFS) when no service entry is free."""

    @abstractmethod
    def remove_srp_client_service(self, service_name: str, instance_name: str) -> None:
        """Raises MeshError(NOT_FOUND) if no such service is registered."""

    # --- network diagnostics ---

    @abstractmethod
    def send_diagnostic_get(self, destination: str, tlv_types: Sequence[int],
                            callback: DiagnosticCallback) -> None:
        """Dispatch a diagnostic query. Raises MeshError if not accepted."""

    # --- event loop ---

    @abstractmethod
    def process(self, now: float) -> None:
        """Run one tick of library processing (delivers pending callbacks)."""
