"""
Network Diagnostic TLVs

A diagnostic reply is a list of type-tagged values. The gateway treats the
values as opaque except for the short address, which names the originator.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List


class DiagTlvType(IntEnum):
    """Network diagnostic TLV type codes."""
    EXT_ADDRESS = 0
    SHORT_ADDRESS = 1
    MODE = 2
    TIMEOUT = 3
    CONNECTIVITY = 4
    ROUTE = 5
    LEADER_DATA = 6
    NETWORK_DATA = 7
    IP6_ADDRESS_LIST = 8
    MAC_COUNTERS = 9
    BATTERY_LEVEL = 14
    SUPPLY_VOLTAGE = 15
    CHILD_TABLE = 16
    CHANNEL_PAGES = 17
    MAX_CHILD_TIMEOUT = 19

    @property
    def json_name(self) -> str:
        return TLV_JSON_NAMES[self]


TLV_JSON_NAMES = {
    DiagTlvType.EXT_ADDRESS: "ExtAddress",
    DiagTlvType.SHORT_ADDRESS: "Rloc16",
    DiagTlvType.MODE: "Mode",
    DiagTlvType.TIMEOUT: "Timeout",
    DiagTlvType.CONNECTIVITY: "Connectivity",
    DiagTlvType.ROUTE: "Route",
    DiagTlvType.LEADER_DATA: "LeaderData",
    DiagTlvType.NETWORK_DATA: "NetworkData",
    DiagTlvType.IP6_ADDRESS_LIST: "IP6AddressList",
    DiagTlvType.MAC_COUNTERS: "MACCounters",
    DiagTlvType.BATTERY_LEVEL: "BatteryLevel",
    DiagTlvType.SUPPLY_VOLTAGE: "SupplyVoltage",
    DiagTlvType.CHILD_TABLE: "ChildTable",
    DiagTlvType.CHANNEL_PAGES: "ChannelPages",
    DiagTlvType.MAX_CHILD_TIMEOUT: "MaxChildTimeout",
}

# Every TLV the diagnostics resource asks for, in request order
ALL_TLV_TYPES = [int(t) for t in DiagTlvType]


@dataclass(frozen=True)
class DiagnosticTlv:
    """One diagnostic entry from a device reply.

    `type` is the raw TLV code (an unknown code is kept, not rejected).
    `value` is whatever the library decoded: int, str, bytes, list or dict.
    """
    type: int
    value: Any

    @property
    def is_short_address(self) -> bool:
        return self.type == DiagTlvType.SHORT_ADDRESS


@dataclass
class DiagnosticReply:
    """A single device's answer to a diagnostic query."""
    source: str  # IPv6 address of the answering device
    tlvs: List[DiagnosticTlv] = field(default_factory=list)

    def __iter__(self):
        return iter(self.tlvs)
