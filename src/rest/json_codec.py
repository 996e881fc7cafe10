"""
JSON encoding for REST bodies

Encoders turn domain values into JSON text. Decoders parse request bodies
and raise InvalidArgsError on anything malformed, so handlers can validate
input before touching the mesh controller.
"""

import ipaddress
import json
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from mesh.controller import JoinerDiscerner, JoinerInfo, LeaderData, SrpClientHostInfo, SrpClientService
from mesh.dataset import OperationalDataset
from mesh.tlv import DiagnosticTlv, DiagTlvType

from .errors import InvalidArgsError

# Thread PSKd: 6-32 chars, uppercase alphanumerics without I, O, Q, Z
PSKD_PATTERN = re.compile(r'^[0-9A-HJ-NPR-Y]{6,32}$')
EUI64_HEX_LENGTH = 16
MAX_DISCERNER_LENGTH = 64
DEFAULT_JOINER_TIMEOUT = 120
MAX_SRP_HOST_NAME_LENGTH = 63
SRP_AUTO_ADDRESS = "auto"


# ============================================================================
# Encoders
# ============================================================================

def string_to_json(value: str) -> str:
    return json.dumps(value)


def number_to_json(value: int) -> str:
    return json.dumps(value)


def bytes_to_hex_json(value: bytes) -> str:
    return json.dumps(value.hex().upper())


def leader_data_to_json(leader_data: LeaderData) -> str:
    return json.dumps(leader_data.to_dict())


def node_to_json(node: Dict[str, Any]) -> str:
    return json.dumps(node)


def dataset_to_json(dataset: OperationalDataset) -> str:
    return json.dumps(dataset.to_dict())


def joiners_to_json(joiners: Iterable[JoinerInfo]) -> str:
    return json.dumps([j.to_dict() for j in joiners])


def srp_host_to_json(host: SrpClientHostInfo) -> str:
    return json.dumps(host.to_dict())


def srp_services_to_json(services: Iterable[SrpClientService]) -> str:
    return json.dumps([s.to_dict() for s in services])


def _tlv_json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, (ipaddress.IPv6Address, ipaddress.IPv6Network)):
        return str(value)
    if isinstance(value, list):
        return [_tlv_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _tlv_json_value(v) for k, v in value.items()}
    return value


def _tlv_json_name(tlv_type: int) -> str:
    try:
        return DiagTlvType(tlv_type).json_name
    except ValueError:
        return f"Tlv{tlv_type}"


def diag_record_to_dict(tlvs: Sequence[DiagnosticTlv]) -> Dict[str, Any]:
    """One device's TLVs as an object, keys in arrival order."""
    record = {}
    for tlv in tlvs:
        record[_tlv_json_name(tlv.type)] = _tlv_json_value(tlv.value)
    return record


def diag_to_json(diag_set: Iterable[Sequence[DiagnosticTlv]]) -> str:
    """Serialize a cache snapshot: a JSON array with one object per device."""
    return json.dumps([diag_record_to_dict(tlvs) for tlvs in diag_set])


# ============================================================================
# Decoders
# ============================================================================

def _load(body: bytes) -> Any:
    try:
        return json.loads(body.decode('utf-8') if isinstance(body, bytes) else body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidArgsError("body is not valid JSON")


def parse_json_string(body: bytes) -> str:
    """Body must be a single JSON string, e.g. "enable"."""
    value = _load(body)
    if not isinstance(value, str):
        raise InvalidArgsError("body must be a JSON string")
    return value


def parse_hex(text: str, size: Optional[int] = None) -> bytes:
    """Decode a hex string, optionally requiring an exact byte length."""
    try:
        raw = bytes.fromhex(text.strip())
    except ValueError:
        raise InvalidArgsError("invalid hex string")
    if size is not None and len(raw) != size:
        raise InvalidArgsError(f"expected {size} bytes, got {len(raw)}")
    return raw


def parse_dataset(body: bytes, pending: bool = False) -> OperationalDataset:
    """Parse a JSON dataset. Pending datasets must carry a Delay."""
    data = _load(body)
    try:
        dataset = OperationalDataset.from_dict(data)
    except ValueError as e:
        raise InvalidArgsError(str(e))
    if pending and dataset.delay is None:
        raise InvalidArgsError("pending dataset requires Delay")
    return dataset


def parse_discerner(text: str) -> Optional[JoinerDiscerner]:
    """Parse 'value/length'. Returns None if `text` is not discerner-shaped."""
    if '/' not in text:
        return None
    value_text, _, length_text = text.partition('/')
    try:
        value = int(value_text, 0)
        length = int(length_text)
    except ValueError:
        raise InvalidArgsError(f"invalid discerner: {text}")
    if not 0 < length <= MAX_DISCERNER_LENGTH or value < 0 or value >= (1 << length):
        raise InvalidArgsError(f"invalid discerner: {text}")
    return JoinerDiscerner(value=value, length=length)


def parse_joiner(body: bytes) -> JoinerInfo:
    """Parse {"Pskd": ..., "Eui64"|"Discerner": ..., "Timeout": ...}."""
    data = _load(body)
    if not isinstance(data, dict):
        raise InvalidArgsError("joiner must be a JSON object")

    pskd = data.get("Pskd")
    if not isinstance(pskd, str) or not PSKD_PATTERN.match(pskd):
        raise InvalidArgsError("invalid Pskd")

    timeout = data.get("Timeout", DEFAULT_JOINER_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
        raise InvalidArgsError("invalid Timeout")

    joiner = JoinerInfo(pskd=pskd, timeout=timeout)

    if "Discerner" in data:
        discerner = data["Discerner"]
        if not isinstance(discerner, str):
            raise InvalidArgsError("invalid Discerner")
        joiner.discerner = parse_discerner(discerner)
        if joiner.discerner is None:
            raise InvalidArgsError("invalid Discerner")
    else:
        eui64 = data.get("Eui64", "*")
        if not isinstance(eui64, str):
            raise InvalidArgsError("invalid Eui64")
        if eui64 != "*":
            joiner.eui64 = parse_hex(eui64, EUI64_HEX_LENGTH // 2)

    return joiner


def _required_string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidArgsError(f"invalid {key}")
    return value


def _optional_u16(data: Dict[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xffff:
        raise InvalidArgsError(f"invalid {key}")
    return value


def parse_srp_host(body: bytes):
    """Parse {"HostName": ..., "HostAddress": "auto" | IPv6}.

    Returns (name, address); address is None for automatic addresses.
    """
    data = _load(body)
    if not isinstance(data, dict):
        raise InvalidArgsError("host must be a JSON object")

    name = _required_string(data, "HostName")
    if len(name) > MAX_SRP_HOST_NAME_LENGTH:
        raise InvalidArgsError("HostName too long")

    address = _required_string(data, "HostAddress")
    if address == SRP_AUTO_ADDRESS:
        return name, None
    try:
        return name, str(ipaddress.IPv6Address(address))
    except ValueError:
        raise InvalidArgsError(f"invalid HostAddress: {address}")


def parse_srp_service(body: bytes) -> SrpClientService:
    data = _load(body)
    if not isinstance(data, dict):
        raise InvalidArgsError("service must be a JSON object")

    if "Port" not in data:
        raise InvalidArgsError("invalid Port")
    return SrpClientService(
        service_name=_required_string(data, "ServiceName"),
        instance_name=_required_string(data, "InstanceName"),
        port=_optional_u16(data, "Port"),
        priority=_optional_u16(data, "Priority"),
        weight=_optional_u16(data, "Weight"),
    )


def parse_srp_service_names(body: bytes):
    """Parse {"ServiceName": ..., "InstanceName": ...} for removal."""
    data = _load(body)
    if not isinstance(data, dict):
        raise InvalidArgsError("service must be a JSON object")
    return _required_string(data, "ServiceName"), _required_string(data, "InstanceName")
