"""
Operational Dataset codec

Converts Thread operational datasets between three forms:
- OperationalDataset dataclass (what the controller stores)
- MeshCoP TLV bytes (the text/plain hex representation of the REST API)
- JSON-ready dicts (the application/json representation)

Only fields present in the dataset are emitted; absent fields stay None so
that a partial dataset can be merged into an existing one with update().
"""

import ipaddress
import struct
from dataclasses import dataclass, fields
from typing import Optional


# MeshCoP TLV types
TLV_CHANNEL = 0
TLV_PANID = 1
TLV_EXTPANID = 2
TLV_NETWORK_NAME = 3
TLV_PSKC = 4
TLV_NETWORK_KEY = 5
TLV_MESH_LOCAL_PREFIX = 7
TLV_SECURITY_POLICY = 12
TLV_ACTIVE_TIMESTAMP = 14
TLV_PENDING_TIMESTAMP = 51
TLV_DELAY_TIMER = 52
TLV_CHANNEL_MASK = 53

MAX_DATASET_LENGTH = 254
MAX_NETWORK_NAME_LENGTH = 16
NETWORK_KEY_SIZE = 16
PSKC_SIZE = 16
EXT_PANID_SIZE = 8
MESH_LOCAL_PREFIX_SIZE = 8


@dataclass
class Timestamp:
    """Active/pending timestamp: 48-bit seconds, 15-bit ticks, U bit."""
    seconds: int = 0
    ticks: int = 0
    authoritative: bool = False

    def to_bytes(self) -> bytes:
        value = (self.seconds << 16) | ((self.ticks & 0x7FFF) << 1) | int(self.authoritative)
        return struct.pack('>Q', value)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Timestamp':
        (value,) = struct.unpack('>Q', data)
        return cls(seconds=value >> 16, ticks=(value >> 1) & 0x7FFF, authoritative=bool(value & 1))

    def to_dict(self) -> dict:
        return {
            "Seconds": self.seconds,
            "Ticks": self.ticks,
            "Authoritative": self.authoritative,
        }

    @classmethod
    def from_dict(cls, data) -> 'Timestamp':
        if not isinstance(data, dict):
            raise ValueError("timestamp must be an object")
        seconds = data.get("Seconds", 0)
        ticks = data.get("Ticks", 0)
        if not isinstance(seconds, int) or not 0 <= seconds < (1 << 48):
            raise ValueError("invalid timestamp seconds")
        if not isinstance(ticks, int) or not 0 <= ticks < (1 << 15):
            raise ValueError("invalid timestamp ticks")
        return cls(seconds=seconds, ticks=ticks, authoritative=bool(data.get("Authoritative", False)))


@dataclass
class SecurityPolicy:
    """Key rotation time (hours) plus the raw policy flag bytes."""
    rotation_time: int = 672
    flags: bytes = b'\xf7\xf8'

    def to_bytes(self) -> bytes:
        return struct.pack('>H', self.rotation_time) + self.flags

    @classmethod
    def from_bytes(cls, data: bytes) -> 'SecurityPolicy':
        if len(data) < 3:
            raise ValueError("security policy TLV too short")
        (rotation,) = struct.unpack('>H', data[:2])
        return cls(rotation_time=rotation, flags=bytes(data[2:]))

    def to_dict(self) -> dict:
        return {
            "RotationTime": self.rotation_time,
            "Flags": self.flags.hex(),
        }

    @classmethod
    def from_dict(cls, data) -> 'SecurityPolicy':
        if not isinstance(data, dict):
            raise ValueError("security policy must be an object")
        rotation = data.get("RotationTime", 672)
        if not isinstance(rotation, int) or not 1 <= rotation <= 0xFFFF:
            raise ValueError("invalid rotation time")
        flags = _hex_field(data.get("Flags", "f7f8"), None, "Flags")
        if len(flags) not in (1, 2):
            raise ValueError("security policy flags must be 1 or 2 bytes")
        return cls(rotation_time=rotation, flags=flags)


@dataclass
class OperationalDataset:
    """A Thread operational dataset. None means 'field not present'."""
    active_timestamp: Optional[Timestamp] = None
    pending_timestamp: Optional[Timestamp] = None
    network_key: Optional[bytes] = None
    network_name: Optional[str] = None
    extended_pan_id: Optional[bytes] = None
    mesh_local_prefix: Optional[bytes] = None
    delay: Optional[int] = None  # milliseconds
    pan_id: Optional[int] = None
    channel: Optional[int] = None
    pskc: Optional[bytes] = None
    security_policy: Optional[SecurityPolicy] = None
    channel_mask: Optional[int] = None  # page 0 mask

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def update(self, other: 'OperationalDataset') -> None:
        """Overwrite fields that are present in `other`."""
        for f in fields(self):
            value = getattr(other, f.name)
            if value is not None:
                setattr(self, f.name, value)

    def to_dict(self) -> dict:
        """Serialize for JSON. Only present fields are included."""
        data = {}
        if self.active_timestamp is not None:
            data["ActiveTimestamp"] = self.active_timestamp.to_dict()
        if self.pending_timestamp is not None:
            data["PendingTimestamp"] = self.pending_timestamp.to_dict()
        if self.network_key is not None:
            data["NetworkKey"] = self.network_key.hex().upper()
        if self.network_name is not None:
            data["NetworkName"] = self.network_name
        if self.extended_pan_id is not None:
            data["ExtPanId"] = self.extended_pan_id.hex().upper()
        if self.mesh_local_prefix is not None:
            data["MeshLocalPrefix"] = format_mesh_local_prefix(self.mesh_local_prefix)
        if self.delay is not None:
            data["Delay"] = self.delay
        if self.pan_id is not None:
            data["PanId"] = self.pan_id
        if self.channel is not None:
            data["Channel"] = self.channel
        if self.pskc is not None:
            data["PSKc"] = self.pskc.hex().upper()
        if self.security_policy is not None:
            data["SecurityPolicy"] = self.security_policy.to_dict()
        if self.channel_mask is not None:
            data["ChannelMask"] = self.channel_mask
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'OperationalDataset':
        """Parse a (possibly partial) JSON dataset.

        Raises:
            ValueError: on unknown value types or out-of-range fields
        """
        if not isinstance(data, dict):
            raise ValueError("dataset must be a JSON object")

        dataset = cls()
        if "ActiveTimestamp" in data:
            dataset.active_timestamp = Timestamp.from_dict(data["ActiveTimestamp"])
        if "PendingTimestamp" in data:
            dataset.pending_timestamp = Timestamp.from_dict(data["PendingTimestamp"])
        if "NetworkKey" in data:
            dataset.network_key = _hex_field(data["NetworkKey"], NETWORK_KEY_SIZE, "NetworkKey")
        if "NetworkName" in data:
            name = data["NetworkName"]
            if not isinstance(name, str) or len(name.encode('utf-8')) > MAX_NETWORK_NAME_LENGTH:
                raise ValueError("invalid NetworkName")
            dataset.network_name = name
        if "ExtPanId" in data:
            dataset.extended_pan_id = _hex_field(data["ExtPanId"], EXT_PANID_SIZE, "ExtPanId")
        if "MeshLocalPrefix" in data:
            dataset.mesh_local_prefix = parse_mesh_local_prefix(data["MeshLocalPrefix"])
        if "Delay" in data:
            dataset.delay = _int_field(data["Delay"], 0xFFFFFFFF, "Delay")
        if "PanId" in data:
            dataset.pan_id = _int_field(data["PanId"], 0xFFFF, "PanId")
        if "Channel" in data:
            dataset.channel = _int_field(data["Channel"], 0xFFFF, "Channel")
        if "PSKc" in data:
            dataset.pskc = _hex_field(data["PSKc"], PSKC_SIZE, "PSKc")
        if "SecurityPolicy" in data:
            dataset.security_policy = SecurityPolicy.from_dict(data["SecurityPolicy"])
        if "ChannelMask" in data:
            dataset.channel_mask = _int_field(data["ChannelMask"], 0xFFFFFFFF, "ChannelMask")
        return dataset


def _hex_field(value, size: Optional[int], name: str) -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a hex string")
    try:
        raw = bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"{name} is not valid hex")
    if size is not None and len(raw) != size:
        raise ValueError(f"{name} must be {size} bytes")
    return raw


def _int_field(value, maximum: int, name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= maximum:
        raise ValueError(f"invalid {name}")
    return value


def format_mesh_local_prefix(prefix: bytes) -> str:
    network = ipaddress.IPv6Network((prefix + bytes(8), 64))
    return str(network)


def parse_mesh_local_prefix(text) -> bytes:
    if not isinstance(text, str):
        raise ValueError("MeshLocalPrefix must be a string")
    try:
        network = ipaddress.IPv6Network(text, strict=False)
    except ValueError:
        raise ValueError("invalid MeshLocalPrefix")
    if network.prefixlen != 64:
        raise ValueError("MeshLocalPrefix must be a /64")
    return network.network_address.packed[:MESH_LOCAL_PREFIX_SIZE]


# ============================================================================
# TLV encoding
# ============================================================================

def _tlv(tlv_type: int, value: bytes) -> bytes:
    return bytes([tlv_type, len(value)]) + value


def encode_tlvs(dataset: OperationalDataset) -> bytes:
    """Encode the present fields as MeshCoP TLVs (ascending type order)."""
    out = b''
    if dataset.channel is not None:
        out += _tlv(TLV_CHANNEL, struct.pack('>BH', 0, dataset.channel))
    if dataset.pan_id is not None:
        out += _tlv(TLV_PANID, struct.pack('>H', dataset.pan_id))
    if dataset.extended_pan_id is not None:
        out += _tlv(TLV_EXTPANID, dataset.extended_pan_id)
    if dataset.network_name is not None:
        out += _tlv(TLV_NETWORK_NAME, dataset.network_name.encode('utf-8'))
    if dataset.pskc is not None:
        out += _tlv(TLV_PSKC, dataset.pskc)
    if dataset.network_key is not None:
        out += _tlv(TLV_NETWORK_KEY, dataset.network_key)
    if dataset.mesh_local_prefix is not None:
        out += _tlv(TLV_MESH_LOCAL_PREFIX, dataset.mesh_local_prefix)
    if dataset.security_policy is not None:
        out += _tlv(TLV_SECURITY_POLICY, dataset.security_policy.to_bytes())
    if dataset.active_timestamp is not None:
        out += _tlv(TLV_ACTIVE_TIMESTAMP, dataset.active_timestamp.to_bytes())
    if dataset.pending_timestamp is not None:
        out += _tlv(TLV_PENDING_TIMESTAMP, dataset.pending_timestamp.to_bytes())
    if dataset.delay is not None:
        out += _tlv(TLV_DELAY_TIMER, struct.pack('>I', dataset.delay))
    if dataset.channel_mask is not None:
        # one entry: page 0, 4-byte mask
        out += _tlv(TLV_CHANNEL_MASK, struct.pack('>BBI', 0, 4, dataset.channel_mask))
    return out


def decode_tlvs(data: bytes) -> OperationalDataset:
    """Decode MeshCoP TLVs. Unknown TLV types are skipped.

    Raises:
        ValueError: on truncated TLVs or malformed known values
    """
    if len(data) > MAX_DATASET_LENGTH:
        raise ValueError("dataset too long")

    dataset = OperationalDataset()
    offset = 0
    while offset < len(data):
        if offset + 2 > len(data):
            raise ValueError("truncated TLV header")
        tlv_type, length = data[offset], data[offset + 1]
        value = data[offset + 2:offset + 2 + length]
        if len(value) != length:
            raise ValueError(f"truncated TLV {tlv_type}")
        offset += 2 + length

        try:
            if tlv_type == TLV_CHANNEL:
                _page, dataset.channel = struct.unpack('>BH', value)
            elif tlv_type == TLV_PANID:
                (dataset.pan_id,) = struct.unpack('>H', value)
            elif tlv_type == TLV_EXTPANID:
                dataset.extended_pan_id = _sized(value, EXT_PANID_SIZE)
            elif tlv_type == TLV_NETWORK_NAME:
                dataset.network_name = value.decode('utf-8')
            elif tlv_type == TLV_PSKC:
                dataset.pskc = _sized(value, PSKC_SIZE)
            elif tlv_type == TLV_NETWORK_KEY:
                dataset.network_key = _sized(value, NETWORK_KEY_SIZE)
            elif tlv_type == TLV_MESH_LOCAL_PREFIX:
                dataset.mesh_local_prefix = _sized(value, MESH_LOCAL_PREFIX_SIZE)
            elif tlv_type == TLV_SECURITY_POLICY:
                dataset.security_policy = SecurityPolicy.from_bytes(value)
            elif tlv_type == TLV_ACTIVE_TIMESTAMP:
                dataset.active_timestamp = Timestamp.from_bytes(value)
            elif tlv_type == TLV_PENDING_TIMESTAMP:
                dataset.pending_timestamp = Timestamp.from_bytes(value)
            elif tlv_type == TLV_DELAY_TIMER:
                (dataset.delay,) = struct.unpack('>I', value)
            elif tlv_type == TLV_CHANNEL_MASK:
                dataset.channel_mask = _decode_channel_mask(value)
        except (struct.error, UnicodeDecodeError) as e:
            raise ValueError(f"malformed TLV {tlv_type}: {e}")

    return dataset


def _sized(value: bytes, size: int) -> bytes:
    if len(value) != size:
        raise ValueError(f"expected {size} bytes, got {len(value)}")
    return bytes(value)


def _decode_channel_mask(value: bytes) -> Optional[int]:
    offset = 0
    while offset + 2 <= len(value):
        page, mask_length = value[offset], value[offset + 1]
        mask = value[offset + 2:offset + 2 + mask_length]
        if page == 0 and mask_length == 4 and len(mask) == 4:
            return struct.unpack('>I', mask)[0]
        offset += 2 + mask_length
    return None
