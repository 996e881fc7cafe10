"""
Thread mesh control library interface

The REST gateway depends on the abstract MeshController only. The simulated
controller stands in for the real stack in tests and --simulate mode.
"""

from .controller import JoinerDiscerner, JoinerInfo, LeaderData, MeshController
from .errors import MeshError, OtError
from .simulator import MULTICAST_ALL_ROUTERS, SimulatedMeshController, SimulatedThreadNode
from .tlv import ALL_TLV_TYPES, DiagnosticReply, DiagnosticTlv, DiagTlvType

__all__ = [
    'MeshController',
    'MeshError',
    'OtError',
    'LeaderData',
    'JoinerInfo',
    'JoinerDiscerner',
    'SimulatedMeshController',
    'SimulatedThreadNode',
    'MULTICAST_ALL_ROUTERS',
    'ALL_TLV_TYPES',
    'DiagnosticReply',
    'DiagnosticTlv',
    'DiagTlvType',
]
