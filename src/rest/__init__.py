"""
Thread Border Router REST core

Transport-independent request handling: dispatch table, status mapping,
diagnostic aggregation and the single-threaded server loop.
"""

from .config import RestConfig
from .diagnostics import DiagnosticAggregator, DiagnosticCache, AggregationState
from .message import HttpMethod, Request, Response
from .resource import Resource
from .server import RestServer
from .status import HttpStatusCode, get_http_status

__all__ = [
    'RestConfig',
    'DiagnosticAggregator',
    'DiagnosticCache',
    'AggregationState',
    'HttpMethod',
    'Request',
    'Response',
    'Resource',
    'RestServer',
    'HttpStatusCode',
    'get_http_status',
]
