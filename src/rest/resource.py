"""
REST Resource Dispatch

Maps request paths to resource handlers. Each resource switches on the
HTTP method; a method it does not list is answered with 405, an unknown
path with 404.

Handlers either complete the response synchronously (Resource.handle()
marks it complete once the handler returns) or, for /diagnostics, mark it
pending with set_callback(). Pending responses are finished later through
handle_callback(), which the server calls on every tick.

Endpoints:
    /diagnostics                 GET (deferred)
    /node                        GET, DELETE
    /node/ba-id                  GET
    /node/state                  GET, PUT
    /node/ext-address            GET, PUT
    /node/network-name           GET
    /node/leader-data            GET
    /node/num-of-router          GET
    /node/rloc16                 GET
    /node/ext-panid              GET
    /node/rloc                   GET
    /node/dataset/active         GET, PUT
    /node/dataset/pending        GET, PUT
    /node/ipaddr/mleid           GET
    /node/commissioner/state     GET, PUT
    /node/commissioner/joiner    GET, POST, DELETE
    /node/srp/server/state       GET, PUT
    /node/srp/client/state       GET, PUT
    /node/srp/client/host        GET, PUT, DELETE
    /node/srp/client/service     GET, POST, DELETE

Every resource with a mutating method (and /node/ipaddr/mleid) also
answers OPTIONS with an empty 200.
"""

import logging
import time
from contextlib import contextmanager
from functools import partial
from typing import Callable, Dict, Optional, Type

from mesh.controller import MeshController
from mesh.dataset import OperationalDataset, decode_tlvs, encode_tlvs
from mesh.errors import MeshError, OtError
from mesh.names import (
    CommissionerState,
    DeviceRole,
    get_commissioner_state_name,
    get_device_role_name,
    get_srp_server_state_name,
)

from . import json_codec
from .diagnostics import DiagnosticAggregator
from .errors import (
    InsufficientStorageError,
    InternalError,
    InvalidArgsError,
    InvalidStateError,
    MeshCallError,
    NotFoundError,
    RestError,
)
from .message import (
    ACCEPT_HEADER,
    CONTENT_TYPE_HEADER,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_PLAIN,
    HttpMethod,
    Request,
    Response,
)
from .status import HttpStatusCode, error_body, get_http_status, mesh_error_to_status

logger = logging.getLogger(__name__)

PATH_DIAGNOSTICS = "/diagnostics"
PATH_NODE = "/node"
PATH_NODE_BAID = "/node/ba-id"
PATH_NODE_STATE = "/node/state"
PATH_NODE_EXTADDRESS = "/node/ext-address"
PATH_NODE_NETWORKNAME = "/node/network-name"
PATH_NODE_LEADERDATA = "/node/leader-data"
PATH_NODE_NUMOFROUTER = "/node/num-of-router"
PATH_NODE_RLOC16 = "/node/rloc16"
PATH_NODE_EXTPANID = "/node/ext-panid"
PATH_NODE_RLOC = "/node/rloc"
PATH_NODE_DATASET_ACTIVE = "/node/dataset/active"
PATH_NODE_DATASET_PENDING = "/node/dataset/pending"
PATH_NODE_IPADDR_MLEID = "/node/ipaddr/mleid"
PATH_NODE_COMMISSIONER_STATE = "/node/commissioner/state"
PATH_NODE_COMMISSIONER_JOINER = "/node/commissioner/joiner"
PATH_NODE_SRP_SERVER_STATE = "/node/srp/server/state"
PATH_NODE_SRP_CLIENT_STATE = "/node/srp/client/state"
PATH_NODE_SRP_CLIENT_HOST = "/node/srp/client/host"
PATH_NODE_SRP_CLIENT_SERVICE = "/node/srp/client/service"

ResourceHandler = Callable[[Request, Response, float], None]
MethodHandler = Callable[[Request, Response], None]


def _media_type(value: str) -> str:
    """'text/plain; charset=utf-8' -> 'text/plain'"""
    return value.split(';', 1)[0].strip().lower()


@contextmanager
def mesh_call(error_cls: Optional[Type[RestError]] = None):
    """Translate MeshError raised inside the block into a RestError.

    With no error_cls the status comes from mesh_error_to_status().
    """
    try:
        yield
    except MeshError as e:
        if error_cls is None:
            raise MeshCallError(e)
        raise error_cls(str(e))


class Resource:
    """Dispatch table plus the handlers behind it."""

    def __init__(self, controller: MeshController,
                 aggregator: Optional[DiagnosticAggregator] = None):
        self.controller = controller
        self.aggregator = aggregator if aggregator is not None else DiagnosticAggregator(controller)

        self._resource_map: Dict[str, ResourceHandler] = {
            PATH_DIAGNOSTICS: self.diagnostic,
            PATH_NODE: self.node_info,
            PATH_NODE_BAID: self.ba_id,
            PATH_NODE_STATE: self.state,
            PATH_NODE_EXTADDRESS: self.extended_addr,
            PATH_NODE_NETWORKNAME: self.network_name,
            PATH_NODE_LEADERDATA: self.leader_data,
            PATH_NODE_NUMOFROUTER: self.num_of_router,
            PATH_NODE_RLOC16: self.rloc16,
            PATH_NODE_EXTPANID: self.extended_panid,
            PATH_NODE_RLOC: self.rloc,
            PATH_NODE_DATASET_ACTIVE: partial(self.dataset, False),
            PATH_NODE_DATASET_PENDING: partial(self.dataset, True),
            PATH_NODE_IPADDR_MLEID: self.ipaddr_mleid,
            PATH_NODE_COMMISSIONER_STATE: self.commissioner_state,
            PATH_NODE_COMMISSIONER_JOINER: self.commissioner_joiner,
            PATH_NODE_SRP_SERVER_STATE: self.srp_server_state,
            PATH_NODE_SRP_CLIENT_STATE: self.srp_client_state,
            PATH_NODE_SRP_CLIENT_HOST: self.srp_client_host,
            PATH_NODE_SRP_CLIENT_SERVICE: self.srp_client_service,
        }

        self._callback_map: Dict[str, ResourceHandler] = {
            PATH_DIAGNOSTICS: self.handle_diagnostic_callback,
        }

    @property
    def paths(self):
        return sorted(self._resource_map)

    # ========================================
    # Dispatch
    # ========================================

    def handle(self, request: Request, response: Response, now: Optional[float] = None) -> None:
        """Run the handler for request.url.

        On return the response is either complete or pending a callback.
        """
        if now is None:
            now = time.monotonic()

        handler = self._resource_map.get(request.url)
        logger.debug(f"{request.method.value} {request.url}")

        if handler is None:
            self.error_handler(response, HttpStatusCode.RESOURCE_NOT_FOUND)
            return

        try:
            handler(request, response, now)
        except RestError as e:
            logger.debug(f"{request.method.value} {request.url} failed: {e}")
            self.error_handler(response, e.status)
        except MeshError as e:
            logger.debug(f"{request.method.value} {request.url} failed: {e}")
            self.error_handler(response, mesh_error_to_status(e.error))
        except Exception as e:
            logger.error(f"Unhandled error in {request.method.value} {request.url}: {e}", exc_info=True)
            self.error_handler(response, HttpStatusCode.INTERNAL_SERVER_ERROR)

        if not response.is_complete and not response.needs_callback:
            response.set_complete()

    def handle_callback(self, request: Request, response: Response, now: Optional[float] = None) -> None:
        """Give a pending response's resource a chance to finish it."""
        handler = self._callback_map.get(request.url)
        if handler is None:
            return
        try:
            handler(request, response, time.monotonic() if now is None else now)
        except RestError as e:
            logger.debug(f"{request.method.value} {request.url} callback failed: {e}")
            self.error_handler(response, e.status)
        except MeshError as e:
            logger.debug(f"{request.method.value} {request.url} callback failed: {e}")
            self.error_handler(response, mesh_error_to_status(e.error))
        except Exception as e:
            logger.error(f"Unhandled error in {request.method.value} {request.url} callback: {e}", exc_info=True)
            self.error_handler(response, HttpStatusCode.INTERNAL_SERVER_ERROR)

        if response.is_complete:
            self.aggregator.discard(response)

    def error_handler(self, response: Response, code: HttpStatusCode) -> None:
        """Complete `response` with an error status and JSON error body."""
        if response.is_complete:
            logger.warning(f"Dropping {get_http_status(code)!r}: response already complete")
            return
        response.set_status(code)
        response.set_content_type(CONTENT_TYPE_JSON)
        response.set_body(error_body(code))
        response.set_complete()

    def _switch(self, request: Request, response: Response,
                handlers: Dict[HttpMethod, MethodHandler]) -> None:
        handler = handlers.get(request.method)
        if handler is None:
            self.error_handler(response, HttpStatusCode.METHOD_NOT_ALLOWED)
            return
        handler(request, response)

    def options(self, request: Request, response: Response) -> None:
        response.set_status(HttpStatusCode.OK)
        response.set_complete()

    # ========================================
    # /diagnostics
    # ========================================

    def diagnostic(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: lambda req, resp: self.aggregator.start(resp, now),
        })

    def handle_diagnostic_callback(self, request: Request, response: Response, now: float) -> None:
        self.aggregator.poll(response, now)

    # ========================================
    # /node
    # ========================================

    def node_info(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_node_info,
            HttpMethod.DELETE: self.delete_node_info,
            HttpMethod.OPTIONS: self.options,
        })

    def get_node_info(self, request: Request, response: Response) -> None:
        with mesh_call(InternalError):
            ba_id = self.controller.get_border_agent_id()

        # Leader data is unavailable while detached; report zeros then
        try:
            leader_data = self.controller.get_leader_data().to_dict()
        except MeshError:
            leader_data = {"PartitionId": 0, "Weighting": 0, "DataVersion": 0,
                           "StableDataVersion": 0, "LeaderRouterId": 0}

        node = {
            "BaId": ba_id.hex().upper(),
            "State": get_device_role_name(self.controller.get_device_role()),
            "NumOfRouter": self.controller.get_router_count(),
            "RlocAddress": self.controller.get_rloc_address(),
            "ExtAddress": self.controller.get_extended_address().hex().upper(),
            "NetworkName": self.controller.get_network_name(),
            "Rloc16": self.controller.get_rloc16(),
            "LeaderData": leader_data,
            "ExtPanId": self.controller.get_extended_panid().hex().upper(),
        }
        response.set_body(json_codec.node_to_json(node))
        response.set_status(HttpStatusCode.OK)

    def delete_node_info(self, request: Request, response: Response) -> None:
        with mesh_call(InvalidStateError):
            self.controller.detach()
        with mesh_call(InternalError):
            self.controller.erase_persistent_info()
        self.controller.reset()
        logger.info("Node detached and persistent info erased")
        response.set_status(HttpStatusCode.OK)

    def ba_id(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_ba_id})

    def get_ba_id(self, request: Request, response: Response) -> None:
        with mesh_call(InternalError):
            ba_id = self.controller.get_border_agent_id()
        response.set_body(json_codec.bytes_to_hex_json(ba_id))
        response.set_status(HttpStatusCode.OK)

    # --- /node/state ---

    def state(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_state,
            HttpMethod.PUT: self.set_state,
            HttpMethod.OPTIONS: self.options,
        })

    def get_state(self, request: Request, response: Response) -> None:
        role = self.controller.get_device_role()
        response.set_body(json_codec.string_to_json(get_device_role_name(role)))
        response.set_status(HttpStatusCode.OK)

    def set_state(self, request: Request, response: Response) -> None:
        value = json_codec.parse_json_string(request.body)
        if value not in ("enable", "disable"):
            raise InvalidArgsError(f"unknown state {value!r}")

        with mesh_call(InvalidStateError):
            if value == "enable":
                if not self.controller.is_ip6_enabled():
                    self.controller.set_ip6_enabled(True)
                self.controller.set_thread_enabled(True)
            else:
                self.controller.set_thread_enabled(False)
                self.controller.set_ip6_enabled(False)

        logger.info(f"Thread interface {value}d")
        response.set_status(HttpStatusCode.OK)

    # --- /node/ext-address ---

    def extended_addr(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_extended_addr,
            HttpMethod.PUT: self.set_extended_addr,
            HttpMethod.OPTIONS: self.options,
        })

    def get_extended_addr(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.bytes_to_hex_json(self.controller.get_extended_address()))
        response.set_status(HttpStatusCode.OK)

    def set_extended_addr(self, request: Request, response: Response) -> None:
        value = json_codec.parse_json_string(request.body)
        if value == "":
            ext_address = self.controller.get_factory_eui64()
        else:
            ext_address = json_codec.parse_hex(value, 8)

        with mesh_call(InvalidStateError):
            self.controller.set_extended_address(ext_address)
        response.set_status(HttpStatusCode.OK)

    # --- simple read-only values ---

    def network_name(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_network_name})

    def get_network_name(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.string_to_json(self.controller.get_network_name()))
        response.set_status(HttpStatusCode.OK)

    def leader_data(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_leader_data})

    def get_leader_data(self, request: Request, response: Response) -> None:
        with mesh_call(InternalError):
            leader_data = self.controller.get_leader_data()
        response.set_body(json_codec.leader_data_to_json(leader_data))
        response.set_status(HttpStatusCode.OK)

    def num_of_router(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_num_of_router})

    def get_num_of_router(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.number_to_json(self.controller.get_router_count()))
        response.set_status(HttpStatusCode.OK)

    def rloc16(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_rloc16})

    def get_rloc16(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.number_to_json(self.controller.get_rloc16()))
        response.set_status(HttpStatusCode.OK)

    def extended_panid(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_extended_panid})

    def get_extended_panid(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.bytes_to_hex_json(self.controller.get_extended_panid()))
        response.set_status(HttpStatusCode.OK)

    def rloc(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {HttpMethod.GET: self.get_rloc})

    def get_rloc(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.string_to_json(self.controller.get_rloc_address()))
        response.set_status(HttpStatusCode.OK)

    def ipaddr_mleid(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_ipaddr_mleid,
            HttpMethod.OPTIONS: self.options,
        })

    def get_ipaddr_mleid(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.string_to_json(self.controller.get_mesh_local_eid()))
        response.set_status(HttpStatusCode.OK)

    # ========================================
    # Operational datasets
    # ========================================

    def dataset(self, pending: bool, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: partial(self.get_dataset, pending),
            HttpMethod.PUT: partial(self.set_dataset, pending),
            HttpMethod.OPTIONS: self.options,
        })

    def _read_dataset(self, pending: bool) -> OperationalDataset:
        if pending:
            return self.controller.get_pending_dataset()
        return self.controller.get_active_dataset()

    def get_dataset(self, pending: bool, request: Request, response: Response) -> None:
        try:
            dataset = self._read_dataset(pending)
        except MeshError as e:
            if e.error == OtError.NOT_FOUND:
                response.set_status(HttpStatusCode.NO_CONTENT)
                return
            raise InternalError(str(e))

        if _media_type(request.get_header(ACCEPT_HEADER)) == CONTENT_TYPE_PLAIN:
            response.set_content_type(CONTENT_TYPE_PLAIN)
            response.set_body(encode_tlvs(dataset).hex().upper())
        else:
            response.set_body(json_codec.dataset_to_json(dataset))
        response.set_status(HttpStatusCode.OK)

    def set_dataset(self, pending: bool, request: Request, response: Response) -> None:
        if not pending and self.controller.get_device_role() != DeviceRole.DISABLED:
            raise InvalidStateError("active dataset can only change while Thread is disabled")

        status = HttpStatusCode.OK
        try:
            dataset = self._read_dataset(pending)
        except MeshError as e:
            if e.error != OtError.NOT_FOUND:
                raise InternalError(str(e))
            with mesh_call(InternalError):
                dataset = self.controller.create_new_network()
            status = HttpStatusCode.CREATED

        if _media_type(request.get_header(CONTENT_TYPE_HEADER)) == CONTENT_TYPE_PLAIN:
            raw = json_codec.parse_hex(request.text)
            try:
                update = decode_tlvs(raw)
            except ValueError as e:
                raise InvalidArgsError(f"invalid dataset TLVs: {e}")
        else:
            update = json_codec.parse_dataset(request.body, pending=pending)

        dataset.update(update)

        with mesh_call(InternalError):
            if pending:
                self.controller.set_pending_dataset(dataset)
            else:
                self.controller.set_active_dataset(dataset)

        logger.info(f"{'Pending' if pending else 'Active'} dataset updated")
        response.set_status(status)

    # ========================================
    # Commissioner
    # ========================================

    def commissioner_state(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_commissioner_state,
            HttpMethod.PUT: self.set_commissioner_state,
            HttpMethod.OPTIONS: self.options,
        })

    def get_commissioner_state(self, request: Request, response: Response) -> None:
        state = self.controller.get_commissioner_state()
        response.set_body(json_codec.string_to_json(get_commissioner_state_name(state)))
        response.set_status(HttpStatusCode.OK)

    def set_commissioner_state(self, request: Request, response: Response) -> None:
        value = json_codec.parse_json_string(request.body)
        current = self.controller.get_commissioner_state()

        if value == "enable":
            if current == CommissionerState.DISABLED:
                with mesh_call(InvalidStateError):
                    self.controller.commissioner_start()
        elif value == "disable":
            if current != CommissionerState.DISABLED:
                with mesh_call(InvalidStateError):
                    self.controller.commissioner_stop()
        else:
            raise InvalidArgsError(f"unknown commissioner state {value!r}")

        response.set_status(HttpStatusCode.OK)

    def commissioner_joiner(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_joiners,
            HttpMethod.POST: self.add_joiner,
            HttpMethod.DELETE: self.remove_joiner,
            HttpMethod.OPTIONS: self.options,
        })

    def get_joiners(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.joiners_to_json(self.controller.get_joiners()))
        response.set_status(HttpStatusCode.OK)

    def _require_active_commissioner(self):
        if self.controller.get_commissioner_state() != CommissionerState.ACTIVE:
            raise InvalidStateError("commissioner is not active")

    def add_joiner(self, request: Request, response: Response) -> None:
        self._require_active_commissioner()
        joiner = json_codec.parse_joiner(request.body)

        # An all-zero EUI-64 means any joiner
        if joiner.eui64 is not None and not any(joiner.eui64):
            joiner.eui64 = None

        try:
            self.controller.add_joiner(joiner)
        except MeshError as e:
            if e.error == OtError.INVALID_ARGS:
                raise InvalidArgsError(str(e))
            if e.error == OtError.NO_BUFS:
                raise InsufficientStorageError(str(e))
            raise InternalError(str(e))

        if joiner.discerner is not None:
            logger.info(f"Joiner added: discerner {joiner.discerner}")
        else:
            logger.info(f"Joiner added: eui64 {joiner.eui64.hex() if joiner.eui64 else '*'}")
        response.set_status(HttpStatusCode.OK)

    def remove_joiner(self, request: Request, response: Response) -> None:
        self._require_active_commissioner()
        value = json_codec.parse_json_string(request.body)

        eui64 = None
        discerner = None
        if value != "*":
            discerner = json_codec.parse_discerner(value)
            if discerner is None:
                eui64 = json_codec.parse_hex(value, 8)

        try:
            self.controller.remove_joiner(eui64=eui64, discerner=discerner)
        except MeshError as e:
            if e.error != OtError.NOT_FOUND:
                raise MeshCallError(e)
            logger.debug(f"Joiner {value} not in table")

        response.set_status(HttpStatusCode.OK)

    # ========================================
    # SRP
    # ========================================

    def srp_server_state(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_srp_server_state,
            HttpMethod.PUT: self.set_srp_server_state,
            HttpMethod.OPTIONS: self.options,
        })

    def get_srp_server_state(self, request: Request, response: Response) -> None:
        state = self.controller.get_srp_server_state()
        response.set_body(json_codec.string_to_json(get_srp_server_state_name(state)))
        response.set_status(HttpStatusCode.OK)

    def set_srp_server_state(self, request: Request, response: Response) -> None:
        value = json_codec.parse_json_string(request.body)
        if value not in ("enable", "disable"):
            raise InvalidArgsError(f"unknown SRP server state {value!r}")

        with mesh_call(InternalError):
            self.controller.set_srp_server_enabled(value == "enable")
        response.set_status(HttpStatusCode.OK)

    def srp_client_state(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_srp_client_state,
            HttpMethod.PUT: self.set_srp_client_state,
            HttpMethod.OPTIONS: self.options,
        })

    def get_srp_client_state(self, request: Request, response: Response) -> None:
        running = self.controller.is_srp_client_running()
        response.set_body(json_codec.string_to_json("enabled" if running else "disabled"))
        response.set_status(HttpStatusCode.OK)

    def set_srp_client_state(self, request: Request, response: Response) -> None:
        value = json_codec.parse_json_string(request.body)

        with mesh_call(InternalError):
            if value == "autostart":
                self.controller.srp_client_autostart()
            elif value == "disable":
                self.controller.srp_client_stop()
            else:
                raise InvalidArgsError(f"unknown SRP client state {value!r}")

        response.set_status(HttpStatusCode.OK)

    # --- /node/srp/client/host ---

    def srp_client_host(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_srp_client_host,
            HttpMethod.PUT: self.set_srp_client_host,
            HttpMethod.DELETE: self.remove_srp_client_host,
            HttpMethod.OPTIONS: self.options,
        })

    def get_srp_client_host(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.srp_host_to_json(self.controller.get_srp_client_host()))
        response.set_status(HttpStatusCode.OK)

    def set_srp_client_host(self, request: Request, response: Response) -> None:
        name, address = json_codec.parse_srp_host(request.body)

        with mesh_call(InvalidStateError):
            self.controller.set_srp_client_host_name(name)
            self.controller.set_srp_client_host_address(address)

        logger.info(f"SRP client host set to {name} ({address or 'auto'})")
        response.set_status(HttpStatusCode.OK)

    def remove_srp_client_host(self, request: Request, response: Response) -> None:
        with mesh_call(InvalidStateError):
            self.controller.remove_srp_client_host_and_services()
        logger.info("SRP client host and services removed")
        response.set_status(HttpStatusCode.OK)

    # --- /node/srp/client/service ---

    def srp_client_service(self, request: Request, response: Response, now: float) -> None:
        self._switch(request, response, {
            HttpMethod.GET: self.get_srp_client_services,
            HttpMethod.POST: self.add_srp_client_service,
            HttpMethod.DELETE: self.remove_srp_client_service,
            HttpMethod.OPTIONS: self.options,
        })

    def get_srp_client_services(self, request: Request, response: Response) -> None:
        response.set_body(json_codec.srp_services_to_json(self.controller.get_srp_client_services()))
        response.set_status(HttpStatusCode.OK)

    def add_srp_client_service(self, request: Request, response: Response) -> None:
        service = json_codec.parse_srp_service(request.body)

        try:
            self.controller.add_srp_client_service(service)
        except MeshError as e:
            if e.error == OtError.NO_BUFS:
                raise InternalError(str(e))
            raise InvalidStateError(str(e))

        logger.info(f"SRP service added: {service.instance_name}.{service.service_name}")
        response.set_status(HttpStatusCode.OK)

    def remove_srp_client_service(self, request: Request, response: Response) -> None:
        service_name, instance_name = json_codec.parse_srp_service_names(request.body)

        try:
            self.controller.remove_srp_client_service(service_name, instance_name)
        except MeshError as e:
            if e.error == OtError.NOT_FOUND:
                raise NotFoundError(f"no service {instance_name}.{service_name}")
            raise InvalidStateError(str(e))

        response.set_status(HttpStatusCode.OK)
