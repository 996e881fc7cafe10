"""
Tests for the simulated mesh controller.

Run: python3 -m pytest tests/test_simulator.py -v
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from mesh.controller import JoinerDiscerner, JoinerInfo, SrpClientService
from mesh.errors import MeshError, OtError
from mesh.names import CommissionerState, DeviceRole, SrpClientItemState, SrpServerState
from mesh.simulator import (
    MAX_JOINERS,
    MAX_SRP_SERVICES,
    MULTICAST_ALL_ROUTERS,
    SimulatedMeshController,
    SimulatedThreadNode,
    rloc_address,
)
from mesh.tlv import ALL_TLV_TYPES, DiagTlvType


class ReplyRecorder:
    """Collects (error, reply) callbacks and the tick time of each."""

    def __init__(self):
        self.calls = []
        self.times = []

    def __call__(self, error, reply, now):
        self.calls.append((error, reply))
        self.times.append(now)

    @property
    def rlocs(self):
        found = []
        for error, reply in self.calls:
            for tlv in reply or []:
                if tlv.is_short_address:
                    found.append(tlv.value)
        return found


class TestFactoryDefaults:
    """Test initial simulated state"""

    def test_identity(self, controller):
        assert controller.get_device_role() == DeviceRole.LEADER
        assert controller.get_rloc16() == 0x0400
        assert controller.get_rloc_address() == rloc_address(0x0400)
        assert controller.get_network_name() == "OpenThread-sim"
        assert len(controller.get_extended_address()) == 8

    def test_router_count_includes_self(self, controller):
        assert controller.get_router_count() == 4

    def test_default_nodes(self, controller):
        assert [n.rloc16 for n in controller.nodes] == [0x1200, 0x3400, 0x5800]

    def test_no_nodes(self, quiet_controller):
        assert quiet_controller.nodes == []
        assert quiet_controller.get_router_count() == 1


class TestFailureInjection:
    """Test fail_next"""

    def test_fail_next_once(self, controller):
        controller.fail_next("get_border_agent_id", OtError.FAILED)

        with pytest.raises(MeshError) as exc_info:
            controller.get_border_agent_id()
        assert exc_info.value.error == OtError.FAILED

        assert len(controller.get_border_agent_id()) == 16


class TestInterfaceState:
    """Test Thread/IPv6 enable transitions"""

    def test_disable_then_enable(self, controller):
        controller.set_thread_enabled(False)
        assert controller.get_device_role() == DeviceRole.DISABLED

        controller.set_thread_enabled(True)
        assert controller.get_device_role() == DeviceRole.LEADER

    def test_enable_requires_ip6(self, controller):
        controller.set_thread_enabled(False)
        controller.set_ip6_enabled(False)

        with pytest.raises(MeshError) as exc_info:
            controller.set_thread_enabled(True)
        assert exc_info.value.error == OtError.INVALID_STATE

    def test_extended_address_only_while_disabled(self, controller):
        with pytest.raises(MeshError):
            controller.set_extended_address(bytes(8))

        controller.set_thread_enabled(False)
        controller.set_extended_address(bytes.fromhex("0102030405060708"))
        assert controller.get_extended_address() == bytes.fromhex("0102030405060708")

    def test_erase_requires_detach(self, controller):
        with pytest.raises(MeshError):
            controller.erase_persistent_info()

        controller.detach()
        controller.erase_persistent_info()
        with pytest.raises(MeshError) as exc_info:
            controller.get_active_dataset()
        assert exc_info.value.error == OtError.NOT_FOUND

    def test_leader_data_unavailable_when_detached(self, controller):
        controller.detach()
        with pytest.raises(MeshError):
            controller.get_leader_data()


class TestDatasets:
    """Test dataset storage"""

    def test_active_dataset_is_a_copy(self, controller):
        dataset = controller.get_active_dataset()
        dataset.network_name = "changed"
        assert controller.get_network_name() == "OpenThread-sim"

    def test_pending_missing(self, controller):
        with pytest.raises(MeshError) as exc_info:
            controller.get_pending_dataset()
        assert exc_info.value.error == OtError.NOT_FOUND

    def test_create_new_network(self, controller):
        dataset = controller.create_new_network()
        assert dataset.network_key is not None
        assert 11 <= dataset.channel <= 26
        # Not applied
        assert controller.get_network_name() == "OpenThread-sim"


class TestCommissioner:
    """Test commissioner and joiner table"""

    def test_start_stop(self, controller):
        controller.commissioner_start()
        assert controller.get_commissioner_state() == CommissionerState.ACTIVE

        with pytest.raises(MeshError) as exc_info:
            controller.commissioner_start()
        assert exc_info.value.error == OtError.ALREADY

        controller.commissioner_stop()
        assert controller.get_commissioner_state() == CommissionerState.DISABLED

    def test_add_joiner_requires_active(self, controller):
        with pytest.raises(MeshError) as exc_info:
            controller.add_joiner(JoinerInfo(pskd="J01NME"))
        assert exc_info.value.error == OtError.INVALID_STATE

    def test_joiner_table_capacity(self, controller):
        controller.commissioner_start()
        for i in range(MAX_JOINERS):
            controller.add_joiner(JoinerInfo(pskd="J01NME", eui64=bytes([i]) * 8))

        with pytest.raises(MeshError) as exc_info:
            controller.add_joiner(JoinerInfo(pskd="J01NME"))
        assert exc_info.value.error == OtError.NO_BUFS

    def test_duplicate_joiner_replaced(self, controller):
        controller.commissioner_start()
        controller.add_joiner(JoinerInfo(pskd="J01NME", timeout=30))
        controller.add_joiner(JoinerInfo(pskd="J01NME", timeout=60))

        joiners = controller.get_joiners()
        assert len(joiners) == 1
        assert joiners[0].timeout == 60

    def test_remove_joiner(self, controller):
        controller.commissioner_start()
        discerner = JoinerDiscerner(0xabc, 12)
        controller.add_joiner(JoinerInfo(pskd="J01NME", discerner=discerner))

        controller.remove_joiner(discerner=discerner)
        assert controller.get_joiners() == []

        with pytest.raises(MeshError) as exc_info:
            controller.remove_joiner(discerner=discerner)
        assert exc_info.value.error == OtError.NOT_FOUND


class TestSrp:
    """Test SRP state"""

    def test_server(self, controller):
        controller.set_srp_server_enabled(True)
        assert controller.get_srp_server_state() == SrpServerState.RUNNING
        controller.set_srp_server_enabled(False)
        assert controller.get_srp_server_state() == SrpServerState.DISABLED

    def test_client(self, controller):
        controller.srp_client_autostart()
        assert controller.is_srp_client_running()
        controller.srp_client_stop()
        assert not controller.is_srp_client_running()

    def test_client_host_defaults(self, controller):
        host = controller.get_srp_client_host()
        assert host.name == ""
        assert host.state == SrpClientItemState.REMOVED

    def test_host_registers_once_client_runs(self, controller):
        controller.set_srp_client_host_name("printer")
        controller.set_srp_client_host_address(None)
        assert controller.get_srp_client_host().state == SrpClientItemState.TO_ADD

        controller.srp_client_autostart()

        host = controller.get_srp_client_host()
        assert host.state == SrpClientItemState.REGISTERED
        assert host.auto_address
        assert host.addresses == []

    def test_host_name_fixed_after_registration(self, controller):
        controller.srp_client_autostart()
        controller.set_srp_client_host_name("printer")

        with pytest.raises(MeshError) as exc_info:
            controller.set_srp_client_host_name("scanner")
        assert exc_info.value.error == OtError.INVALID_STATE

    def test_explicit_host_address(self, controller):
        controller.set_srp_client_host_address(None)
        controller.set_srp_client_host_address("fd00::1")

        host = controller.get_srp_client_host()
        assert host.addresses == ["fd00::1"]
        assert not host.auto_address

    def test_service_table_capacity(self, controller):
        for i in range(MAX_SRP_SERVICES):
            controller.add_srp_client_service(SrpClientService("_ipps._tcp", f"printer-{i}", 631))

        with pytest.raises(MeshError) as exc_info:
            controller.add_srp_client_service(SrpClientService("_ipps._tcp", "extra", 631))
        assert exc_info.value.error == OtError.NO_BUFS

    def test_duplicate_service(self, controller):
        controller.add_srp_client_service(SrpClientService("_ipps._tcp", "printer", 631))
        with pytest.raises(MeshError) as exc_info:
            controller.add_srp_client_service(SrpClientService("_ipps._tcp", "printer", 632))
        assert exc_info.value.error == OtError.ALREADY

    def test_services_register_with_host(self, controller):
        controller.add_srp_client_service(SrpClientService("_ipps._tcp", "printer", 631))
        controller.set_srp_client_host_name("printer")
        assert controller.get_srp_client_services()[0].state == SrpClientItemState.TO_ADD

        controller.srp_client_autostart()
        assert controller.get_srp_client_services()[0].state == SrpClientItemState.REGISTERED

    def test_remove_service(self, controller):
        controller.add_srp_client_service(SrpClientService("_ipps._tcp", "printer", 631))

        with pytest.raises(MeshError) as exc_info:
            controller.remove_srp_client_service("_ipps._tcp", "scanner")
        assert exc_info.value.error == OtError.NOT_FOUND

        controller.remove_srp_client_service("_ipps._tcp", "printer")
        assert controller.get_srp_client_services() == []

    def test_remove_host_and_services(self, controller):
        controller.set_srp_client_host_name("printer")
        controller.add_srp_client_service(SrpClientService("_ipps._tcp", "printer", 631))

        controller.remove_srp_client_host_and_services()

        assert controller.get_srp_client_host().name == ""
        assert controller.get_srp_client_services() == []
        with pytest.raises(MeshError) as exc_info:
            controller.remove_srp_client_host_and_services()
        assert exc_info.value.error == OtError.ALREADY

    def test_reset_clears_client(self, controller):
        controller.srp_client_autostart()
        controller.set_srp_client_host_name("printer")
        controller.reset()

        assert not controller.is_srp_client_running()
        assert controller.get_srp_client_host().state == SrpClientItemState.REMOVED


class TestDiagnosticDelivery:
    """Test deferred reply delivery"""

    def test_replies_not_delivered_synchronously(self, controller):
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)

        assert recorder.calls == []
        assert controller.pending_reply_count == 4

    def test_multicast_reaches_local_and_routers(self, controller, clock):
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)

        controller.process(clock() + 5.0)

        assert recorder.rlocs == [0x0400, 0x1200, 0x3400, 0x5800]

    def test_own_rloc_reaches_local_only(self, controller, clock):
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(controller.get_rloc_address(), ALL_TLV_TYPES, recorder)

        controller.process(clock() + 5.0)

        assert recorder.rlocs == [0x0400]

    def test_delivery_respects_delay(self, controller, clock):
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)

        controller.process(0.2)
        assert recorder.rlocs == [0x0400, 0x1200]

        controller.process(1.0)
        assert recorder.rlocs == [0x0400, 0x1200, 0x3400]

    def test_callback_receives_tick_time(self, controller, clock):
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)

        controller.process(0.2)
        controller.process(5.0)

        assert recorder.times == [0.2, 0.2, 5.0, 5.0]

    def test_query_scheduled_from_last_tick(self, controller, clock):
        # the clock lags behind the ticks the caller drives
        controller.process(10.0)
        recorder = ReplyRecorder()
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)

        controller.process(10.2)

        assert clock() == 0.0
        assert recorder.rlocs == [0x0400, 0x1200]

    def test_children_ignore_multicast(self, quiet_controller, clock):
        quiet_controller.add_node(SimulatedThreadNode(0x1201, bytes(8), role=DeviceRole.CHILD))
        recorder = ReplyRecorder()

        quiet_controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)
        quiet_controller.process(5.0)

        assert recorder.rlocs == [0x0400]

    def test_unreachable_node_reports_error(self, quiet_controller):
        quiet_controller.add_node(SimulatedThreadNode(0x1200, bytes(8), reachable=False))
        recorder = ReplyRecorder()

        quiet_controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, recorder)
        quiet_controller.process(5.0)

        errors = [error for error, reply in recorder.calls]
        assert OtError.RESPONSE_TIMEOUT in errors

    def test_reply_without_short_address(self, quiet_controller):
        quiet_controller.add_node(SimulatedThreadNode(0x1200, bytes(8), include_short_address=False))
        recorder = ReplyRecorder()

        quiet_controller.send_diagnostic_get(rloc_address(0x1200), ALL_TLV_TYPES, recorder)
        quiet_controller.process(5.0)

        error, reply = recorder.calls[0]
        assert error == OtError.NONE
        assert all(t.type != DiagTlvType.SHORT_ADDRESS for t in reply)

    def test_detached_cannot_query(self, controller):
        controller.detach()
        with pytest.raises(MeshError) as exc_info:
            controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, ReplyRecorder())
        assert exc_info.value.error == OtError.INVALID_STATE

    def test_reset_drops_scheduled_replies(self, controller):
        controller.send_diagnostic_get(MULTICAST_ALL_ROUTERS, ALL_TLV_TYPES, ReplyRecorder())
        controller.reset()
        assert controller.pending_reply_count == 0
