"""
Tests for enum-to-string tables.

Run: python3 -m pytest tests/test_names.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from mesh.errors import MeshError, OtError
from mesh.names import (
    CommissionerState,
    DeviceRole,
    SrpClientItemState,
    SrpServerState,
    get_commissioner_state_name,
    get_device_role_name,
    get_srp_client_item_state_name,
    get_srp_server_state_name,
)


class TestDeviceRoleName:
    """Test device role names"""

    def test_all_roles(self):
        assert get_device_role_name(DeviceRole.DISABLED) == "disabled"
        assert get_device_role_name(DeviceRole.DETACHED) == "detached"
        assert get_device_role_name(DeviceRole.CHILD) == "child"
        assert get_device_role_name(DeviceRole.ROUTER) == "router"
        assert get_device_role_name(DeviceRole.LEADER) == "leader"

    def test_raw_int_accepted(self):
        assert get_device_role_name(4) == "leader"

    def test_unknown_is_empty(self):
        assert get_device_role_name(99) == ""


class TestStateNames:
    """Test commissioner and SRP state names"""

    def test_commissioner(self):
        assert get_commissioner_state_name(CommissionerState.DISABLED) == "disabled"
        assert get_commissioner_state_name(CommissionerState.PETITION) == "petitioning"
        assert get_commissioner_state_name(CommissionerState.ACTIVE) == "active"
        assert get_commissioner_state_name(7) == ""

    def test_srp_server(self):
        assert get_srp_server_state_name(SrpServerState.DISABLED) == "disabled"
        assert get_srp_server_state_name(SrpServerState.RUNNING) == "running"
        assert get_srp_server_state_name(SrpServerState.STOPPED) == "stopped"
        assert get_srp_server_state_name(-1) == ""

    def test_srp_client_items(self):
        assert get_srp_client_item_state_name(SrpClientItemState.TO_ADD) == "ToAdd"
        assert get_srp_client_item_state_name(SrpClientItemState.REGISTERED) == "Registered"
        assert get_srp_client_item_state_name(SrpClientItemState.REMOVED) == "Removed"
        assert get_srp_client_item_state_name(100) == ""


class TestMeshError:
    """Test library error wrapper"""

    def test_describe(self):
        assert OtError.NO_BUFS.describe() == "NoBufs"
        assert OtError.INVALID_STATE.describe() == "InvalidState"

    def test_default_message(self):
        error = MeshError(OtError.NOT_FOUND)
        assert error.error == OtError.NOT_FOUND
        assert "NotFound" in str(error)

    def test_custom_message(self):
        assert str(MeshError(OtError.BUSY, "radio busy")) == "radio busy"

    def test_codes(self):
        assert OtError.NONE.value == 0
        assert OtError.INVALID_ARGS.value == 7
        assert OtError.NOT_FOUND.value == 23
