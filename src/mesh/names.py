"""
Display names for mesh state enums

The REST API reports roles and service states as short strings. A value
missing from a table maps to "" rather than raising, so a newer library
reporting an unknown state still yields a response.
"""

from enum import IntEnum


class DeviceRole(IntEnum):
    DISABLED = 0
    DETACHED = 1
    CHILD = 2
    ROUTER = 3
    LEADER = 4


class CommissionerState(IntEnum):
    DISABLED = 0
    PETITION = 1
    ACTIVE = 2


class SrpServerState(IntEnum):
    DISABLED = 0
    RUNNING = 1
    STOPPED = 2


class SrpClientItemState(IntEnum):
    TO_ADD = 0
    ADDING = 1
    TO_REFRESH = 2
    REFRESHING = 3
    TO_REMOVE = 4
    REMOVING = 5
    REGISTERED = 6
    REMOVED = 7


ROLE_NAMES = {
    DeviceRole.DISABLED: "disabled",
    DeviceRole.DETACHED: "detached",
    DeviceRole.CHILD: "child",
    DeviceRole.ROUTER: "router",
    DeviceRole.LEADER: "leader",
}

COMMISSIONER_STATE_NAMES = {
    CommissionerState.DISABLED: "disabled",
    CommissionerState.PETITION: "petitioning",
    CommissionerState.ACTIVE: "active",
}

SRP_SERVER_STATE_NAMES = {
    SrpServerState.DISABLED: "disabled",
    SrpServerState.RUNNING: "running",
    SrpServerState.STOPPED: "stopped",
}

SRP_CLIENT_ITEM_STATE_NAMES = {
    SrpClientItemState.TO_ADD: "ToAdd",
    SrpClientItemState.ADDING: "Adding",
    SrpClientItemState.TO_REFRESH: "ToRefresh",
    SrpClientItemState.REFRESHING: "Refreshing",
    SrpClientItemState.TO_REMOVE: "ToRemove",
    SrpClientItemState.REMOVING: "Removing",
    SrpClientItemState.REGISTERED: "Registered",
    SrpClientItemState.REMOVED: "Removed",
}


def get_device_role_name(role) -> str:
    return ROLE_NAMES.get(role, "")


def get_commissioner_state_name(state) -> str:
    return COMMISSIONER_STATE_NAMES.get(state, "")


def get_srp_server_state_name(state) -> str:
    return SRP_SERVER_STATE_NAMES.get(state, "")


def get_srp_client_item_state_name(state) -> str:
    return SRP_CLIENT_ITEM_STATE_NAMES.get(state, "")
