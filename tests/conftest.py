"""
Shared fixtures for ThreadRest tests.

Time is always injected: nothing in the suite sleeps.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


class FakeClock:
    """Manually advanced monotonic clock. Also usable as a sleep function."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def set(self, now: float) -> None:
        self.now = now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(clock):
    from mesh.simulator import SimulatedMeshController
    return SimulatedMeshController(clock=clock)


@pytest.fixture
def quiet_controller(clock):
    """Simulated controller with no neighbour nodes."""
    from mesh.simulator import SimulatedMeshController
    return SimulatedMeshController(clock=clock, use_default_nodes=False)
