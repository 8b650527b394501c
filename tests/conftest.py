"""Shared fixtures for simulator tests."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest
from core import Device, Simulation


class RecordingDevice(Device):
    """Device that records every packet it receives and forwards nothing"""

    kind = "recorder"

    def __init__(self, name):
        super().__init__(name)
        self.calls = []  # (time, packet, ingress)

    def receive(self, packet, sim, ingress=None):
        self.packets_received += 1
        self.calls.append((sim.now, packet, ingress))

    def send(self, packet, sim, ingress=None):
        raise AssertionError("recording devices never send")

    @property
    def call_count(self):
        return len(self.calls)


@pytest.fixture
def sim():
    return Simulation()


@pytest.fixture
def recorder():
    return RecordingDevice
