"""Core simulation components for the layered network simulator."""

from .packet import (
    Packet, SimulationEvent, AddressError,
    DEFAULT_LINK_DELAY, BROADCAST_MAC
)
from .clock import Clock, VirtualClock, RealTimeClock
from .engine import SimulationEngine, SimulationStats
from .outcomes import Outcome, OutcomeKind, Reason
from .layers import Layer, NetworkLayer, DataLinkLayer
from .link import Link
from .network import Network
from .device import Device
from .host import Host
from .switch import Switch
from .router import Router
from .config import SimulationConfig
from .logging_config import setup_logger, OutcomeLogger
from .simulation import Simulation

__all__ = [
    'Packet',
    'SimulationEvent',
    'AddressError',
    'Clock',
    'VirtualClock',
    'RealTimeClock',
    'SimulationEngine',
    'SimulationStats',
    'Outcome',
    'OutcomeKind',
    'Reason',
    'Layer',
    'NetworkLayer',
    'DataLinkLayer',
    'Link',
    'Network',
    'Device',
    'Host',
    'Switch',
    'Router',
    'SimulationConfig',
    'Simulation',
    'setup_logger',
    'OutcomeLogger',
    'DEFAULT_LINK_DELAY',
    'BROADCAST_MAC',
]
