"""
Core data structures for layered network simulation.

This module defines the fundamental building blocks:
- Packets carrying a payload and two address pairs
- Simulation events
- Address validation helpers and simulation constants
"""

import ipaddress
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional


class AddressError(ValueError):
    """Raised for a malformed logical or physical address"""


MAC_PATTERN = re.compile(r"^[0-9A-F]{2}(:[0-9A-F]{2}){5}$")


def normalize_mac(address: str) -> str:
    """Return the canonical upper-case form of a MAC address"""
    mac = address.strip().upper()
    if not MAC_PATTERN.match(mac):
        raise AddressError(f"Invalid MAC address: {address!r}")
    return mac


def normalize_ip(address: str) -> str:
    """Return the canonical dotted-quad form of an IPv4 address"""
    try:
        return str(ipaddress.IPv4Address(address.strip()))
    except ipaddress.AddressValueError as exc:
        raise AddressError(f"Invalid IPv4 address: {address!r}") from exc


@dataclass(frozen=True)
class Packet:
    """
    A packet travelling through the simulated network.

    Packets are values: every hop and every layer produces a new instance,
    so two pending events never share a mutable packet.

    Attributes:
        payload: Application data
        src_ip: Source logical address ("" until stamped)
        dst_ip: Destination logical address
        src_mac: Source physical address ("" until stamped)
        dst_mac: Destination physical address
        packet_id: Identifier assigned on injection
        created_at: Virtual time of injection (ms)
    """
    payload: str
    src_ip: str = ""
    dst_ip: str = ""
    src_mac: str = ""
    dst_mac: str = ""
    packet_id: int = 0
    created_at: float = 0.0

    def __post_init__(self):
        for name in ("src_ip", "dst_ip"):
            value = getattr(self, name)
            if value:
                object.__setattr__(self, name, normalize_ip(value))
        for name in ("src_mac", "dst_mac"):
            value = getattr(self, name)
            if value:
                object.__setattr__(self, name, normalize_mac(value))

    def with_fields(self, **changes) -> "Packet":
        """Return a copy of this packet with the given fields replaced"""
        return replace(self, **changes)

    def latency_at(self, current_time: float) -> float:
        """Calculate end-to-end latency"""
        return current_time - self.created_at

    def addresses(self) -> dict:
        return {
            "src_ip": self.src_ip,
            "dst_ip": self.dst_ip,
            "src_mac": self.src_mac,
            "dst_mac": self.dst_mac,
        }


@dataclass
class SimulationEvent:
    """
    Discrete event for the simulation engine.

    Delivery events are plain data: the target device is named, not
    referenced, and resolved through the registry when the event fires.
    Events with an ``action`` simply call it.
    """
    timestamp: float               # When this event should fire (ms)
    event_type: str                # Event type identifier
    target: Optional[str] = None   # Device receiving the packet
    source: Optional[str] = None   # Device the packet came from
    packet: Optional[Packet] = None
    action: Optional[Callable[[], Any]] = None
    sequence: int = field(default=0, compare=False)
    cancelled: bool = field(default=False, compare=False)


# Simulation parameters
DEFAULT_LINK_DELAY = 50.0            # ms
BROADCAST_MAC = "FF:FF:FF:FF:FF:FF"
PROGRESS_INTERVAL = 10000            # events between progress log lines

# Event types
DELIVER_EVENT = "deliver"
SEND_EVENT = "send"
ACTION_EVENT = "action"
