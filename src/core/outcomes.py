"""
Structured outcome records emitted while the simulation runs.

Devices report what they did with each packet as data; rendering the
records (console, log file, trace dump) is left to subscribers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .packet import Packet


class OutcomeKind(Enum):
    """What happened to a packet at a device"""
    SENT = "sent"              # Host put a packet on its outbound link
    DELIVERED = "delivered"    # Host accepted a packet at every layer
    DROPPED = "dropped"        # Packet discarded, see reason
    FORWARDED = "forwarded"    # Switch/router unicast to one next hop
    FLOODED = "flooded"        # Switch broadcast to every other port
    LEARNED = "learned"        # Switch recorded a source address
    FAILED = "failed"          # An event action raised


class Reason(Enum):
    """Why a packet was dropped or flooded"""
    LINK_NOT_FOUND = "link_not_found"
    ADDRESS_MISMATCH = "address_mismatch"
    NO_ROUTE = "no_route"
    UNKNOWN_DESTINATION = "unknown_destination"
    UNKNOWN_DEVICE = "unknown_device"
    HAIRPIN = "hairpin"
    ACTION_FAILED = "action_failed"


@dataclass(frozen=True)
class Outcome:
    """
    One reportable result.

    Attributes:
        time: Virtual time of the outcome (ms)
        kind: What happened
        device: Name of the reporting device
        packet: Packet involved, if any
        reason: Drop/flood reason, if any
        layer: Layer that rejected the packet, for address mismatches
        peer: Next hop or learned port, where relevant
        detail: Free-form extra context
    """
    time: float
    kind: OutcomeKind
    device: str
    packet: Optional[Packet] = None
    reason: Optional[Reason] = None
    layer: Optional[str] = None
    peer: Optional[str] = None
    detail: str = ""

    @property
    def is_drop(self) -> bool:
        return self.kind is OutcomeKind.DROPPED

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "kind": self.kind.value,
            "device": self.device,
            "reason": self.reason.value if self.reason else None,
            "layer": self.layer,
            "peer": self.peer,
            "packet_id": self.packet.packet_id if self.packet else None,
            "addresses": self.packet.addresses() if self.packet else None,
            "detail": self.detail,
        }
