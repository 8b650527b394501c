"""
Base class shared by hosts, switches and routers.
"""

from typing import Optional

from .outcomes import OutcomeKind, Reason
from .packet import Packet


class Device:
    """
    A participant in the simulated network.

    Devices keep no reference to the simulation; every operation receives
    the simulation context so several simulations can run side by side.
    """

    kind = "device"

    def __init__(self, name: str):
        self.name = name

        # Statistics
        self.packets_received = 0
        self.packets_transmitted = 0
        self.packets_dropped = 0

    def send(self, packet: Packet, sim, ingress: Optional[str] = None):
        raise NotImplementedError

    def receive(self, packet: Packet, sim, ingress: Optional[str] = None):
        raise NotImplementedError

    def identify(self) -> str:
        return f"{self.kind.capitalize()}({self.name})"

    def transmit_to(self, next_hop: Optional[str], packet: Packet, sim) -> bool:
        """
        Put ``packet`` on the link towards ``next_hop``.

        Returns False, after reporting LINK_NOT_FOUND, if there is no
        such link.
        """
        link = sim.network.get_link(self.name, next_hop) if next_hop else None
        if link is None:
            self.drop(packet, sim, Reason.LINK_NOT_FOUND, peer=next_hop,
                      detail=f"no link {self.name}->{next_hop}")
            return False

        link.transmit(packet, sim.engine)
        self.packets_transmitted += 1
        return True

    def drop(self, packet: Packet, sim, reason: Reason, **extra):
        self.packets_dropped += 1
        sim.report(OutcomeKind.DROPPED, self, packet, reason=reason, **extra)

    def __repr__(self):
        return self.identify()
