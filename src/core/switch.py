"""
Learning switch model: layer 2 forwarding on physical addresses.
"""

from typing import Dict, List, Optional

from .device import Device
from .outcomes import OutcomeKind, Reason
from .packet import Packet, normalize_mac


class Switch(Device):
    """
    Models a learning switch.

    The static port table lists which device sits behind each known MAC.
    The learned table is filled from the source address of every frame the
    switch handles and takes precedence when forwarding.
    """

    kind = "switch"

    def __init__(self, name: str, port_table: Optional[Dict[str, str]] = None):
        super().__init__(name)
        self.port_table: Dict[str, str] = {
            normalize_mac(mac): device for mac, device in (port_table or {}).items()
        }
        self.learned_table: Dict[str, str] = {}
        self.total_floods = 0

    def add_port(self, mac: str, device: str):
        """Map ``mac`` to the device connected on that port"""
        self.port_table[normalize_mac(mac)] = device

    @property
    def ports(self) -> List[str]:
        """Distinct neighbour devices, in port table order"""
        return list(dict.fromkeys(self.port_table.values()))

    def receive(self, packet: Packet, sim, ingress: Optional[str] = None):
        self.packets_received += 1
        return self.send(packet, sim, ingress)

    def send(self, packet: Packet, sim, ingress: Optional[str] = None):
        """Learn the frame's source, then unicast or flood it"""
        self.learn(packet, sim, ingress)

        out_port = self.learned_table.get(packet.dst_mac)
        if out_port is not None:
            # Destination lives behind the port the frame came in on
            if out_port == ingress:
                self.drop(packet, sim, Reason.HAIRPIN, peer=ingress,
                          detail=f"{packet.dst_mac} is behind ingress {ingress}")
                return False
            if not self.transmit_to(out_port, packet, sim):
                return False
            sim.report(OutcomeKind.FORWARDED, self, packet, peer=out_port)
            return True

        return self.flood(packet, sim, ingress) > 0

    def learn(self, packet: Packet, sim, ingress: Optional[str] = None):
        """Record which port the frame's source address lives behind"""
        if not packet.src_mac:
            return

        port = ingress or self.port_table.get(packet.src_mac)
        if port is None or self.learned_table.get(packet.src_mac) == port:
            return

        self.learned_table[packet.src_mac] = port
        sim.report(OutcomeKind.LEARNED, self, packet, peer=port)

    def flood(self, packet: Packet, sim, ingress: Optional[str] = None) -> int:
        """Send a copy to every port except the one the frame came from"""
        excluded = {ingress, self.port_table.get(packet.src_mac)}
        targets = [port for port in self.ports if port not in excluded]

        self.total_floods += 1
        sim.report(OutcomeKind.FLOODED, self, packet,
                   reason=Reason.UNKNOWN_DESTINATION,
                   detail=",".join(targets))

        sent = 0
        for port in targets:
            if self.transmit_to(port, packet, sim):
                sent += 1
        return sent

    def forget(self, mac: str) -> bool:
        """Remove a learned entry; True if it existed"""
        return self.learned_table.pop(normalize_mac(mac), None) is not None

    def clear_learned(self):
        self.learned_table.clear()

    def get_forwarding_metrics(self) -> dict:
        return {
            "switch": self.name,
            "received": self.packets_received,
            "transmitted": self.packets_transmitted,
            "dropped": self.packets_dropped,
            "floods": self.total_floods,
            "learned_entries": len(self.learned_table),
        }
