"""
Router model: layer 3 forwarding on logical addresses.
"""

import ipaddress
from typing import Dict, List, Optional, Tuple

from .device import Device
from .outcomes import OutcomeKind, Reason
from .packet import AddressError, Packet


def parse_destination(destination: str) -> ipaddress.IPv4Network:
    """Parse a routing table key: a host address or a CIDR prefix"""
    try:
        return ipaddress.IPv4Network(destination.strip(), strict=False)
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError) as exc:
        raise AddressError(f"Invalid route destination: {destination!r}") from exc


class Router(Device):
    """
    Models a static router.

    Routing table keys are logical addresses or CIDR prefixes mapped to the
    next-hop device name; the longest matching prefix wins. Routers never
    learn routes from traffic.
    """

    kind = "router"

    def __init__(self, name: str, routing_table: Optional[Dict[str, str]] = None):
        super().__init__(name)
        self.routes: List[Tuple[ipaddress.IPv4Network, str]] = []
        for destination, next_hop in (routing_table or {}).items():
            self.add_route(destination, next_hop)

    def add_route(self, destination: str, next_hop: str):
        network = parse_destination(destination)
        self.routes = [(net, hop) for net, hop in self.routes if net != network]
        self.routes.append((network, next_hop))
        # Most specific prefix first
        self.routes.sort(key=lambda route: route[0].prefixlen, reverse=True)

    @property
    def routing_table(self) -> Dict[str, str]:
        return {
            str(net.network_address) if net.prefixlen == 32 else str(net): hop
            for net, hop in self.routes
        }

    def lookup(self, dst_ip: str) -> Optional[str]:
        """Return the next hop for ``dst_ip``, or None"""
        if not dst_ip:
            return None
        address = ipaddress.IPv4Address(dst_ip)
        for network, next_hop in self.routes:
            if address in network:
                return next_hop
        return None

    def receive(self, packet: Packet, sim, ingress: Optional[str] = None):
        self.packets_received += 1
        return self.send(packet, sim, ingress)

    def send(self, packet: Packet, sim, ingress: Optional[str] = None):
        """Forward ``packet`` along its route, or drop it with NO_ROUTE or HAIRPIN"""
        next_hop = self.lookup(packet.dst_ip)
        if next_hop is None:
            self.drop(packet, sim, Reason.NO_ROUTE, peer=ingress,
                      detail=f"no route to {packet.dst_ip or '<unset>'}")
            return False

        # Flooded frames can reach the router from the segment they are
        # addressed to; never hand them back to that segment
        if next_hop == ingress:
            self.drop(packet, sim, Reason.HAIRPIN, peer=ingress,
                      detail=f"route to {packet.dst_ip} leads back to {ingress}")
            return False

        if not self.transmit_to(next_hop, packet, sim):
            return False
        sim.report(OutcomeKind.FORWARDED, self, packet, peer=next_hop)
        return True
