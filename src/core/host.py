"""
Host model: an endpoint with a protocol layer stack.

Outgoing packets are stamped by every layer from the top of the stack
down; incoming packets are validated from the bottom up and stop at the
first layer they are not addressed to.
"""

from typing import Callable, List, Optional, Sequence

from .device import Device
from .layers import DataLinkLayer, Layer, NetworkLayer
from .outcomes import OutcomeKind, Reason
from .packet import Packet


class Host(Device):
    """
    Models an end host.

    Args:
        name: Registry name
        layers: Protocol layers ordered lowest to highest
        next_hop: Device the host's outbound link leads to
        on_deliver: Application callback for accepted packets
    """

    kind = "host"

    def __init__(
        self,
        name: str,
        layers: Sequence[Layer],
        next_hop: Optional[str] = None,
        on_deliver: Optional[Callable[[Packet], None]] = None,
    ):
        super().__init__(name)
        self.layers: List[Layer] = list(layers)
        self.next_hop = next_hop
        self.on_deliver = on_deliver
        self.inbox: List[Packet] = []  # Accepted packets, in arrival order

    @classmethod
    def with_addresses(cls, name: str, ip: str, mac: str, **kwargs) -> "Host":
        """Create a host with the usual [DataLink, Network] stack"""
        return cls(name, [DataLinkLayer(mac), NetworkLayer(ip)], **kwargs)

    @property
    def ip(self) -> Optional[str]:
        return self._address_of(NetworkLayer)

    @property
    def mac(self) -> Optional[str]:
        return self._address_of(DataLinkLayer)

    def _address_of(self, layer_type) -> Optional[str]:
        for layer in self.layers:
            if isinstance(layer, layer_type):
                return layer.address
        return None

    def encapsulate(self, packet: Packet) -> Packet:
        """Stamp ``packet`` through the stack, highest layer first"""
        for layer in reversed(self.layers):
            packet = layer.stamp(packet)
        return packet

    def send(self, packet: Packet, sim, ingress: Optional[str] = None):
        """Encapsulate and transmit towards the configured next hop"""
        packet = self.encapsulate(packet)
        if not self.transmit_to(self.next_hop, packet, sim):
            return False

        sim.engine.stats.packets_sent += 1
        sim.report(OutcomeKind.SENT, self, packet, peer=self.next_hop)
        return True

    def receive(self, packet: Packet, sim, ingress: Optional[str] = None):
        """Validate ``packet`` layer by layer and hand it to the application"""
        self.packets_received += 1

        for layer in self.layers:
            if not layer.validate(packet):
                self.drop(packet, sim, Reason.ADDRESS_MISMATCH, layer=layer.name,
                          peer=ingress,
                          detail=f"{layer.destination_of(packet)} != {layer.address}")
                return False

        self.inbox.append(packet)
        sim.engine.stats.record_delivery(packet, sim.now)
        sim.report(OutcomeKind.DELIVERED, self, packet, peer=ingress)
        if self.on_deliver is not None:
            self.on_deliver(packet)
        return True

    def identify(self) -> str:
        addresses = ", ".join(layer.identify() for layer in self.layers)
        return f"Host({self.name}: {addresses})"
