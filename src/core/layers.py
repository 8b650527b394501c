"""
Protocol layers used by hosts to encapsulate and decapsulate packets.

Each layer owns exactly one address pair. On the way out it stamps its
own address into the source field; on the way in it checks that the
destination field at its level is addressed to it.
"""

from .packet import BROADCAST_MAC, Packet, normalize_ip, normalize_mac


class Layer:
    """Base class for a protocol layer"""

    name = "layer"

    def __init__(self, address: str):
        self.address = address

    def stamp(self, packet: Packet) -> Packet:
        """Return a copy of ``packet`` carrying this layer's source address"""
        raise NotImplementedError

    def destination_of(self, packet: Packet) -> str:
        raise NotImplementedError

    def validate(self, packet: Packet) -> bool:
        """True if the packet is addressed to this layer"""
        return self.destination_of(packet) == self.address

    def identify(self) -> str:
        return f"{self.name}({self.address})"

    def __repr__(self):
        return f"{self.__class__.__name__}({self.address!r})"


class NetworkLayer(Layer):
    """Owns the logical (IP) address pair"""

    name = "network"

    def __init__(self, ip: str):
        super().__init__(normalize_ip(ip))

    def stamp(self, packet: Packet) -> Packet:
        return packet.with_fields(src_ip=self.address)

    def destination_of(self, packet: Packet) -> str:
        return packet.dst_ip


class DataLinkLayer(Layer):
    """Owns the physical (MAC) address pair"""

    name = "datalink"

    def __init__(self, mac: str):
        super().__init__(normalize_mac(mac))

    def stamp(self, packet: Packet) -> Packet:
        return packet.with_fields(src_mac=self.address)

    def destination_of(self, packet: Packet) -> str:
        return packet.dst_mac

    def validate(self, packet: Packet) -> bool:
        # Broadcast frames are addressed to everyone on the segment
        return packet.dst_mac in (self.address, BROADCAST_MAC)
