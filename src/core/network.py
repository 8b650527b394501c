"""
Topology registry: the devices of a simulation and the links between them.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .link import Link

logger = logging.getLogger(__name__)


class Network:
    """
    Directed graph of devices and links.

    Built incrementally during setup and frozen once the simulation
    starts running. Link lookup is by exact (source, target) pair.
    """

    def __init__(self):
        self.devices: Dict[str, object] = {}
        self.links: Dict[Tuple[str, str], Link] = {}
        self.frozen = False

    def _check_mutable(self):
        if self.frozen:
            raise ValueError("Topology is frozen; build it before running the simulation")

    def add_device(self, device):
        """Register a device under its name"""
        self._check_mutable()
        if device.name in self.devices:
            raise ValueError(f"Device {device.name!r} already registered")
        self.devices[device.name] = device
        logger.debug("Registered %s", device.identify())
        return device

    def add_link(self, source: str, target: str, delay: float) -> Link:
        """Register a one-way link between two registered devices"""
        self._check_mutable()
        for name in (source, target):
            if name not in self.devices:
                raise ValueError(f"Device {name!r} does not exist")
        if (source, target) in self.links:
            raise ValueError(f"Link {source}->{target} already exists")

        link = Link(source, target, delay)
        self.links[link.key] = link
        logger.debug("Added %s", link)
        return link

    def connect(self, a: str, b: str, delay: float) -> Tuple[Link, Link]:
        """Add a pair of links so ``a`` and ``b`` can talk both ways"""
        return self.add_link(a, b, delay), self.add_link(b, a, delay)

    def get_link(self, source: str, target: str) -> Optional[Link]:
        """Return the link from ``source`` to ``target``, or None"""
        return self.links.get((source, target))

    def device(self, name: str):
        """Return the device registered as ``name``, or None"""
        return self.devices.get(name)

    def links_from(self, source: str) -> List[Link]:
        return [link for (src, _), link in self.links.items() if src == source]

    def freeze(self):
        self.frozen = True

    def __contains__(self, name):
        return name in self.devices

    def __len__(self):
        return len(self.devices)
