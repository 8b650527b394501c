"""
Topology builder for layered network simulations.

Implements common small topologies:
- Single LAN (all hosts on one learning switch)
- Two LANs joined by a router
"""

from typing import Dict, List, Optional

from core import (
    DEFAULT_LINK_DELAY, Host, Router, Simulation, SimulationConfig, Switch
)


def host_mac(lan: int, index: int) -> str:
    """MAC for host ``index`` (0-based) on LAN ``lan`` (1-based)"""
    return f"AA:BB:CC:DD:{lan:02X}:{index + 1:02X}"


def host_ip(lan: int, index: int) -> str:
    return f"192.168.{lan}.{index + 1}"


class Topology:
    """Base class for canned topologies"""

    def __init__(self, delay: float = DEFAULT_LINK_DELAY, config: Optional[SimulationConfig] = None):
        self.delay = delay
        self.sim = Simulation(config=config)
        self.hosts: List[Host] = []
        self.switches: List[Switch] = []
        self.routers: List[Router] = []

    def build(self) -> "Topology":
        """Override in subclasses to construct topology"""
        raise NotImplementedError

    def _add_lan(self, lan: int, num_hosts: int, switch_name: str, prefix: str = "h") -> Switch:
        switch = self.sim.add_device(Switch(switch_name))
        self.switches.append(switch)

        for i in range(num_hosts):
            host = Host.with_addresses(
                f"{prefix}{i + 1}",
                ip=host_ip(lan, i),
                mac=host_mac(lan, i),
                next_hop=switch_name,
            )
            self.sim.add_device(host)
            self.sim.connect(host.name, switch_name, self.delay)
            switch.add_port(host.mac, host.name)
            self.hosts.append(host)

        return switch

    def host(self, name: str) -> Host:
        return self.sim.device(name)

    def summary(self) -> Dict[str, int]:
        """Topology summary"""
        return {
            "hosts": len(self.hosts),
            "switches": len(self.switches),
            "routers": len(self.routers),
            "links": len(self.sim.network.links),
        }


class LanTopology(Topology):
    r"""
    Single-switch LAN:

        h1   h2   h3   h4
         |    |    |    |
         +----+----+----+
                |
               sw1
    """

    def __init__(self, num_hosts: int = 2, **kwargs):
        super().__init__(**kwargs)
        if num_hosts < 1:
            raise ValueError(f"Need at least one host, got {num_hosts}")
        self.num_hosts = num_hosts

    def build(self):
        self._add_lan(1, self.num_hosts, "sw1")
        return self


class RoutedTopology(Topology):
    r"""
    Two LANs joined by a router:

        h1.1  h1.2           h2.1  h2.2
          |    |               |    |
          +-sw1-+----- r1 -----+-sw2-+

    LAN n uses 192.168.n.0/24. Each switch maps the other LAN's MACs to the
    router port; the router routes each /24 to its switch.
    """

    def __init__(self, hosts_per_lan: int = 2, **kwargs):
        super().__init__(**kwargs)
        if hosts_per_lan < 1:
            raise ValueError(f"Need at least one host per LAN, got {hosts_per_lan}")
        self.hosts_per_lan = hosts_per_lan

    def build(self):
        router = self.sim.add_device(Router("r1"))
        self.routers.append(router)

        for lan in (1, 2):
            switch = self._add_lan(lan, self.hosts_per_lan, f"sw{lan}", prefix=f"h{lan}.")
            self.sim.connect(switch.name, router.name, self.delay)
            router.add_route(f"192.168.{lan}.0/24", switch.name)

        # Remote MACs sit behind the router
        for lan, switch in ((1, self.switches[0]), (2, self.switches[1])):
            other = 2 if lan == 1 else 1
            for i in range(self.hosts_per_lan):
                switch.add_port(host_mac(other, i), router.name)

        return self


def create_topology(topology_type: str, **kwargs) -> Topology:
    """
    Factory function to create topologies.

    Args:
        topology_type: "lan" or "routed"
        **kwargs: Topology-specific parameters

    Returns:
        Built Topology instance
    """
    if topology_type == "lan":
        topo = LanTopology(**kwargs)
    elif topology_type == "routed":
        topo = RoutedTopology(**kwargs)
    else:
        raise ValueError(f"Unknown topology type: {topology_type}")

    return topo.build()
