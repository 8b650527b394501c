#!/usr/bin/env python3

"""Topology building for layered network simulations."""

from .builder import Topology, LanTopology, RoutedTopology, create_topology, host_ip, host_mac

__all__ = [
    'Topology',
    'LanTopology',
    'RoutedTopology',
    'create_topology',
    'host_ip',
    'host_mac',
]
