"""
Simple LAN simulation example.

Topology:
    Host1 --\
             Switch1
    Host2 --/

Demonstrates:
- Layer encapsulation at the sender and validation at the receiver
- Switch flooding for an unknown destination, then learning
- Link delays in virtual time
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import logging

from core import Host, OutcomeLogger, Packet, Simulation, Switch, setup_logger

H1_IP, H1_MAC = "192.168.1.1", "AA:BB:CC:DD:EE:01"
H2_IP, H2_MAC = "192.168.1.2", "AA:BB:CC:DD:EE:02"


def main():
    setup_logger("core", level=logging.INFO)

    sim = Simulation()
    sim.subscribe(OutcomeLogger(level=logging.INFO))

    sim.add_device(Host.with_addresses("Host1", H1_IP, H1_MAC, next_hop="Switch1"))
    host2 = sim.add_device(Host.with_addresses("Host2", H2_IP, H2_MAC, next_hop="Switch1"))
    sim.add_device(Switch("Switch1", {H1_MAC: "Host1", H2_MAC: "Host2"}))
    sim.connect("Host1", "Switch1", 50.0)
    sim.connect("Host2", "Switch1", 50.0)

    # Host2 answers every packet it accepts
    host2.on_deliver = lambda p: sim.send(
        "Host2", Packet(f"re: {p.payload}", dst_ip=p.src_ip, dst_mac=p.src_mac)
    )

    sim.send("Host1", Packet("Hello Network!!", dst_ip=H2_IP, dst_mac=H2_MAC))
    stats = sim.run()

    for key, value in stats.summary().items():
        print(f"{key}: {value}")


if __name__ == "__main__":
    main()
