"""Tests for layers, hosts, switches and routers."""

import pytest
from core import (
    Packet, Host, Switch, Router, NetworkLayer, DataLinkLayer,
    OutcomeKind, Reason, BROADCAST_MAC, AddressError
)

MAC1 = "AA:BB:CC:DD:EE:01"
MAC2 = "AA:BB:CC:DD:EE:02"
MAC3 = "AA:BB:CC:DD:EE:03"
IP1 = "192.168.1.1"
IP2 = "192.168.1.2"


class TestLayers:
    """Test encapsulation and validation per layer"""

    def test_network_layer_stamps_logical_source(self):
        layer = NetworkLayer(IP1)
        packet = Packet("x", dst_ip=IP2, dst_mac=MAC2)

        stamped = layer.stamp(packet)
        assert stamped.src_ip == IP1
        assert stamped.src_mac == ""
        assert packet.src_ip == ""

    def test_datalink_layer_stamps_physical_source(self):
        stamped = DataLinkLayer(MAC1).stamp(Packet("x"))
        assert stamped.src_mac == MAC1
        assert stamped.src_ip == ""

    def test_validate(self):
        packet = Packet("x", dst_ip=IP2, dst_mac=MAC2)
        assert NetworkLayer(IP2).validate(packet)
        assert not NetworkLayer(IP1).validate(packet)
        assert DataLinkLayer(MAC2).validate(packet)
        assert not DataLinkLayer(MAC1).validate(packet)

    def test_datalink_accepts_broadcast(self):
        assert DataLinkLayer(MAC1).validate(Packet("x", dst_mac=BROADCAST_MAC))

    def test_identify(self):
        assert NetworkLayer(IP1).identify() == "network(192.168.1.1)"
        assert DataLinkLayer(MAC1.lower()).identify() == f"datalink({MAC1})"

    def test_bad_layer_address(self):
        with pytest.raises(AddressError):
            NetworkLayer("300.1.1.1")


class TestHost:
    """Test the host send/receive pipeline"""

    def test_encapsulation_stamps_both_layers(self):
        host = Host("h1", [DataLinkLayer(MAC1), NetworkLayer(IP1)])
        packet = host.encapsulate(Packet("hello", dst_ip=IP2, dst_mac=MAC2))

        assert packet.src_mac == MAC1
        assert packet.src_ip == IP1
        assert packet.dst_ip == IP2
        assert packet.dst_mac == MAC2

    def test_stack_order_is_lowest_first(self):
        host = Host.with_addresses("h1", IP1, MAC1)
        assert [layer.name for layer in host.layers] == ["datalink", "network"]
        assert host.ip == IP1
        assert host.mac == MAC1

    def test_send_transmits_on_link(self, sim, recorder):
        host = sim.add_device(Host.with_addresses("h1", IP1, MAC1, next_hop="peer"))
        peer = sim.add_device(recorder("peer"))
        sim.add_link("h1", "peer", 10.0)

        assert sim.send("h1", Packet("hello", dst_ip=IP2, dst_mac=MAC2)) is True
        sim.run()

        assert peer.call_count == 1
        _, packet, ingress = peer.calls[0]
        assert packet.src_ip == IP1
        assert packet.src_mac == MAC1
        assert ingress == "h1"
        assert host.packets_transmitted == 1

    def test_send_without_link_reports_link_not_found(self, sim):
        sim.add_device(Host.with_addresses("h1", IP1, MAC1, next_hop="nowhere"))

        assert sim.send("h1", Packet("hello", dst_ip=IP2)) is False

        drops = sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.LINK_NOT_FOUND)
        assert len(drops) == 1
        assert drops[0].device == "h1"
        assert sim.engine.pending == 0

    def test_send_without_next_hop_reports_link_not_found(self, sim):
        sim.add_device(Host.with_addresses("h1", IP1, MAC1))
        assert sim.send("h1", Packet("hello")) is False
        assert sim.outcomes_of(reason=Reason.LINK_NOT_FOUND)

    def test_receive_accepts_matching_packet(self, sim):
        sender = Host.with_addresses("h1", IP1, MAC1)
        receiver = Host.with_addresses("h2", IP2, MAC2)
        delivered = []
        receiver.on_deliver = delivered.append

        packet = sender.encapsulate(Packet("hello", dst_ip=IP2, dst_mac=MAC2))
        assert receiver.receive(packet, sim) is True

        assert receiver.inbox == [packet]
        assert delivered == [packet]
        assert sim.outcomes_of(OutcomeKind.DELIVERED, device="h2")

    @pytest.mark.parametrize("ip, mac, layer", [
        (IP2, MAC3, "datalink"),
        ("192.168.1.9", MAC2, "network"),
    ])
    def test_receive_mismatch_halts_decapsulation(self, sim, ip, mac, layer):
        sender = Host.with_addresses("h1", IP1, MAC1)
        receiver = Host.with_addresses("h2", ip, mac)
        delivered = []
        receiver.on_deliver = delivered.append

        packet = sender.encapsulate(Packet("hello", dst_ip=IP2, dst_mac=MAC2))
        assert receiver.receive(packet, sim) is False

        assert receiver.inbox == []
        assert delivered == []
        drops = sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.ADDRESS_MISMATCH)
        assert [d.layer for d in drops] == [layer]

    def test_lower_layer_mismatch_stops_before_higher_layer(self, sim):
        class SpyLayer(NetworkLayer):
            checked = 0

            def validate(self, packet):
                SpyLayer.checked += 1
                return super().validate(packet)

        receiver = Host("h2", [DataLinkLayer(MAC3), SpyLayer(IP2)])
        receiver.receive(Packet("x", dst_ip=IP2, dst_mac=MAC2), sim)

        assert SpyLayer.checked == 0


class TestSwitch:
    """Test learning and flooding"""

    def build(self, sim, recorder):
        switch = Switch("sw", {MAC1: "a", MAC2: "b", MAC3: "c"})
        sim.add_device(switch)
        ports = {name: sim.add_device(recorder(name)) for name in "abc"}
        for name in ports:
            sim.add_link("sw", name, 5.0)
        return switch, ports

    def test_unknown_destination_floods_all_but_ingress(self, sim, recorder):
        switch, ports = self.build(sim, recorder)
        frame = Packet("x", src_mac=MAC1, dst_mac="AA:BB:CC:DD:EE:99")

        switch.receive(frame, sim, ingress="a")
        sim.run()

        assert ports["a"].call_count == 0
        assert ports["b"].call_count == 1
        assert ports["c"].call_count == 1
        floods = sim.outcomes_of(OutcomeKind.FLOODED)
        assert floods[0].reason is Reason.UNKNOWN_DESTINATION

    def test_learns_source_from_ingress(self, sim, recorder):
        switch, _ = self.build(sim, recorder)
        switch.receive(Packet("x", src_mac=MAC2, dst_mac=MAC1), sim, ingress="b")

        assert switch.learned_table == {MAC2: "b"}
        assert sim.outcomes_of(OutcomeKind.LEARNED)[0].peer == "b"

    def test_learning_falls_back_to_port_table(self, sim, recorder):
        switch, _ = self.build(sim, recorder)
        switch.send(Packet("x", src_mac=MAC3, dst_mac=MAC1), sim)

        assert switch.learned_table == {MAC3: "c"}

    def test_unset_source_is_never_learned(self, sim, recorder):
        switch, _ = self.build(sim, recorder)
        switch.receive(Packet("x", dst_mac=MAC1), sim, ingress="a")

        assert switch.learned_table == {}

    def test_learned_destination_is_unicast(self, sim, recorder):
        switch, ports = self.build(sim, recorder)

        # Frame from MAC2 arriving via port b teaches the switch where MAC2 is
        switch.receive(Packet("x", src_mac=MAC2, dst_mac=MAC1), sim, ingress="b")
        sim.run()
        before = {name: dev.call_count for name, dev in ports.items()}

        switch.receive(Packet("y", src_mac=MAC1, dst_mac=MAC2), sim, ingress="a")
        sim.run()

        assert ports["b"].call_count == before["b"] + 1
        assert ports["a"].call_count == before["a"]
        assert ports["c"].call_count == before["c"]
        assert sim.outcomes_of(OutcomeKind.FORWARDED)[-1].peer == "b"

    def test_missing_port_link_reports_only_that_port(self, sim, recorder):
        switch = sim.add_device(Switch("sw", {MAC1: "a", MAC2: "b"}))
        b = sim.add_device(recorder("b"))
        sim.add_device(recorder("a"))
        sim.add_link("sw", "b", 1.0)

        switch.receive(Packet("x", src_mac=MAC3, dst_mac="AA:BB:CC:DD:EE:99"), sim)
        sim.run()

        assert b.call_count == 1
        drops = sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.LINK_NOT_FOUND)
        assert [d.peer for d in drops] == ["a"]

    def test_forget(self, sim, recorder):
        switch, _ = self.build(sim, recorder)
        switch.receive(Packet("x", src_mac=MAC2, dst_mac=MAC1), sim, ingress="b")

        assert switch.forget(MAC2.lower()) is True
        assert switch.forget(MAC2) is False
        assert switch.learned_table == {}

    def test_destination_behind_ingress_is_not_sent_back(self, sim, recorder):
        switch, ports = self.build(sim, recorder)
        switch.receive(Packet("x", src_mac=MAC2, dst_mac=MAC1), sim, ingress="b")
        sim.run()
        before = {name: dev.call_count for name, dev in ports.items()}

        frame = Packet("y", src_mac=MAC3, dst_mac=MAC2)
        assert switch.receive(frame, sim, ingress="b") is False
        sim.run()

        assert {name: dev.call_count for name, dev in ports.items()} == before
        drops = sim.outcomes_of(OutcomeKind.DROPPED, device="sw", reason=Reason.HAIRPIN)
        assert len(drops) == 1
        assert drops[0].peer == "b"
        assert switch.total_floods == 1


class TestRouter:
    """Test static routing"""

    def test_no_route_drops_without_forwarding(self, sim, recorder):
        router = sim.add_device(Router("r", {"10.0.0.1": "next"}))
        nxt = sim.add_device(recorder("next"))
        sim.add_link("r", "next", 1.0)

        assert router.receive(Packet("x", dst_ip="10.9.9.9"), sim) is False
        sim.run()

        assert nxt.call_count == 0
        assert router.packets_transmitted == 0
        drops = sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.NO_ROUTE)
        assert len(drops) == 1

    def test_routes_through_link_with_delay(self, sim, recorder):
        router = sim.add_device(Router("r", {"10.0.0.1": "next"}))
        nxt = sim.add_device(recorder("next"))
        sim.add_link("r", "next", 7.0)

        assert router.receive(Packet("x", dst_ip="10.0.0.1"), sim) is True
        sim.run()

        assert nxt.call_count == 1
        assert nxt.calls[0][0] == 7.0

    def test_longest_prefix_wins(self):
        router = Router("r", {"10.0.0.0/8": "wide", "10.1.0.0/16": "narrow"})

        assert router.lookup("10.1.2.3") == "narrow"
        assert router.lookup("10.2.0.1") == "wide"
        assert router.lookup("192.168.0.1") is None

    def test_add_route_replaces_existing(self):
        router = Router("r", {"10.0.0.1": "a"})
        router.add_route("10.0.0.1", "b")

        assert router.routing_table == {"10.0.0.1": "b"}

    def test_missing_link_reports_link_not_found(self, sim):
        router = sim.add_device(Router("r", {"10.0.0.1": "ghost"}))

        assert router.receive(Packet("x", dst_ip="10.0.0.1"), sim) is False
        assert sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.LINK_NOT_FOUND)

    def test_never_routes_back_to_ingress(self, sim, recorder):
        router = sim.add_device(Router("r", {"10.0.0.0/24": "lan"}))
        lan = sim.add_device(recorder("lan"))
        sim.add_link("r", "lan", 1.0)

        assert router.receive(Packet("x", dst_ip="10.0.0.5"), sim, ingress="lan") is False
        sim.run()
        assert lan.call_count == 0
        drops = sim.outcomes_of(OutcomeKind.DROPPED, device="r")
        assert [o.reason for o in drops] == [Reason.HAIRPIN]
        assert drops[0].peer == "lan"

    def test_no_route_reported_only_on_lookup_miss(self, sim, recorder):
        router = sim.add_device(Router("r", {"10.0.0.0/24": "lan", "10.1.0.0/16": "wan"}))
        sim.add_device(recorder("lan"))
        sim.add_device(recorder("wan"))
        sim.add_link("r", "lan", 1.0)
        sim.add_link("r", "wan", 1.0)

        cases = [
            ("10.0.0.5", None),      # forwarded to lan
            ("10.0.0.6", "lan"),     # route leads back to ingress
            ("10.1.2.3", None),      # forwarded to wan
            ("172.16.0.1", None),    # no matching prefix
            ("", None),              # unset destination
        ]
        for dst_ip, ingress in cases:
            before = len(sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.NO_ROUTE))
            router.receive(Packet("x", dst_ip=dst_ip), sim, ingress=ingress)
            after = len(sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.NO_ROUTE))
            assert (after - before == 1) == (router.lookup(dst_ip) is None)

        assert len(sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.NO_ROUTE)) == 2
        assert len(sim.outcomes_of(OutcomeKind.DROPPED, reason=Reason.HAIRPIN)) == 1

    def test_bad_route_destination(self):
        with pytest.raises(AddressError):
            Router("r", {"10.0.0.0/99": "x"})
