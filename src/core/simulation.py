"""
Simulation context: owns the engine, the topology and the outcome stream.

Nothing in this package keeps process-wide state. Everything a run needs
hangs off one Simulation instance, so independent simulations can run
side by side.
"""

import itertools
import logging
from typing import Callable, List, Optional

from .clock import Clock, RealTimeClock
from .config import SimulationConfig
from .engine import SimulationEngine
from .host import Host
from .logging_config import OutcomeLogger
from .network import Network
from .outcomes import Outcome, OutcomeKind, Reason
from .packet import DELIVER_EVENT, SEND_EVENT, Packet, SimulationEvent

logger = logging.getLogger(__name__)


class Simulation:
    """
    One self-contained network simulation.

    Typical use::

        sim = Simulation()
        sim.add_device(Host.with_addresses("h1", "10.0.0.1", "AA:00:00:00:00:01"))
        ...
        sim.connect("h1", "sw1", delay=50.0)
        sim.send("h1", Packet("hello", dst_ip=..., dst_mac=...))
        sim.run()
    """

    def __init__(self, clock: Optional[Clock] = None, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.engine = SimulationEngine(
            clock=clock,
            fail_fast=self.config.fail_fast,
            on_error=self._on_event_error,
        )
        self.network = Network()
        self.outcomes: List[Outcome] = []
        self._subscribers: List[Callable[[Outcome], None]] = []
        self._packet_ids = itertools.count(1)

        self.engine.register_handler(DELIVER_EVENT, self._handle_deliver)
        self.engine.register_handler(SEND_EVENT, self._handle_send)

        if self.config.trace_outcomes:
            self.subscribe(OutcomeLogger())

    @classmethod
    def from_config(cls, config) -> "Simulation":
        """Create a simulation from a SimulationConfig or a plain dict"""
        if isinstance(config, dict):
            config = SimulationConfig.from_dict(config)
        clock = None
        if config.realtime_scale is not None:
            clock = RealTimeClock(scale=config.realtime_scale)
        return cls(clock=clock, config=config)

    @property
    def now(self) -> float:
        return self.engine.current_time

    @property
    def stats(self):
        return self.engine.stats

    # Topology construction

    def add_device(self, device):
        return self.network.add_device(device)

    def add_link(self, source: str, target: str, delay: Optional[float] = None):
        if delay is None:
            delay = self.config.default_delay
        return self.network.add_link(source, target, delay)

    def connect(self, a: str, b: str, delay: Optional[float] = None):
        if delay is None:
            delay = self.config.default_delay
        return self.network.connect(a, b, delay)

    def set_next_hop(self, host_name: str, next_hop: str):
        self._host(host_name).next_hop = next_hop

    def device(self, name: str):
        return self.network.device(name)

    def _host(self, name: str) -> Host:
        device = self.network.device(name)
        if device is None:
            raise ValueError(f"Device {name!r} does not exist")
        if not isinstance(device, Host):
            raise TypeError(f"{device.identify()} is not a host")
        return device

    # Packet injection

    def send(self, host_name: str, packet: Packet, delay: float = 0.0):
        """
        Inject ``packet`` at a host.

        With no delay the host sends immediately and the result of
        ``Host.send`` is returned. Otherwise a send event is scheduled and
        returned.
        """
        if delay < 0:
            raise ValueError(f"Cannot send with negative delay: {delay}")
        host = self._host(host_name)
        if delay > 0:
            event = SimulationEvent(
                timestamp=self.now + delay,
                event_type=SEND_EVENT,
                target=host.name,
                packet=packet,
            )
            return self.engine.schedule_event(event)
        return host.send(self._inject(packet), self)

    def _inject(self, packet: Packet) -> Packet:
        return packet.with_fields(packet_id=next(self._packet_ids), created_at=self.now)

    # Running

    def run(self, until: float = None, max_events: int = None):
        """Freeze the topology and process events"""
        self.network.freeze()
        stats = self.engine.run(until=until, max_events=max_events)
        logger.debug("Run stopped at t=%.3fms with %d events pending",
                     self.now, self.engine.pending)
        return stats

    def shutdown(self) -> int:
        """Discard every pending event"""
        return self.engine.drain()

    # Outcomes

    def subscribe(self, callback: Callable[[Outcome], None]):
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Outcome], None]):
        self._subscribers.remove(callback)

    def report(self, kind: OutcomeKind, device, packet: Optional[Packet] = None, **fields) -> Outcome:
        """Record an outcome and pass it to every subscriber"""
        outcome = Outcome(
            time=self.now,
            kind=kind,
            device=getattr(device, "name", device),
            packet=packet,
            **fields,
        )
        self.outcomes.append(outcome)
        if kind is OutcomeKind.DROPPED:
            self.stats.packets_dropped += 1
        for callback in list(self._subscribers):
            callback(outcome)
        return outcome

    def outcomes_of(self, kind: OutcomeKind = None, device: str = None,
                    reason: Reason = None) -> List[Outcome]:
        return [
            o for o in self.outcomes
            if (kind is None or o.kind is kind)
            and (device is None or o.device == device)
            and (reason is None or o.reason is reason)
        ]

    # Event handlers

    def _handle_deliver(self, event: SimulationEvent):
        device = self.network.device(event.target)
        if device is None:
            self.report(OutcomeKind.DROPPED, event.target, event.packet,
                        reason=Reason.UNKNOWN_DEVICE, peer=event.source)
            return
        device.receive(event.packet, self, ingress=event.source)

    def _handle_send(self, event: SimulationEvent):
        self._host(event.target).send(self._inject(event.packet), self)

    def _on_event_error(self, event: SimulationEvent, exc: Exception):
        self.report(OutcomeKind.FAILED, event.target or "engine", event.packet,
                    reason=Reason.ACTION_FAILED, peer=event.source,
                    detail=f"{type(exc).__name__}: {exc}")
