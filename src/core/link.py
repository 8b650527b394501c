"""
Directed, delay-bearing link between two devices.
"""

from dataclasses import dataclass

from .packet import DELIVER_EVENT, Packet, SimulationEvent


@dataclass(frozen=True)
class Link:
    """
    One-way channel from ``source`` to ``target``.

    A packet handed to ``transmit`` is delivered to the target exactly
    ``delay`` ms later. Links are immutable; two links are needed for
    two-way traffic.
    """
    source: str
    target: str
    delay: float

    def __post_init__(self):
        if self.delay < 0:
            raise ValueError(f"Link delay must be non-negative, got {self.delay}")
        if self.source == self.target:
            raise ValueError(f"Link cannot loop back to {self.source}")

    def transmit(self, packet: Packet, sim_engine) -> SimulationEvent:
        """Schedule delivery of ``packet`` to the target device"""
        event = SimulationEvent(
            timestamp=sim_engine.current_time + self.delay,
            event_type=DELIVER_EVENT,
            target=self.target,
            source=self.source,
            packet=packet,
        )
        return sim_engine.schedule_event(event)

    @property
    def key(self):
        return (self.source, self.target)

    def __str__(self):
        return f"Link({self.source}->{self.target}, {self.delay:.1f}ms)"
