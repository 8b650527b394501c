"""
Discrete-event simulation engine for layered networks.

Implements a priority-queue based event loop that processes
network events in timestamp order. Events with equal timestamps
fire in the order they were scheduled.
"""

import heapq
import itertools
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from .clock import Clock, VirtualClock
from .packet import ACTION_EVENT, PROGRESS_INTERVAL, Packet, SimulationEvent

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Core discrete-event simulation engine.

    Manages the event queue, advances the injected clock and dispatches
    events either to their own action or to registered handlers.

    Args:
        clock: Time source; defaults to a fresh VirtualClock
        fail_fast: Re-raise the first exception raised by an event
        on_error: Called with (event, exception) for every isolated failure
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        fail_fast: bool = False,
        on_error: Optional[Callable[[SimulationEvent, Exception], None]] = None,
    ):
        self.clock = clock or VirtualClock()
        self.fail_fast = fail_fast
        self.on_error = on_error
        self.event_queue = []     # Min-heap of (timestamp, sequence, event)
        self.event_handlers: Dict[str, List[Callable]] = defaultdict(list)
        self.stats = SimulationStats()
        self._sequence = itertools.count(1)
        self._pending = set()     # Sequences of live events

    @property
    def current_time(self) -> float:
        return self.clock.now()

    @property
    def pending(self) -> int:
        """Number of scheduled events that have not fired or been cancelled"""
        return len(self._pending)

    def schedule(self, delay: float, action: Callable[[], Any]) -> SimulationEvent:
        """Run ``action`` after ``delay`` ms of virtual time"""
        if delay < 0:
            raise ValueError(f"Cannot schedule with negative delay: {delay}")
        event = SimulationEvent(
            timestamp=self.current_time + delay,
            event_type=ACTION_EVENT,
            action=action,
        )
        return self.schedule_event(event)

    def schedule_event(self, event: SimulationEvent) -> SimulationEvent:
        """Add event to the queue"""
        if event.timestamp < self.current_time:
            raise ValueError(f"Cannot schedule event in the past: {event.timestamp} < {self.current_time}")
        event.sequence = next(self._sequence)
        event.cancelled = False
        heapq.heappush(self.event_queue, (event.timestamp, event.sequence, event))
        self._pending.add(event.sequence)
        return event

    def cancel(self, event: SimulationEvent) -> bool:
        """Cancel a pending event. Returns False if it already fired."""
        if event.sequence not in self._pending:
            return False
        self._pending.discard(event.sequence)
        event.cancelled = True
        self.stats.cancelled_events += 1
        return True

    def drain(self) -> int:
        """Discard every pending event without running it"""
        discarded = len(self._pending)
        for _, _, event in self.event_queue:
            event.cancelled = True
        self.event_queue.clear()
        self._pending.clear()
        self.stats.cancelled_events += discarded
        if discarded:
            logger.debug("Drained %d pending events at t=%.3fms", discarded, self.current_time)
        return discarded

    def register_handler(self, event_type: str, handler: Callable):
        """Register callback for specific event type"""
        self.event_handlers[event_type].append(handler)

    def run(self, until: float = None, max_events: int = None):
        """
        Run simulation until the queue is empty or a stopping condition hits.

        Args:
            until: Stop before events later than this simulation time (ms)
            max_events: Stop after processing this many events
        """
        events_processed = 0

        while self.event_queue:
            timestamp, sequence, event = self.event_queue[0]

            if event.cancelled:
                heapq.heappop(self.event_queue)
                continue

            # Check stopping conditions
            if until is not None and timestamp > until:
                break

            if max_events is not None and events_processed >= max_events:
                break

            heapq.heappop(self.event_queue)
            self._pending.discard(sequence)

            # Advance time
            self.clock.wait_until(timestamp)

            self._dispatch(event)

            events_processed += 1
            self.stats.total_events += 1

            if self.stats.total_events % PROGRESS_INTERVAL == 0:
                logger.info("Processed %d events, sim_time=%.2fms",
                            self.stats.total_events, self.current_time)

        self.stats.final_time = self.current_time
        return self.stats

    def _dispatch(self, event: SimulationEvent):
        try:
            if event.action is not None:
                event.action()
                return

            handlers = self.event_handlers.get(event.event_type)
            if not handlers:
                logger.warning("No handler registered for %r events", event.event_type)
                return
            for handler in handlers:
                handler(event)
        except Exception as exc:
            if self.fail_fast:
                raise
            self.stats.failed_events += 1
            logger.exception("Event %s #%d failed at t=%.3fms",
                             event.event_type, event.sequence, event.timestamp)
            if self.on_error is not None:
                self.on_error(event, exc)


class SimulationStats:
    """Collect simulation-wide statistics"""

    def __init__(self):
        self.total_events = 0
        self.failed_events = 0
        self.cancelled_events = 0
        self.final_time = 0.0
        self.packets_sent = 0
        self.packets_delivered = 0
        self.packets_dropped = 0
        self.latencies = []  # Per-packet latencies

    def record_delivery(self, packet: Packet, completion_time: float):
        """Record delivered packet for statistics"""
        self.packets_delivered += 1
        self.latencies.append(packet.latency_at(completion_time))

    def avg_latency(self) -> float:
        """Average end-to-end latency"""
        if not self.latencies:
            return 0.0
        return sum(self.latencies) / len(self.latencies)

    def percentile_latency(self, p: float) -> float:
        """Calculate p-th percentile latency (p in [0, 100])"""
        if not self.latencies:
            return 0.0
        sorted_latencies = sorted(self.latencies)
        idx = int(len(sorted_latencies) * p / 100.0)
        return sorted_latencies[min(idx, len(sorted_latencies) - 1)]

    def summary(self) -> dict:
        return {
            "total_events": self.total_events,
            "failed_events": self.failed_events,
            "cancelled_events": self.cancelled_events,
            "final_time": self.final_time,
            "packets_sent": self.packets_sent,
            "packets_delivered": self.packets_delivered,
            "packets_dropped": self.packets_dropped,
            "avg_latency": self.avg_latency(),
            "p50_latency": self.percentile_latency(50),
            "p99_latency": self.percentile_latency(99),
        }
