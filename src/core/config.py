"""
Configuration settings for a simulation run.
"""

from dataclasses import dataclass, fields
from typing import Optional

from .packet import DEFAULT_LINK_DELAY


@dataclass
class SimulationConfig:
    """
    Attributes:
        fail_fast: Abort the run on the first failing event instead of
            reporting it and carrying on
        default_delay: Delay (ms) for links added without an explicit delay
        realtime_scale: Pace the run against the wall clock at this scale;
            None runs in virtual time
        trace_outcomes: Log every outcome through OutcomeLogger
    """
    fail_fast: bool = False
    default_delay: float = DEFAULT_LINK_DELAY
    realtime_scale: Optional[float] = None
    trace_outcomes: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "SimulationConfig":
        """Build a config from a plain dict, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in config.items() if key in known})
