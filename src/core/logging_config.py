"""
Logging helpers for the network simulator.
"""

import logging
from typing import Optional

from .outcomes import Outcome, OutcomeKind

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name: str = "core", level=logging.INFO, log_file: Optional[str] = None):
    """Attach console (and optionally file) handlers to a logger"""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)

    return logger


class OutcomeLogger:
    """Outcome subscriber that writes one log line per outcome"""

    def __init__(self, logger: Optional[logging.Logger] = None, level=logging.DEBUG):
        self.logger = logger or logging.getLogger("core.outcomes")
        self.level = level

    def __call__(self, outcome: Outcome):
        level = logging.INFO if outcome.kind in (OutcomeKind.DROPPED, OutcomeKind.FAILED) else self.level
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, self.format(outcome))

    @staticmethod
    def format(outcome: Outcome) -> str:
        parts = [f"[{outcome.time:.3f}ms]", outcome.device, outcome.kind.value]
        if outcome.reason is not None:
            parts.append(f"reason={outcome.reason.value}")
        if outcome.layer:
            parts.append(f"layer={outcome.layer}")
        if outcome.peer:
            parts.append(f"peer={outcome.peer}")
        if outcome.packet is not None:
            p = outcome.packet
            parts.append(f"#{p.packet_id} {p.src_ip}({p.src_mac}) -> {p.dst_ip}({p.dst_mac})")
        if outcome.detail:
            parts.append(f"({outcome.detail})")
        return " ".join(parts)
