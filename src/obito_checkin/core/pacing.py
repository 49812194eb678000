#!/usr/bin/env python3
"""
Pacing strategies for the delay between two tokens.
"""

import random
import time
import logging
from typing import Callable, Optional

from obito_checkin.config import PACING_MIN_MS, PACING_JITTER_MS

logger = logging.getLogger(__name__)


class Pacing:
    """Interface: block until the next token may be processed."""

    def wait(self) -> None:
        raise NotImplementedError


class RandomPacing(Pacing):
    """Sleep ``min_ms`` plus a uniform jitter of up to ``jitter_ms``."""

    def __init__(self, min_ms: int = PACING_MIN_MS, jitter_ms: int = PACING_JITTER_MS,
                 sleep: Callable[[float], None] = time.sleep, rng: Optional[random.Random] = None):
        self.min_ms = min_ms
        self.jitter_ms = jitter_ms
        self.sleep = sleep
        self.rng = rng or random.Random()

    def next_delay(self) -> float:
        """Next delay in seconds."""
        return (self.min_ms + self.rng.random() * self.jitter_ms) / 1000.0

    def wait(self) -> None:
        delay = self.next_delay()
        logger.debug(f"Pacing for {delay:.2f}s")
        self.sleep(delay)


class NoPacing(Pacing):
    def wait(self) -> None:
        return None
