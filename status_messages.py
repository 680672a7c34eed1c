#!/usr/bin/env python3
"""
status_messages.py - Operator status text with client-side rate limiting

send() always goes out. send_trim() suppresses repeats of the same key for
one trim period and reports how many were dropped the next time it is sent:

    RNGHLD: Goto Depth 14.00m, -3.21m, 4.50s (+49)
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from config.harness_config import HARNESS_CONFIG
from hardware.vehicle_interface import LoggingStatusChannel, StatusChannel


@dataclass
class RateLimitState:
    """Per-key bookkeeping owned by one StatusReporter"""
    send_times: Dict[str, float] = field(default_factory=dict)
    eaten_counts: Dict[str, int] = field(default_factory=dict)


class StatusReporter:
    def __init__(self, channel: Optional[StatusChannel] = None,
                 clock: Callable[[], float] = time.monotonic,
                 prefix: str = HARNESS_CONFIG['test_name'],
                 trim_period_s: float = HARNESS_CONFIG['status']['trim_period_s'],
                 state: Optional[RateLimitState] = None):
        self.channel = channel or LoggingStatusChannel()
        self.clock = clock
        self.prefix = prefix
        self.trim_period_s = trim_period_s
        self.state = state or RateLimitState()
        self.severity = HARNESS_CONFIG['status']['severity_info']

    def send(self, text: str, severity: Optional[int] = None):
        level = self.severity if severity is None else severity
        self.channel.send_text(level, f"{self.prefix}: {text}")

    def send_trim(self, key: Optional[str], detail: Optional[str] = None) -> bool:
        """Rate-limited send. Returns True if the message went out."""
        if not key:
            return False

        now = self.clock()
        first_sent = self.state.send_times.get(key)
        if first_sent is not None and now - first_sent < self.trim_period_s:
            self.state.eaten_counts[key] = self.state.eaten_counts.get(key, 0) + 1
            return False

        text = f"{key} {detail}" if detail else key
        eaten = self.state.eaten_counts.pop(key, None)
        if eaten:
            text = f"{text} (+{eaten})"

        self.send(text)
        self.state.send_times[key] = now
        return True
