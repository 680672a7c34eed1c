#!/usr/bin/env python3
"""
states/pause.py - Wait for a fixed time before moving on
"""

from typing import Optional

from states.base import HarnessState, StateResult


class PauseState(HarnessState):
    STATE_NAME = "PAUSE"

    def __init__(self, ctx, services, duration_s: Optional[float] = None):
        super().__init__(ctx, services)
        self.duration_s = self.config['pause_s'] if duration_s is None else duration_s

    def advance(self) -> StateResult:
        self.status.send_trim(f"Pausing for {self.duration_s:.2f}s,",
                              f"{self.duration_s - self.ctx.dur_state_s:.2f}s to go")
        if self.ctx.dur_state_s < self.duration_s:
            return StateResult.SAME
        return StateResult.NEXT
