#!/usr/bin/env python3
"""
states/terminal.py - Absorbing end states of the test
"""

from states.base import HarnessState, StateResult


class DoneSuccessState(HarnessState):
    STATE_NAME = "DONE_SUCCESS"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.status.send("** Complete ** SUCCESS!!")

    def advance(self) -> StateResult:
        return StateResult.SAME


class DoneFailureState(HarnessState):
    """Best-effort return to a safe vehicle state, then absorb all ticks"""

    STATE_NAME = "DONE_FAILURE"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.services.velocity.none()
        self.services.vehicle.set_mode(self.config['modes']['manual'])
        self.services.vehicle.disarm()
        self.status.send("** Complete ** FAILURE!!")

    def advance(self) -> StateResult:
        return StateResult.SAME
