#!/usr/bin/env python3
"""
states/mode_change.py - Switch the vehicle flight mode
"""

from states.base import HarnessState, StateResult


class RangeHoldModeState(HarnessState):
    """Engage range hold and confirm the vehicle reports it on the next tick"""

    STATE_NAME = "ENGAGE_RANGE_HOLD"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.mode = self.config['modes']['range_hold']
        self.services.vehicle.set_mode(self.mode)

    def advance(self) -> StateResult:
        if self.services.vehicle.get_mode() == self.mode:
            self.status.send("RANGEHOLD mode enabled")
            return StateResult.NEXT

        self.status.send("RangeHold mode was not enabled")
        return StateResult.FAIL


class ManualModeState(HarnessState):
    STATE_NAME = "RETURN_TO_MANUAL"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.services.vehicle.set_mode(self.config['modes']['manual'])

    def advance(self) -> StateResult:
        return StateResult.NEXT
