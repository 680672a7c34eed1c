#!/usr/bin/env python3
"""
states/arm.py - Arm the vehicle
"""

from states.base import HarnessState, StateResult


class ArmState(HarnessState):
    STATE_NAME = "ARM"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.services.vehicle.arm()

    def advance(self) -> StateResult:
        if self.services.vehicle.is_armed():
            self.status.send("Arm success.")
            return StateResult.NEXT

        self.status.send("Arm failure.")
        return StateResult.FAIL


class DisarmState(HarnessState):
    STATE_NAME = "DISARM"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.services.vehicle.disarm()

    def advance(self) -> StateResult:
        return StateResult.NEXT
