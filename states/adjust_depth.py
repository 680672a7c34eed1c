#!/usr/bin/env python3
"""
states/adjust_depth.py - Drive the vehicle up or down to a target depth

The timeout allows 50% more than the time needed at the approximate
vertical speed of the override command.
"""

from states.base import HarnessState, StateResult


class AdjustDepthState(HarnessState):
    STATE_NAME = "ADJUST_DEPTH"

    def __init__(self, ctx, services, target_depth_m: float):
        super().__init__(ctx, services)
        self.target_depth_m = target_depth_m
        self.tolerance_m = self.config['depth_match_tolerance_m']

        start_depth_m = ctx.pos_curr.depth_m
        self.timeout_s = (self.config['timeout_factor'] * abs(target_depth_m - start_depth_m)
                          / self.config['approx_speed_updown_mps'])

    @classmethod
    def for_test_range(cls, ctx, services, test_range_m: float) -> "AdjustDepthState":
        """Target a depth test_range_m above the mean seafloor"""
        return cls(ctx, services, ctx.bottom_depth_m - test_range_m)

    def advance(self) -> StateResult:
        # Positive delta: vehicle is above the target
        delta = self.target_depth_m - self.ctx.pos_curr.depth_m
        if delta < 0:
            self.services.velocity.up()
        else:
            self.services.velocity.down()

        if abs(delta) < self.tolerance_m:
            self.status.send(f"Goto Depth Done = {self.target_depth_m:.2f}m")
            return StateResult.NEXT

        if self.ctx.dur_state_s > self.timeout_s:
            self.status.send(f"Goto Depth timeout. Did not achieve {self.target_depth_m:.2f}m. "
                             "Is the ground station joystick disabled?")
            return StateResult.FAIL

        self.status.send_trim(f"Goto Depth {self.target_depth_m:.2f}m,",
                              f"{delta:.2f}m, {self.ctx.dur_state_s:.2f}s")
        return StateResult.SAME

    def clean_up(self) -> None:
        self.services.velocity.none()


def descend_to_test_depth(ctx, services) -> AdjustDepthState:
    return AdjustDepthState.for_test_range(ctx, services, services.config['test_range_1_m'])


def change_depth(ctx, services) -> AdjustDepthState:
    return AdjustDepthState.for_test_range(ctx, services, services.config['test_range_2_m'])
