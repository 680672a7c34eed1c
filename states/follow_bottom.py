#!/usr/bin/env python3
"""
states/follow_bottom.py - Drive forward in range hold and check the vehicle follows the seafloor

Passes when the target distance is covered while the true range stayed within
the match tolerance of the range at the start of the state.
"""

from states.base import HarnessState, StateResult


class FollowBottomState(HarnessState):
    STATE_NAME = "FOLLOW_BOTTOM"

    def __init__(self, ctx, services, target_distance_m: float):
        super().__init__(ctx, services)
        self.target_distance_m = target_distance_m
        self.timeout_s = (self.config['timeout_factor'] * target_distance_m
                          / self.config['approx_speed_forward_mps'])
        self.tolerance_m = ctx.match_tolerance_m

        self.pos_start = ctx.pos_curr
        self.rngfnd_start_m = ctx.true_rngfnd_m
        self.range_delta_max = 0.0

    @classmethod
    def one_pattern_length(cls, ctx, services) -> "FollowBottomState":
        """Traverse one full period of the seafloor pattern"""
        return cls(ctx, services, ctx.signal_period_m)

    def advance(self) -> StateResult:
        self.services.velocity.forward()

        distance_traveled_m = self.pos_start.get_distance(self.ctx.pos_curr)
        delta = self.target_distance_m - distance_traveled_m

        range_error = self.ctx.true_rngfnd_m - self.rngfnd_start_m
        range_delta = abs(range_error)
        self.range_delta_max = max(self.range_delta_max, range_delta)

        if delta <= 0.0:
            self.status.send(f"Follow bottom complete. Distance traveled = {distance_traveled_m:.2f}m, "
                             f"Max range delta = {self.range_delta_max:.2f}")
            return StateResult.NEXT

        if self.ctx.dur_state_s > self.timeout_s:
            self.status.send(f"Follow bottom timeout. Did not achieve distance {self.target_distance_m:.2f}m.")
            return StateResult.FAIL

        if range_delta > self.tolerance_m:
            self.status.send(f"RangeHold mode failure. Did not follow the bottom by {range_error:.2f}m.")
            return StateResult.FAIL

        self.status.send_trim(f"FB {self.target_distance_m:.2f}m,",
                              f"{delta:.2f}m, {self.ctx.dur_state_s:.2f}s, {range_delta:.2f}")
        return StateResult.SAME

    def clean_up(self) -> None:
        self.services.velocity.none()
