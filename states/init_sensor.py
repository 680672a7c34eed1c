#!/usr/bin/env python3
"""
states/init_sensor.py - Locate the scripting rangefinder backend and start the bridge
Retries every tick until the backend and a start position are available
"""

import logging

from param_loader import load_run_settings
from rangefinder_bridge import build_bridge, find_scripting_backend
from states.base import HarnessState, StateResult

logger = logging.getLogger(__name__)


class InitSensorState(HarnessState):
    STATE_NAME = "INIT_SENSOR"

    def __init__(self, ctx, services):
        super().__init__(ctx, services)
        self.timeout_s = self.config['init_timeout_s']

    def _try_init(self) -> bool:
        rf_config = self.config['rangefinder']
        backend = find_scripting_backend(self.services.discovery,
                                         rf_config['sensor_number'],
                                         rf_config['scripting_type_code'])
        if backend is None:
            self.status.send_trim("No LUA range finder driver configured.",
                                  f"For example: set param RNGFND{rf_config['sensor_number']}_TYPE "
                                  f"to {rf_config['scripting_type_code']}")
            return False

        if self.ctx.pos_curr is None:
            self.status.send_trim("Could not get a position from the AHRS.", "Will keep trying")
            return False

        settings = load_run_settings(self.services.params)
        self.services.bridge = build_bridge(self.ctx, backend, settings,
                                            self.services.data_logger, self.status,
                                            rng=self.services.rng)
        self.status.send("Range Finder Initialized.")
        return True

    def advance(self) -> StateResult:
        if self.services.bridge is not None or self._try_init():
            ctx = self.ctx
            self.status.send(f"Starting test. synsig_id:{ctx.synsig_id:.0f}, "
                             f"bottom_depth:{ctx.bottom_depth_m:.2f}m, "
                             f"tolerance:{ctx.match_tolerance_m:.2f}m, "
                             f"bottom pattern length:{ctx.signal_period_m:.2f}m")
            return StateResult.NEXT

        if self.ctx.dur_state_s > self.timeout_s:
            self.status.send(f"Range finder initialization timed out after {self.timeout_s:.0f}s")
            return StateResult.FAIL

        return StateResult.SAME
