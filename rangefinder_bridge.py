#!/usr/bin/env python3
"""
rangefinder_bridge.py - Virtual rangefinder driver for the range-hold test

The vehicle must be configured with a scripting rangefinder backend
(RNGFND1_TYPE = 36). Every tick the bridge combines the vehicle altitude with
a synthetic seafloor, corrupts the resulting range, and pushes it into that
backend. The seafloor is radial around the test start point, so the direction
the vehicle travels does not matter.
"""

import logging
from typing import Optional

from config.harness_config import HARNESS_CONFIG
from config.seafloor_patterns import DEFAULT_PATTERN_ID, SEAFLOOR_PATTERNS
from hardware.vehicle_interface import DataLogger, RangefinderBackend, SensorDiscovery
from param_loader import RunSettings
from run_context import Position, RunContext
from sensor_models import SignalPipeline
from status_messages import StatusReporter
from synthetic_signal import WaveformComposer

logger = logging.getLogger(__name__)

LOG_NAME = 'RNFN'


class RangefinderBridge:
    def __init__(self, backend: RangefinderBackend, origin: Position,
                 waveform: WaveformComposer, pipeline: SignalPipeline,
                 data_logger: DataLogger, status: StatusReporter):
        self.backend = backend
        self.origin = origin
        self.waveform = waveform
        self.pipeline = pipeline
        self.data_logger = data_logger
        self.status = status

        self.samples_generated = 0
        self.samples_delivered = 0

    def update(self, ctx: RunContext) -> Optional[float]:
        """Generate one reading. Returns the corrupted range, or None if skipped."""
        if ctx.pos_curr is None:
            self.status.send_trim("rngfnd_func could not generate a reading.", "No position was available.")
            return None

        # Seafloor height at this distance from the start point
        dist_traveled_m = self.origin.get_distance(ctx.pos_curr)
        _, delta_m = self.waveform.evaluate(dist_traveled_m)
        bottom_z_m = delta_m - ctx.bottom_depth_m

        sub_z_m = ctx.pos_curr.alt_m
        rngfnd_true_m = sub_z_m - bottom_z_m

        rngfnd_m = self.pipeline(rngfnd_true_m)
        self.samples_generated += 1

        if rngfnd_m > 0:
            if self.backend.handle_script_msg(rngfnd_m):
                self.samples_delivered += 1
            else:
                self.status.send_trim("LUA Range Finder Driver error", "handle_script_msg() was not sent")

            ctx.sub_z_m = sub_z_m
            ctx.bottom_z_m = bottom_z_m
            ctx.true_rngfnd_m = rngfnd_true_m
            ctx.rngfnd_m = rngfnd_m

        self.data_logger.write(LOG_NAME, {
            'sub_z': sub_z_m,
            'bottom_z': bottom_z_m,
            'true_rngfnd': rngfnd_true_m,
            'rngfnd': rngfnd_m,
        })
        return rngfnd_m


def find_scripting_backend(discovery: SensorDiscovery,
                           sensor_number: int = HARNESS_CONFIG['rangefinder']['sensor_number'],
                           type_code: int = HARNESS_CONFIG['rangefinder']['scripting_type_code']
                           ) -> Optional[RangefinderBackend]:
    """Return the backend in slot sensor_number (1-based) if it is a scripting driver"""
    for index in range(discovery.num_sensors()):
        if index + 1 != sensor_number:
            continue
        backend = discovery.get_backend(index)
        if backend is not None and backend.backend_type == type_code:
            return backend
    return None


def select_pattern(pattern_id: int):
    pattern = SEAFLOOR_PATTERNS.get(pattern_id)
    if pattern is None:
        logger.warning("Unknown seafloor pattern %s, using pattern %d", pattern_id, DEFAULT_PATTERN_ID)
        pattern = SEAFLOOR_PATTERNS[DEFAULT_PATTERN_ID]
    return pattern


def build_bridge(ctx: RunContext, backend: RangefinderBackend, settings: RunSettings,
                 data_logger: DataLogger, status: StatusReporter, rng=None) -> RangefinderBridge:
    """
    Build the bridge for the selected seafloor pattern and record the test
    settings in the context. The current position becomes the seafloor origin.
    """
    pattern = select_pattern(settings.pattern_id)
    waveform = WaveformComposer(pattern['amplitude_m'], pattern['segments']())
    pipeline = SignalPipeline.from_parameters(pattern['corruption'], rng=rng)

    ctx.synsig_id = settings.pattern_id
    ctx.bottom_depth_m = settings.bottom_depth_m
    ctx.match_tolerance_m = settings.match_tolerance_m
    ctx.signal_period_m = waveform.total_period

    logger.info("Seafloor pattern %s (%s): period %.2fm, amplitude %.2fm",
                settings.pattern_id, pattern['name'], waveform.total_period, pattern['amplitude_m'])

    return RangefinderBridge(backend, ctx.pos_curr.copy(), waveform, pipeline, data_logger, status)
