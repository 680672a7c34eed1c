#!/usr/bin/env python3
"""
hardware/simulated_vehicle.py - Kinematic vehicle and scripting rangefinder for running the harness without hardware

The vehicle moves at a speed proportional to the RC override PWM offset.
In range-hold mode, with the throttle stick centred, it steers its altitude
at a bounded climb rate to keep the median of the latest rangefinder
readings at the range captured when the stick was released. This is a
stand-in for the autopilot, not a model of it.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from config.harness_config import HARNESS_CONFIG
from hardware.vehicle_interface import RangefinderBackend, SensorDiscovery, VehicleInterface
from run_context import Position

logger = logging.getLogger(__name__)


class SimulatedRangefinderBackend(RangefinderBackend):
    def __init__(self, type_code: int = HARNESS_CONFIG['rangefinder']['scripting_type_code'],
                 accept_samples: bool = True):
        self._type_code = type_code
        self.accept_samples = accept_samples
        self.last_distance_m: Optional[float] = None
        self.samples: List[float] = []

    @property
    def backend_type(self) -> int:
        return self._type_code

    def handle_script_msg(self, distance_m: float) -> bool:
        if not self.accept_samples:
            return False
        self.last_distance_m = distance_m
        self.samples.append(distance_m)
        return True


class SimulatedSensorDiscovery(SensorDiscovery):
    def __init__(self, backends: Optional[List[Optional[RangefinderBackend]]] = None):
        self.backends = list(backends or [])

    def num_sensors(self) -> int:
        return len(self.backends)

    def get_backend(self, index: int) -> Optional[RangefinderBackend]:
        if 0 <= index < len(self.backends):
            return self.backends[index]
        return None


class SimulatedVehicle(VehicleInterface):
    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 rangefinder: Optional[SimulatedRangefinderBackend] = None,
                 start: Position = Position()):
        self.config = config or HARNESS_CONFIG
        self.rc = self.config['rc']
        self.rangefinder = rangefinder

        self.north_m = start.north_m
        self.east_m = start.east_m
        self.alt_m = start.alt_m

        self.mode = self.config['modes']['manual']
        self.armed = False
        self.overrides: Dict[int, int] = {}

        # Fault injection knobs for tests
        self.arming_allowed = True
        self.accepted_modes = set(self.config['modes'].values())
        self.position_available = True

        # Range hold behaviour
        self.hold = self.config['simulated_vehicle']
        self.range_hold_target_m: Optional[float] = None

    # ------------------------------------------------------------------
    # VehicleInterface
    # ------------------------------------------------------------------
    def set_mode(self, mode: int) -> bool:
        if mode not in self.accepted_modes:
            logger.warning("Simulated vehicle rejected mode %s", mode)
            return False
        self.mode = mode
        self.range_hold_target_m = None
        return True

    def get_mode(self) -> int:
        return self.mode

    def arm(self) -> bool:
        if self.arming_allowed:
            self.armed = True
        return self.armed

    def disarm(self) -> bool:
        self.armed = False
        self.overrides.clear()
        return True

    def is_armed(self) -> bool:
        return self.armed

    def get_position(self) -> Optional[Position]:
        if not self.position_available:
            return None
        return Position(self.north_m, self.east_m, self.alt_m)

    def set_rc_override(self, channel: int, pwm: int) -> bool:
        self.overrides[channel] = int(pwm)
        return True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def _stick(self, channel: int) -> float:
        """Normalized stick deflection in [-1, 1]"""
        pwm = self.overrides.get(channel, self.rc['pwm_neutral'])
        deflection = (pwm - self.rc['pwm_neutral']) / self.rc['pwm_half_range']
        return max(-1.0, min(1.0, deflection))

    def step(self, dt: float):
        if not self.armed:
            return

        climb = self._stick(self.rc['throttle_channel'])
        forward = self._stick(self.rc['forward_channel'])

        self.north_m += forward * self.config['approx_speed_forward_mps'] * dt

        if climb != 0.0:
            self.alt_m += climb * self.config['approx_speed_updown_mps'] * dt
            self.range_hold_target_m = None
        elif self.mode == self.config['modes']['range_hold']:
            self._hold_range(dt)

        self.alt_m = min(self.alt_m, 0.0)

    def filtered_range(self) -> Optional[float]:
        """Median of the latest rangefinder samples, None before the first one"""
        if self.rangefinder is None or not self.rangefinder.samples:
            return None
        window = self.hold['range_filter_window']
        return float(np.median(self.rangefinder.samples[-window:]))

    def _hold_range(self, dt: float):
        reading = self.filtered_range()
        if reading is None:
            return

        if self.range_hold_target_m is None:
            self.range_hold_target_m = reading
            return

        # Too close to the bottom -> climb
        max_rate = self.hold['range_hold_max_rate_mps']
        rate = self.hold['range_hold_gain_per_s'] * (self.range_hold_target_m - reading)
        self.alt_m += max(-max_rate, min(max_rate, rate)) * dt
