#!/usr/bin/env python3
"""
hardware/vehicle_interface.py - Collaborator interfaces used by the test harness
Every call returns an explicit status; none of them is expected to raise
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from config.harness_config import HARNESS_CONFIG
from run_context import Position

logger = logging.getLogger(__name__)


class RangefinderBackend(ABC):
    """A configured rangefinder driver slot"""

    @property
    @abstractmethod
    def backend_type(self) -> int:
        """Driver type code (RNGFNDx_TYPE)"""
        pass

    @abstractmethod
    def handle_script_msg(self, distance_m: float) -> bool:
        """Push one range sample into the driver"""
        pass


class SensorDiscovery(ABC):
    """Enumerates configured rangefinder backends by slot index"""

    @abstractmethod
    def num_sensors(self) -> int:
        pass

    @abstractmethod
    def get_backend(self, index: int) -> Optional[RangefinderBackend]:
        pass


class VehicleInterface(ABC):
    """Vehicle commands and state queries"""

    @abstractmethod
    def set_mode(self, mode: int) -> bool:
        pass

    @abstractmethod
    def get_mode(self) -> int:
        pass

    @abstractmethod
    def arm(self) -> bool:
        pass

    @abstractmethod
    def disarm(self) -> bool:
        pass

    @abstractmethod
    def is_armed(self) -> bool:
        pass

    @abstractmethod
    def get_position(self) -> Optional[Position]:
        """Current position estimate, or None if unavailable"""
        pass

    @abstractmethod
    def set_rc_override(self, channel: int, pwm: int) -> bool:
        pass


class StatusChannel(ABC):
    """Human readable text channel to the operator"""

    @abstractmethod
    def send_text(self, severity: int, text: str) -> None:
        pass


class DataLogger(ABC):
    """Structured per-tick log rows"""

    @abstractmethod
    def write(self, name: str, fields: Dict[str, float]) -> None:
        pass


class LoggingStatusChannel(StatusChannel):
    """Routes status text to the python logger"""

    # MAV_SEVERITY -> logging level
    LEVELS = {
        0: logging.CRITICAL, 1: logging.CRITICAL, 2: logging.CRITICAL,
        3: logging.ERROR, 4: logging.WARNING, 5: logging.INFO,
        6: logging.INFO, 7: logging.DEBUG,
    }

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logging.getLogger('status')

    def send_text(self, severity: int, text: str) -> None:
        self.log.log(self.LEVELS.get(severity, logging.INFO), text)


class VelocityCommander:
    """
    Commands vertical and forward motion with RC overrides.

    Joystick input from a ground station overrides these commands, so the
    ground station joystick must be disabled while a test runs.
    """

    def __init__(self, vehicle: VehicleInterface, rc_config: Optional[Dict[str, int]] = None):
        self.vehicle = vehicle
        self.rc = rc_config or HARNESS_CONFIG['rc']

    def _set(self, channel: int, pwm: int):
        if not self.vehicle.set_rc_override(channel, pwm):
            logger.warning("RC override rejected: channel %d pwm %d", channel, pwm)

    def up(self):
        self._set(self.rc['throttle_channel'], self.rc['pwm_up'])

    def down(self):
        self._set(self.rc['throttle_channel'], self.rc['pwm_down'])

    def forward(self):
        self._set(self.rc['forward_channel'], self.rc['pwm_forward'])

    def none(self):
        self._set(self.rc['throttle_channel'], self.rc['pwm_neutral'])
        self._set(self.rc['forward_channel'], self.rc['pwm_neutral'])
