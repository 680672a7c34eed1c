#!/usr/bin/env python3
"""
harness_services.py - Collaborators shared by the orchestrator and the test states
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config.harness_config import HARNESS_CONFIG
from hardware.vehicle_interface import (DataLogger, SensorDiscovery,
                                        VehicleInterface, VelocityCommander)
from param_loader import ParameterStore
from status_messages import StatusReporter


@dataclass
class HarnessServices:
    vehicle: VehicleInterface
    discovery: SensorDiscovery
    params: ParameterStore
    data_logger: DataLogger
    status: StatusReporter
    velocity: Optional[VelocityCommander] = None
    rng: Any = None
    config: Dict[str, Any] = field(default_factory=lambda: HARNESS_CONFIG)

    # Set by the init-sensor state once the scripting backend is found
    bridge: Any = None

    def __post_init__(self):
        if self.velocity is None:
            self.velocity = VelocityCommander(self.vehicle, self.config['rc'])
