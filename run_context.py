#!/usr/bin/env python3
"""
run_context.py - Shared record for one range-hold test run
Written by the rangefinder bridge and the test states, read by the states

Mutation order within a tick is fixed by the orchestrator:
position refresh -> bridge -> state duration -> state advance
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Position:
    """Local vehicle position in meters. alt_m is negative below the surface."""
    north_m: float = 0.0
    east_m: float = 0.0
    alt_m: float = 0.0

    @property
    def depth_m(self) -> float:
        return -self.alt_m

    def get_distance(self, other: "Position") -> float:
        """Horizontal distance to another position"""
        return math.hypot(other.north_m - self.north_m, other.east_m - self.east_m)

    def copy(self) -> "Position":
        return replace(self)


@dataclass
class RunContext:
    # Timing
    dur_script_s: float = 0.0
    dur_state_s: float = 0.0

    # Latest vehicle position, None when the vehicle could not provide one
    pos_curr: Optional[Position] = None

    # Last delivered rangefinder reading
    sub_z_m: float = 0.0
    bottom_z_m: float = 0.0
    true_rngfnd_m: float = 0.0
    rngfnd_m: float = 0.0

    # Test configuration, filled in when the rangefinder initializes
    synsig_id: int = 0
    bottom_depth_m: float = 0.0
    match_tolerance_m: float = 0.0
    signal_period_m: float = 0.0

    def get_status(self) -> Dict[str, Any]:
        pos = self.pos_curr
        return {
            'dur_script_s': self.dur_script_s,
            'dur_state_s': self.dur_state_s,
            'north_m': pos.north_m if pos else None,
            'east_m': pos.east_m if pos else None,
            'alt_m': pos.alt_m if pos else None,
            'true_rngfnd_m': self.true_rngfnd_m,
            'rngfnd_m': self.rngfnd_m,
            'synsig_id': self.synsig_id,
            'bottom_depth_m': self.bottom_depth_m,
            'match_tolerance_m': self.match_tolerance_m,
            'signal_period_m': self.signal_period_m,
        }
