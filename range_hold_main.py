#!/usr/bin/env python3
"""
range_hold_main.py - Simulation host for the range-hold test harness

Owns the timer: calls the orchestrator tick callback, waits the returned
delay, and steps the simulated vehicle in between. Simulated time is used by
default so a full test runs in a few seconds; --realtime paces the loop to
the wall clock.

Usage:
    python range_hold_main.py --pattern 1 --bottom-depth 22 --tolerance 2.0
    python range_hold_main.py --params range_hold.parm --verbose
"""

import argparse
import logging
import random
import sys
import time
from pathlib import Path
from typing import Optional

from config.harness_config import HARNESS_CONFIG
from hardware.vehicle_interface import DataLogger
from hardware.simulated_vehicle import (SimulatedRangefinderBackend,
                                        SimulatedSensorDiscovery,
                                        SimulatedVehicle)
from harness_services import HarnessServices
from orchestrator import RangeHoldTestOrchestrator
from param_loader import ParameterStore, load_parameter_file
from range_log import CsvRangeLog, default_log_path
from status_messages import StatusReporter

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent
DEFAULT_MAX_TIME_S = 600.0


class SimClock:
    """Simulated time in seconds, advanced by the host loop"""

    def __init__(self, start_s: float = 0.0):
        self.now_s = start_s

    def advance(self, dt: float):
        self.now_s += dt

    def __call__(self) -> float:
        return self.now_s


class NullRangeLog(DataLogger):
    def write(self, name, fields):
        pass

    def close(self):
        pass


class SimulatedHarness:
    """Wires a simulated vehicle and rangefinder to the orchestrator"""

    def __init__(self, params: Optional[ParameterStore] = None, data_logger=None,
                 seed: Optional[int] = None, status_channel=None, clock: Optional[SimClock] = None):
        self.clock = clock or SimClock()
        self.backend = SimulatedRangefinderBackend()
        self.discovery = SimulatedSensorDiscovery([self.backend])
        self.vehicle = SimulatedVehicle(rangefinder=self.backend)
        self.data_logger = data_logger or NullRangeLog()

        self.services = HarnessServices(
            vehicle=self.vehicle,
            discovery=self.discovery,
            params=params if params is not None else ParameterStore(),
            data_logger=self.data_logger,
            status=StatusReporter(status_channel, clock=self.clock),
            rng=random.Random(seed),
        )
        self.orchestrator = RangeHoldTestOrchestrator(self.services, clock=self.clock)

    def run(self, max_time_s: float = DEFAULT_MAX_TIME_S, realtime: bool = False) -> bool:
        """Tick until the test reaches a terminal state. Returns True on success."""
        callback = self.orchestrator.update
        while not self.orchestrator.finished and self.clock() < max_time_s:
            loop_start = time.time()

            callback, delay_ms = callback()
            dt = delay_ms / 1000.0
            self.vehicle.step(dt)
            self.clock.advance(dt)

            if realtime:
                elapsed = time.time() - loop_start
                if elapsed < dt:
                    time.sleep(dt - elapsed)

        if not self.orchestrator.finished:
            logger.error("Test did not finish within %.0fs (state %s)",
                         max_time_s, self.orchestrator.current_state_id.value)
        return self.orchestrator.succeeded


def build_parameters(args) -> ParameterStore:
    params = load_parameter_file(args.params) if args.params else ParameterStore()
    names = HARNESS_CONFIG['parameters']
    if args.pattern is not None:
        params.set(names['pattern_id']['name'], args.pattern)
    if args.bottom_depth is not None:
        params.set(names['bottom_depth_m']['name'], args.bottom_depth)
    if args.tolerance is not None:
        params.set(names['match_tolerance_m']['name'], args.tolerance)
    return params


def _setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')
    if verbose:
        handler = logging.FileHandler('range_hold_test.log', mode='a', encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(message)s'))
        logging.getLogger().addHandler(handler)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Range-hold hardware-in-the-loop test (simulation host)')
    parser.add_argument('--pattern', type=int, help='Seafloor pattern id (SCR_USER1)')
    parser.add_argument('--bottom-depth', type=float, help='Mean seafloor depth in meters (SCR_USER2)')
    parser.add_argument('--tolerance', type=float, help='Pass/fail range tolerance in meters (SCR_USER3)')
    parser.add_argument('--params', type=str, help='Vehicle parameter file')
    parser.add_argument('--log-dir', type=str, default=str(PROJECT_ROOT / 'logs'), help='Directory for CSV range logs')
    parser.add_argument('--no-log', action='store_true', help='Do not write a CSV range log')
    parser.add_argument('--max-time', type=float, default=DEFAULT_MAX_TIME_S, help='Give up after this many seconds')
    parser.add_argument('--realtime', action='store_true', help='Pace ticks to the wall clock')
    parser.add_argument('--seed', type=int, help='Random seed for the corruption models')
    parser.add_argument('--verbose', action='store_true', help='Verbose output')
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if args.params and not Path(args.params).exists():
        print(f"ERROR: parameter file not found: {args.params}")
        return 1

    print("=" * 70)
    print("RANGE-HOLD TEST - SIMULATION HOST")
    print("=" * 70)

    clock = SimClock()
    data_logger = None if args.no_log else CsvRangeLog(default_log_path(args.log_dir), clock=clock)

    try:
        harness = SimulatedHarness(build_parameters(args), data_logger=data_logger,
                                   seed=args.seed, clock=clock)
        success = harness.run(max_time_s=args.max_time, realtime=args.realtime)
    except KeyboardInterrupt:
        print("\n\nKeyboard interrupt received")
        return 1
    except (ValueError, OSError) as e:
        logger.error("Range-hold test aborted: %s", e)
        print(f"ERROR: {e}")
        return 1
    finally:
        if data_logger:
            data_logger.close()
        if data_logger and data_logger.rows_written:
            print(f"✓ Range log written to {data_logger.csv_file}")

    orch = harness.orchestrator
    print("=" * 70)
    print(f"TEST {'PASSED' if success else 'FAILED'} after {clock():.1f}s simulated, {orch.tick_count} ticks")
    print("States: " + " -> ".join(s.value for s in orch.history))
    print("=" * 70)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
