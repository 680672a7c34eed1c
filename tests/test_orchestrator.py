#!/usr/bin/env python3
"""
tests/test_orchestrator.py - Tick-driven test plan: transitions, failures, position gaps
"""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hardware.vehicle_interface import StatusChannel
from orchestrator import RangeHoldTestOrchestrator
from param_loader import ParameterStore
from range_hold_main import SimulatedHarness
from state_registry import (PlanStep, StateId, StateRegistry,
                            build_transition_table, default_plan)
from states.arm import DisarmState
from states.base import StateResult

TICK_S = 0.02


class RecordingChannel(StatusChannel):
    def __init__(self):
        self.texts = []

    def send_text(self, severity, text):
        self.texts.append(text)

    def count(self, fragment):
        return sum(fragment in text for text in self.texts)


def make_harness(**params):
    channel = RecordingChannel()
    harness = SimulatedHarness(ParameterStore(params), seed=1, status_channel=channel)
    return harness, channel


def tick(harness, n=1, move=True):
    for _ in range(n):
        harness.orchestrator.update()
        if move:
            harness.vehicle.step(TICK_S)
        harness.clock.advance(TICK_S)


def tick_until_finished(harness, max_ticks=20000, move=True):
    for _ in range(max_ticks):
        if harness.orchestrator.finished:
            return
        tick(harness, move=move)
    raise AssertionError("test plan did not finish")


def test_transition_table():
    plan = default_plan()
    table = build_transition_table(plan)
    ids = [step.state_id for step in plan]

    for current, following in zip(ids, ids[1:]):
        assert table[current].on_next == following
        assert table[current].on_fail == StateId.DONE_FAILURE
    assert table[ids[-1]].on_next == StateId.DONE_SUCCESS
    assert StateId.DONE_SUCCESS not in table
    assert StateId.DONE_FAILURE not in table


def test_invalid_plan_is_rejected():
    harness, _ = make_harness()
    disarm = PlanStep(StateId.DISARM, DisarmState, requires_position=False)

    registry = StateRegistry([disarm, disarm])
    assert registry.validate()['duplicates'] == [StateId.DISARM]
    with pytest.raises(ValueError):
        RangeHoldTestOrchestrator(harness.services, clock=harness.clock, registry=registry)

    terminal = PlanStep(StateId.DONE_SUCCESS, DisarmState, requires_position=False)
    assert not StateRegistry([terminal]).validate()['valid']


def test_update_returns_itself_and_period():
    harness, _ = make_harness()
    callback, delay_ms = harness.orchestrator.update()
    assert callback == harness.orchestrator.update
    assert delay_ms == 20


def test_first_ticks_initialize_and_arm():
    harness, channel = make_harness()
    orch = harness.orchestrator

    tick(harness)
    assert orch.history == [StateId.INIT_SENSOR]
    assert orch.current_state_id == StateId.ARM
    assert harness.services.bridge is not None
    assert "RNGHLD: Range Finder Initialized." in channel.texts
    assert channel.count("Starting test. synsig_id:1, bottom_depth:22.00m, tolerance:2.00m") == 1

    tick(harness)
    assert orch.history == [StateId.INIT_SENSOR, StateId.ARM]
    assert orch.current_state_id == StateId.DESCEND_TO_TEST_DEPTH
    assert harness.vehicle.is_armed()
    assert not orch.finished


def test_bridge_runs_every_tick_after_init():
    harness, _ = make_harness()
    tick(harness, 10)
    bridge = harness.services.bridge
    assert bridge.samples_generated == 9
    assert len(harness.backend.samples) == 9


def test_init_times_out_without_scripting_backend():
    harness, channel = make_harness()
    harness.discovery.backends = []
    orch = harness.orchestrator

    tick(harness, 500)
    assert orch.current_state_id == StateId.INIT_SENSOR

    tick_until_finished(harness)
    assert orch.history == [StateId.INIT_SENSOR, StateId.DONE_FAILURE]
    assert orch.ctx.dur_script_s == pytest.approx(10.02, abs=0.03)
    assert channel.count("No LUA range finder driver configured.") >= 9
    assert channel.count("** Complete ** FAILURE!!") == 1
    assert harness.services.bridge is None


def test_arm_failure_enters_failure_on_same_tick():
    harness, channel = make_harness()
    harness.vehicle.arming_allowed = False
    orch = harness.orchestrator

    tick(harness, 2)
    assert orch.finished
    assert not orch.succeeded
    assert orch.history == [StateId.INIT_SENSOR, StateId.ARM, StateId.DONE_FAILURE]
    assert channel.texts[-2:] == ["RNGHLD: Arm failure.", "RNGHLD: ** Complete ** FAILURE!!"]


def test_failure_is_absorbing():
    harness, channel = make_harness()
    orch = harness.orchestrator

    # The vehicle never moves, so the descent times out
    tick_until_finished(harness, move=False)
    assert orch.history[-2:] == [StateId.DESCEND_TO_TEST_DEPTH, StateId.DONE_FAILURE]
    assert orch.ctx.dur_script_s == pytest.approx(42.06, abs=0.03)
    assert not harness.vehicle.is_armed()
    assert harness.vehicle.get_mode() == 19
    assert all(pwm == 1500 for pwm in harness.vehicle.overrides.values())

    history = list(orch.history)
    for _ in range(100):
        tick(harness)
        assert orch.step() == StateResult.SAME
    assert orch.current_state_id == StateId.DONE_FAILURE
    assert orch.history == history
    assert channel.count("** Complete ** FAILURE!!") == 1


def test_range_hold_mode_not_accepted():
    harness, channel = make_harness()
    harness.vehicle.accepted_modes = {19}

    tick_until_finished(harness)
    assert harness.orchestrator.history[-2:] == [StateId.ENGAGE_RANGE_HOLD, StateId.DONE_FAILURE]
    assert "RNGHLD: RangeHold mode was not enabled" in channel.texts


def test_square_seafloor_exceeds_tolerance():
    harness, channel = make_harness(SCR_USER1=3)

    tick_until_finished(harness)
    assert harness.orchestrator.history[-2:] == [StateId.FOLLOW_BOTTOM_1, StateId.DONE_FAILURE]
    assert channel.count("RangeHold mode failure") == 1
    # The 4m step is 15m into the square pattern
    assert 14.9 < harness.vehicle.north_m < 15.1


def test_position_gap_holds_state():
    harness, channel = make_harness()
    orch = harness.orchestrator
    tick(harness, 2)
    assert orch.current_state_id == StateId.DESCEND_TO_TEST_DEPTH

    harness.vehicle.position_available = False
    tick(harness, 10)
    assert orch.current_state_id == StateId.DESCEND_TO_TEST_DEPTH
    assert orch.history == [StateId.INIT_SENSOR, StateId.ARM]
    assert channel.count("Test step waiting. No position was available.") == 1
    assert channel.count("rngfnd_func could not generate a reading.") == 1

    harness.vehicle.position_available = True
    tick(harness)
    assert orch.history[-1] == StateId.DESCEND_TO_TEST_DEPTH
    assert orch.state.timeout_s == pytest.approx(42.0)


def test_init_waits_for_position():
    harness, channel = make_harness()
    harness.vehicle.position_available = False
    orch = harness.orchestrator

    tick(harness, 5)
    assert orch.current_state_id == StateId.INIT_SENSOR
    assert harness.services.bridge is None
    assert channel.count("Could not get a position from the AHRS.") == 1

    harness.vehicle.position_available = True
    tick(harness)
    assert orch.current_state_id == StateId.ARM


def test_empty_plan_succeeds_immediately():
    harness, channel = make_harness()
    orch = RangeHoldTestOrchestrator(harness.services, clock=harness.clock, registry=StateRegistry([]))
    assert not orch.finished

    orch.update()
    assert orch.succeeded
    assert orch.history == [StateId.DONE_SUCCESS]
    assert channel.texts == ["RNGHLD: ** Complete ** SUCCESS!!"]


def tick_until_entered(harness, state_id, max_ticks=20000):
    for _ in range(max_ticks):
        if harness.orchestrator.history and harness.orchestrator.history[-1] == state_id:
            return
        tick(harness)
    raise AssertionError(f"{state_id.value} was never entered")


def test_position_gap_holds_pause():
    harness, channel = make_harness()
    orch = harness.orchestrator
    tick_until_entered(harness, StateId.PAUSE_AT_TEST_DEPTH)

    harness.vehicle.position_available = False
    # Longer than the 5s pause
    tick(harness, 300)
    assert orch.current_state_id == StateId.PAUSE_AT_TEST_DEPTH
    assert orch.history[-1] == StateId.PAUSE_AT_TEST_DEPTH
    assert channel.count("Test step waiting.") >= 1

    harness.vehicle.position_available = True
    tick(harness)
    assert orch.current_state_id == StateId.ENGAGE_RANGE_HOLD


def test_position_gap_holds_arm():
    harness, _ = make_harness()
    orch = harness.orchestrator
    tick(harness)
    assert orch.current_state_id == StateId.ARM

    harness.vehicle.position_available = False
    tick(harness, 5)
    assert orch.history == [StateId.INIT_SENSOR]
    assert not harness.vehicle.is_armed()

    harness.vehicle.position_available = True
    tick(harness)
    assert harness.vehicle.is_armed()


def test_only_sensor_init_runs_without_position():
    plan = default_plan()
    assert [step.state_id for step in plan if not step.requires_position] == [StateId.INIT_SENSOR]


def test_transition_logs_run_status(caplog):
    harness, _ = make_harness()
    with caplog.at_level(logging.DEBUG, logger="orchestrator"):
        tick(harness)
    assert "INIT_SENSOR -> ARM" in caplog.text
    assert "Run status: {'dur_script_s': 0.0" in caplog.text
