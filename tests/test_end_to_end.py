#!/usr/bin/env python3
"""
tests/test_end_to_end.py - Full simulated range-hold test runs
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hardware.vehicle_interface import StatusChannel
from param_loader import ParameterStore
from range_hold_main import SimClock, SimulatedHarness, main
from range_log import CsvRangeLog
from state_registry import TERMINAL_STATES, StateId, default_plan


class RecordingChannel(StatusChannel):
    def __init__(self):
        self.texts = []

    def send_text(self, severity, text):
        self.texts.append(text)


def test_full_run_over_ramp_succeeds(tmp_path):
    clock = SimClock()
    channel = RecordingChannel()
    log_file = tmp_path / "range_log.csv"

    with CsvRangeLog(log_file, clock=clock) as data_logger:
        harness = SimulatedHarness(ParameterStore({'SCR_USER1': 1}), data_logger=data_logger,
                                   seed=5, status_channel=channel, clock=clock)
        assert harness.run(max_time_s=400.0)

    orch = harness.orchestrator
    expected = [step.state_id for step in default_plan()] + [StateId.DONE_SUCCESS]
    assert orch.history == expected
    assert orch.succeeded
    assert 150.0 < clock() < 180.0

    assert channel.texts.count("RNGHLD: ** Complete ** SUCCESS!!") == 1
    assert sum("Follow bottom complete" in text for text in channel.texts) == 2
    assert not harness.vehicle.is_armed()
    assert harness.vehicle.get_mode() == 19

    # Two traverses of the 50m pattern
    assert harness.vehicle.north_m == pytest.approx(100.0, abs=0.2)
    assert data_logger.rows_written == harness.services.bridge.samples_generated


def test_full_run_over_noisy_ramp_succeeds():
    channel = RecordingChannel()
    harness = SimulatedHarness(ParameterStore({'SCR_USER1': 2}), seed=11,
                               status_channel=channel, clock=SimClock())
    assert harness.run(max_time_s=400.0)

    orch = harness.orchestrator
    assert orch.history[-1] == StateId.DONE_SUCCESS
    assert channel.texts.count("RNGHLD: ** Complete ** SUCCESS!!") == 1
    assert not any("RangeHold mode failure" in text for text in channel.texts)

    pipeline = harness.services.bridge.pipeline
    assert pipeline.delay.capacity == 5
    assert pipeline.outlier.events > 0
    assert harness.vehicle.north_m == pytest.approx(100.0, abs=0.2)


def test_states_advance_one_step_per_tick():
    harness = SimulatedHarness(ParameterStore(), seed=2, status_channel=RecordingChannel())
    orch = harness.orchestrator
    order = [step.state_id for step in default_plan()]

    previous = orch.current_state_id
    while not orch.finished:
        callback, delay_ms = orch.update()
        harness.vehicle.step(delay_ms / 1000.0)
        harness.clock.advance(delay_ms / 1000.0)

        current = orch.current_state_id
        if current != previous and current not in TERMINAL_STATES:
            assert order.index(current) == order.index(previous) + 1
        previous = current
        assert harness.clock() < 400.0

    assert orch.succeeded


def test_range_log_analysis_of_clean_run(tmp_path):
    from logs.analyze_range_log import load_range_log, summarize

    clock = SimClock()
    log_file = tmp_path / "range_log.csv"
    with CsvRangeLog(log_file, clock=clock) as data_logger:
        SimulatedHarness(data_logger=data_logger, seed=1, status_channel=RecordingChannel(),
                         clock=clock).run(max_time_s=400.0)

    stats = summarize(load_range_log(log_file))
    assert stats['samples'] > 5000
    assert stats['delay_ticks'] == 0
    assert stats['outlier_count'] == 0
    assert stats['rms_error_m'] == pytest.approx(0.0)


def test_main_runs_simulation(tmp_path):
    assert main(['--pattern', '1', '--seed', '4', '--log-dir', str(tmp_path), '--max-time', '400']) == 0
    assert len(list(tmp_path.glob("range_log_*.csv"))) == 1


def test_main_reports_failure(tmp_path):
    assert main(['--pattern', '3', '--no-log']) == 1


def test_main_missing_parameter_file(tmp_path):
    assert main(['--params', str(tmp_path / "missing.parm"), '--no-log']) == 1


def test_main_timeout_is_failure():
    assert main(['--no-log', '--max-time', '5']) == 1
