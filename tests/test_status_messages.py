#!/usr/bin/env python3
"""
tests/test_status_messages.py - Status text prefixing and rate limiting
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hardware.vehicle_interface import LoggingStatusChannel, StatusChannel
from status_messages import RateLimitState, StatusReporter


class RecordingChannel(StatusChannel):
    def __init__(self):
        self.messages = []

    def send_text(self, severity, text):
        self.messages.append((severity, text))

    @property
    def texts(self):
        return [text for _, text in self.messages]


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_reporter():
    channel = RecordingChannel()
    clock = ManualClock()
    return StatusReporter(channel, clock=clock), channel, clock


def test_send_prefixes_test_name():
    reporter, channel, _ = make_reporter()
    reporter.send("Arm success.")
    assert channel.messages == [(6, "RNGHLD: Arm success.")]

    reporter.send("boom", severity=0)
    assert channel.messages[-1] == (0, "RNGHLD: boom")


def test_send_trim_suppresses_and_reports_count():
    reporter, channel, clock = make_reporter()

    assert reporter.send_trim("Pausing", "5s to go")
    clock.now = 0.5
    assert not reporter.send_trim("Pausing", "4.5s to go")
    clock.now = 0.98
    assert not reporter.send_trim("Pausing", "4.02s to go")
    clock.now = 1.0
    assert reporter.send_trim("Pausing", "4s to go")
    clock.now = 1.5
    assert not reporter.send_trim("Pausing", "3.5s to go")

    assert channel.texts == ["RNGHLD: Pausing 5s to go", "RNGHLD: Pausing 4s to go (+2)"]


def test_send_trim_without_suppressed_messages_has_no_count():
    reporter, channel, clock = make_reporter()
    reporter.send_trim("FB", "1")
    clock.now = 2.0
    reporter.send_trim("FB", "2")
    assert channel.texts == ["RNGHLD: FB 1", "RNGHLD: FB 2"]


def test_send_trim_keys_are_independent():
    reporter, channel, _ = make_reporter()
    assert reporter.send_trim("a", "x")
    assert reporter.send_trim("b", "y")
    assert not reporter.send_trim("a", "z")
    assert channel.texts == ["RNGHLD: a x", "RNGHLD: b y"]


def test_send_trim_ignores_empty_key():
    reporter, channel, _ = make_reporter()
    assert not reporter.send_trim("", "detail")
    assert not reporter.send_trim(None)
    assert channel.messages == []


def test_rate_limit_state_is_owned_per_reporter():
    first, first_channel, _ = make_reporter()
    second, second_channel, _ = make_reporter()
    first.send_trim("key", "1")
    assert second.send_trim("key", "1")

    shared = RateLimitState()
    a = StatusReporter(RecordingChannel(), clock=ManualClock(), state=shared)
    b = StatusReporter(RecordingChannel(), clock=ManualClock(), state=shared)
    a.send_trim("key")
    assert not b.send_trim("key")
    assert shared.eaten_counts == {"key": 1}


def test_logging_status_channel_maps_severity(caplog):
    channel = LoggingStatusChannel()
    with caplog.at_level(logging.DEBUG, logger='status'):
        channel.send_text(0, "RNGHLD: ** Complete ** FAILURE!!")
        channel.send_text(6, "RNGHLD: Arm success.")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels == [(logging.CRITICAL, "RNGHLD: ** Complete ** FAILURE!!"),
                      (logging.INFO, "RNGHLD: Arm success.")]
