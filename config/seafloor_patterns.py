#!/usr/bin/env python3
"""
config/seafloor_patterns.py - Synthetic seafloor catalogue
Selected at test start by the pattern id parameter (SCR_USER1)

Segment durations are in meters of horizontal travel. The amplitude scales
the [-1, 1] shape output into meters of seafloor height.
"""

from synthetic_signal import CHIRP_G, Segment, Shape
from sensor_models import CorruptionParameters

DEFAULT_PATTERN_ID = 1

SERIES_RAMP_M = 10.0
SERIES_SQUARE_M = 30.0
SERIES_SIN_M = 30.0
SERIES_COS_M = 15.0
SERIES_FLAT_M = 40.0
SERIES_CHIRP_M = 20.0

# Clean signal: no noise, no outliers, no latency
CLEAN = CorruptionParameters()

# Noisy signal: 0.25m noise, outliers twice a second, 100ms latency
NOISY = CorruptionParameters(
    noise_mean=0.0,
    noise_std_dev=0.25,
    outlier_rate_per_s=0.5,
    outlier_mean=8.0,
    outlier_std_dev=2.0,
    delay_s=0.1,
)


def ramp_segments():
    return [
        Segment(0.5 * SERIES_RAMP_M, Shape.MID),
        Segment(0.5 * SERIES_RAMP_M, Shape.SAW, 0.0, 0.25),
        Segment(1.0 * SERIES_RAMP_M, Shape.MAX),
        Segment(1.0 * SERIES_RAMP_M, Shape.SAW, 0.25, 0.75),
        Segment(1.0 * SERIES_RAMP_M, Shape.MIN),
        Segment(0.5 * SERIES_RAMP_M, Shape.SAW, 0.75, 1.0),
        Segment(0.5 * SERIES_RAMP_M, Shape.MID),
    ]


def square_segments():
    return [Segment(SERIES_SQUARE_M, Shape.SQUARE)]


def minus_sin_segments():
    return [Segment(SERIES_SIN_M, Shape.SIN, scale=-1.0)]


def cos_segments():
    # Flat top, then a sine entered at its crest
    return [
        Segment(SERIES_COS_M, Shape.MAX),
        Segment(SERIES_COS_M, Shape.SIN, 0.25),
    ]


def flat_segments():
    return [Segment(SERIES_FLAT_M, Shape.MID)]


def chirp_segments():
    # Each chirp is shorter than the last by the growth ratio
    segments = [Segment(SERIES_CHIRP_M, Shape.MID)]
    for power in range(7):
        segments.append(Segment(SERIES_CHIRP_M / (CHIRP_G ** power), Shape.CHIRP))
    return segments


# pattern id -> description, amplitude, segments factory, corruption
SEAFLOOR_PATTERNS = {
    1: {'name': 'ramp', 'amplitude_m': 4.0, 'segments': ramp_segments, 'corruption': CLEAN},
    2: {'name': 'ramp_noisy', 'amplitude_m': 4.0, 'segments': ramp_segments, 'corruption': NOISY},
    3: {'name': 'square', 'amplitude_m': 2.0, 'segments': square_segments, 'corruption': CLEAN},
    4: {'name': 'minus_sin', 'amplitude_m': 3.0, 'segments': minus_sin_segments, 'corruption': CLEAN},
    5: {'name': 'cos', 'amplitude_m': 3.0, 'segments': cos_segments, 'corruption': CLEAN},
    6: {'name': 'flat', 'amplitude_m': 0.0, 'segments': flat_segments, 'corruption': CLEAN},
    7: {'name': 'chirp', 'amplitude_m': 2.0, 'segments': chirp_segments, 'corruption': CLEAN},
}
