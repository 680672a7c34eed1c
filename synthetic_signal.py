#!/usr/bin/env python3
"""
synthetic_signal.py - Base shapes and the segment-based waveform composer
Generates the synthetic seafloor used by the range-hold test

Every shape maps a normalized phase in [0, 1) to a value in [-1, 1].
A waveform is an ordered list of segments, each playing a sub-range of
one shape's phase over a given duration. The independent variable does not
have to be time: the rangefinder bridge feeds distance traveled in meters.

Example - the ramp used by seafloor pattern 1:

    ramp = [
        Segment(5.0, Shape.MID),
        Segment(5.0, Shape.SAW, 0.0, 0.25),
        Segment(10.0, Shape.MAX),
        Segment(10.0, Shape.SAW, 0.25, 0.75),
        Segment(10.0, Shape.MIN),
        Segment(5.0, Shape.SAW, 0.75, 1.0),
        Segment(5.0, Shape.MID),
    ]
    composer = WaveformComposer(4.0, ramp)
    t_cycle, value = composer.evaluate(distance_m)
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Union

ShapeFunc = Callable[[float], float]

CHIRP_G = 1.5       # frequency growth across one chirp segment
PHASE_EPSILON = 1.0e-6


class Shape(Enum):
    MID = "mid"
    MAX = "max"
    MIN = "min"
    SIN = "sin"
    SQUARE = "square"
    SAW = "saw"
    CHIRP = "chirp"


def zero_shape(phase: float) -> float:
    return 0.0


def max_shape(phase: float) -> float:
    return 1.0


def min_shape(phase: float) -> float:
    return -1.0


def sin_shape(phase: float) -> float:
    return math.sin(phase * 2.0 * math.pi)


def square_shape(phase: float) -> float:
    if phase < 0.5:
        return 1.0
    return -1.0


def saw_shape(phase: float) -> float:
    """Triangle wave: 0 -> 1 at 0.25, down to -1 at 0.75, back to 0 at 1.0"""
    if phase < 0.25:
        return 4.0 * phase
    if phase < 0.75:
        return -4.0 * phase + 2.0
    return 4.0 * phase - 4.0


def chirp_shape(chirp_g: float = CHIRP_G) -> ShapeFunc:
    """
    Build a single-cycle chirp whose instantaneous frequency rises linearly
    from f0 to f0 * chirp_g across the segment.

    f0 and c are chosen so the phase integral over [0, 1) is exactly one cycle.
    """
    chirp_f0 = 2.0 / (chirp_g + 1.0)
    chirp_c = chirp_f0 * (chirp_g - 1.0) / 2.0

    def func(phase: float) -> float:
        return math.sin(2.0 * math.pi * (chirp_c * phase * phase + chirp_f0 * phase))

    return func


def scaled(factor: float, pre_func: Optional[ShapeFunc]) -> ShapeFunc:
    if pre_func is None:
        return zero_shape
    if factor == 1.0:
        return pre_func
    return lambda phase: factor * pre_func(phase)


SHAPE_FUNCTIONS: Dict[Shape, ShapeFunc] = {
    Shape.MID: zero_shape,
    Shape.MAX: max_shape,
    Shape.MIN: min_shape,
    Shape.SIN: sin_shape,
    Shape.SQUARE: square_shape,
    Shape.SAW: saw_shape,
    Shape.CHIRP: chirp_shape(),
}


def shape_function(shape_id: Union[Shape, str, None]) -> ShapeFunc:
    """Look up a shape by enum or string id. Unknown ids give the zero shape."""
    if isinstance(shape_id, Shape):
        return SHAPE_FUNCTIONS[shape_id]
    try:
        return SHAPE_FUNCTIONS[Shape(shape_id)]
    except ValueError:
        return zero_shape


@dataclass
class Segment:
    duration: Optional[float]
    shape: Union[Shape, str, None] = Shape.MID
    phase_begin: Optional[float] = None
    phase_end: Optional[float] = None
    scale: float = 1.0

    # Filled in by WaveformComposer.load()
    t_begin: float = field(default=0.0, repr=False)
    t_end: float = field(default=0.0, repr=False)
    phase_scale: float = field(default=0.0, repr=False)

    def normalize(self):
        """Replace missing or degenerate values with the full-cycle defaults"""
        if not self.duration or self.duration <= 0.0:
            self.duration = 1.0
        if self.phase_begin is None:
            self.phase_begin = 0.0
        if self.phase_end is None:
            self.phase_end = self.phase_begin + 1.0

        if self.phase_end - self.phase_begin < PHASE_EPSILON:
            self.phase_begin = 0.0
            self.phase_end = 1.0

        self.phase_scale = (self.phase_end - self.phase_begin) / self.duration


class WaveformSample(NamedTuple):
    t_cycle: float
    value: float


class WaveformComposer:
    """
    Periodic function built from an ordered list of segments.

    evaluate() keeps a cursor on the active segment and only scans forward,
    so callers must feed a non-decreasing independent variable. Going
    backwards is only handled at the cycle wrap. Call reset() before reusing
    the composer with a different time origin.
    """

    def __init__(self, amplitude: float, segments: Sequence[Segment]):
        self.amplitude = amplitude
        self.segments: List[Segment] = []
        self.total_period = 0.0
        self._funcs: List[ShapeFunc] = []
        self._idx_curr = 0
        self._t_base: Optional[float] = None
        self.load(segments)

    def load(self, segments: Sequence[Segment]):
        if not segments:
            raise ValueError("A waveform needs at least one segment")

        self.segments = list(segments)
        self._funcs = []

        total = 0.0
        for segment in self.segments:
            segment.normalize()
            segment.t_begin = total
            total += segment.duration
            segment.t_end = total
            self._funcs.append(scaled(segment.scale, shape_function(segment.shape)))

        self.total_period = total
        self.reset()

    def reset(self):
        self._idx_curr = 0
        self._t_base = None

    def evaluate(self, t_now: float) -> WaveformSample:
        if self._t_base is None:
            self._t_base = t_now

        t_cycle = math.fmod(t_now - self._t_base, self.total_period)

        if t_cycle < self.segments[self._idx_curr].t_begin:
            self._idx_curr = 0
        while not t_cycle < self.segments[self._idx_curr].t_end:
            self._idx_curr += 1

        segment = self.segments[self._idx_curr]
        t_element = t_cycle - segment.t_begin
        phase = math.fmod(t_element * segment.phase_scale + segment.phase_begin, 1.0)

        value = self._funcs[self._idx_curr](phase) * self.amplitude
        return WaveformSample(t_cycle, value)

    def __call__(self, t_now: float) -> WaveformSample:
        return self.evaluate(t_now)
