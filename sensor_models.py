#!/usr/bin/env python3
"""
sensor_models.py - Corruption models for the synthetic rangefinder
Turns a true range into a realistic sensor reading

Stages, applied in this order every tick:
- NoiseInjector: Gaussian noise (Box-Muller) with optional mean offset
- OutlierInjector: Poisson-gated rare outliers, modelling sensor faults
- DelayLine: constant reporting latency, warm-started with the first sample
"""

import math
import random
from dataclasses import dataclass
from typing import Callable, List, Optional

SampleFunc = Callable[[float], float]

# Resolves 0.1 / 0.02 to 5 slots instead of 6
DELAY_COUNT_TOLERANCE = 1.0e-9


@dataclass(frozen=True)
class CorruptionParameters:
    noise_mean: float = 0.0
    noise_std_dev: float = 0.0
    outlier_rate_per_s: float = 0.0
    outlier_mean: float = 0.0
    outlier_std_dev: float = 0.0
    delay_s: float = 0.0
    tick_interval_s: float = 0.02


class NoiseInjector:
    """Adds normally distributed noise to a sample"""

    def __init__(self, mean: float = 0.0, std_dev: float = 0.0, rng=None):
        self.mean = mean
        self.std_dev = std_dev
        self.rng = rng if rng is not None else random

    def __call__(self, value: float) -> float:
        if self.std_dev == 0.0:
            # Pure offset (or identity) - no random draw
            return value + self.mean

        # u1 in (0, 1] keeps the log finite
        u1 = 1.0 - self.rng.random()
        u2 = self.rng.random()
        return value + self.mean + self.std_dev * math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


class OutlierInjector:
    """
    Occasionally replaces a sample with the output of an outlier model.

    Outlier events arrive as a Poisson process at rate_per_s. The probability
    of at least one event during a tick is 1 - exp(-rate * tick_interval).
    """

    def __init__(self, rate_per_s: float, tick_interval_s: float,
                 outlier_model: Optional[SampleFunc] = None, rng=None):
        self.rate_per_s = rate_per_s
        self.tick_interval_s = tick_interval_s
        self.outlier_model = outlier_model or NoiseInjector(rng=rng)
        self.rng = rng if rng is not None else random
        self.prob_no_event = math.exp(-rate_per_s * tick_interval_s)

        # Diagnostics
        self.calls = 0
        self.events = 0

    @property
    def enabled(self) -> bool:
        return self.rate_per_s != 0.0

    def __call__(self, value: float) -> float:
        if not self.enabled:
            return value

        self.calls += 1
        if self.rng.random() > self.prob_no_event:
            self.events += 1
            return self.outlier_model(value)
        return value


class DelayLine:
    """Fixed-latency circular buffer, one slot per tick"""

    def __init__(self, delay_s: float, tick_interval_s: float):
        self.delay_s = delay_s
        self.tick_interval_s = tick_interval_s

        if delay_s == 0.0 or tick_interval_s == 0.0:
            self.capacity = 0
        else:
            self.capacity = max(0, math.ceil(delay_s / tick_interval_s - DELAY_COUNT_TOLERANCE))

        self._buffer: List[float] = []
        self._next_idx = -1

    @property
    def enabled(self) -> bool:
        return self.capacity > 0

    @property
    def warmed(self) -> bool:
        return self._next_idx >= 0

    def __call__(self, value: float) -> float:
        if not self.enabled:
            return value

        # Warm start: assume the sensor has been reading this value forever
        if self._next_idx < 0:
            self._buffer = [value] * self.capacity
            self._next_idx = 0

        delayed = self._buffer[self._next_idx]
        self._buffer[self._next_idx] = value
        self._next_idx = (self._next_idx + 1) % self.capacity
        return delayed


class SignalPipeline:
    """corrupted = delay(outlier(noise(true_value)))"""

    def __init__(self, noise: NoiseInjector, outlier: OutlierInjector, delay: DelayLine):
        self.noise = noise
        self.outlier = outlier
        self.delay = delay

    @classmethod
    def from_parameters(cls, params: CorruptionParameters, rng=None) -> "SignalPipeline":
        noise = NoiseInjector(params.noise_mean, params.noise_std_dev, rng=rng)
        outlier = OutlierInjector(
            params.outlier_rate_per_s,
            params.tick_interval_s,
            NoiseInjector(params.outlier_mean, params.outlier_std_dev, rng=rng),
            rng=rng,
        )
        delay = DelayLine(params.delay_s, params.tick_interval_s)
        return cls(noise, outlier, delay)

    def __call__(self, true_value: float) -> float:
        return self.delay(self.outlier(self.noise(true_value)))
