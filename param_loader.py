#!/usr/bin/env python3
"""
param_loader.py - Named numeric parameters for the range-hold test
Reads a vehicle parameter file and resolves the test settings with defaults

Accepted line formats (ArduPilot .parm / .param style):
    SCR_USER1 2
    SCR_USER2,22.0
    SCR_USER3 = 2.5
Lines starting with '#' are comments.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Optional

from config.harness_config import HARNESS_CONFIG

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\s*[=,\s]\s*")


class ParameterStore:
    """In-memory parameter table. get() returns None for unknown names."""

    def __init__(self, values: Optional[Dict[str, float]] = None):
        self._values: Dict[str, float] = dict(values or {})

    def get(self, name: str) -> Optional[float]:
        return self._values.get(name)

    def set(self, name: str, value: float):
        self._values[name] = float(value)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._values)

    def __len__(self):
        return len(self._values)


def load_parameter_file(param_file: str) -> ParameterStore:
    """Load a parameter file; a missing file yields an empty store."""
    store = ParameterStore()

    if not os.path.exists(param_file):
        logger.warning("Parameter file %s not found, using defaults", param_file)
        return store

    with open(param_file, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            parts = _LINE_SPLIT.split(line, maxsplit=1)
            if len(parts) != 2:
                logger.warning("Ignoring malformed parameter at line %d: %s", line_num, line)
                continue

            name, value = parts
            try:
                store.set(name.strip(), float(value.strip()))
            except ValueError:
                logger.warning("Invalid parameter value at line %d: %s", line_num, line)

    logger.info("Loaded %d parameters from %s", len(store), param_file)
    return store


@dataclass(frozen=True)
class RunSettings:
    pattern_id: int
    bottom_depth_m: float
    match_tolerance_m: float


def load_run_settings(params: ParameterStore) -> RunSettings:
    """
    Resolve the test settings, falling back to defaults for missing,
    non-positive pattern ids and near-zero depth or tolerance.
    """
    names = HARNESS_CONFIG['parameters']

    pattern_id = params.get(names['pattern_id']['name'])
    if pattern_id is None or pattern_id <= 0.0:
        pattern_id = names['pattern_id']['default']

    bottom_depth_m = params.get(names['bottom_depth_m']['name'])
    if bottom_depth_m is None or abs(bottom_depth_m) < names['bottom_depth_m']['min_abs']:
        bottom_depth_m = names['bottom_depth_m']['default']

    match_tolerance_m = params.get(names['match_tolerance_m']['name'])
    if match_tolerance_m is None or abs(match_tolerance_m) < names['match_tolerance_m']['min_abs']:
        match_tolerance_m = names['match_tolerance_m']['default']

    return RunSettings(int(pattern_id), float(bottom_depth_m), float(match_tolerance_m))
