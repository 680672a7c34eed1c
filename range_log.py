#!/usr/bin/env python3
"""
range_log.py - CSV structured log for per-tick rangefinder rows
One file per run: logs/range_log_YYYYmmdd_HHMMSS.csv
"""

import csv
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from hardware.vehicle_interface import DataLogger

logger = logging.getLogger(__name__)

RANGE_LOG_PATTERN = "range_log_*.csv"


def default_log_path(log_dir: str = "logs") -> Path:
    logs = Path(log_dir)
    logs.mkdir(parents=True, exist_ok=True)
    return logs / f"range_log_{datetime.now():%Y%m%d_%H%M%S}.csv"


class CsvRangeLog(DataLogger):
    """
    Writes rows as: time_s, name, <fields...>

    The header is fixed by the first row written; later rows with extra
    fields are truncated to the header, missing fields are left blank.
    """

    def __init__(self, csv_file, clock: Callable[[], float] = time.monotonic, flush_every: int = 50):
        self.csv_file = Path(csv_file)
        self.clock = clock
        self.flush_every = flush_every
        self.rows_written = 0
        self._fh = None
        self._writer: Optional[csv.DictWriter] = None
        self._headers: List[str] = []

    def write(self, name: str, fields: Dict[str, float]) -> None:
        if self._writer is None:
            self._open(list(fields.keys()))

        row = {'time_s': f"{self.clock():.3f}", 'name': name}
        row.update({k: fields.get(k, '') for k in self._headers[2:]})
        self._writer.writerow(row)
        self.rows_written += 1

        if self.rows_written % self.flush_every == 0:
            self._fh.flush()

    def _open(self, field_names: List[str]):
        self.csv_file.parent.mkdir(parents=True, exist_ok=True)
        self._headers = ['time_s', 'name'] + field_names
        self._fh = open(self.csv_file, 'w', newline='')
        self._writer = csv.DictWriter(self._fh, fieldnames=self._headers, extrasaction='ignore')
        self._writer.writeheader()
        logger.info("Range logging to %s", self.csv_file)

    def close(self):
        if self._fh:
            self._fh.close()
            self._fh = None
            self._writer = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
