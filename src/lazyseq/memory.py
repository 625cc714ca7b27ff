"""
Memory reporting for eager operations.

``reduce``, ``length``, ``for_each``, the prefix of ``consume`` and
``Seq.collect`` have no upper bound on the number of elements they walk.
Each of them counts elements with a :class:`MaterializationGuard`, which
samples system memory every ``config.memory_check_interval`` elements and
logs when usage crosses ``config.pressure_log_level``. Reporting never
raises into the operation and never changes its result.
"""

import bisect
import logging
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

import psutil

from lazyseq.config import config

logger = logging.getLogger(__name__)


class Pressure(IntEnum):
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @classmethod
    def coerce(cls, value: Any) -> 'Pressure':
        """Accept a member, a member name (any case) or an integer value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls[value.upper()]
        return cls(value)

    @classmethod
    def from_percent(cls, percent: float) -> 'Pressure':
        return cls(bisect.bisect_right(_PERCENT_BOUNDS, percent))


# Usage percentages at which LOW, MEDIUM, HIGH and CRITICAL begin
_PERCENT_BOUNDS = (50.0, 70.0, 85.0, 95.0)

_LOG_LEVELS = {
    Pressure.NONE: logging.DEBUG,
    Pressure.LOW: logging.INFO,
    Pressure.MEDIUM: logging.WARNING,
    Pressure.HIGH: logging.ERROR,
    Pressure.CRITICAL: logging.CRITICAL,
}


@dataclass
class MemorySample:
    """One reading of system memory, taken while materializing."""
    used: int
    limit: int
    materialized: int

    @property
    def percent(self) -> float:
        return 100.0 * self.used / self.limit if self.limit else 100.0

    @property
    def pressure(self) -> Pressure:
        return Pressure.from_percent(self.percent)

    def __str__(self) -> str:
        return (f"{self.percent:.1f}% of {self.limit / 2 ** 20:.0f} MiB in use "
                f"after {self.materialized} elements")


def sample_memory(materialized: int = 0) -> MemorySample:
    """Read current usage, capped by ``config.memory_limit`` when set."""
    vm = psutil.virtual_memory()
    limit = vm.total
    if config.memory_limit:
        limit = min(limit, config.memory_limit)
    return MemorySample(used=vm.used, limit=limit, materialized=materialized)


class PressureReporter:
    """Log samples at or above the configured pressure, once per level and interval."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._last_report: Dict[Pressure, float] = {}

    def report(self, operation: str, sample: MemorySample) -> bool:
        """Log ``sample`` if it warrants it; returns whether a record was emitted."""
        pressure = sample.pressure
        if pressure < Pressure.coerce(config.pressure_log_level):
            return False

        now = time.monotonic()
        last = self._last_report.get(pressure)
        if last is not None and now - last < config.log_interval:
            return False
        self._last_report[pressure] = now

        self.logger.log(_LOG_LEVELS[pressure], "%s memory pressure during %s: %s",
                        pressure.name, operation, sample)
        return True


default_reporter = PressureReporter()


class MaterializationGuard:
    """Element counter for one run of an eager operation."""

    def __init__(self, operation: str, interval: Optional[int] = None,
                 reporter: Optional[PressureReporter] = None):
        self.operation = operation
        self.interval = config.memory_check_interval if interval is None else interval
        self.reporter = reporter or default_reporter
        self.count = 0
        self.checks = 0

    def tick(self) -> None:
        """Record one materialized element."""
        self.count += 1
        if self.interval > 0 and self.count % self.interval == 0:
            self.check()

    def check(self) -> None:
        self.checks += 1
        try:
            self.reporter.report(self.operation, sample_memory(self.count))
        except Exception:
            # Never raise into the eager operation
            logger.exception("Memory check failed during %s", self.operation)
