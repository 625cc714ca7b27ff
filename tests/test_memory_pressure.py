#!/usr/bin/env python3
"""
Tests for memory pressure reporting during eager operations.
"""

import dataclasses
import logging
import unittest
from collections import namedtuple
from unittest import mock

from lazyseq import SeqConfig, Seq, iterable
from lazyseq.memory import (
    MaterializationGuard,
    MemorySample,
    Pressure,
    PressureReporter,
    sample_memory,
)

VirtualMemory = namedtuple("VirtualMemory", ["total", "used"])

GB = 1024 ** 3


def fake_memory(percent_used):
    return VirtualMemory(total=10 * GB, used=int(10 * GB * percent_used / 100))


class ConfigTestCase(unittest.TestCase):
    """Restore the shared settings after each test."""

    def setUp(self):
        self.saved_config = dataclasses.asdict(SeqConfig.get_instance())

    def tearDown(self):
        SeqConfig.set_defaults(**self.saved_config)


class TestPressure(unittest.TestCase):
    """Test pressure classification and parsing."""

    def test_from_percent(self):
        cases = [
            (10, Pressure.NONE),
            (50, Pressure.LOW),
            (75, Pressure.MEDIUM),
            (90, Pressure.HIGH),
            (97, Pressure.CRITICAL),
        ]
        for percent, expected in cases:
            with self.subTest(percent=percent):
                self.assertIs(Pressure.from_percent(percent), expected)

    def test_coerce(self):
        self.assertIs(Pressure.coerce(Pressure.HIGH), Pressure.HIGH)
        self.assertIs(Pressure.coerce("HIGH"), Pressure.HIGH)
        self.assertIs(Pressure.coerce("medium"), Pressure.MEDIUM)
        self.assertIs(Pressure.coerce(4), Pressure.CRITICAL)
        with self.assertRaises(KeyError):
            Pressure.coerce("EXTREME")

    def test_ordering(self):
        self.assertGreater(Pressure.HIGH, Pressure.MEDIUM)
        self.assertGreaterEqual(Pressure.LOW, Pressure.LOW)


class TestSampleMemory(ConfigTestCase):
    """Test reading system memory."""

    def test_uses_physical_memory_by_default(self):
        SeqConfig.set_defaults(memory_limit=None)
        with mock.patch("psutil.virtual_memory", return_value=fake_memory(40)):
            sample = sample_memory(12)
        self.assertEqual(sample.limit, 10 * GB)
        self.assertEqual(sample.materialized, 12)
        self.assertIs(sample.pressure, Pressure.NONE)

    def test_memory_limit_caps_total(self):
        SeqConfig.set_defaults(memory_limit=5 * GB)
        with mock.patch("psutil.virtual_memory", return_value=fake_memory(45)):
            sample = sample_memory()
        self.assertEqual(sample.limit, 5 * GB)
        self.assertIs(sample.pressure, Pressure.HIGH)

    def test_str(self):
        sample = MemorySample(used=GB, limit=2 * GB, materialized=7)
        self.assertEqual(str(sample), "50.0% of 2048 MiB in use after 7 elements")


class TestPressureReporter(ConfigTestCase):
    """Test pressure logging."""

    def setUp(self):
        super().setUp()
        self.logger = logging.getLogger("lazyseq.tests.pressure")
        self.reporter = PressureReporter(logger=self.logger)
        SeqConfig.set_defaults(pressure_log_level="MEDIUM", log_interval=60.0)

    def sample(self, percent):
        return MemorySample(used=percent, limit=100, materialized=1)

    def test_logs_at_matching_level(self):
        with self.assertLogs(self.logger, level="ERROR") as logs:
            self.assertTrue(self.reporter.report("reduce", self.sample(90)))
        self.assertIn("HIGH memory pressure during reduce", logs.output[0])

    def test_ignores_pressure_below_threshold(self):
        self.assertFalse(self.reporter.report("reduce", self.sample(55)))

    def test_threshold_as_member(self):
        SeqConfig.set_defaults(pressure_log_level=Pressure.CRITICAL)
        self.assertFalse(self.reporter.report("reduce", self.sample(90)))
        with self.assertLogs(self.logger, level="CRITICAL"):
            self.assertTrue(self.reporter.report("reduce", self.sample(99)))

    def test_repeated_level_is_throttled(self):
        with self.assertLogs(self.logger, level="WARNING") as logs:
            self.reporter.report("consume", self.sample(75))
            self.reporter.report("consume", self.sample(75))
            self.reporter.report("consume", self.sample(90))
        self.assertEqual(len(logs.output), 2)


class TestMaterializationGuard(ConfigTestCase):
    """Test the element counter used by eager operations."""

    def setUp(self):
        super().setUp()
        self.reporter = mock.Mock(spec=PressureReporter)

    def test_checks_once_per_interval(self):
        guard = MaterializationGuard("test", interval=10, reporter=self.reporter)
        with mock.patch("psutil.virtual_memory", return_value=fake_memory(10)):
            for _ in range(35):
                guard.tick()
        self.assertEqual(guard.count, 35)
        self.assertEqual(guard.checks, 3)
        self.assertEqual(self.reporter.report.call_count, 3)
        operation, sample = self.reporter.report.call_args[0]
        self.assertEqual(operation, "test")
        self.assertEqual(sample.materialized, 30)

    def test_zero_interval_disables_checks(self):
        guard = MaterializationGuard("test", interval=0, reporter=self.reporter)
        for _ in range(100):
            guard.tick()
        self.assertEqual(guard.checks, 0)
        self.reporter.report.assert_not_called()

    def test_sampling_failure_is_logged(self):
        guard = MaterializationGuard("test", interval=1, reporter=self.reporter)
        with mock.patch("psutil.virtual_memory", side_effect=OSError("no /proc")):
            with self.assertLogs("lazyseq.memory", level="ERROR"):
                guard.tick()
        self.assertEqual(guard.count, 1)

    def test_invalid_threshold_is_logged(self):
        SeqConfig.set_defaults(memory_check_interval=1, pressure_log_level="EXTREME")
        with mock.patch("psutil.virtual_memory", return_value=fake_memory(90)):
            with self.assertLogs("lazyseq.memory", level="ERROR"):
                self.assertEqual(iterable.length([1, 2]), 2)

    def test_consume_with_member_threshold(self):
        SeqConfig.set_defaults(memory_check_interval=1, log_interval=0.0,
                               pressure_log_level=Pressure.HIGH)
        with mock.patch("psutil.virtual_memory", return_value=fake_memory(90)):
            with self.assertLogs("lazyseq.memory", level="ERROR") as logs:
                consumed, rest = iterable.consume([1, 2, 3], 2)
        self.assertEqual(consumed, [1, 2])
        self.assertEqual(list(rest), [3])
        self.assertIn("during consume", logs.output[0])

    def test_eager_operations_report_without_changing_results(self):
        SeqConfig.set_defaults(memory_check_interval=2)
        with mock.patch.object(MaterializationGuard, "check") as check:
            total = iterable.reduce(range(10), lambda a, b: a + b, 0)
            consumed, rest = iterable.consume(range(10), 4)
            collected = Seq.range(3).collect()
        self.assertEqual(total, 45)
        self.assertEqual(consumed, [0, 1, 2, 3])
        self.assertEqual(list(rest), [4, 5, 6, 7, 8, 9])
        self.assertEqual(collected, [0, 1, 2])
        # 5 checks for reduce, 2 for the consumed prefix, 1 for collect
        self.assertEqual(check.call_count, 8)


if __name__ == "__main__":
    unittest.main()
