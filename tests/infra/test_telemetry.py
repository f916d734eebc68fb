from __future__ import annotations

import logging
import time
import unittest
from unittest import mock

from smartswap.observability import telemetry
from smartswap.observability.logging import NAMESPACE, get_logger
from smartswap.observability.telemetry import (
    counter,
    get_counters,
    get_latency_stats,
    reset_counters,
    reset_latencies,
    time_block,
)


class TelemetryTests(unittest.TestCase):
    def setUp(self):
        reset_latencies()
        reset_counters()

    def test_latency_suffix_is_optional(self):
        with time_block("intent.personalize.latency"):
            pass

        self.assertEqual(get_latency_stats("intent.personalize.latency")["count"], 1)
        self.assertEqual(get_latency_stats("intent.personalize.latency_ms")["count"], 1)

    def test_samples_are_milliseconds(self):
        with time_block("ledger.flush_ms"):
            time.sleep(0.01)

        stats = get_latency_stats("ledger.flush_ms")
        self.assertEqual(stats["count"], 1)
        self.assertGreaterEqual(stats["min"], 5.0)

    def test_time_block_records_on_exception(self):
        with self.assertRaises(RuntimeError), time_block("api.batches.latency"):
            raise RuntimeError("boom")

        self.assertEqual(get_latency_stats("api.batches.latency")["count"], 1)

    def test_percentiles_over_known_samples(self):
        telemetry._LATENCIES_MS["fixed_ms"] = [float(n) for n in range(100, 0, -1)]

        stats = get_latency_stats("fixed_ms")
        self.assertEqual(stats["min"], 1.0)
        self.assertEqual(stats["max"], 100.0)
        self.assertEqual(stats["p50"], 51.0)
        self.assertEqual(stats["p95"], 96.0)
        self.assertEqual(stats["p99"], 100.0)

    def test_single_sample_fills_every_percentile(self):
        telemetry._LATENCIES_MS["one_ms"] = [7.0]

        stats = get_latency_stats("one_ms")
        self.assertEqual((stats["p50"], stats["p95"], stats["p99"]), (7.0, 7.0, 7.0))

    def test_empty_metric_has_zero_stats(self):
        stats = get_latency_stats("never.recorded")
        self.assertEqual(stats["count"], 0)
        self.assertEqual(stats["p95"], 0.0)

    def test_counter_increments(self):
        before = counter("test.counter", 0)
        counter("test.counter")
        after = counter("test.counter", 0)
        self.assertEqual(after, before + 1)

    def test_get_counters_is_a_snapshot(self):
        counter("ledger.batches_flushed", 2)
        snapshot = get_counters()
        counter("ledger.batches_flushed")
        self.assertEqual(snapshot["ledger.batches_flushed"], 2)


class LoggingTests(unittest.TestCase):
    def test_module_loggers_live_under_the_namespace(self):
        self.assertEqual(get_logger("smartswap.intent.engine").name, "smartswap.intent.engine")
        self.assertEqual(get_logger("storefront").name, f"{NAMESPACE}.storefront")

    def test_single_handler_on_package_logger(self):
        get_logger("smartswap.a")
        get_logger("smartswap.b")
        package_logger = logging.getLogger(NAMESPACE)
        stream_handlers = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
        self.assertEqual(len(stream_handlers), 1)

    def test_level_follows_environment(self):
        get_logger("smartswap.level")
        before = logging.getLogger(NAMESPACE).level
        with mock.patch.dict("os.environ", {"SMARTSWAP_LOG_LEVEL": "warning"}):
            get_logger("smartswap.level")
            self.assertEqual(logging.getLogger(NAMESPACE).level, logging.WARNING)
        get_logger("smartswap.level")
        self.assertEqual(logging.getLogger(NAMESPACE).level, before)


if __name__ == "__main__":
    unittest.main()
