"""
Tests for the gateway availability poller.
"""

import asyncio
import unittest
import sys
import os

import aiohttp

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from algorithms.poller import AvailabilityPoller

URL = "https://gateway.test/tx"


class ScriptedProbe:
    """Probe that fails a fixed number of times, then succeeds."""

    def __init__(self, failures: int, error: Exception = None):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self, url):
        self.calls += 1
        if self.calls <= self.failures:
            if self.error is not None:
                raise self.error
            return False, "404 Not Found"
        return True, "200 OK"


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class TestAvailabilityPoller(unittest.IsolatedAsyncioTestCase):

    async def test_succeeds_after_n_failures(self):
        probe = ScriptedProbe(failures=3)
        sleep = RecordingSleep()
        poller = AvailabilityPoller(probe, poll_interval_ms=2000, max_wait_ms=600_000, sleep=sleep)

        result = await poller.wait_until_available(URL)

        self.assertTrue(result.available)
        self.assertEqual(result.attempts, 4)
        self.assertEqual(probe.calls, 4)
        self.assertEqual(result.last_status, "200 OK")
        self.assertEqual(sleep.delays, [2.0, 2.0, 2.0])
        self.assertGreaterEqual(result.waited_ms, 3 * 2000)

    async def test_immediate_success_does_not_sleep(self):
        sleep = RecordingSleep()
        poller = AvailabilityPoller(ScriptedProbe(failures=0), sleep=sleep)

        result = await poller.wait_until_available(URL)

        self.assertTrue(result.available)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(sleep.delays, [])

    async def test_times_out_within_one_interval_of_max_wait(self):
        probe = ScriptedProbe(failures=10_000)
        sleep = RecordingSleep()
        poller = AvailabilityPoller(probe, poll_interval_ms=2000, max_wait_ms=10_000, sleep=sleep)

        result = await poller.wait_until_available(URL)

        self.assertFalse(result.available)
        self.assertEqual(result.last_status, "404 Not Found")
        self.assertEqual(result.attempts, poller.max_attempts)
        self.assertGreaterEqual(result.waited_ms, 10_000)
        self.assertLessEqual(result.waited_ms, 10_000 + 2000)

    async def test_default_bounds(self):
        poller = AvailabilityPoller(ScriptedProbe(failures=0))
        self.assertEqual(poller.poll_interval_ms, 2000)
        self.assertEqual(poller.max_wait_ms, 600_000)
        self.assertEqual(poller.max_attempts, 301)

    async def test_transport_errors_mean_not_yet_available(self):
        probe = ScriptedProbe(failures=2, error=aiohttp.ClientConnectionError("connection reset"))
        poller = AvailabilityPoller(probe, sleep=RecordingSleep())

        result = await poller.wait_until_available(URL)

        self.assertTrue(result.available)
        self.assertEqual(result.attempts, 3)

    async def test_timeout_reports_last_transport_error(self):
        probe = ScriptedProbe(failures=10_000, error=aiohttp.ClientConnectionError("connection reset"))
        poller = AvailabilityPoller(probe, poll_interval_ms=1000, max_wait_ms=3000, sleep=RecordingSleep())

        result = await poller.wait_until_available(URL)

        self.assertFalse(result.available)
        self.assertEqual(result.last_status, "connection reset")

    async def test_error_without_message_is_reported_generically(self):
        probe = ScriptedProbe(failures=10_000, error=asyncio.TimeoutError())
        poller = AvailabilityPoller(probe, poll_interval_ms=1000, max_wait_ms=1000, sleep=RecordingSleep())

        result = await poller.wait_until_available(URL)

        self.assertEqual(result.last_status, "fetch error")
        self.assertEqual(result.attempts, 2)

    async def test_unexpected_errors_propagate(self):
        probe = ScriptedProbe(failures=1, error=RuntimeError("bug"))
        poller = AvailabilityPoller(probe, sleep=RecordingSleep())

        with self.assertRaises(RuntimeError):
            await poller.wait_until_available(URL)

    async def test_elapsed_time_covers_real_sleeps(self):
        poller = AvailabilityPoller(ScriptedProbe(failures=2), poll_interval_ms=20, max_wait_ms=1000)

        result = await poller.wait_until_available(URL)

        self.assertTrue(result.available)
        self.assertGreaterEqual(result.elapsed_ms, 35)

    def test_rejects_non_positive_interval(self):
        with self.assertRaises(ValueError):
            AvailabilityPoller(ScriptedProbe(failures=0), poll_interval_ms=0)


if __name__ == '__main__':
    unittest.main()
