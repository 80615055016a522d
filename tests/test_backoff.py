"""Tests for the BackoffStrategy class."""

import unittest

from forum_watch.backoff import BackoffStrategy
from forum_watch.config import ObstacleConfig


class TestBackoffStrategy(unittest.TestCase):
    """Verify exponential backoff produces correct sleep durations."""

    def test_first_attempt_returns_base(self):
        """First retry should sleep approximately the base duration."""
        backoff = BackoffStrategy(base_seconds=1.0, max_seconds=30.0)
        sleep = backoff.get_sleep(attempt=1)
        # base * 2^0 = 1.0, plus up to 10% jitter
        self.assertGreaterEqual(sleep, 1.0)
        self.assertLessEqual(sleep, 1.1)

    def test_exponential_growth(self):
        """Each subsequent attempt should roughly double the sleep time."""
        backoff = BackoffStrategy(base_seconds=0.5, max_seconds=100.0)
        self.assertLess(backoff.get_sleep(1), backoff.get_sleep(2))
        self.assertLess(backoff.get_sleep(2), backoff.get_sleep(3))

    def test_respects_max_seconds(self):
        """Sleep duration should never exceed max_seconds (plus jitter)."""
        backoff = BackoffStrategy(base_seconds=1.0, max_seconds=5.0)
        self.assertLessEqual(backoff.get_sleep(attempt=20), 5.5)


class TestBackoffWait(unittest.TestCase):
    """Verify wait() sleeps through the injected sleep function."""

    def test_wait_sleeps_computed_duration(self):
        slept = []
        backoff = BackoffStrategy(base_seconds=2.0, max_seconds=10.0, sleep=slept.append)
        seconds = backoff.wait(attempt=2, reason="challenge page")
        self.assertEqual(slept, [seconds])
        self.assertGreaterEqual(seconds, 4.0)
        self.assertLessEqual(seconds, 4.4)

    def test_from_config(self):
        slept = []
        backoff = BackoffStrategy.from_config(
            ObstacleConfig(backoff_base_seconds=1.0, backoff_max_seconds=1.0), sleep=slept.append
        )
        backoff.wait(attempt=5)
        self.assertLessEqual(slept[0], 1.1)


if __name__ == "__main__":
    unittest.main()
