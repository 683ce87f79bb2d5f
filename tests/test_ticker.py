"""Unit tests for the Ticker."""

import threading
from unittest.mock import MagicMock

import pytest

from src.scheduler import MAX_TICK_SECONDS, Ticker


class TestTicker:
    """Tests for Ticker."""

    def test_interval_capped_at_one_minute(self):
        ticker = Ticker(MagicMock(), interval_seconds=3600)

        assert ticker.interval == MAX_TICK_SECONDS

    def test_short_interval_kept(self):
        assert Ticker(MagicMock(), interval_seconds=5).interval == 5

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError):
            Ticker(MagicMock(), interval_seconds=interval)

    def test_tick_once_returns_fired(self):
        manager = MagicMock()
        manager.tick.return_value = True

        assert Ticker(manager).tick_once() is True

    def test_tick_once_survives_errors(self):
        """Test an evaluation error is logged and swallowed."""
        manager = MagicMock()
        manager.tick.side_effect = RuntimeError("registry unavailable")

        assert Ticker(manager).tick_once() is False

    def test_background_thread_ticks_until_stopped(self):
        ticked = threading.Event()
        calls = []

        def tick():
            calls.append(1)
            if len(calls) >= 2:
                ticked.set()
            if len(calls) == 1:
                raise RuntimeError("first tick fails")
            return False

        manager = MagicMock()
        manager.tick.side_effect = tick
        ticker = Ticker(manager, interval_seconds=0.01)

        ticker.start()
        try:
            assert ticked.wait(timeout=5)
            assert ticker.running is True
        finally:
            ticker.stop(timeout=5)

        assert ticker.running is False
        assert len(calls) >= 2

    def test_start_twice_keeps_one_thread(self):
        manager = MagicMock()
        manager.tick.return_value = False
        ticker = Ticker(manager, interval_seconds=0.01)

        ticker.start()
        first = ticker._thread
        ticker.start()
        try:
            assert ticker._thread is first
        finally:
            ticker.stop(timeout=5)

    def test_run_forever_returns_after_stop(self):
        manager = MagicMock()
        ticker = Ticker(manager, interval_seconds=0.01)
        manager.tick.side_effect = lambda: ticker.stop()

        ticker.run_forever()

        manager.tick.assert_called_once()
