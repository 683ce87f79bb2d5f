"""Unit tests for the ScheduleManager and fire-time helpers."""

from datetime import datetime, time, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.scheduler import (
    SEND_SUMMARY_JOB,
    ScheduledJob,
    ScheduleManager,
    SystemClock,
    local_now,
    next_anchor_occurrence,
    next_fire_after,
)
from src.settings import Frequency, InMemorySettingsStore, Settings

UTC = timezone.utc


def _at(day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2024, 6, day, hour, minute, second, tzinfo=UTC)


class _SteppableClock(SystemClock):
    """SystemClock whose time is set by the test."""

    def __init__(self, now: datetime):
        super().__init__(now_fn=lambda: self.current)
        self.current = now


def _make_manager(settings: Settings, now: datetime, runner=None):
    clock = _SteppableClock(now)
    store = InMemorySettingsStore(initial=settings)
    manager = ScheduleManager(clock, store.get, runner=runner)
    store._on_change = manager.on_settings_changed
    return manager, clock, store


ENABLED_DAILY = Settings(enabled=True, recipient="admin@example.com", frequency=Frequency.DAILY)
ENABLED_WEEKLY = Settings(enabled=True, recipient="admin@example.com", frequency=Frequency.WEEKLY)
DISABLED = Settings(enabled=False, recipient="admin@example.com")


# ==================== Fire Time Tests ====================


class TestNextAnchorOccurrence:
    """Tests for next_anchor_occurrence()."""

    def test_before_anchor_is_same_day(self):
        assert next_anchor_occurrence(_at(10, 8, 15)) == _at(10, 9)

    def test_after_anchor_is_next_day(self):
        assert next_anchor_occurrence(_at(10, 9, 0, 1)) == _at(11, 9)

    def test_exactly_at_anchor(self):
        """Test the anchor itself counts as the next occurrence."""
        assert next_anchor_occurrence(_at(10, 9)) == _at(10, 9)

    def test_custom_anchor(self):
        assert next_anchor_occurrence(_at(10, 8), time(6, 30)) == _at(11, 6, 30)

    def test_keeps_timezone(self):
        tz = timezone(timedelta(hours=2))
        now = datetime(2024, 6, 10, 12, 0, tzinfo=tz)

        result = next_anchor_occurrence(now)

        assert result.tzinfo is tz
        assert (result.hour, result.day) == (9, 11)


class TestNextFireAfter:
    """Tests for next_fire_after()."""

    def test_one_interval_ahead(self):
        assert next_fire_after(_at(10, 9), timedelta(days=1), _at(10, 9, 0, 30)) == _at(11, 9)

    def test_skips_missed_cycles(self):
        """Test an outage yields a single catch-up fire, still on the anchor."""
        result = next_fire_after(_at(1, 9), timedelta(days=1), _at(4, 15))

        assert result == _at(5, 9)

    def test_exact_boundary_moves_past_now(self):
        result = next_fire_after(_at(1, 9), timedelta(days=7), _at(8, 9))

        assert result == _at(15, 9)

    def test_fixed_offset_keeps_elapsed_spacing(self):
        """Test fires stay whole intervals apart in the clock's fixed offset."""
        now = local_now()
        offset = now.utcoffset()
        first = next_anchor_occurrence(now)

        following = next_fire_after(first, timedelta(days=30), first)

        assert now.tzinfo is not None
        assert following - first == timedelta(days=30)
        assert following.utcoffset() == offset
        assert (following.hour, following.minute) == (9, 0)


# ==================== Activation Tests ====================


class TestActivation:
    """Tests for on_activate() and on_deactivate()."""

    def test_activate_schedules_when_enabled(self):
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))

        manager.on_activate()

        job = clock.get_job(SEND_SUMMARY_JOB)
        assert job == ScheduledJob(SEND_SUMMARY_JOB, _at(10, 9), Frequency.DAILY)

    def test_activate_noop_when_disabled(self):
        manager, clock, _ = _make_manager(DISABLED, _at(10, 7))

        manager.on_activate()

        assert clock.is_pending(SEND_SUMMARY_JOB) is False

    def test_activate_keeps_existing_job(self):
        """Test activation does not move an already pending job."""
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        clock.schedule_at(SEND_SUMMARY_JOB, _at(12, 9), Frequency.DAILY)

        manager.on_activate()

        assert manager.next_fire_at() == _at(12, 9)

    def test_deactivate_clears(self):
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()

        manager.on_deactivate()

        assert clock.is_pending(SEND_SUMMARY_JOB) is False
        assert manager.next_fire_at() is None

    def test_deactivate_without_job(self):
        """Test deactivation is unconditional and safe with nothing pending."""
        manager, clock, _ = _make_manager(DISABLED, _at(10, 7))

        manager.on_deactivate()

        assert clock.pending_jobs() == []


# ==================== Settings Change Tests ====================


class TestOnSettingsChanged:
    """Tests for on_settings_changed()."""

    def test_frequency_change_clears_and_reschedules_once(self):
        """Test Daily -> Weekly triggers exactly one clear and one schedule."""
        clock = MagicMock(wraps=SystemClock(now_fn=lambda: _at(10, 7)))
        manager = ScheduleManager(clock, lambda: ENABLED_WEEKLY)

        manager.on_settings_changed(ENABLED_DAILY, ENABLED_WEEKLY)

        clock.cancel.assert_called_once_with(SEND_SUMMARY_JOB)
        clock.schedule_at.assert_called_once_with(SEND_SUMMARY_JOB, _at(10, 9), Frequency.WEEKLY)

    def test_repeated_update_leaves_one_job(self):
        """Test the same update twice does not accumulate jobs."""
        manager, clock, _ = _make_manager(ENABLED_WEEKLY, _at(10, 7))

        manager.on_settings_changed(ENABLED_DAILY, ENABLED_WEEKLY)
        manager.on_settings_changed(ENABLED_DAILY, ENABLED_WEEKLY)

        assert len(clock.pending_jobs()) == 1
        assert clock.get_job(SEND_SUMMARY_JOB).recurrence is Frequency.WEEKLY

    def test_first_write_schedules(self):
        """Test old=None counts as a change."""
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 10))

        manager.on_settings_changed(None, ENABLED_DAILY)

        assert manager.next_fire_at() == _at(11, 9)

    def test_same_frequency_is_noop(self):
        """Test unrelated edits leave the pending job untouched."""
        clock = MagicMock(wraps=SystemClock(now_fn=lambda: _at(10, 7)))
        manager = ScheduleManager(clock, lambda: ENABLED_DAILY)
        changed = Settings(enabled=True, recipient="other@example.com", frequency=Frequency.DAILY)

        manager.on_settings_changed(ENABLED_DAILY, changed)

        clock.cancel.assert_not_called()
        clock.schedule_at.assert_not_called()

    def test_change_to_disabled_clears_without_rescheduling(self):
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()
        disabled_weekly = Settings(enabled=False, recipient="a@b.com", frequency=Frequency.WEEKLY)

        manager.on_settings_changed(ENABLED_DAILY, disabled_weekly)

        assert clock.is_pending(SEND_SUMMARY_JOB) is False

    def test_store_update_drives_reschedule(self):
        """Test the store's change handler reaches the manager."""
        manager, clock, store = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()

        store.update(ENABLED_WEEKLY)

        assert clock.get_job(SEND_SUMMARY_JOB).recurrence is Frequency.WEEKLY
        assert len(clock.pending_jobs()) == 1


# ==================== Reconcile Tests ====================


class TestReconcile:
    """Tests for reconcile()."""

    def test_disabled_clears_pending(self):
        manager, clock, _ = _make_manager(DISABLED, _at(10, 7))
        clock.schedule_at(SEND_SUMMARY_JOB, _at(10, 9), Frequency.DAILY)

        manager.reconcile(_at(10, 7))

        assert clock.is_pending(SEND_SUMMARY_JOB) is False

    def test_disabled_without_job_stays_clear(self):
        manager, clock, _ = _make_manager(DISABLED, _at(10, 7))

        manager.reconcile(_at(10, 7))

        assert clock.is_pending(SEND_SUMMARY_JOB) is False

    def test_enabled_recreates_lost_job(self):
        """Test an externally cleared job comes back."""
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()
        clock.cancel(SEND_SUMMARY_JOB)

        manager.reconcile(_at(10, 7, 30))

        assert manager.next_fire_at() == _at(10, 9)

    def test_enabled_keeps_existing_job(self):
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        clock.schedule_at(SEND_SUMMARY_JOB, _at(11, 9), Frequency.DAILY)

        manager.reconcile(_at(10, 7))

        assert manager.next_fire_at() == _at(11, 9)

    def test_recurrence_mismatch_reschedules(self):
        """Test a frequency change that bypassed the change handler is picked up."""
        manager, clock, store = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()
        store._settings = ENABLED_WEEKLY

        manager.reconcile(_at(10, 12))

        job = clock.get_job(SEND_SUMMARY_JOB)
        assert job.recurrence is Frequency.WEEKLY
        assert job.next_fire_at == _at(11, 9)
        assert len(clock.pending_jobs()) == 1

    def test_uses_passed_settings(self):
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()

        manager.reconcile(_at(10, 7), settings=DISABLED)

        assert clock.is_pending(SEND_SUMMARY_JOB) is False


# ==================== Tick Tests ====================


class TestTick:
    """Tests for tick()."""

    def test_not_due_does_not_fire(self):
        runner = MagicMock()
        manager, _, _ = _make_manager(ENABLED_DAILY, _at(10, 7), runner=runner)
        manager.on_activate()

        fired = manager.tick(_at(10, 8, 59))

        assert fired is False
        runner.assert_not_called()

    def test_due_fires_once_and_advances(self):
        runner = MagicMock()
        manager, _, _ = _make_manager(ENABLED_DAILY, _at(10, 7), runner=runner)
        manager.on_activate()

        assert manager.tick(_at(10, 9, 0, 20)) is True
        assert manager.tick(_at(10, 9, 1, 20)) is False

        runner.assert_called_once_with(ENABLED_DAILY, _at(10, 9, 0, 20))
        assert manager.next_fire_at() == _at(11, 9)

    def test_uses_clock_time_by_default(self):
        runner = MagicMock()
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 7), runner=runner)
        manager.on_activate()
        clock.current = _at(10, 9, 0, 5)

        assert manager.tick() is True
        runner.assert_called_once_with(ENABLED_DAILY, _at(10, 9, 0, 5))

    @pytest.mark.parametrize(
        "frequency,days", [(Frequency.DAILY, 1), (Frequency.WEEKLY, 7), (Frequency.MONTHLY, 30)]
    )
    def test_next_fire_follows_recurrence(self, frequency, days):
        settings = Settings(enabled=True, recipient="a@b.com", frequency=frequency)
        manager, _, _ = _make_manager(settings, _at(10, 7), runner=MagicMock())
        manager.on_activate()

        manager.tick(_at(10, 9))

        assert manager.next_fire_at() == _at(10, 9) + timedelta(days=days)

    def test_failing_run_keeps_schedule(self):
        """Test a runner exception is logged, not raised, and the schedule advances."""
        runner = MagicMock(side_effect=RuntimeError("boom"))
        manager, _, _ = _make_manager(ENABLED_DAILY, _at(10, 7), runner=runner)
        manager.on_activate()

        assert manager.tick(_at(10, 9)) is True
        assert manager.next_fire_at() == _at(11, 9)

        assert manager.tick(_at(11, 9)) is True
        assert runner.call_count == 2

    def test_disabled_at_fire_time_skips(self):
        """Test disabling between scheduling and firing skips the run."""
        runner = MagicMock()
        manager, clock, store = _make_manager(ENABLED_DAILY, _at(10, 7), runner=runner)
        manager.on_activate()
        store._settings = DISABLED

        assert manager.tick(_at(10, 9, 0, 30)) is False
        runner.assert_not_called()
        assert clock.is_pending(SEND_SUMMARY_JOB) is False

    def test_restart_recovers_on_first_tick(self):
        """Test a fresh registry gets a job on the first tick."""
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(10, 10), runner=MagicMock())

        manager.tick(_at(10, 10))

        assert manager.next_fire_at() == _at(11, 9)

    def test_catch_up_after_outage_fires_once(self):
        runner = MagicMock()
        manager, clock, _ = _make_manager(ENABLED_DAILY, _at(1, 7), runner=runner)
        manager.on_activate()

        manager.tick(_at(5, 15))
        manager.tick(_at(5, 15, 1))

        runner.assert_called_once()
        assert manager.next_fire_at() == _at(6, 9)

    def test_no_runner_does_not_raise(self):
        manager, _, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.on_activate()

        assert manager.tick(_at(10, 9)) is True

    def test_set_runner(self):
        runner = MagicMock()
        manager, _, _ = _make_manager(ENABLED_DAILY, _at(10, 7))
        manager.set_runner(runner)
        manager.on_activate()

        manager.tick(_at(10, 9))

        runner.assert_called_once()


# ==================== ScheduledJob Model Tests ====================


class TestScheduledJob:
    """Tests for the ScheduledJob dataclass."""

    def test_is_due(self):
        job = ScheduledJob(SEND_SUMMARY_JOB, _at(10, 9), Frequency.DAILY)

        assert job.is_due(_at(10, 8, 59)) is False
        assert job.is_due(_at(10, 9)) is True

    def test_unscheduled_is_never_due(self):
        job = ScheduledJob(SEND_SUMMARY_JOB, None, Frequency.DAILY)

        assert job.is_due(_at(30, 9)) is False

    def test_from_dict(self):
        job = ScheduledJob.from_dict(
            {"name": SEND_SUMMARY_JOB, "next_fire_at": "2024-06-10T09:00:00+00:00", "recurrence": "weekly"}
        )

        assert job == ScheduledJob(SEND_SUMMARY_JOB, _at(10, 9), Frequency.WEEKLY)
        assert job.to_dict()["next_fire_at"] == "2024-06-10T09:00:00+00:00"
