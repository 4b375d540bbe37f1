"""Tests for the injectable clocks (finance_kernel/domain/clock.py)."""

from datetime import UTC, date, datetime

from finance_kernel.domain.clock import Clock, DeterministicClock, SystemClock


class TestDeterministicClock:
    """Tests for the deterministic clock."""

    def test_default_time(self):
        clock = DeterministicClock()
        assert clock.now() == datetime(2024, 12, 31, 12, 0, 0, tzinfo=UTC)
        assert clock.today() == date(2024, 12, 31)

    def test_returns_fixed_time(self):
        fixed_time = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)
        clock = DeterministicClock(fixed_time)

        assert clock.now() == fixed_time
        assert clock.now() == fixed_time

    def test_can_advance(self):
        clock = DeterministicClock(datetime(2024, 6, 15, 23, 59, 30, tzinfo=UTC))
        clock.advance(60)
        assert clock.now() == datetime(2024, 6, 16, 0, 0, 30, tzinfo=UTC)
        assert clock.today() == date(2024, 6, 16)

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(3600)
        target = datetime(2025, 1, 1, tzinfo=UTC)
        clock.set_time(target)
        assert clock.now() == target


class TestSystemClock:
    def test_is_timezone_aware(self):
        clock = SystemClock()
        assert isinstance(clock, Clock)
        assert clock.now().tzinfo is not None
