"""Daily activity streak bookkeeping."""

from __future__ import annotations

from datetime import date

from ayanfe.db.models import User
from ayanfe.users.service import touch_daily_streak


def _user(**kwargs) -> User:
    fields = {"username": "u", "current_streak": 0, "longest_streak": 0, "last_active_on": None}
    fields.update(kwargs)
    return User(**fields)


class TestTouchDailyStreak:
    """Same day, next day, gap, and out-of-order days."""

    def test_first_activity_starts_at_one(self):
        user = _user()
        assert touch_daily_streak(user, date(2026, 10, 19)) == 1
        assert user.last_active_on == date(2026, 10, 19)
        assert user.longest_streak == 1

    def test_same_day_unchanged(self):
        user = _user(current_streak=3, longest_streak=3, last_active_on=date(2026, 10, 19))
        assert touch_daily_streak(user, date(2026, 10, 19)) == 3

    def test_next_day_increments(self):
        user = _user(current_streak=3, longest_streak=3, last_active_on=date(2026, 10, 19))
        assert touch_daily_streak(user, date(2026, 10, 20)) == 4
        assert user.longest_streak == 4

    def test_gap_resets_but_keeps_longest(self):
        user = _user(current_streak=4, longest_streak=6, last_active_on=date(2026, 10, 10))
        assert touch_daily_streak(user, date(2026, 10, 19)) == 1
        assert user.longest_streak == 6

    def test_month_boundary(self):
        user = _user(current_streak=2, longest_streak=2, last_active_on=date(2026, 10, 31))
        assert touch_daily_streak(user, date(2026, 11, 1)) == 3

    def test_earlier_day_keeps_state(self):
        user = _user(current_streak=2, longest_streak=2, last_active_on=date(2026, 10, 19))
        assert touch_daily_streak(user, date(2026, 10, 18)) == 2
        assert user.last_active_on == date(2026, 10, 19)
