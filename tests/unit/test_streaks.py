
from datetime import date, datetime

from moodlens.core.trends import compute_stats, current_streak, daily_moods, longest_streak

from tests.builders import make_record

# 1, 2, 3, 5, 6 January 2024 (the 4th is missing)
ENTRY_DAYS = [date(2024, 1, d) for d in (1, 2, 3, 5, 6)]


def history_on(days, overall=6.0, hour=21):
    return [make_record(datetime(d.year, d.month, d.day, hour), overall) for d in days]


class TestStreaks:
    """Test suite for streak counting."""

    # ========================================================================
    # 1. CURRENT STREAK
    # ========================================================================

    def test_current_streak_from_today(self):
        assert current_streak(ENTRY_DAYS, today=date(2024, 1, 6)) == 2

    def test_no_entry_today_resets_streak(self):
        """Entries up to the 6th, none yet on the 7th."""
        assert current_streak(ENTRY_DAYS, today=date(2024, 1, 7)) == 0

    def test_compute_stats_without_entry_today(self):
        stats = compute_stats(history_on(ENTRY_DAYS), today=date(2024, 1, 7))

        assert stats.current_streak == 0
        assert stats.longest_streak == 3

    def test_missed_day_breaks_streak(self):
        assert current_streak(ENTRY_DAYS, today=date(2024, 1, 8)) == 0

    def test_empty(self):
        assert current_streak([], today=date(2024, 1, 8)) == 0
        assert longest_streak([]) == 0

    # ========================================================================
    # 2. LONGEST STREAK
    # ========================================================================

    def test_longest_streak(self):
        assert longest_streak(ENTRY_DAYS) == 3

    def test_longest_streak_across_month_boundary(self):
        days = [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 3)]
        assert longest_streak(days) == 3

    def test_duplicate_days_count_once(self):
        assert longest_streak(ENTRY_DAYS + ENTRY_DAYS) == 3


class TestComputeStats:
    """Test suite for compute_stats."""

    def test_stats_over_history(self):
        stats = compute_stats(history_on(ENTRY_DAYS), today=date(2024, 1, 6))

        assert stats.current_streak == 2
        assert stats.longest_streak == 3
        assert stats.total_entries == 5
        # Saturday 6 Jan: the week started on Sunday 31 Dec
        assert stats.average_mood.this_week == 6.0
        assert stats.average_mood.this_month == 6.0
        assert stats.average_mood.last_month == 0.0

    def test_same_day_entries_averaged(self):
        history = [
            make_record(datetime(2024, 1, 6, 8), 4.0),
            make_record(datetime(2024, 1, 6, 20), 6.0),
            make_record(datetime(2024, 1, 5, 20), 8.0),
        ]
        moods = daily_moods(history)
        stats = compute_stats(history, today=date(2024, 1, 6))

        assert moods[date(2024, 1, 6)] == 5.0
        assert stats.total_entries == 3
        assert stats.current_streak == 2
        # mean of daily moods (5.0, 8.0)
        assert stats.average_mood.this_week == 6.5

    def test_last_month(self):
        history = history_on([date(2023, 12, 20), date(2023, 12, 21)], overall=4.0)
        history += history_on([date(2024, 1, 2)], overall=7.0)
        stats = compute_stats(history, today=date(2024, 1, 10))

        assert stats.average_mood.last_month == 4.0
        assert stats.average_mood.this_month == 7.0
        assert stats.average_mood.this_week == 0.0
        assert stats.current_streak == 0

    def test_empty_history(self):
        stats = compute_stats([], today=date(2024, 1, 10))

        assert stats.current_streak == 0
        assert stats.longest_streak == 0
        assert stats.total_entries == 0
        assert stats.average_mood.this_month == 0.0
