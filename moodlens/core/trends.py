"""
Trend, pattern and streak analysis over a user's mood history.

Consumes MoodScore records (one per journal entry, several per day
allowed) and computes:
- Per-metric summary: average, OLS trend direction, half-over-half
  percent change, weekly averages
- Pattern flags: weekend effect, time-of-day effect, monthly cycle
- Streak stats: current/longest daily streak, weekly/monthly averages
- Period comparison

Range resolution belongs to the caller; this module only sees the
entries it is given. Not enough data is never an error: it yields
'stable', 0.0 or False.
"""

import logging
import statistics
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from moodlens.core.models import (
    AverageMood, HistoryRecord, PatternFlags, PeriodComparison, PeriodStats, StreakStats,
    TrendDirection, TrendPoint, TrendReport, TrendSummary, MOOD_DIMENSIONS, normalize_metric
)
from moodlens.utils.numbers import round_half_up, safe_number

logger = logging.getLogger(__name__)

EntryLike = Union[HistoryRecord, Dict[str, Any]]
Period = Tuple[datetime, datetime]


# ============================================================================
# CONFIGURATION - THRESHOLDS
# ============================================================================

class TrendConfig:
    """Observable thresholds. Empirical values, flagged for a calibration pass."""

    # TREND DIRECTION
    SLOPE_THRESHOLD: float = 0.05
    MIN_TREND_POINTS: int = 3
    MIN_CHANGE_POINTS: int = 4

    # PATTERNS
    MIN_PATTERN_ENTRIES: int = 7
    WEEKEND_DAYS = (5, 6)                # Saturday, Sunday
    WEEKEND_DIFF: float = 0.5
    MORNING_HOURS = (5, 12)              # [05:00, 12:00)
    EVENING_HOURS = (17, 22)             # [17:00, 22:00)
    MIN_BUCKET_ENTRIES: int = 3          # strictly more than this per bucket
    TIME_OF_DAY_DIFF: float = 0.3
    MONTHLY_MIN_ENTRIES: int = 28
    MONTHLY_VARIANCE: float = 0.5

    # PERIOD COMPARISON
    SIGNIFICANT_DIFFERENCE: float = 0.5

    SUMMARY_PRECISION: int = 2
    STATS_PRECISION: int = 1
    NEUTRAL: float = 5.0


DEFAULT_METRICS = ("overall",)


# ============================================================================
# HELPERS
# ============================================================================

def as_records(entries: Iterable[EntryLike]) -> List[HistoryRecord]:
    return [e if isinstance(e, HistoryRecord) else HistoryRecord.from_dict(e) for e in entries]


def mean_or_zero(values: Sequence[float]) -> float:
    return statistics.mean(values) if values else 0.0


def week_start(day: date) -> date:
    """Sunday on or before day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_start(day: date) -> date:
    return day.replace(day=1)


def previous_month_start(day: date) -> date:
    return (month_start(day) - timedelta(days=1)).replace(day=1)


def build_trend_points(entries: Iterable[EntryLike]) -> List[TrendPoint]:
    """One point per entry, oldest first."""
    points = []
    for record in as_records(entries):
        score = record.mood_score
        points.append(TrendPoint(
            date=record.date,
            overall=safe_number(score.overall, TrendConfig.NEUTRAL),
            breakdown={
                name: safe_number(getattr(score, name), TrendConfig.NEUTRAL)
                for name in MOOD_DIMENSIONS
            },
        ))
    points.sort(key=lambda p: p.date)
    return points


# ============================================================================
# TREND SUMMARY
# ============================================================================

def linear_slope(values: Sequence[float]) -> float:
    """Ordinary least-squares slope of (index, value). 0.0 under 2 points."""
    n = len(values)
    if n < 2:
        return 0.0
    xs = range(n)
    x_mean = (n - 1) / 2
    y_mean = statistics.mean(values)
    num = sum((x - x_mean) * (y - y_mean) for x, y in zip(xs, values))
    den = sum((x - x_mean) ** 2 for x in xs)
    return num / den if den else 0.0


def trend_direction(values: Sequence[float]) -> TrendDirection:
    if len(values) < TrendConfig.MIN_TREND_POINTS:
        return TrendDirection.STABLE
    slope = linear_slope(values)
    if slope > TrendConfig.SLOPE_THRESHOLD:
        return TrendDirection.IMPROVING
    if slope < -TrendConfig.SLOPE_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def percent_change(values: Sequence[float]) -> float:
    """Second-half mean vs first-half mean, in percent. 0.0 under 4 points."""
    if len(values) < TrendConfig.MIN_CHANGE_POINTS:
        return 0.0
    mid = len(values) // 2
    first_avg = mean_or_zero(values[:mid])
    second_avg = mean_or_zero(values[mid:])
    if first_avg == 0:
        return 0.0
    return (second_avg - first_avg) / first_avg * 100


def weekly_averages(points: Sequence[TrendPoint], metric: str) -> List[float]:
    """Averages per calendar week (weeks start on Sunday), oldest week first."""
    weeks: Dict[date, List[float]] = {}
    for point in sorted(points, key=lambda p: p.date):
        weeks.setdefault(week_start(point.date.date()), []).append(point.value(metric))
    return [
        round_half_up(mean_or_zero(values), TrendConfig.SUMMARY_PRECISION)
        for _, values in sorted(weeks.items())
    ]


def summarize_metric(points: Sequence[TrendPoint], metric: str) -> TrendSummary:
    values = [p.value(metric) for p in points]
    precision = TrendConfig.SUMMARY_PRECISION
    return TrendSummary(
        average=round_half_up(mean_or_zero(values), precision),
        trend=trend_direction(values),
        change_percent=round_half_up(percent_change(values), precision),
        weekly_averages=weekly_averages(points, metric),
    )


# ============================================================================
# PATTERN DETECTION
# ============================================================================

def _weekend_effect(points: Sequence[TrendPoint]) -> bool:
    weekend = [p.overall for p in points if p.date.weekday() in TrendConfig.WEEKEND_DAYS]
    weekday = [p.overall for p in points if p.date.weekday() not in TrendConfig.WEEKEND_DAYS]
    if not weekend or not weekday:
        return False
    return abs(mean_or_zero(weekend) - mean_or_zero(weekday)) > TrendConfig.WEEKEND_DIFF


def _in_hours(point: TrendPoint, hours: Tuple[int, int]) -> bool:
    return hours[0] <= point.date.hour < hours[1]


def _time_of_day_effect(points: Sequence[TrendPoint]) -> bool:
    morning = [p.overall for p in points if _in_hours(p, TrendConfig.MORNING_HOURS)]
    evening = [p.overall for p in points if _in_hours(p, TrendConfig.EVENING_HOURS)]
    if len(morning) <= TrendConfig.MIN_BUCKET_ENTRIES or len(evening) <= TrendConfig.MIN_BUCKET_ENTRIES:
        return False
    return abs(mean_or_zero(morning) - mean_or_zero(evening)) > TrendConfig.TIME_OF_DAY_DIFF


def _monthly_pattern(points: Sequence[TrendPoint]) -> bool:
    if len(points) < TrendConfig.MONTHLY_MIN_ENTRIES:
        return False
    by_day: Dict[int, List[float]] = defaultdict(list)
    for point in points:
        by_day[point.date.day].append(point.overall)
    day_averages = [mean_or_zero(values) for values in by_day.values()]
    return statistics.pvariance(day_averages) > TrendConfig.MONTHLY_VARIANCE


def detect_patterns(points: Sequence[TrendPoint]) -> PatternFlags:
    """Behavioural flags over the overall score. All False under 7 entries."""
    if len(points) < TrendConfig.MIN_PATTERN_ENTRIES:
        return PatternFlags()
    return PatternFlags(
        weekend_effect=_weekend_effect(points),
        time_of_day_effect=_time_of_day_effect(points),
        monthly_pattern=_monthly_pattern(points),
    )


# ============================================================================
# PUBLIC API
# ============================================================================

def analyze_trends(entries: Iterable[EntryLike],
                   metrics: Optional[Sequence[str]] = None) -> TrendReport:
    """
    Analyzes a history slice.

    Args:
        entries: HistoryRecords (or their dict form) for the resolved range.
        metrics: Metric names to summarize (default: ["overall"]).

    Returns:
        TrendReport; empty trends/summary and all-False patterns for no entries.

    Raises:
        InvalidInputError: On an unknown metric or an unparseable record.
    """
    requested = [normalize_metric(m) for m in (metrics or DEFAULT_METRICS)]
    requested = list(dict.fromkeys(requested))

    points = build_trend_points(entries)
    if not points:
        logger.info("[TRENDS] No entries in range")
        return TrendReport()

    summary = {metric: summarize_metric(points, metric) for metric in requested}
    patterns = detect_patterns(points)

    logger.info(
        f"[TRENDS] Analyzed {len(points)} entries, metrics={requested}, "
        f"patterns={patterns.to_dict()}"
    )
    return TrendReport(trends=points, summary=summary, patterns=patterns)


def daily_moods(entries: Iterable[EntryLike]) -> Dict[date, float]:
    """Representative mood per calendar day: mean overall of that day's entries."""
    by_day: Dict[date, List[float]] = defaultdict(list)
    for point in build_trend_points(entries):
        by_day[point.date.date()].append(point.overall)
    return {day: mean_or_zero(values) for day, values in sorted(by_day.items())}


def current_streak(days: Iterable[date], today: date) -> int:
    """Consecutive days with an entry, walking back from today; 0 when today has none."""
    day_set = set(days)
    cursor = today
    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: Iterable[date]) -> int:
    ordered = sorted(set(days))
    longest = 0
    running = 0
    previous: Optional[date] = None
    for day in ordered:
        if previous is not None and (day - previous).days == 1:
            running += 1
        else:
            running = 1
        longest = max(longest, running)
        previous = day
    return longest


def _average_between(moods: Dict[date, float], start: date, end: date) -> float:
    """Mean daily mood for start <= day < end, 0.0 when empty."""
    values = [mood for day, mood in moods.items() if start <= day < end]
    return round_half_up(mean_or_zero(values), TrendConfig.STATS_PRECISION)


def compute_stats(entries: Iterable[EntryLike], today: Optional[date] = None) -> StreakStats:
    """
    Streaks and period averages over the full history.

    Args:
        entries: Every entry of the user (not a range slice).
        today: Reference day (default: date.today()).
    """
    today = today or date.today()
    records = as_records(entries)
    moods = daily_moods(records)

    this_week = week_start(today)
    this_month = month_start(today)
    last_month = previous_month_start(today)

    stats = StreakStats(
        current_streak=current_streak(moods, today),
        longest_streak=longest_streak(moods),
        total_entries=len(records),
        average_mood=AverageMood(
            this_week=_average_between(moods, this_week, this_week + timedelta(days=7)),
            this_month=_average_between(moods, this_month, (this_month + timedelta(days=32)).replace(day=1)),
            last_month=_average_between(moods, last_month, this_month),
        ),
    )
    logger.info(f"[TRENDS] Stats: {stats.to_dict()}")
    return stats


def _period_stats(points: Sequence[TrendPoint], period: Period) -> PeriodStats:
    start, end = period
    values = [p.overall for p in points if start <= p.date <= end]
    if not values:
        return PeriodStats()
    return PeriodStats(
        average=round_half_up(mean_or_zero(values), TrendConfig.SUMMARY_PRECISION),
        entries=len(values),
    )


def compare_periods(entries: Iterable[EntryLike], period1: Period, period2: Period) -> PeriodComparison:
    """Compares mean overall mood between two inclusive [start, end] periods."""
    points = build_trend_points(entries)
    first = _period_stats(points, period1)
    second = _period_stats(points, period2)
    difference = second.average - first.average
    return PeriodComparison(
        period1=first,
        period2=second,
        difference=round_half_up(difference, TrendConfig.SUMMARY_PRECISION),
        significant=abs(difference) > TrendConfig.SIGNIFICANT_DIFFERENCE,
        improvement=difference > 0,
    )
