"""
Insight composition.

Turns trend/pattern/streak findings into a short list of Insight
records. Each rule carries a fixed confidence constant; nothing here is
a statistical test.

An optional generative summarizer may rephrase descriptions and action
items. Every call runs under a timeout; a timeout or error switches the
rest of the composition to the rule-based templates. Insights are never
dropped because the summarizer is unavailable.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence

from moodlens.core.errors import UpstreamSummaryUnavailable
from moodlens.core.models import (
    HistoryRecord, Insight, InsightType, MoodScore, PatternFlags, StreakStats,
    TrendDirection, TrendReport, TrendSummary
)
from moodlens.core.trends import EntryLike, TrendConfig, as_records, mean_or_zero

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION - RULE CONFIDENCES & THRESHOLDS
# ============================================================================

class InsightConfig:
    """Per-rule confidence constants and thresholds."""

    LIMIT: int = 5
    SUMMARY_TIMEOUT: float = 5.0

    CONFIDENCE_OVERALL_IMPROVING: float = 0.80
    CONFIDENCE_OVERALL_DECLINING: float = 0.75
    CONFIDENCE_STRESS_TREND: float = 0.70
    CONFIDENCE_DIMENSION_TREND: float = 0.65
    CONFIDENCE_WEEKEND: float = 0.85
    CONFIDENCE_TIME_OF_DAY: float = 0.70
    CONFIDENCE_MONTHLY: float = 0.60
    CONFIDENCE_STRESS_SPIKE: float = 0.70
    CONFIDENCE_STREAK: float = 0.90
    CONFIDENCE_MONTH_OVER_MONTH: float = 0.75
    CONFIDENCE_LAPSED: float = 0.50

    # ANOMALY: latest stress above 1.5x the mean of the preceding entries
    STRESS_SPIKE_RATIO: float = 1.5
    STRESS_SPIKE_MIN_BASELINE: int = 3

    STREAK_MILESTONE: int = 7
    MONTH_OVER_MONTH_DIFF: float = 0.5

    # PER-ENTRY THRESHOLDS
    ENTRY_HIGH_STRESS: float = 7.0
    ENTRY_LOW_STRESS: float = 3.0
    ENTRY_HIGH_HAPPINESS: float = 8.0
    ENTRY_LOW_ENERGY: float = 3.0
    ENTRY_EXCELLENT_OVERALL: float = 7.5
    CONFIDENCE_ENTRY: float = 0.60


_DIMENSION_LABELS = {
    'happiness': "Happiness",
    'clarity': "Mental clarity",
    'energy': "Energy",
    'emotional_stability': "Emotional stability",
}


class Summarizer(Protocol):
    """Generative-text collaborator. Best effort, no availability guarantee."""

    def summarize(self, prompt: str) -> str:
        ...


# ============================================================================
# RULES
# ============================================================================

def _trend_insights(summary: dict, now: datetime) -> List[Insight]:
    insights: List[Insight] = []

    overall: Optional[TrendSummary] = summary.get('overall')
    if overall is not None:
        if overall.trend is TrendDirection.IMPROVING:
            insights.append(Insight(
                type=InsightType.TREND,
                title="Your mood is trending upward",
                description=(f"Your overall mood averaged {overall.average}/10 and changed "
                             f"by {overall.change_percent:+.1f}% over this period."),
                confidence=InsightConfig.CONFIDENCE_OVERALL_IMPROVING,
                action_items=["Note which habits coincided with the better days",
                              "Keep the routines that are working"],
                created_at=now,
            ))
        elif overall.trend is TrendDirection.DECLINING:
            insights.append(Insight(
                type=InsightType.WARNING,
                title="Your mood has been declining",
                description=(f"Your overall mood averaged {overall.average}/10 and changed "
                             f"by {overall.change_percent:+.1f}% over this period."),
                confidence=InsightConfig.CONFIDENCE_OVERALL_DECLINING,
                action_items=["Look back at recent entries for recurring stressors",
                              "Schedule something restorative this week",
                              "Reach out to someone you trust"],
                created_at=now,
            ))

    # A rising stress slope is bad news, so the label reads inverted
    stress: Optional[TrendSummary] = summary.get('stress')
    if stress is not None and stress.trend is TrendDirection.IMPROVING:
        insights.append(Insight(
            type=InsightType.WARNING,
            title="Stress is building up",
            description=f"Your stress scores have been rising (average {stress.average}/10).",
            confidence=InsightConfig.CONFIDENCE_STRESS_TREND,
            action_items=["Take 5 deep breaths", "Go for a short walk", "Protect time for rest"],
            created_at=now,
        ))
    elif stress is not None and stress.trend is TrendDirection.DECLINING:
        insights.append(Insight(
            type=InsightType.IMPROVEMENT,
            title="Stress is easing",
            description=f"Your stress scores have been falling (average {stress.average}/10).",
            confidence=InsightConfig.CONFIDENCE_STRESS_TREND,
            action_items=["Note what helped you unwind", "Share your coping strategies"],
            created_at=now,
        ))

    for metric, label in _DIMENSION_LABELS.items():
        item: Optional[TrendSummary] = summary.get(metric)
        if item is None or item.trend is TrendDirection.STABLE:
            continue
        if item.trend is TrendDirection.IMPROVING:
            insights.append(Insight(
                type=InsightType.IMPROVEMENT,
                title=f"{label} is improving",
                description=f"{label} has been climbing (average {item.average}/10).",
                confidence=InsightConfig.CONFIDENCE_DIMENSION_TREND,
                action_items=[f"Notice what supports your {label.lower()}"],
                created_at=now,
            ))
        else:
            insights.append(Insight(
                type=InsightType.ADVICE,
                title=f"{label} has been slipping",
                description=f"{label} has been drifting down (average {item.average}/10).",
                confidence=InsightConfig.CONFIDENCE_DIMENSION_TREND,
                action_items=[f"Plan one small thing that usually lifts your {label.lower()}"],
                created_at=now,
            ))
    return insights


def _pattern_insights(patterns: PatternFlags, records: Sequence[HistoryRecord],
                      now: datetime) -> List[Insight]:
    insights: List[Insight] = []

    if patterns.weekend_effect:
        weekend = [r.mood_score.overall for r in records if r.date.weekday() in TrendConfig.WEEKEND_DAYS]
        weekday = [r.mood_score.overall for r in records if r.date.weekday() not in TrendConfig.WEEKEND_DAYS]
        if weekend and weekday:
            better = "higher" if mean_or_zero(weekend) > mean_or_zero(weekday) else "lower"
            description = (f"Your mood tends to be {better} on weekends "
                           f"({mean_or_zero(weekend):.1f} vs {mean_or_zero(weekday):.1f} on weekdays).")
        else:
            description = "Your mood differs noticeably between weekends and weekdays."
        insights.append(Insight(
            type=InsightType.PATTERN,
            title="Weekend mood shift",
            description=description,
            confidence=InsightConfig.CONFIDENCE_WEEKEND,
            action_items=["Consider what contributes to the difference between weekends and weekdays",
                          "Bring one weekend habit into your week"],
            created_at=now,
        ))

    if patterns.time_of_day_effect:
        insights.append(Insight(
            type=InsightType.PATTERN,
            title="Your mood depends on the time of day",
            description="Entries written in the morning and in the evening score differently.",
            confidence=InsightConfig.CONFIDENCE_TIME_OF_DAY,
            action_items=["Compare your morning and evening routines",
                          "Schedule demanding tasks in your stronger half of the day"],
            created_at=now,
        ))

    if patterns.monthly_pattern:
        insights.append(Insight(
            type=InsightType.PATTERN,
            title="A monthly rhythm in your mood",
            description="Your mood varies with the day of the month more than chance would suggest.",
            confidence=InsightConfig.CONFIDENCE_MONTHLY,
            action_items=["Check whether recurring dates (pay day, deadlines) line up with dips"],
            created_at=now,
        ))
    return insights


def _stress_spike(records: Sequence[HistoryRecord], now: datetime) -> Optional[Insight]:
    if len(records) < InsightConfig.STRESS_SPIKE_MIN_BASELINE + 1:
        return None
    ordered = sorted(records, key=lambda r: r.date)
    latest = ordered[-1]
    baseline = mean_or_zero([r.mood_score.stress for r in ordered[:-1]])
    if baseline <= 0 or latest.mood_score.stress <= baseline * InsightConfig.STRESS_SPIKE_RATIO:
        return None
    return Insight(
        type=InsightType.ANOMALY,
        title="Unusual stress spike",
        description=(f"Your latest entry scored {latest.mood_score.stress}/10 on stress, "
                     f"well above your recent average of {baseline:.1f}."),
        confidence=InsightConfig.CONFIDENCE_STRESS_SPIKE,
        action_items=["Identify what changed today", "Take a break before your next task",
                      "Try a short breathing exercise"],
        created_at=now,
    )


def _streak_insights(stats: StreakStats, now: datetime) -> List[Insight]:
    insights: List[Insight] = []

    if stats.current_streak >= InsightConfig.STREAK_MILESTONE:
        insights.append(Insight(
            type=InsightType.IMPROVEMENT,
            title=f"{stats.current_streak}-day journaling streak",
            description=(f"You've reflected {stats.current_streak} days in a row "
                         f"(longest streak: {stats.longest_streak} days)."),
            confidence=InsightConfig.CONFIDENCE_STREAK,
            action_items=["Keep your reflection time at the same hour each day"],
            created_at=now,
        ))
    elif stats.current_streak == 0 and stats.total_entries > 0:
        insights.append(Insight(
            type=InsightType.ADVICE,
            title="No entry yet today",
            description=("Your streak starts again with today's entry "
                         f"(longest streak: {stats.longest_streak} days)."),
            confidence=InsightConfig.CONFIDENCE_LAPSED,
            action_items=["Record a short reflection today"],
            created_at=now,
        ))

    mood = stats.average_mood
    if mood.this_month > 0 and mood.last_month > 0:
        difference = mood.this_month - mood.last_month
        if difference > InsightConfig.MONTH_OVER_MONTH_DIFF:
            insights.append(Insight(
                type=InsightType.IMPROVEMENT,
                title="Better month than the last",
                description=(f"Your average mood is {mood.this_month}/10 this month, "
                             f"up from {mood.last_month}/10 last month."),
                confidence=InsightConfig.CONFIDENCE_MONTH_OVER_MONTH,
                action_items=["Celebrate this progress", "Note what contributed to it"],
                created_at=now,
            ))
        elif difference < -InsightConfig.MONTH_OVER_MONTH_DIFF:
            insights.append(Insight(
                type=InsightType.WARNING,
                title="A harder month than the last",
                description=(f"Your average mood is {mood.this_month}/10 this month, "
                             f"down from {mood.last_month}/10 last month."),
                confidence=InsightConfig.CONFIDENCE_MONTH_OVER_MONTH,
                action_items=["Be gentle with yourself", "Plan one restorative activity"],
                created_at=now,
            ))
    return insights


def entry_insights(score: MoodScore, now: Optional[datetime] = None) -> List[Insight]:
    """Immediate feedback on a single entry's scores."""
    now = now or datetime.now()
    cfg = InsightConfig
    insights: List[Insight] = []

    if score.stress >= cfg.ENTRY_HIGH_STRESS:
        insights.append(Insight(
            InsightType.WARNING, "High Stress Detected",
            "Your stress levels are elevated. Consider taking a break or practicing mindfulness.",
            cfg.CONFIDENCE_ENTRY,
            ["Take 5 deep breaths", "Go for a short walk", "Listen to calming music"], now,
        ))
    elif score.stress <= cfg.ENTRY_LOW_STRESS:
        insights.append(Insight(
            InsightType.IMPROVEMENT, "Low Stress Levels",
            "You seem to be managing stress well. Keep up the good work!",
            cfg.CONFIDENCE_ENTRY,
            ["Maintain current routine", "Share your coping strategies"], now,
        ))

    if score.happiness >= cfg.ENTRY_HIGH_HAPPINESS:
        insights.append(Insight(
            InsightType.IMPROVEMENT, "Positive Mood",
            "You're in a great mood! This is a wonderful state to be in.",
            cfg.CONFIDENCE_ENTRY,
            ["Document what's making you happy", "Share your joy with others"], now,
        ))

    if score.energy <= cfg.ENTRY_LOW_ENERGY:
        insights.append(Insight(
            InsightType.ADVICE, "Low Energy",
            "Your energy seems low. Consider rest or gentle activities.",
            cfg.CONFIDENCE_ENTRY,
            ["Ensure you're getting enough sleep", "Check your nutrition", "Gentle exercise"], now,
        ))

    if score.overall >= cfg.ENTRY_EXCELLENT_OVERALL:
        insights.append(Insight(
            InsightType.IMPROVEMENT, "Excellent Well-being",
            "Your overall mood indicators are very positive!",
            cfg.CONFIDENCE_ENTRY,
            ["Celebrate this achievement", "Note what contributed to this"], now,
        ))
    return insights


# ============================================================================
# GENERATIVE PHRASING
# ============================================================================

class InsightPromptBuilder:
    """Builds the rephrasing prompt for one insight."""

    def __init__(self, stats: StreakStats):
        self.stats = stats

    def build(self, insight: Insight) -> str:
        actions = "\n".join(f"- {item}" for item in insight.action_items)
        mood = self.stats.average_mood
        return f"""
### ROLE
You are a supportive journaling coach. Rewrite the finding below for the user.

### FINDING ({insight.type.value.upper()})
- Title: {insight.title}
- Draft description: {insight.description}
- Draft action items:
{actions}

### CONTEXT
- Current streak: {self.stats.current_streak} days (longest: {self.stats.longest_streak})
- Average mood this week: {mood.this_week}/10, this month: {mood.this_month}/10, last month: {mood.last_month}/10

### FORMAT
One or two warm, concrete sentences for the description.
Then up to three action items, one per line, each starting with "- ".
No headings, no diagnosis, no medical claims.
"""


def _parse_generated(insight: Insight, text: str) -> Insight:
    """Splits model output into description and '- ' action items; keeps templates for missing parts."""
    description_lines = []
    items = []
    for raw_line in text.strip().splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line[0] in "-*•":
            item = line.lstrip("-*• ").strip()
            if item:
                items.append(item)
        else:
            description_lines.append(line)

    return replace(
        insight,
        description=" ".join(description_lines) or insight.description,
        action_items=items[:3] or insight.action_items,
    )


def _summarize_with_timeout(executor: ThreadPoolExecutor, summarizer: Summarizer,
                            prompt: str, timeout: float) -> str:
    future = executor.submit(summarizer.summarize, prompt)
    try:
        text = future.result(timeout=timeout)
    except FuturesTimeout as e:
        future.cancel()
        raise UpstreamSummaryUnavailable(f"Summarizer timed out after {timeout}s") from e
    except UpstreamSummaryUnavailable:
        raise
    except Exception as e:
        raise UpstreamSummaryUnavailable(f"Summarizer failed: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise UpstreamSummaryUnavailable("Summarizer returned an empty response")
    return text


def _rephrase(insights: List[Insight], summarizer: Summarizer, stats: StreakStats,
              timeout: float) -> List[Insight]:
    builder = InsightPromptBuilder(stats)
    rephrased: List[Insight] = []
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="insight-summary")
    available = True
    try:
        for insight in insights:
            if not available:
                rephrased.append(insight)
                continue
            try:
                text = _summarize_with_timeout(executor, summarizer, builder.build(insight), timeout)
                rephrased.append(_parse_generated(insight, text))
            except UpstreamSummaryUnavailable as e:
                logger.warning(f"[INSIGHTS] Summarizer unavailable, using templates (Non-blocking): {e}")
                available = False
                rephrased.append(insight)
    finally:
        # Abandoned calls finish on their own, bounded by the summarizer's request timeout
        executor.shutdown(wait=False)
    return rephrased


# ============================================================================
# PUBLIC API
# ============================================================================

def compose_insights(history: TrendReport, stats: StreakStats,
                     recent_entries: Iterable[EntryLike] = (),
                     summarizer: Optional[Summarizer] = None,
                     limit: int = InsightConfig.LIMIT,
                     timeout: float = InsightConfig.SUMMARY_TIMEOUT,
                     now: Optional[datetime] = None) -> List[Insight]:
    """
    Maps statistical findings to at most `limit` insights, most confident first.

    Args:
        history: Result of analyze_trends.
        stats: Result of compute_stats.
        recent_entries: Latest entries, used for anomaly and pattern detail.
        summarizer: Optional generative collaborator for richer prose.
        limit: Maximum number of insights.
        timeout: Seconds allowed per summarizer call. A call that overruns is
            abandoned but its worker thread is still joined at interpreter exit,
            so the summarizer must bound its own request (GeminiSummarizer
            takes request_timeout; the CLI passes the same budget).
        now: Timestamp stamped on each insight (default: now).
    """
    now = now or datetime.now()
    records = as_records(recent_entries)

    candidates: List[Insight] = []
    candidates.extend(_trend_insights(history.summary, now))
    candidates.extend(_pattern_insights(history.patterns, records, now))
    spike = _stress_spike(records, now)
    if spike is not None:
        candidates.append(spike)
    candidates.extend(_streak_insights(stats, now))

    # sorted() is stable: equal confidences keep rule order
    selected = sorted(candidates, key=lambda i: i.confidence, reverse=True)[:max(limit, 0)]

    if summarizer is not None and selected:
        selected = _rephrase(selected, summarizer, stats, timeout)

    logger.info(f"[INSIGHTS] Composed {len(selected)} insights from {len(candidates)} findings")
    return selected
