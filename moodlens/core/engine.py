"""
MoodEngine facade.

Holds the collaborators (history repository, optional summarizer) and
exposes the single-entry and history operations. The engine keeps no
state between calls; every operation works on the entries it is given
or fetches them fresh from the repository.
"""

import logging
import random
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from moodlens.core import insights as insight_rules
from moodlens.core import synthesizer, trends
from moodlens.core.errors import InvalidInputError
from moodlens.core.models import (
    AnalysisResult, Insight, ScoringMode, StreakStats, TrendReport
)
from moodlens.core.trends import EntryLike

logger = logging.getLogger(__name__)


RANGE_DAYS = {
    'week': 7,
    'month': 30,
    'year': 365,
}
EPOCH = datetime(1970, 1, 1)


def resolve_date_range(range_name: str = "month",
                       now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Turns a named range into inclusive [start, end] bounds ending at `now`.

    week/month/year cover the last 7/30/365 days; 'all' starts at the epoch.
    """
    now = now or datetime.now()
    key = (range_name or "").strip().lower()
    if key == 'all':
        return EPOCH, now
    if key not in RANGE_DAYS:
        raise InvalidInputError(
            f"Unknown range '{range_name}'. Expected one of: {', '.join(list(RANGE_DAYS) + ['all'])}"
        )
    return now - timedelta(days=RANGE_DAYS[key]), now


class MoodEngine:
    """
    Entry point for request layers.

    Args:
        repository: History source with fetch_entries(user_id, start, end).
            Only needed by build_report.
        summarizer: Optional generative collaborator for insight phrasing.
        insight_limit: Maximum insights per composition.
        summary_timeout: Seconds allowed per summarizer call.
    """

    def __init__(self, repository=None, summarizer: Optional[insight_rules.Summarizer] = None,
                 insight_limit: int = insight_rules.InsightConfig.LIMIT,
                 summary_timeout: float = insight_rules.InsightConfig.SUMMARY_TIMEOUT):
        self.repository = repository
        self.summarizer = summarizer
        self.insight_limit = insight_limit
        self.summary_timeout = summary_timeout

    # ------------------------------------------------------------------
    # Single entry
    # ------------------------------------------------------------------

    def analyze_text(self, text: str, mode: ScoringMode = ScoringMode.RICH,
                     rng: Optional[random.Random] = None) -> AnalysisResult:
        return synthesizer.analyze_text(text, mode=mode, rng=rng)

    def entry_insights(self, result: AnalysisResult) -> List[Insight]:
        return insight_rules.entry_insights(result.mood_score)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def analyze_history(self, entries: Iterable[EntryLike],
                        metrics: Optional[Sequence[str]] = None) -> TrendReport:
        return trends.analyze_trends(entries, metrics)

    def compute_stats(self, entries: Iterable[EntryLike], today: Optional[date] = None) -> StreakStats:
        return trends.compute_stats(entries, today)

    def compose_insights(self, history: TrendReport, stats: StreakStats,
                         recent_entries: Iterable[EntryLike] = (),
                         use_summarizer: bool = True,
                         now: Optional[datetime] = None) -> List[Insight]:
        return insight_rules.compose_insights(
            history, stats,
            recent_entries=recent_entries,
            summarizer=self.summarizer if use_summarizer else None,
            limit=self.insight_limit,
            timeout=self.summary_timeout,
            now=now,
        )

    def build_report(self, user_id: str, range_name: str = "month",
                     metrics: Optional[Sequence[str]] = None,
                     use_summarizer: bool = True,
                     dry_run: bool = False,
                     now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Fetches a user's history and returns trends, stats and insights.

        Trends and insights use the requested range; streak stats always
        use the full history. With dry_run the summarizer is not called and
        the report carries the prompts it would have received.
        """
        if self.repository is None:
            raise RuntimeError("MoodEngine.build_report requires a history repository")

        now = now or datetime.now()
        start, end = resolve_date_range(range_name, now)
        logger.info(f"[ENGINE] Building report for user={user_id} range={range_name} ({start:%Y-%m-%d} -> {end:%Y-%m-%d})")

        ranged = trends.as_records(self.repository.fetch_entries(user_id, start, end))
        full = trends.as_records(self.repository.fetch_entries(user_id, EPOCH, end))

        history = self.analyze_history(ranged, metrics)
        stats = self.compute_stats(full, today=now.date())
        insights = self.compose_insights(
            history, stats, ranged, use_summarizer=use_summarizer and not dry_run, now=now
        )

        report = {
            "user_id": user_id,
            "range": {"name": range_name, "start": start.isoformat(), "end": end.isoformat()},
            "history": history.to_dict(),
            "stats": stats.to_dict(),
            "insights": [i.to_dict() for i in insights],
        }
        if dry_run:
            builder = insight_rules.InsightPromptBuilder(stats)
            report["prompts"] = [builder.build(i) for i in insights]
        return report
