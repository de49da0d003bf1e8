"""
MoodLens command-line orchestrator.

Subcommands:
- analyze: score one transcript (argument or stdin) and print the analysis as JSON
- report: load a user's history, print trends, stats and insights as JSON

Supports execution modes:
- Normal: history from MongoDB, insights rephrased by Gemini
- No AI: rule-based insight templates only
- Dry run: print the Gemini prompts instead of calling the model
"""

import sys
import argparse
import json
import logging
import random
from typing import Any, Dict, List, Optional

from moodlens.adapters.clients.gemini import GeminiSummarizer
from moodlens.adapters.repositories.mongo import (
    HistoryRepository, HistoryRepositoryError, InMemoryHistoryRepository, MongoHistoryRepository
)
from moodlens.config import Settings, load_settings
from moodlens.core.engine import MoodEngine
from moodlens.core.errors import InvalidInputError
from moodlens.core.models import HistoryRecord, METRICS, ScoringMode
from moodlens.utils.logger import setup_logger

logger = logging.getLogger(__name__)


# Exit codes
EXIT_OK = 0
EXIT_STORAGE_ERROR = 1
EXIT_INVALID_INPUT = 2


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="moodlens",
        description="MoodLens: journal mood scoring and trend insights",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  moodlens analyze "I feel great and energized today"
  echo "Deadline stress again" | moodlens analyze --basic --seed 7
  moodlens report --user-id alice --range month --metrics overall stress
  moodlens report --user-id alice --history-file entries.json --no-ai
"""
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Score a single transcript")
    analyze.add_argument("text", nargs="?", help="Transcript (read from stdin when omitted)")
    analyze.add_argument("--basic", action="store_true", help="Keyword-tier scoring only")
    analyze.add_argument("--seed", type=int, default=None, help="Seed for basic-mode jitter")

    report = subparsers.add_parser("report", help="Trends, stats and insights for a user")
    report.add_argument("--user-id", required=True, help="User whose history to load")
    report.add_argument("--range", dest="range_name", default="month",
                        choices=["week", "month", "year", "all"], help="History window")
    report.add_argument("--metrics", nargs="+", default=["overall"],
                        help=f"Metrics to summarize ({', '.join(METRICS)})")
    report.add_argument("--history-file", default=None,
                        help="Read entries from a JSON list instead of MongoDB")
    report.add_argument("--no-ai", action="store_true", help="Skip Gemini, use insight templates")
    report.add_argument("--dry-run", action="store_true",
                        help="Print the Gemini prompts instead of calling the model")

    return parser.parse_args(argv)


# ============================================================================
# COMMANDS
# ============================================================================

def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def run_analyze(args: argparse.Namespace, engine: MoodEngine) -> int:
    text = args.text if args.text is not None else sys.stdin.read()
    mode = ScoringMode.BASIC if args.basic else ScoringMode.RICH
    rng = random.Random(args.seed) if args.seed is not None else None

    result = engine.analyze_text(text, mode=mode, rng=rng)
    payload = result.to_dict()
    payload["insights"] = [i.to_dict() for i in engine.entry_insights(result)]
    _print_json(payload)
    return EXIT_OK


def _load_history_file(path: str, user_id: str) -> InMemoryHistoryRepository:
    with open(path, encoding="utf-8") as f:
        documents = json.load(f)
    records = [HistoryRecord.from_dict(doc) for doc in documents]
    logger.info(f"Loaded {len(records)} entries from {path}")
    return InMemoryHistoryRepository({user_id: records})


def _build_summarizer(args: argparse.Namespace, settings: Settings) -> Optional[GeminiSummarizer]:
    if args.no_ai or args.dry_run:
        return None
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY found, using insight templates")
        return None
    return GeminiSummarizer(settings.gemini_api_key, request_timeout=settings.summary_timeout)


def run_report(args: argparse.Namespace, settings: Settings) -> int:
    repository: HistoryRepository
    if args.history_file:
        repository = _load_history_file(args.history_file, args.user_id)
    else:
        repository = MongoHistoryRepository(uri=settings.mongodb_uri, database=settings.database)

    engine = MoodEngine(
        repository=repository,
        summarizer=_build_summarizer(args, settings),
        insight_limit=settings.insight_limit,
        summary_timeout=settings.summary_timeout,
    )
    report = engine.build_report(
        args.user_id, args.range_name, args.metrics, dry_run=args.dry_run
    )
    if args.dry_run:
        logger.info(f"[DRY RUN] Generated {len(report['prompts'])} prompts, Gemini not called")

    _print_json(report)
    return EXIT_OK


# ============================================================================
# MAIN
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = parse_arguments(argv)
    settings = load_settings()
    setup_logger("moodlens", settings.log_level, settings.log_dir)

    try:
        if args.command == "analyze":
            return run_analyze(args, MoodEngine())
        return run_report(args, settings)
    except InvalidInputError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT
    except HistoryRepositoryError as e:
        logger.error(f"History unavailable: {e}")
        return EXIT_STORAGE_ERROR


if __name__ == "__main__":
    sys.exit(main())
