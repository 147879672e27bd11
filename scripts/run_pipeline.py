"""Run the news pipeline from the command line.

Usage:
    python -m scripts.run_pipeline                  # Fetch new articles
    python -m scripts.run_pipeline translate        # Translate the backlog
    python -m scripts.run_pipeline both             # Fetch, then translate
    python -m scripts.run_pipeline reset            # Requeue failed translations
    python -m scripts.run_pipeline translate --batch-size 10
"""

import argparse
import asyncio
import logging
import sys

from newsfeed.config import get_settings
from newsfeed.services.runner import RunMode, RunReport, run


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tech news ingestion and translation")
    parser.add_argument(
        "mode",
        nargs="?",
        default=RunMode.FETCH.value,
        choices=[m.value for m in RunMode],
        help="stage(s) to run (default: fetch)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="articles to translate this run (default: TRANSLATION_BATCH_SIZE)",
    )
    return parser.parse_args(argv)


def _print_report(report: RunReport) -> None:
    print(f"\nRun complete ({report.mode.value}) in {report.elapsed_seconds:.1f}s")

    for outcome in report.sources:
        line = (
            f"  {outcome.source_name:<14} new={outcome.new_count} "
            f"dup={outcome.duplicate_count} skipped={outcome.skipped_count} "
            f"errors={outcome.error_count}"
        )
        if outcome.error:
            line += f"  ({outcome.error})"
        print(line)

    if report.mode in (RunMode.TRANSLATE, RunMode.BOTH):
        print(f"  Translation attempted: {report.translation_attempted}")
    if report.mode is RunMode.RESET:
        print(f"  Reset: {report.reset}")

    print(f"\n  Total:        {report.total_articles}")
    print(f"  Translated:   {report.translated_articles}")
    print(f"  Untranslated: {report.untranslated_articles}")
    for source_name, count in sorted(report.translated_by_source.items()):
        print(f"    {source_name}: {count}")


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.batch_size is not None and args.batch_size < 1:
        print("--batch-size must be positive", file=sys.stderr)
        return 1

    try:
        report = await run(args.mode, batch_size=args.batch_size)
    except Exception as e:
        # Already logged with traceback by the runner
        print(f"Run failed: {e}", file=sys.stderr)
        return 1

    _print_report(report)
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(main()))
