"""Batch harvester that walks the AMC catalog and scrapes every problem.

Usage:
    # Smoke test on 10 random catalog entries
    python -m backend.scraper.harvester --test --output ./data

    # Full catalog (newest first); Ctrl+C stops after the current task
    python -m backend.scraper.harvester --output ./data
"""
import asyncio
import json
import logging
import signal
from pathlib import Path
from typing import Awaitable, Callable, Optional

from backend import config
from backend.scraper.models import ExamLevel, PrefetchStats, PrefetchTask, Problem

logger = logging.getLogger(__name__)

ProblemFetcher = Callable[[str, str, ExamLevel], Awaitable[Optional[Problem]]]
ProgressCallback = Callable[[PrefetchStats, str, Optional[Problem]], None]


class BatchHarvester:
    """Process prefetch tasks one at a time with a fixed pause between them.

    Each task ends in success, a soft failure (the scraper returned None) or a
    hard failure (it raised). Failures are counted and the run continues; only
    the stop signal ends a run early, and only between tasks.
    """

    def __init__(self, fetch_problem: ProblemFetcher, delay: float = config.HARVEST_DELAY):
        self.fetch_problem = fetch_problem
        self.delay = delay

    async def run(
        self,
        queue: list[PrefetchTask],
        on_progress: ProgressCallback,
        stop_signal: Optional[asyncio.Event] = None,
    ) -> PrefetchStats:
        stats = PrefetchStats(total=len(queue))

        for i, task in enumerate(queue):
            if stop_signal is not None and stop_signal.is_set():
                logger.info("Harvest stopped before task %d/%d", i + 1, len(queue))
                break

            stats.current_year = task.year
            stats.current_exam = task.exam_type
            on_progress(
                stats.model_copy(),
                f"Fetching [{i + 1}/{len(queue)}]: {task.exam_type} #{task.problem_number}...",
                None,
            )

            try:
                problem = await self.fetch_problem(task.url, task.id, task.level)
            except Exception as e:
                stats.failed += 1
                logger.exception("Harvest task %s raised", task.id)
                on_progress(stats.model_copy(), f"ERROR: {task.id} - {e}", None)
            else:
                if problem is not None:
                    stats.success += 1
                    on_progress(stats.model_copy(), f"SUCCESS: {task.id}", problem)
                else:
                    stats.failed += 1
                    on_progress(stats.model_copy(), f"FAILED: {task.id} (No data returned)", None)

            await asyncio.sleep(self.delay)

        return stats.model_copy()


def save_problems(problems: list[Problem], output_dir: Path, filename: str = "problems.json") -> Path:
    """Save problems to JSON file."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / filename
    problems_data = [p.model_dump(mode="json") for p in problems]

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(problems_data, f, indent=2, ensure_ascii=False)

    print(f"● Saved {len(problems)} problems to {output_path}")
    return output_path


async def harvest(queue: list[PrefetchTask], delay: float, use_llm: bool) -> tuple[PrefetchStats, list[Problem]]:
    """Run a harvest from the command line, printing progress as it goes."""
    from backend.ai.client import OllamaClient
    from backend.scraper.aops_scraper import AopsScraper

    scraper = AopsScraper(llm=OllamaClient() if use_llm else None)
    harvester = BatchHarvester(scraper.fetch_problem, delay=delay)
    problems: list[Problem] = []
    stop = asyncio.Event()

    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, stop.set)
    except (NotImplementedError, RuntimeError):
        pass

    def on_progress(stats: PrefetchStats, message: str, problem: Optional[Problem] = None) -> None:
        if problem is not None:
            problems.append(problem)
        marker = "✓" if message.startswith("SUCCESS") else "✗" if message.startswith(("FAILED", "ERROR")) else "↓"
        print(f"  {marker} [{stats.success} ok / {stats.failed} failed] {message}")

    stats = await harvester.run(queue, on_progress, stop)
    return stats, problems


def main():
    """Main entry point for harvesting."""
    import argparse

    from backend.scraper.catalog import generate_full_catalog, generate_test_queue

    parser = argparse.ArgumentParser(description="Harvest AMC problems from the AoPS wiki")
    parser.add_argument("--test", action="store_true", help="Harvest 10 random catalog entries")
    parser.add_argument("--limit", type=int, default=None, help="Stop after the first N catalog entries")
    parser.add_argument(
        "--year",
        type=int,
        default=config.CURRENT_YEAR,
        help=f"Newest contest year to include (default: {config.CURRENT_YEAR})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=config.DATA_PATH.parent,
        help="Output directory for problems.json",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=config.HARVEST_DELAY,
        help=f"Seconds to wait between pages (default: {config.HARVEST_DELAY})",
    )
    parser.add_argument("--no-llm", action="store_true", help="Skip the model fallback for answer letters")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.test:
        queue = generate_test_queue(current_year=args.year)
    else:
        queue = generate_full_catalog(args.year)
    if args.limit is not None:
        queue = queue[:args.limit]

    print(f"\n{'='*60}")
    print(f"AoPS Harvest: {len(queue)} problems")
    print(f"{'='*60}\n")

    stats, problems = asyncio.run(harvest(queue, args.delay, use_llm=not args.no_llm))

    if problems:
        save_problems(problems, args.output)
        print(f"\n✓ Harvested {stats.success}/{stats.total} problems ({stats.failed} failed).")
    else:
        print("\n✗ No problems harvested.")
        exit(1)


if __name__ == "__main__":
    main()
