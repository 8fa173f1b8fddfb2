"""Enumerate AoPS wiki problem URLs for every AMC exam on record.

Order is AMC 8 -> AMC 10 -> AMC 12, newest year first, A before B, problems
1..25, so a partial harvest yields recent, easier content first.
"""
import random
from typing import Optional

from backend import config
from backend.scraper.models import ExamLevel, PrefetchTask

# (wiki name, display name, id suffix)
Variant = tuple[str, str, str]

UNIFIED_VARIANT_YEARS = (2000, 2001)
FALL_VARIANT_YEAR = 2021


def build_url(year: int, exam: str, number: int) -> str:
    """Build the AoPS wiki URL for a problem page."""
    return config.AOPS_PROBLEM_URL.format(year=year, exam=exam, number=number)


def amc8_variant(year: int) -> Variant:
    if year <= config.AJHSME_LAST_YEAR:
        return ("AJHSME", "AJHSME", "amc8")
    return ("AMC_8", "AMC 8", "amc8")


def upper_variants(year: int, grade: int) -> list[Variant]:
    """AMC 10/12 variants for a year: one unified exam in 2000-2001, else A and B."""
    if year in UNIFIED_VARIANT_YEARS:
        return [(f"AMC_{grade}", f"AMC {grade}", f"amc{grade}")]
    return [
        (f"AMC_{grade}{half}", f"AMC {grade}{half}", f"amc{grade}{half.lower()}")
        for half in ("A", "B")
    ]


def _tasks_for(year: int, level: ExamLevel, variant: Variant) -> list[PrefetchTask]:
    wiki_name, display, suffix = variant
    return [
        PrefetchTask(
            url=build_url(year, wiki_name, number),
            id=f"{year}-{suffix}-{number}",
            level=level,
            year=year,
            exam_type=display,
        )
        for number in range(1, config.PROBLEMS_PER_EXAM + 1)
    ]


def generate_full_catalog(current_year: int = config.CURRENT_YEAR) -> list[PrefetchTask]:
    """Return every harvestable problem as an ordered task list."""
    queue: list[PrefetchTask] = []

    for year in range(current_year, config.AMC8_START_YEAR - 1, -1):
        queue.extend(_tasks_for(year, ExamLevel.AMC8, amc8_variant(year)))

    for level, grade in ((ExamLevel.AMC10, 10), (ExamLevel.AMC12, 12)):
        for year in range(current_year, config.AMC10_12_START_YEAR - 1, -1):
            for variant in upper_variants(year, grade):
                queue.extend(_tasks_for(year, level, variant))

    return queue


def generate_test_queue(
    count: int = 10,
    rng: Optional[random.Random] = None,
    current_year: int = config.CURRENT_YEAR,
) -> list[PrefetchTask]:
    """Pick ``count`` distinct tasks uniformly at random for a smoke test."""
    full = generate_full_catalog(current_year)
    rng = rng or random.Random()
    return rng.sample(full, min(count, len(full)))


def random_problem_url(
    level: ExamLevel,
    rng: Optional[random.Random] = None,
    current_year: int = config.CURRENT_YEAR,
) -> tuple[str, int]:
    """Pick a random problem page for ``level``; returns (url, problem_number).

    Unlike the catalog, 2021 also draws from the Fall contests.
    """
    rng = rng or random.Random()
    number = rng.randint(1, config.PROBLEMS_PER_EXAM)

    if level == ExamLevel.AMC8:
        year = rng.randint(config.AMC8_START_YEAR, current_year)
        wiki_name = amc8_variant(year)[0]
        return build_url(year, wiki_name, number), number

    grade = 10 if level == ExamLevel.AMC10 else 12
    year = rng.randint(config.AMC10_12_START_YEAR, current_year)
    names = [variant[0] for variant in upper_variants(year, grade)]
    if year == FALL_VARIANT_YEAR:
        names += [f"Fall_{name}" for name in names]
    return build_url(year, rng.choice(names), number), number
