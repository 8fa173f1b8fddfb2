"""Assemble practice exams from archive, mock and AI-generated problems."""
import asyncio
import logging
import math
import random
from typing import Callable, Optional

from backend import config
from backend.ai.client import OllamaClient
from backend.ai.service import fetch_mock_problem, generate_ai_problem, grade_problems_by_difficulty
from backend.scraper.aops_scraper import AopsScraper
from backend.scraper.catalog import random_problem_url
from backend.scraper.models import ExamConfig, ExamLevel, ExamMode, Problem, clamp_difficulty

logger = logging.getLogger(__name__)

ExamProgress = Callable[[str, int], None]

MAX_ATTEMPTS = 10
HIT_DELAY = 0.75
MISS_DELAY = 0.2
AI_DIFFICULTIES = ["Easy", "Medium", "Hard"]


def warmup_difficulty(problem_number: int) -> int:
    """Later problems on a paper are harder: scale 1..25 onto 1..10."""
    return clamp_difficulty(math.ceil(problem_number / config.PROBLEMS_PER_EXAM * 10))


async def _fill_real_slot(
    scraper: AopsScraper,
    level: ExamLevel,
    problem_id: str,
    used_urls: set[str],
    rng: random.Random,
    hit_delay: float,
    miss_delay: float,
) -> tuple[Optional[Problem], int]:
    attempts = 0
    while attempts < MAX_ATTEMPTS:
        url, number = random_problem_url(level, rng)
        if url in used_urls:
            attempts += 1
            continue

        problem = await scraper.fetch_problem(url, problem_id, level)
        if problem is not None:
            used_urls.add(url)
            await asyncio.sleep(hit_delay)
            return problem, number

        attempts += 1
        await asyncio.sleep(miss_delay)
    return None, 0


async def generate_exam(
    levels: list[ExamLevel],
    exam_config: ExamConfig,
    mode: ExamMode,
    on_progress: ExamProgress,
    scraper: AopsScraper,
    llm: OllamaClient,
    rng: Optional[random.Random] = None,
    hit_delay: float = HIT_DELAY,
    miss_delay: float = MISS_DELAY,
) -> list[Problem]:
    """Build an exam: archive problems, then mocks, then AI problems, then grading.

    A slot that cannot be filled is skipped, so the exam may hold fewer
    problems than requested. Warmup exams are ordered by problem number
    instead of being graded by the model.
    """
    if not levels:
        raise ValueError("at least one exam level is required")

    rng = rng or random.Random()
    problems: list[Problem] = []
    is_warmup = mode == ExamMode.WARMUP
    total_tasks = max(1, exam_config.real_count + exam_config.mock_count + exam_config.ai_count)
    completed = 0

    def update_progress(message: str) -> None:
        nonlocal completed
        completed += 1
        on_progress(message, min(90, math.floor(completed / total_tasks * 90)))

    used_urls: set[str] = set()
    for i in range(exam_config.real_count):
        level = rng.choice(levels)
        problem, number = await _fill_real_slot(
            scraper, level, f"real-{i}", used_urls, rng, hit_delay, miss_delay
        )
        if problem is not None:
            if is_warmup:
                problem.difficulty = warmup_difficulty(number)
            problems.append(problem)
        else:
            logger.warning("Could not find a valid real problem for slot %d after %d attempts", i, MAX_ATTEMPTS)
        update_progress(f"Fetching AoPS Archives... ({len(problems)} found)")

    for i in range(exam_config.mock_count):
        level = rng.choice(levels)
        try:
            problems.append(await fetch_mock_problem(llm, level, f"mock-{i}"))
        except Exception as e:
            logger.error("Mock fetch failed: %s", e)
        update_progress("Finding Online Mocks...")

    for i in range(exam_config.ai_count):
        level = rng.choice(levels)
        difficulty = AI_DIFFICULTIES[i % len(AI_DIFFICULTIES)]
        try:
            problems.append(await generate_ai_problem(llm, level, difficulty, f"ai-{i}"))
        except Exception as e:
            logger.error("AI generation failed: %s", e)
        update_progress("Generating Fresh Problems...")

    if not problems:
        return problems

    if is_warmup:
        on_progress("Sorting warmup problems...", 98)
        return sorted(problems, key=lambda p: p.difficulty)

    on_progress("AI is grading problem difficulties...", 95)
    graded = await grade_problems_by_difficulty(llm, problems)
    on_progress("Finalizing exam...", 100)
    return graded


async def generate_mini_quiz(topic: str, level: ExamLevel, llm: OllamaClient) -> list[Problem]:
    """Five flash-model problems on one topic: two easy, two medium, one hard."""
    problems: list[Problem] = []
    for i in range(5):
        difficulty = "Easy" if i < 2 else "Medium" if i < 4 else "Hard"
        try:
            problems.append(
                await generate_ai_problem(llm, level, difficulty, f"quiz-{i}", topic=topic, model=config.MODEL_FLASH)
            )
        except Exception as e:
            logger.warning("Quiz problem %d failed: %s", i, e)
    return await grade_problems_by_difficulty(llm, problems)
