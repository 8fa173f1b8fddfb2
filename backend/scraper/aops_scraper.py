"""Scraper for AMC problems on the AoPS wiki.

Each archive page is fetched through a relay proxy, split into question and
solution sections, normalized to absolute URLs, and the correct answer is
read from the solution (boxed answer, prose, then the model as a last resort).
"""
import logging
from typing import Optional

from bs4 import BeautifulSoup

from backend.ai.client import OllamaClient
from backend.ai.service import extract_correct_option_with_ai
from backend.scraper.answers import extract_correct_option
from backend.scraper.fetcher import ProxyFetcher
from backend.scraper.models import DEFAULT_OPTIONS, ExamLevel, Problem, ProblemSource
from backend.scraper.normalizer import normalize_html
from backend.scraper.segmenter import segment_document

logger = logging.getLogger(__name__)


class AopsScraper:
    """Turn AoPS wiki problem pages into Problem records."""

    def __init__(self, fetcher: Optional[ProxyFetcher] = None, llm: Optional[OllamaClient] = None):
        self.fetcher = fetcher or ProxyFetcher()
        self.llm = llm

    async def _ask_model_for_answer(self, solution_text: str) -> str:
        return await extract_correct_option_with_ai(self.llm, solution_text)

    def parse_page(self, html: str) -> tuple[str, list[str], str]:
        """Parse page HTML into (question_html, images, solution_html)."""
        soup = BeautifulSoup(html, "lxml")
        segments = segment_document(soup)
        question = normalize_html(segments.question_html)
        solution = normalize_html(segments.solution_html)
        return question.html, question.images, solution.html

    async def build_problem(self, html: str, url: str, problem_id: str) -> Problem:
        """Assemble a Problem from page HTML; raises on any parse failure."""
        question_html, images, solution_html = self.parse_page(html)
        ai_fallback = self._ask_model_for_answer if self.llm is not None else None
        correct_option = await extract_correct_option(solution_html, ai_fallback)

        return Problem(
            id=problem_id,
            source=ProblemSource.ARCHIVE,
            original_url=url,
            question_html=question_html,
            solution_html=solution_html,
            images=images,
            options=list(DEFAULT_OPTIONS),
            correct_option=correct_option,  # "" is resolved downstream
            difficulty=5,  # Placeholder until graded
        )

    async def fetch_problem(self, url: str, problem_id: str, level: Optional[ExamLevel] = None) -> Optional[Problem]:
        """Fetch and assemble one problem, or return None if anything fails."""
        try:
            html = await self.fetcher.fetch(url)
            return await self.build_problem(html, url, problem_id)
        except Exception as e:
            logger.warning("Scraping error for %s (%s): %s", url, level.value if level else "unknown level", e)
            return None
