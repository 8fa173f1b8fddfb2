"""Find the correct multiple-choice letter in solution markup."""
import logging
import re
from typing import Awaitable, Callable, Optional

from backend.scraper.models import normalize_option_letter

logger = logging.getLogger(__name__)

AIFallback = Callable[[str], Awaitable[str]]

# \boxed{\textbf{(C)}} is the canonical way solutions mark the final answer
BOXED_PATTERNS = [
    re.compile(r"\\boxed\s*\{\s*\\?textbf\s*\{\s*\(?\s*([A-E])\s*\)?\s*\}\s*\}", re.IGNORECASE),
    re.compile(r"\\boxed\s*\{\s*\(?\s*([A-E])\s*\)?\s*\}", re.IGNORECASE),
    # \boxed{\textbf{(C) }17}
    re.compile(r"\\boxed\s*\{\s*\\(?:textbf|mathrm|text)\s*\{\s*\(\s*([A-E])\s*\)"),
]
PROSE_PATTERN = re.compile(
    r"(?i:answer\s+is)\s*:?\s*(?:\(\s*([A-Ea-e])\s*\)|([A-E])(?![A-Za-z]))"
)
TAG_PATTERN = re.compile(r"<[^>]+>")

AI_CONTEXT_CHARS = 1000


def strip_tags(html: str) -> str:
    return TAG_PATTERN.sub("", html)


def find_answer_letter(solution_html: str) -> str:
    """Deterministic strategies only: boxed answer, then "answer is (X)" prose."""
    for pattern in BOXED_PATTERNS:
        match = pattern.search(solution_html)
        if match:
            return match.group(1).upper()

    match = PROSE_PATTERN.search(strip_tags(solution_html))
    if match:
        return (match.group(1) or match.group(2)).upper()
    return ""


async def extract_correct_option(solution_html: str, ai_fallback: Optional[AIFallback] = None) -> str:
    """Return the answer letter A-E, or "" when no strategy finds one.

    The AI fallback receives the first 1000 characters of the tag-stripped
    solution and is only consulted when the textual conventions fail.
    """
    letter = find_answer_letter(solution_html)
    if letter or ai_fallback is None:
        return letter

    snippet = strip_tags(solution_html)[:AI_CONTEXT_CHARS]
    try:
        response = await ai_fallback(snippet)
    except Exception as e:
        logger.warning("AI answer extraction failed: %s", e)
        return ""
    return normalize_option_letter(response)
