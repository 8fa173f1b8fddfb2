"""Problem generation, grading and tutoring calls built on the Ollama client."""
import json
import logging
from typing import Optional

from pydantic import ValidationError

from backend import config
from backend.ai.client import OllamaClient
from backend.ai.errors import MalformedResponseError
from backend.ai.parsing import parse_json_from_response
from backend.ai.retry import retry_with_backoff
from backend.ai.schemas import AnalysisResult, GenerationResult, GradeEntry
from backend.scraper.answers import strip_tags
from backend.scraper.models import ChatMessage, ExamLevel, Problem, ProblemSource, normalize_option_letter

logger = logging.getLogger(__name__)

THINK_BUDGET = 1024
DEFAULT_HINT = "Try visualizing the problem or working backwards."
DEFAULT_EXPLANATION = "I'm having trouble explaining that right now."


def _parse_generation(text: str) -> GenerationResult:
    data = parse_json_from_response(text)
    if not isinstance(data, dict):
        raise MalformedResponseError("Failed to parse JSON content.")
    try:
        return GenerationResult.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(f"Generation response missing fields: {exc}") from exc


async def extract_correct_option_with_ai(llm: OllamaClient, solution_text: str) -> str:
    """Ask the flash model for the final answer letter of a solution."""
    prompt = f"""Identify the final answer letter (A, B, C, D, or E) from this math solution text.

Solution: "{solution_text}..."

Return ONLY the letter. If not found, return "not found"."""

    response = await llm.generate(prompt, model=config.MODEL_FLASH, temperature=0.0)
    return normalize_option_letter(response)


async def fetch_mock_problem(llm: OllamaClient, level: ExamLevel, problem_id: str) -> Problem:
    """Find a practice problem from an online mock contest via web search."""
    prompt = f"""Find a unique practice problem from a mock {level.value} competition online.
Extract problem text, solve it, and provide the correct option.
OUTPUT JSON: {{ "questionHtml": "...", "correctOption": "A", "solutionHtml": "..." }}"""

    async def attempt() -> Problem:
        text = await llm.generate(prompt, model=config.MODEL_FLASH, search=True)
        data = _parse_generation(text)
        return Problem(
            id=problem_id,
            source=ProblemSource.MOCK,
            question_html=data.question_html,
            solution_html=data.solution_html,
            correct_option=data.correct_option,
            difficulty=5,  # Graded later
        )

    return await retry_with_backoff(attempt)


async def generate_ai_problem(
    llm: OllamaClient,
    level: ExamLevel,
    difficulty: str,
    problem_id: str,
    topic: Optional[str] = None,
    model: str = config.MODEL_PRO,
) -> Problem:
    """Create a fresh problem at the requested difficulty ("Easy" .. "Extreme")."""
    topic_instruction = f"The problem MUST be about: {topic}." if topic else "The problem topic should be random."
    prompt = f"""Create a unique math competition problem for {level.value}. Difficulty: {difficulty}. {topic_instruction}
Use LaTeX. Provide 5 options. Step-by-step solution.

OUTPUT JSON with keys: questionHtml, options (array of A-E texts), correctOption (Letter), solutionHtml, estimatedDifficulty (1-10 integer)."""

    async def attempt() -> Problem:
        text = await llm.generate(
            prompt,
            model=model,
            json_mode=True,
            think_budget=THINK_BUDGET if model == config.MODEL_PRO else None,
        )
        data = _parse_generation(text)
        return Problem(
            id=problem_id,
            source=ProblemSource.AI_GENERATED,
            question_html=data.question_html,
            solution_html=data.solution_html,
            options=data.option_list(),
            correct_option=data.correct_option,
            difficulty=data.difficulty(difficulty),
            topic=topic,
        )

    return await retry_with_backoff(attempt)


async def grade_problems_by_difficulty(llm: OllamaClient, problems: list[Problem]) -> list[Problem]:
    """Assign 1-10 difficulties in one call and return the problems easiest first.

    Problems the model skips, or all of them if the call fails, keep their
    current difficulty.
    """
    if not problems:
        return []
    summaries = [
        {"id": p.id, "text": strip_tags(p.question_html[:200])}
        for p in problems
    ]
    prompt = f"""Assign a difficulty level (1-10) to each math problem.
1 is very easy (early AMC 8). 10 is very hard (late AMC 10/12).
Ensure the full range 1-10 is used appropriately based on standard competition difficulty.
Input: {json.dumps(summaries)}
Output JSON: [{{ "id": "problem_id", "difficulty": 5 }}, ...]"""

    graded = list(problems)
    try:
        text = await llm.generate(prompt, model=config.MODEL_FLASH, json_mode=True)
        grades = parse_json_from_response(text)
        if isinstance(grades, list):
            by_id: dict[str, int] = {}
            for row in grades:
                try:
                    entry = GradeEntry.model_validate(row)
                except ValidationError:
                    continue
                value = entry.numeric_difficulty()
                if value is not None:
                    by_id[entry.id] = value
            graded = [
                p.model_copy(update={"difficulty": by_id[p.id]}) if p.id in by_id else p
                for p in problems
            ]
        else:
            logger.warning("Grading returned no list, keeping original difficulties")
    except Exception as e:
        logger.warning("Grading failed, keeping original difficulties: %s", e)

    return sorted(graded, key=lambda p: p.difficulty)


async def get_problem_hint(llm: OllamaClient, problem: Problem) -> str:
    """Give a short nudge that never reveals the answer."""
    prompt = f"""You are an expert math competition coach. A student is stuck.

Problem: {problem.question_html}
Correct Answer: {problem.correct_option}
Official Solution Snippet: {problem.solution_html[:500]}...

Previous hints given: {json.dumps(problem.hints)}

Give a subtle, nudging hint.
1. Do NOT reveal the answer.
2. Do NOT just say "Use the formula". Explain the intuition.
3. Keep it short (under 30 words).
4. Use LaTeX for math."""

    async def attempt() -> str:
        text = await llm.generate(prompt, model=config.MODEL_PRO)
        return text or DEFAULT_HINT

    return await retry_with_backoff(attempt)


async def get_solution_explanation(
    llm: OllamaClient,
    problem: Problem,
    user_query: str,
    history: list[ChatMessage],
) -> str:
    """Answer a student's question about the official solution."""
    history_text = "\n".join(
        f"{'Student' if h.role == 'user' else 'Tutor'}: {h.text}" for h in history
    )
    prompt = f"""You are a friendly math tutor.
Problem: {problem.question_html}
Solution: {problem.solution_html}

Chat History:
{history_text}

Student: {user_query}

Explain the concept clearly. Use LaTeX. Be encouraging."""

    async def attempt() -> str:
        text = await llm.generate(prompt, model=config.MODEL_PRO, think_budget=THINK_BUDGET)
        return text or DEFAULT_EXPLANATION

    return await retry_with_backoff(attempt)


async def analyze_performance(llm: OllamaClient, problems: list[Problem]) -> AnalysisResult:
    """Summarize strengths and weaknesses and suggest three topics to practice."""
    data = [
        {"diff": p.difficulty, "topic": p.topic or "General", "correct": p.is_correct}
        for p in problems
    ]
    prompt = f"""Analyze this student's math test performance: {json.dumps(data)}

1. Short analysis (strength/weakness).
2. 3 specific topics to practice.
Output JSON: {{ "analysis": "...", "topics": [...] }}"""

    try:
        text = await llm.generate(prompt, model=config.MODEL_PRO, json_mode=True)
        result = parse_json_from_response(text)
        if not isinstance(result, dict):
            raise MalformedResponseError("Analysis response is not a JSON object")
        return AnalysisResult.model_validate(result)
    except Exception as e:
        logger.warning("Performance analysis failed: %s", e)
        return AnalysisResult(analysis="Analysis unavailable.", topics=["General Math"])
