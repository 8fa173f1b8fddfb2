"""LLM calls for problem generation, grading and tutoring."""
from .client import OllamaClient
from .parsing import parse_json_from_response
from .retry import retry_with_backoff
from .service import (
    analyze_performance,
    extract_correct_option_with_ai,
    fetch_mock_problem,
    generate_ai_problem,
    get_problem_hint,
    get_solution_explanation,
    grade_problems_by_difficulty,
)

__all__ = [
    "OllamaClient",
    "parse_json_from_response",
    "retry_with_backoff",
    "analyze_performance",
    "extract_correct_option_with_ai",
    "fetch_mock_problem",
    "generate_ai_problem",
    "get_problem_hint",
    "get_solution_explanation",
    "grade_problems_by_difficulty",
]
