"""Expected shapes of model responses, one per prompt contract."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.scraper.models import DEFAULT_OPTIONS, clamp_difficulty, normalize_option_letter

DIFFICULTY_BANDS = {
    "Easy": 3,
    "Medium": 5,
    "Hard": 8,
    "Extreme": 10,
}
DEFAULT_DIFFICULTY = 5


def difficulty_from_value(value: Any, requested: Optional[str] = None) -> int:
    """Map a numeric or worded difficulty onto 1-10.

    Numbers are clamped. Words ("Hard") map to fixed bands; if the value is
    missing the requested band is used, and 5 when nothing matches.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return clamp_difficulty(value)
    text = str(value if value not in (None, "") else requested or "")
    try:
        return clamp_difficulty(float(text))
    except (ValueError, OverflowError):
        pass
    for word, band in DIFFICULTY_BANDS.items():
        if word.lower() in text.lower():
            return band
    return DEFAULT_DIFFICULTY


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GenerationResult(_ResponseModel):
    """Problem produced by the generation and mock-search prompts."""
    question_html: str = Field(alias="questionHtml", min_length=1)
    options: Optional[list[str]] = None
    correct_option: str = Field(default="", alias="correctOption")
    solution_html: str = Field(default="", alias="solutionHtml")
    estimated_difficulty: Any = Field(default=None, alias="estimatedDifficulty")

    @field_validator("options", mode="before")
    @classmethod
    def _five_options(cls, value: Any) -> Optional[list[str]]:
        # Anything other than five choices falls back to bare letters
        if not isinstance(value, list) or len(value) != 5:
            return None
        return [str(v) for v in value]

    @field_validator("correct_option", mode="before")
    @classmethod
    def _letter(cls, value: Any) -> str:
        return normalize_option_letter(value)

    @field_validator("solution_html", mode="before")
    @classmethod
    def _solution_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def option_list(self) -> list[str]:
        return self.options or list(DEFAULT_OPTIONS)

    def difficulty(self, requested: Optional[str] = None) -> int:
        return difficulty_from_value(self.estimated_difficulty, requested)


class GradeEntry(_ResponseModel):
    """One row of the batch grading response."""
    id: str
    difficulty: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> str:
        return str(value)

    def numeric_difficulty(self) -> Optional[int]:
        if isinstance(self.difficulty, (int, float)) and not isinstance(self.difficulty, bool):
            return clamp_difficulty(self.difficulty)
        return None


class AnalysisResult(_ResponseModel):
    """Performance summary returned by the analysis prompt."""
    analysis: str = "Great job completing the exam!"
    topics: list[str] = ["Algebra", "Geometry", "Counting"]

    @field_validator("analysis", mode="before")
    @classmethod
    def _analysis_default(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "Great job completing the exam!"

    @field_validator("topics", mode="before")
    @classmethod
    def _topics_default(cls, value: Any) -> list[str]:
        if isinstance(value, list) and value:
            return [str(v) for v in value]
        return ["Algebra", "Geometry", "Counting"]
