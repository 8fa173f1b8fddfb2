"""Data models for competition problems and harvest runs."""
import re
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_OPTIONS = ["A", "B", "C", "D", "E"]


class ExamLevel(str, Enum):
    AMC8 = "AMC 8"
    AMC10 = "AMC 10"
    AMC12 = "AMC 12"


class ExamMode(str, Enum):
    INSTANT = "Instant Feedback"
    ALL_AT_END = "Submit All at End"
    WARMUP = "Warmup Mode"


class ProblemSource(str, Enum):
    ARCHIVE = "archive"
    MOCK = "online-mock"
    AI_GENERATED = "ai-generated"


def normalize_option_letter(value: object) -> str:
    """Reduce a free-form answer to a single letter A-E, or "" when unknown."""
    if value is None:
        return ""
    raw = str(value).strip()
    text = raw.upper()
    if not text or text == "X" or "NOT FOUND" in text:
        return ""
    # A capital letter on its own beats the article "a" in chatty replies
    standalone = re.search(r"(?<![A-Za-z])([A-E])(?![A-Za-z])", raw)
    if standalone:
        return standalone.group(1)
    standalone = re.search(r"(?<![A-Z])([A-E])(?![A-Z])", text)
    if standalone:
        return standalone.group(1)
    first = re.search(r"[A-E]", text)
    return first.group(0) if first else ""


def clamp_difficulty(value: int) -> int:
    return max(1, min(10, int(value)))


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    text: str


class Problem(BaseModel):
    """Model for a competition problem."""
    model_config = ConfigDict(validate_assignment=True)

    id: str  # e.g., "2024-amc10a-7" or "real-3"
    source: ProblemSource
    original_url: Optional[str] = None  # Archive problems only
    question_html: str
    solution_html: str
    images: list[str] = []  # Absolute image URLs, first-seen order
    options: list[str] = DEFAULT_OPTIONS
    correct_option: str = ""  # "A".."E", or "" when unknown
    difficulty: int = 5  # 1-10
    hints: list[str] = []
    solution_chat: list[ChatMessage] = []
    topic: Optional[str] = None  # AI generated problems only
    user_answer: Optional[str] = None
    is_correct: Optional[bool] = None

    @field_validator("options")
    @classmethod
    def _five_options(cls, value: list[str]) -> list[str]:
        if len(value) != 5:
            raise ValueError(f"expected 5 options, got {len(value)}")
        return value

    @field_validator("correct_option", mode="before")
    @classmethod
    def _normalize_correct_option(cls, value: object) -> str:
        return normalize_option_letter(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _clamp_difficulty(cls, value: object) -> int:
        try:
            return clamp_difficulty(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"difficulty must be a number, got {value!r}") from exc


class PrefetchTask(BaseModel):
    """One unit of work for the batch harvester."""
    model_config = ConfigDict(frozen=True)

    url: str
    id: str  # e.g., "2024-amc10a-7"
    level: ExamLevel
    year: int
    exam_type: str  # "AMC 8", "AMC 10A", ...

    @property
    def problem_number(self) -> int:
        return int(self.id.rsplit("-", 1)[-1])


class PrefetchStats(BaseModel):
    """Running counters for one harvest run."""
    total: int = 0
    success: int = 0
    failed: int = 0
    current_year: int = 0
    current_exam: str = ""


class ExamConfig(BaseModel):
    real_count: int = 0
    mock_count: int = 0
    ai_count: int = 0

    @field_validator("real_count", "mock_count", "ai_count")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("counts must be non-negative")
        return value
