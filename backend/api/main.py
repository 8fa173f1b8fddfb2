"""FastAPI backend for AMC exam practice."""
import json
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend import config
from backend.ai.client import OllamaClient
from backend.ai.errors import LLMError
from backend.ai.service import analyze_performance, get_problem_hint, get_solution_explanation
from backend.exam.generator import generate_exam, generate_mini_quiz
from backend.scraper.aops_scraper import AopsScraper
from backend.scraper.catalog import generate_full_catalog, generate_test_queue
from backend.scraper.models import ChatMessage, ExamConfig, ExamLevel, ExamMode, PrefetchTask, Problem

# In-memory store of harvested problems
problems_db: list[dict] = []


# Pydantic models for API
class ExamRequest(BaseModel):
    levels: list[ExamLevel]
    exam_config: ExamConfig
    mode: ExamMode = ExamMode.INSTANT


class ExamResponse(BaseModel):
    problems: list[Problem]
    progress: list[str] = []
    time_limit: int  # seconds


class QuizRequest(BaseModel):
    topic: str
    level: ExamLevel


class HintRequest(BaseModel):
    problem: Problem


class ExplainRequest(BaseModel):
    problem: Problem
    message: str
    history: list[ChatMessage] = []


class TextResponse(BaseModel):
    response: str


class AnalysisRequest(BaseModel):
    problems: list[Problem]


class AnalysisResponse(BaseModel):
    analysis: str
    topics: list[str]


def get_llm() -> OllamaClient:
    return OllamaClient()


def get_scraper(llm: OllamaClient = Depends(get_llm)) -> AopsScraper:
    return AopsScraper(llm=llm)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load harvested problems on startup."""
    global problems_db
    if config.DATA_PATH.exists():
        with open(config.DATA_PATH, encoding="utf-8") as f:
            problems_db = json.load(f)
        print(f"Loaded {len(problems_db)} problems from {config.DATA_PATH}")
    else:
        problems_db = []
        print(f"Warning: No problems file found at {config.DATA_PATH}")

    yield


app = FastAPI(
    title="AMC Practice API",
    description="API for assembling AMC practice exams, hints and solution chat",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _llm_failure(action: str, e: Exception) -> HTTPException:
    if isinstance(e, LLMError):
        return HTTPException(status_code=503, detail=f"Model service unavailable: {e}")
    return HTTPException(status_code=500, detail=f"Error {action}: {e}")


@app.get("/api/catalog", response_model=list[PrefetchTask])
async def get_catalog(
    sample: bool = Query(False, description="Return 10 random tasks instead of the full catalog"),
    year: int = Query(config.CURRENT_YEAR, description="Newest contest year"),
) -> list[PrefetchTask]:
    """List harvest tasks in catalog order."""
    if sample:
        return generate_test_queue(current_year=year)
    return generate_full_catalog(year)


@app.get("/api/problems", response_model=list[Problem])
async def get_problems(
    source: Optional[str] = Query(None, description="Filter by source"),
    min_difficulty: Optional[int] = Query(None, ge=1, le=10),
    max_difficulty: Optional[int] = Query(None, ge=1, le=10),
) -> list[Problem]:
    """Get harvested problems, optionally filtered."""
    result = [Problem.model_validate(p) for p in problems_db]

    if source:
        result = [p for p in result if p.source.value == source]
    if min_difficulty is not None:
        result = [p for p in result if p.difficulty >= min_difficulty]
    if max_difficulty is not None:
        result = [p for p in result if p.difficulty <= max_difficulty]

    return result


@app.get("/api/problems/{problem_id}", response_model=Problem)
async def get_problem(problem_id: str) -> Problem:
    """Get a single harvested problem."""
    for p in problems_db:
        if p["id"] == problem_id:
            return Problem.model_validate(p)

    raise HTTPException(status_code=404, detail="Problem not found")


@app.post("/api/exam", response_model=ExamResponse)
async def create_exam(
    request: ExamRequest,
    llm: OllamaClient = Depends(get_llm),
    scraper: AopsScraper = Depends(get_scraper),
) -> ExamResponse:
    """Assemble a full practice exam."""
    if not request.levels:
        raise HTTPException(status_code=400, detail="At least one level is required")

    progress: list[str] = []
    problems = await generate_exam(
        request.levels,
        request.exam_config,
        request.mode,
        lambda message, percent: progress.append(f"{percent}% {message}"),
        scraper,
        llm,
    )
    time_limit = max(config.EXAM_TIME_LIMITS[level.value] for level in request.levels)
    return ExamResponse(problems=problems, progress=progress, time_limit=time_limit)


@app.post("/api/quiz", response_model=list[Problem])
async def create_quiz(request: QuizRequest, llm: OllamaClient = Depends(get_llm)) -> list[Problem]:
    """Five AI problems on one topic."""
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic is required")
    return await generate_mini_quiz(request.topic, request.level, llm)


@app.post("/api/hint", response_model=TextResponse)
async def get_hint(request: HintRequest, llm: OllamaClient = Depends(get_llm)) -> TextResponse:
    """Get a hint for a problem (never reveals the answer)."""
    try:
        return TextResponse(response=await get_problem_hint(llm, request.problem))
    except Exception as e:
        raise _llm_failure("generating hint", e)


@app.post("/api/explain", response_model=TextResponse)
async def explain_solution(request: ExplainRequest, llm: OllamaClient = Depends(get_llm)) -> TextResponse:
    """Chat about the official solution."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    try:
        text = await get_solution_explanation(llm, request.problem, request.message, request.history)
        return TextResponse(response=text)
    except Exception as e:
        raise _llm_failure("explaining solution", e)


@app.post("/api/analysis", response_model=AnalysisResponse)
async def analyze_exam(request: AnalysisRequest, llm: OllamaClient = Depends(get_llm)) -> AnalysisResponse:
    """Summarize performance on a finished exam."""
    result = await analyze_performance(llm, request.problems)
    return AnalysisResponse(analysis=result.analysis, topics=result.topics)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "problems_loaded": len(problems_db),
        "ollama_url": config.OLLAMA_URL,
        "model": config.MODEL_PRO,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
