import json

from fastapi.testclient import TestClient

from backend import config
from backend.ai.errors import LLMError
from backend.api.main import app, get_llm, get_scraper
from backend.tests.fakes import FakeLLM, make_problem


def _client_with(llm, scraper=None):
    app.dependency_overrides[get_llm] = lambda: llm
    if scraper is not None:
        app.dependency_overrides[get_scraper] = lambda: scraper
    return TestClient(app)


def teardown_function():
    app.dependency_overrides.clear()


def test_get_problems_returns_harvested_data(tmp_path, monkeypatch):
    data_path = tmp_path / "problems.json"
    data_path.write_text(json.dumps([
        make_problem("2025-amc8-1", difficulty=2).model_dump(mode="json"),
        make_problem("2025-amc8-2", difficulty=8).model_dump(mode="json"),
    ]))
    monkeypatch.setattr(config, "DATA_PATH", data_path)

    with TestClient(app) as client:
        resp = client.get("/api/problems")
        assert resp.status_code == 200
        data = resp.json()
        assert [p["id"] for p in data] == ["2025-amc8-1", "2025-amc8-2"]
        for key in ["id", "question_html", "options", "correct_option", "difficulty"]:
            assert key in data[0]

        resp = client.get("/api/problems", params={"min_difficulty": 5})
        assert [p["id"] for p in resp.json()] == ["2025-amc8-2"]

        assert client.get("/api/problems/2025-amc8-2").json()["difficulty"] == 8
        assert client.get("/api/problems/missing").status_code == 404
        assert client.get("/health").json()["problems_loaded"] == 2


def test_catalog_sample_returns_ten_tasks():
    with TestClient(app) as client:
        resp = client.get("/api/catalog", params={"sample": True})
        assert resp.status_code == 200
        tasks = resp.json()
        assert len(tasks) == 10
        assert {"url", "id", "level", "year", "exam_type"} <= set(tasks[0])


def test_hint_endpoint():
    llm = FakeLLM(responses=["Consider the parity of the sum."])
    with _client_with(llm) as client:
        resp = client.post("/api/hint", json={"problem": make_problem("real-0").model_dump(mode="json")})
        assert resp.status_code == 200
        assert resp.json() == {"response": "Consider the parity of the sum."}


def test_hint_model_unavailable_is_503():
    llm = FakeLLM(error=LLMError("connection refused", status_code=400))
    with _client_with(llm) as client:
        resp = client.post("/api/hint", json={"problem": make_problem("real-0").model_dump(mode="json")})
        assert resp.status_code == 503


def test_explain_requires_message():
    with _client_with(FakeLLM()) as client:
        resp = client.post("/api/explain", json={
            "problem": make_problem("real-0").model_dump(mode="json"),
            "message": "  ",
        })
        assert resp.status_code == 400


def test_warmup_exam_endpoint():
    class Scraper:
        async def fetch_problem(self, url, problem_id, level):
            return make_problem(problem_id, original_url=url)

    with _client_with(FakeLLM(), Scraper()) as client:
        resp = client.post("/api/exam", json={
            "levels": ["AMC 8"],
            "exam_config": {"real_count": 2},
            "mode": "Warmup Mode",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["problems"]) == 2
        assert body["time_limit"] == 40 * 60
