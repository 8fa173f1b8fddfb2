import asyncio
import json
from collections import Counter

from backend.scraper import harvester as harvester_module
from backend.scraper.catalog import generate_full_catalog
from backend.scraper.harvester import BatchHarvester, save_problems
from backend.tests.fakes import make_problem

QUEUE = generate_full_catalog(current_year=2025)[:5]


class Recorder:
    def __init__(self, stop_after_success=None, stop_signal=None):
        self.events = []
        self.stop_after_success = stop_after_success
        self.stop_signal = stop_signal

    def __call__(self, stats, message, problem=None):
        self.events.append((stats, message, problem))
        if self.stop_after_success is not None and stats.success >= self.stop_after_success:
            self.stop_signal.set()


def _run(fetch_problem, recorder, stop_signal=None, queue=QUEUE):
    harvester = BatchHarvester(fetch_problem, delay=0)
    return asyncio.run(harvester.run(queue, recorder, stop_signal))


def test_hard_failure_is_counted_and_run_continues():
    attempted = []

    async def fetch_problem(url, problem_id, level):
        attempted.append(problem_id)
        if problem_id == QUEUE[2].id:
            raise RuntimeError("parser exploded")
        return make_problem(problem_id)

    recorder = Recorder()
    stats = _run(fetch_problem, recorder)

    assert attempted == [t.id for t in QUEUE]
    assert stats.total == 5
    assert stats.success == 4
    assert stats.failed == 1
    assert len(recorder.events) == 10
    assert any(m.startswith(f"ERROR: {QUEUE[2].id} - parser exploded") for _, m, _ in recorder.events)


def test_progress_before_and_after_each_task():
    async def fetch_problem(url, problem_id, level):
        return make_problem(problem_id)

    recorder = Recorder()
    _run(fetch_problem, recorder)

    messages = [m for _, m, _ in recorder.events]
    assert messages[0] == "Fetching [1/5]: AMC 8 #1..."
    assert messages[1] == f"SUCCESS: {QUEUE[0].id}"
    assert Counter(m.split(":")[0] for m in messages) == {"Fetching [1/5]": 1, "Fetching [2/5]": 1,
                                                          "Fetching [3/5]": 1, "Fetching [4/5]": 1,
                                                          "Fetching [5/5]": 1, "SUCCESS": 5}
    problems = [p for _, _, p in recorder.events if p is not None]
    assert [p.id for p in problems] == [t.id for t in QUEUE]


def test_soft_failure_when_no_problem_returned():
    async def fetch_problem(url, problem_id, level):
        return None

    recorder = Recorder()
    stats = _run(fetch_problem, recorder)

    assert stats.success == 0
    assert stats.failed == 5
    assert recorder.events[1][1] == f"FAILED: {QUEUE[0].id} (No data returned)"


def test_stats_snapshots_are_monotonic_and_independent():
    async def fetch_problem(url, problem_id, level):
        return make_problem(problem_id)

    recorder = Recorder()
    _run(fetch_problem, recorder)

    successes = [s.success for s, _, _ in recorder.events]
    assert successes == sorted(successes)
    assert recorder.events[0][0].success == 0
    assert recorder.events[0][0].current_exam == "AMC 8"
    assert recorder.events[0][0].current_year == 2025


def test_stop_signal_after_second_task():
    attempted = []

    async def fetch_problem(url, problem_id, level):
        attempted.append(problem_id)
        return make_problem(problem_id)

    stop = asyncio.Event()
    recorder = Recorder(stop_after_success=2, stop_signal=stop)
    stats = _run(fetch_problem, recorder, stop)

    assert attempted == [QUEUE[0].id, QUEUE[1].id]
    assert stats.success == 2
    assert stats.failed == 0


def test_stop_signal_set_before_run_processes_nothing():
    async def fetch_problem(url, problem_id, level):
        raise AssertionError("should not be called")

    stop = asyncio.Event()
    stop.set()
    recorder = Recorder()
    stats = _run(fetch_problem, recorder, stop)

    assert recorder.events == []
    assert stats.success == 0 and stats.failed == 0


def test_pacing_delay_after_every_task(monkeypatch):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr(harvester_module.asyncio, "sleep", fake_sleep)

    async def fetch_problem(url, problem_id, level):
        if problem_id == QUEUE[1].id:
            raise RuntimeError("boom")
        return None if problem_id == QUEUE[2].id else make_problem(problem_id)

    harvester = BatchHarvester(fetch_problem, delay=0.8)
    asyncio.run(harvester.run(QUEUE, Recorder()))

    assert sleeps == [0.8] * 5


def test_save_problems_writes_json(tmp_path):
    path = save_problems([make_problem("2025-amc8-1")], tmp_path / "out")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[0]["id"] == "2025-amc8-1"
    assert data[0]["source"] == "archive"
    assert data[0]["correct_option"] == ""
