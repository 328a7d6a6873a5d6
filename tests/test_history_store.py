"""JSON-file history store."""

import asyncio
import json

import pytest

from app.schemas.workflow import RunStatus, StepStatus, WorkflowRunResult, WorkflowStepResult
from app.services.history_store import HistoryStore


def make_run(run_id: str) -> WorkflowRunResult:
    return WorkflowRunResult(
        id=run_id,
        timestamp="2026-01-01T00:00:00+00:00",
        steps=[
            WorkflowStepResult(
                step_id="1", step_type="clean_text", input=" x ", output="x",
                status=StepStatus.SUCCESS, duration_ms=3,
            )
        ],
        status=RunStatus.SUCCESS,
        original_input=" x ",
        duration_ms=3,
    )


@pytest.mark.asyncio
async def test_missing_file_is_empty(history):
    assert await history.list() == []
    assert await history.status() == "connected"


@pytest.mark.asyncio
async def test_most_recent_first(history):
    await history.append(make_run("a"))
    await history.append(make_run("b"))

    assert [r.id for r in await history.list()] == ["b", "a"]


@pytest.mark.asyncio
async def test_cap_keeps_most_recent(history):
    for i in range(55):
        await history.append(make_run(f"run-{i}"))

    runs = await history.list()
    assert len(runs) == 50
    assert runs[0].id == "run-54"
    assert runs[-1].id == "run-5"


@pytest.mark.asyncio
async def test_reappending_same_run_does_not_duplicate(history):
    run = make_run("a")
    await history.append(run)
    await history.append(run)

    assert [r.id for r in await history.list()] == ["a"]


@pytest.mark.asyncio
async def test_file_uses_camel_case(history):
    await history.append(make_run("a"))

    stored = json.loads(history.path.read_text())
    assert stored[0]["originalInput"] == " x "
    assert stored[0]["steps"][0]["stepType"] == "clean_text"
    assert stored[0]["durationMs"] == 3


@pytest.mark.asyncio
async def test_concurrent_appends_keep_every_run(history):
    await asyncio.gather(*(history.append(make_run(f"c{i}")) for i in range(20)))

    assert sorted(r.id for r in await history.list()) == sorted(f"c{i}" for i in range(20))


@pytest.mark.asyncio
async def test_corrupt_file_reads_empty_and_recovers(history):
    history.path.write_text("{ not json")

    assert await history.list() == []

    await history.append(make_run("a"))
    assert [r.id for r in await history.list()] == ["a"]


@pytest.mark.asyncio
async def test_unwritable_location_never_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("i am a file")
    store = HistoryStore(str(blocker / "history.json"))

    await store.append(make_run("a"))
    assert await store.list() == []


@pytest.mark.asyncio
async def test_status_init_required(tmp_path):
    store = HistoryStore(str(tmp_path / "nope" / "history.json"))
    assert await store.status() == "init_required"


@pytest.mark.asyncio
async def test_file_io_yields_to_other_coroutines(history):
    ticks = 0
    done = False

    async def ticker():
        nonlocal ticks
        while not done:
            ticks += 1
            await asyncio.sleep(0)

    task = asyncio.create_task(ticker())
    try:
        await history.append(make_run("a"))
        after_append = ticks
        await history.list()
        after_list = ticks
    finally:
        done = True
        await task

    assert after_append > 0
    assert after_list > after_append


@pytest.mark.asyncio
async def test_no_temp_file_left_behind(history):
    await history.append(make_run("a"))

    assert [p.name for p in history.path.parent.iterdir()] == ["history.json"]
