# tests/test_drag.py

import pytest

from planner.core.arena import TaskArena
from planner.core.drag import DragSession
from planner.core.ordering import OrderingEngine
from planner.core.result import Result

from .fakes import make_task


class RecordingCommit:
    def __init__(self) -> None:
        self.calls = []

    async def __call__(self, *args):
        self.calls.append(args)
        return Result.success(None)


def _engine():
    return OrderingEngine(
        TaskArena([
            make_task("a", 0),
            make_task("b", 1),
            make_task("a-sub", 0, parent_task_id="a"),
        ]),
        {},
    )


@pytest.mark.asyncio
async def test_updates_preview_and_commit_once() -> None:
    engine = _engine()
    before = engine.arena.snapshot()
    commit = RecordingCommit()
    session = DragSession(engine, "b", commit)

    first = session.update("a", None, None, False)
    second = session.update("a", None, None, True)

    assert first.allowed and first.index == 0
    assert second.allowed and second.index == 1
    assert engine.arena.snapshot() == before

    assert (await session.commit()).ok
    assert (await session.commit()).ok
    assert commit.calls == [("b", None, None, "a", True)]
    assert session.closed


@pytest.mark.asyncio
async def test_drop_without_target_or_after_cancel_is_noop() -> None:
    commit = RecordingCommit()
    session = DragSession(_engine(), "b", commit)
    await session.commit()

    cancelled = DragSession(_engine(), "b", commit)
    cancelled.update("a", None, None, False)
    cancelled.cancel()
    await cancelled.commit()

    assert commit.calls == []


def test_cycle_is_reported_as_disallowed_drop() -> None:
    session = DragSession(_engine(), "a", RecordingCommit())

    indicator = session.update(None, "a-sub", None, False)

    assert not indicator.allowed
    assert indicator.reason
