# tests/test_planner_service.py

import asyncio
from datetime import date, timedelta

import pytest

from planner.core.recurrence import virtual_id
from planner.models.do_today import DoTodayOffEntry
from planner.models.section import NO_SECTION
from planner.models.task import RecurringType, TaskPriority, TaskStatus
from planner.services.suggestion import TaskSuggestion

from .fakes import (
    TODAY,
    USER_ID,
    BlockingRepository,
    FailingRepository,
    FlakyRepository,
    make_category,
    make_section,
    make_task,
    seed,
)


def _orders(planner, parent_id=None, section_id=None):
    return [(t.id, t.order) for t in planner.arena.siblings(parent_id, section_id)]


@pytest.mark.asyncio
async def test_load_reads_every_record_type(planner, repositories) -> None:
    seed(
        repositories,
        tasks=[make_task("a"), make_task("b", 1)],
        sections=[make_section("s")],
        categories=[make_category("c", "Work")],
    )
    repositories.do_today.entries["a:2024-01-01"] = DoTodayOffEntry(
        user_id=USER_ID, task_id="a", off_date=TODAY
    )

    result = await planner.load()

    assert result.ok
    assert len(planner.arena) == 2
    assert set(planner.sections) == {"s"}
    assert set(planner.categories) == {"c"}
    assert planner.is_do_today_off("a", TODAY).value is True


@pytest.mark.asyncio
async def test_create_task_appends_and_persists(planner, repositories) -> None:
    first = await planner.create_task({"description": "  Buy milk  "})
    second = await planner.create_task({"description": "Call mom", "priority": "high"})

    assert first.ok and second.ok
    assert first.value.description == "Buy milk"
    assert second.value.priority == TaskPriority.HIGH
    assert [first.value.order, second.value.order] == [0, 1]
    assert set(repositories.tasks.records) == {first.value.id, second.value.id}


@pytest.mark.asyncio
async def test_create_task_rejects_bad_input(planner) -> None:
    empty = await planner.create_task({"description": "   "})
    bad_date = await planner.create_task({"description": "x", "due_date": "not-a-date"})
    bad_section = await planner.create_task({"description": "x", "section_id": "nope"})
    bad_parent = await planner.create_task({"description": "x", "parent_task_id": "nope"})

    for result in (empty, bad_date, bad_section, bad_parent):
        assert not result.ok
        assert result.error.kind == "validation_error"
    assert len(planner.arena) == 0


@pytest.mark.asyncio
async def test_subtask_takes_parent_section(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("p", section_id="s")], sections=[make_section("s")])
    await planner.load()

    result = await planner.create_task({"description": "child", "parent_task_id": "p", "section_id": NO_SECTION})

    assert result.value.parent_task_id == "p"
    assert result.value.section_id == "s"


@pytest.mark.asyncio
async def test_update_task_tracks_completion_time(planner, repositories, clock) -> None:
    seed(repositories, tasks=[make_task("a")])
    await planner.load()

    done = await planner.update_task("a", {"status": "completed"})
    assert done.value.completed_at == clock.now

    reopened = await planner.update_task("a", {"status": "to-do", "description": None})
    assert reopened.value.completed_at is None
    assert reopened.value.description == "Task a"
    assert repositories.tasks.records["a"].status == TaskStatus.TODO


@pytest.mark.asyncio
async def test_delete_cascades_to_descendants(planner, repositories) -> None:
    seed(repositories, tasks=[
        make_task("p"),
        make_task("c", parent_task_id="p"),
        make_task("gc", parent_task_id="c"),
        make_task("other", 1),
    ])
    repositories.do_today.entries["c:2024-01-01"] = DoTodayOffEntry(user_id=USER_ID, task_id="c", off_date=TODAY)
    await planner.load()

    result = await planner.delete_task("p")

    assert result.ok
    assert set(result.value) == {"p", "c", "gc"}
    assert set(repositories.tasks.records) == {"other"}
    assert repositories.do_today.entries == {}
    assert (await planner.delete_task("p")).error.kind == "not_found"


@pytest.mark.asyncio
async def test_reorder_moves_and_persists(planner, repositories) -> None:
    seed(
        repositories,
        tasks=[make_task("a", 0, section_id="s"), make_task("b", 1, section_id="s")],
        sections=[make_section("s")],
    )
    await planner.load()

    result = await planner.reorder("b", None, "s", "a", False)

    assert result.ok
    assert _orders(planner, None, "s") == [("b", 0), ("a", 1)]
    assert repositories.tasks.records["b"].order == 0
    assert repositories.tasks.records["a"].order == 1


@pytest.mark.asyncio
async def test_reorder_into_own_subtree_is_a_cycle(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a"), make_task("b", parent_task_id="a")])
    await planner.load()
    before = planner.arena.snapshot()

    result = await planner.reorder("a", "b", None, None, False)

    assert result.error.kind == "cycle_error"
    assert planner.arena.snapshot() == before


@pytest.mark.asyncio
async def test_failed_write_back_restores_snapshot(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a", 0), make_task("b", 1)])
    await planner.load()
    before = planner.arena.snapshot()
    stored_before = dict(repositories.tasks.records)
    failing = FailingRepository(repositories.tasks, fail_ids={"a"})
    repositories.tasks = failing

    result = await planner.reorder("b", None, None, "a", False)

    assert not result.ok
    assert result.error.kind == "persistence_error"
    assert failing.attempts == 3
    assert planner.arena.snapshot() == before
    assert failing.inner.records == stored_before


@pytest.mark.asyncio
async def test_transient_write_failures_are_retried(planner, repositories) -> None:
    flaky = FlakyRepository(repositories.tasks, failures=2)
    repositories.tasks = flaky

    result = await planner.create_task({"description": "eventually saved"})

    assert result.ok
    assert flaky.calls == 3
    assert result.value.id in flaky.inner.records


@pytest.mark.asyncio
async def test_second_reorder_while_saving_is_rejected(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a", 0), make_task("b", 1)])
    await planner.load()
    blocking = BlockingRepository(repositories.tasks)
    repositories.tasks = blocking

    first = asyncio.create_task(planner.reorder("b", None, None, "a", False))
    await blocking.entered.wait()
    second = await planner.reorder("a", None, None, None, False)
    blocking.release.set()

    assert second.error.kind == "commit_in_progress"
    assert (await first).ok
    assert _orders(planner) == [("b", 0), ("a", 1)]


@pytest.mark.asyncio
async def test_virtual_instance_is_stored_on_first_change(planner, repositories) -> None:
    seed(repositories, tasks=[
        make_task("t", 0, recurring_type=RecurringType.DAILY),
        make_task("x", 1),
    ])
    await planner.load()
    day = date(2024, 1, 3)
    vid = virtual_id("t", day)
    assert vid in {t.id for t in planner.tasks_for_date(day)}

    result = await planner.update_task(vid, {"status": "completed"})

    instance = result.value
    assert instance.id != vid
    assert instance.original_task_id == "t"
    assert instance.due_date == day
    assert instance.status == TaskStatus.COMPLETED
    assert instance.recurring_type == RecurringType.NONE
    assert instance.id in repositories.tasks.records
    assert _orders(planner) == [("t", 0), (instance.id, 1), ("x", 2)]

    ids_on_day = {t.id for t in planner.tasks_for_date(day)}
    assert instance.id in ids_on_day and vid not in ids_on_day
    assert virtual_id("t", day + timedelta(days=1)) in {
        t.id for t in planner.tasks_for_date(day + timedelta(days=1))
    }

    again = await planner.update_task(vid, {"notes": "second edit"})
    assert again.value.id == instance.id


@pytest.mark.asyncio
async def test_unsaved_occurrence_cannot_be_deleted(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("t", recurring_type=RecurringType.DAILY)])
    await planner.load()

    result = await planner.delete_task(virtual_id("t", TODAY))

    assert result.error.kind == "validation_error"


@pytest.mark.asyncio
async def test_do_today_toggle_only_affects_that_day(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("t", 0), make_task("u", 1)])
    await planner.load()
    tomorrow = TODAY + timedelta(days=1)

    assert planner.next_available(TODAY).value.id == "t"
    toggled = await planner.toggle_do_today("t", TODAY)

    assert toggled.value is True
    assert planner.next_available(TODAY).value.id == "u"
    assert planner.next_available(tomorrow).value.id == "t"
    assert len(repositories.do_today.entries) == 1


@pytest.mark.asyncio
async def test_toggle_all_for_recurring_occurrences(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("t", 0, recurring_type=RecurringType.DAILY), make_task("u", 1)])
    await planner.load()

    result = await planner.toggle_all_do_today([virtual_id("t", TODAY), "u"], TODAY)

    assert result.value is True
    assert planner.is_do_today_off("t", TODAY).value is True
    assert planner.next_available(TODAY).value is None
    assert {e.task_id for e in repositories.do_today.entries.values()} == {"t", "u"}


@pytest.mark.asyncio
async def test_delete_section_moves_tasks_to_no_section(planner, repositories) -> None:
    seed(
        repositories,
        tasks=[
            make_task("loose", 0),
            make_task("a", 0, section_id="s"),
            make_task("b", 1, section_id="s"),
            make_task("a-sub", 0, parent_task_id="a", section_id="s"),
        ],
        sections=[make_section("s")],
    )
    await planner.load()

    result = await planner.delete_section("s")

    assert result.ok
    assert _orders(planner) == [("loose", 0), ("a", 1), ("b", 2)]
    assert planner.arena.require("a-sub").section_id is None
    assert "s" not in planner.sections and "s" not in repositories.sections.records


@pytest.mark.asyncio
async def test_delete_category_clears_tasks(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a", category="c")], categories=[make_category("c", "Work")])
    await planner.load()

    result = await planner.delete_category("c")

    assert result.value == ["a"]
    assert repositories.tasks.records["a"].category is None
    assert planner.categories == {}


@pytest.mark.asyncio
async def test_sections_and_categories_lifecycle(planner) -> None:
    first = await planner.create_section({"name": "Morning"})
    second = await planner.create_section({"name": "Evening"})
    focus = await planner.set_section_focus_mode(second.value.id, False)
    moved = await planner.reorder_sections(second.value.id, first.value.id, False)
    category = await planner.create_category({"name": "Health", "color": "green"})
    duplicate = await planner.create_category({"name": "health"})
    renamed = await planner.update_category(category.value.id, {"name": "Fitness"})

    assert focus.value.include_in_focus_mode is False
    assert moved.value.index == 0
    assert [s.name for s in planner.engine.ordered_sections()] == ["Evening", "Morning"]
    assert duplicate.error.kind == "validation_error"
    assert renamed.value.name == "Fitness"
    assert (await planner.update_section("missing", {"name": "x"})).error.kind == "not_found"


@pytest.mark.asyncio
async def test_bulk_operations(planner, repositories) -> None:
    seed(
        repositories,
        tasks=[
            make_task("a", 0, section_id="s"),
            make_task("b", 1, section_id="s"),
            make_task("c", 0),
        ],
        sections=[make_section("s")],
    )
    await planner.load()

    updated = await planner.bulk_update_tasks(["a", "c"], {"priority": "urgent"})
    completed = await planner.mark_section_completed("s", TODAY)
    archived = await planner.archive_all_completed()
    deleted = await planner.bulk_delete_tasks(["c", "c"])

    assert {t.priority for t in updated.value} == {TaskPriority.URGENT}
    assert {t.id for t in completed.value} == {"a", "b"}
    assert {t.id for t in archived.value} == {"a", "b"}
    assert repositories.tasks.records["a"].status == TaskStatus.ARCHIVED
    assert deleted.value == ["c"]


@pytest.mark.asyncio
async def test_project_and_progress(planner, repositories) -> None:
    seed(repositories, tasks=[
        make_task("a", 0, due_date=date(2023, 12, 31)),
        make_task("b", 1, notes="groceries"),
        make_task("c", 2, due_date=date(2024, 1, 9)),
    ])
    await planner.load()

    daily = planner.project({"view_mode": "daily", "view_date": TODAY})
    searched = planner.project({"search": "grocer"})
    invalid = planner.project({"view_mode": "weekly"})
    progress = planner.daily_progress(TODAY).value
    upcoming = planner.upcoming(TODAY).value

    assert [t.id for t in daily.value] == ["a", "b"]
    assert [t.id for t in searched.value] == ["b"]
    assert invalid.error.kind == "validation_error"
    assert (progress.total, progress.completed, progress.overdue) == (2, 0, 1)
    assert [t.id for t in upcoming] == ["b"]


@pytest.mark.asyncio
async def test_begin_drag_commits_through_reorder(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a", 0), make_task("b", 1)])
    await planner.load()

    session = planner.begin_drag("b").value
    indicator = session.update("a", None, None, False)
    committed = await session.commit()

    assert indicator.allowed
    assert committed.ok
    assert _orders(planner) == [("b", 0), ("a", 1)]
    assert planner.begin_drag("missing").error.kind == "not_found"


@pytest.mark.asyncio
async def test_failed_change_does_not_undo_a_later_one(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("a", 0), make_task("b", 1), make_task("c", 2)])
    await planner.load()
    blocking = BlockingRepository(repositories.tasks, fail_ids={"b"})
    repositories.tasks = blocking

    move = asyncio.create_task(planner.reorder("b", None, None, "a", False))
    await blocking.entered.wait()
    edit = asyncio.create_task(planner.update_task("c", {"description": "edited"}))
    await asyncio.sleep(0)
    blocking.release.set()
    moved, edited = await move, await edit

    assert moved.error.kind == "persistence_error"
    assert edited.ok
    assert planner.arena.require("c").description == "edited"
    assert blocking.inner.records["c"].description == "edited"
    assert _orders(planner) == [("a", 0), ("b", 1), ("c", 2)]


@pytest.mark.asyncio
async def test_occurrence_ids_only_resolve_on_due_days(planner, repositories) -> None:
    # 2024-01-01 is a Monday
    seed(repositories, tasks=[
        make_task("w", 0, recurring_type=RecurringType.WEEKLY),
        make_task("gone", 1, recurring_type=RecurringType.DAILY, status=TaskStatus.ARCHIVED),
    ])
    await planner.load()
    done = {"status": "completed"}

    wrong_weekday = await planner.update_task(virtual_id("w", date(2024, 1, 3)), done)
    before_start = await planner.update_task(virtual_id("w", date(2023, 12, 25)), done)
    archived = await planner.update_task(virtual_id("gone", TODAY), done)
    due = await planner.update_task(virtual_id("w", date(2024, 1, 8)), done)

    for result in (wrong_weekday, before_start, archived):
        assert result.error.kind == "not_found"
    assert due.ok
    assert set(repositories.tasks.records) == {"w", "gone", due.value.id}


@pytest.mark.asyncio
async def test_explicit_occurrence_must_be_unique_per_day(planner, repositories) -> None:
    seed(repositories, tasks=[make_task("t", 0, recurring_type=RecurringType.DAILY), make_task("plain", 1)])
    await planner.load()
    day = date(2024, 1, 2)

    first = await planner.create_task({"description": "Run", "original_task_id": "t", "due_date": day})
    second = await planner.create_task({"description": "Run", "original_task_id": "t", "due_date": day})
    not_template = await planner.create_task({"description": "x", "original_task_id": "plain", "due_date": day})
    undated = await planner.create_task({"description": "x", "original_task_id": "t"})

    assert first.ok
    assert first.value.recurring_type == RecurringType.NONE
    for result in (second, not_template, undated):
        assert result.error.kind == "validation_error"
    assert [t.id for t in planner.tasks_for_date(day) if t.original_task_id == "t"] == [first.value.id]


@pytest.mark.asyncio
async def test_deleting_recurring_task_removes_its_occurrences(planner, repositories) -> None:
    seed(repositories, tasks=[
        make_task("t", 0, recurring_type=RecurringType.DAILY),
        make_task("i1", 1, original_task_id="t", due_date=TODAY),
        make_task("i1-sub", 0, parent_task_id="i1"),
        make_task("keep", 2),
    ])
    repositories.do_today.entries["t:2024-01-01"] = DoTodayOffEntry(user_id=USER_ID, task_id="t", off_date=TODAY)
    await planner.load()

    result = await planner.delete_task("t")

    assert result.value == ["i1-sub", "i1", "t"]
    assert set(repositories.tasks.records) == {"keep"}
    assert repositories.do_today.entries == {}
    assert [t.id for t in planner.tasks_for_date(TODAY)] == ["keep"]


@pytest.mark.asyncio
async def test_suggestion_resolves_names_to_ids(planner, repositories, suggestions) -> None:
    seed(repositories, sections=[make_section("s", name="Errands")], categories=[make_category("c", "Home")])
    await planner.load()
    suggestions.next_suggestion = TaskSuggestion(
        cleaned_description="Buy light bulbs",
        category="home",
        priority="HIGH",
        due_date=date(2024, 1, 2),
        section="Unknown",
        link="https://example.com/bulbs",
    )

    result = await planner.suggest_task("buy light bulbs tomorrow https://example.com/bulbs", TODAY)

    prefill = result.value
    assert prefill.description == "Buy light bulbs"
    assert prefill.category == "c"
    assert prefill.section_id is None
    assert prefill.priority == TaskPriority.HIGH
    assert suggestions.calls[0][1:] == (["Home"], ["Errands"], TODAY)
    assert len(planner.arena) == 0


@pytest.mark.asyncio
async def test_suggestion_failures_yield_no_prefill(planner, suggestions) -> None:
    suggestions.error = RuntimeError("model unavailable")

    failed = await planner.suggest_task("anything")
    empty = await planner.suggest_task("   ")

    assert failed.ok and failed.value is None
    assert empty.error.kind == "validation_error"
