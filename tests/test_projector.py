# tests/test_projector.py

from datetime import date, datetime, timezone

from planner.core.projector import (
    TaskFilters,
    ViewMode,
    ViewProjector,
    build_tree,
    canonical_order,
    group_by_section,
)
from planner.models.section import NO_SECTION
from planner.models.task import TaskPriority, TaskStatus

from .fakes import TODAY, make_section, make_task


def _ids(tasks):
    return [t.id for t in tasks]


def test_daily_view_shows_due_and_recently_finished_tasks() -> None:
    earlier = datetime(2023, 12, 30, tzinfo=timezone.utc)
    today = datetime(2024, 1, 1, 15, 0, tzinfo=timezone.utc)
    tasks = [
        make_task("overdue", 0, due_date=date(2023, 12, 31)),
        make_task("future", 1, due_date=date(2024, 1, 2)),
        make_task("undated", 2),
        make_task("done-today", 3, status=TaskStatus.COMPLETED, updated_at=today),
        make_task("done-before", 4, status=TaskStatus.COMPLETED, updated_at=earlier),
    ]

    projected = ViewProjector().project(tasks, TaskFilters(view_mode=ViewMode.DAILY, view_date=TODAY))

    assert _ids(projected) == ["overdue", "undated", "done-today"]


def test_archive_view_and_status_all() -> None:
    tasks = [
        make_task("open", 0),
        make_task("archived", 1, status=TaskStatus.ARCHIVED),
        make_task("skipped", 2, status=TaskStatus.SKIPPED),
    ]
    projector = ViewProjector()

    assert _ids(projector.project(tasks, TaskFilters())) == ["open", "skipped"]
    assert _ids(projector.project(tasks, TaskFilters(view_mode=ViewMode.ARCHIVE))) == ["archived"]
    assert _ids(projector.project(tasks, TaskFilters(status="skipped"))) == ["skipped"]


def test_field_filters_preserve_order() -> None:
    tasks = [
        make_task("c", 0, notes="call the dentist", priority=TaskPriority.HIGH),
        make_task("a", 1, section_id="s1", category="work"),
        make_task("b", 2, description="Dentist invoice", due_date=date(2024, 1, 10)),
    ]
    projector = ViewProjector()

    assert _ids(projector.project(tasks, TaskFilters(search="DENTIST"))) == ["c", "b"]
    assert _ids(projector.project(tasks, TaskFilters(section=NO_SECTION))) == ["c", "b"]
    assert _ids(projector.project(tasks, TaskFilters(category="work"))) == ["a"]
    assert _ids(projector.project(tasks, TaskFilters(priority="high"))) == ["c"]
    assert _ids(projector.project(
        tasks, TaskFilters(due_from=date(2024, 1, 5), include_undated=False)
    )) == ["b"]


def test_canonical_order_groups_sections_and_nests_subtasks() -> None:
    sections = [make_section("s2", 1), make_section("s1", 0)]
    tasks = [
        make_task("loose", 0),
        make_task("b", 1, section_id="s1"),
        make_task("a", 0, section_id="s1"),
        make_task("a-sub", 0, parent_task_id="a", section_id="s1"),
        make_task("z", 0, section_id="s2"),
    ]

    assert _ids(canonical_order(tasks, sections)) == ["a", "a-sub", "b", "z", "loose"]
    groups = group_by_section(tasks, sections)
    assert [g.section.id if g.section else None for g in groups] == ["s1", "s2", None]


def test_tree_keeps_tasks_whose_parent_was_filtered_out() -> None:
    tasks = [
        make_task("child", 0, parent_task_id="hidden"),
        make_task("root", 1),
        make_task("leaf", 0, parent_task_id="root"),
    ]

    roots = build_tree(tasks)

    assert _ids(n.task for n in roots) == ["child", "root"]
    assert _ids(n.task for n in roots[1].children) == ["leaf"]
