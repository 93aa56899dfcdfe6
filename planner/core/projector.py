"""View projection: page filters and render ordering over the merged task set"""
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from planner.models.section import NO_SECTION, Section
from planner.models.task import Task, TaskPriority, TaskStatus

from .arena import sort_siblings

ALL = "all"


class ViewMode(str, Enum):
    """Which page the projection feeds"""
    DAILY = "daily"
    ARCHIVE = "archive"
    FOCUS = "focus"
    ALL = "all"


class TaskFilters(BaseModel):
    """Filters a page applies on top of the merged task set"""
    search: Optional[str] = None
    status: str = ALL
    category: str = ALL
    priority: str = ALL
    section: str = ALL
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    include_undated: bool = True
    view_mode: ViewMode = ViewMode.ALL
    view_date: Optional[date] = None
    visible_days_ahead: int = Field(-1, ge=-1)


class TaskNode(BaseModel):
    """A task with its ordered subtree"""
    task: Task
    children: List["TaskNode"] = []


TaskNode.model_rebuild()


class SectionGroup(BaseModel):
    """Tasks of one section (section is None for the no-section bucket)"""
    section: Optional[Section] = None
    tasks: List[Task] = []


def _matches_daily(task: Task, day: date) -> bool:
    # Completed or archived today stays visible for the rest of the day
    if task.status in (TaskStatus.COMPLETED, TaskStatus.ARCHIVED):
        return task.updated_at is not None and task.updated_at.date() == day
    if task.status == TaskStatus.TODO:
        if task.due_date is not None:
            return task.due_date <= day
        return task.created_at.date() <= day
    return False


def _matches_search(task: Task, needle: str) -> bool:
    needle = needle.lower()
    return any(
        value is not None and needle in value.lower()
        for value in (task.description, task.notes, task.link)
    )


def _matches_due(task: Task, filters: TaskFilters) -> bool:
    if task.due_date is None:
        return filters.include_undated
    if filters.due_from is not None and task.due_date < filters.due_from:
        return False
    if filters.due_to is not None and task.due_date > filters.due_to:
        return False
    return True


class ViewProjector:
    """Pure, order-preserving filtering of task lists"""

    def project(self, tasks: Iterable[Task], filters: TaskFilters) -> List[Task]:
        view_date = filters.view_date or date.today()
        result: List[Task] = []

        for task in tasks:
            if filters.view_mode == ViewMode.DAILY and not _matches_daily(task, view_date):
                continue

            if filters.search and not _matches_search(task, filters.search):
                continue

            if filters.view_mode == ViewMode.ARCHIVE:
                if task.status != TaskStatus.ARCHIVED:
                    continue
            elif filters.status == ALL:
                if task.status == TaskStatus.ARCHIVED:
                    continue
            elif task.status.value != filters.status:
                continue

            if filters.category != ALL and task.category != filters.category:
                continue

            if filters.priority != ALL and task.priority.value != filters.priority:
                continue

            if filters.section != ALL:
                wanted = None if filters.section == NO_SECTION else filters.section
                if task.section_id != wanted:
                    continue

            if not _matches_due(task, filters):
                continue

            if (
                filters.view_mode == ViewMode.DAILY
                and filters.visible_days_ahead != -1
                and task.due_date is not None
                and task.due_date > view_date + timedelta(days=filters.visible_days_ahead)
            ):
                continue

            result.append(task)
        return result


def build_tree(tasks: Iterable[Task]) -> List[TaskNode]:
    """
    Nest tasks under their parents, siblings in render order.

    Tasks whose parent is not part of ``tasks`` become roots, so a filtered
    list still renders every task it contains.
    """
    tasks = list(tasks)
    present = {t.id for t in tasks}
    by_parent: Dict[Optional[str], List[Task]] = {}
    for task in tasks:
        parent = task.parent_task_id if task.parent_task_id in present else None
        by_parent.setdefault(parent, []).append(task)

    def nodes(parent_id: Optional[str], trail: Tuple[str, ...]) -> List[TaskNode]:
        return [
            TaskNode(task=t, children=nodes(t.id, trail + (t.id,)) if t.id not in trail else [])
            for t in sort_siblings(by_parent.get(parent_id, []))
        ]

    return nodes(None, ())


def flatten(nodes: Sequence[TaskNode]) -> List[Task]:
    out: List[Task] = []
    for node in nodes:
        out.append(node.task)
        out.extend(flatten(node.children))
    return out


def group_by_section(tasks: Iterable[Task], sections: Iterable[Section]) -> List[SectionGroup]:
    """Section groups in section-list order, followed by the no-section bucket"""
    tasks = list(tasks)
    groups = [
        SectionGroup(section=s, tasks=[t for t in tasks if t.section_id == s.id])
        for s in sorted(sections, key=lambda s: s.sort_key)
    ]
    known = {g.section.id for g in groups}
    groups.append(SectionGroup(section=None, tasks=[t for t in tasks if t.section_id not in known]))
    return groups


def canonical_order(tasks: Iterable[Task], sections: Iterable[Section]) -> List[Task]:
    """Render order: per section group, each task followed by its subtree"""
    ordered: List[Task] = []
    for group in group_by_section(tasks, sections):
        ordered.extend(flatten(build_tree(group.tasks)))
    return ordered
