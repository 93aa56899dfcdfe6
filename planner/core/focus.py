"""Focus-mode selection: next available task and the upcoming queue"""
from datetime import date
from typing import Collection, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from planner.models.section import Section
from planner.models.task import Task, TaskStatus

from .arena import sort_siblings


class DailyProgress(BaseModel):
    """Counts shown in the daily progress header"""
    total: int = 0
    completed: int = 0
    overdue: int = 0


def focus_section_ids(sections: Iterable[Section]) -> set:
    return {s.id for s in sections if s.include_in_focus_mode}


def in_focus_area(task: Task, focus_ids: Collection[str]) -> bool:
    # The no-section bucket always counts as part of Focus Mode
    return task.section_id is None or task.section_id in focus_ids


class FocusSelector:
    """Picks the current priority task from a projected view"""

    def _candidates(
        self,
        projected: Iterable[Task],
        do_today_off: Collection[str],
        sections: Optional[Sequence[Section]],
        focus_mode_only: bool,
    ) -> List[Task]:
        focus_ids = focus_section_ids(sections or [])
        eligible = [
            t for t in projected
            if t.parent_task_id is None
            and t.status == TaskStatus.TODO
            and t.do_today_key not in do_today_off
            and (not focus_mode_only or in_focus_area(t, focus_ids))
        ]
        if sections is None:
            return sort_siblings(eligible)

        ordered: List[Task] = []
        section_ids = set()
        for section in sorted(sections, key=lambda s: s.sort_key):
            section_ids.add(section.id)
            ordered.extend(sort_siblings(t for t in eligible if t.section_id == section.id))
        ordered.extend(sort_siblings(t for t in eligible if t.section_id not in section_ids))
        return ordered

    def next_available(
        self,
        projected: Iterable[Task],
        do_today_off: Collection[str] = frozenset(),
        sections: Optional[Sequence[Section]] = None,
        focus_mode_only: bool = False,
        focused_task_id: Optional[str] = None,
    ) -> Optional[Task]:
        """
        First eligible top-level to-do task.

        Sections are walked in list order and the no-section bucket last;
        inside a section tasks are taken by ascending order. A pinned
        ``focused_task_id`` wins when it is itself eligible.
        """
        candidates = self._candidates(projected, do_today_off, sections, focus_mode_only)
        if focused_task_id is not None:
            for task in candidates:
                if task.id == focused_task_id:
                    return task
        return candidates[0] if candidates else None

    def upcoming(
        self,
        next_task: Optional[Task],
        projected: Iterable[Task],
        do_today_off: Collection[str] = frozenset(),
        n: int = 5,
        sections: Optional[Sequence[Section]] = None,
        focus_mode_only: bool = False,
    ) -> List[Task]:
        """The ``n`` eligible top-level tasks that follow ``next_task``"""
        if next_task is None or n <= 0:
            return []
        candidates = self._candidates(projected, do_today_off, sections, focus_mode_only)
        ids = [t.id for t in candidates]
        if next_task.id in ids:
            candidates = candidates[ids.index(next_task.id) + 1:]
        return [
            t for t in candidates
            if t.id != next_task.id and t.parent_task_id != next_task.id
        ][:n]

    def daily_progress(
        self,
        projected: Iterable[Task],
        sections: Sequence[Section],
        do_today_off: Collection[str],
        day: date,
    ) -> DailyProgress:
        focus_ids = focus_section_ids(sections)
        focus_tasks = [
            t for t in projected
            if t.parent_task_id is None
            and in_focus_area(t, focus_ids)
            and t.do_today_key not in do_today_off
        ]
        done = (TaskStatus.COMPLETED, TaskStatus.ARCHIVED)
        return DailyProgress(
            total=sum(1 for t in focus_tasks if t.status != TaskStatus.SKIPPED),
            completed=sum(1 for t in focus_tasks if t.status in done),
            overdue=sum(
                1 for t in focus_tasks
                if t.status not in done and t.due_date is not None and t.due_date < day
            ),
        )
