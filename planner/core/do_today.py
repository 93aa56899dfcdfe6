"""Per-day "Do Today" exclusion overlay"""
import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Set, Union

from planner.models.do_today import DoTodayOffEntry
from planner.models.task import Task

logger = logging.getLogger(__name__)

TaskOrKey = Union[Task, str]

# Share of currently-included tasks at or above which toggle-all switches everything off
TOGGLE_ALL_THRESHOLD = 0.5


def exclusion_key(task_or_key: TaskOrKey) -> str:
    """Recurring instances are keyed on their template so the exclusion only applies to one day"""
    if isinstance(task_or_key, Task):
        return task_or_key.do_today_key
    return task_or_key


class DoTodayFilter:
    """Tracks which tasks are switched off "Do Today", per calendar day"""

    def __init__(self):
        self._off: Dict[date, Set[str]] = {}

    def load(self, entries: Iterable[DoTodayOffEntry]) -> None:
        self._off = {}
        for entry in entries:
            self._off.setdefault(entry.off_date, set()).add(entry.task_id)

    def entries(self, user_id: str) -> List[DoTodayOffEntry]:
        return [
            DoTodayOffEntry(user_id=user_id, task_id=key, off_date=day)
            for day, keys in sorted(self._off.items())
            for key in sorted(keys)
        ]

    def snapshot(self) -> Dict[date, FrozenSet[str]]:
        return {day: frozenset(keys) for day, keys in self._off.items()}

    def restore(self, snapshot: Dict[date, FrozenSet[str]]) -> None:
        self._off = {day: set(keys) for day, keys in snapshot.items()}

    def excluded_keys(self, day: date) -> FrozenSet[str]:
        return frozenset(self._off.get(day, ()))

    def is_excluded(self, task_or_key: TaskOrKey, day: date) -> bool:
        return exclusion_key(task_or_key) in self._off.get(day, ())

    def set_excluded(self, task_or_key: TaskOrKey, day: date, excluded: bool) -> bool:
        """Force a state; returns True when it changed"""
        key = exclusion_key(task_or_key)
        keys = self._off.setdefault(day, set())
        if excluded == (key in keys):
            return False
        if excluded:
            keys.add(key)
        else:
            keys.discard(key)
        if not keys:
            del self._off[day]
        return True

    def toggle(self, task_or_key: TaskOrKey, day: date) -> bool:
        """Flip one task for one day; returns the new excluded state"""
        excluded = not self.is_excluded(task_or_key, day)
        self.set_excluded(task_or_key, day, excluded)
        return excluded

    def toggle_all(self, visible: Iterable[TaskOrKey], day: date) -> bool:
        """
        Flip every visible task to the same state.

        If at least half of the visible tasks are currently included, all of
        them are excluded; otherwise all are included again.

        Returns:
            The excluded state every visible task now has
        """
        keys = list(dict.fromkeys(exclusion_key(v) for v in visible))
        if not keys:
            return False

        included = sum(1 for key in keys if not self.is_excluded(key, day))
        exclude_all = included >= len(keys) * TOGGLE_ALL_THRESHOLD
        for key in keys:
            self.set_excluded(key, day, exclude_all)
        logger.debug(f"Toggled {len(keys)} tasks {'off' if exclude_all else 'on'} for {day}")
        return exclude_all

    def forget(self, key: str) -> None:
        """Drop every exclusion of a deleted task"""
        for day in list(self._off):
            self._off[day].discard(key)
            if not self._off[day]:
                del self._off[day]
