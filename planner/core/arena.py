"""Id-indexed arena of task records

Parent/child links are plain id fields on the records. The arena answers
hierarchy questions (children, siblings, ancestors, descendants) by walking
those ids, and never holds object references between tasks.
"""
import logging
from typing import Dict, Iterable, List, Optional

from planner.models.task import Task

from .errors import CycleError, NotFoundError

logger = logging.getLogger(__name__)


def sort_siblings(tasks: Iterable[Task]) -> List[Task]:
    """Sort by order, breaking ties on created_at then id"""
    return sorted(tasks, key=lambda t: t.sort_key)


class TaskArena:
    """In-memory, id-indexed collection of tasks for a single owner"""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Dict[str, Task] = {t.id: t for t in tasks}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: Optional[str]) -> Optional[Task]:
        if task_id is None:
            return None
        return self._tasks.get(task_id)

    def require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found", record_id=task_id)
        return task

    def all(self) -> List[Task]:
        return list(self._tasks.values())

    def put(self, task: Task) -> None:
        # Records are replaced, never mutated in place, so snapshots stay valid
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> Optional[Task]:
        return self._tasks.pop(task_id, None)

    def snapshot(self) -> Dict[str, Task]:
        return dict(self._tasks)

    def restore(self, snapshot: Dict[str, Task]) -> None:
        self._tasks = dict(snapshot)

    def children(self, parent_id: Optional[str]) -> List[Task]:
        """Direct children of a task, in render order"""
        return sort_siblings(t for t in self._tasks.values() if t.parent_task_id == parent_id)

    def siblings(self, parent_id: Optional[str], section_id: Optional[str]) -> List[Task]:
        """All tasks of one (parent, section) scope, in render order"""
        return sort_siblings(
            t for t in self._tasks.values()
            if t.parent_task_id == parent_id and t.section_id == section_id
        )

    def ancestors(self, task_id: str) -> List[str]:
        """Ids on the parent chain, nearest first"""
        chain: List[str] = []
        seen = {task_id}
        current = self.require(task_id).parent_task_id
        while current is not None:
            if current in seen:
                # Only legacy data can get here; reorder validation keeps the graph acyclic
                raise CycleError(f"Task {task_id} has a cyclic parent chain", record_id=task_id)
            seen.add(current)
            chain.append(current)
            parent = self._tasks.get(current)
            if parent is None:
                logger.warning(f"Task {task_id} references missing ancestor {current}")
                break
            current = parent.parent_task_id
        return chain

    def descendants(self, task_id: str) -> List[str]:
        """Ids of the whole subtree below a task, breadth first"""
        by_parent: Dict[str, List[str]] = {}
        for t in self._tasks.values():
            if t.parent_task_id is not None:
                by_parent.setdefault(t.parent_task_id, []).append(t.id)

        result: List[str] = []
        seen = {task_id}
        queue = [task_id]
        while queue:
            for child_id in by_parent.get(queue.pop(0), []):
                if child_id not in seen:
                    seen.add(child_id)
                    result.append(child_id)
                    queue.append(child_id)
        return result

    def is_descendant(self, candidate_id: str, ancestor_id: str) -> bool:
        return ancestor_id in self.ancestors(candidate_id)
