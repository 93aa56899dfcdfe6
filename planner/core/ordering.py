"""Sibling ordering and drag-driven reassignment

Every task lives in a sibling scope ``(parent_task_id, section_id)`` and
``order`` is strictly increasing inside that scope. Reassignment always
renumbers the affected scopes to contiguous integers, so a committed plan
never leaves duplicate or out-of-sequence orders behind.
"""
import logging
from typing import Dict, List, MutableMapping, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel

from planner.models.section import NO_SECTION, Section
from planner.models.task import Task

from .arena import TaskArena
from .errors import CycleError, NotFoundError

logger = logging.getLogger(__name__)

Item = TypeVar("Item", Task, Section)


class OrderUpdate(BaseModel):
    """New placement of one task"""
    id: str
    order: float
    parent_task_id: Optional[str] = None
    section_id: Optional[str] = None


class ReorderPlan(BaseModel):
    """Batched placement changes produced by a single reorder"""
    active_id: str
    parent_task_id: Optional[str] = None
    section_id: Optional[str] = None
    index: int
    updates: List[OrderUpdate] = []

    @property
    def changed_ids(self) -> List[str]:
        return [u.id for u in self.updates]


class SectionOrderUpdate(BaseModel):
    """New position of one section"""
    id: str
    order: float


class SectionReorderPlan(BaseModel):
    """Batched section order changes"""
    active_id: str
    index: int
    updates: List[SectionOrderUpdate] = []


def place(items: Sequence[Item], active: Item, over_id: Optional[str], is_moving_forward: bool) -> List[Item]:
    """
    Insert ``active`` into ``items`` relative to ``over_id``.

    ``items`` is the destination list in render order, with or without the
    active item. When ``over_id`` is None the active item goes last; otherwise
    it lands right after the target when moving forward and right before it
    when moving backward.
    """
    others = [i for i in items if i.id != active.id]

    if over_id is None:
        return others + [active]

    if over_id == active.id:
        # Dropped onto itself: keep the current slot if it is already in this list
        current = [i.id for i in items]
        if active.id in current:
            return list(items)
        return others + [active]

    for idx, item in enumerate(others):
        if item.id == over_id:
            insert_at = idx + 1 if is_moving_forward else idx
            return others[:insert_at] + [active] + others[insert_at:]

    raise NotFoundError(f"Drop target {over_id} is not in the destination list", record_id=over_id)


class OrderingEngine:
    """Validates and applies task and section reordering against the arena"""

    def __init__(self, arena: TaskArena, sections: MutableMapping[str, Section]):
        self._arena = arena
        self._sections = sections

    @property
    def arena(self) -> TaskArena:
        return self._arena

    @property
    def sections(self) -> MutableMapping[str, Section]:
        return self._sections

    def is_section_header(self, target_id: Optional[str]) -> bool:
        if target_id is None or target_id in self._arena:
            return False
        return target_id == NO_SECTION or target_id in self._sections

    def ordered_sections(self) -> List[Section]:
        return sorted(self._sections.values(), key=lambda s: s.sort_key)

    def validate_parent(self, active_id: str, new_parent_id: Optional[str]) -> Optional[Task]:
        """Reject parent assignments that would create a cycle; returns the parent record"""
        if new_parent_id is None:
            return None
        if new_parent_id == active_id:
            raise CycleError(f"Task {active_id} cannot be its own parent", record_id=active_id)
        parent = self._arena.require(new_parent_id)
        if active_id in self._arena.ancestors(new_parent_id):
            raise CycleError(
                f"Task {new_parent_id} is a descendant of {active_id}",
                record_id=active_id,
            )
        return parent

    def _resolve_scope(
        self,
        active: Task,
        new_parent_id: Optional[str],
        new_section_id: Optional[str],
        over_id: Optional[str],
    ) -> Tuple[Optional[str], Optional[str], bool]:
        """Returns (parent_id, section_id, dropped_on_header)"""
        if self.is_section_header(over_id):
            return None, (None if over_id == NO_SECTION else over_id), True

        parent = self.validate_parent(active.id, new_parent_id)
        if parent is not None:
            # Subtasks always live in their parent's section
            return parent.id, parent.section_id, False

        if new_section_id == NO_SECTION:
            new_section_id = None
        if new_section_id is not None and new_section_id not in self._sections:
            raise NotFoundError(f"Section {new_section_id} not found", record_id=new_section_id)
        return None, new_section_id, False

    def plan_reorder(
        self,
        active_id: str,
        new_parent_id: Optional[str],
        new_section_id: Optional[str],
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> ReorderPlan:
        """Compute the placement changes for a drop without touching the arena"""
        active = self._arena.require(active_id)
        parent_id, section_id, on_header = self._resolve_scope(active, new_parent_id, new_section_id, over_id)

        destination = self._arena.siblings(parent_id, section_id)
        if on_header:
            others = [t for t in destination if t.id != active.id]
            arranged = [active] + others
        else:
            if over_id is not None and over_id != active.id and over_id not in self._arena:
                raise NotFoundError(f"Task {over_id} not found", record_id=over_id)
            arranged = place(destination, active, over_id, is_moving_forward)

        updates: Dict[str, OrderUpdate] = {}
        scope_changed = (active.parent_task_id, active.section_id) != (parent_id, section_id)

        for index, task in enumerate(arranged):
            if task.id == active.id:
                if scope_changed or task.order != index:
                    updates[task.id] = OrderUpdate(
                        id=task.id, order=index, parent_task_id=parent_id, section_id=section_id
                    )
            elif task.order != index:
                updates[task.id] = OrderUpdate(
                    id=task.id, order=index,
                    parent_task_id=task.parent_task_id, section_id=task.section_id,
                )

        if scope_changed:
            # Close the gap left in the old scope
            remaining = [
                t for t in self._arena.siblings(active.parent_task_id, active.section_id)
                if t.id != active.id
            ]
            for index, task in enumerate(remaining):
                if task.order != index:
                    updates[task.id] = OrderUpdate(
                        id=task.id, order=index,
                        parent_task_id=task.parent_task_id, section_id=task.section_id,
                    )

        if section_id != active.section_id:
            for child_id in self._arena.descendants(active.id):
                child = self._arena.require(child_id)
                if child.section_id != section_id:
                    updates[child_id] = OrderUpdate(
                        id=child_id, order=child.order,
                        parent_task_id=child.parent_task_id, section_id=section_id,
                    )

        index = next(i for i, t in enumerate(arranged) if t.id == active.id)
        return ReorderPlan(
            active_id=active.id,
            parent_task_id=parent_id,
            section_id=section_id,
            index=index,
            updates=list(updates.values()),
        )

    def apply(self, plan: ReorderPlan) -> List[Task]:
        """Write a plan into the arena; returns the replaced task records"""
        changed: List[Task] = []
        for update in plan.updates:
            task = self._arena.require(update.id)
            moved = task.model_copy(update={
                "order": update.order,
                "parent_task_id": update.parent_task_id,
                "section_id": update.section_id,
            })
            self._arena.put(moved)
            changed.append(moved)
        return changed

    def reorder(
        self,
        active_id: str,
        new_parent_id: Optional[str],
        new_section_id: Optional[str],
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> ReorderPlan:
        """Validate, plan and apply a task drop"""
        plan = self.plan_reorder(active_id, new_parent_id, new_section_id, over_id, is_moving_forward)
        self.apply(plan)
        logger.debug(
            f"Reordered task {active_id} into ({plan.parent_task_id}, {plan.section_id}) "
            f"at {plan.index}, {len(plan.updates)} rows changed"
        )
        return plan

    def append_position(self, parent_id: Optional[str], section_id: Optional[str]) -> float:
        """Order value that places a new task last in its scope"""
        siblings = self._arena.siblings(parent_id, section_id)
        if not siblings:
            return 0
        return max(t.order for t in siblings) + 1

    def plan_section_reorder(
        self,
        active_id: str,
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> SectionReorderPlan:
        active = self._sections.get(active_id)
        if active is None:
            raise NotFoundError(f"Section {active_id} not found", record_id=active_id)
        if over_id == NO_SECTION:
            over_id = None

        arranged = place(self.ordered_sections(), active, over_id, is_moving_forward)
        updates = [
            SectionOrderUpdate(id=section.id, order=index)
            for index, section in enumerate(arranged)
            if section.order != index
        ]
        index = next(i for i, s in enumerate(arranged) if s.id == active_id)
        return SectionReorderPlan(active_id=active_id, index=index, updates=updates)

    def reorder_sections(
        self,
        active_id: str,
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> SectionReorderPlan:
        """Move one section within the global section list"""
        plan = self.plan_section_reorder(active_id, over_id, is_moving_forward)
        for update in plan.updates:
            self._sections[update.id] = self._sections[update.id].model_copy(update={"order": update.order})
        return plan

    def append_section_position(self) -> float:
        if not self._sections:
            return 0
        return max(s.order for s in self._sections.values()) + 1
