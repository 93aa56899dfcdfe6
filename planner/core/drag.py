"""Three-phase drag protocol: begin, update, commit

``update`` only previews a drop against the state captured at ``begin``;
the canonical arena is touched once, by ``commit``.
"""
import logging
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from .arena import TaskArena
from .errors import PlannerError
from .ordering import OrderingEngine
from .result import Result

logger = logging.getLogger(__name__)

CommitFn = Callable[[str, Optional[str], Optional[str], Optional[str], bool], Awaitable[Result]]


class DropTarget(BaseModel):
    """Arguments of the reorder a drop would perform"""
    over_id: Optional[str] = None
    new_parent_id: Optional[str] = None
    new_section_id: Optional[str] = None
    is_moving_forward: bool = False


class DropIndicator(BaseModel):
    """Where the dragged task would land"""
    allowed: bool
    parent_task_id: Optional[str] = None
    section_id: Optional[str] = None
    index: Optional[int] = None
    reason: Optional[str] = None


class DragSession:
    """A single in-progress drag of one task"""

    def __init__(
        self,
        engine: OrderingEngine,
        active_id: str,
        commit_fn: CommitFn,
        resolve: Optional[Callable[[Optional[str]], Optional[str]]] = None,
    ):
        self.active_id = active_id
        self._commit_fn = commit_fn
        # Maps ids the UI shows (e.g. unsaved recurring occurrences) to records the arena holds
        self._resolve = resolve or (lambda task_id: task_id)
        self._snapshot = engine.arena.snapshot()
        # Previews run on a frozen copy so re-renders during the drag do not shift the indicator
        self._preview = OrderingEngine(TaskArena(self._snapshot.values()), engine.sections)
        self._target: Optional[DropTarget] = None
        self._closed = False

    @property
    def target(self) -> Optional[DropTarget]:
        return self._target

    @property
    def closed(self) -> bool:
        return self._closed

    def update(
        self,
        over_id: Optional[str],
        new_parent_id: Optional[str],
        new_section_id: Optional[str],
        is_moving_forward: bool,
    ) -> DropIndicator:
        """Record the current hover target and preview the drop"""
        self._target = DropTarget(
            over_id=over_id,
            new_parent_id=new_parent_id,
            new_section_id=new_section_id,
            is_moving_forward=is_moving_forward,
        )
        try:
            plan = self._preview.plan_reorder(
                self._resolve(self.active_id),
                self._resolve(new_parent_id),
                new_section_id,
                self._resolve(over_id),
                is_moving_forward,
            )
        except PlannerError as e:
            return DropIndicator(allowed=False, reason=e.message)
        return DropIndicator(
            allowed=True,
            parent_task_id=plan.parent_task_id,
            section_id=plan.section_id,
            index=plan.index,
        )

    async def commit(self) -> Result:
        """Perform the single reorder for this drag; a drop without a target is a no-op"""
        if self._closed:
            logger.warning(f"Drag of {self.active_id} committed after it was closed")
            return Result.success(None)
        self._closed = True
        if self._target is None:
            return Result.success(None)
        t = self._target
        return await self._commit_fn(
            self.active_id, t.new_parent_id, t.new_section_id, t.over_id, t.is_moving_forward
        )

    def cancel(self) -> None:
        self._closed = True
        self._target = None
