"""Per-user planner service

Holds the user's tasks, sections, categories and Do Today overlay in memory,
applies every change optimistically and writes it back through the
repositories. A failed write-back restores the state captured before the
change, so callers see either the whole change or none of it.
"""
import asyncio
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from planner.config import Settings, get_settings
from planner.core.arena import TaskArena, sort_siblings
from planner.core.do_today import DoTodayFilter
from planner.core.drag import DragSession
from planner.core.errors import (
    CommitInProgressError,
    NotFoundError,
    PersistenceError,
    PlannerError,
    ValidationError,
)
from planner.core.focus import DailyProgress, FocusSelector
from planner.core.ordering import OrderingEngine, ReorderPlan, SectionReorderPlan
from planner.core.projector import TaskFilters, ViewMode, ViewProjector, canonical_order
from planner.core.recurrence import (
    RecurrenceExpander,
    is_due,
    is_virtual_id,
    parse_virtual_id,
    synthesize_instance,
)
from planner.core.result import Result
from planner.models.category import Category, CategoryCreate, CategoryUpdate
from planner.models.do_today import DoTodayOffEntry
from planner.models.section import NO_SECTION, Section, SectionCreate, SectionUpdate
from planner.models.task import RecurringType, Task, TaskCreate, TaskPrefill, TaskPriority, TaskStatus, TaskUpdate

from .persistence import Persister, WriteBatch

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any]]

# Task fields that may be omitted from an update but never cleared
_REQUIRED_TASK_FIELDS = ("description", "status", "priority", "recurring_type")


def _validation_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first['msg']}" if field else first["msg"]


def _coerce(model_class: Type[M], data: Optional[Payload], **defaults: Any) -> M:
    """Validate caller input into ``model_class``; pydantic errors become ValidationError"""
    if isinstance(data, model_class):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model_class.model_validate({**defaults, **(data or {})})
    except PydanticValidationError as e:
        raise ValidationError(_validation_message(e))


Snapshot = Tuple[Dict[str, Task], Dict[str, Section], Dict[str, Category], Dict]


class PlannerService:
    """All planner operations for one user"""

    def __init__(
        self,
        user_id: str,
        repositories: Any,
        settings: Optional[Settings] = None,
        suggestion_service: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        settings = settings or get_settings()
        self.user_id = user_id
        self._repos = repositories
        self._suggestions = suggestion_service
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.arena = TaskArena()
        self.sections: Dict[str, Section] = {}
        self.categories: Dict[str, Category] = {}
        self.do_today = DoTodayFilter()

        self.engine = OrderingEngine(self.arena, self.sections)
        self.expander = RecurrenceExpander()
        self.projector = ViewProjector()
        self.focus = FocusSelector()
        self.persister = Persister(
            max_retries=settings.persist_max_retries,
            retry_delay=settings.persist_retry_delay_seconds,
        )
        self._commit_in_flight = False
        # Held across apply and write-back of each change, and across load
        self._lock = asyncio.Lock()

    # ---------------------------------------------------------------
    # State management
    # ---------------------------------------------------------------

    def _now(self) -> datetime:
        return self._clock()

    def _snapshot(self) -> Snapshot:
        return (
            self.arena.snapshot(),
            dict(self.sections),
            dict(self.categories),
            self.do_today.snapshot(),
        )

    def _restore(self, snapshot: Snapshot) -> None:
        tasks, sections, categories, off = snapshot
        self.arena.restore(tasks)
        # Restored in place: the ordering engine shares these dicts
        self.sections.clear()
        self.sections.update(sections)
        self.categories.clear()
        self.categories.update(categories)
        self.do_today.restore(off)

    async def load(self) -> Result[None]:
        """Replace local state with the user's records from the store"""
        async with self._lock:
            return await self._load()

    async def _load(self) -> Result[None]:
        try:
            tasks = await self._repos.tasks.list_for_user(self.user_id)
            sections = await self._repos.sections.list_for_user(self.user_id)
            categories = await self._repos.categories.list_for_user(self.user_id)
            off_entries = await self._repos.do_today.list_for_user(self.user_id)
        except Exception as e:
            logger.error(f"Failed to load planner state for user {self.user_id}: {e}")
            return Result.failure(PersistenceError("Could not load your tasks, please try again."))

        self.arena.restore({t.id: t for t in tasks})
        self.sections.clear()
        self.sections.update({s.id: s for s in sections})
        self.categories.clear()
        self.categories.update({c.id: c for c in categories})
        self.do_today.load(off_entries)
        logger.info(
            f"Loaded {len(tasks)} tasks, {len(sections)} sections, {len(categories)} categories "
            f"for user {self.user_id}"
        )
        return Result.success(None)

    async def _mutate(self, action: str, apply: Callable[[WriteBatch], Any]) -> Result:
        """
        Run one optimistic change.

        ``apply`` edits local state and queues the matching store writes; the
        batch is then written back. Any PlannerError, raised while applying
        or while writing, restores the state captured before the change.
        Changes run one at a time, in the order they were issued.
        """
        async with self._lock:
            snapshot = self._snapshot()
            batch = WriteBatch()
            try:
                value = apply(batch)
                await self.persister.commit(batch)
            except PlannerError as e:
                self._restore(snapshot)
                logger.warning(f"{action} failed ({e.kind}): {e.message}")
                return Result.failure(e)
        logger.info(f"{action} ({len(batch)} writes)")
        return Result.success(value)

    def _queue_task_changes(self, batch: WriteBatch, before: Mapping[str, Task], ids: Iterable[str]) -> None:
        for task_id in dict.fromkeys(ids):
            batch.put(self._repos.tasks, self.arena.require(task_id), before.get(task_id))

    # ---------------------------------------------------------------
    # Reference resolution
    # ---------------------------------------------------------------

    def _resolve_section(self, section_id: Optional[str]) -> Optional[str]:
        if section_id is None or section_id == NO_SECTION:
            return None
        if section_id not in self.sections:
            raise ValidationError(f"Section {section_id} does not exist", record_id=section_id)
        return section_id

    def _resolve_category(self, category_id: Optional[str]) -> Optional[str]:
        if not category_id:
            return None
        if category_id not in self.categories:
            raise ValidationError(f"Category {category_id} does not exist", record_id=category_id)
        return category_id

    def _require_section(self, section_id: str) -> Section:
        section = self.sections.get(section_id)
        if section is None:
            raise NotFoundError(f"Section {section_id} not found", record_id=section_id)
        return section

    def _require_category(self, category_id: str) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found", record_id=category_id)
        return category

    def _split_virtual(self, task_id: str) -> Tuple[Task, date]:
        try:
            template_id, day = parse_virtual_id(task_id)
        except ValueError:
            raise NotFoundError(f"Task {task_id} not found", record_id=task_id)
        template = self.arena.get(template_id)
        if template is None or not template.is_template:
            raise NotFoundError(f"Recurring task {template_id} not found", record_id=task_id)
        if template.status == TaskStatus.ARCHIVED or not is_due(template, day):
            raise NotFoundError(f"Recurring task {template_id} has no occurrence on {day}", record_id=task_id)
        return template, day

    def _stored_instance(self, template_id: str, day: date) -> Optional[Task]:
        stored = [
            t for t in self.arena.all()
            if t.original_task_id == template_id and t.due_date == day
        ]
        if not stored:
            return None
        return min(stored, key=lambda t: (t.created_at, t.id))

    def _materialize(self, task_id: str, batch: WriteBatch) -> Task:
        """Store the transient instance behind a virtual id, or return the one already stored"""
        template, day = self._split_virtual(task_id)
        existing = self._stored_instance(template.id, day)
        if existing is not None:
            return existing

        before = self.arena.snapshot()
        now = self._now()
        instance = synthesize_instance(template, day).model_copy(update={
            "id": str(uuid.uuid4()),
            "is_virtual": False,
            "recurring_type": RecurringType.NONE,
            "created_at": now,
            "updated_at": now,
            "order": self.engine.append_position(template.parent_task_id, template.section_id),
        })
        self.arena.put(instance)
        # Directly after its template, so orders in the scope stay unique
        plan = self.engine.reorder(instance.id, template.parent_task_id, template.section_id, template.id, True)
        self._queue_task_changes(batch, before, [instance.id] + plan.changed_ids)
        logger.info(f"Materialized instance {instance.id} of recurring task {template.id} for {day}")
        return self.arena.require(instance.id)

    def _real_id(self, task_id: Optional[str], batch: WriteBatch) -> Optional[str]:
        """Id of a stored task, materializing a virtual instance on first use"""
        if task_id is None or not is_virtual_id(task_id):
            return task_id
        return self._materialize(task_id, batch).id

    def _reference_id(self, task_id: Optional[str]) -> Optional[str]:
        """Stored record a virtual id stands for when it is only a drop target"""
        if task_id is None or not is_virtual_id(task_id):
            return task_id
        template, day = self._split_virtual(task_id)
        existing = self._stored_instance(template.id, day)
        return existing.id if existing is not None else template.id

    def _task_for_view(self, task_id: str) -> Task:
        if is_virtual_id(task_id):
            template, day = self._split_virtual(task_id)
            return self._stored_instance(template.id, day) or synthesize_instance(template, day)
        return self.arena.require(task_id)

    # ---------------------------------------------------------------
    # Tasks
    # ---------------------------------------------------------------

    def _check_new_instance(self, payload: TaskCreate) -> None:
        """An explicit instance must name a template and a free day of its series"""
        template = self.arena.get(payload.original_task_id)
        if template is None or not template.is_template:
            raise ValidationError(
                f"Recurring task {payload.original_task_id} does not exist",
                record_id=payload.original_task_id,
            )
        if payload.due_date is None:
            raise ValidationError("An occurrence of a recurring task needs a due date")
        existing = self._stored_instance(template.id, payload.due_date)
        if existing is not None:
            raise ValidationError(
                f"Recurring task {template.id} already has an occurrence on {payload.due_date}",
                record_id=existing.id,
            )

    async def create_task(self, data: Payload) -> Result[Task]:
        """Create a task, appended last in its sibling scope"""
        def apply(batch: WriteBatch) -> Task:
            payload = _coerce(TaskCreate, data, user_id=self.user_id)
            parent: Optional[Task] = None
            if payload.parent_task_id is not None:
                parent_id = self._real_id(payload.parent_task_id, batch)
                parent = self.arena.get(parent_id)
                if parent is None:
                    raise ValidationError(
                        f"Parent task {payload.parent_task_id} does not exist",
                        record_id=payload.parent_task_id,
                    )
            if payload.original_task_id is not None:
                self._check_new_instance(payload)

            section_id = parent.section_id if parent else self._resolve_section(payload.section_id)
            parent_id = parent.id if parent else None
            now = self._now()
            fields = payload.model_dump()
            fields.update({
                "id": str(uuid.uuid4()),
                "user_id": self.user_id,
                "parent_task_id": parent_id,
                "section_id": section_id,
                "category": self._resolve_category(payload.category),
                "order": self.engine.append_position(parent_id, section_id),
                "created_at": now,
                "updated_at": now,
                "completed_at": now if payload.status == TaskStatus.COMPLETED else None,
            })
            if payload.original_task_id is not None:
                fields["recurring_type"] = RecurringType.NONE
            task = Task(**fields)
            self.arena.put(task)
            batch.put(self._repos.tasks, task)
            return task

        return await self._mutate("Created task", apply)

    def _apply_task_update(self, batch: WriteBatch, task_id: str, payload: TaskUpdate) -> Task:
        real_id = self._real_id(task_id, batch)
        current = self.arena.require(real_id)
        changes = payload.model_dump(exclude_unset=True)
        for field in _REQUIRED_TASK_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]
        if "category" in changes:
            changes["category"] = self._resolve_category(changes["category"])

        now = self._now()
        if "status" in changes and changes["status"] != current.status:
            changes["completed_at"] = now if changes["status"] == TaskStatus.COMPLETED else None
        changes["updated_at"] = now

        updated = current.model_copy(update=changes)
        self.arena.put(updated)
        batch.put(self._repos.tasks, updated, current)
        return updated

    async def update_task(self, task_id: str, updates: Payload) -> Result[Task]:
        """Change task fields; a virtual instance is stored first"""
        def apply(batch: WriteBatch) -> Task:
            return self._apply_task_update(batch, task_id, _coerce(TaskUpdate, updates))

        return await self._mutate(f"Updated task {task_id}", apply)

    async def bulk_update_tasks(self, task_ids: List[str], updates: Payload) -> Result[List[Task]]:
        """Apply the same field changes to several tasks as one change"""
        def apply(batch: WriteBatch) -> List[Task]:
            payload = _coerce(TaskUpdate, updates)
            return [self._apply_task_update(batch, task_id, payload) for task_id in dict.fromkeys(task_ids)]

        return await self._mutate(f"Updated {len(task_ids)} tasks", apply)

    def _delete_subtree(self, batch: WriteBatch, task_id: str, removed: List[str]) -> None:
        if is_virtual_id(task_id):
            raise ValidationError(
                "This occurrence was never saved; skip it or delete the recurring task instead",
                record_id=task_id,
            )
        if task_id in removed:
            return
        task = self.arena.require(task_id)
        roots = [task_id]
        if task.is_template:
            # A recurring task goes together with its stored occurrences, which are removed first
            roots = [t.id for t in sort_siblings(self.arena.all()) if t.original_task_id == task_id] + roots
        for root_id in roots:
            # Leaves first, so no stored row ever points at a deleted parent
            for doomed_id in list(reversed(self.arena.descendants(root_id))) + [root_id]:
                record = self.arena.remove(doomed_id)
                if record is None:
                    continue
                for entry in self.do_today.entries(self.user_id):
                    if entry.task_id == doomed_id:
                        batch.switch_on(self._repos.do_today, entry)
                self.do_today.forget(doomed_id)
                batch.delete(self._repos.tasks, record)
                removed.append(doomed_id)

    async def delete_task(self, task_id: str) -> Result[List[str]]:
        """Delete a task together with all of its descendants; returns the removed ids"""
        def apply(batch: WriteBatch) -> List[str]:
            removed: List[str] = []
            self._delete_subtree(batch, task_id, removed)
            return removed

        return await self._mutate(f"Deleted task {task_id}", apply)

    async def bulk_delete_tasks(self, task_ids: List[str]) -> Result[List[str]]:
        def apply(batch: WriteBatch) -> List[str]:
            removed: List[str] = []
            for task_id in dict.fromkeys(task_ids):
                self._delete_subtree(batch, task_id, removed)
            return removed

        return await self._mutate(f"Deleted {len(task_ids)} tasks", apply)

    async def archive_all_completed(self) -> Result[List[Task]]:
        """Move every completed task to the archive"""
        def apply(batch: WriteBatch) -> List[Task]:
            now = self._now()
            archived: List[Task] = []
            for task in self.arena.all():
                if task.status != TaskStatus.COMPLETED:
                    continue
                updated = task.model_copy(update={"status": TaskStatus.ARCHIVED, "updated_at": now})
                self.arena.put(updated)
                batch.put(self._repos.tasks, updated, task)
                archived.append(updated)
            return archived

        return await self._mutate("Archived completed tasks", apply)

    async def mark_section_completed(self, section_id: str, day: Optional[date] = None) -> Result[List[Task]]:
        """
        Complete every open task shown in a section.

        Recurring occurrences due on ``day`` are completed too (stored on the
        way); the recurring templates themselves are left alone.
        """
        def apply(batch: WriteBatch) -> List[Task]:
            if section_id != NO_SECTION:
                self._require_section(section_id)
            target = self._resolve_section(section_id)
            view_day = day or self._now().date()
            open_ids = [
                t.id for t in self.expander.merge_for_date(self.arena.all(), view_day)
                if t.section_id == target and t.status == TaskStatus.TODO
            ]
            payload = TaskUpdate(status=TaskStatus.COMPLETED)
            return [self._apply_task_update(batch, task_id, payload) for task_id in open_ids]

        return await self._mutate(f"Completed section {section_id}", apply)

    # ---------------------------------------------------------------
    # Ordering
    # ---------------------------------------------------------------

    async def reorder(
        self,
        active_id: str,
        new_parent_id: Optional[str],
        new_section_id: Optional[str],
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> Result[ReorderPlan]:
        """
        Move a task to a new place in the hierarchy as one batched change.

        Only one reorder is written back at a time; a second one issued
        while the first is still saving is rejected.
        """
        if self._commit_in_flight:
            return Result.failure(CommitInProgressError("Another move is still being saved, please wait."))

        def apply(batch: WriteBatch) -> ReorderPlan:
            real_id = self._real_id(active_id, batch)
            parent_id = self._real_id(new_parent_id, batch)
            over = self._reference_id(over_id)
            before = self.arena.snapshot()
            plan = self.engine.reorder(real_id, parent_id, new_section_id, over, is_moving_forward)
            self._queue_task_changes(batch, before, plan.changed_ids)
            return plan

        self._commit_in_flight = True
        try:
            return await self._mutate(f"Moved task {active_id}", apply)
        finally:
            self._commit_in_flight = False

    def begin_drag(self, active_id: str) -> Result:
        """Start a drag; the session commits through ``reorder`` exactly once"""
        try:
            self._task_for_view(active_id)
        except PlannerError as e:
            return Result.failure(e)
        session = DragSession(self.engine, active_id, self.reorder, resolve=self._reference_id)
        return Result.success(session)

    # ---------------------------------------------------------------
    # Sections
    # ---------------------------------------------------------------

    async def create_section(self, data: Payload) -> Result[Section]:
        """Create a section at the end of the section list"""
        def apply(batch: WriteBatch) -> Section:
            payload = _coerce(SectionCreate, data, user_id=self.user_id)
            section = Section(
                id=str(uuid.uuid4()),
                user_id=self.user_id,
                name=payload.name,
                include_in_focus_mode=payload.include_in_focus_mode,
                order=self.engine.append_section_position(),
                created_at=self._now(),
            )
            self.sections[section.id] = section
            batch.put(self._repos.sections, section)
            return section

        return await self._mutate("Created section", apply)

    async def update_section(self, section_id: str, updates: Payload) -> Result[Section]:
        def apply(batch: WriteBatch) -> Section:
            payload = _coerce(SectionUpdate, updates)
            current = self._require_section(section_id)
            changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
            updated = current.model_copy(update=changes)
            self.sections[section_id] = updated
            batch.put(self._repos.sections, updated, current)
            return updated

        return await self._mutate(f"Updated section {section_id}", apply)

    async def set_section_focus_mode(self, section_id: str, include: bool) -> Result[Section]:
        """Include a section in Focus Mode or leave it out"""
        return await self.update_section(section_id, {"include_in_focus_mode": include})

    async def delete_section(self, section_id: str) -> Result[List[str]]:
        """
        Delete a section.

        Its tasks are kept: top-level tasks move to the end of the no-section
        bucket and their subtasks follow. Returns the ids of the moved tasks.
        """
        def apply(batch: WriteBatch) -> List[str]:
            section = self._require_section(section_id)
            before = self.arena.snapshot()
            start = self.engine.append_position(None, None)
            moved: List[str] = []
            for offset, task in enumerate(self.arena.siblings(None, section_id)):
                self.arena.put(task.model_copy(update={"section_id": None, "order": start + offset}))
                moved.append(task.id)
            for task in self.arena.all():
                if task.section_id == section_id:
                    self.arena.put(task.model_copy(update={"section_id": None}))
                    moved.append(task.id)
            self._queue_task_changes(batch, before, moved)

            del self.sections[section_id]
            batch.delete(self._repos.sections, section)
            return moved

        return await self._mutate(f"Deleted section {section_id}", apply)

    async def reorder_sections(
        self,
        active_id: str,
        over_id: Optional[str],
        is_moving_forward: bool,
    ) -> Result[SectionReorderPlan]:
        if self._commit_in_flight:
            return Result.failure(CommitInProgressError("Another move is still being saved, please wait."))

        def apply(batch: WriteBatch) -> SectionReorderPlan:
            before = dict(self.sections)
            plan = self.engine.reorder_sections(active_id, over_id, is_moving_forward)
            for update in plan.updates:
                batch.put(self._repos.sections, self.sections[update.id], before[update.id])
            return plan

        self._commit_in_flight = True
        try:
            return await self._mutate(f"Moved section {active_id}", apply)
        finally:
            self._commit_in_flight = False

    # ---------------------------------------------------------------
    # Categories
    # ---------------------------------------------------------------

    async def create_category(self, data: Payload) -> Result[Category]:
        def apply(batch: WriteBatch) -> Category:
            payload = _coerce(CategoryCreate, data, user_id=self.user_id)
            wanted = payload.name.casefold()
            if any(c.name.casefold() == wanted for c in self.categories.values()):
                raise ValidationError(f"A category named '{payload.name}' already exists")
            category = Category(
                id=str(uuid.uuid4()),
                user_id=self.user_id,
                name=payload.name,
                color=payload.color,
                created_at=self._now(),
            )
            self.categories[category.id] = category
            batch.put(self._repos.categories, category)
            return category

        return await self._mutate("Created category", apply)

    async def update_category(self, category_id: str, updates: Payload) -> Result[Category]:
        def apply(batch: WriteBatch) -> Category:
            payload = _coerce(CategoryUpdate, updates)
            current = self._require_category(category_id)
            changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
            updated = current.model_copy(update=changes)
            self.categories[category_id] = updated
            batch.put(self._repos.categories, updated, current)
            return updated

        return await self._mutate(f"Updated category {category_id}", apply)

    async def delete_category(self, category_id: str) -> Result[List[str]]:
        """Delete a category and clear it from every task; returns the ids of those tasks"""
        def apply(batch: WriteBatch) -> List[str]:
            category = self._require_category(category_id)
            cleared: List[str] = []
            for task in self.arena.all():
                if task.category == category_id:
                    updated = task.model_copy(update={"category": None})
                    self.arena.put(updated)
                    batch.put(self._repos.tasks, updated, task)
                    cleared.append(task.id)
            del self.categories[category_id]
            batch.delete(self._repos.categories, category)
            return cleared

        return await self._mutate(f"Deleted category {category_id}", apply)

    # ---------------------------------------------------------------
    # Views
    # ---------------------------------------------------------------

    def list_tasks(self) -> Result[List[Task]]:
        """Every stored task, recurring templates and instances included, in render order"""
        return Result.success(canonical_order(self.arena.all(), self.sections.values()))

    def get_task(self, task_id: str) -> Result[Task]:
        try:
            return Result.success(self._task_for_view(task_id))
        except PlannerError as e:
            return Result.failure(e)

    def tasks_for_date(self, day: date) -> List[Task]:
        """Merged task set for one day (templates replaced by their instance) in render order"""
        merged = self.expander.merge_for_date(self.arena.all(), day)
        return canonical_order(merged, self.sections.values())

    def project(self, filters: Optional[Payload] = None) -> Result[List[Task]]:
        """Tasks of one page, filtered and in render order"""
        try:
            parsed = _coerce(TaskFilters, filters)
        except PlannerError as e:
            return Result.failure(e)
        day = parsed.view_date or self._now().date()
        parsed = parsed.model_copy(update={"view_date": day})
        return Result.success(self.projector.project(self.tasks_for_date(day), parsed))

    def _daily_projection(self, day: date, filters: Optional[Payload]) -> List[Task]:
        # Focus Mode always works from the day's list, whatever page the filters came from
        parsed = _coerce(TaskFilters, filters).model_copy(update={"view_date": day, "view_mode": ViewMode.DAILY})
        return self.projector.project(self.tasks_for_date(day), parsed)

    def _ordered_sections(self) -> List[Section]:
        return self.engine.ordered_sections()

    def next_available(
        self,
        day: date,
        filters: Optional[Payload] = None,
        focus_mode_only: bool = False,
        focused_task_id: Optional[str] = None,
    ) -> Result[Optional[Task]]:
        """The task Focus Mode shows as the current one"""
        try:
            projected = self._daily_projection(day, filters)
        except PlannerError as e:
            return Result.failure(e)
        task = self.focus.next_available(
            projected,
            self.do_today.excluded_keys(day),
            self._ordered_sections(),
            focus_mode_only,
            focused_task_id,
        )
        return Result.success(task)

    def upcoming(
        self,
        day: date,
        n: int = 5,
        filters: Optional[Payload] = None,
        focus_mode_only: bool = False,
        focused_task_id: Optional[str] = None,
    ) -> Result[List[Task]]:
        """The tasks queued after the current Focus Mode task"""
        try:
            projected = self._daily_projection(day, filters)
        except PlannerError as e:
            return Result.failure(e)
        off = self.do_today.excluded_keys(day)
        sections = self._ordered_sections()
        current = self.focus.next_available(projected, off, sections, focus_mode_only, focused_task_id)
        return Result.success(self.focus.upcoming(current, projected, off, n, sections, focus_mode_only))

    def daily_progress(self, day: date) -> Result[DailyProgress]:
        projected = self._daily_projection(day, None)
        return Result.success(
            self.focus.daily_progress(projected, self._ordered_sections(), self.do_today.excluded_keys(day), day)
        )

    # ---------------------------------------------------------------
    # Do Today
    # ---------------------------------------------------------------

    def _do_today_key(self, task_id: str) -> str:
        return self._task_for_view(task_id).do_today_key

    def _queue_do_today(self, batch: WriteBatch, key: str, day: date, excluded: bool) -> None:
        entry = DoTodayOffEntry(user_id=self.user_id, task_id=key, off_date=day)
        if excluded:
            batch.switch_off(self._repos.do_today, entry)
        else:
            batch.switch_on(self._repos.do_today, entry)

    async def toggle_do_today(self, task_id: str, day: date) -> Result[bool]:
        """Flip one task's Do Today state for ``day``; returns whether it is now off"""
        def apply(batch: WriteBatch) -> bool:
            key = self._do_today_key(task_id)
            excluded = self.do_today.toggle(key, day)
            self._queue_do_today(batch, key, day, excluded)
            return excluded

        return await self._mutate(f"Toggled Do Today for {task_id} on {day}", apply)

    async def toggle_all_do_today(self, task_ids: List[str], day: date) -> Result[bool]:
        """Switch all visible tasks off (or back on) for ``day``; returns the resulting state"""
        def apply(batch: WriteBatch) -> bool:
            keys = list(dict.fromkeys(self._do_today_key(task_id) for task_id in task_ids))
            previous = {key: self.do_today.is_excluded(key, day) for key in keys}
            excluded = self.do_today.toggle_all(keys, day)
            for key in keys:
                if previous[key] != excluded:
                    self._queue_do_today(batch, key, day, excluded)
            return excluded

        return await self._mutate(f"Toggled Do Today for {len(task_ids)} tasks on {day}", apply)

    def is_do_today_off(self, task_id: str, day: date) -> Result[bool]:
        try:
            key = self._do_today_key(task_id)
        except PlannerError as e:
            return Result.failure(e)
        return Result.success(self.do_today.is_excluded(key, day))

    # ---------------------------------------------------------------
    # Suggestions
    # ---------------------------------------------------------------

    def _match_by_name(self, name: Optional[str], records: Iterable[Union[Section, Category]]) -> Optional[str]:
        if not name:
            return None
        wanted = name.strip().casefold()
        for record in records:
            if record.name.casefold() == wanted:
                return record.id
        return None

    async def suggest_task(self, text: str, day: Optional[date] = None) -> Result[Optional[TaskPrefill]]:
        """
        Ask the language model to pre-fill the add-task form.

        The suggestion never creates anything. Names the model returns are
        mapped to the user's own section and category ids, and anything it
        gets wrong is simply dropped. Without a configured model, or when the
        call fails, the result is an empty success.
        """
        if not text or not text.strip():
            return Result.failure(ValidationError("Type something to get a suggestion"))
        if self._suggestions is None:
            return Result.success(None)

        today = day or self._now().date()
        try:
            suggestion = await self._suggestions.suggest(
                text.strip(),
                [c.name for c in self.categories.values()],
                [s.name for s in self._ordered_sections()],
                today,
            )
        except Exception as e:
            logger.error(f"Task suggestion failed: {e}")
            return Result.success(None)

        try:
            priority = TaskPriority((suggestion.priority or "none").lower())
        except ValueError:
            priority = TaskPriority.NONE

        prefill = TaskPrefill(
            description=(suggestion.cleaned_description or "").strip() or text.strip(),
            category=self._match_by_name(suggestion.category, self.categories.values()),
            priority=priority,
            due_date=suggestion.due_date,
            section_id=self._match_by_name(suggestion.section, self.sections.values()),
            notes=suggestion.notes or None,
            link=suggestion.link or None,
        )
        return Result.success(prefill)
