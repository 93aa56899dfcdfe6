"""Recurring task expansion

A recurring template is a task with ``recurring_type != none`` and no
``original_task_id``. For any calendar date the expander yields at most one
instance per due template: the concrete instance already stored for that
date, or a transient virtual copy that is persisted on its first mutation.
"""
import calendar
import logging
from datetime import date, datetime, time, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from planner.models.task import RecurringType, Task, TaskStatus

logger = logging.getLogger(__name__)

VIRTUAL_PREFIX = "virtual-"


def virtual_id(template_id: str, day: date) -> str:
    """Id of the transient instance of a template on one day"""
    return f"{VIRTUAL_PREFIX}{template_id}-{day.isoformat()}"


def is_virtual_id(task_id: Optional[str]) -> bool:
    return bool(task_id) and task_id.startswith(VIRTUAL_PREFIX)


def parse_virtual_id(task_id: str) -> Tuple[str, date]:
    """
    Split a virtual id into its template id and date.

    Template ids may contain dashes (UUIDs), so the date is taken from the
    last ten characters.

    Raises:
        ValueError: If the id is not a virtual id
    """
    if not is_virtual_id(task_id) or len(task_id) < len(VIRTUAL_PREFIX) + 12:
        raise ValueError(f"Not a virtual task id: {task_id}")
    body = task_id[len(VIRTUAL_PREFIX):]
    template_id, day = body[:-11], body[-10:]
    return template_id, date.fromisoformat(day)


def _clamped_day(day_of_month: int, year: int, month: int) -> int:
    return min(day_of_month, calendar.monthrange(year, month)[1])


def is_due(template: Task, day: date) -> bool:
    """Whether a template produces an instance on ``day``"""
    start = template.created_at.date()
    if day < start:
        return False

    if template.recurring_type == RecurringType.DAILY:
        return True
    if template.recurring_type == RecurringType.WEEKLY:
        return day.weekday() == start.weekday()
    if template.recurring_type == RecurringType.MONTHLY:
        return day.day == _clamped_day(start.day, day.year, day.month)
    return False


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def synthesize_instance(template: Task, day: date) -> Task:
    """Transient instance of ``template`` for ``day``"""
    return template.model_copy(update={
        "id": virtual_id(template.id, day),
        "original_task_id": template.id,
        "status": TaskStatus.TODO,
        "due_date": day,
        "created_at": start_of_day(day),
        "updated_at": None,
        "completed_at": None,
        "is_virtual": True,
    })


class RecurrenceExpander:
    """Derives per-day task instances from recurring templates"""

    def expand(self, templates: Iterable[Task], day: date, concrete_instances: Iterable[Task]) -> List[Task]:
        """
        One instance per template due on ``day``.

        Args:
            templates: Candidate templates (non-templates are ignored)
            day: The calendar date being viewed
            concrete_instances: Stored instances, matched on original_task_id and due_date

        Returns:
            Instances in template order
        """
        stored: Dict[str, Task] = {}
        for instance in sorted(concrete_instances, key=lambda t: (t.created_at, t.id)):
            if instance.original_task_id is None or instance.due_date != day:
                continue
            if instance.original_task_id in stored:
                logger.warning(
                    f"Duplicate instance {instance.id} of template {instance.original_task_id} on {day}; "
                    f"keeping {stored[instance.original_task_id].id}"
                )
                continue
            stored[instance.original_task_id] = instance

        instances: List[Task] = []
        seen = set()
        for template in templates:
            if not template.is_template or template.id in seen:
                continue
            seen.add(template.id)
            if template.status == TaskStatus.ARCHIVED or not is_due(template, day):
                continue
            instances.append(stored.get(template.id) or synthesize_instance(template, day))
        return instances

    def merge_for_date(self, tasks: Iterable[Task], day: date) -> List[Task]:
        """
        The task set a view of ``day`` works from.

        Non-recurring tasks pass through, templates are replaced by their
        instance for the day, and instances whose template is gone are kept
        as plain tasks.
        """
        tasks = list(tasks)
        templates = [t for t in tasks if t.is_template]
        template_ids = {t.id for t in templates}
        instances = [t for t in tasks if t.original_task_id is not None]

        merged: List[Task] = [
            t for t in tasks
            if not t.is_template and t.original_task_id is None
        ]
        merged.extend(t for t in instances if t.original_task_id not in template_ids)
        merged.extend(self.expand(templates, day, instances))
        return merged
