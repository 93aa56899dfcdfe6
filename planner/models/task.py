"""Task domain model"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TaskStatus(str, Enum):
    """Lifecycle states of a task"""
    TODO = "to-do"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    ARCHIVED = "archived"


class TaskPriority(str, Enum):
    """Task priority levels"""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RecurringType(str, Enum):
    """Recurrence cadence of a template task"""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _require_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("description must not be empty")
    return value


class TaskBase(BaseModel):
    """Base task fields for creation"""
    description: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.NONE
    due_date: Optional[date] = None
    recurring_type: RecurringType = RecurringType.NONE
    parent_task_id: Optional[str] = None
    section_id: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    link: Optional[str] = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return _require_description(value)


class TaskCreate(TaskBase):
    """Task creation model"""
    user_id: str
    original_task_id: Optional[str] = None


class TaskUpdate(BaseModel):
    """Task update model - all fields optional"""
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    recurring_type: Optional[RecurringType] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    link: Optional[str] = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: Optional[str]) -> Optional[str]:
        return _require_description(value)


class Task(TaskBase):
    """Complete task model as held in the arena and the store"""
    id: str
    user_id: str
    original_task_id: Optional[str] = None
    order: float = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    # Transient recurring instances are never written to the store
    is_virtual: bool = Field(default=False, exclude=True)

    class Config:
        from_attributes = True

    @field_validator("created_at", "updated_at", "completed_at")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps from the store are UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_template(self) -> bool:
        return self.recurring_type != RecurringType.NONE and self.original_task_id is None

    @property
    def do_today_key(self) -> str:
        """Key used by the Do Today overlay (series id for recurring instances)"""
        return self.original_task_id or self.id

    @property
    def sort_key(self):
        return (self.order, self.created_at, self.id)


class TaskPrefill(BaseModel):
    """Suggested values for the add-task form, resolved to the user's own ids"""
    description: str
    category: Optional[str] = None
    priority: TaskPriority = TaskPriority.NONE
    due_date: Optional[date] = None
    section_id: Optional[str] = None
    notes: Optional[str] = None
    link: Optional[str] = None
