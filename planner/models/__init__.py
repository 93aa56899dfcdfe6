"""Domain models for the application"""
from .task import Task, TaskCreate, TaskUpdate, TaskPrefill, TaskStatus, TaskPriority, RecurringType
from .section import Section, SectionCreate, SectionUpdate, NO_SECTION
from .category import Category, CategoryCreate, CategoryUpdate, CategoryColor
from .do_today import DoTodayOffEntry

__all__ = [
    'Task', 'TaskCreate', 'TaskUpdate', 'TaskPrefill',
    'TaskStatus', 'TaskPriority', 'RecurringType',
    'Section', 'SectionCreate', 'SectionUpdate', 'NO_SECTION',
    'Category', 'CategoryCreate', 'CategoryUpdate', 'CategoryColor',
    'DoTodayOffEntry',
]
