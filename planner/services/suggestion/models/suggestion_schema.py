"""Structured output schema for task suggestions"""
from typing import Optional
from datetime import date

from pydantic import BaseModel, Field


class TaskSuggestion(BaseModel):
    """AI guess at the fields of a task typed as free text"""
    cleaned_description: str = Field(description="The task description with dates, links and tags removed")
    category: Optional[str] = Field(None, description="Name of the best matching existing category, or null")
    priority: Optional[str] = Field(None, description="One of: none, low, medium, high, urgent")
    due_date: Optional[date] = Field(None, description="Due date (ISO format: 2024-10-15) only if stated or clearly implied")
    section: Optional[str] = Field(None, description="Name of the best matching existing section, or null")
    notes: Optional[str] = Field(None, description="Any extra details that do not belong in the description")
    link: Optional[str] = Field(None, description="A URL contained in the text, if any")
