"""Task suggestion service module"""
from .suggestion_service import SuggestionService
from .models import TaskSuggestion
from .prompts import prompt_template

__all__ = [
    "SuggestionService",
    "TaskSuggestion",
    "prompt_template",
]
