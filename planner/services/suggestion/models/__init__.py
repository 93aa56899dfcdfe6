from .suggestion_schema import TaskSuggestion

__all__ = ["TaskSuggestion"]
