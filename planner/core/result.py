"""Explicit success/failure values returned across the service boundary"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from .errors import PlannerError

T = TypeVar("T")


class ErrorInfo(BaseModel):
    """Serializable description of a failed operation"""
    kind: str
    message: str
    record_id: Optional[str] = None

    @classmethod
    def from_error(cls, error: PlannerError) -> "ErrorInfo":
        return cls(kind=error.kind, message=error.message, record_id=error.record_id)


class Result(BaseModel, Generic[T]):
    """Outcome of a planner operation: either a value or a single corrective error"""
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: PlannerError) -> "Result[T]":
        return cls(ok=False, error=ErrorInfo.from_error(error))
