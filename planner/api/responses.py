"""Mapping of planner results onto HTTP responses"""
from typing import Any

from fastapi import HTTPException

from planner.core.errors import (
    CommitInProgressError,
    CycleError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from planner.core.result import Result

STATUS_BY_KIND = {
    ValidationError.kind: 422,
    CycleError.kind: 409,
    NotFoundError.kind: 404,
    CommitInProgressError.kind: 409,
    PersistenceError.kind: 503,
}


def unwrap(result: Result) -> Any:
    """
    Return the value of a successful result.

    Raises:
        HTTPException: With the status code of the failure kind and the
            error ({kind, message, record_id}) as detail
    """
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(result.error.kind, 400),
        detail=result.error.model_dump(),
    )
