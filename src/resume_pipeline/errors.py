"""Typed pipeline failures and the structured result returned across stage boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

GENERIC_RETRY_MESSAGE = "A temporary problem occurred while processing your request. Please try again."


class PipelineError(Exception):
    """Base class for every failure a pipeline stage can report."""

    error_type = "pipeline_error"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return self.message


class ValidationError(PipelineError):
    """Malformed input, rejected before any side effect.

    Attributes:
        field: Dotted path of the offending field (e.g. ``keyThemes.0.tags``)
    """

    error_type = "validation_error"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError, prefix: str) -> ValidationError:
        """Build from the first error pydantic reported, e.g. ``profile.keyThemes.0.tags``."""
        first = error.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        return cls(f"{prefix}.{loc}" if loc else prefix, first["msg"])


class DependencyFailure(PipelineError):
    """Storage or external-service failure.

    The detailed message stays in logs; callers only ever see the generic one.
    """

    error_type = "dependency_failure"
    retryable = True

    @property
    def user_message(self) -> str:
        return GENERIC_RETRY_MESSAGE


class FetchError(DependencyFailure):
    """Reading library records from storage failed."""


class StorageWriteError(DependencyFailure):
    """Persisting a generated document or preference failed."""


class ScoringUnavailable(DependencyFailure):
    """The external scoring service failed, timed out, or answered nonsense."""

    error_type = "scoring_unavailable"


class NotFoundError(PipelineError):
    """Referenced document is missing or belongs to another user."""

    error_type = "not_found"


class RenderFailure(PipelineError):
    """Markup could not be turned into a document, or encoding the document failed."""

    error_type = "render_failure"


@dataclass
class StageResult:
    """Outcome of one pipeline stage: data on success, a typed error otherwise."""

    success: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None
    retryable: bool = False

    @classmethod
    def ok(cls, data: Any) -> StageResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: PipelineError) -> StageResult:
        return cls(
            success=False,
            error=error.user_message,
            error_type=error.error_type,
            retryable=error.retryable,
        )

    def to_dict(self) -> dict:
        if self.success:
            data = self.data
            if isinstance(data, BaseModel):
                data = data.model_dump(mode="json", by_alias=True)
            return {"success": True, "data": data}
        return {"success": False, "error": self.error, "errorType": self.error_type}
