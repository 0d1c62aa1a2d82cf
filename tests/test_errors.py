"""Tests for pipeline errors and StageResult."""

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import (
    GENERIC_RETRY_MESSAGE,
    FetchError,
    NotFoundError,
    ScoringUnavailable,
    StageResult,
    ValidationError,
)
from resume_pipeline.models.match import Gap


class _Nested(BaseModel):
    tags: list[str] = Field(min_length=1)


class _Outer(BaseModel):
    themes: list[_Nested]


class TestValidationError:
    def test_message_names_field(self):
        error = ValidationError("target_role", "must not be empty")
        assert error.field == "target_role"
        assert error.message == "Invalid target_role: must not be empty"
        assert not error.retryable

    def test_from_pydantic_builds_dotted_path(self):
        try:
            _Outer.model_validate({"themes": [{"tags": ["a"]}, {"tags": []}]})
        except PydanticValidationError as e:
            error = ValidationError.from_pydantic(e, "profile")
        assert error.field == "profile.themes.1.tags"


class TestStageResult:
    def test_dependency_failure_hides_detail(self):
        result = StageResult.fail(FetchError("connection refused on 10.0.0.5"))
        assert result.error == GENERIC_RETRY_MESSAGE
        assert result.error_type == "dependency_failure"
        assert result.retryable

    def test_scoring_unavailable_type(self):
        result = StageResult.fail(ScoringUnavailable("timed out"))
        assert result.error_type == "scoring_unavailable"
        assert result.retryable

    def test_not_found_keeps_message(self):
        result = StageResult.fail(NotFoundError("Resume r1 not found"))
        assert result.error == "Resume r1 not found"
        assert not result.retryable

    def test_to_dict_dumps_models_with_aliases(self):
        result = StageResult.ok(Gap(requirement="Rust", best_match_score=10))
        assert result.to_dict() == {
            "success": True,
            "data": {"requirement": "Rust", "bestMatchScore": 10, "bestMatchText": None},
        }

    def test_to_dict_failure(self):
        result = StageResult.fail(ValidationError("contact", "missing"))
        assert result.to_dict() == {
            "success": False,
            "error": "Invalid contact: missing",
            "errorType": "validation_error",
        }
