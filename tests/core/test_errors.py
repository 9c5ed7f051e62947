"""Tests for error types and codes."""

import pytest

from diffstory.core.errors import (
    ConfigError,
    DiffstoryError,
    ErrorCode,
    GenerationError,
    IngestError,
    StoreError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.MISSING_WORKING_DIRECTORY, 3000),
            (ErrorCode.INVALID_HUNK_IMPORTANCE, 3000),
            (ErrorCode.NOT_FOUND, 4000),
            (ErrorCode.IO_ERROR, 4000),
            (ErrorCode.EXTRACT_ERROR, 5000),
            (ErrorCode.LLM_COMMAND_NOT_FOUND, 5000),
        ],
    )
    def test_code_in_range(self, code: ErrorCode, expected_range: int) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestDiffstoryError:
    """Base error behavior tests."""

    def test_str_is_message(self) -> None:
        error = DiffstoryError(code=ErrorCode.IO_ERROR, message="boom")
        assert str(error) == "boom"

    def test_is_raisable(self) -> None:
        with pytest.raises(DiffstoryError) as exc_info:
            raise StoreError.not_found("/work", "/store/abc.json")
        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert exc_info.value.error_name == "NOT_FOUND"


class TestConstructors:
    """Classmethod constructors set code, message and details."""

    def test_config_invalid_value(self) -> None:
        error = ConfigError.invalid_value("server.port", 70000, "out of range")
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "server.port" in error.message
        assert error.details["value"] == "70000"

    def test_missing_working_directory(self) -> None:
        error = IngestError.missing_working_directory()
        assert error.code == ErrorCode.MISSING_WORKING_DIRECTORY
        assert "workingDirectory" in error.message

    def test_invalid_hunk_importance_names_location(self) -> None:
        error = IngestError.invalid_hunk_importance(1, 2, "urgent")
        assert error.code == ErrorCode.INVALID_HUNK_IMPORTANCE
        assert "sections[1].hunks[2]" in error.message
        assert "'urgent'" in error.message
        assert error.details == {"section_index": 1, "hunk_index": 2, "importance": "urgent"}

    def test_subprocess_failed_includes_stderr(self) -> None:
        error = GenerationError.subprocess_failed(["git", "diff"], 128, "fatal: bad revision\n")
        assert error.code == ErrorCode.SUBPROCESS_ERROR
        assert error.message == "git exited with status 128: fatal: bad revision"

    def test_validation_failed_counts(self) -> None:
        error = GenerationError.validation_failed(["a"], ["b", "c"], [])
        assert error.code == ErrorCode.VALIDATION_FAILED
        assert "1 missing, 2 duplicate, 0 invalid" in error.message
        assert error.retryable is True

    def test_llm_command_not_found_carries_hint(self) -> None:
        error = GenerationError.llm_command_not_found("claude", "Install it.")
        assert error.code == ErrorCode.LLM_COMMAND_NOT_FOUND
        assert error.message.endswith("Install it.")
