"""Diffstory error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Ingest (producer-correctable)
- 4xxx: Store
- 5xxx: Generation
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Ingest (3xxx)
    MISSING_WORKING_DIRECTORY = 3001
    INVALID_WORKING_DIRECTORY = 3002
    INVALID_HUNK_IMPORTANCE = 3003

    # Store (4xxx)
    INVALID_PATH = 4001
    NOT_FOUND = 4002
    PARSE_ERROR = 4003
    IO_ERROR = 4004

    # Generation (5xxx)
    SUBPROCESS_ERROR = 5001
    NO_CHANGES = 5002
    EXTRACT_ERROR = 5003
    VALIDATION_FAILED = 5004
    LLM_COMMAND_NOT_FOUND = 5005


@dataclass(frozen=True, slots=True)
class DiffstoryError(Exception):
    """Base error carrying a typed code and structured details."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'NOT_FOUND')."""
        return self.code.name

    def __str__(self) -> str:
        return self.message


class ConfigError(DiffstoryError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class IngestError(DiffstoryError):
    """Producer-correctable errors raised while accepting a review."""

    @classmethod
    def missing_working_directory(cls) -> "IngestError":
        return cls(
            code=ErrorCode.MISSING_WORKING_DIRECTORY,
            message="workingDirectory is required",
        )

    @classmethod
    def invalid_working_directory(cls, path: str, reason: str) -> "IngestError":
        return cls(
            code=ErrorCode.INVALID_WORKING_DIRECTORY,
            message=f"invalid workingDirectory: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_hunk_importance(
        cls, section_index: int, hunk_index: int, importance: str
    ) -> "IngestError":
        return cls(
            code=ErrorCode.INVALID_HUNK_IMPORTANCE,
            message=(
                f"invalid hunk importance: sections[{section_index}].hunks[{hunk_index}] "
                f"has importance {importance!r}"
            ),
            details={
                "section_index": section_index,
                "hunk_index": hunk_index,
                "importance": importance,
            },
        )


class StoreError(DiffstoryError):
    """Errors from path canonicalization and the review store."""

    @classmethod
    def invalid_path(cls, path: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.INVALID_PATH,
            message=f"Invalid path {path!r}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def not_found(cls, directory: str, path: str) -> "StoreError":
        return cls(
            code=ErrorCode.NOT_FOUND,
            message=f"No review stored for {directory}",
            details={"directory": directory, "path": path},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.PARSE_ERROR,
            message=f"Failed to parse review at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def io_error(cls, operation: str, path: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.IO_ERROR,
            message=f"Failed to {operation} {path}: {reason}",
            retryable=True,
            details={"operation": operation, "path": path, "reason": reason},
        )


class GenerationError(DiffstoryError):
    """Errors raised by the LLM generation pipeline."""

    @classmethod
    def subprocess_failed(
        cls, argv: list[str], returncode: int | None, stderr: str
    ) -> "GenerationError":
        return cls(
            code=ErrorCode.SUBPROCESS_ERROR,
            message=f"{argv[0]} exited with status {returncode}: {stderr.strip()}",
            details={"argv": argv, "returncode": returncode, "stderr": stderr},
        )

    @classmethod
    def no_changes(cls, reason: str = "no changes to review") -> "GenerationError":
        return cls(code=ErrorCode.NO_CHANGES, message=reason)

    @classmethod
    def extract_failed(cls, reason: str) -> "GenerationError":
        return cls(
            code=ErrorCode.EXTRACT_ERROR,
            message=f"failed to parse LLM response: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def validation_failed(
        cls,
        missing: list[str],
        duplicates: list[str],
        invalid: list[str],
    ) -> "GenerationError":
        return cls(
            code=ErrorCode.VALIDATION_FAILED,
            message=(
                f"classification incomplete: {len(missing)} missing, "
                f"{len(duplicates)} duplicate, {len(invalid)} invalid importance"
            ),
            retryable=True,
            details={"missing": missing, "duplicates": duplicates, "invalid": invalid},
        )

    @classmethod
    def llm_command_not_found(cls, command: str, hint: str) -> "GenerationError":
        return cls(
            code=ErrorCode.LLM_COMMAND_NOT_FOUND,
            message=f"LLM command not found: {command!r}\n\n{hint}",
            details={"command": command},
        )

