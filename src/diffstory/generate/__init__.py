"""LLM-driven review generation."""

from diffstory.generate.extract import extract_llm_response, repair_json
from diffstory.generate.llm import DEFAULT_LLM_COMMAND, resolve_llm_command
from diffstory.generate.pipeline import (
    GenerateParams,
    GenerationCancelled,
    GenerationFailed,
    GenerationNeedsRetry,
    GenerationOutcome,
    GenerationState,
    GenerationSucceeded,
    Generator,
    assemble_partial_review,
    assemble_review,
)
from diffstory.generate.prompt import build_prompt
from diffstory.generate.response import LLMChapter, LLMHunkRef, LLMResponse, LLMSection
from diffstory.generate.runner import run_command
from diffstory.generate.sources import PRESETS, DiffSource, commit_source, range_source
from diffstory.generate.validation import ValidationResult, validate_classification

__all__ = [
    "DEFAULT_LLM_COMMAND",
    "PRESETS",
    "DiffSource",
    "GenerateParams",
    "GenerationCancelled",
    "GenerationFailed",
    "GenerationNeedsRetry",
    "GenerationOutcome",
    "GenerationState",
    "GenerationSucceeded",
    "Generator",
    "LLMChapter",
    "LLMHunkRef",
    "LLMResponse",
    "LLMSection",
    "ValidationResult",
    "assemble_partial_review",
    "assemble_review",
    "build_prompt",
    "commit_source",
    "extract_llm_response",
    "range_source",
    "repair_json",
    "resolve_llm_command",
    "run_command",
    "validate_classification",
]
