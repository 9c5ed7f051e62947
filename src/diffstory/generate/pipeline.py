"""LLM review generation pipeline.

One generation walks::

    idle -> diffing -> parsing -> prompting -> awaiting_llm -> extracting
         -> validating -> writing | needs_retry | error | cancelled

``needs_retry`` hands control back to the caller, who either retries (back
to prompting with the cached hunks and the missing IDs called out),
proceeds with a partial review, or gives up.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from pathlib import Path

import structlog

from diffstory.core.errors import DiffstoryError, GenerationError
from diffstory.diff.parser import ParsedHunk, parse_diff
from diffstory.generate.extract import extract_llm_response
from diffstory.generate.prompt import build_prompt
from diffstory.generate.response import LLMResponse
from diffstory.generate.runner import run_command
from diffstory.generate.validation import ValidationResult, validate_classification
from diffstory.model.review import Hunk, Importance, Review, Section, normalize_importance
from diffstory.review.service import Clock, ReviewService, utc_now
from diffstory.storage.paths import canonicalize

logger = structlog.get_logger()

Runner = Callable[[Sequence[str], Path | str | None], Awaitable[str]]

UNCLASSIFIED_SECTION_ID = "unclassified"
UNCLASSIFIED_NARRATIVE = "Hunks not classified by the LLM"


class GenerationState(StrEnum):
    IDLE = "idle"
    DIFFING = "diffing"
    PARSING = "parsing"
    PROMPTING = "prompting"
    AWAITING_LLM = "awaiting_llm"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    WRITING = "writing"
    NEEDS_RETRY = "needs_retry"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class GenerateParams:
    """Inputs for one generation attempt."""

    diff_command: Sequence[str]
    llm_command: Sequence[str]
    context: str = ""
    is_retry: bool = False
    missing_ids: tuple[str, ...] = ()
    parsed_hunks: tuple[ParsedHunk, ...] = ()


@dataclass(frozen=True, slots=True)
class GenerationSucceeded:
    review: Review
    file_path: Path


@dataclass(frozen=True, slots=True)
class GenerationNeedsRetry:
    """Classification broke the hunk bijection; the caller decides what next."""

    hunks: tuple[ParsedHunk, ...]
    response: LLMResponse
    validation: ValidationResult
    params: GenerateParams


@dataclass(frozen=True, slots=True)
class GenerationFailed:
    error: DiffstoryError


@dataclass(frozen=True, slots=True)
class GenerationCancelled:
    pass


GenerationOutcome = (
    GenerationSucceeded | GenerationNeedsRetry | GenerationFailed | GenerationCancelled
)


def _to_hunk(parsed: ParsedHunk, importance: str, is_test: bool | None = None) -> Hunk:
    return Hunk(
        file=parsed.file,
        start_line=parsed.start_line,
        diff=parsed.diff,
        importance=importance,
        is_test=is_test,
    )


def assemble_review(
    working_directory: str,
    response: LLMResponse,
    hunks: Sequence[ParsedHunk],
    created_at: datetime,
) -> Review:
    """Resolve the response's hunk IDs back to full hunks from the parsed diff."""
    by_id = {h.id: h for h in hunks}
    sections: list[Section] = []
    for llm_section in response.all_sections():
        section_hunks = [
            _to_hunk(by_id[ref.id], normalize_importance(ref.importance), ref.is_test)
            for ref in llm_section.hunks
            if ref.id in by_id
        ]
        sections.append(
            Section(
                id=llm_section.id,
                title=llm_section.title,
                chapter_id=llm_section.chapter_id,
                narrative=llm_section.narrative,
                hunks=section_hunks,
            )
        )
    return Review(
        working_directory=working_directory,
        title=response.title,
        created_at=created_at,
        sections=sections,
    )


def assemble_partial_review(
    working_directory: str,
    response: LLMResponse,
    hunks: Sequence[ParsedHunk],
    missing_ids: Sequence[str],
    created_at: datetime,
) -> Review:
    """Like assemble_review, plus a trailing section holding the missing hunks."""
    review = assemble_review(working_directory, response, hunks, created_at)
    by_id = {h.id: h for h in hunks}
    leftovers = [_to_hunk(by_id[i], Importance.MEDIUM.value) for i in missing_ids if i in by_id]
    if leftovers:
        review.sections.append(
            Section(
                id=UNCLASSIFIED_SECTION_ID,
                title="Unclassified changes",
                narrative=UNCLASSIFIED_NARRATIVE,
                hunks=leftovers,
            )
        )
    return review


class Generator:
    """Runs generations for one working directory and submits the result."""

    def __init__(
        self,
        service: ReviewService,
        working_directory: str | Path,
        *,
        clock: Clock | None = None,
        runner: Runner = run_command,
    ) -> None:
        self._service = service
        self._clock = clock or utc_now
        self._runner = runner
        self.working_directory = canonicalize(working_directory)
        self.state = GenerationState.IDLE

    async def run(self, params: GenerateParams) -> GenerationOutcome:
        """Run one generation. Never raises for pipeline errors or cancellation."""
        try:
            return await self._run(params)
        except asyncio.CancelledError:
            self.state = GenerationState.CANCELLED
            logger.info("generation_cancelled", working_directory=self.working_directory)
            return GenerationCancelled()
        except DiffstoryError as e:
            self.state = GenerationState.ERROR
            logger.error("generation_failed", error=e.error_name, message=e.message)
            return GenerationFailed(error=e)

    async def retry(self, needs_retry: GenerationNeedsRetry) -> GenerationOutcome:
        """Prompt again with the cached hunks, calling out the missing IDs."""
        params = replace(
            needs_retry.params,
            is_retry=True,
            missing_ids=tuple(needs_retry.validation.missing_ids),
            parsed_hunks=needs_retry.hunks,
        )
        return await self.run(params)

    def proceed_partial(self, needs_retry: GenerationNeedsRetry) -> GenerationOutcome:
        """Write what was classified, parking missing hunks in an unclassified section.

        Refused when the response has duplicate IDs or invalid importance.
        """
        validation = needs_retry.validation
        if not validation.partial_allowed:
            error = GenerationError.validation_failed(
                validation.missing_ids, validation.duplicate_ids, validation.invalid_importance
            )
            self.state = GenerationState.ERROR
            return GenerationFailed(error=error)

        review = assemble_partial_review(
            self.working_directory,
            needs_retry.response,
            needs_retry.hunks,
            validation.missing_ids,
            self._clock(),
        )
        try:
            return self._write(review)
        except DiffstoryError as e:
            self.state = GenerationState.ERROR
            return GenerationFailed(error=e)

    async def _collect_hunks(self, diff_command: Sequence[str]) -> tuple[ParsedHunk, ...]:
        self.state = GenerationState.DIFFING
        logger.info("running_diff_command", command=list(diff_command))
        diff_output = await self._runner(diff_command, self.working_directory)
        if not diff_output.strip():
            raise GenerationError.no_changes()

        self.state = GenerationState.PARSING
        hunks = tuple(parse_diff(diff_output))
        if not hunks:
            raise GenerationError.no_changes("no hunks found in diff")
        logger.info("diff_parsed", hunks=len(hunks))
        return hunks

    async def _run(self, params: GenerateParams) -> GenerationOutcome:
        if params.is_retry and params.parsed_hunks:
            hunks = params.parsed_hunks
            logger.info("using_cached_hunks", hunks=len(hunks))
        else:
            hunks = await self._collect_hunks(params.diff_command)

        self.state = GenerationState.PROMPTING
        prompt = build_prompt(
            hunks,
            context=params.context,
            missing_ids=params.missing_ids if params.is_retry else (),
        )

        self.state = GenerationState.AWAITING_LLM
        llm_argv = [*params.llm_command, prompt]
        logger.info("calling_llm", command=list(params.llm_command), prompt_chars=len(prompt))
        output = await self._runner(llm_argv, self.working_directory)
        logger.info("llm_returned", output_chars=len(output))

        self.state = GenerationState.EXTRACTING
        response = extract_llm_response(output)

        self.state = GenerationState.VALIDATING
        validation = validate_classification(hunks, response)
        if not validation.valid:
            self.state = GenerationState.NEEDS_RETRY
            logger.warning(
                "classification_incomplete",
                missing=len(validation.missing_ids),
                duplicates=len(validation.duplicate_ids),
                invalid=len(validation.invalid_importance),
            )
            return GenerationNeedsRetry(
                hunks=hunks, response=response, validation=validation, params=params
            )

        review = assemble_review(self.working_directory, response, hunks, self._clock())
        return self._write(review)

    def _write(self, review: Review) -> GenerationSucceeded:
        self.state = GenerationState.WRITING
        result = self._service.submit(review, strict=True)
        return GenerationSucceeded(review=review, file_path=result.file_path)
