"""diffstory generate command - have an LLM narrate the current diff.

Flow:
- Pick a diff source (preset, single commit, commit range, or the configured command)
- Run the generation pipeline behind a spinner
- On an incomplete classification, ask (or follow --on-invalid) whether to
  retry, write a partial review, or give up
"""

import asyncio
import sys

import click
import questionary

from diffstory.cli.utils import (
    configure_cli_logging,
    load_cli_config,
    open_store,
    working_directory,
)
from diffstory.core.progress import get_console, pluralize, spinner, status
from diffstory.generate.pipeline import (
    GenerateParams,
    GenerationCancelled,
    GenerationFailed,
    GenerationNeedsRetry,
    GenerationOutcome,
    GenerationSucceeded,
    Generator,
)
from diffstory.generate.sources import PRESETS, DiffSource, commit_source, range_source
from diffstory.generate.validation import ValidationResult

RETRY = "retry"
PARTIAL = "partial"
FAIL = "fail"
ASK = "ask"

_MAX_LISTED_IDS = 10


def pick_source(
    preset: str | None,
    commit: str | None,
    commit_range: str | None,
    configured: list[str],
) -> DiffSource:
    """Resolve the diff source from the mutually exclusive source options."""
    chosen = [opt for opt in (preset, commit, commit_range) if opt]
    if len(chosen) > 1:
        raise click.UsageError("Use only one of --source, --commit and --range")

    if preset:
        return PRESETS[preset]
    if commit:
        return commit_source(commit)
    if commit_range:
        start, sep, end = commit_range.partition("..")
        if not sep or not start or not end or end.startswith("."):
            raise click.BadParameter(
                f"expected A..B, got {commit_range!r}", param_hint="--range"
            )
        return range_source(start, end)
    return DiffSource("configured", "Configured diff", tuple(configured))


def describe_validation(validation: ValidationResult) -> list[str]:
    """One line per kind of classification problem."""
    lines: list[str] = []
    for label, ids in (
        ("not classified", validation.missing_ids),
        ("classified more than once", validation.duplicate_ids),
        ("with invalid importance", validation.invalid_importance),
    ):
        if not ids:
            continue
        shown = ", ".join(ids[:_MAX_LISTED_IDS])
        if len(ids) > _MAX_LISTED_IDS:
            shown += f", ... (+{len(ids) - _MAX_LISTED_IDS})"
        lines.append(f"{pluralize(len(ids), 'hunk')} {label}: {shown}")
    return lines


def _ask(validation: ValidationResult) -> str:
    if not sys.stdin.isatty():
        return FAIL

    choices = [questionary.Choice("Retry with the missing hunks called out", value=RETRY)]
    if validation.partial_allowed:
        choices.append(
            questionary.Choice("Write what was classified (rest goes unclassified)", value=PARTIAL)
        )
    choices.append(questionary.Choice("Give up", value=FAIL))

    answer = questionary.select("How do you want to continue?", choices=choices).ask()
    return answer or FAIL


def _next_step(on_invalid: str, needs_retry: GenerationNeedsRetry, retries_left: int) -> str:
    if on_invalid == ASK:
        choice = _ask(needs_retry.validation)
    else:
        choice = on_invalid
    if choice == RETRY and retries_left <= 0:
        status("No retries left", style="warning")
        return FAIL
    if choice == PARTIAL and not needs_retry.validation.partial_allowed:
        status("Partial review not possible with duplicate or invalid hunks", style="warning")
        return FAIL
    return choice


async def run_generation(
    generator: Generator,
    params: GenerateParams,
    *,
    on_invalid: str,
    max_retries: int,
) -> GenerationOutcome:
    """Run one generation and resolve incomplete classifications per on_invalid."""
    with spinner("Generating review"):
        outcome = await generator.run(params)

    retries_left = max_retries
    while isinstance(outcome, GenerationNeedsRetry):
        status("The LLM's classification is incomplete", style="warning")
        for line in describe_validation(outcome.validation):
            status(line, indent=2)

        step = _next_step(on_invalid, outcome, retries_left)
        if step == RETRY:
            retries_left -= 1
            with spinner("Retrying"):
                outcome = await generator.retry(outcome)
        elif step == PARTIAL:
            outcome = generator.proceed_partial(outcome)
        else:
            return outcome
    return outcome


def report_outcome(outcome: GenerationOutcome) -> int:
    """Print the outcome. Returns the process exit code."""
    if isinstance(outcome, GenerationSucceeded):
        review = outcome.review
        status(
            f"Review written: {pluralize(review.section_count(), 'section')}, "
            f"{pluralize(review.hunk_count(), 'hunk')}",
            style="success",
        )
        get_console().print(f"  {outcome.file_path}", style="dim", highlight=False)
        return 0
    if isinstance(outcome, GenerationFailed):
        status(outcome.error.message, style="error")
        return 1
    if isinstance(outcome, GenerationCancelled):
        status("Cancelled", style="warning")
        return 130
    status("No review written", style="error")
    return 1


@click.command()
@click.option(
    "--source",
    "-s",
    "preset",
    type=click.Choice(sorted(PRESETS)),
    default=None,
    help="Diff preset: uncommitted, staged, or main (changes since main)",
)
@click.option("--commit", "-c", default=None, help="Review a single commit")
@click.option("--range", "-r", "commit_range", default=None, help="Review a range: A..B")
@click.option("--context", "-m", default="", help="Extra context for the LLM")
@click.option(
    "--on-invalid",
    type=click.Choice([ASK, RETRY, PARTIAL, FAIL]),
    default=ASK,
    show_default=True,
    help="What to do when the LLM misses or repeats hunks",
)
@click.option("--max-retries", type=click.IntRange(min=0), default=1, show_default=True)
@click.pass_context
def generate_command(
    ctx: click.Context,
    preset: str | None,
    commit: str | None,
    commit_range: str | None,
    context: str,
    on_invalid: str,
    max_retries: int,
) -> None:
    """Generate a narrated review of a diff using an LLM.

    By default reviews the configured diff command (uncommitted changes).
    The review is stored for the current directory, where `diffstory
    watch` and `diffstory show` pick it up.
    """
    from diffstory.core.errors import DiffstoryError
    from diffstory.generate.llm import resolve_llm_command
    from diffstory.review.service import ReviewService

    config = load_cli_config(ctx)
    source = pick_source(preset, commit, commit_range, config.generate.diff_command)

    store = open_store(config)
    configure_cli_logging(ctx, config, store)

    try:
        llm_command = resolve_llm_command(config.generate.llm_command)
        generator = Generator(ReviewService(store), working_directory())
    except DiffstoryError as e:
        status(e.message, style="error")
        raise SystemExit(1) from e

    status(f"{source.label}  [dim]{source.hint}[/dim]")
    params = GenerateParams(
        diff_command=source.command,
        llm_command=llm_command,
        context=context,
    )

    try:
        outcome = asyncio.run(
            run_generation(generator, params, on_invalid=on_invalid, max_retries=max_retries)
        )
    except KeyboardInterrupt:
        outcome = GenerationCancelled()

    code = report_outcome(outcome)
    if code:
        raise SystemExit(code)
