"""LLM command resolution."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence

from diffstory.config.loader import default_config_path
from diffstory.core.errors import GenerationError

DEFAULT_LLM_COMMAND = ("claude", "-p")

LookPath = Callable[[str], str | None]


def resolve_llm_command(configured: Sequence[str], which: LookPath = shutil.which) -> list[str]:
    """Pick the LLM command to run.

    An explicitly configured command must be on PATH. With nothing
    configured, ``claude -p`` is used when ``claude`` is available.

    Raises:
        GenerationError: LLM_COMMAND_NOT_FOUND with a hint on how to fix it.
    """
    if configured:
        if which(configured[0]) is None:
            raise GenerationError.llm_command_not_found(
                configured[0],
                "Check that the command is installed and on your PATH.",
            )
        return list(configured)

    if which(DEFAULT_LLM_COMMAND[0]) is None:
        hint = (
            f"Install Claude Code, or configure a different LLM in {default_config_path()}:\n\n"
            "  generate:\n"
            '    llm_command: ["your-llm-command", "args"]'
        )
        raise GenerationError.llm_command_not_found(DEFAULT_LLM_COMMAND[0], hint)
    return list(DEFAULT_LLM_COMMAND)
