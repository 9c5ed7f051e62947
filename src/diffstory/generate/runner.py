"""Subprocess execution for the diff and LLM producers."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from collections.abc import Sequence
from pathlib import Path

import structlog

from diffstory.core.errors import GenerationError

logger = structlog.get_logger()


def _kill_process_group(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    if hasattr(os, "killpg"):
        with contextlib.suppress(ProcessLookupError, PermissionError):
            os.killpg(proc.pid, signal.SIGKILL)
    else:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()


async def run_command(argv: Sequence[str], cwd: Path | str | None = None) -> str:
    """Run ``argv`` in ``cwd`` and return its stdout as text.

    The child runs in its own process group; cancelling the awaiting task
    kills the whole group and re-raises ``asyncio.CancelledError``.

    Raises:
        GenerationError: SUBPROCESS_ERROR when the command cannot be started
            or exits non-zero (stderr is carried in the message).
    """
    cmd = list(argv)
    if not cmd:
        raise GenerationError.subprocess_failed(["(empty command)"], None, "no command configured")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            start_new_session=True,
        )
    except OSError as e:
        raise GenerationError.subprocess_failed(cmd, None, str(e)) from e

    try:
        stdout_bytes, stderr_bytes = await proc.communicate()
    except asyncio.CancelledError:
        logger.info("subprocess_cancelled", command=cmd[0], pid=proc.pid)
        _kill_process_group(proc)
        await proc.wait()
        raise

    stdout = stdout_bytes.decode(errors="replace")
    stderr = stderr_bytes.decode(errors="replace")
    if proc.returncode != 0:
        raise GenerationError.subprocess_failed(cmd, proc.returncode, stderr)

    logger.debug("subprocess_complete", command=cmd[0], stdout_bytes=len(stdout_bytes))
    return stdout
