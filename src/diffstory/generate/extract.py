"""Pull one JSON object out of free-form LLM output.

The first ``{`` starts the candidate. ``raw_decode`` reads exactly one
complete value from there (string-aware, so braces inside literals do not
confuse it) and ignores any trailing prose. When that fails, a repair pass
fixes the malformations LLMs commonly produce and the decode is retried.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from pydantic import ValidationError

from diffstory.core.errors import GenerationError
from diffstory.generate.response import LLMResponse

logger = structlog.get_logger()

_DECODER = json.JSONDecoder(strict=False)
_FENCE_RE = re.compile(r"^[ \t]*```[\w-]*[ \t]*$", re.MULTILINE)
_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = frozenset({"true", "false", "null"})
_BAREWORD_STOP = frozenset(',:{}[]"\n')
_CLOSERS = {"{": "}", "[": "]"}


def _scan_string(text: str, start: int) -> tuple[int, bool]:
    """Index just past the string opening at ``start``, and whether it closed."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i + 1, True
        i += 1
    return n, False


def _seal(out: list[str]) -> None:
    """Drop trailing whitespace and commas; give a dangling key a null value."""
    while out:
        last = out[-1]
        stripped = last.rstrip()
        if stripped.endswith(","):
            stripped = stripped[:-1].rstrip()
        if stripped == last:
            break
        if stripped:
            out[-1] = stripped
        else:
            out.pop()
    if out and out[-1].endswith(":"):
        out.append(" null")


def repair_json(text: str) -> str:
    """Best-effort fix-up of a truncated or sloppy JSON object.

    Handles code-fence lines, trailing commas, unquoted keys and bareword
    values, and strings, arrays and objects left open at end of input.
    Anything after the outermost closing brace is dropped.
    """
    text = _FENCE_RE.sub("", text)
    out: list[str] = []
    stack: list[str] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == '"':
            end, closed = _scan_string(text, i)
            segment = text[i:end]
            if not closed:
                if segment.endswith("\\") and not segment.endswith("\\\\"):
                    segment = segment[:-1]
                segment += '"'
            out.append(segment)
            i = end
            continue

        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
            out.append(ch)
            i += 1
            continue

        if ch in "}]":
            i += 1
            if ch not in stack:
                continue
            while stack[-1] != ch:
                _seal(out)
                out.append(stack.pop())
            _seal(out)
            out.append(stack.pop())
            if not stack:
                break
            continue

        if ch in ",:" or ch.isspace():
            out.append(ch)
            i += 1
            continue

        j = i
        while j < n and text[j] not in _BAREWORD_STOP:
            j += 1
        token = text[i:j].strip()
        if token in _LITERALS or _NUMBER_RE.fullmatch(token):
            out.append(token)
        else:
            out.append(json.dumps(token))
        i = j

    while stack:
        _seal(out)
        out.append(stack.pop())
    return "".join(out)


def _decode_object(text: str) -> dict[str, Any]:
    value, _end = _DECODER.raw_decode(text)
    if not isinstance(value, dict):
        raise json.JSONDecodeError("expected a JSON object", text, 0)
    return value


def extract_llm_response(output: str) -> LLMResponse:
    """Locate, decode (repairing if needed) and validate the LLM's JSON reply.

    Raises:
        GenerationError: EXTRACT_ERROR when no usable object can be recovered.
    """
    start = output.find("{")
    if start == -1:
        logger.error("llm_response_parse_failed", reason="no JSON object", output=output)
        raise GenerationError.extract_failed("no JSON object found in response")

    candidate = output[start:]
    try:
        data = _decode_object(candidate)
    except json.JSONDecodeError as e:
        repaired = repair_json(candidate)
        try:
            data = _decode_object(repaired)
        except json.JSONDecodeError as repair_error:
            logger.error(
                "llm_response_parse_failed",
                error=str(e),
                repair_error=str(repair_error),
                output=output,
            )
            raise GenerationError.extract_failed(
                f"{e} (repair also failed: {repair_error})"
            ) from repair_error
        logger.info(
            "json_repair_applied",
            original_length=len(candidate),
            repaired_length=len(repaired),
        )

    try:
        return LLMResponse.model_validate(data)
    except ValidationError as e:
        logger.error("llm_response_invalid", error=str(e), output=output)
        raise GenerationError.extract_failed(str(e)) from e
