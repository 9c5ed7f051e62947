"""Classification prompt construction."""

from __future__ import annotations

import json
from collections.abc import Sequence

from diffstory.diff.parser import ParsedHunk

CLASSIFICATION_TEMPLATE = """\
You are a code review assistant. Turn the diff hunks below into a narrated \
review: group them into sections that tell the story of the change in a \
sensible reading order.

Every hunk ID listed below MUST appear exactly once in your response. Do not \
invent IDs, do not repeat IDs and do not copy or truncate diff content: \
refer to hunks by ID only.

Respond with a single JSON object and nothing else (no markdown fences, no \
commentary), in exactly this shape:
{
  "title": "Brief title for this review",
  "sections": [
    {
      "id": "section-identifier",
      "title": "Short section title",
      "chapterId": "optional-chapter-identifier",
      "narrative": "What changed and why. Mention key decisions if relevant.",
      "hunks": [
        {"id": "path/to/file.py::45", "importance": "high", "isTest": false},
        {"id": "tests/test_file.py::120", "importance": "low", "isTest": true}
      ]
    }
  ]
}

Rules:
- Group hunks by purpose, not by file. Hunks that work together belong in the
  same section even when they span files; documentation goes with the code it
  describes.
- Order sections so that reading them top to bottom explains the change.
- Sections that share a theme may share a "chapterId".
- "importance" must be exactly one of "high", "medium" or "low":
  - high: security, core logic, behaviour or API changes
  - medium: new features, significant refactors
  - low: formatting, comments, renames, trivial fixes
- "isTest" is true for test code (tests, fixtures, mocks), false otherwise.

Input hunks (JSON array of {id, file, startLine, diff}):
"""

CONTEXT_TEMPLATE = "\nUser context: {context}\n"

RETRY_ADDENDUM = """
CRITICAL: The previous response was incomplete. These hunk IDs were missing:
{missing}

You MUST include ALL hunk IDs in your response, including the ones listed above.
"""


def build_hunk_listing(hunks: Sequence[ParsedHunk]) -> str:
    """One JSON object per line, wrapped in an array; diff text is JSON-escaped."""
    rows = [
        "  "
        + json.dumps(
            {"id": h.id, "file": h.file, "startLine": h.start_line, "diff": h.diff},
            ensure_ascii=False,
        )
        for h in hunks
    ]
    return "[\n" + ",\n".join(rows) + "\n]"


def build_prompt(
    hunks: Sequence[ParsedHunk],
    *,
    context: str = "",
    missing_ids: Sequence[str] = (),
) -> str:
    """Assemble the full prompt passed as the LLM command's final argument."""
    prompt = CLASSIFICATION_TEMPLATE + build_hunk_listing(hunks) + "\n"
    if context.strip():
        prompt += CONTEXT_TEMPLATE.format(context=context.strip())
    if missing_ids:
        prompt += RETRY_ADDENDUM.format(missing=", ".join(missing_ids))
    return prompt
