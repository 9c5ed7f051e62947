"""Classification validator.

Checks that the LLM referenced every parsed hunk exactly once and gave each
an importance that normalizes to a canonical level.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from diffstory.diff.parser import ParsedHunk
from diffstory.generate.response import LLMResponse
from diffstory.model.review import normalize_importance


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validate_classification.

    ``missing_ids`` follow input order; ``duplicate_ids`` and
    ``invalid_importance`` follow first appearance in the response.
    """

    missing_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)
    invalid_importance: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not (self.missing_ids or self.duplicate_ids or self.invalid_importance)

    @property
    def partial_allowed(self) -> bool:
        """Only missing hunks can be papered over with an unclassified section."""
        return not (self.duplicate_ids or self.invalid_importance)


def validate_classification(
    hunks: Sequence[ParsedHunk], response: LLMResponse
) -> ValidationResult:
    output_counts: Counter[str] = Counter()
    invalid: dict[str, None] = {}
    for section in response.all_sections():
        for ref in section.hunks:
            output_counts[ref.id] += 1
            if not normalize_importance(ref.importance):
                invalid.setdefault(ref.id)

    missing = [h.id for h in hunks if output_counts[h.id] == 0]
    duplicates = [hunk_id for hunk_id, count in output_counts.items() if count > 1]
    return ValidationResult(
        missing_ids=missing,
        duplicate_ids=duplicates,
        invalid_importance=list(invalid),
    )
