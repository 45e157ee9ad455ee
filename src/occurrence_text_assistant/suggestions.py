"""Consolidated suggestions and auto-correction of analyzed text.

Suggestions are collected in a fixed priority order into a bounded list:
spelling summary, rewrite rationales, clarity rationales, LLM suggestions.
Corrections are applied as a cascade where each available stage replaces the
result of the previous one.
"""

import re
from collections.abc import Callable, Iterable, Iterator

from occurrence_text_assistant.lexical_corrector import NON_WORD_PATTERN
from occurrence_text_assistant.models_api import AnalysisResult

DEFAULT_MAX_SUGGESTIONS = 3
REMOTE_TEXT_MIN_LENGTH = 10


class BoundedSuggestionList:
    """Ordered suggestion list that stops accepting entries once full."""

    def __init__(self, capacity: int = DEFAULT_MAX_SUGGESTIONS) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: list[str] = []

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def add(self, suggestion: str) -> bool:
        """Append ``suggestion`` if there is room. Returns False once full."""
        if self.is_full:
            return False
        self._items.append(suggestion)
        return True

    def extend(self, suggestions: Iterable[str]) -> bool:
        """Append in order until full. Returns False if anything was dropped."""
        for suggestion in suggestions:
            if not self.add(suggestion):
                return False
        return True

    def to_list(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)


def generate_suggestions(
    analysis: AnalysisResult,
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[str]:
    """Build the prioritized suggestion list for ``analysis``.

    ``max_suggestions`` can lower the cap but never raise it above 3.
    """
    suggestions = BoundedSuggestionList(min(max_suggestions, DEFAULT_MAX_SUGGESTIONS))

    if analysis.spelling:
        suggestions.add(f"Correções ortográficas: {len(analysis.spelling)} encontradas")

    suggestions.extend(match.rationale for match in analysis.technical.matches)
    suggestions.extend(issue.rationale for issue in analysis.clarity)

    if analysis.remote is not None:
        suggestions.extend(analysis.remote.suggestions)

    return suggestions.to_list()


def _spelling_stage(text: str, analysis: AnalysisResult) -> str:
    corrected = text
    for correction in analysis.spelling:
        # Surrounding punctuation is not part of the word being replaced
        word = NON_WORD_PATTERN.sub("", correction.original)
        if not word:
            continue
        pattern = re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
        corrected = pattern.sub(lambda _m, s=correction.suggestion: s, corrected)
    return corrected


def _pattern_stage(analysis: AnalysisResult) -> str | None:
    return analysis.technical.corrected_text or None


def _remote_stage(analysis: AnalysisResult) -> str | None:
    if analysis.remote is None:
        return None
    improved = analysis.remote.improved_text
    if improved and len(improved) > REMOTE_TEXT_MIN_LENGTH:
        return improved
    return None


# Full-text overrides in increasing priority; the last one available wins
OVERRIDE_STAGES: tuple[Callable[[AnalysisResult], str | None], ...] = (
    _pattern_stage,
    _remote_stage,
)


def apply_corrections(text: str, analysis: AnalysisResult) -> str:
    """Return the corrected text from the highest-priority available source.

    Spelling replacements are applied to ``text`` first; a rewritten text from
    the pattern rewriter, then an LLM-improved text longer than 10 characters,
    each replace the whole result when present.
    """
    corrected = _spelling_stage(text, analysis)
    for stage in OVERRIDE_STAGES:
        override = stage(analysis)
        if override is not None:
            corrected = override
    return corrected
