"""Overall quality score combining local and remote signals."""

import math

from occurrence_text_assistant.models_api import (ClarityIssue, RemoteAnalysis,
                                                  Severity, SpellingCorrection)

MAX_SCORE = 10.0
MIN_SCORE = 1.0
SPELLING_PENALTY = 0.5
SEVERITY_PENALTIES: dict[Severity, float] = {
    Severity.HIGH: 2.0,
    Severity.MEDIUM: 1.0,
    Severity.LOW: 0.5,
}


def calculate_local_score(
    spelling: list[SpellingCorrection],
    clarity: list[ClarityIssue],
) -> float:
    """Score from local penalties only, unclamped and unrounded."""
    score = MAX_SCORE
    score -= len(spelling) * SPELLING_PENALTY
    for issue in clarity:
        score -= SEVERITY_PENALTIES[issue.severity]
    return score


def calculate_overall_score(
    spelling: list[SpellingCorrection],
    clarity: list[ClarityIssue],
    remote: RemoteAnalysis | None = None,
) -> float:
    """Compute the 1-10 quality score, rounded to one decimal.

    A remote score is averaged with the local one, so it can pull the result
    towards its own value but never replace it.
    """
    score = calculate_local_score(spelling, clarity)

    if remote is not None and remote.score:
        score = (score + remote.score) / 2

    clamped = max(MIN_SCORE, min(MAX_SCORE, score))
    # Half-up to one decimal (7.25 -> 7.3)
    return math.floor(clamped * 10 + 0.5) / 10
