"""Structural clarity heuristics that run without the LLM."""

from collections import Counter

from occurrence_text_assistant.lexical_corrector import normalize_token
from occurrence_text_assistant.models_api import ClarityIssue, IssueKind, Severity

MIN_DESCRIPTION_LENGTH = 20
UNPUNCTUATED_MAX_LENGTH = 50
SENTENCE_TERMINATORS = (".", "!", "?")
VAGUE_WORDS = ("coisa", "negócio", "troço", "isso", "aquilo")
REPETITION_MIN_TOKEN_LENGTH = 4
REPETITION_MAX_COUNT = 2


def _check_length(text: str) -> ClarityIssue | None:
    if len(text) >= MIN_DESCRIPTION_LENGTH:
        return None
    return ClarityIssue(
        kind=IssueKind.LENGTH,
        severity=Severity.MEDIUM,
        message="Descrição muito curta. Adicione mais detalhes sobre o problema.",
        rationale=(
            "Inclua informações sobre quando foi observado, extensão do problema "
            "e possíveis causas."
        ),
    )


def _check_punctuation(text: str) -> ClarityIssue | None:
    if len(text) <= UNPUNCTUATED_MAX_LENGTH:
        return None
    if any(mark in text for mark in SENTENCE_TERMINATORS):
        return None
    return ClarityIssue(
        kind=IssueKind.PUNCTUATION,
        severity=Severity.LOW,
        message="Considere dividir o texto em frases menores.",
        rationale="Use pontos para separar ideias e melhorar a legibilidade.",
    )


def _check_vague_words(text: str) -> ClarityIssue | None:
    lowered = text.lower()
    if not any(word in lowered for word in VAGUE_WORDS):
        return None
    return ClarityIssue(
        kind=IssueKind.VAGUE,
        severity=Severity.MEDIUM,
        message='Evite palavras vagas como "coisa", "negócio", etc.',
        rationale="Seja específico sobre os objetos e situações mencionados.",
    )


def find_repeated_words(text: str) -> list[str]:
    """Return normalized tokens of 4+ characters seen more than twice.

    Tokens come out in order of first appearance.
    """
    counts = Counter(
        token
        for token in (normalize_token(raw) for raw in text.split())
        if len(token) >= REPETITION_MIN_TOKEN_LENGTH
    )
    return [word for word, count in counts.items() if count > REPETITION_MAX_COUNT]


def _check_repetition(text: str) -> ClarityIssue | None:
    repeated = find_repeated_words(text)
    if not repeated:
        return None
    return ClarityIssue(
        kind=IssueKind.REPETITION,
        severity=Severity.LOW,
        message=f"Palavras repetidas: {', '.join(repeated)}",
        rationale="Use sinônimos para evitar repetições excessivas.",
    )


# Fixed order: length, punctuation, vague, repetition
CLARITY_CHECKS = (
    _check_length,
    _check_punctuation,
    _check_vague_words,
    _check_repetition,
)


def analyze_clarity_basic(text: str) -> list[ClarityIssue]:
    """Run every clarity check and return the issues that fired, in fixed order."""
    issues: list[ClarityIssue] = []
    for check in CLARITY_CHECKS:
        issue = check(text)
        if issue is not None:
            issues.append(issue)
    return issues
