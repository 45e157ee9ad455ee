"""Phrase-level rewrite rules towards more precise technical wording.

Rules are applied in order. A rule fires when its pattern occurs anywhere in
the original text; its replacement is then applied to the output of the
previous rules.
"""

import re
from dataclasses import dataclass

from occurrence_text_assistant.models_api import PatternMatch, TechnicalAnalysis


@dataclass(frozen=True)
class RewriteRule:
    """A compiled rewrite rule with the rationale shown to the user."""

    pattern_id: str
    pattern: re.Pattern[str]
    replacement: str
    rationale: str

    @classmethod
    def build(
        cls, pattern_id: str, pattern: str, replacement: str, rationale: str
    ) -> "RewriteRule":
        return cls(pattern_id, re.compile(pattern, re.IGNORECASE), replacement, rationale)


REWRITE_RULES: tuple[RewriteRule, ...] = (
    RewriteRule.build(
        "damaged",
        r"\b(quebr[ao]d[ao]s?)\b",
        "danificado(s)",
        'Use "danificado" em vez de "quebrado" para maior precisão técnica.',
    ),
    RewriteRule.build(
        "vague-adverb",
        r"\b(muito|bem)\s+",
        "",
        "Evite advérbios vagos. Seja mais específico sobre a intensidade ou qualidade.",
    ),
    RewriteRule.build(
        "poor-condition",
        r"\b(ruim|péssim[ao]s?)\b",
        "em condições inadequadas",
        "Descreva especificamente o que está inadequado.",
    ),
    RewriteRule.build(
        "not-working",
        r"\b(não funciona|não está funcionando)\b",
        "apresenta falha operacional",
        "Seja mais específico sobre o tipo de falha.",
    ),
)


def apply_technical_patterns(
    text: str,
    rules: tuple[RewriteRule, ...] = REWRITE_RULES,
) -> TechnicalAnalysis:
    """Rewrite ``text`` with every rule whose pattern occurs in it.

    Returns:
        The fully rewritten text and the matched rules, in rule order.
    """
    improved_text = text
    matches: list[PatternMatch] = []

    for rule in rules:
        if rule.pattern.search(text):
            matches.append(PatternMatch(rationale=rule.rationale, pattern_id=rule.pattern_id))
            improved_text = rule.pattern.sub(rule.replacement, improved_text)

    return TechnicalAnalysis(corrected_text=improved_text, matches=matches)
