"""Dictionary-based correction of known misspellings and imprecise terms."""

import re

from occurrence_text_assistant.models_api import SpellingCorrection

# Known term -> preferred term. Entries mapping a term to itself never produce
# a correction; the list is not meant to be exhaustive.
SPELL_CORRECTIONS: dict[str, str] = {
    "vazamento": "vazamento",
    "entupimento": "entupimento",
    "quebrado": "danificado",
    "ruim": "em más condições",
    "muito": "significativamente",
    "bem": "adequadamente",
    "mal": "inadequadamente",
    "defeituoso": "com defeito",
    "estragado": "danificado",
    "furado": "perfurado",
    "rachado": "com fissuras",
    "solto": "desencaixado",
    "apertado": "com folga insuficiente",
}

NON_WORD_PATTERN = re.compile(r"[^\w]")


def normalize_token(token: str) -> str:
    """Lower-case a token and strip every non-word character."""
    return NON_WORD_PATTERN.sub("", token.lower())


def check_basic_spelling(
    text: str,
    corrections: dict[str, str] | None = None,
) -> list[SpellingCorrection]:
    """Look up each whitespace-separated token in the correction dictionary.

    Args:
        text: Raw text to check.
        corrections: Optional dictionary overriding SPELL_CORRECTIONS.

    Returns:
        One SpellingCorrection per token whose dictionary value differs from
        the normalized token. ``position`` is the token index, not an offset.
    """
    dictionary = SPELL_CORRECTIONS if corrections is None else corrections
    found: list[SpellingCorrection] = []

    for index, token in enumerate(text.split()):
        clean_token = normalize_token(token)
        suggestion = dictionary.get(clean_token)
        if suggestion is not None and suggestion != clean_token:
            found.append(
                SpellingCorrection(original=token, suggestion=suggestion, position=index)
            )

    return found
