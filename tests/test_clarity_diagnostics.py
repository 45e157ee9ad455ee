"""Tests for the structural clarity checks."""

import pytest

from occurrence_text_assistant.clarity_diagnostics import (analyze_clarity_basic,
                                                           find_repeated_words)
from occurrence_text_assistant.models_api import IssueKind, Severity

LONG_UNPUNCTUATED = (
    "A tubulação principal do terceiro andar apresenta vazamento constante "
    "próximo ao shaft de instalações hidráulicas"
)


class TestAnalyzeClarityBasic:
    def test_clean_text_has_no_issues(self, clean_description: str) -> None:
        assert analyze_clarity_basic(clean_description) == []

    def test_short_vague_text(self) -> None:
        issues = analyze_clarity_basic("coisa")

        assert [(i.kind, i.severity) for i in issues] == [
            (IssueKind.LENGTH, Severity.MEDIUM),
            (IssueKind.VAGUE, Severity.MEDIUM),
        ]

    def test_length_boundary(self) -> None:
        assert analyze_clarity_basic("x" * 19)[0].kind == IssueKind.LENGTH
        assert analyze_clarity_basic("Parede com fissuras.") == []  # exactly 20 chars

    def test_punctuation_only_checked_for_long_text(self, pipe_description: str) -> None:
        # 33 characters without terminal punctuation: below the threshold
        assert analyze_clarity_basic(pipe_description) == []

    def test_long_text_without_terminal_punctuation(self) -> None:
        issues = analyze_clarity_basic(LONG_UNPUNCTUATED)

        assert [(i.kind, i.severity) for i in issues] == [
            (IssueKind.PUNCTUATION, Severity.LOW),
        ]

    @pytest.mark.parametrize("mark", [".", "!", "?"])
    def test_any_terminal_mark_satisfies_punctuation(self, mark: str) -> None:
        assert analyze_clarity_basic(LONG_UNPUNCTUATED + mark) == []

    @pytest.mark.parametrize("word", ["coisa", "negócio", "troço", "isso", "aquilo"])
    def test_vague_words(self, word: str) -> None:
        text = f"Foi identificado {word.upper()} no pavimento térreo."
        kinds = [i.kind for i in analyze_clarity_basic(text)]
        assert kinds == [IssueKind.VAGUE]

    def test_repetition_lists_every_repeated_word(self) -> None:
        text = "Piso piso piso solto, rodapé rodapé rodapé. Um um um."
        issues = analyze_clarity_basic(text)

        assert [i.kind for i in issues] == [IssueKind.REPETITION]
        assert issues[0].severity == Severity.LOW
        assert issues[0].message == "Palavras repetidas: piso, rodapé"

    def test_all_checks_fire_in_fixed_order(self) -> None:
        text = (
            "aquilo parede parede parede sem qualquer pontuação no texto "
            "descrito pelo encarregado"
        )
        issues = analyze_clarity_basic(text)
        assert [i.kind for i in issues] == [
            IssueKind.PUNCTUATION,
            IssueKind.VAGUE,
            IssueKind.REPETITION,
        ]

        short = analyze_clarity_basic("isso isso isso.")
        assert [i.kind for i in short] == [
            IssueKind.LENGTH,
            IssueKind.VAGUE,
            IssueKind.REPETITION,
        ]


class TestFindRepeatedWords:
    def test_ignores_short_tokens_and_counts_up_to_two(self) -> None:
        assert find_repeated_words("de de de muro muro") == []

    def test_normalizes_case_and_punctuation(self) -> None:
        assert find_repeated_words("Viga, viga. VIGA!") == ["viga"]
