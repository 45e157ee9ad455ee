"""Tests for suggestion consolidation and auto-correction."""

import pytest

from occurrence_text_assistant.clarity_diagnostics import analyze_clarity_basic
from occurrence_text_assistant.lexical_corrector import check_basic_spelling
from occurrence_text_assistant.models_api import (AnalysisOrigin,
                                                  AnalysisResult,
                                                  RemoteAnalysis,
                                                  SpellingCorrection,
                                                  TechnicalAnalysis)
from occurrence_text_assistant.pattern_rewriter import (REWRITE_RULES,
                                                        apply_technical_patterns)
from occurrence_text_assistant.scoring import calculate_overall_score
from occurrence_text_assistant.suggestions import (BoundedSuggestionList,
                                                   apply_corrections,
                                                   generate_suggestions)

RATIONALES = {rule.pattern_id: rule.rationale for rule in REWRITE_RULES}


def local_analysis(text: str, remote: RemoteAnalysis | None = None) -> AnalysisResult:
    spelling = check_basic_spelling(text)
    clarity = analyze_clarity_basic(text)
    return AnalysisResult(
        spelling=spelling,
        technical=apply_technical_patterns(text),
        clarity=clarity,
        remote=remote,
        used_remote=remote is not None and remote.origin == AnalysisOrigin.MODEL,
        overall_score=calculate_overall_score(spelling, clarity, remote),
    )


class TestBoundedSuggestionList:
    def test_stops_accepting_when_full(self) -> None:
        suggestions = BoundedSuggestionList(2)

        assert suggestions.add("a") is True
        assert suggestions.add("b") is True
        assert suggestions.is_full
        assert suggestions.add("c") is False
        assert suggestions.to_list() == ["a", "b"]

    def test_extend_reports_dropped_entries(self) -> None:
        suggestions = BoundedSuggestionList(3)

        assert suggestions.extend(["a", "b"]) is True
        assert suggestions.extend(["c", "d"]) is False
        assert list(suggestions) == ["a", "b", "c"]
        assert len(suggestions) == 3

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_capacity_must_be_positive(self, capacity: int) -> None:
        with pytest.raises(ValueError):
            BoundedSuggestionList(capacity)


class TestGenerateSuggestions:
    def test_priority_order_and_cap(self, pipe_description: str) -> None:
        suggestions = generate_suggestions(local_analysis(pipe_description))

        assert suggestions == [
            "Correções ortográficas: 3 encontradas",
            RATIONALES["damaged"],
            RATIONALES["vague-adverb"],
        ]

    def test_capacity_above_three_is_capped(self, pipe_description: str) -> None:
        remote = RemoteAnalysis(
            origin=AnalysisOrigin.MODEL, suggestions=["Informe o diâmetro."], score=6
        )
        suggestions = generate_suggestions(local_analysis(pipe_description, remote), 10)

        assert suggestions == [
            "Correções ortográficas: 3 encontradas",
            RATIONALES["damaged"],
            RATIONALES["vague-adverb"],
        ]

    def test_smaller_capacity(self, pipe_description: str) -> None:
        suggestions = generate_suggestions(local_analysis(pipe_description), 1)
        assert suggestions == ["Correções ortográficas: 3 encontradas"]

    def test_clarity_then_remote(self) -> None:
        remote = RemoteAnalysis(
            origin=AnalysisOrigin.MODEL, suggestions=["s1", "s2"], score=5
        )
        analysis = local_analysis("coisa", remote)
        clarity_rationales = [issue.rationale for issue in analysis.clarity]

        assert generate_suggestions(analysis) == [*clarity_rationales, "s1"]

    def test_clean_text_has_no_suggestions(self, clean_description: str) -> None:
        assert generate_suggestions(local_analysis(clean_description)) == []

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "coisa",
            "isso isso isso aquilo quebrado ruim péssimo não funciona muito bem",
            "O cano está quebrado e muito ruim",
        ],
    )
    def test_never_more_than_three(self, text: str) -> None:
        remote = RemoteAnalysis(
            origin=AnalysisOrigin.MODEL, suggestions=["a", "b", "c", "d"], score=5
        )
        assert len(generate_suggestions(local_analysis(text, remote))) <= 3


class TestApplyCorrections:
    def test_pattern_text_wins_over_spelling(self, pipe_description: str) -> None:
        corrected = apply_corrections(pipe_description, local_analysis(pipe_description))
        assert corrected == "O cano está danificado(s) e em condições inadequadas"

    def test_remote_text_wins_when_long_enough(self, pipe_description: str) -> None:
        remote = RemoteAnalysis(
            origin=AnalysisOrigin.MODEL,
            improved_text="O cano apresenta danos e está em condições inadequadas.",
            score=6,
        )
        corrected = apply_corrections(
            pipe_description, local_analysis(pipe_description, remote)
        )
        assert corrected == "O cano apresenta danos e está em condições inadequadas."

    @pytest.mark.parametrize("improved", ["", "Cano ruim.", "0123456789"])
    def test_short_remote_text_is_ignored(
        self, pipe_description: str, improved: str
    ) -> None:
        remote = RemoteAnalysis(
            origin=AnalysisOrigin.MODEL, improved_text=improved, score=6
        )
        corrected = apply_corrections(
            pipe_description, local_analysis(pipe_description, remote)
        )
        assert corrected == "O cano está danificado(s) e em condições inadequadas"

    def test_spelling_replacements_without_rewritten_text(self) -> None:
        text = "Quebrado, o cano está quebrado."
        analysis = AnalysisResult(
            spelling=[
                SpellingCorrection(original="Quebrado,", suggestion="danificado", position=0)
            ],
            technical=TechnicalAnalysis(corrected_text=""),
            overall_score=9.5,
        )

        assert apply_corrections(text, analysis) == "danificado, o cano está danificado."

    def test_replacement_text_is_literal(self) -> None:
        analysis = AnalysisResult(
            spelling=[SpellingCorrection(original="ruim", suggestion=r"\1 ok", position=0)],
            technical=TechnicalAnalysis(corrected_text=""),
            overall_score=9.5,
        )

        assert apply_corrections("piso ruim", analysis) == r"piso \1 ok"

    def test_clean_text_is_unchanged(self, clean_description: str) -> None:
        corrected = apply_corrections(clean_description, local_analysis(clean_description))
        assert corrected == clean_description
