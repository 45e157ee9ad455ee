"""Hybrid text-quality analysis for occurrence report descriptions.

``TextAssistant`` runs the local analyzers (spelling dictionary, rewrite
rules, clarity checks), optionally augments them with an LLM analysis and
merges everything into one scored ``AnalysisResult``.
"""

import aiohttp
from loguru import logger

from occurrence_text_assistant.clarity_diagnostics import analyze_clarity_basic
from occurrence_text_assistant.config import Settings, get_settings
from occurrence_text_assistant.lexical_corrector import check_basic_spelling
from occurrence_text_assistant.llm_caller import RemoteAugmenter
from occurrence_text_assistant.models_api import (AnalysisContext,
                                                  AnalysisOrigin,
                                                  AnalysisResult,
                                                  RemoteAnalysis)
from occurrence_text_assistant.pattern_rewriter import apply_technical_patterns
from occurrence_text_assistant.scoring import calculate_overall_score
from occurrence_text_assistant.suggestions import (apply_corrections,
                                                   generate_suggestions)


class TextAssistant:
    """Entry point for analyzing and correcting description texts."""

    def __init__(
        self,
        settings: Settings | None = None,
        api_key: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.augmenter = RemoteAugmenter(self.settings, api_key=api_key, session=session)

    def set_api_key(self, key: str | None) -> None:
        """Configure the LLM credential; None forces local-only analysis."""
        self.augmenter.set_api_key(key)

    @property
    def has_api_key(self) -> bool:
        return bool(self.augmenter.api_key)

    def _should_use_remote(self, text: str) -> bool:
        return self.has_api_key and len(text) > self.settings.remote_min_text_length

    async def analyze_text(
        self,
        text: str,
        context: AnalysisContext | None = None,
    ) -> AnalysisResult:
        """Analyze ``text`` and return the aggregate result. Never raises."""
        spelling = check_basic_spelling(text)
        technical = apply_technical_patterns(text)
        clarity = analyze_clarity_basic(text)

        remote: RemoteAnalysis | None = None
        if self._should_use_remote(text):
            remote = await self.augmenter.analyze(text, context)
        else:
            logger.debug("Skipping LLM analysis (no API key or text too short).")

        result = AnalysisResult(
            spelling=spelling,
            technical=technical,
            clarity=clarity,
            remote=remote,
            used_remote=remote is not None and remote.origin == AnalysisOrigin.MODEL,
            overall_score=calculate_overall_score(spelling, clarity, remote),
        )
        logger.debug(
            f"Analysis finished: score={result.overall_score}, "
            f"spelling={len(spelling)}, rules={len(technical.matches)}, "
            f"clarity={len(clarity)}, used_remote={result.used_remote}",
        )
        return result

    def generate_suggestions(self, analysis: AnalysisResult) -> list[str]:
        return generate_suggestions(analysis, self.settings.max_suggestions)

    def apply_corrections(self, text: str, analysis: AnalysisResult) -> str:
        return apply_corrections(text, analysis)
