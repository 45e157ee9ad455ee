"""Text-quality assistant for occurrence report descriptions.

Usage::

    from occurrence_text_assistant import TextAssistant

    assistant = TextAssistant()
    result = await assistant.analyze_text("O cano está quebrado e muito ruim")
    suggestions = assistant.generate_suggestions(result)
    corrected = assistant.apply_corrections("O cano está quebrado e muito ruim", result)
"""

from occurrence_text_assistant.assistant import TextAssistant
from occurrence_text_assistant.config import Settings, get_settings
from occurrence_text_assistant.models_api import (AnalysisContext,
                                                  AnalysisResult,
                                                  RemoteAnalysis)

__all__ = [
    "TextAssistant",
    "Settings",
    "get_settings",
    "AnalysisContext",
    "AnalysisResult",
    "RemoteAnalysis",
]
