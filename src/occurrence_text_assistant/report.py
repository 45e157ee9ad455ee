"""Hand-off of analyzed occurrence reports to the document renderer.

The renderer receives plain data: the form fields with the (optionally)
corrected description, the analysis result and the consolidated suggestions.
"""

from pydantic import BaseModel, ConfigDict, Field

from occurrence_text_assistant.assistant import TextAssistant
from occurrence_text_assistant.models_api import (AnalysisContext,
                                                  AnalysisResult, CamelModel)


class OccurrenceReport(BaseModel):
    """Form fields of an occurrence report, keyed as the form submits them."""

    model_config = ConfigDict(extra="ignore")

    reference: str = ""
    tipo: str = ""
    bloco: str = ""
    pavimento: str = ""
    local: str = ""
    descricao: str = ""
    acao: str = ""
    prioridade: str = ""
    prazo: str = ""
    responsavel: str = ""


class ReportSubmission(CamelModel):
    """What the rendering collaborator receives."""

    report: OccurrenceReport
    original_description: str
    corrected_description: str
    corrections_applied: bool
    suggestions: list[str] = Field(default_factory=list)
    analysis: AnalysisResult


async def prepare_report(
    report: OccurrenceReport,
    assistant: TextAssistant,
    apply: bool = True,
) -> ReportSubmission:
    """Analyze the report description and bundle the result for rendering.

    Args:
        report: The submitted form.
        assistant: Assistant used for the analysis.
        apply: Replace the description with the corrected text when True.
    """
    context = AnalysisContext(occurrence_type=report.tipo or None)
    analysis = await assistant.analyze_text(report.descricao, context)
    corrected = assistant.apply_corrections(report.descricao, analysis)

    rendered_report = report
    if apply:
        rendered_report = report.model_copy(update={"descricao": corrected})

    return ReportSubmission(
        report=rendered_report,
        original_description=report.descricao,
        corrected_description=corrected,
        corrections_applied=apply and corrected != report.descricao,
        suggestions=assistant.generate_suggestions(analysis),
        analysis=analysis,
    )
