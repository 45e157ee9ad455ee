"""Data models for analysis results and LLM interactions.

This module defines Pydantic models for the value objects produced by the
local analyzers, the remote augmentation step and the aggregate analysis
result. Models serialize to camelCase for consumers outside Python.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class IssueKind(str, Enum):
    LENGTH = "length"
    PUNCTUATION = "punctuation"
    VAGUE = "vague"
    REPETITION = "repetition"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisOrigin(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback"


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SpellingCorrection(CamelModel):
    """A dictionary hit for a known misspelling or imprecise term."""

    original: str
    suggestion: str
    position: int = Field(ge=0)
    kind: Literal["spelling"] = "spelling"


class PatternMatch(CamelModel):
    """A rewrite rule that matched the original text."""

    rationale: str
    pattern_id: str
    kind: Literal["technical"] = "technical"


class TechnicalAnalysis(CamelModel):
    """Output of the pattern rewriter."""

    corrected_text: str
    matches: list[PatternMatch] = Field(default_factory=list)


class ClarityIssue(CamelModel):
    """A structural clarity problem detected without the LLM."""

    kind: IssueKind
    severity: Severity
    message: str
    rationale: str


class RemoteAnalysis(CamelModel):
    """Result of the remote augmentation step, real or fallback."""

    origin: AnalysisOrigin
    corrections: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    improved_text: str = ""
    score: float | None = Field(None, ge=1.0, le=10.0)
    succeeded: bool = False


class AnalysisContext(CamelModel):
    """Optional context passed along with the text to analyze."""

    occurrence_type: str | None = None


class AnalysisResult(CamelModel):
    """Aggregate result of one analysis call."""

    spelling: list[SpellingCorrection] = Field(default_factory=list)
    technical: TechnicalAnalysis
    clarity: list[ClarityIssue] = Field(default_factory=list)
    remote: RemoteAnalysis | None = None
    used_remote: bool = False
    overall_score: float = Field(ge=1.0, le=10.0)


class LLMAnalysisResponseSchema(BaseModel):
    """Schema for the JSON object embedded in the LLM reply.

    Missing fields fall back to empty values and a score of 7.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    corrections: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    improved_text: str = Field("", alias="improvedText")
    score: float = Field(7.0, ge=1.0, le=10.0)

    @field_validator("corrections", "suggestions", mode="before")
    @classmethod
    def null_list_to_empty(cls, v: object) -> object:
        return [] if v is None else v

    @field_validator("improved_text", mode="before")
    @classmethod
    def null_text_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("score", mode="before")
    @classmethod
    def normalize_score(cls, v: object) -> object:
        # A missing or zero score means "no opinion"; numbers are clamped to 1-10
        if v is None or v == 0 or v == "":
            return 7.0
        if isinstance(v, (int, float)):
            try:
                return min(10.0, max(1.0, float(v)))
            except OverflowError as e:
                raise ValueError("score is not a representable number") from e
        return v
