"""Pydantic schemas for remote adapter responses.

Each schema maps one endpoint's snake_case JSON body into the engine's
domain values.  Absent optional collections default to empty and absent
optional booleans default to ``False``; those defaults are the leniency
policy for partially-filled model output and are declared explicitly here
rather than coalesced ad hoc in the adapters.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from impact_screening.domain.enums import FindingStatus
from impact_screening.domain.values import (
    AnalysisResult,
    DocumentAnalysisResult,
    SupportBotResponse,
    VerificationFinding,
)


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AnalysisResponse(_Lenient):
    """Body returned by ``POST /analyze-{dimension}``."""

    score: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=1)
    recommendations: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    sustainability_score: float | None = Field(default=None, ge=0, le=100)

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            score=self.score,
            confidence=self.confidence,
            recommendations=tuple(self.recommendations),
            concerns=tuple(self.concerns),
            sustainability_score=self.sustainability_score,
        )


class FindingResponse(_Lenient):
    criterion: str
    status: FindingStatus
    confidence: float = Field(default=0.0, ge=0, le=1)
    explanation: str = ""

    def to_finding(self) -> VerificationFinding:
        return VerificationFinding(
            criterion=self.criterion,
            status=self.status,
            confidence=self.confidence,
            explanation=self.explanation,
        )


class VerificationResponse(_Lenient):
    """Body returned by ``POST /verify-milestone``."""

    is_verified: bool
    confidence: float = Field(ge=0, le=1)
    findings: list[FindingResponse] = Field(default_factory=list)
    overall_assessment: str = ""
    review_required: bool = False


class DocumentAnalysisResponse(_Lenient):
    """Body returned by ``POST /analyze-document``."""

    is_authentic: bool
    confidence: float = Field(ge=0, le=1)
    red_flags: list[str] = Field(default_factory=list)
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    requires_manual_review: bool = False

    def to_result(self) -> DocumentAnalysisResult:
        return DocumentAnalysisResult(
            is_authentic=self.is_authentic,
            confidence=self.confidence,
            red_flags=tuple(self.red_flags),
            extracted_data=dict(self.extracted_data),
            requires_manual_review=self.requires_manual_review,
        )


class SupportChatResponse(_Lenient):
    """Body returned by ``POST /support-chat``."""

    message: str
    confidence: float = Field(ge=0, le=1)
    suggested_actions: list[str] = Field(default_factory=list)
    related_questions: list[str] = Field(default_factory=list)

    def to_response(self, language: str) -> SupportBotResponse:
        return SupportBotResponse(
            message=self.message,
            confidence=self.confidence,
            language=language,
            suggested_actions=tuple(self.suggested_actions),
            related_questions=tuple(self.related_questions),
        )


class TranslationResponse(_Lenient):
    """Body returned by ``POST /translate``."""

    translated_text: str
    confidence: float = Field(ge=0, le=1)
    detected_language: str | None = None
