"""Value objects for the impact screening engine.

All types here are frozen dataclasses -- immutable, compared by value.
Sequences are stored as tuples.  Types that cross the cache or API boundary
provide ``to_dict()`` (camelCase wire keys) and ``from_dict()``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import FindingStatus

# ---------------------------------------------------------------------------
# AnalysisResult
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisResult:
    """Output of one analyzer call for one dimension.

    ``score`` is in [0, 100]; ``confidence`` is in [0, 1].  The optional
    ``sustainability_score`` is only reported by the NGO impact analyzer.
    """

    score: float
    confidence: float
    recommendations: tuple[str, ...] = ()
    concerns: tuple[str, ...] = ()
    sustainability_score: float | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 100.0:
            raise ValueError(f"score must be in [0, 100], got {self.score}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        if self.sustainability_score is not None and not (
            0.0 <= self.sustainability_score <= 100.0
        ):
            raise ValueError(
                "sustainability_score must be in [0, 100], "
                f"got {self.sustainability_score}"
            )


# ---------------------------------------------------------------------------
# ScreeningResult
# ---------------------------------------------------------------------------

MAX_LIST_ITEMS = 10


@dataclass(frozen=True)
class ScreeningResult:
    """Aggregated screening decision for a project or an NGO.

    Written once per screening and cached by fingerprint.  A re-screen
    produces a new value which replaces the cache entry.
    """

    feasibility_score: float
    impact_score: float
    risk_score: float
    innovation_score: float
    sustainability_score: float
    overall_score: int
    recommendations: tuple[str, ...] = ()
    concerns: tuple[str, ...] = ()
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if not 0 <= self.overall_score <= 100:
            raise ValueError(f"overall_score must be in [0, 100], got {self.overall_score}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        if len(self.recommendations) > MAX_LIST_ITEMS:
            raise ValueError(
                f"at most {MAX_LIST_ITEMS} recommendations allowed, "
                f"got {len(self.recommendations)}"
            )
        if len(self.concerns) > MAX_LIST_ITEMS:
            raise ValueError(
                f"at most {MAX_LIST_ITEMS} concerns allowed, got {len(self.concerns)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "feasibilityScore": self.feasibility_score,
            "impactScore": self.impact_score,
            "riskScore": self.risk_score,
            "innovationScore": self.innovation_score,
            "sustainabilityScore": self.sustainability_score,
            "overallScore": self.overall_score,
            "recommendations": list(self.recommendations),
            "concerns": list(self.concerns),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScreeningResult:
        return cls(
            feasibility_score=data["feasibilityScore"],
            impact_score=data["impactScore"],
            risk_score=data["riskScore"],
            innovation_score=data["innovationScore"],
            sustainability_score=data["sustainabilityScore"],
            overall_score=int(data["overallScore"]),
            recommendations=tuple(data.get("recommendations", ())),
            concerns=tuple(data.get("concerns", ())),
            confidence=data.get("confidence", 0.0),
        )


# ---------------------------------------------------------------------------
# Evidence and milestone verification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EvidenceItem:
    """One piece of milestone evidence supplied by the caller."""

    type: str
    url: str
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("EvidenceItem.url must not be empty")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "url": self.url}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EvidenceItem:
        return cls(
            type=data.get("type", ""),
            url=data.get("url", ""),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class EvidenceRecord:
    """An evidence item paired with its analysis (``None`` on failure)."""

    item: EvidenceItem
    analysis: Mapping[str, Any] | None = None

    @property
    def analyzed(self) -> bool:
        return self.analysis is not None

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["analysis"] = dict(self.analysis) if self.analysis is not None else None
        return data


@dataclass(frozen=True)
class VerificationFinding:
    """Outcome of one verification criterion."""

    criterion: str
    status: FindingStatus
    confidence: float
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterion": self.criterion,
            "status": self.status.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class MilestoneVerificationResult:
    """Verdict produced by the verification adapter.

    ``evidence`` carries the bundle that was sent to the verifier, one
    record per submitted item, so callers can see which items were analysed.
    """

    is_verified: bool
    confidence: float
    findings: tuple[VerificationFinding, ...] = ()
    overall_assessment: str = ""
    review_required: bool = False
    milestone_id: str = ""
    evidence: tuple[EvidenceRecord, ...] = ()

    @property
    def failed_evidence(self) -> tuple[EvidenceRecord, ...]:
        return tuple(r for r in self.evidence if not r.analyzed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "milestoneId": self.milestone_id,
            "isVerified": self.is_verified,
            "confidence": self.confidence,
            "findings": [f.to_dict() for f in self.findings],
            "overallAssessment": self.overall_assessment,
            "reviewRequired": self.review_required,
            "evidence": [r.to_dict() for r in self.evidence],
        }


# ---------------------------------------------------------------------------
# Documents and translation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentAnalysisResult:
    """Authenticity check and data extraction for one document."""

    is_authentic: bool
    confidence: float
    red_flags: tuple[str, ...] = ()
    extracted_data: Mapping[str, Any] = field(default_factory=dict)
    requires_manual_review: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "isAuthentic": self.is_authentic,
            "confidence": self.confidence,
            "redFlags": list(self.red_flags),
            "extractedData": dict(self.extracted_data),
            "requiresManualReview": self.requires_manual_review,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocumentAnalysisResult:
        return cls(
            is_authentic=bool(data["isAuthentic"]),
            confidence=data["confidence"],
            red_flags=tuple(data.get("redFlags", ())),
            extracted_data=dict(data.get("extractedData", {})),
            requires_manual_review=bool(data.get("requiresManualReview", False)),
        )


@dataclass(frozen=True)
class TranslationResult:
    translated_text: str
    source_language: str
    target_language: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "translatedText": self.translated_text,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TranslationResult:
        return cls(
            translated_text=data["translatedText"],
            source_language=data["sourceLanguage"],
            target_language=data["targetLanguage"],
            confidence=data["confidence"],
        )


# ---------------------------------------------------------------------------
# Support bot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SupportBotResponse:
    message: str
    confidence: float
    language: str
    suggested_actions: tuple[str, ...] = ()
    related_questions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "confidence": self.confidence,
            "language": self.language,
            "suggestedActions": list(self.suggested_actions),
            "relatedQuestions": list(self.related_questions),
        }


@dataclass(frozen=True)
class QAPair:
    """A question/answer pair stored in the similarity index."""

    question: str
    answer: str
    language: str = "en"
    confidence: float = 1.0
    created_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SimilarQuestion:
    """A similarity-index match; ``confidence`` is the similarity score."""

    question: str
    answer: str
    confidence: float


# ---------------------------------------------------------------------------
# Cache entry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with an absolute expiry (``None`` = never expires)."""

    key: str
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at
