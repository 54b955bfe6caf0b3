"""Domain layer: value objects, submission entities, events and exceptions."""

from impact_screening.domain.entities import (
    DocumentRef,
    FundingGoal,
    NGOSubmission,
    ProjectSubmission,
)
from impact_screening.domain.enums import (
    NGO_DIMENSIONS,
    PROJECT_DIMENSIONS,
    VERIFICATION_CRITERIA,
    Dimension,
    EntityType,
    FindingStatus,
)
from impact_screening.domain.values import (
    AnalysisResult,
    CacheEntry,
    DocumentAnalysisResult,
    EvidenceItem,
    EvidenceRecord,
    MilestoneVerificationResult,
    QAPair,
    ScreeningResult,
    SimilarQuestion,
    SupportBotResponse,
    TranslationResult,
    VerificationFinding,
)

__all__ = [
    # Entities
    "DocumentRef",
    "FundingGoal",
    "NGOSubmission",
    "ProjectSubmission",
    # Enums
    "Dimension",
    "EntityType",
    "FindingStatus",
    "NGO_DIMENSIONS",
    "PROJECT_DIMENSIONS",
    "VERIFICATION_CRITERIA",
    # Values
    "AnalysisResult",
    "CacheEntry",
    "DocumentAnalysisResult",
    "EvidenceItem",
    "EvidenceRecord",
    "MilestoneVerificationResult",
    "QAPair",
    "ScreeningResult",
    "SimilarQuestion",
    "SupportBotResponse",
    "TranslationResult",
    "VerificationFinding",
]
