"""Domain enumerations for the impact screening engine.

These enums capture the fixed vocabularies used across the domain layer:
scoring dimensions, submission kinds, and verification finding statuses.
"""

from enum import Enum


class Dimension(Enum):
    """One independent scoring axis computed by one analyzer."""

    FEASIBILITY = "feasibility"
    IMPACT = "impact"
    RISK = "risk"  # lower is better
    INNOVATION = "innovation"
    SUSTAINABILITY = "sustainability"
    CREDIBILITY = "credibility"
    COMPLIANCE = "compliance"


class EntityType(Enum):
    """Kind of submission being screened."""

    PROJECT = "project"
    NGO = "ngo"


class FindingStatus(Enum):
    """Outcome of a single milestone verification criterion."""

    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"


PROJECT_DIMENSIONS: tuple[Dimension, ...] = (
    Dimension.FEASIBILITY,
    Dimension.IMPACT,
    Dimension.RISK,
    Dimension.INNOVATION,
    Dimension.SUSTAINABILITY,
)

NGO_DIMENSIONS: tuple[Dimension, ...] = (
    Dimension.CREDIBILITY,
    Dimension.IMPACT,
    Dimension.COMPLIANCE,
)

VERIFICATION_CRITERIA: tuple[str, ...] = (
    "completeness",
    "authenticity",
    "relevance",
    "quality",
)
