"""Domain events for the impact screening engine.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  The
orchestrators publish them on an optional ``EventBus`` so that the API layer
(audit logging, notifications, metrics) can react without the engine
knowing about it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .enums import EntityType

# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: float = field(default_factory=time.time)
    source_id: str = ""


# ---------------------------------------------------------------------------
# Screening events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScreeningCompleted(DomainEvent):
    """A screening was computed and written to the cache."""

    fingerprint: str = ""
    entity_type: EntityType | None = None
    overall_score: int = 0
    confidence: float = 0.0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class ScreeningCacheHit(DomainEvent):
    """A screening was served from the fingerprint cache."""

    fingerprint: str = ""
    entity_type: EntityType | None = None


# ---------------------------------------------------------------------------
# Milestone and support events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MilestoneVerified(DomainEvent):
    """A milestone verification verdict was produced."""

    milestone_id: str = ""
    is_verified: bool = False
    review_required: bool = False
    evidence_total: int = 0
    evidence_failed: int = 0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class SupportFallbackUsed(DomainEvent):
    """The support bot answered with the fixed fallback message."""

    language: str = ""
    reason: str = ""
