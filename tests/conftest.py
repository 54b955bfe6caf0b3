"""Shared fixtures for the impact screening test suite."""

from __future__ import annotations

import pytest

from impact_screening.domain.entities import (
    DocumentRef,
    FundingGoal,
    NGOSubmission,
    ProjectSubmission,
)
from impact_screening.domain.enums import Dimension
from impact_screening.domain.values import AnalysisResult, EvidenceItem
from impact_screening.infrastructure.cache import InMemoryFingerprintCache
from impact_screening.infrastructure.event_bus import EventBus, EventStore

# ---------------------------------------------------------------------------
# Submission fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_project() -> ProjectSubmission:
    """A small water project asking for 5000 USD."""
    return ProjectSubmission(
        title="Clean Water Wells",
        description="Drill three wells in rural Kisumu",
        project_type="infrastructure",
        funding_goal=FundingGoal(amount=5000, currency="USD"),
        category="water",
        location={"country": "KE", "city": "Kisumu"},
        impact_goals=("1500 people with clean water",),
        documents=(DocumentRef(type="budget", name="budget.pdf"),),
        submission_id="p-1",
    )


@pytest.fixture
def sample_ngo() -> NGOSubmission:
    return NGOSubmission(
        name="Water For All",
        mission="Clean water for every village",
        registration_number="REG-123",
        description="Community water NGO",
        categories=("water", "health"),
        registration_country="KE",
        verification_documents=(DocumentRef(type="certificate"),),
        submission_id="n-1",
    )


@pytest.fixture
def sample_evidence() -> list[EvidenceItem]:
    return [
        EvidenceItem(type="image", url="https://files.example/1.jpg"),
        EvidenceItem(type="receipt", url="https://files.example/2.pdf", description="invoice"),
        EvidenceItem(type="report", url="https://files.example/3.pdf"),
    ]


# ---------------------------------------------------------------------------
# Analysis fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_results() -> dict[Dimension, AnalysisResult]:
    """Per-dimension results whose confidences average to 0.78."""
    return {
        Dimension.FEASIBILITY: AnalysisResult(
            score=80, confidence=0.8, recommendations=("Add a timeline",), concerns=("Tight budget",)
        ),
        Dimension.IMPACT: AnalysisResult(
            score=70, confidence=0.75, recommendations=("Track beneficiaries",)
        ),
        Dimension.RISK: AnalysisResult(score=20, confidence=0.85, concerns=("Drought season",)),
        Dimension.INNOVATION: AnalysisResult(
            score=60, confidence=0.7, recommendations=("Use solar pumps",)
        ),
        Dimension.SUSTAINABILITY: AnalysisResult(
            score=90, confidence=0.8, recommendations=("Train local technicians",)
        ),
    }


@pytest.fixture
def ngo_results() -> dict[Dimension, AnalysisResult]:
    return {
        Dimension.CREDIBILITY: AnalysisResult(
            score=80, confidence=0.9, recommendations=("Publish audits",), concerns=("New org",)
        ),
        Dimension.IMPACT: AnalysisResult(
            score=70,
            confidence=0.8,
            recommendations=("Report outcomes",),
            concerns=("Unclear metrics",),
            sustainability_score=65,
        ),
        Dimension.COMPLIANCE: AnalysisResult(
            score=90, confidence=0.7, concerns=("Late filing in 2023",)
        ),
    }


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> InMemoryFingerprintCache:
    return InMemoryFingerprintCache(clock=clock)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def event_store(event_bus: EventBus) -> EventStore:
    store = EventStore()
    event_bus.subscribe_all(store.append)
    return store
