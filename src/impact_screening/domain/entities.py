"""Submission entities for the impact screening engine.

``ProjectSubmission`` and ``NGOSubmission`` hold the canonical fields the API
layer passes in.  They never carry raw document bytes -- only document
types and names.  Each entity knows:

* ``from_dict`` -- build from the camelCase API shape,
* ``to_payload`` -- the projection sent to analyzers,
* ``fingerprint_source`` -- the stable string hashed into the cache key.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import EntityType


def format_number(value: float | int) -> str:
    """Render a number the way a JSON serializer prints it (``5000``, ``0.5``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class DocumentRef:
    """Reference to a submitted document: its type and, optionally, name."""

    type: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocumentRef:
        return cls(type=data.get("type", ""), name=data.get("name", ""))


@dataclass(frozen=True)
class FundingGoal:
    amount: float
    currency: str = "USD"

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"funding amount must be >= 0, got {self.amount}")


# ---------------------------------------------------------------------------
# ProjectSubmission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectSubmission:
    """A project submitted for screening."""

    title: str
    description: str
    project_type: str
    funding_goal: FundingGoal
    category: str = ""
    deadline: str | None = None
    location: Mapping[str, Any] = field(default_factory=dict)
    milestones: tuple[Mapping[str, Any], ...] = ()
    impact_goals: tuple[str, ...] = ()
    documents: tuple[DocumentRef, ...] = ()
    submission_id: str = ""

    entity_type = EntityType.PROJECT

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("ProjectSubmission.title must not be empty")

    def fingerprint_source(self) -> str:
        return (
            f"{self.title}:{self.description}:"
            f"{format_number(self.funding_goal.amount)}:{self.project_type}"
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "type": self.project_type,
            "fundingGoal": {
                "amount": self.funding_goal.amount,
                "currency": self.funding_goal.currency,
            },
            "deadline": self.deadline,
            "location": dict(self.location),
            "milestones": [dict(m) for m in self.milestones],
            "impactGoals": list(self.impact_goals),
            "documents": [{"type": d.type, "name": d.name} for d in self.documents],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProjectSubmission:
        goal = data.get("fundingGoal") or {}
        if isinstance(goal, Mapping):
            funding_goal = FundingGoal(
                amount=goal.get("amount", 0),
                currency=goal.get("currency", "USD"),
            )
        else:
            funding_goal = FundingGoal(amount=goal)
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            project_type=data.get("type", ""),
            funding_goal=funding_goal,
            category=data.get("category", ""),
            deadline=data.get("deadline"),
            location=dict(data.get("location") or {}),
            milestones=tuple(data.get("milestones") or ()),
            impact_goals=tuple(data.get("impactGoals") or ()),
            documents=tuple(DocumentRef.from_dict(d) for d in data.get("documents") or ()),
            submission_id=str(data.get("id") or data.get("_id") or ""),
        )


# ---------------------------------------------------------------------------
# NGOSubmission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NGOSubmission:
    """An NGO submitted for screening."""

    name: str
    mission: str
    registration_number: str
    description: str = ""
    categories: tuple[str, ...] = ()
    registration_country: str = ""
    registration_date: str | None = None
    impact_metrics: Mapping[str, Any] = field(default_factory=dict)
    verification_documents: tuple[DocumentRef, ...] = ()
    submission_id: str = ""

    entity_type = EntityType.NGO

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("NGOSubmission.name must not be empty")

    def fingerprint_source(self) -> str:
        return f"{self.name}:{self.registration_number}:{self.mission}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "mission": self.mission,
            "categories": list(self.categories),
            "registrationCountry": self.registration_country,
            "registrationDate": self.registration_date,
            "impactMetrics": dict(self.impact_metrics),
            "verificationDocuments": [
                {"type": d.type} for d in self.verification_documents
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NGOSubmission:
        return cls(
            name=data.get("name", ""),
            mission=data.get("mission", ""),
            registration_number=str(data.get("registrationNumber", "")),
            description=data.get("description", ""),
            categories=tuple(data.get("categories") or ()),
            registration_country=data.get("registrationCountry", ""),
            registration_date=data.get("registrationDate"),
            impact_metrics=dict(data.get("impactMetrics") or {}),
            verification_documents=tuple(
                DocumentRef.from_dict(d) for d in data.get("verificationDocuments") or ()
            ),
            submission_id=str(data.get("id") or data.get("_id") or ""),
        )
