"""Tests for submission entities and their fingerprints."""

from __future__ import annotations

import hashlib

import pytest

from impact_screening.domain.entities import (
    FundingGoal,
    NGOSubmission,
    ProjectSubmission,
    format_number,
)
from impact_screening.domain.enums import EntityType
from impact_screening.infrastructure.fingerprint import fingerprint


class TestFormatNumber:

    @pytest.mark.parametrize(
        "value, expected",
        [(5000, "5000"), (5000.0, "5000"), (0.5, "0.5"), (1234.25, "1234.25")],
    )
    def test_renders_like_json(self, value: float, expected: str) -> None:
        assert format_number(value) == expected


class TestProjectSubmission:

    def test_requires_title(self) -> None:
        with pytest.raises(ValueError, match="title"):
            ProjectSubmission(
                title="", description="d", project_type="t", funding_goal=FundingGoal(1)
            )

    def test_negative_funding_rejected(self) -> None:
        with pytest.raises(ValueError, match="funding"):
            FundingGoal(amount=-1)

    def test_entity_type(self, sample_project: ProjectSubmission) -> None:
        assert sample_project.entity_type is EntityType.PROJECT

    def test_fingerprint_source(self, sample_project: ProjectSubmission) -> None:
        assert sample_project.fingerprint_source() == (
            "Clean Water Wells:Drill three wells in rural Kisumu:5000:infrastructure"
        )

    def test_fingerprint_is_md5_of_source(self, sample_project: ProjectSubmission) -> None:
        expected = hashlib.md5(sample_project.fingerprint_source().encode()).hexdigest()
        assert fingerprint(sample_project) == expected

    def test_fingerprint_ignores_non_canonical_fields(
        self, sample_project: ProjectSubmission
    ) -> None:
        other = ProjectSubmission(
            title=sample_project.title,
            description=sample_project.description,
            project_type=sample_project.project_type,
            funding_goal=FundingGoal(amount=5000.0, currency="EUR"),
            category="different",
        )
        assert fingerprint(other) == fingerprint(sample_project)

    def test_fingerprint_changes_with_amount(self, sample_project: ProjectSubmission) -> None:
        other = ProjectSubmission(
            title=sample_project.title,
            description=sample_project.description,
            project_type=sample_project.project_type,
            funding_goal=FundingGoal(amount=5001),
        )
        assert fingerprint(other) != fingerprint(sample_project)

    def test_payload_lists_document_type_and_name_only(
        self, sample_project: ProjectSubmission
    ) -> None:
        payload = sample_project.to_payload()
        assert payload["documents"] == [{"type": "budget", "name": "budget.pdf"}]
        assert payload["fundingGoal"] == {"amount": 5000, "currency": "USD"}
        assert payload["type"] == "infrastructure"

    def test_from_dict(self) -> None:
        project = ProjectSubmission.from_dict(
            {
                "_id": "abc",
                "title": "Solar School",
                "description": "Panels for a school",
                "type": "energy",
                "fundingGoal": {"amount": 12000, "currency": "KES"},
                "impactGoals": ["200 pupils"],
                "documents": [{"type": "plan", "name": "plan.pdf", "url": "ignored"}],
            }
        )
        assert project.submission_id == "abc"
        assert project.funding_goal.currency == "KES"
        assert project.impact_goals == ("200 pupils",)
        assert project.documents[0].name == "plan.pdf"

    def test_from_dict_accepts_numeric_funding_goal(self) -> None:
        project = ProjectSubmission.from_dict(
            {"title": "T", "description": "D", "type": "x", "fundingGoal": 300}
        )
        assert project.funding_goal.amount == 300


class TestNGOSubmission:

    def test_requires_name(self) -> None:
        with pytest.raises(ValueError, match="name"):
            NGOSubmission(name="", mission="m", registration_number="r")

    def test_fingerprint_source(self, sample_ngo: NGOSubmission) -> None:
        assert sample_ngo.fingerprint_source() == (
            "Water For All:REG-123:Clean water for every village"
        )

    def test_payload_lists_document_types_only(self, sample_ngo: NGOSubmission) -> None:
        payload = sample_ngo.to_payload()
        assert payload["verificationDocuments"] == [{"type": "certificate"}]
        assert "registrationNumber" not in payload

    def test_from_dict(self) -> None:
        ngo = NGOSubmission.from_dict(
            {
                "name": "Helping Hands",
                "mission": "Food security",
                "registrationNumber": 42,
                "verificationDocuments": [{"type": "tax"}],
            }
        )
        assert ngo.registration_number == "42"
        assert ngo.entity_type is EntityType.NGO
        assert ngo.verification_documents[0].type == "tax"
