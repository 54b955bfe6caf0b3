"""Tests for the hashed bag-of-words similarity index."""

from __future__ import annotations

import numpy as np
import pytest

from impact_screening.domain.values import QAPair
from impact_screening.infrastructure.similarity import InMemorySimilarityIndex, embed


class TestEmbed:

    def test_normalised(self) -> None:
        vec = embed("How do I donate to a project?")
        assert np.linalg.norm(vec) == pytest.approx(1.0)

    def test_deterministic_and_case_insensitive(self) -> None:
        assert np.array_equal(embed("Donate Now"), embed("donate now"))

    def test_empty_text_is_zero(self) -> None:
        assert not embed("").any()


class TestInMemorySimilarityIndex:

    @pytest.mark.asyncio
    async def test_exact_question_matches_with_full_confidence(self) -> None:
        index = InMemorySimilarityIndex()
        await index.add(QAPair("How do I donate?", "Use the Donate button.", "en"))

        matches = await index.search("how do I donate", "en")
        assert len(matches) == 1
        assert matches[0].answer == "Use the Donate button."
        assert matches[0].confidence == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_partitioned_by_language(self) -> None:
        index = InMemorySimilarityIndex()
        await index.add(QAPair("How do I donate?", "Use the Donate button.", "en"))
        assert await index.search("How do I donate?", "fr") == []

    @pytest.mark.asyncio
    async def test_ranked_most_similar_first(self) -> None:
        index = InMemorySimilarityIndex()
        await index.add(QAPair("withdraw funds from my wallet", "A", "en"))
        await index.add(QAPair("how do I withdraw funds", "B", "en"))
        await index.add(QAPair("reset my password", "C", "en"))

        matches = await index.search("how do I withdraw funds", "en", limit=4)
        assert matches[0].answer == "B"
        assert [m.answer for m in matches][:2] == ["B", "A"]
        assert all(
            a.confidence >= b.confidence for a, b in zip(matches, matches[1:])
        )

    @pytest.mark.asyncio
    async def test_unrelated_questions_filtered_by_min_similarity(self) -> None:
        index = InMemorySimilarityIndex(min_similarity=0.5)
        await index.add(QAPair("reset my password", "C", "en"))
        assert await index.search("solar panels for schools", "en") == []

    @pytest.mark.asyncio
    async def test_same_question_replaces_answer(self) -> None:
        index = InMemorySimilarityIndex()
        await index.add(QAPair("How do I donate?", "old", "en"))
        await index.add(QAPair("how do i donate", "new", "en"))
        assert len(index) == 1
        matches = await index.search("How do I donate?", "en")
        assert matches[0].answer == "new"

    def test_invalid_dimensions(self) -> None:
        with pytest.raises(ValueError):
            InMemorySimilarityIndex(dimensions=0)
