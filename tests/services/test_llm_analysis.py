"""Tests for LLMAnalyzer with a mocked chat model."""

from __future__ import annotations

import pytest

from impact_screening.domain.enums import Dimension
from impact_screening.domain.exceptions import AdapterUnavailableError
from impact_screening.domain.values import AnalysisResult
from impact_screening.services.llm_analysis import RUBRICS, AnalysisOutput, LLMAnalyzer
from impact_screening.testing import MockStructuredChatModel


def _make_model(*outputs) -> MockStructuredChatModel:
    return MockStructuredChatModel(structured_responses=list(outputs))


class TestLLMAnalyzer:

    @pytest.mark.asyncio
    async def test_analyze_returns_result(self) -> None:
        model = _make_model(
            AnalysisOutput(
                score=82,
                confidence=0.9,
                recommendations=["Publish a maintenance plan"],
                concerns=["Single contractor"],
            )
        )
        analyzer = LLMAnalyzer(Dimension.FEASIBILITY, model)

        result = await analyzer.analyze({"title": "Clean Water Wells", "entityType": "project"})

        assert isinstance(result, AnalysisResult)
        assert result.score == pytest.approx(82)
        assert result.recommendations == ("Publish a maintenance plan",)
        assert result.concerns == ("Single contractor",)

    @pytest.mark.asyncio
    async def test_prompt_names_dimension_and_submission(self) -> None:
        model = _make_model(AnalysisOutput(score=50, confidence=0.5))
        analyzer = LLMAnalyzer(Dimension.COMPLIANCE, model)

        await analyzer.analyze({"name": "Water For All", "entityType": "ngo"})

        prompt = model.prompts[0].to_string()
        assert "compliance" in prompt
        assert "ngo submissions" in prompt
        assert "Water For All" in prompt
        assert RUBRICS[Dimension.COMPLIANCE] in prompt
        assert "entityType" not in prompt

    @pytest.mark.asyncio
    async def test_mapping_output_is_validated(self) -> None:
        model = _make_model({"score": 65, "confidence": 0.7, "sustainability_score": 60})
        result = await LLMAnalyzer(Dimension.IMPACT, model).analyze({})
        assert result.sustainability_score == 60
        assert result.concerns == ()

    @pytest.mark.asyncio
    async def test_model_error_becomes_adapter_error(self) -> None:
        model = _make_model(RuntimeError("rate limited"))
        with pytest.raises(AdapterUnavailableError) as exc_info:
            await LLMAnalyzer(Dimension.RISK, model).analyze({})
        assert exc_info.value.adapter == "risk"

    @pytest.mark.asyncio
    async def test_invalid_output_becomes_adapter_error(self) -> None:
        model = _make_model({"score": 250, "confidence": 0.7})
        with pytest.raises(AdapterUnavailableError, match="innovation"):
            await LLMAnalyzer(Dimension.INNOVATION, model).analyze({})

    def test_every_dimension_has_a_rubric(self) -> None:
        assert set(RUBRICS) == set(Dimension)
