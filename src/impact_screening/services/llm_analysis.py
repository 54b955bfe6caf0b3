"""LLM-based dimension analysis using LangChain structured output.

An alternative to :class:`RemoteAnalyzer` for deployments that talk to a
chat model directly.  Uses ``model.with_structured_output()`` for reliable
parsing of the model's assessment into an :class:`AnalysisResult`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from impact_screening.domain.enums import Dimension, EntityType
from impact_screening.domain.exceptions import AdapterUnavailableError
from impact_screening.domain.values import AnalysisResult
from impact_screening.services.analyzers import BaseAnalyzer

logger = logging.getLogger(__name__)

# -- Structured output schema ------------------------------------------------


class AnalysisOutput(BaseModel):
    """Structured output schema for one dimension."""

    score: float = Field(ge=0, le=100, description="Dimension score [0, 100]")
    confidence: float = Field(ge=0, le=1, description="Confidence in the score [0, 1]")
    recommendations: list[str] = Field(
        default_factory=list, description="Concrete improvements, most important first"
    )
    concerns: list[str] = Field(
        default_factory=list, description="Problems found, most serious first"
    )
    sustainability_score: float | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Long-term sustainability of the impact [0, 100], impact dimension only",
    )


# -- Rubrics -----------------------------------------------------------------

RUBRICS: dict[Dimension, str] = {
    Dimension.FEASIBILITY: (
        "Can the project be delivered with the stated budget, timeline and "
        "milestones? Penalise vague plans and unrealistic funding goals."
    ),
    Dimension.IMPACT: (
        "How large, measurable and durable is the social or environmental "
        "benefit? Also report a sustainability_score for how long the impact lasts."
    ),
    Dimension.RISK: (
        "How likely is failure, fraud or harm? A HIGHER score means MORE risk. "
        "List every risk you find as a concern."
    ),
    Dimension.INNOVATION: (
        "How novel is the approach compared with existing initiatives in the "
        "same category and region?"
    ),
    Dimension.SUSTAINABILITY: (
        "Will the outcomes persist after funding ends? Consider maintenance, "
        "local ownership and revenue models."
    ),
    Dimension.CREDIBILITY: (
        "Is the organisation real and trustworthy? Check registration details, "
        "history and the consistency of its mission and documents."
    ),
    Dimension.COMPLIANCE: (
        "Does the organisation meet legal and regulatory expectations for its "
        "registration country? A HIGHER score means MORE compliant."
    ),
}

_ANALYSIS_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a due-diligence analyst screening {entity_type} submissions "
            "for a charitable funding platform. Score ONE dimension only.\n\n"
            "Dimension: {dimension}\n"
            "Rubric: {rubric}\n\n"
            "Scoring guide:\n"
            "  100 = exceptional\n"
            "   50 = adequate\n"
            "    0 = unacceptable\n\n"
            "Keep recommendations and concerns short and actionable.",
        ),
        (
            "human",
            "## Submission\n{submission}\n\n"
            "Score the submission on the {dimension} dimension.",
        ),
    ]
)


# -- LLMAnalyzer -------------------------------------------------------------


class LLMAnalyzer(BaseAnalyzer):
    """Dimension analyzer backed by a LangChain chat model.

    Parameters
    ----------
    dimension:
        The dimension to score.
    model:
        A LangChain chat model supporting ``with_structured_output``.
    prompt:
        Optional custom ``ChatPromptTemplate``.  Receives ``entity_type``,
        ``dimension``, ``rubric`` and ``submission``.
    """

    def __init__(
        self,
        dimension: Dimension,
        model: BaseChatModel,
        prompt: ChatPromptTemplate | None = None,
    ) -> None:
        super().__init__(dimension)
        self.model = model
        self._prompt = prompt or _ANALYSIS_PROMPT
        self._chain = self._build_chain()

    def _build_chain(self) -> Any:
        structured_model = self.model.with_structured_output(AnalysisOutput)
        return self._prompt | structured_model

    async def analyze(self, entity_data: Mapping[str, Any]) -> AnalysisResult:
        """Score *entity_data* with the chat model.

        Raises
        ------
        AdapterUnavailableError
            If the model call fails or its output does not fit the schema.
        """
        data = dict(entity_data)
        entity_type = data.pop("entityType", EntityType.PROJECT.value)
        try:
            output = await self._chain.ainvoke(
                {
                    "entity_type": entity_type,
                    "dimension": self.dimension.value,
                    "rubric": RUBRICS.get(self.dimension, ""),
                    "submission": json.dumps(data, indent=2, default=str),
                }
            )
            if isinstance(output, Mapping):
                output = AnalysisOutput.model_validate(output)
        except Exception as exc:
            logger.warning("%s: analysis failed: %s", self.name, exc)
            raise AdapterUnavailableError(
                f"LLM {self.dimension.value} analysis failed: {exc}",
                adapter=self.dimension.value,
            ) from exc

        return AnalysisResult(
            score=output.score,
            confidence=output.confidence,
            recommendations=tuple(output.recommendations),
            concerns=tuple(output.concerns),
            sustainability_score=output.sustainability_score,
        )
