"""Scoring and confidence aggregation.

Combines per-dimension :class:`AnalysisResult` values into one
:class:`ScreeningResult` using entity-type-specific weights.

Project formula (risk is inverted because a *lower* risk score is better)::

    overall = clamp(round(f*0.25 + i*0.25 + inn*0.20 + s*0.20 + (100 - r)*0.10), 0, 100)

NGO formula (no risk term, no clamp beyond the natural range)::

    overall = round(cred*0.40 + impact*0.35 + compliance*0.25)

Rounding is half-up, as in the platform's original scoring.  The weighted
sums are evaluated left to right in the order shown so that ties at ``.5``
round identically everywhere.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from impact_screening.domain.enums import NGO_DIMENSIONS, PROJECT_DIMENSIONS, Dimension
from impact_screening.domain.values import MAX_LIST_ITEMS, AnalysisResult, ScreeningResult


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))


def mean_confidence(confidences: Sequence[float]) -> float:
    """Arithmetic mean of per-dimension confidences."""
    if not confidences:
        raise ValueError("mean_confidence requires at least one confidence")
    return sum(confidences) / len(confidences)


def merge_limited(*lists: Iterable[str], limit: int = MAX_LIST_ITEMS) -> tuple[str, ...]:
    """Concatenate *lists* in priority order and keep the first *limit* items.

    Insertion order is preserved; nothing is sorted or de-duplicated.
    """
    merged: list[str] = []
    for items in lists:
        merged.extend(items)
    return tuple(merged[:limit])


# ===================================================================== #
#  Weights                                                               #
# ===================================================================== #


@dataclass(frozen=True)
class ProjectWeights:
    feasibility: float = 0.25
    impact: float = 0.25
    innovation: float = 0.20
    sustainability: float = 0.20
    risk: float = 0.10  # applied to (100 - risk)


@dataclass(frozen=True)
class NGOWeights:
    credibility: float = 0.40
    impact: float = 0.35
    compliance: float = 0.25


# ===================================================================== #
#  Scoring Aggregator                                                    #
# ===================================================================== #


class ScoringAggregator:
    """Builds a :class:`ScreeningResult` from a fixed set of dimension results.

    Parameters
    ----------
    project_weights:
        Weights for the five project dimensions.
    ngo_weights:
        Weights for the three NGO dimensions.
    """

    def __init__(
        self,
        project_weights: ProjectWeights | None = None,
        ngo_weights: NGOWeights | None = None,
    ) -> None:
        self.project_weights = project_weights or ProjectWeights()
        self.ngo_weights = ngo_weights or NGOWeights()

    # -- scores ------------------------------------------------------------

    def project_overall_score(
        self,
        feasibility: float,
        impact: float,
        risk: float,
        innovation: float,
        sustainability: float,
    ) -> int:
        w = self.project_weights
        weighted = (
            feasibility * w.feasibility
            + impact * w.impact
            + innovation * w.innovation
            + sustainability * w.sustainability
            + (100 - risk) * w.risk
        )
        return clamp(round_half_up(weighted))

    def ngo_overall_score(self, credibility: float, impact: float, compliance: float) -> int:
        w = self.ngo_weights
        return round_half_up(
            credibility * w.credibility + impact * w.impact + compliance * w.compliance
        )

    # -- full results ------------------------------------------------------

    def aggregate_project(self, results: Mapping[Dimension, AnalysisResult]) -> ScreeningResult:
        _require(results, PROJECT_DIMENSIONS)
        feasibility = results[Dimension.FEASIBILITY]
        impact = results[Dimension.IMPACT]
        risk = results[Dimension.RISK]
        innovation = results[Dimension.INNOVATION]
        sustainability = results[Dimension.SUSTAINABILITY]

        return ScreeningResult(
            feasibility_score=feasibility.score,
            impact_score=impact.score,
            risk_score=risk.score,
            innovation_score=innovation.score,
            sustainability_score=sustainability.score,
            overall_score=self.project_overall_score(
                feasibility=feasibility.score,
                impact=impact.score,
                risk=risk.score,
                innovation=innovation.score,
                sustainability=sustainability.score,
            ),
            # risk contributes concerns only
            recommendations=merge_limited(
                feasibility.recommendations,
                impact.recommendations,
                innovation.recommendations,
                sustainability.recommendations,
            ),
            concerns=merge_limited(
                risk.concerns,
                feasibility.concerns,
                impact.concerns,
            ),
            confidence=mean_confidence(
                [r.confidence for r in (feasibility, impact, risk, innovation, sustainability)]
            ),
        )

    def aggregate_ngo(self, results: Mapping[Dimension, AnalysisResult]) -> ScreeningResult:
        _require(results, NGO_DIMENSIONS)
        credibility = results[Dimension.CREDIBILITY]
        impact = results[Dimension.IMPACT]
        compliance = results[Dimension.COMPLIANCE]

        return ScreeningResult(
            feasibility_score=credibility.score,
            impact_score=impact.score,
            risk_score=100 - compliance.score,
            innovation_score=0,  # not applicable to NGOs
            sustainability_score=impact.sustainability_score or 0,
            overall_score=self.ngo_overall_score(
                credibility=credibility.score,
                impact=impact.score,
                compliance=compliance.score,
            ),
            recommendations=merge_limited(
                credibility.recommendations,
                impact.recommendations,
                compliance.recommendations,
            ),
            # impact concerns are not reported for NGOs
            concerns=merge_limited(credibility.concerns, compliance.concerns),
            confidence=mean_confidence(
                [credibility.confidence, impact.confidence, compliance.confidence]
            ),
        )


def _require(results: Mapping[Dimension, AnalysisResult], dims: Sequence[Dimension]) -> None:
    missing = [d.value for d in dims if d not in results]
    if missing:
        raise ValueError(f"missing analysis results for dimensions: {missing}")
