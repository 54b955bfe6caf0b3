"""Analyzer adapters for the impact screening engine.

Implements the Strategy pattern for scoring one dimension of a submission.
Every dimension -- feasibility, impact, risk, innovation, sustainability,
credibility, compliance -- is served by the same one-method interface, so
rule-based, model-backed and remote analyzers are interchangeable.

Classes
-------
BaseAnalyzer
    Abstract base class for all dimension analyzers.
RemoteAnalyzer
    Calls ``POST {base_url}/analyze-{dimension}`` over HTTP.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from impact_screening.domain.enums import Dimension, EntityType
from impact_screening.domain.exceptions import AdapterUnavailableError
from impact_screening.domain.values import AnalysisResult
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.schemas import AnalysisResponse

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Base Analyzer (ABC)                                                   #
# ===================================================================== #


class BaseAnalyzer(ABC):
    """Abstract base class for dimension analyzers.

    Subclasses set :attr:`dimension` and implement :meth:`analyze`.
    Implementations must return within a bounded time or raise
    :class:`AdapterUnavailableError`; the orchestrator decides whether a
    failure is fatal.
    """

    dimension: Dimension

    def __init__(self, dimension: Dimension) -> None:
        self.dimension = dimension

    @abstractmethod
    async def analyze(self, entity_data: Mapping[str, Any]) -> AnalysisResult:
        """Score *entity_data* on this analyzer's dimension.

        Parameters
        ----------
        entity_data:
            The canonical payload of the submission (see
            ``ProjectSubmission.to_payload``).  May include an
            ``"entityType"`` key naming the submission kind.

        Returns
        -------
        AnalysisResult
        """

    @property
    def name(self) -> str:
        return f"{type(self).__name__}[{self.dimension.value}]"

    def __repr__(self) -> str:
        return self.name


# ===================================================================== #
#  Remote Analyzer                                                       #
# ===================================================================== #


class RemoteAnalyzer(BaseAnalyzer):
    """Analyzer backed by a remote scoring endpoint.

    Sends ``{"dimension", "entityType", "data"}`` and maps the JSON response
    through :class:`AnalysisResponse`, so absent ``recommendations`` and
    ``concerns`` become empty tuples.

    Parameters
    ----------
    dimension:
        The dimension this analyzer scores.
    client:
        Shared :class:`JsonEndpointClient` bound to the analyzer service.
    timeout:
        Per-call timeout in seconds.
    path:
        Endpoint path.  Defaults to ``"/analyze-{dimension}"``.
    """

    def __init__(
        self,
        dimension: Dimension,
        client: JsonEndpointClient,
        timeout: float = 20.0,
        path: str | None = None,
    ) -> None:
        super().__init__(dimension)
        self._client = client
        self._timeout = timeout
        self._path = path or f"/analyze-{dimension.value}"

    async def analyze(self, entity_data: Mapping[str, Any]) -> AnalysisResult:
        data = dict(entity_data)
        entity_type = data.pop("entityType", EntityType.PROJECT.value)
        body = await self._client.post(
            self._path,
            {
                "dimension": self.dimension.value,
                "entityType": entity_type,
                "data": data,
            },
            timeout=self._timeout,
            adapter=self.dimension.value,
        )
        try:
            return AnalysisResponse.model_validate(body).to_result()
        except ValidationError as exc:
            raise AdapterUnavailableError(
                f"Invalid {self.dimension.value} analysis response: {exc}",
                adapter=self.dimension.value,
            ) from exc
