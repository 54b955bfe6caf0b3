"""Evidence analysis and milestone verification adapters.

Classes
-------
BaseEvidenceAnalyzer
    Analyses one evidence file.  Returns a free-form mapping.
RemoteEvidenceAnalyzer
    ``POST /analyze-evidence``.
BaseMilestoneVerifier
    Produces a verdict for a milestone from its analysed evidence bundle.
RemoteMilestoneVerifier
    ``POST /verify-milestone``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from impact_screening.domain.enums import VERIFICATION_CRITERIA
from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    EvidenceAnalysisFailed,
)
from impact_screening.domain.values import (
    EvidenceItem,
    EvidenceRecord,
    MilestoneVerificationResult,
)
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.schemas import VerificationResponse

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Evidence analysis                                                     #
# ===================================================================== #


class BaseEvidenceAnalyzer(ABC):
    """Analyses a single evidence file."""

    @abstractmethod
    async def analyze(self, item: EvidenceItem) -> Mapping[str, Any] | None:
        """Return the analysis of *item*, or ``None`` when nothing was found.

        Raises
        ------
        EvidenceAnalysisFailed
            If the analysis could not be performed.
        """


class RemoteEvidenceAnalyzer(BaseEvidenceAnalyzer):
    """Evidence analyzer backed by ``POST /analyze-evidence``."""

    def __init__(
        self,
        client: JsonEndpointClient,
        timeout: float = 20.0,
        path: str = "/analyze-evidence",
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._path = path

    async def analyze(self, item: EvidenceItem) -> Mapping[str, Any] | None:
        try:
            return await self._client.post(
                self._path,
                {"file_url": item.url, "file_type": item.type},
                timeout=self._timeout,
                adapter="evidence",
            )
        except AdapterUnavailableError as exc:
            raise EvidenceAnalysisFailed(
                f"Evidence analysis failed for {item.url}: {exc}",
                evidence_url=item.url,
                details={"status_code": exc.status_code},
            ) from exc


# ===================================================================== #
#  Milestone verification                                                #
# ===================================================================== #


class BaseMilestoneVerifier(ABC):
    """Produces a verification verdict for one milestone."""

    @abstractmethod
    async def verify(
        self,
        milestone_id: str,
        evidence: Sequence[EvidenceRecord],
        criteria: Sequence[str] = VERIFICATION_CRITERIA,
    ) -> MilestoneVerificationResult:
        """Judge *evidence* against *criteria*.

        Parameters
        ----------
        milestone_id:
            Identifier of the milestone being verified.
        evidence:
            One record per submitted item, including items whose analysis
            failed (``analysis is None``).
        criteria:
            Verification criteria names.

        Raises
        ------
        AdapterUnavailableError
            If the verdict could not be produced.
        """


class RemoteMilestoneVerifier(BaseMilestoneVerifier):
    """Verifier backed by ``POST /verify-milestone``."""

    def __init__(
        self,
        client: JsonEndpointClient,
        timeout: float = 30.0,
        path: str = "/verify-milestone",
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._path = path

    async def verify(
        self,
        milestone_id: str,
        evidence: Sequence[EvidenceRecord],
        criteria: Sequence[str] = VERIFICATION_CRITERIA,
    ) -> MilestoneVerificationResult:
        body = await self._client.post(
            self._path,
            {
                "milestone_id": milestone_id,
                "evidence": [record.to_dict() for record in evidence],
                "verification_criteria": list(criteria),
            },
            timeout=self._timeout,
            adapter="verification",
        )
        try:
            parsed = VerificationResponse.model_validate(body)
        except ValidationError as exc:
            raise AdapterUnavailableError(
                f"Invalid verification response: {exc}", adapter="verification"
            ) from exc

        return MilestoneVerificationResult(
            is_verified=parsed.is_verified,
            confidence=parsed.confidence,
            findings=tuple(f.to_finding() for f in parsed.findings),
            overall_assessment=parsed.overall_assessment,
            review_required=parsed.review_required,
        )
