"""Milestone verification orchestration.

Each evidence item is analysed concurrently and independently: a failed
item is recorded with ``analysis=None`` and the batch continues.  The
whole bundle, failures included, is then sent to the verifier, whose
verdict is returned as-is.  Nothing here is cached.
"""

from __future__ import annotations

import asyncio
import dataclasses
import functools
import logging
import time
from collections.abc import Sequence

from impact_screening.domain.enums import VERIFICATION_CRITERIA
from impact_screening.domain.events import MilestoneVerified
from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    MilestoneVerificationServiceUnavailable,
)
from impact_screening.domain.values import (
    EvidenceItem,
    EvidenceRecord,
    MilestoneVerificationResult,
)
from impact_screening.infrastructure.config import ScreeningConfig
from impact_screening.infrastructure.event_bus import EventBus
from impact_screening.services.evidence import BaseEvidenceAnalyzer, BaseMilestoneVerifier
from impact_screening.services.fanout import FanOut

logger = logging.getLogger(__name__)


class MilestoneVerificationOrchestrator:
    """Verifies milestones from their evidence.

    Parameters
    ----------
    evidence_analyzer:
        Analyses each evidence item.
    verifier:
        Produces the final verdict.
    config:
        Per-item timeout, overall request timeout and concurrency bound.
    event_bus:
        Optional bus for :class:`MilestoneVerified` events.
    """

    def __init__(
        self,
        evidence_analyzer: BaseEvidenceAnalyzer,
        verifier: BaseMilestoneVerifier,
        config: ScreeningConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._evidence_analyzer = evidence_analyzer
        self._verifier = verifier
        self._config = config or ScreeningConfig()
        self._config.validate()
        self._event_bus = event_bus
        self._fanout = FanOut(
            per_call_timeout=self._config.per_call_timeout,
            max_concurrency=self._config.max_concurrency,
        )

    async def analyze_evidence(self, evidence: Sequence[EvidenceItem]) -> list[EvidenceRecord]:
        """Analyse every item, tolerating individual failures."""
        calls = {
            index: functools.partial(self._evidence_analyzer.analyze, item)
            for index, item in enumerate(evidence)
        }
        settled = await self._fanout.settle(calls)

        records: list[EvidenceRecord] = []
        for index, item in enumerate(evidence):
            outcome = settled[index]
            if not outcome.ok:
                logger.warning(
                    "Evidence analysis failed for %s (%s): %s",
                    item.url,
                    item.type,
                    outcome.error,
                )
            records.append(EvidenceRecord(item=item, analysis=outcome.value))
        return records

    async def verify_milestone(
        self,
        milestone_id: str,
        evidence: Sequence[EvidenceItem],
    ) -> MilestoneVerificationResult:
        """Analyse *evidence* and ask the verifier for a verdict.

        Raises
        ------
        ValueError
            If *evidence* is empty.
        MilestoneVerificationServiceUnavailable
            If the verifier fails or the request times out.
        """
        if not evidence:
            raise ValueError("verify_milestone requires at least one evidence item")

        start = time.monotonic()
        try:
            async with asyncio.timeout(self._config.request_timeout):
                records = await self.analyze_evidence(evidence)
                verdict = await self._verifier.verify(
                    milestone_id, records, VERIFICATION_CRITERIA
                )
        except AdapterUnavailableError as exc:
            logger.error("Milestone %s verification failed: %s", milestone_id, exc)
            raise MilestoneVerificationServiceUnavailable(
                details={"milestone_id": milestone_id, "adapter": exc.adapter}
            ) from exc
        except TimeoutError as exc:
            logger.error(
                "Milestone %s verification timed out after %ss",
                milestone_id,
                self._config.request_timeout,
            )
            raise MilestoneVerificationServiceUnavailable(
                details={"milestone_id": milestone_id, "adapter": "timeout"}
            ) from exc
        except Exception as exc:
            logger.error("Milestone %s verification failed: %s", milestone_id, exc)
            raise MilestoneVerificationServiceUnavailable(
                details={"milestone_id": milestone_id, "adapter": type(exc).__name__}
            ) from exc

        result = dataclasses.replace(verdict, milestone_id=milestone_id, evidence=tuple(records))
        duration_ms = (time.monotonic() - start) * 1000.0
        failed = len(result.failed_evidence)

        logger.info(
            "Milestone %s verified=%s review_required=%s (%d/%d evidence analysed) in %.0fms",
            milestone_id,
            result.is_verified,
            result.review_required,
            len(records) - failed,
            len(records),
            duration_ms,
        )
        if self._event_bus is not None:
            self._event_bus.publish(
                MilestoneVerified(
                    source_id=milestone_id,
                    milestone_id=milestone_id,
                    is_verified=result.is_verified,
                    review_required=result.review_required,
                    evidence_total=len(records),
                    evidence_failed=failed,
                    duration_ms=duration_ms,
                )
            )
        return result
