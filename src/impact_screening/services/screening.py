"""Screening orchestration for projects and NGOs.

:class:`ScreeningOrchestrator` runs one analyzer per dimension concurrently,
aggregates the results and caches them under the submission's content
fingerprint.  Dimension failures are fatal: the caller sees a single
:class:`ScreeningServiceUnavailable` and nothing is cached.  Cache failures
are never fatal.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Callable, Mapping, Sequence

from impact_screening.domain.entities import NGOSubmission, ProjectSubmission
from impact_screening.domain.enums import NGO_DIMENSIONS, PROJECT_DIMENSIONS, Dimension
from impact_screening.domain.events import ScreeningCacheHit, ScreeningCompleted
from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    ScreeningServiceUnavailable,
)
from impact_screening.domain.values import AnalysisResult, ScreeningResult
from impact_screening.infrastructure.cache import FingerprintCache, resilient
from impact_screening.infrastructure.config import ScreeningConfig
from impact_screening.infrastructure.event_bus import EventBus
from impact_screening.infrastructure.fingerprint import CacheKeys, CacheTTL, fingerprint
from impact_screening.services.aggregation import ScoringAggregator
from impact_screening.services.analyzers import BaseAnalyzer
from impact_screening.services.fanout import FanOut

logger = logging.getLogger(__name__)

Submission = ProjectSubmission | NGOSubmission
Aggregate = Callable[[Mapping[Dimension, AnalysisResult]], ScreeningResult]


class ScreeningOrchestrator:
    """Screens project and NGO submissions.

    Parameters
    ----------
    analyzers:
        One analyzer per dimension.  Must cover every project and NGO
        dimension that will be screened.
    cache:
        Fingerprint cache.  Wrapped in a :class:`ResilientCache`, so an
        unreachable store degrades to "always miss".  ``None`` uses a
        private in-memory cache.
    config:
        Timeouts and concurrency limits.
    screening_ttl:
        Seconds a screening stays cached.
    aggregator:
        Score combiner.  Defaults to the standard weights.
    event_bus:
        Optional bus for :class:`ScreeningCompleted` and
        :class:`ScreeningCacheHit` events.
    """

    def __init__(
        self,
        analyzers: Mapping[Dimension, BaseAnalyzer],
        cache: FingerprintCache | None = None,
        config: ScreeningConfig | None = None,
        screening_ttl: int = CacheTTL.LONG,
        aggregator: ScoringAggregator | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._analyzers = dict(analyzers)
        self._cache = resilient(cache)
        self._config = config or ScreeningConfig()
        self._config.validate()
        self._ttl = screening_ttl
        self._aggregator = aggregator or ScoringAggregator()
        self._event_bus = event_bus
        self._fanout = FanOut(
            per_call_timeout=self._config.per_call_timeout,
            max_concurrency=self._config.max_concurrency,
        )

    @property
    def analyzers(self) -> Mapping[Dimension, BaseAnalyzer]:
        return dict(self._analyzers)

    # -- public API --------------------------------------------------------

    async def screen_project(self, project: ProjectSubmission) -> ScreeningResult:
        """Score *project* on feasibility, impact, risk, innovation and
        sustainability.

        Raises
        ------
        ScreeningServiceUnavailable
            If any dimension fails or the request times out.
        """
        return await self._screen(project, PROJECT_DIMENSIONS, self._aggregator.aggregate_project)

    async def screen_ngo(self, ngo: NGOSubmission) -> ScreeningResult:
        """Score *ngo* on credibility, impact and compliance.

        Raises
        ------
        ScreeningServiceUnavailable
            If any dimension fails or the request times out.
        """
        return await self._screen(ngo, NGO_DIMENSIONS, self._aggregator.aggregate_ngo)

    # -- internals ---------------------------------------------------------

    async def _screen(
        self,
        entity: Submission,
        dimensions: Sequence[Dimension],
        aggregate: Aggregate,
    ) -> ScreeningResult:
        missing = [d.value for d in dimensions if d not in self._analyzers]
        if missing:
            raise ValueError(f"No analyzer configured for dimensions: {missing}")

        content_hash = fingerprint(entity)
        cache_key = CacheKeys.ai_screening(content_hash)

        cached = await self._from_cache(cache_key)
        if cached is not None:
            logger.info(
                "Screening served from cache: %s %s", entity.entity_type.value, content_hash
            )
            self._publish(
                ScreeningCacheHit(
                    source_id=entity.submission_id,
                    fingerprint=content_hash,
                    entity_type=entity.entity_type,
                )
            )
            return cached

        payload = entity.to_payload()
        payload["entityType"] = entity.entity_type.value
        calls = {
            dim: functools.partial(self._analyzers[dim].analyze, payload)
            for dim in dimensions
        }

        start = time.monotonic()
        try:
            async with asyncio.timeout(self._config.request_timeout):
                results = await self._fanout.all(calls)
        except AdapterUnavailableError as exc:
            logger.error(
                "%s screening failed on %s: %s", entity.entity_type.value, exc.adapter, exc
            )
            raise ScreeningServiceUnavailable(
                details={"fingerprint": content_hash, "adapter": exc.adapter}
            ) from exc
        except TimeoutError as exc:
            logger.error(
                "%s screening timed out after %ss",
                entity.entity_type.value,
                self._config.request_timeout,
            )
            raise ScreeningServiceUnavailable(
                details={"fingerprint": content_hash, "adapter": "timeout"}
            ) from exc

        result = aggregate(results)
        duration_ms = (time.monotonic() - start) * 1000.0

        await self._cache.set(cache_key, result.to_dict(), self._ttl)

        logger.info(
            "%s screening completed: overall=%d confidence=%.2f in %.0fms",
            entity.entity_type.value,
            result.overall_score,
            result.confidence,
            duration_ms,
        )
        self._publish(
            ScreeningCompleted(
                source_id=entity.submission_id,
                fingerprint=content_hash,
                entity_type=entity.entity_type,
                overall_score=result.overall_score,
                confidence=result.confidence,
                duration_ms=duration_ms,
            )
        )
        return result

    async def _from_cache(self, key: str) -> ScreeningResult | None:
        raw = await self._cache.get(key)
        if raw is None:
            return None
        try:
            return ScreeningResult.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed cached screening %s: %s", key, exc)
            return None

    def _publish(self, event: ScreeningCompleted | ScreeningCacheHit) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
