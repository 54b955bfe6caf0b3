"""Caller-facing facade over every screening workflow.

:class:`ScreeningEngine` bundles the orchestrators and cached services
behind the API the platform calls.  It owns the HTTP clients and the cache
it was built with and releases them in :meth:`ScreeningEngine.aclose`.

Usage::

    async with build_engine(EngineConfig.from_env()) as engine:
        result = await engine.screen_project(project)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from impact_screening.domain.entities import NGOSubmission, ProjectSubmission
from impact_screening.domain.values import (
    DocumentAnalysisResult,
    EvidenceItem,
    MilestoneVerificationResult,
    ScreeningResult,
    SupportBotResponse,
    TranslationResult,
)
from impact_screening.infrastructure.cache import FingerprintCache
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.rate_limit import RateLimitDecision, RateLimiter
from impact_screening.services.documents import DocumentAnalysisService
from impact_screening.services.milestones import MilestoneVerificationOrchestrator
from impact_screening.services.screening import ScreeningOrchestrator
from impact_screening.services.support import SupportBot
from impact_screening.services.translation import TranslationService

logger = logging.getLogger(__name__)


class ScreeningEngine:
    """Facade over screening, verification, support, translation and
    document analysis.

    Parameters
    ----------
    screening:
        Project and NGO screening orchestrator.
    milestones:
        Milestone verification orchestrator.
    support:
        Support bot.
    translation:
        Cached translation service.
    documents:
        Cached document analysis service.
    cache:
        The shared cache, closed by :meth:`aclose`.
    clients:
        HTTP clients owned by the engine, closed by :meth:`aclose`.
    rate_limiter:
        Optional per-caller rate limiter.
    """

    def __init__(
        self,
        screening: ScreeningOrchestrator,
        milestones: MilestoneVerificationOrchestrator,
        support: SupportBot,
        translation: TranslationService,
        documents: DocumentAnalysisService,
        cache: FingerprintCache | None = None,
        clients: Sequence[JsonEndpointClient] = (),
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.screening = screening
        self.milestones = milestones
        self.support = support
        self.translation = translation
        self.documents = documents
        self.rate_limiter = rate_limiter
        self._cache = cache
        self._clients = list(clients)

    # -- screening ---------------------------------------------------------

    async def screen_project(self, project: ProjectSubmission) -> ScreeningResult:
        return await self.screening.screen_project(project)

    async def screen_ngo(self, ngo: NGOSubmission) -> ScreeningResult:
        return await self.screening.screen_ngo(ngo)

    # -- milestones --------------------------------------------------------

    async def verify_milestone(
        self, milestone_id: str, evidence: Sequence[EvidenceItem]
    ) -> MilestoneVerificationResult:
        return await self.milestones.verify_milestone(milestone_id, evidence)

    # -- support, translation, documents -----------------------------------

    async def process_support_message(
        self, message: str, language: str = "en", user_id: str | None = None
    ) -> SupportBotResponse:
        return await self.support.process_message(message, language, user_id)

    async def translate_text(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> TranslationResult:
        return await self.translation.translate_text(text, target_language, source_language)

    async def analyze_document(
        self, document_url: str, document_type: str
    ) -> DocumentAnalysisResult:
        return await self.documents.analyze_document(document_url, document_type)

    # -- housekeeping ------------------------------------------------------

    async def check_rate_limit(self, identifier: str) -> RateLimitDecision:
        """Count a request from *identifier*.  Always allowed without a limiter."""
        if self.rate_limiter is None:
            return RateLimitDecision(allowed=True, count=0, limit=0)
        return await self.rate_limiter.hit(identifier)

    async def health(self) -> dict[str, Any]:
        cache_ok = await self._cache.health() if self._cache is not None else True
        return {
            "cache": cache_ok,
            "endpoints": [client.base_url for client in self._clients],
        }

    async def aclose(self) -> None:
        """Release HTTP clients and the cache connection."""
        for client in self._clients:
            await client.aclose()
        if self._cache is not None:
            await self._cache.aclose()
        logger.debug("ScreeningEngine closed (%d clients)", len(self._clients))

    async def __aenter__(self) -> ScreeningEngine:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
