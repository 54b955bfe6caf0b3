"""Engine assembly from an :class:`EngineConfig`.

Example
-------
::

    engine = build_engine(EngineConfig.from_env())
    try:
        result = await engine.screen_ngo(ngo)
    finally:
        await engine.aclose()
"""

from __future__ import annotations

import logging

import httpx

from impact_screening.domain.enums import Dimension
from impact_screening.infrastructure.cache import (
    FingerprintCache,
    InMemoryFingerprintCache,
    RedisFingerprintCache,
    resilient,
)
from impact_screening.infrastructure.config import CacheConfig, EngineConfig
from impact_screening.infrastructure.event_bus import EventBus
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.rate_limit import RateLimiter
from impact_screening.infrastructure.similarity import InMemorySimilarityIndex, SimilarityIndex
from impact_screening.services.analyzers import RemoteAnalyzer
from impact_screening.services.documents import DocumentAnalysisService, RemoteDocumentAnalyzer
from impact_screening.services.engine import ScreeningEngine
from impact_screening.services.evidence import RemoteEvidenceAnalyzer, RemoteMilestoneVerifier
from impact_screening.services.milestones import MilestoneVerificationOrchestrator
from impact_screening.services.screening import ScreeningOrchestrator
from impact_screening.services.support import RemoteSupportResponder, SupportBot
from impact_screening.services.translation import RemoteTranslator, TranslationService

logger = logging.getLogger(__name__)


def build_cache(config: CacheConfig) -> FingerprintCache:
    """Create the cache backend named by ``config.backend``."""
    if config.backend == "redis":
        return RedisFingerprintCache(url=config.redis_url, key_prefix=config.key_prefix)
    return InMemoryFingerprintCache()


def build_engine(
    config: EngineConfig | None = None,
    cache: FingerprintCache | None = None,
    event_bus: EventBus | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    similarity_index: SimilarityIndex | None = None,
    rate_limiter: RateLimiter | None = None,
) -> ScreeningEngine:
    """Wire a :class:`ScreeningEngine` with remote adapters.

    Parameters
    ----------
    config:
        Engine configuration.  Defaults to ``EngineConfig()``.
    cache:
        Cache backend.  When ``None`` one is built from ``config.cache``.
    event_bus:
        Optional bus shared by every orchestrator.
    transport:
        Optional ``httpx`` transport shared by every client (tests use
        ``httpx.MockTransport``).
    similarity_index:
        Q&A index for the support bot.  Defaults to an in-memory index.
    rate_limiter:
        Optional rate limiter exposed as ``engine.rate_limiter``.

    Returns
    -------
    ScreeningEngine
    """
    cfg = config or EngineConfig()
    cfg.validate()
    ep = cfg.endpoints

    shared_cache = resilient(cache if cache is not None else build_cache(cfg.cache))

    def client(base_url: str, api_key: str | None) -> JsonEndpointClient:
        return JsonEndpointClient(
            base_url,
            api_key=api_key,
            max_retries=ep.max_retries,
            transport=transport,
        )

    vllm = client(ep.vllm_url, ep.api_key or None)
    clients = [vllm]
    if ep.resolved_analyzer_url.rstrip("/") == vllm.base_url:
        analyzer_client = vllm
    else:
        analyzer_client = client(ep.resolved_analyzer_url, ep.api_key or None)
        clients.append(analyzer_client)
    translator = client(ep.translator_url, None)
    clients.append(translator)

    analyzers = {
        dim: RemoteAnalyzer(dim, analyzer_client, timeout=ep.analyzer_timeout)
        for dim in Dimension
    }

    screening = ScreeningOrchestrator(
        analyzers,
        cache=shared_cache,
        config=cfg.screening,
        screening_ttl=cfg.cache.screening_ttl,
        event_bus=event_bus,
    )
    milestones = MilestoneVerificationOrchestrator(
        RemoteEvidenceAnalyzer(vllm, timeout=ep.evidence_timeout),
        RemoteMilestoneVerifier(vllm, timeout=ep.verification_timeout),
        config=cfg.screening,
        event_bus=event_bus,
    )
    support = SupportBot(
        similarity_index if similarity_index is not None else InMemorySimilarityIndex(),
        RemoteSupportResponder(vllm, timeout=ep.support_timeout, context=cfg.support.context),
        config=cfg.support,
        event_bus=event_bus,
    )
    translation = TranslationService(
        RemoteTranslator(translator, timeout=ep.translation_timeout),
        cache=shared_cache,
        ttl=cfg.cache.translation_ttl,
    )
    documents = DocumentAnalysisService(
        RemoteDocumentAnalyzer(vllm, timeout=ep.document_timeout),
        cache=shared_cache,
        ttl=cfg.cache.document_ttl,
    )

    logger.debug(
        "Built ScreeningEngine: vllm=%s analyzer=%s translator=%s cache=%s",
        ep.vllm_url,
        ep.resolved_analyzer_url,
        ep.translator_url,
        cfg.cache.backend if cache is None else type(cache).__name__,
    )
    return ScreeningEngine(
        screening=screening,
        milestones=milestones,
        support=support,
        translation=translation,
        documents=documents,
        cache=shared_cache,
        clients=clients,
        rate_limiter=rate_limiter,
    )
