"""End-to-end tests for build_engine and ScreeningEngine over MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from impact_screening.domain.enums import Dimension
from impact_screening.domain.exceptions import (
    DocumentAnalysisServiceUnavailable,
    MilestoneVerificationServiceUnavailable,
    ScreeningServiceUnavailable,
    TranslationServiceUnavailable,
)
from impact_screening.infrastructure.cache import InMemoryFingerprintCache, RedisFingerprintCache
from impact_screening.infrastructure.config import CacheConfig, EndpointConfig, EngineConfig
from impact_screening.infrastructure.rate_limit import RateLimiter
from impact_screening.infrastructure.similarity import InMemorySimilarityIndex
from impact_screening.services.factory import build_cache, build_engine

SCORES = {
    "feasibility": 80,
    "impact": 70,
    "risk": 20,
    "innovation": 60,
    "sustainability": 90,
    "credibility": 80,
    "compliance": 90,
}


class FakePlatform:
    """Routes requests by path to canned JSON bodies and records them."""

    def __init__(
        self, failing: set[str] | None = None, garbled: set[str] | None = None
    ) -> None:
        self.failing = failing or set()
        self.garbled = garbled or set()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.lstrip("/")
        if path in self.failing:
            return httpx.Response(503, json={"error": "down"})
        if path in self.garbled:
            return httpx.Response(200, content=b'{"x": "\xff\xfe"}')
        if path.startswith("analyze-") and path.removeprefix("analyze-") in SCORES:
            dim = path.removeprefix("analyze-")
            body = {"score": SCORES[dim], "confidence": 0.8, "recommendations": [f"{dim} tip"]}
            return httpx.Response(200, json=body)
        if path == "analyze-evidence":
            return httpx.Response(200, json={"valid": True})
        if path == "verify-milestone":
            return httpx.Response(200, json={"is_verified": True, "confidence": 0.9})
        if path == "support-chat":
            return httpx.Response(200, json={"message": "See the FAQ", "confidence": 0.9})
        if path == "translate":
            return httpx.Response(200, json={"translated_text": "Bonjour", "confidence": 0.9})
        if path == "analyze-document":
            return httpx.Response(200, json={"is_authentic": True, "confidence": 0.9})
        return httpx.Response(404)

    def hits(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(
        endpoints=EndpointConfig(
            vllm_url="http://vllm.test",
            translator_url="http://translator.test",
            api_key="sk-test",
        )
    )


class TestBuildEngine:

    @pytest.mark.asyncio
    async def test_screen_project_end_to_end(self, config, sample_project) -> None:
        platform = FakePlatform()
        async with build_engine(config, transport=httpx.MockTransport(platform)) as engine:
            first = await engine.screen_project(sample_project)
            second = await engine.screen_project(sample_project)

        assert first.overall_score == 76
        assert first == second
        assert platform.hits("/analyze-feasibility") == 1
        assert platform.hits("/analyze-credibility") == 0
        request = next(r for r in platform.requests if r.url.path == "/analyze-risk")
        assert request.url.host == "vllm.test"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert json.loads(request.content)["data"]["title"] == "Clean Water Wells"

    @pytest.mark.asyncio
    async def test_screen_ngo_end_to_end(self, config, sample_ngo) -> None:
        platform = FakePlatform()
        async with build_engine(config, transport=httpx.MockTransport(platform)) as engine:
            result = await engine.screen_ngo(sample_ngo)

        # 80*.4 + 70*.35 + 90*.25 = 79
        assert result.overall_score == 79
        assert result.innovation_score == 0
        assert result.sustainability_score == 0

    @pytest.mark.asyncio
    async def test_dimension_outage(self, config, sample_project) -> None:
        platform = FakePlatform(failing={"analyze-impact"})
        async with build_engine(config, transport=httpx.MockTransport(platform)) as engine:
            with pytest.raises(ScreeningServiceUnavailable):
                await engine.screen_project(sample_project)

    @pytest.mark.asyncio
    async def test_separate_analyzer_url(self, sample_project) -> None:
        platform = FakePlatform()
        config = EngineConfig(
            endpoints=EndpointConfig(vllm_url="http://vllm.test", analyzer_url="http://an.test")
        )
        async with build_engine(config, transport=httpx.MockTransport(platform)) as engine:
            await engine.screen_project(sample_project)
            health = await engine.health()

        hosts = {r.url.host for r in platform.requests}
        assert hosts == {"an.test"}
        assert health == {
            "cache": True,
            "endpoints": ["http://vllm.test", "http://an.test", "http://localhost:8001"],
        }

    @pytest.mark.asyncio
    async def test_other_workflows(self, config, sample_evidence) -> None:
        platform = FakePlatform(failing={"analyze-evidence"})
        index = InMemorySimilarityIndex()
        async with build_engine(
            config, transport=httpx.MockTransport(platform), similarity_index=index
        ) as engine:
            verdict = await engine.verify_milestone("m-1", sample_evidence)
            support = await engine.process_support_message("How do I donate?", "en", "u-1")
            translation = await engine.translate_text("Hello", "fr")
            document = await engine.analyze_document("https://files.example/c.pdf", "certificate")

        assert verdict.is_verified
        assert len(verdict.failed_evidence) == 3
        assert support.message == "See the FAQ"
        assert len(index) == 1
        assert translation.translated_text == "Bonjour"
        assert translation.source_language == "auto"
        assert document.is_authentic

        translate_request = next(r for r in platform.requests if r.url.path == "/translate")
        assert translate_request.url.host == "translator.test"
        assert "Authorization" not in translate_request.headers

    @pytest.mark.asyncio
    async def test_undecodable_bodies_surface_as_service_errors(
        self, config, sample_evidence
    ) -> None:
        platform = FakePlatform(garbled={"translate", "analyze-document", "verify-milestone"})
        async with build_engine(config, transport=httpx.MockTransport(platform)) as engine:
            with pytest.raises(TranslationServiceUnavailable):
                await engine.translate_text("Hello", "fr")
            with pytest.raises(DocumentAnalysisServiceUnavailable):
                await engine.analyze_document("https://files.example/c.pdf", "certificate")
            with pytest.raises(MilestoneVerificationServiceUnavailable):
                await engine.verify_milestone("m-1", sample_evidence)

    @pytest.mark.asyncio
    async def test_rate_limit(self, config, memory_cache) -> None:
        engine = build_engine(config, rate_limiter=RateLimiter(memory_cache, limit=1))
        try:
            assert (await engine.check_rate_limit("u")).allowed
            assert not (await engine.check_rate_limit("u")).allowed
        finally:
            await engine.aclose()

    @pytest.mark.asyncio
    async def test_rate_limit_disabled(self, config) -> None:
        engine = build_engine(config)
        try:
            assert (await engine.check_rate_limit("u")).allowed
        finally:
            await engine.aclose()

    @pytest.mark.asyncio
    async def test_every_dimension_has_an_analyzer(self, config) -> None:
        async with build_engine(config) as engine:
            assert set(engine.screening.analyzers) == set(Dimension)


class TestBuildCache:

    def test_memory_backend(self) -> None:
        assert isinstance(build_cache(CacheConfig()), InMemoryFingerprintCache)

    def test_redis_backend(self) -> None:
        cache = build_cache(CacheConfig(backend="redis", redis_url="redis://cache.test:6379"))
        assert isinstance(cache, RedisFingerprintCache)
