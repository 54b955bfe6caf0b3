"""Cached text translation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    TranslationServiceUnavailable,
)
from impact_screening.domain.values import TranslationResult
from impact_screening.infrastructure.cache import FingerprintCache, resilient
from impact_screening.infrastructure.fingerprint import CacheKeys, CacheTTL
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.schemas import TranslationResponse

logger = logging.getLogger(__name__)


class BaseTranslator(ABC):
    """Translates text between languages."""

    @abstractmethod
    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> TranslationResult:
        """Translate *text*; raise :class:`AdapterUnavailableError` on failure."""


class RemoteTranslator(BaseTranslator):
    """Translator backed by ``POST {translator_url}/translate``.

    ``source_language`` in the result is the service's detected language,
    falling back to the requested source and then to ``"auto"``.
    """

    def __init__(
        self,
        client: JsonEndpointClient,
        timeout: float = 10.0,
        path: str = "/translate",
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._path = path

    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> TranslationResult:
        body = await self._client.post(
            self._path,
            {
                "text": text,
                "target_language": target_language,
                "source_language": source_language,
            },
            timeout=self._timeout,
            adapter="translation",
        )
        try:
            parsed = TranslationResponse.model_validate(body)
        except ValidationError as exc:
            raise AdapterUnavailableError(
                f"Invalid translation response: {exc}", adapter="translation"
            ) from exc
        return TranslationResult(
            translated_text=parsed.translated_text,
            source_language=parsed.detected_language or source_language or "auto",
            target_language=target_language,
            confidence=parsed.confidence,
        )


class TranslationService:
    """Caches translations by source, target and text hash."""

    def __init__(
        self,
        translator: BaseTranslator,
        cache: FingerprintCache | None = None,
        ttl: int = CacheTTL.VERY_LONG,
    ) -> None:
        self._translator = translator
        self._cache = resilient(cache)
        self._ttl = ttl

    async def translate_text(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> TranslationResult:
        """Translate *text*, serving repeats from the cache.

        Raises
        ------
        TranslationServiceUnavailable
            If the translator fails.
        """
        cache_key = CacheKeys.translation(source_language, target_language, text)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            try:
                return TranslationResult.from_dict(cached)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Ignoring malformed cached translation %s: %s", cache_key, exc)

        try:
            result = await self._translator.translate(text, target_language, source_language)
        except Exception as exc:
            logger.error("Translation failed: %s", exc)
            raise TranslationServiceUnavailable(
                details={"target_language": target_language}
            ) from exc

        await self._cache.set(cache_key, result.to_dict(), self._ttl)
        logger.info(
            "Translation completed: %s -> %s confidence=%.2f",
            result.source_language,
            target_language,
            result.confidence,
        )
        return result
