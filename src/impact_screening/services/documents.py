"""Cached document authenticity analysis."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from pydantic import ValidationError

from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    DocumentAnalysisServiceUnavailable,
)
from impact_screening.domain.values import DocumentAnalysisResult
from impact_screening.infrastructure.cache import FingerprintCache, resilient
from impact_screening.infrastructure.fingerprint import CacheKeys, CacheTTL
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.schemas import DocumentAnalysisResponse

logger = logging.getLogger(__name__)


class BaseDocumentAnalyzer(ABC):
    """Checks a document's authenticity and extracts its data."""

    @abstractmethod
    async def analyze(self, document_url: str, document_type: str) -> DocumentAnalysisResult:
        """Analyse the document at *document_url*."""


class RemoteDocumentAnalyzer(BaseDocumentAnalyzer):
    """Document analyzer backed by ``POST /analyze-document``."""

    def __init__(
        self,
        client: JsonEndpointClient,
        timeout: float = 30.0,
        path: str = "/analyze-document",
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._path = path

    async def analyze(self, document_url: str, document_type: str) -> DocumentAnalysisResult:
        body = await self._client.post(
            self._path,
            {
                "document_url": document_url,
                "document_type": document_type,
                "extract_data": True,
                "check_authenticity": True,
            },
            timeout=self._timeout,
            adapter="document",
        )
        try:
            return DocumentAnalysisResponse.model_validate(body).to_result()
        except ValidationError as exc:
            raise AdapterUnavailableError(
                f"Invalid document analysis response: {exc}", adapter="document"
            ) from exc


class DocumentAnalysisService:
    """Caches document analyses by document type and URL hash."""

    def __init__(
        self,
        analyzer: BaseDocumentAnalyzer,
        cache: FingerprintCache | None = None,
        ttl: int = CacheTTL.VERY_LONG,
    ) -> None:
        self._analyzer = analyzer
        self._cache = resilient(cache)
        self._ttl = ttl

    async def analyze_document(
        self, document_url: str, document_type: str
    ) -> DocumentAnalysisResult:
        """Analyse a document, serving repeats from the cache.

        Raises
        ------
        DocumentAnalysisServiceUnavailable
            If the analyzer fails.
        """
        cache_key = CacheKeys.document_analysis(document_type, document_url)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            try:
                return DocumentAnalysisResult.from_dict(cached)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Ignoring malformed cached document analysis %s: %s", cache_key, exc)

        start = time.monotonic()
        try:
            result = await self._analyzer.analyze(document_url, document_type)
        except Exception as exc:
            logger.error("Document analysis failed for %s: %s", document_type, exc)
            raise DocumentAnalysisServiceUnavailable(
                details={"document_type": document_type}
            ) from exc

        await self._cache.set(cache_key, result.to_dict(), self._ttl)
        logger.info(
            "Document analysis completed: type=%s authentic=%s confidence=%.2f in %.0fms",
            document_type,
            result.is_authentic,
            result.confidence,
            (time.monotonic() - start) * 1000.0,
        )
        return result
