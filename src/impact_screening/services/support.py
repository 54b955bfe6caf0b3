"""Support bot with a similarity-indexed Q&A cache.

A question that closely matches one answered before is served from the
index without a generative call.  Otherwise a responder produces a fresh
answer, which is stored when the responder is confident enough.  Any
failure resolves to a fixed fallback answer; :meth:`SupportBot.process_message`
never raises.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from pydantic import ValidationError

from impact_screening.domain.events import SupportFallbackUsed
from impact_screening.domain.exceptions import (
    AdapterUnavailableError,
    SupportBotGenerationFailed,
)
from impact_screening.domain.values import QAPair, SimilarQuestion, SupportBotResponse
from impact_screening.infrastructure.config import SupportConfig
from impact_screening.infrastructure.event_bus import EventBus
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.schemas import SupportChatResponse
from impact_screening.infrastructure.similarity import SimilarityIndex

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Responders                                                            #
# ===================================================================== #


class BaseSupportResponder(ABC):
    """Generates an answer to a support question."""

    @abstractmethod
    async def respond(
        self, message: str, language: str, user_id: str | None = None
    ) -> SupportBotResponse:
        """Answer *message* in *language*.

        Raises
        ------
        SupportBotGenerationFailed
            If no answer could be produced.
        """


class RemoteSupportResponder(BaseSupportResponder):
    """Responder backed by ``POST /support-chat``."""

    def __init__(
        self,
        client: JsonEndpointClient,
        timeout: float = 15.0,
        context: str = "impactchain_platform",
        path: str = "/support-chat",
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._context = context
        self._path = path

    async def respond(
        self, message: str, language: str, user_id: str | None = None
    ) -> SupportBotResponse:
        try:
            body = await self._client.post(
                self._path,
                {
                    "message": message,
                    "language": language,
                    "user_id": user_id,
                    "context": self._context,
                },
                timeout=self._timeout,
                adapter="support",
            )
            return SupportChatResponse.model_validate(body).to_response(language)
        except (AdapterUnavailableError, ValidationError) as exc:
            raise SupportBotGenerationFailed(f"Support chat failed: {exc}") from exc


# ===================================================================== #
#  Support Bot                                                           #
# ===================================================================== #


class SupportBot:
    """Answers support questions, reusing prior answers where possible.

    Parameters
    ----------
    index:
        Similarity index of prior Q&A pairs.
    responder:
        Generative responder used on an index miss.
    config:
        Thresholds and the fallback answer.
    event_bus:
        Optional bus for :class:`SupportFallbackUsed` events.
    """

    def __init__(
        self,
        index: SimilarityIndex,
        responder: BaseSupportResponder,
        config: SupportConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._index = index
        self._responder = responder
        self._config = config or SupportConfig()
        self._config.validate()
        self._event_bus = event_bus

    async def process_message(
        self,
        message: str,
        language: str = "en",
        user_id: str | None = None,
    ) -> SupportBotResponse:
        cfg = self._config
        start = time.monotonic()

        matches = await self._search(message, language)
        if matches and matches[0].confidence > cfg.cache_hit_threshold:
            best = matches[0]
            logger.info(
                "Support response from index: user=%s language=%s confidence=%.2f",
                user_id,
                language,
                best.confidence,
            )
            return SupportBotResponse(
                message=best.answer,
                confidence=best.confidence,
                language=language,
                related_questions=tuple(
                    m.question for m in matches[1 : 1 + cfg.related_limit]
                ),
            )

        try:
            response = await self._responder.respond(message, language, user_id)
        except Exception as exc:
            logger.error("Support bot processing failed: %s", exc)
            return self._fallback(language, str(exc))

        if response.confidence > cfg.store_threshold:
            await self._store(message, response, language)

        logger.info(
            "Support bot response generated: user=%s language=%s confidence=%.2f in %.0fms",
            user_id,
            language,
            response.confidence,
            (time.monotonic() - start) * 1000.0,
        )
        return response

    # -- internals ---------------------------------------------------------

    async def _search(self, message: str, language: str) -> list[SimilarQuestion]:
        try:
            return await self._index.search(message, language, limit=1 + self._config.related_limit)
        except Exception as exc:
            logger.warning("Similar-question search failed: %s", exc)
            return []

    async def _store(self, message: str, response: SupportBotResponse, language: str) -> None:
        try:
            await self._index.add(
                QAPair(
                    question=message,
                    answer=response.message,
                    language=language,
                    confidence=response.confidence,
                )
            )
        except Exception as exc:
            logger.warning("Failed to store Q&A pair: %s", exc)

    def _fallback(self, language: str, reason: str) -> SupportBotResponse:
        cfg = self._config
        if self._event_bus is not None:
            self._event_bus.publish(SupportFallbackUsed(language=language, reason=reason))
        return SupportBotResponse(
            message=cfg.fallback_message,
            confidence=cfg.fallback_confidence,
            language=language,
            suggested_actions=tuple(cfg.fallback_actions),
        )
