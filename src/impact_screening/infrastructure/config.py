"""Configuration dataclasses for the impact screening engine.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations.  Configs are **frozen** so a single
instance can be shared by every orchestrator without risking silent
mutation.

``EngineConfig.from_env()`` reads the same environment variables the API
layer deploys with (``VLLM_API_URL``, ``TRANSLATOR_API_URL``, ``REDIS_URL``,
...); ``load_config_from_json()`` reads a JSON file of the ``to_dict()``
shape.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

# ===================================================================== #
#  Endpoint Configuration                                                #
# ===================================================================== #


@dataclass(frozen=True)
class EndpointConfig:
    """Where the remote adapters live and how long each call may take.

    Attributes
    ----------
    vllm_url:
        Base URL of the model server hosting document, evidence,
        verification and support endpoints.
    analyzer_url:
        Base URL of the per-dimension analyzers.  Empty means ``vllm_url``.
    translator_url:
        Base URL of the translation service.
    api_key:
        Bearer token sent to the model server.  Empty disables the header.
    analyzer_timeout, evidence_timeout, verification_timeout,
    document_timeout, support_timeout, translation_timeout:
        Per-call HTTP timeouts in seconds.
    max_retries:
        Retries on HTTP 429 before giving up.
    """

    vllm_url: str = "http://localhost:8000"
    analyzer_url: str = ""
    translator_url: str = "http://localhost:8001"
    api_key: str = ""
    analyzer_timeout: float = 20.0
    evidence_timeout: float = 20.0
    verification_timeout: float = 30.0
    document_timeout: float = 30.0
    support_timeout: float = 15.0
    translation_timeout: float = 10.0
    max_retries: int = 2

    @property
    def resolved_analyzer_url(self) -> str:
        return self.analyzer_url or self.vllm_url

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if not self.vllm_url:
            raise ValueError("vllm_url must not be empty")
        if not self.translator_url:
            raise ValueError("translator_url must not be empty")
        for name in (
            "analyzer_timeout",
            "evidence_timeout",
            "verification_timeout",
            "document_timeout",
            "support_timeout",
            "translation_timeout",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")


# ===================================================================== #
#  Cache Configuration                                                   #
# ===================================================================== #

_VALID_CACHE_BACKENDS = frozenset({"memory", "redis"})


@dataclass(frozen=True)
class CacheConfig:
    """Fingerprint cache backend and TTLs (seconds)."""

    backend: str = "memory"
    redis_url: str = "redis://localhost:6379"
    key_prefix: str = "impact:"
    screening_ttl: int = 3600
    document_ttl: int = 86400
    translation_ttl: int = 86400

    def validate(self) -> None:
        if self.backend not in _VALID_CACHE_BACKENDS:
            raise ValueError(
                f"backend must be one of {sorted(_VALID_CACHE_BACKENDS)}, "
                f"got {self.backend!r}"
            )
        for name in ("screening_ttl", "document_ttl", "translation_ttl"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")


# ===================================================================== #
#  Screening Configuration                                               #
# ===================================================================== #


@dataclass(frozen=True)
class ScreeningConfig:
    """Concurrency limits shared by the screening and milestone flows.

    ``per_call_timeout`` bounds each adapter call; ``request_timeout``
    bounds a whole orchestrator call and must be the longer of the two.
    """

    per_call_timeout: float = 30.0
    request_timeout: float = 60.0
    max_concurrency: int = 8

    def validate(self) -> None:
        if self.per_call_timeout <= 0:
            raise ValueError(
                f"per_call_timeout must be > 0, got {self.per_call_timeout}"
            )
        if self.request_timeout <= self.per_call_timeout:
            raise ValueError(
                "request_timeout must exceed per_call_timeout "
                f"({self.request_timeout} <= {self.per_call_timeout})"
            )
        if self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be >= 1, got {self.max_concurrency}"
            )


# ===================================================================== #
#  Support Configuration                                                 #
# ===================================================================== #

DEFAULT_FALLBACK_MESSAGE = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again later or contact our support team directly."
)


@dataclass(frozen=True)
class SupportConfig:
    """Thresholds for the support Q&A cache lookup.

    Attributes
    ----------
    cache_hit_threshold:
        A prior answer is reused when its similarity exceeds this value.
    store_threshold:
        A fresh answer is stored for reuse when its confidence exceeds this.
    fallback_confidence:
        Confidence reported with the fixed fallback message.
    related_limit:
        How many further matches are offered as related questions.
    """

    cache_hit_threshold: float = 0.85
    store_threshold: float = 0.7
    fallback_confidence: float = 0.1
    related_limit: int = 3
    context: str = "impactchain_platform"
    fallback_message: str = DEFAULT_FALLBACK_MESSAGE
    fallback_actions: tuple[str, ...] = ("contact_support", "try_again_later")

    def validate(self) -> None:
        for name in ("cache_hit_threshold", "store_threshold", "fallback_confidence"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.related_limit < 0:
            raise ValueError(f"related_limit must be >= 0, got {self.related_limit}")
        if not self.fallback_actions:
            raise ValueError("fallback_actions must not be empty")


# ===================================================================== #
#  Engine Configuration                                                  #
# ===================================================================== #


@dataclass(frozen=True)
class EngineConfig:
    """Top-level configuration aggregating every sub-config."""

    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    screening: ScreeningConfig = field(default_factory=ScreeningConfig)
    support: SupportConfig = field(default_factory=SupportConfig)

    def validate(self) -> None:
        self.endpoints.validate()
        self.cache.validate()
        self.screening.validate()
        self.support.validate()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["support"]["fallback_actions"] = list(self.support.fallback_actions)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EngineConfig:
        support_data = dict(data.get("support", {}))
        if "fallback_actions" in support_data:
            support_data["fallback_actions"] = tuple(support_data["fallback_actions"])
        cfg = cls(
            endpoints=_build(EndpointConfig, data.get("endpoints", {})),
            cache=_build(CacheConfig, data.get("cache", {})),
            screening=_build(ScreeningConfig, data.get("screening", {})),
            support=_build(SupportConfig, support_data),
        )
        cfg.validate()
        return cfg

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = EndpointConfig()
        endpoints = EndpointConfig(
            vllm_url=env.get("VLLM_API_URL", defaults.vllm_url),
            analyzer_url=env.get("ANALYZER_API_URL", ""),
            translator_url=env.get("TRANSLATOR_API_URL", defaults.translator_url),
            api_key=env.get("OPENAI_API_KEY", ""),
        )
        cache = CacheConfig(
            backend=env.get("CACHE_BACKEND", "memory"),
            redis_url=env.get("REDIS_URL", CacheConfig.redis_url),
        )
        cfg = cls(endpoints=endpoints, cache=cache)
        cfg.validate()
        return cfg


def _build(config_cls: type, data: Mapping[str, Any]) -> Any:
    valid_keys = {f.name for f in fields(config_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    return config_cls(**filtered)


def load_config_from_json(path: str | Path) -> EngineConfig:
    """Load an ``EngineConfig`` from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return EngineConfig.from_dict(data)
