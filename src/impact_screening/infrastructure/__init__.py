"""Infrastructure layer for the impact screening engine.

Re-exports the public API surface for convenience::

    from impact_screening.infrastructure import (
        EngineConfig, InMemoryFingerprintCache, ResilientCache,
        JsonEndpointClient, InMemorySimilarityIndex, EventBus,
    )
"""

from impact_screening.infrastructure.cache import (
    FingerprintCache,
    InMemoryFingerprintCache,
    RedisFingerprintCache,
    ResilientCache,
    resilient,
)
from impact_screening.infrastructure.config import (
    CacheConfig,
    EndpointConfig,
    EngineConfig,
    ScreeningConfig,
    SupportConfig,
    load_config_from_json,
)
from impact_screening.infrastructure.event_bus import EventBus, EventStore
from impact_screening.infrastructure.fingerprint import (
    CacheKeys,
    CacheTTL,
    fingerprint,
    hash_string,
)
from impact_screening.infrastructure.http import JsonEndpointClient
from impact_screening.infrastructure.rate_limit import RateLimitDecision, RateLimiter
from impact_screening.infrastructure.similarity import (
    InMemorySimilarityIndex,
    SimilarityIndex,
)

__all__ = [
    # Cache
    "FingerprintCache",
    "InMemoryFingerprintCache",
    "RedisFingerprintCache",
    "ResilientCache",
    "resilient",
    "CacheKeys",
    "CacheTTL",
    "fingerprint",
    "hash_string",
    # Configuration
    "CacheConfig",
    "EndpointConfig",
    "EngineConfig",
    "ScreeningConfig",
    "SupportConfig",
    "load_config_from_json",
    # Events
    "EventBus",
    "EventStore",
    # HTTP
    "JsonEndpointClient",
    # Rate limiting
    "RateLimitDecision",
    "RateLimiter",
    # Similarity
    "InMemorySimilarityIndex",
    "SimilarityIndex",
]
