"""Public testing utilities for impact screening.

Provides in-process adapter doubles and a mock chat model for writing
self-contained examples and tests without network access or API keys.
"""

from impact_screening.testing.fakes import (
    FailingAnalyzer,
    FailingCache,
    FailingSupportResponder,
    FailingVerifier,
    SlowAnalyzer,
    StaticAnalyzer,
    StaticDocumentAnalyzer,
    StaticEvidenceAnalyzer,
    StaticSupportResponder,
    StaticTranslator,
    StaticVerifier,
    static_analyzers,
)
from impact_screening.testing.mock_llm import MockStructuredChatModel

__all__ = [
    "FailingAnalyzer",
    "FailingCache",
    "FailingSupportResponder",
    "FailingVerifier",
    "MockStructuredChatModel",
    "SlowAnalyzer",
    "StaticAnalyzer",
    "StaticDocumentAnalyzer",
    "StaticEvidenceAnalyzer",
    "StaticSupportResponder",
    "StaticTranslator",
    "StaticVerifier",
    "static_analyzers",
]
