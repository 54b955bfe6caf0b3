"""Domain exceptions for the impact screening engine.

All engine exceptions inherit from ``ImpactScreeningError`` so callers can
catch the full family with a single ``except`` clause when needed.  The
``*Unavailable`` errors are the opaque "service unavailable" conditions
surfaced to the API layer; the rest are raised by adapters and cache
backends and are usually handled inside the engine.
"""

from __future__ import annotations

from typing import Any


class ImpactScreeningError(Exception):
    """Base exception for all impact screening errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


# ---------------------------------------------------------------------------
# Adapter-level failures
# ---------------------------------------------------------------------------


class AdapterUnavailableError(ImpactScreeningError):
    """Raised when a single adapter call fails.

    Covers network errors, timeouts, non-2xx responses and response bodies
    that do not match the expected schema.
    """

    def __init__(
        self,
        message: str = "Adapter unavailable",
        adapter: str = "",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.adapter = adapter
        self.status_code = status_code


class EvidenceAnalysisFailed(AdapterUnavailableError):
    """Raised when one evidence item cannot be analysed.

    The milestone orchestrator records the item's analysis as ``None`` and
    continues with the rest of the batch.
    """

    def __init__(
        self,
        message: str = "Evidence analysis failed",
        evidence_url: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, adapter="evidence", details=details)
        self.evidence_url = evidence_url


class SupportBotGenerationFailed(AdapterUnavailableError):
    """Raised by support responders; always resolved to a fallback answer."""

    def __init__(
        self,
        message: str = "Support bot generation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, adapter="support", details=details)


class CacheUnavailable(ImpactScreeningError):
    """Raised by cache backends when the store cannot be reached."""

    def __init__(
        self,
        message: str = "Cache unavailable",
        operation: str = "",
        key: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.key = key


# ---------------------------------------------------------------------------
# Caller-facing service failures
# ---------------------------------------------------------------------------


class ServiceUnavailableError(ImpactScreeningError):
    """Opaque failure surfaced to the external caller."""

    default_message = "Service unavailable"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or self.default_message, details)


class ScreeningServiceUnavailable(ServiceUnavailableError):
    """A project or NGO screening could not be completed."""

    default_message = "AI screening service unavailable"


class MilestoneVerificationServiceUnavailable(ServiceUnavailableError):
    """The milestone verification call failed."""

    default_message = "Milestone verification service unavailable"


class TranslationServiceUnavailable(ServiceUnavailableError):
    """The translation backend failed."""

    default_message = "Translation service unavailable"


class DocumentAnalysisServiceUnavailable(ServiceUnavailableError):
    """The document analysis backend failed."""

    default_message = "Document analysis service unavailable"
