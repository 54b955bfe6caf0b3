"""Content fingerprints and cache keys.

A fingerprint is the md5 hex digest of an entity's canonical field subset.
Identical logical input always yields the same fingerprint, and a collision
is treated as "same submission".
"""

from __future__ import annotations

import hashlib

from impact_screening.domain.entities import NGOSubmission, ProjectSubmission


def hash_string(value: str) -> str:
    """Return the md5 hex digest of *value* (UTF-8)."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def fingerprint(entity: ProjectSubmission | NGOSubmission) -> str:
    """Fingerprint a project (title, description, amount, type) or an NGO
    (name, registration number, mission)."""
    return hash_string(entity.fingerprint_source())


class CacheTTL:
    """TTL presets in seconds."""

    SHORT = 300
    MEDIUM = 1800
    LONG = 3600
    VERY_LONG = 86400


class CacheKeys:
    """Builders for every cache key the engine reads or writes."""

    @staticmethod
    def ai_screening(content_hash: str) -> str:
        return f"ai:screening:{content_hash}"

    @staticmethod
    def document_analysis(document_type: str, document_url: str) -> str:
        return f"doc_analysis:{document_type}:{hash_string(document_url)}"

    @staticmethod
    def translation(source_language: str | None, target_language: str, text: str) -> str:
        return f"translation:{source_language or 'auto'}:{target_language}:{hash_string(text)}"

    @staticmethod
    def qa_pair(content_hash: str) -> str:
        return f"qa:{content_hash}"

    @staticmethod
    def rate_limit(identifier: str) -> str:
        return f"rate_limit:{identifier}"
