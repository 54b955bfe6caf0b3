"""Similarity index for prior support questions.

The support bot reuses an earlier answer when a new question is close
enough to one it has already answered.  :class:`SimilarityIndex` is the
async contract; :class:`InMemorySimilarityIndex` embeds text as hashed
bag-of-words vectors (numpy) and ranks by cosine similarity, which is
reported as the match confidence.
"""

from __future__ import annotations

import hashlib
import re
import threading
from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from impact_screening.domain.values import QAPair, SimilarQuestion

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class SimilarityIndex(ABC):
    """Async store of Q&A pairs searchable by question similarity."""

    @abstractmethod
    async def search(
        self, question: str, language: str, limit: int = 4
    ) -> list[SimilarQuestion]:
        """Return up to *limit* matches, most similar first."""

    @abstractmethod
    async def add(self, pair: QAPair) -> None:
        """Store *pair* for future lookups."""


def embed(text: str, dimensions: int = 512) -> NDArray[np.float64]:
    """Embed *text* as an L2-normalised hashed bag-of-words vector.

    Tokens are lower-cased words; each is hashed with md5 so the embedding
    is stable across processes.  Empty text yields the zero vector.
    """
    vec = np.zeros(dimensions, dtype=np.float64)
    for token in _TOKEN_RE.findall(text.lower()):
        digest = hashlib.md5(token.encode("utf-8")).digest()
        vec[int.from_bytes(digest[:4], "little") % dimensions] += 1.0
    norm = np.linalg.norm(vec)
    if norm > 0:
        vec /= norm
    return vec


class InMemorySimilarityIndex(SimilarityIndex):
    """Thread-safe in-process index, partitioned by language.

    Adding a question that normalises to an already-stored question
    replaces the earlier answer.

    Parameters
    ----------
    dimensions:
        Width of the hashed embedding.
    min_similarity:
        Matches at or below this cosine similarity are not returned.
    """

    def __init__(self, dimensions: int = 512, min_similarity: float = 0.0) -> None:
        if dimensions < 1:
            raise ValueError(f"dimensions must be >= 1, got {dimensions}")
        self._dimensions = dimensions
        self._min_similarity = min_similarity
        self._pairs: dict[str, dict[str, tuple[QAPair, NDArray[np.float64]]]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalise(question: str) -> str:
        return " ".join(_TOKEN_RE.findall(question.lower()))

    async def search(
        self, question: str, language: str, limit: int = 4
    ) -> list[SimilarQuestion]:
        query = embed(question, self._dimensions)
        with self._lock:
            candidates = list(self._pairs.get(language, {}).values())
        if not candidates or limit <= 0:
            return []

        matrix = np.vstack([vec for _, vec in candidates])
        scores = matrix @ query
        order = np.argsort(-scores, kind="stable")

        matches: list[SimilarQuestion] = []
        for idx in order[:limit]:
            score = float(scores[idx])
            if score <= self._min_similarity:
                break
            pair = candidates[idx][0]
            matches.append(
                SimilarQuestion(
                    question=pair.question,
                    answer=pair.answer,
                    confidence=min(1.0, score),
                )
            )
        return matches

    async def add(self, pair: QAPair) -> None:
        vec = embed(pair.question, self._dimensions)
        with self._lock:
            bucket = self._pairs.setdefault(pair.language, {})
            bucket[self._normalise(pair.question)] = (pair, vec)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._pairs.values())
