"""Impact screening engine.

Scores charitable projects and NGOs across weighted dimensions, verifies
funding milestones from evidence, and answers support questions, with
every result cached by content fingerprint.
"""

__version__ = "0.1.0"

from impact_screening.domain import (
    EvidenceItem,
    NGOSubmission,
    ProjectSubmission,
    ScreeningResult,
)
from impact_screening.infrastructure.config import EngineConfig
from impact_screening.services import ScreeningEngine, build_engine

__all__ = [
    "EngineConfig",
    "EvidenceItem",
    "NGOSubmission",
    "ProjectSubmission",
    "ScreeningEngine",
    "ScreeningResult",
    "build_engine",
]
