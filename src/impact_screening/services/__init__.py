"""Service layer for the impact screening engine.

Re-exports public service types for convenient top-level access::

    from impact_screening.services import (
        BaseAnalyzer, RemoteAnalyzer, LLMAnalyzer,
        ScoringAggregator, FanOut,
        ScreeningOrchestrator, MilestoneVerificationOrchestrator,
        SupportBot, TranslationService, DocumentAnalysisService,
        ScreeningEngine, build_engine,
    )
"""

from impact_screening.services.aggregation import (
    NGOWeights,
    ProjectWeights,
    ScoringAggregator,
    mean_confidence,
    merge_limited,
    round_half_up,
)
from impact_screening.services.analyzers import BaseAnalyzer, RemoteAnalyzer
from impact_screening.services.documents import (
    BaseDocumentAnalyzer,
    DocumentAnalysisService,
    RemoteDocumentAnalyzer,
)
from impact_screening.services.engine import ScreeningEngine
from impact_screening.services.evidence import (
    BaseEvidenceAnalyzer,
    BaseMilestoneVerifier,
    RemoteEvidenceAnalyzer,
    RemoteMilestoneVerifier,
)
from impact_screening.services.factory import build_cache, build_engine
from impact_screening.services.fanout import FanOut, Settled
from impact_screening.services.llm_analysis import AnalysisOutput, LLMAnalyzer
from impact_screening.services.milestones import MilestoneVerificationOrchestrator
from impact_screening.services.screening import ScreeningOrchestrator
from impact_screening.services.support import (
    BaseSupportResponder,
    RemoteSupportResponder,
    SupportBot,
)
from impact_screening.services.translation import (
    BaseTranslator,
    RemoteTranslator,
    TranslationService,
)

__all__ = [
    # Analyzers
    "BaseAnalyzer",
    "RemoteAnalyzer",
    "LLMAnalyzer",
    "AnalysisOutput",
    # Aggregation
    "ScoringAggregator",
    "ProjectWeights",
    "NGOWeights",
    "mean_confidence",
    "merge_limited",
    "round_half_up",
    # Fan-out
    "FanOut",
    "Settled",
    # Orchestrators
    "ScreeningOrchestrator",
    "MilestoneVerificationOrchestrator",
    # Evidence
    "BaseEvidenceAnalyzer",
    "BaseMilestoneVerifier",
    "RemoteEvidenceAnalyzer",
    "RemoteMilestoneVerifier",
    # Support
    "BaseSupportResponder",
    "RemoteSupportResponder",
    "SupportBot",
    # Translation and documents
    "BaseTranslator",
    "RemoteTranslator",
    "TranslationService",
    "BaseDocumentAnalyzer",
    "RemoteDocumentAnalyzer",
    "DocumentAnalysisService",
    # Engine
    "ScreeningEngine",
    "build_cache",
    "build_engine",
]
