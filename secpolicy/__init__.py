"""Security policy discovery and content analysis for repository audits."""

from .models import (
    DEFAULT_OFFSET,
    AnalysisResult,
    HitCategory,
    PolicyFile,
    PolicyHit,
    SourceKind,
)
from .orchestrator import Orchestrator

__all__ = [
    "DEFAULT_OFFSET",
    "AnalysisResult",
    "HitCategory",
    "Orchestrator",
    "PolicyFile",
    "PolicyHit",
    "SourceKind",
]
