"""
Core traversal, filtering and caching logic for Treelet.
"""

from .filter import FilterEngine
from .cache import RunStateCache, compute_fingerprint
from .orchestrator import DownloadOrchestrator

__all__ = [
    "FilterEngine",
    "RunStateCache",
    "compute_fingerprint",
    "DownloadOrchestrator",
]
