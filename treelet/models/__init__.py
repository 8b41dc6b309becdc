"""
Core data models API surface for Treelet.

This file re-exports model classes from domain-specific modules so that
``from treelet.models import X`` works for all of them.
"""

from .gitlab import (
    EntryType,
    TreeEntry,
    DownloadTarget,
)
from .download import (
    DownloadStatus,
    FilterCriteria,
    RunState,
    DownloadResult,
)
from .config import MirrorConfig

__all__ = [
    # GitLab models
    "EntryType",
    "TreeEntry",
    "DownloadTarget",
    # Download models
    "DownloadStatus",
    "FilterCriteria",
    "RunState",
    "DownloadResult",
    # Config models
    "MirrorConfig",
]
