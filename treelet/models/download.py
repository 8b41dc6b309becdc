"""
Download domain models for Treelet.

This module contains data classes and enums representing filtering
criteria, persisted run state and the results of a mirror run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DownloadStatus(Enum):
    """Outcome of a mirror run."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FilterCriteria:
    """
    Include-list of folder name fragments.

    An empty list means every folder is included.
    """

    include_only: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "include_only", tuple(self.include_only))

    @classmethod
    def from_string(cls, value: Optional[str]) -> "FilterCriteria":
        """Parse a comma-separated include list, dropping blank terms."""

        if not value:
            return cls()
        terms = [term.strip() for term in value.split(",")]
        return cls(include_only=tuple(term for term in terms if term))

    @property
    def is_empty(self) -> bool:
        return not self.include_only

    def matches_path(self, path: str) -> bool:
        """Check whether any include term occurs anywhere in ``path``."""

        if self.is_empty:
            return True
        return any(term in path for term in self.include_only)

    def canonical(self) -> List[str]:
        """Order-independent form, used when fingerprinting."""
        return sorted(set(self.include_only))

    def __str__(self) -> str:
        return ", ".join(self.include_only)


@dataclass(frozen=True)
class RunState:
    """State persisted after the last completed mirror run of a target."""

    last_revision_id: str
    config_fingerprint: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "lastRevisionId": self.last_revision_id,
            "configFingerprint": self.config_fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunState":
        """
        Rebuild state from its JSON form.

        Raises:
            ValueError: If either field is missing or not a string
        """

        revision = data.get("lastRevisionId") if isinstance(data, dict) else None
        fingerprint = data.get("configFingerprint") if isinstance(data, dict) else None
        if not isinstance(revision, str) or not isinstance(fingerprint, str):
            raise ValueError("Run state must hold string lastRevisionId and configFingerprint")
        return cls(last_revision_id=revision, config_fingerprint=fingerprint)


@dataclass
class DownloadResult:
    """Result of a mirror run, including per-path failures."""

    status: DownloadStatus = DownloadStatus.PENDING
    revision_id: Optional[str] = None
    fingerprint: Optional[str] = None

    downloaded_files: List[str] = field(default_factory=list)
    failed_files: Dict[str, str] = field(default_factory=dict)
    failed_folders: Dict[str, str] = field(default_factory=dict)
    ignored_folders: List[str] = field(default_factory=list)
    # Populated instead of downloaded_files on dry runs
    matched_files: List[str] = field(default_factory=list)

    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    bytes_written: int = 0
    api_calls: int = 0

    @property
    def is_successful(self) -> bool:
        return (
            self.status in (DownloadStatus.COMPLETED, DownloadStatus.SKIPPED)
            and not self.failed_files
            and not self.failed_folders
        )

    @property
    def duration_seconds(self) -> float:
        if not self.completed_at:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def mark(self, status: DownloadStatus, error_message: Optional[str] = None) -> None:
        self.status = status
        self.error_message = error_message
        self.completed_at = datetime.now()


__all__ = [
    "DownloadStatus",
    "FilterCriteria",
    "RunState",
    "DownloadResult",
]
