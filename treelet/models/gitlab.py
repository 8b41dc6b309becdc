"""
GitLab domain models for Treelet.

This module contains the typed entities returned by the GitLab
repository tree API and the download targets derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class EntryType(Enum):
    """Kinds of tree entries Treelet knows how to mirror."""

    FILE = "blob"
    DIRECTORY = "tree"


@dataclass(frozen=True)
class TreeEntry:
    """A direct child of a queried repository path."""

    name: str
    type: EntryType

    @property
    def is_directory(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["TreeEntry"]:
        """
        Build an entry from one item of the tree API response.

        Returns None for entry types that are not mirrored (submodules
        are reported as ``commit``).
        """

        try:
            entry_type = EntryType(data.get("type"))
        except ValueError:
            return None
        return cls(name=data["name"], type=entry_type)


@dataclass(frozen=True)
class DownloadTarget:
    """A repository-relative path resolved against its parent folder."""

    path: str
    type: EntryType

    @property
    def is_directory(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @classmethod
    def from_entry(cls, parent: str, entry: TreeEntry) -> "DownloadTarget":
        path = f"{parent}/{entry.name}" if parent else entry.name
        return cls(path=path, type=entry.type)


__all__ = [
    "EntryType",
    "TreeEntry",
    "DownloadTarget",
]
