from collections import defaultdict
from typing import Dict, Iterable, List

import pytest

from treelet.infrastructure.error_handler import (
    DownloadError,
    RepositoryNotFoundError,
    RevisionLookupError,
)
from treelet.models import EntryType, FilterCriteria, MirrorConfig, TreeEntry


class FakeGitLabService:
    """In-memory stand-in for GitLabAPIService built from a {path: bytes} map."""

    def __init__(
        self,
        files: Dict[str, bytes],
        revision: str = "abc",
        fail_files: Iterable[str] = (),
        fail_folders: Iterable[str] = (),
    ):
        self.files = dict(files)
        self.revision = revision
        self.fail_files = set(fail_files)
        self.fail_folders = set(fail_folders)
        self.api_calls = 0
        self.listed: List[str] = []
        self.fetched: List[str] = []

        self._children: Dict[str, Dict[str, EntryType]] = defaultdict(dict)
        for path in self.files:
            parts = path.split("/")
            for i, name in enumerate(parts):
                parent = "/".join(parts[:i])
                kind = EntryType.FILE if i == len(parts) - 1 else EntryType.DIRECTORY
                self._children[parent][name] = kind

    async def get_latest_revision(self, ref: str) -> str:
        self.api_calls += 1
        if self.revision is None:
            raise RevisionLookupError(f"Could not resolve latest revision of '{ref}'")
        return self.revision

    async def list_children(self, path: str, ref: str) -> List[TreeEntry]:
        self.api_calls += 1
        self.listed.append(path)
        if path in self.fail_folders:
            raise DownloadError(f"GitLab API error 500 for {path}")
        if path not in self._children:
            raise RepositoryNotFoundError(f"Not found: {path}")
        return [
            TreeEntry(name=name, type=kind)
            for name, kind in sorted(self._children[path].items())
        ]

    async def fetch_file_bytes(self, path: str, ref: str) -> bytes:
        self.api_calls += 1
        self.fetched.append(path)
        if path in self.fail_files:
            raise DownloadError(f"Network error: connection reset ({path})")
        return self.files[path]

    async def close(self) -> None:
        pass


@pytest.fixture
def make_config(tmp_path):
    """Factory for MirrorConfig pointing at temporary destination/state dirs."""

    def _make(**overrides) -> MirrorConfig:
        include = overrides.pop("include_only", ())
        values = dict(
            host_url="https://gitlab.example.com",
            project_id="42",
            token="secret",
            destination=tmp_path / "out",
            state_dir=tmp_path / "state",
            include_only=FilterCriteria(include_only=tuple(include)),
        )
        values.update(overrides)
        return MirrorConfig(**values)

    return _make


@pytest.fixture
def fake_gitlab():
    return FakeGitLabService
