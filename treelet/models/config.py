"""
Configuration model for Treelet mirror runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .download import FilterCriteria


DEFAULT_REF = "master"
DEFAULT_ROOT_FOLDERS: Tuple[str, ...] = ("proto", "build")
DEFAULT_STATE_DIR = Path.home() / ".cache" / "treelet" / "state"


@dataclass(frozen=True)
class MirrorConfig:
    """
    Immutable configuration for a single mirror run.

    One instance is built up front and handed to every service, the
    cache and the orchestrator; nothing reads configuration from
    module-level state.
    """

    # Remote target
    host_url: str
    project_id: str
    token: str
    ref: str = DEFAULT_REF

    # What to mirror and where
    include_only: FilterCriteria = field(default_factory=FilterCriteria)
    destination: Path = field(default_factory=Path.cwd)
    root_folders: Tuple[str, ...] = DEFAULT_ROOT_FOLDERS

    # Concurrency and transport settings
    max_concurrent_downloads: int = 10
    timeout: float = 30.0
    max_retries: int = 0

    # Run-skip cache location
    state_dir: Path = DEFAULT_STATE_DIR

    # Walk and filter without writing files or state
    dry_run: bool = False

    def __post_init__(self) -> None:
        if not self.host_url:
            raise ValueError("host_url is required")
        if not self.project_id:
            raise ValueError("project_id is required")
        if not self.token:
            raise ValueError("token is required")
        if not self.ref:
            raise ValueError("ref cannot be empty")
        if not self.root_folders:
            raise ValueError("At least one root folder is required")
        if self.max_concurrent_downloads <= 0:
            raise ValueError("max_concurrent_downloads must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        # Normalize loosely typed inputs; frozen, so go through object.__setattr__
        object.__setattr__(self, "host_url", self.host_url.rstrip("/"))
        object.__setattr__(self, "project_id", str(self.project_id))
        object.__setattr__(self, "destination", Path(self.destination))
        object.__setattr__(self, "state_dir", Path(self.state_dir))
        object.__setattr__(self, "root_folders", tuple(self.root_folders))

    @property
    def api_url(self) -> str:
        return f"{self.host_url}/api/v4"


__all__ = [
    "DEFAULT_REF",
    "DEFAULT_ROOT_FOLDERS",
    "DEFAULT_STATE_DIR",
    "MirrorConfig",
]
