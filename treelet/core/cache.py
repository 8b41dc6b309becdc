"""
Run-skip cache.

After a completed mirror run the latest revision id is stored together
with a fingerprint of the effective configuration. A later run with the
same revision and fingerprint has nothing to do and can exit early.

State is kept per target: each fingerprint gets its own small JSON file
under the state directory, so mirroring several projects, refs or
destinations from one machine does not make them invalidate each other.
"""

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..infrastructure.logger import logger
from ..models import MirrorConfig, RunState


FINGERPRINT_KEY_LENGTH = 16


def compute_fingerprint(config: MirrorConfig) -> str:
    """
    Deterministic digest of everything that shapes the mirrored output.

    The include list is sorted and de-duplicated first: its order never
    changes which folders match.
    """

    document = {
        "host_url": config.host_url,
        "project_id": config.project_id,
        "ref": config.ref,
        "include_only": config.include_only.canonical(),
        "destination": str(config.destination.resolve()),
        "root_folders": list(config.root_folders),
    }
    encoded = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class RunStateCache:
    """Loads, compares and persists RunState records."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)

    @classmethod
    def from_config(cls, config: MirrorConfig) -> "RunStateCache":
        return cls(config.state_dir)

    def state_file(self, fingerprint: str) -> Path:
        return self.state_dir / f"{fingerprint[:FINGERPRINT_KEY_LENGTH]}.json"

    def load(self, fingerprint: str) -> Optional[RunState]:
        """
        Read the stored state for a target.

        Missing, unreadable or malformed state is reported as None; it
        only means the next run does the full download.
        """

        state_file = self.state_file(fingerprint)
        if not state_file.exists():
            logger.debug(f"No run state found at {state_file}")
            return None

        try:
            with open(state_file, encoding="utf-8") as f:
                state = RunState.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable run state {state_file}: {e}")
            return None

        logger.debug(f"Loaded run state for revision {state.last_revision_id}")
        return state

    @staticmethod
    def should_skip(
        current_revision_id: str,
        current_fingerprint: str,
        prior: Optional[RunState]
    ) -> bool:
        if prior is None:
            return False
        return (
            prior.last_revision_id == current_revision_id
            and prior.config_fingerprint == current_fingerprint
        )

    def save(self, revision_id: str, fingerprint: str) -> None:
        """Atomically replace the stored state for a target."""

        state = RunState(last_revision_id=revision_id, config_fingerprint=fingerprint)
        state_file = self.state_file(fingerprint)
        self.state_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.state_dir, prefix=f".{state_file.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp_name, state_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved run state for revision {revision_id} to {state_file}")

    def clear(self, fingerprint: str) -> bool:
        """Forget the stored state for a target. Returns whether any existed."""

        state_file = self.state_file(fingerprint)
        if state_file.exists():
            state_file.unlink()
            logger.debug(f"Cleared run state at {state_file}")
            return True
        return False


__all__ = [
    "FINGERPRINT_KEY_LENGTH",
    "compute_fingerprint",
    "RunStateCache",
]
