"""
Local file writing for mirrored content.
"""

from pathlib import Path

import aiofiles
import aiofiles.os

from ..infrastructure.error_handler import DownloadError
from ..infrastructure.logger import logger


class DownloadService:
    """Writes downloaded bytes under the destination tree."""

    async def ensure_directory(self, path: Path) -> None:
        """Create ``path`` and any missing parents."""

        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Cannot create directory {path}", e) from e

    async def save_content(self, content: bytes, target_path: Path) -> int:
        """
        Write ``content`` to ``target_path``, replacing any existing file.

        Args:
            content: Raw file bytes
            target_path: Local file path; parent folders are created

        Returns:
            Number of bytes written

        Raises:
            DownloadError: If the file cannot be written
        """

        await self.ensure_directory(target_path.parent)
        try:
            async with aiofiles.open(target_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise DownloadError(f"Cannot write {target_path}", e) from e

        logger.debug(f"Wrote {len(content)} bytes to {target_path}")
        return len(content)


__all__ = ["DownloadService"]
