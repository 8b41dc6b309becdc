"""
Orchestrator for the mirror run: revision check, filtered tree
traversal and concurrent file downloads.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from ..infrastructure.error_handler import DownloadError
from ..infrastructure.logger import logger
from ..models import (
    DownloadResult, DownloadStatus, DownloadTarget, MirrorConfig, TreeEntry
)
from ..services import DownloadService, GitLabAPIService
from .cache import RunStateCache, compute_fingerprint
from .filter import FilterEngine


####
##      DOWNLOAD ORCHESTRATOR
#####
class DownloadOrchestrator:
    """
    Walks the configured root folders and mirrors their files locally.

    Siblings inside a folder (file downloads and sub-folder walks) run
    concurrently. Every remote call and local write takes a slot from a
    semaphore sized by ``max_concurrent_downloads``; the slot is never
    held while waiting on children.
    """

    def __init__(
        self,
        config: MirrorConfig,
        gitlab_service: GitLabAPIService,
        download_service: DownloadService,
        cache: Optional[RunStateCache] = None
    ):
        self.config = config
        self.gitlab_service = gitlab_service
        self.download_service = download_service
        self.cache = cache or RunStateCache.from_config(config)
        self.filter_engine = FilterEngine(config.include_only)
        self.max_concurrent_downloads = config.max_concurrent_downloads
        self._semaphore = asyncio.Semaphore(config.max_concurrent_downloads)

    def local_path(self, path: str) -> Path:
        return self.config.destination / path

    async def execute_download(self, force: bool = False) -> DownloadResult:
        """
        Run the mirror end to end.

        Args:
            force: Ignore stored run state and always walk the tree

        Returns:
            DownloadResult; per-path failures are listed in it

        Raises:
            RevisionLookupError: If the latest revision cannot be resolved
        """

        result = DownloadResult(status=DownloadStatus.IN_PROGRESS)
        calls_before = self.gitlab_service.api_calls

        revision_id = await self.gitlab_service.get_latest_revision(self.config.ref)
        fingerprint = compute_fingerprint(self.config)
        result.revision_id = revision_id
        result.fingerprint = fingerprint

        if not force and not self.config.dry_run:
            prior = self.cache.load(fingerprint)
            if self.cache.should_skip(revision_id, fingerprint, prior):
                logger.info(
                    f"Already up to date at revision {revision_id}, "
                    "nothing to download"
                )
                result.api_calls = self.gitlab_service.api_calls - calls_before
                result.mark(DownloadStatus.SKIPPED)
                return result

        logger.debug(f"Mirroring {self.config.project_id}@{revision_id}")
        logger.info(self.filter_engine.describe())

        for folder in self.config.root_folders:
            await self.download_folder(folder, result)

        result.api_calls = self.gitlab_service.api_calls - calls_before

        if self.config.dry_run:
            logger.info(f"Dry-run: {len(result.matched_files)} files matched")
            result.mark(DownloadStatus.COMPLETED)
            return result

        try:
            self.cache.save(revision_id, fingerprint)
        except OSError as e:
            logger.warning(f"Failed to save run state: {e}")

        result.mark(DownloadStatus.COMPLETED)
        logger.debug(
            f"Download finished: {len(result.downloaded_files)} downloaded, "
            f"{len(result.failed_files)} failed, {result.bytes_written} bytes"
        )
        logger.info("Download complete.")
        return result

    async def download_folder(self, folder_path: str, result: DownloadResult) -> None:
        """
        Mirror one folder, recursing into sub-folders that pass the filter.
        """

        entries = await self._list_children(folder_path, result)

        tasks = []
        for entry in entries:
            target = DownloadTarget.from_entry(folder_path, entry)

            if not self.filter_engine.should_include(target):
                logger.info(f"Ignoring folder: {target.path} (not in includeOnly list)")
                result.ignored_folders.append(target.path)
                continue

            if target.is_directory:
                tasks.append(self.download_folder(target.path, result))
            else:
                tasks.append(self._download_file(target.path, result))

        if tasks:
            await asyncio.gather(*tasks)

    async def _list_children(
        self,
        folder_path: str,
        result: DownloadResult
    ) -> List[TreeEntry]:
        async with self._semaphore:
            try:
                return await self.gitlab_service.list_children(
                    folder_path, self.config.ref
                )
            except DownloadError as e:
                logger.warning(f"Failed to fetch tree for {folder_path}: {e}")
                result.failed_folders[folder_path] = str(e)
                return []

    async def _download_file(self, path: str, result: DownloadResult) -> None:
        target_path = self.local_path(path)

        if self.config.dry_run:
            logger.info(f"Would download: {target_path}")
            result.matched_files.append(path)
            return

        async with self._semaphore:
            try:
                content = await self.gitlab_service.fetch_file_bytes(
                    path, self.config.ref
                )
                bytes_written = await self.download_service.save_content(
                    content, target_path
                )
            except DownloadError as e:
                logger.warning(f"Failed to download {path}: {e}")
                result.failed_files[path] = str(e)
                return

        result.downloaded_files.append(path)
        result.bytes_written += bytes_written
        logger.info(f"Downloaded: {target_path}")


__all__ = ["DownloadOrchestrator"]
