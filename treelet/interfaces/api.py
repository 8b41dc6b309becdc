"""
High-level Python API for mirroring a filtered GitLab tree.

Example:
    config = MirrorConfig(
        host_url="https://gitlab.example.com",
        project_id="1234",
        token="glpat-...",
        include_only=FilterCriteria.from_string("docs,api"),
    )
    async with GitLabMirror(config) as mirror:
        result = await mirror.mirror()
"""

import logging
from types import TracebackType
from typing import Optional, Type

from ..core import DownloadOrchestrator, RunStateCache, compute_fingerprint
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryManager
from ..models import DownloadResult, MirrorConfig
from ..services import DownloadService, GitLabAPIService


class GitLabMirror:
    """
    Wires the GitLab service, local writer, run-skip cache and
    orchestrator together for one configuration.
    """

    def __init__(self, config: MirrorConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

        self.rate_limiter = RateLimiter()
        self.retry_manager = RetryManager(max_retries=config.max_retries)
        self.gitlab_service = GitLabAPIService(
            config, self.rate_limiter, self.retry_manager
        )
        self.download_service = DownloadService()
        self.cache = RunStateCache.from_config(config)
        self.orchestrator = DownloadOrchestrator(
            config=config,
            gitlab_service=self.gitlab_service,
            download_service=self.download_service,
            cache=self.cache,
        )

        if verbose:
            logger.debug(
                f"Initialized GitLabMirror for project {config.project_id} "
                f"on {config.host_url}"
            )

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    async def get_latest_revision(self) -> str:
        return await self.gitlab_service.get_latest_revision(self.config.ref)

    async def mirror(self, force: bool = False) -> DownloadResult:
        """
        Mirror the configured root folders, skipping the work entirely
        when nothing changed since the last completed run.

        Raises:
            RevisionLookupError: If the ref cannot be resolved
        """

        logger.info(
            f"Starting download from project ID: {self.config.project_id} "
            f"on branch: {self.config.ref}"
        )
        return await self.orchestrator.execute_download(force=force)

    def reset_cache(self) -> bool:
        """Drop the stored run state for this configuration."""
        return self.cache.clear(compute_fingerprint(self.config))

    async def close(self) -> None:
        await self.gitlab_service.close()

    async def __aenter__(self) -> "GitLabMirror":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()


__all__ = ["GitLabMirror"]
