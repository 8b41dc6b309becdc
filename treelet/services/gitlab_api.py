"""
GitLab REST API service: revision lookup, tree listing and raw file
retrieval for a single project.
"""

from types import TracebackType
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import httpx

from ..infrastructure.error_handler import (
    DownloadError,
    RevisionLookupError,
    handle_api_error,
    translate_error,
)
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryManager
from ..models import MirrorConfig, TreeEntry


TREE_PAGE_SIZE = 100


def _encode(value: str) -> str:
    """Percent-encode a project id, ref or file path as one URL segment."""
    return quote(str(value), safe="")


class GitLabAPIService:
    """
    Thin async client over the GitLab v4 repository API.

    Every request goes through the rate limiter and, when the config
    allows it, the retry manager. Failures are raised as DownloadError
    subclasses; callers decide whether they are fatal.
    """

    def __init__(
        self,
        config: MirrorConfig,
        rate_limiter: Optional[RateLimiter] = None,
        retry_manager: Optional[RetryManager] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or RateLimiter()
        self.retry_manager = retry_manager or RetryManager(
            max_retries=config.max_retries
        )
        self._client = client
        self.api_calls = 0

    @property
    def project_path(self) -> str:
        return f"/projects/{_encode(self.config.project_id)}/repository"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                headers={"PRIVATE-TOKEN": self.config.token},
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "GitLabAPIService":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def _send(self, url: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        await self.rate_limiter.acquire()
        response = await self._get_client().get(url, params=params)
        self.api_calls += 1
        await self.rate_limiter.update_rate_limit_info(response.headers)
        response.raise_for_status()
        return response

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        return await self.retry_manager.execute(self._send, url, params)

    async def get_latest_revision(self, ref: str) -> str:
        """
        Resolve the commit id ``ref`` currently points at.

        Raises:
            RevisionLookupError: On any failure; the run cannot go on
                without a revision id
        """

        url = f"{self.project_path}/commits/{_encode(ref)}"
        try:
            response = await self._get(url)
            revision = response.json().get("id")
        except Exception as e:
            raise RevisionLookupError(
                f"Could not resolve latest revision of '{ref}'", translate_error(e)
            ) from e

        if not revision:
            raise RevisionLookupError(f"No commit id returned for '{ref}'")

        logger.debug(f"Latest revision of {ref}: {revision}")
        return revision

    @handle_api_error
    async def list_children(self, path: str, ref: str) -> List[TreeEntry]:
        """
        List the direct children of ``path`` at ``ref``.

        Follows GitLab pagination so large folders come back complete.
        An empty list means the folder really is empty.
        """

        url = f"{self.project_path}/tree"
        entries: List[TreeEntry] = []
        page: Optional[str] = "1"

        while page:
            params = {
                "ref": ref,
                "path": path,
                "recursive": "false",
                "per_page": TREE_PAGE_SIZE,
                "page": page,
            }
            response = await self._get(url, params)
            payload = response.json()
            if not isinstance(payload, list):
                raise DownloadError(f"Unexpected tree response for {path}: {payload!r}")

            for item in payload:
                entry = TreeEntry.from_api(item)
                if entry is None:
                    logger.debug(
                        f"Skipping unsupported entry {item.get('name')} "
                        f"({item.get('type')}) in {path}"
                    )
                    continue
                entries.append(entry)

            page = response.headers.get("x-next-page", "").strip()

        return entries

    @handle_api_error
    async def fetch_file_bytes(self, path: str, ref: str) -> bytes:
        """Download the raw content of one file at ``ref``."""

        url = f"{self.project_path}/files/{_encode(path)}/raw"
        response = await self._get(url, {"ref": ref})
        return response.content


__all__ = ["GitLabAPIService", "TREE_PAGE_SIZE"]
